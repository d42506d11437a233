from winmix.builders.score_derivation import derive_btts, derive_comeback, derive_outcome
from winmix.builders.match_builder import MatchBuilder, parse_utc_datetime
