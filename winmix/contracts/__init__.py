from winmix.contracts.errors import (
    EmptyExportSet,
    InvalidFilterSpec,
    InvalidRequest,
    MalformedRow,
    WinMixError,
)
from winmix.contracts.filter_spec import DateRange, FilterSpec, TeamMatchMode
from winmix.contracts.match import Match, Outcome
from winmix.contracts.match_query import IngestReport, MatchPage, MatchQuery, PageRequest
from winmix.contracts.sort_config import SortConfig
from winmix.contracts.statistics import Statistics
