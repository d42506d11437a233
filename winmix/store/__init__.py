from winmix.store.match_store import MatchStore, query, run_query
