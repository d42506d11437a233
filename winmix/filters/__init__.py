from winmix.filters.filters import ALL_FILTERS, BaseFilter, filter_matches, matches
