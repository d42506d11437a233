from winmix.sorting.collation import collation_key, locale_compare, primary_fold
from winmix.sorting.comparator import compare, sort_matches
