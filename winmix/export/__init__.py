from winmix.export.csv_export import DEFAULT_MATCH_COLUMNS, CsvColumn, export_matches, to_csv
