"""CSV file import and export."""

from .reader import CsvReadError, CsvTable, collect_columns, read_csv_file, write_csv_file

__all__ = [
    "CsvReadError",
    "CsvTable",
    "collect_columns",
    "read_csv_file",
    "write_csv_file",
]
