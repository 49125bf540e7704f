"""
Output Package

Serializers for the extracted row/record stream.

Usage:
    from output import CSVWriter, JSONWriter, rows_to_dataframe

    CSVWriter(output_path=Path("table.csv")).write_records(records)
    df = rows_to_dataframe(rows)
"""

from .base import OutputWriter
from .csv_writer import CSVWriter, CSVConfig, ColumnNamer
from .json_writer import JSONWriter, NDJSONWriter
from .dataframe import rows_to_dataframe

__all__ = [
    'OutputWriter',
    'CSVWriter',
    'CSVConfig',
    'ColumnNamer',
    'JSONWriter',
    'NDJSONWriter',
    'rows_to_dataframe',
]
