"""
CSV Writer

Writes the record stream as comma-separated text. Every value is quoted;
the header line holds the keys of the first record.

Records are written as they arrive, so a reader pipeline is never
materialized in memory.
"""

import csv
import io
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, TextIO, Union

from loguru import logger

from .base import OutputWriter


@dataclass
class CSVConfig:
    """Configuration for CSV output."""
    delimiter: str = ','
    quote_all: bool = True
    include_header: bool = True
    null_value: str = ''
    line_terminator: str = '\n'
    use_snake_case: bool = False    # convert header names
    encoding: str = 'utf-8'


class ColumnNamer:
    """Column name helpers."""

    @staticmethod
    def to_snake_case(name: str) -> str:
        """Convert "Invoice Number" or "grandTotal" to snake_case."""
        name = re.sub(r'([a-z0-9])([A-Z])', r'\1_\2', str(name))
        name = re.sub(r'[^0-9a-zA-Z]+', '_', name)
        return name.strip('_').lower()


class CSVWriter(OutputWriter):
    """
    Write records (dicts) or raw rows (lists) as CSV.

    Usage:
        writer = CSVWriter(output_path=Path("table.csv"))
        count = writer.write_records(RowAsObjectTransform()(reader))

        csv_text = CSVWriter().to_string(records)
    """

    def __init__(
        self,
        output_path: Optional[Union[str, Path]] = None,
        columns: Optional[List[str]] = None,
        config: Optional[CSVConfig] = None,
    ):
        self.config = config or CSVConfig()
        super().__init__(output_path, encoding=self.config.encoding)
        self.columns = columns

    def _csv_writer(self, stream: TextIO):
        return csv.writer(
            stream,
            delimiter=self.config.delimiter,
            quoting=csv.QUOTE_ALL if self.config.quote_all else csv.QUOTE_MINIMAL,
            lineterminator=self.config.line_terminator,
        )

    def _format(self, value: Any) -> str:
        if value is None:
            return self.config.null_value
        return str(value)

    def _header(self, names: Iterable[Any]) -> List[str]:
        names = [str(n) for n in names]
        if self.config.use_snake_case:
            names = [ColumnNamer.to_snake_case(n) for n in names]
        return names

    def write_records(self, records: Iterable[Dict[str, Any]], stream: Optional[TextIO] = None) -> int:
        """
        Write records, preceded by a header line.

        The header comes from `columns` if given, otherwise from the first
        record's keys. When `columns` is given values are written in column
        order; otherwise in each record's own key order.

        Returns:
            Number of records written
        """
        count = 0
        with self._open(stream) as out:
            writer = self._csv_writer(out)
            for record in records:
                if count == 0 and self.config.include_header:
                    writer.writerow(self._header(self.columns or record.keys()))
                if self.columns:
                    values = [record.get(c) for c in self.columns]
                else:
                    values = list(record.values())
                writer.writerow([self._format(v) for v in values])
                count += 1

        logger.debug(f"Wrote {count} CSV records")
        return count

    def write_rows(self, rows: Iterable[List[Any]], stream: Optional[TextIO] = None) -> int:
        """Write raw rows, without a header line."""
        count = 0
        with self._open(stream) as out:
            writer = self._csv_writer(out)
            for row in rows:
                writer.writerow([self._format(v) for v in row])
                count += 1
        return count

    def to_string(self, records: Iterable[Dict[str, Any]]) -> str:
        buffer = io.StringIO()
        self.write_records(records, stream=buffer)
        return buffer.getvalue()
