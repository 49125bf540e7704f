"""
Row Transforms

Record-shaping steps applied to the row stream after table extraction.
Each transform is a callable taking an iterable of rows and yielding the
transformed rows, so they chain like generators:

    rows = RepeatCellTransform(column=0)(reader)
    rows = RepeatHeadingTransform(header="state:0")(rows)
    records = RowAsObjectTransform()(rows)

Input rows are never mutated; transforms yield new lists.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Iterator, List, Optional

from extractor.errors import ConfigurationError


Row = List[str]


class RowAsObjectTransform:
    """
    Convert rows to dicts keyed by column name.

    If headers are not given, the first row is taken as the header row.
    Cells beyond the known headers are keyed by their column index.

    Args:
        headers: Column names; overrides the header row when both exist
        has_header: Whether the stream starts with a header row (default:
                    True when no headers are given)
    """

    def __init__(self, headers: Optional[List[str]] = None, has_header: Optional[bool] = None):
        self.headers = list(headers) if headers else []
        self.has_header = has_header if has_header is not None else not self.headers

    def __call__(self, rows: Iterable[Row]) -> Iterator[Dict[str, Any]]:
        headers = list(self.headers)
        header_seen = False

        for row in rows:
            if self.has_header and not header_seen:
                header_seen = True
                if not headers:
                    headers = list(row)
                continue

            record = {}
            for i, value in enumerate(row):
                key = headers[i] if i < len(headers) and headers[i] else str(i)
                record[key] = value
            yield record


class RepeatCellTransform:
    """
    Carry a column's value forward into rows where it is blank or missing.

    Rows one cell shorter than the last full row get the remembered value
    inserted at the column; same-length rows with an empty value there get
    it filled in.
    """

    def __init__(self, column: int = 0):
        if column < 0:
            raise ConfigurationError(f"RepeatCell column must not be negative: {column}")
        self.column = column

    def __call__(self, rows: Iterable[Row]) -> Iterator[Row]:
        repeat_value = ''
        prev_len = 0

        for row in rows:
            row = list(row)
            if len(row) == prev_len - 1:
                row.insert(self.column, repeat_value)
            elif len(row) == prev_len and row[self.column] == '':
                row[self.column] = repeat_value
            elif len(row) > self.column and row[self.column] != '':
                prev_len = len(row)
                repeat_value = row[self.column]
            yield row


class RepeatHeadingTransform:
    """
    Lift single-cell subheading rows into a column of the data rows.

    The header format is "name[:header_index[:data_index]]". The name is
    inserted into the header row at header_index; the current subheading
    is inserted into each data row at data_index (defaults to
    header_index). Subheading rows themselves are dropped.
    """

    def __init__(self, header: str = 'subheading:0', has_header: bool = True):
        parts = header.split(':')
        try:
            self.header = parts[0]
            self.header_index = int(parts[1]) if len(parts) > 1 and parts[1] else 0
            self.data_index = int(parts[2]) if len(parts) > 2 and parts[2] else self.header_index
        except ValueError as e:
            raise ConfigurationError(f"Invalid RepeatHeading header: {header!r}") from e
        self.has_header = has_header

    def __call__(self, rows: Iterable[Row]) -> Iterator[Row]:
        subheading = ''
        header_done = not self.has_header

        for row in rows:
            if len(row) == 1:
                subheading = row[0]
                continue

            row = list(row)
            if not header_done:
                header_done = True
                row.insert(self.header_index, self.header)
            else:
                row.insert(self.data_index, subheading)
            yield row
