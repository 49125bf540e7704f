"""
DataFrame conversion for extracted rows.
"""

from typing import Iterable, List, Optional

import pandas as pd

from tables.table_filter import Row


def rows_to_dataframe(
    rows: Iterable[Row],
    headers: Optional[List[str]] = None,
    has_header: Optional[bool] = None,
) -> pd.DataFrame:
    """
    Build a DataFrame from rows.

    Args:
        rows: Rows as produced by PdfDataParser
        headers: Column names; if omitted the first row is used
        has_header: Whether the first row is a header row (default: True
                    when no headers are given)

    Short rows are padded with None. Columns beyond the header names are
    named by their index.
    """
    rows = [list(r) for r in rows]
    if has_header is None:
        has_header = not headers

    columns = list(headers) if headers else []
    if has_header and rows:
        header_row = rows.pop(0)
        if not columns:
            columns = header_row

    width = max([len(r) for r in rows] + [len(columns)])
    names = [
        columns[i] if i < len(columns) and columns[i] else str(i)
        for i in range(width)
    ]

    padded = [r + [None] * (width - len(r)) for r in rows]
    return pd.DataFrame(padded, columns=names)
