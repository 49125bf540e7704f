"""
Row Assembler

Groups a page's ordered cells into rows and passes each row through the
table filter. A new row starts when the next cell is not on the same line
as the previous one, or when it starts to the left of it (wraparound).
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterable, List, Optional

from layout.box import Cell, LinePosition
from extractor.errors import ConfigurationError
from .table_filter import Row, TableFilter


class TrimMode(Enum):
    """Whitespace trimming applied to cell text when a row is emitted."""
    NONE = 0
    BOTH = 1
    LEADING = 2
    TRAILING = 3

    @classmethod
    def parse(cls, value: Any) -> 'TrimMode':
        """
        Parse a trim option.

        Accepts a TrimMode, a bool (True = both), an int 0-3 or a name
        ("none", "both", "leading", "trailing").
        """
        if value is None:
            return cls.BOTH
        if isinstance(value, TrimMode):
            return value
        if isinstance(value, bool):
            return cls.BOTH if value else cls.NONE
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError as e:
                raise ConfigurationError(f"Invalid trim mode: {value!r}") from e
        if isinstance(value, str):
            name = value.strip().upper()
            if name.isdigit():
                return cls.parse(int(name))
            if name in ('TRUE', 'YES'):
                return cls.BOTH
            if name in ('FALSE', 'NO'):
                return cls.NONE
            if name in cls.__members__:
                return cls[name]
        raise ConfigurationError(f"Invalid trim mode: {value!r}")

    def apply(self, text: str) -> str:
        if self is TrimMode.BOTH:
            return text.strip()
        if self is TrimMode.LEADING:
            return text.lstrip()
        if self is TrimMode.TRAILING:
            return text.rstrip()
        return text


class RowAssembler:
    """
    Turns one page's ordered cells into accepted rows.

    The assembler itself is stateless between pages; everything that
    carries over lives in the TableFilter.

    Usage:
        assembler = RowAssembler(trim=TrimMode.BOTH)
        rows = assembler.assemble(sequencer.cells, table_filter)
    """

    def __init__(self, trim: TrimMode = TrimMode.BOTH):
        self.trim = trim

    def assemble(self, cells: Iterable[Cell], table_filter: TableFilter) -> List[Row]:
        rows: List[Row] = []
        row: Row = []
        prev: Optional[Cell] = None

        for cell in cells:
            if table_filter.done:
                break
            if not cell.text:
                continue

            if prev is not None and (
                prev.is_same_line(cell) is not LinePosition.SAME_LINE
                or cell.x1 < prev.x1
            ):
                if table_filter.accept(row):
                    rows.append(row)
                row = []

            row.append(self.trim.apply(cell.text))
            prev = cell

        if row and not table_filter.done and table_filter.in_window(row):
            if table_filter.accept(row):
                rows.append(row)

        return rows
