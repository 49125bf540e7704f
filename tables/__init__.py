"""
Tables Package

Row assembly, table selection and record shaping.

Key Components:
- RowAssembler: Groups a page's ordered cells into rows
- TableFilter: Document-wide state machine selecting the table's rows
- CellRange / HeadingMatcher: Table window options
- Row transforms: field maps, column carry-forward, subheading carry-forward
"""

from .table_filter import (
    Row,
    FilterState,
    CellRange,
    HeadingMatcher,
    TableFilter,
)
from .row_assembler import (
    TrimMode,
    RowAssembler,
)
from .transforms import (
    RowAsObjectTransform,
    RepeatCellTransform,
    RepeatHeadingTransform,
)

__all__ = [
    'Row',
    'FilterState',
    'CellRange',
    'HeadingMatcher',
    'TableFilter',
    'TrimMode',
    'RowAssembler',
    'RowAsObjectTransform',
    'RepeatCellTransform',
    'RepeatHeadingTransform',
]
