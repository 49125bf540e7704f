"""
Layout Package

Geometric clustering of positioned text fragments into cells, and
ordering of those cells into reading order.

Key Components:
- Fragment / GroupMarker: Read-only content items from a fragment source
- Cell: Mutable accumulator with adaptive font metrics
- MarkedCellBuilder / LinedCellBuilder: The two clustering strategies
- CellSequencer: Reading-order insertion with header/footer exclusion

Usage:
    from layout import LinedCellBuilder, CellSequencer, PageState

    state = PageState.for_page(page.height, page_header=64)
    sequencer = CellSequencer(state)
    for cell in LinedCellBuilder().build(page.items):
        sequencer.insert_cell(cell)
"""

from .box import (
    Fragment,
    GroupMarker,
    GroupTag,
    MarkerKind,
    ContentItem,
    Alignment,
    LinePosition,
    Cell,
    DEFAULT_LINE_HEIGHT,
)
from .cell_builder import (
    CellBuilder,
    MarkedCellBuilder,
    LinedCellBuilder,
)
from .sequencer import (
    PageState,
    CellSequencer,
)

__all__ = [
    # Primitives
    'Fragment',
    'GroupMarker',
    'GroupTag',
    'MarkerKind',
    'ContentItem',
    'Alignment',
    'LinePosition',
    'Cell',
    'DEFAULT_LINE_HEIGHT',

    # Cell building
    'CellBuilder',
    'MarkedCellBuilder',
    'LinedCellBuilder',

    # Ordering
    'PageState',
    'CellSequencer',
]
