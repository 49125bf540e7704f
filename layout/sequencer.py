"""
Cell Sequencer

Keeps a page's finished cells in reading order: top of page (high y) to
bottom (low y), and left to right within a line. Fragment sources usually
deliver content in order, but not always, so each cell is spliced into
place as it arrives.

Cells whose baseline falls in the page header or footer band are dropped.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .box import Cell, LinePosition


@dataclass
class PageState:
    """
    Per-page working state, rebuilt for every page.

    Attributes:
        header_y: Cells with a baseline at or above this are page header
        footer_y: Cells with a baseline at or below this are page footer
        cells: Accepted cells in reading order
    """
    header_y: float
    footer_y: float
    cells: List[Cell] = field(default_factory=list)

    @classmethod
    def for_page(
        cls,
        page_height: float,
        page_header: float = 0,
        page_footer: float = 0,
    ) -> 'PageState':
        return cls(header_y=page_height - page_header, footer_y=page_footer)

    def in_margins(self, cell: Cell) -> bool:
        """Whether the cell lies in the header or footer band."""
        return cell.y1 >= self.header_y or cell.y1 <= self.footer_y


class CellSequencer:
    """
    Inserts cells into a PageState.

    Usage:
        sequencer = CellSequencer(PageState.for_page(792, page_header=64))
        for cell in builder.build(page.items):
            sequencer.insert_cell(cell)
        rows = assembler.assemble(sequencer.cells, table_filter)
    """

    def __init__(self, state: PageState, order_xy: bool = True):
        self.state = state
        self.order_xy = order_xy

    @property
    def cells(self) -> List[Cell]:
        return self.state.cells

    def insert_cell(self, cell: Optional[Cell]) -> bool:
        """
        Add a cell to the page's cell list.

        Returns:
            True if the cell was inserted, False if it was rejected
        """
        if cell is None or cell.count <= 0 or cell.inserted:
            return False
        if self.state.in_margins(cell):
            return False

        cells = self.state.cells
        if not self.order_xy:
            cells.append(cell)
            cell.inserted = True
            return True

        i = len(cells) - 1

        # back up past cells on lines below the candidate
        while i >= 0 and cells[i].is_same_line(cell) is LinePosition.PRECEDES:
            i -= 1

        # then find the position within the candidate's line
        while (i >= 0
               and cells[i].is_same_line(cell) is LinePosition.SAME_LINE
               and cell.x1 < cells[i].x1):
            i -= 1

        cells.insert(i + 1, cell)
        cell.inserted = True
        return True
