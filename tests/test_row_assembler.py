"""
Tests for row assembly.
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent))

from extractor.errors import ConfigurationError
from layout.box import Cell
from tables.row_assembler import RowAssembler, TrimMode
from tables.table_filter import CellRange, HeadingMatcher, TableFilter
from factories import frag


def cell_at(text: str, x: float, y: float, height: float = 10) -> Cell:
    cell = Cell()
    cell.add_item(frag(text, x, y, height=height))
    return cell


def grid(rows, top=700, step=20, left=50, column_width=150):
    cells = []
    for r, row in enumerate(rows):
        for c, text in enumerate(row):
            cells.append(cell_at(text, left + c * column_width, top - r * step))
    return cells


class TestTrimMode:
    """Tests for trim mode parsing."""

    @pytest.mark.parametrize("value,expected", [
        (None, TrimMode.BOTH),
        (True, TrimMode.BOTH),
        (False, TrimMode.NONE),
        (0, TrimMode.NONE),
        (2, TrimMode.LEADING),
        ("3", TrimMode.TRAILING),
        ("leading", TrimMode.LEADING),
        ("Both", TrimMode.BOTH),
    ])
    def test_parse(self, value, expected):
        assert TrimMode.parse(value) is expected

    @pytest.mark.parametrize("value", [7, "sideways", 1.5])
    def test_malformed(self, value):
        with pytest.raises(ConfigurationError):
            TrimMode.parse(value)

    def test_apply(self):
        assert TrimMode.BOTH.apply("  a  ") == "a"
        assert TrimMode.LEADING.apply("  a  ") == "a  "
        assert TrimMode.TRAILING.apply("  a  ") == "  a"
        assert TrimMode.NONE.apply("  a  ") == "  a  "


class TestRowAssembler:
    """Tests for grouping cells into rows."""

    def setup_method(self):
        self.assembler = RowAssembler()

    def test_rows_from_grid(self):
        cells = grid([["Name", "Value"], ["a", "1"], ["b", "2"]])
        rows = self.assembler.assemble(cells, TableFilter())
        assert rows == [["Name", "Value"], ["a", "1"], ["b", "2"]]

    def test_wraparound_starts_new_row(self):
        # overlapping bands, but the second cell starts further left
        cells = [cell_at("a", 200, 700), cell_at("b", 50, 702)]
        rows = self.assembler.assemble(cells, TableFilter())
        assert rows == [["a"], ["b"]]

    def test_trim(self):
        cells = [cell_at(" a ", 50, 700), cell_at(" b", 200, 700)]
        assert RowAssembler().assemble(cells, TableFilter()) == [["a", "b"]]
        assert RowAssembler(TrimMode.NONE).assemble(cells, TableFilter()) == [[" a ", " b"]]

    def test_empty_text_cells_skipped(self):
        cells = [cell_at("a", 50, 700), cell_at("", 120, 700), cell_at("b", 200, 700)]
        assert self.assembler.assemble(cells, TableFilter()) == [["a", "b"]]

    def test_heading_window(self):
        cells = grid([["Intro"], ["Title"], ["Name", "Value"], ["a", "1"], ["End"], ["c", "3"]])
        table_filter = TableFilter(
            heading=HeadingMatcher.parse("Title"),
            stop_heading=HeadingMatcher.parse("End"),
            cells=CellRange(2),
        )
        rows = self.assembler.assemble(cells, table_filter)
        assert rows == [["Name", "Value"], ["a", "1"]]
        assert table_filter.done

    def test_pending_row_outside_window_not_flushed(self):
        cells = grid([["a", "1"], ["x", "y", "z"]])
        table_filter = TableFilter(cells=CellRange(2, 2))
        rows = self.assembler.assemble(cells, table_filter)
        assert rows == [["a", "1"]]
        assert not table_filter.done

    def test_row_outside_window_mid_page_ends_headed_table(self):
        cells = grid([["Title"], ["a", "1"], ["x", "y", "z"], ["b", "2"]])
        table_filter = TableFilter(heading=HeadingMatcher.parse("Title"), cells=CellRange(2, 2))
        rows = self.assembler.assemble(cells, table_filter)
        assert rows == [["a", "1"]]
        assert table_filter.done

    def test_row_outside_window_mid_page_skipped(self):
        cells = grid([["a", "1"], ["x", "y", "z"], ["b", "2"]])
        table_filter = TableFilter(cells=CellRange(2, 2))
        rows = self.assembler.assemble(cells, table_filter)
        assert rows == [["a", "1"], ["b", "2"]]
        assert not table_filter.done

    def test_row_length_filter(self):
        cells = grid([["a", "1"], ["Sub"], ["b", "2"], ["c", "3"]])
        table_filter = TableFilter(cells=CellRange(2, 3))
        rows = self.assembler.assemble(cells, table_filter)
        for row in rows:
            assert len(row) == 1 or 2 <= len(row) <= 3
        assert rows == [["a", "1"], ["Sub"], ["b", "2"], ["c", "3"]]

    def test_done_filter_yields_nothing(self):
        table_filter = TableFilter(stop_heading=HeadingMatcher.parse("End"))
        table_filter.accept(["a"])
        table_filter.accept(["End"])
        assert self.assembler.assemble(grid([["b", "2"]]), table_filter) == []

    def test_no_cells(self):
        assert self.assembler.assemble([], TableFilter()) == []
