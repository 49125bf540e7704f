"""
Tests for the marked and lined cell builders.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent))

from extractor.errors import UnsupportedContentWarning
from layout.cell_builder import LinedCellBuilder, MarkedCellBuilder
from factories import begin, end, frag, line, paragraph


def texts(cells):
    return [c.text for c in cells]


class TestMarkedCellBuilder:
    """Tests for marked-content clustering."""

    def setup_method(self):
        self.builder = MarkedCellBuilder()

    def test_paragraphs_on_one_baseline(self):
        items = paragraph(frag("Alpha", 50, 700)) + paragraph(frag("Beta", 200, 700))
        assert texts(self.builder.build(items)) == ["Alpha", "Beta"]

    def test_adjacent_paragraphs_merge(self):
        items = paragraph(frag("Net", 50, 700)) + paragraph(frag("Sales", 67, 700))
        assert texts(self.builder.build(items)) == ["NetSales"]

    def test_fragments_within_group_accumulate(self):
        items = [begin('P'), frag("Net ", 50, 700), frag("Sales", 200, 700), end('P')]
        assert texts(self.builder.build(items)) == ["Net Sales"]

    def test_span_wraps_into_cell(self):
        items = (
            paragraph(frag("Long text", 50, 700, eol=True))
            + paragraph(frag("continued", 50, 686), tag='Span')
        )
        cells = list(self.builder.build(items))
        assert texts(cells) == ["Long text continued"]
        assert cells[0].has_span

    def test_paragraph_on_next_line_is_new_cell(self):
        items = (
            paragraph(frag("Long text", 50, 700, eol=True))
            + paragraph(frag("next row", 50, 686))
        )
        assert texts(self.builder.build(items)) == ["Long text ", "next row"]

    def test_artifacts_dropped(self):
        items = (
            paragraph(frag("Data", 50, 700))
            + [begin('Artifact'), frag("Page 1", 300, 40), end('Artifact')]
        )
        assert texts(self.builder.build(items)) == ["Data"]

    def test_artifacts_kept(self):
        builder = MarkedCellBuilder(artifacts=True)
        items = (
            paragraph(frag("Data", 50, 700))
            + [begin('Artifact'), frag("Page 1", 300, 40), end('Artifact')]
        )
        assert texts(builder.build(items)) == ["Data", "Page 1"]

    def test_wide_space_separator_skipped(self):
        items = (
            paragraph(frag("Alpha", 50, 700))
            + paragraph(frag(" ", 75, 700, width=20))
            + paragraph(frag("Beta", 200, 700))
        )
        assert texts(self.builder.build(items)) == ["Alpha", "Beta"]

    def test_empty_line_break_skipped(self):
        items = (
            paragraph(frag("Alpha", 50, 700))
            + paragraph(frag("", 75, 700, width=0, eol=True))
            + paragraph(frag("Beta", 200, 700))
        )
        assert texts(self.builder.build(items)) == ["Alpha", "Beta"]

    def test_unsupported_tag_warns(self):
        items = [begin('Figure'), frag("Chart", 50, 700), end('Figure')]
        cells = list(self.builder.build(items))
        assert texts(cells) == ["Chart"]
        assert len(self.builder.warnings) == 1
        assert isinstance(self.builder.warnings[0], UnsupportedContentWarning)
        assert "Figure" in str(self.builder.warnings[0])

    def test_warning_recorded_once(self):
        items = [begin('Figure'), frag("A", 50, 700), end('Figure')] * 3
        list(self.builder.build(items))
        assert len(self.builder.warnings) == 1

    def test_direction_warning(self):
        items = paragraph(frag("abc", 50, 700, direction='rtl'))
        assert texts(self.builder.build(items)) == ["abc"]
        assert any("rtl" in str(w) for w in self.builder.warnings)


class TestLinedCellBuilder:
    """Tests for geometry-only clustering."""

    def setup_method(self):
        self.builder = LinedCellBuilder()

    def test_single_fragment(self):
        assert texts(self.builder.build([frag("Hello, world!", 50, 700)])) == ["Hello, world!"]

    def test_gap_splits_cells(self):
        items = line(700, [(50, "Alpha"), (200, "Beta")])
        assert texts(self.builder.build(items)) == ["Alpha", "Beta "]

    def test_small_gap_joins(self):
        items = [frag("Net ", 50, 700), frag("Sales", 71, 700, eol=True)]
        assert texts(self.builder.build(items)) == ["Net Sales "]

    def test_rows_split(self):
        items = line(700, [(50, "a"), (200, "1")]) + line(680, [(50, "b"), (200, "2")])
        assert texts(self.builder.build(items)) == ["a", "1 ", "b", "2 "]

    def test_split_heading_joins(self):
        # second line sits right under the first, left aligned
        items = [frag("Quarterly", 50, 700, eol=True), frag("Totals", 50, 688, eol=True)]
        assert texts(self.builder.build(items)) == ["Quarterly Totals "]

    def test_markers_ignored(self):
        items = paragraph(frag("Alpha", 50, 700)) + paragraph(frag("Beta", 200, 700))
        assert texts(self.builder.build(items)) == ["Alpha", "Beta"]

    def test_empty_input(self):
        assert list(self.builder.build([])) == []

    def test_newlines_option(self):
        builder = LinedCellBuilder(newlines=True)
        items = [frag("Quarterly", 50, 700, eol=True), frag("Totals", 50, 688)]
        assert texts(builder.build(items)) == ["Quarterly\nTotals"]
