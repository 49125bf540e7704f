"""
Tests for the record-shaping transforms.
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from extractor.errors import ConfigurationError
from tables.transforms import RepeatCellTransform, RepeatHeadingTransform, RowAsObjectTransform


class TestRowAsObjectTransform:
    """Tests for rows to records."""

    def test_first_row_is_header(self):
        rows = [["Name", "Value"], ["a", "1"], ["b", "2"]]
        records = list(RowAsObjectTransform()(rows))
        assert records == [{"Name": "a", "Value": "1"}, {"Name": "b", "Value": "2"}]

    def test_given_headers(self):
        rows = [["a", "1"], ["b", "2"]]
        records = list(RowAsObjectTransform(headers=["name", "value"])(rows))
        assert records == [{"name": "a", "value": "1"}, {"name": "b", "value": "2"}]

    def test_given_headers_override_header_row(self):
        rows = [["Name", "Value"], ["a", "1"]]
        records = list(RowAsObjectTransform(headers=["n", "v"], has_header=True)(rows))
        assert records == [{"n": "a", "v": "1"}]

    def test_extra_cells_keyed_by_index(self):
        rows = [["Name"], ["a", "1"]]
        records = list(RowAsObjectTransform()(rows))
        assert records == [{"Name": "a", "1": "1"}]

    def test_rows_not_mutated(self):
        rows = [["Name", "Value"], ["a", "1"]]
        list(RowAsObjectTransform()(rows))
        assert rows == [["Name", "Value"], ["a", "1"]]


class TestRepeatCellTransform:
    """Tests for column carry-forward."""

    def test_missing_cell_inserted(self):
        rows = [["Ohio", "a", "1"], ["b", "2"], ["Iowa", "c", "3"], ["d", "4"]]
        assert list(RepeatCellTransform()(rows)) == [
            ["Ohio", "a", "1"], ["Ohio", "b", "2"], ["Iowa", "c", "3"], ["Iowa", "d", "4"],
        ]

    def test_blank_cell_filled(self):
        rows = [["Ohio", "a", "1"], ["", "b", "2"]]
        assert list(RepeatCellTransform()(rows)) == [["Ohio", "a", "1"], ["Ohio", "b", "2"]]

    def test_other_column(self):
        rows = [["a", "Ohio", "1"], ["b", "2"]]
        assert list(RepeatCellTransform(column=1)(rows)) == [["a", "Ohio", "1"], ["b", "Ohio", "2"]]

    def test_input_not_mutated(self):
        rows = [["Ohio", "a", "1"], ["b", "2"]]
        list(RepeatCellTransform()(rows))
        assert rows[1] == ["b", "2"]

    def test_negative_column(self):
        with pytest.raises(ConfigurationError):
            RepeatCellTransform(column=-1)


class TestRepeatHeadingTransform:
    """Tests for subheading carry-forward."""

    def test_default(self):
        rows = [["Name", "Value"], ["Group A"], ["a", "1"], ["Group B"], ["b", "2"]]
        assert list(RepeatHeadingTransform()(rows)) == [
            ["subheading", "Name", "Value"],
            ["Group A", "a", "1"],
            ["Group B", "b", "2"],
        ]

    def test_header_with_index(self):
        rows = [["Name", "Value"], ["Group A"], ["a", "1"]]
        assert list(RepeatHeadingTransform(header="group:2")(rows)) == [
            ["Name", "Value", "group"],
            ["a", "1", "Group A"],
        ]

    def test_separate_data_index(self):
        rows = [["Name", "Value"], ["Group A"], ["a", "1"]]
        assert list(RepeatHeadingTransform(header="group:0:1")(rows)) == [
            ["group", "Name", "Value"],
            ["a", "Group A", "1"],
        ]

    def test_without_header_row(self):
        rows = [["Group A"], ["a", "1"]]
        assert list(RepeatHeadingTransform(has_header=False)(rows)) == [["Group A", "a", "1"]]

    def test_malformed_header(self):
        with pytest.raises(ConfigurationError):
            RepeatHeadingTransform(header="group:x")
