"""
Tests for parser options and the YAML options loader.
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from extractor.errors import ConfigurationError
from layout.box import DEFAULT_LINE_HEIGHT
from parser.options import OptionsLoader, ParserOptions, parse_pages
from tables.row_assembler import TrimMode
from tables.table_filter import CellRange


class TestParsePages:
    """Tests for page selections."""

    def test_none(self):
        assert parse_pages(None) is None
        assert parse_pages("") is None

    def test_int(self):
        assert parse_pages(3) == [3]

    def test_list(self):
        assert parse_pages([1, "2"]) == [1, 2]

    def test_ranges(self):
        assert parse_pages("1,3-5, 8") == [1, 3, 4, 5, 8]

    @pytest.mark.parametrize("value", ["0", "a", "5-3", "1,,2", [0], 1.5, True])
    def test_malformed(self, value):
        with pytest.raises(ConfigurationError):
            parse_pages(value)


class TestParserOptions:
    """Tests for option validation."""

    def test_defaults(self):
        options = ParserOptions()
        assert options.pages is None
        assert options.heading is None
        assert options.cells == CellRange(1, None)
        assert options.trim is TrimMode.BOTH
        assert options.line_height == DEFAULT_LINE_HEIGHT
        assert options.order_xy is True
        assert options.backend == 'pdfplumber'

    def test_values_normalized(self):
        options = ParserOptions(pages="2-3", heading="/^Table/", cells="3-5", trim=0)
        assert options.pages == [2, 3]
        assert options.heading.matches("Table 1")
        assert options.cells == CellRange(3, 5)
        assert options.trim is TrimMode.NONE

    def test_camel_case_aliases(self):
        options = ParserOptions.from_dict({
            'url': 'report.pdf',
            'stopHeading': 'End',
            'pageHeader': 50,
            'pageFooter': 20,
            'repeatingHeaders': True,
            'lineHeight': 1.5,
            'orderXY': False,
        })
        assert options.source == 'report.pdf'
        assert options.stop_heading.matches('End')
        assert options.page_header == 50
        assert options.page_footer == 20
        assert options.repeating_headers
        assert options.line_height == 1.5
        assert options.order_xy is False

    def test_unknown_keys_ignored(self):
        options = ParserOptions.from_dict({'cells': 2, 'colour': 'red', 'RepeatCell.column': 1})
        assert options.cells == CellRange(2)

    @pytest.mark.parametrize("kwargs", [
        {'cells': 'many'},
        {'heading': '/(/'},
        {'trim': 'sideways'},
        {'page_header': -1},
        {'line_height': 0},
        {'backend': 'camelot'},
        {'pages': 'first'},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ConfigurationError):
            ParserOptions(**kwargs)

    def test_to_dict(self):
        data = ParserOptions(source=b"%PDF", cells="2-4").to_dict()
        assert data['source'] == "<4 bytes>"
        assert data['cells'] == "2-4"
        assert data['trim'] == "both"


class TestOptionsLoader:
    """Tests for YAML options files."""

    def write(self, tmp_path, text):
        path = tmp_path / "options.yaml"
        path.write_text(text, encoding="utf-8")
        return path

    def test_load(self, tmp_path):
        path = self.write(tmp_path, (
            "heading: Title\n"
            "cells: 2-3\n"
            "pageHeader: 64\n"
            "RepeatCell:\n"
            "  column: 1\n"
            "RowAsObject:\n"
            "  hasHeader: false\n"
            "  headers: [a, b]\n"
        ))
        loader = OptionsLoader(path)
        options = loader.parser_options(source="report.pdf")
        assert options.heading.matches("Title")
        assert options.cells == CellRange(2, 3)
        assert options.page_header == 64
        assert loader.transform_options('RepeatCell') == {'column': 1}
        assert loader.transform_options('RowAsObject') == {'has_header': False, 'headers': ['a', 'b']}
        assert loader.has_section('RepeatCell')
        assert not loader.has_section('RepeatHeading')

    def test_dotted_keys(self, tmp_path):
        path = self.write(tmp_path, "RepeatHeading.header: 'group:1'\nRepeatHeading.hasHeader: false\n")
        loader = OptionsLoader(path)
        assert loader.has_section('RepeatHeading')
        assert loader.transform_options('RepeatHeading') == {'header': 'group:1', 'has_header': False}

    def test_overrides_win(self, tmp_path):
        path = self.write(tmp_path, "cells: 2\nheading: Title\n")
        options = OptionsLoader(path).parser_options(source="x.pdf", cells="4-5", heading=None)
        assert options.cells == CellRange(4, 5)
        assert options.heading.matches("Title")

    def test_empty_file(self, tmp_path):
        path = self.write(tmp_path, "")
        assert OptionsLoader(path).parser_options().cells == CellRange()

    def test_not_a_mapping(self, tmp_path):
        path = self.write(tmp_path, "- a\n- b\n")
        with pytest.raises(ConfigurationError):
            OptionsLoader(path)

    def test_invalid_yaml(self, tmp_path):
        path = self.write(tmp_path, "cells: [2\n")
        with pytest.raises(ConfigurationError):
            OptionsLoader(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            OptionsLoader(tmp_path / "missing.yaml")

    def test_unknown_section(self):
        with pytest.raises(ConfigurationError):
            OptionsLoader().transform_options('Sort')
