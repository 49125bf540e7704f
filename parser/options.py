"""
Parser Options

Configuration for a parser run, plus the YAML options file loader.

Options can be given in snake_case or in the camelCase spelling used by
options files written for other tools (stopHeading, pageHeader, orderXY,
...). Everything is validated up front: a malformed option raises
ConfigurationError before any page is read.

Options file example:

    heading: "Table 1"
    stopHeading: /^Source:/i
    cells: 3-7
    pageHeader: 50
    repeatingHeaders: true
    RepeatCell:
      column: 0
    RowAsObject:
      hasHeader: true
"""

import re
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from loguru import logger

from extractor.errors import ConfigurationError
from layout.box import DEFAULT_LINE_HEIGHT
from tables.table_filter import CellRange, HeadingMatcher
from tables.row_assembler import TrimMode


BACKENDS = ('pdfplumber', 'pymupdf')

# Alternate spellings accepted in option mappings
OPTION_ALIASES = {
    'url': 'source',
    'stopHeading': 'stop_heading',
    'pageHeader': 'page_header',
    'pageFooter': 'page_footer',
    'repeatingHeaders': 'repeating_headers',
    'lineHeight': 'line_height',
    'orderXY': 'order_xy',
}

TRANSFORM_SECTIONS = ('RowAsObject', 'RepeatCell', 'RepeatHeading')

# Transform option spellings
TRANSFORM_ALIASES = {
    'hasHeader': 'has_header',
}


def parse_pages(value: Any) -> Optional[List[int]]:
    """
    Parse a page selection.

    Accepts None (all pages), an int, a list of ints, or a string such as
    "1,3,5-7". Page numbers are 1-based.

    Raises:
        ConfigurationError: if the selection is malformed
    """
    if value is None or value == '' or value == []:
        return None

    if isinstance(value, bool):
        raise ConfigurationError(f"Invalid page selection: {value!r}")

    if isinstance(value, int):
        pages = [value]
    elif isinstance(value, str):
        pages = []
        for part in value.split(','):
            part = part.strip()
            match = re.match(r'^(\d+)(?:\s*-\s*(\d+))?$', part)
            if not match:
                raise ConfigurationError(f"Invalid page selection: {value!r}")
            start = int(match.group(1))
            end = int(match.group(2)) if match.group(2) else start
            if end < start:
                raise ConfigurationError(f"Invalid page range: {part!r}")
            pages.extend(range(start, end + 1))
    elif isinstance(value, (list, tuple)):
        try:
            pages = [int(p) for p in value]
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid page selection: {value!r}") from e
    else:
        raise ConfigurationError(f"Invalid page selection: {value!r}")

    if any(p < 1 for p in pages):
        raise ConfigurationError(f"Page numbers start at 1: {value!r}")
    return pages


@dataclass
class ParserOptions:
    """
    Options for one parser run.

    Attributes:
        source: PDF path, http(s) URL, PDF bytes or a .jsonl fragment dump
        pages: Page numbers to process, None for all
        heading: Row preceding the table (literal or /pattern/)
        stop_heading: Row following the table (literal or /pattern/)
        cells: Allowed cells per row, "min" or "min-max"
        newlines: Keep line breaks inside cell text
        page_header: Height of the page header band to ignore, in points
        page_footer: Height of the page footer band to ignore, in points
        repeating_headers: Suppress the header row repeated on each page
        trim: Whitespace trimming of cell text
        line_height: Line height as a ratio of font height
        order_xy: Sort cells into reading order
        artifacts: Keep artifact content (marked documents)
        backend: Fragment source backend, pdfplumber or pymupdf
    """
    source: Optional[Union[str, Path, bytes]] = None
    pages: Optional[List[int]] = None
    heading: Optional[HeadingMatcher] = None
    stop_heading: Optional[HeadingMatcher] = None
    cells: CellRange = field(default_factory=CellRange)
    newlines: bool = False
    page_header: float = 0
    page_footer: float = 0
    repeating_headers: bool = False
    trim: TrimMode = TrimMode.BOTH
    line_height: float = DEFAULT_LINE_HEIGHT
    order_xy: bool = True
    artifacts: bool = False
    backend: str = 'pdfplumber'

    def __post_init__(self):
        self.pages = parse_pages(self.pages)
        self.heading = HeadingMatcher.parse(self.heading)
        self.stop_heading = HeadingMatcher.parse(self.stop_heading)
        self.cells = CellRange.parse(self.cells)
        self.trim = TrimMode.parse(self.trim)

        try:
            self.page_header = float(self.page_header or 0)
            self.page_footer = float(self.page_footer or 0)
            if self.line_height is None:
                self.line_height = DEFAULT_LINE_HEIGHT
            self.line_height = float(self.line_height)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid numeric option: {e}") from e

        if self.page_header < 0 or self.page_footer < 0:
            raise ConfigurationError("Page header and footer heights must not be negative")
        if self.line_height <= 0:
            raise ConfigurationError(f"Line height must be positive: {self.line_height}")
        if self.backend not in BACKENDS:
            raise ConfigurationError(
                f"Unknown backend {self.backend!r}, expected one of {', '.join(BACKENDS)}"
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ParserOptions':
        """
        Create ParserOptions from a mapping.

        camelCase aliases are accepted. Transform sections are skipped,
        other unknown keys are ignored with a warning.
        """
        names = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in data.items():
            name = OPTION_ALIASES.get(key, key)
            if name in names:
                kwargs[name] = value
            elif key in TRANSFORM_SECTIONS or key.split('.')[0] in TRANSFORM_SECTIONS:
                continue
            else:
                logger.warning(f"Unknown option ignored: {key}")
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Option values in printable form."""
        source = self.source
        if isinstance(source, (bytes, bytearray)):
            source = f"<{len(source)} bytes>"
        return {
            'source': str(source) if source is not None else None,
            'pages': self.pages,
            'heading': repr(self.heading) if self.heading else None,
            'stop_heading': repr(self.stop_heading) if self.stop_heading else None,
            'cells': str(self.cells),
            'newlines': self.newlines,
            'page_header': self.page_header,
            'page_footer': self.page_footer,
            'repeating_headers': self.repeating_headers,
            'trim': self.trim.name.lower(),
            'line_height': self.line_height,
            'order_xy': self.order_xy,
            'artifacts': self.artifacts,
            'backend': self.backend,
        }


class OptionsLoader:
    """
    Loads parser and transform options from a YAML file.

    Usage:
        loader = OptionsLoader(Path("options.yaml"))
        options = loader.parser_options(source="report.pdf")
        repeat_cell = loader.transform_options('RepeatCell')
    """

    def __init__(self, options_path: Optional[Path] = None):
        self.options_path = options_path
        self.config: Dict[str, Any] = {}

        if options_path:
            self.load(options_path)

    def load(self, options_path: Path) -> Dict[str, Any]:
        """
        Load options from a YAML file.

        Raises:
            ConfigurationError: if the file cannot be read or is not a mapping
        """
        logger.info(f"Loading options from: {options_path}")

        try:
            with open(options_path, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load options: {e}")
            raise ConfigurationError(f"Cannot load options file {options_path}: {e}") from e

        if config is None:
            config = {}
        if not isinstance(config, dict):
            raise ConfigurationError(f"Options file {options_path} must contain a mapping")

        self.config = config
        return self.config

    def parser_options(self, **overrides: Any) -> ParserOptions:
        """
        Build ParserOptions from the loaded file.

        Overrides (e.g. from the command line) win over file values; None
        overrides are ignored.
        """
        data = dict(self.config)
        for key, value in overrides.items():
            if value is not None:
                data[key] = value
        return ParserOptions.from_dict(data)

    def transform_options(self, section: str) -> Dict[str, Any]:
        """
        Options of one transform section, snake_cased.

        Both a nested mapping (RepeatCell: {column: 1}) and dotted keys
        (RepeatCell.column: 1) are read; dotted keys win.
        """
        if section not in TRANSFORM_SECTIONS:
            raise ConfigurationError(f"Unknown transform section: {section}")

        result: Dict[str, Any] = {}
        nested = self.config.get(section) or {}
        if not isinstance(nested, dict):
            raise ConfigurationError(f"Options section {section} must be a mapping")
        for key, value in nested.items():
            result[TRANSFORM_ALIASES.get(key, key)] = value

        prefix = section + '.'
        for key, value in self.config.items():
            if key.startswith(prefix):
                name = key[len(prefix):]
                result[TRANSFORM_ALIASES.get(name, name)] = value

        return result

    def has_section(self, section: str) -> bool:
        prefix = section + '.'
        return section in self.config or any(k.startswith(prefix) for k in self.config)
