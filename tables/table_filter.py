"""
Table Filter

Decides which rows of the document belong to the target table. The filter
is a small state machine that lives for the whole document run:

    SEEKING_HEADING -> SEEKING_TABLE_START -> IN_TABLE -> DONE

- SEEKING_HEADING: rows are discarded until the first cell matches the
  heading; the heading row itself is discarded too
- SEEKING_TABLE_START: the first row whose cell count is inside the window
  starts the table and is emitted
- IN_TABLE: rows inside the window are emitted; a stop heading ends the
  table. A row outside the window is dropped, and also ends the table when
  a heading is configured
- DONE: terminal, nothing else is evaluated

Single-cell rows always pass the window once the table has started, so
interleaved subheadings survive.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, List, Optional, Pattern, Union

from loguru import logger

from extractor.errors import ConfigurationError


Row = List[str]

_REGEX_LITERAL = re.compile(r'^/(.*)/([imsx]*)$', re.DOTALL)
_REGEX_FLAGS = {
    'i': re.IGNORECASE,
    'm': re.MULTILINE,
    's': re.DOTALL,
    'x': re.VERBOSE,
}


class FilterState(Enum):
    """Table filter states."""
    SEEKING_HEADING = auto()
    SEEKING_TABLE_START = auto()
    IN_TABLE = auto()
    DONE = auto()


@dataclass(frozen=True)
class CellRange:
    """
    Allowed number of cells in a table row.

    Attributes:
        min: Minimum cell count (inclusive)
        max: Maximum cell count (inclusive), None for unbounded
    """
    min: int = 1
    max: Optional[int] = None

    def __post_init__(self):
        if self.min < 0:
            raise ConfigurationError(f"Cell count minimum must not be negative: {self.min}")
        if self.max is not None and self.max < self.min:
            raise ConfigurationError(
                f"Cell count maximum {self.max} is less than minimum {self.min}"
            )

    def contains(self, count: int) -> bool:
        """Strict window test."""
        return count >= self.min and (self.max is None or count <= self.max)

    def accepts(self, count: int) -> bool:
        """Window test with the single-cell exemption."""
        return count == 1 or self.contains(count)

    @classmethod
    def parse(cls, value: Any) -> 'CellRange':
        """
        Parse a cell count window.

        Accepts None (default, unbounded), an int minimum, a string "n" or
        "min-max", a mapping with min/max keys, or a CellRange.

        Raises:
            ConfigurationError: if the value is malformed
        """
        if value is None:
            return cls()
        if isinstance(value, CellRange):
            return value
        if isinstance(value, bool):
            raise ConfigurationError(f"Invalid cell count window: {value!r}")
        if isinstance(value, int):
            return cls(min=value)
        if isinstance(value, dict):
            try:
                minimum = int(value.get('min', 1))
                maximum = value.get('max')
                return cls(min=minimum, max=int(maximum) if maximum is not None else None)
            except (TypeError, ValueError) as e:
                raise ConfigurationError(f"Invalid cell count window: {value!r}") from e
        if isinstance(value, str):
            text = value.strip()
            match = re.match(r'^(\d+)(?:\s*-\s*(\d+))?$', text)
            if not match:
                raise ConfigurationError(f"Invalid cell count window: {value!r}")
            minimum = int(match.group(1))
            maximum = int(match.group(2)) if match.group(2) else None
            return cls(min=minimum, max=maximum)

        raise ConfigurationError(f"Invalid cell count window: {value!r}")

    def __str__(self) -> str:
        return f"{self.min}-{self.max}" if self.max is not None else str(self.min)


class HeadingMatcher:
    """
    Matches the first cell of a row against a literal or a pattern.

    Usage:
        HeadingMatcher.parse("Title").matches("Title")            # equality
        HeadingMatcher.parse("/^Table \\d+/i").matches("table 3")  # re.search
    """

    def __init__(self, literal: Optional[str] = None, pattern: Optional[Pattern] = None):
        if (literal is None) == (pattern is None):
            raise ConfigurationError("HeadingMatcher needs exactly one of literal or pattern")
        self.literal = literal
        self.pattern = pattern

    @classmethod
    def parse(cls, value: Union[str, Pattern, 'HeadingMatcher', None]) -> Optional['HeadingMatcher']:
        """
        Build a matcher from an option value.

        A string written /pattern/flags is compiled as a regular expression,
        any other string is a literal. Returns None for None or "".
        """
        if value is None or value == '':
            return None
        if isinstance(value, HeadingMatcher):
            return value
        if isinstance(value, re.Pattern):
            return cls(pattern=value)
        if not isinstance(value, str):
            raise ConfigurationError(f"Invalid heading matcher: {value!r}")

        match = _REGEX_LITERAL.match(value)
        if not match:
            return cls(literal=value)

        flags = 0
        for flag in match.group(2):
            flags |= _REGEX_FLAGS[flag]
        try:
            return cls(pattern=re.compile(match.group(1), flags))
        except re.error as e:
            raise ConfigurationError(f"Invalid heading pattern {value!r}: {e}") from e

    def matches(self, text: Optional[str]) -> bool:
        if text is None:
            return False
        if self.pattern is not None:
            return self.pattern.search(text) is not None
        return text == self.literal

    def __repr__(self) -> str:
        if self.pattern is not None:
            return f"HeadingMatcher(pattern={self.pattern.pattern!r})"
        return f"HeadingMatcher(literal={self.literal!r})"


class TableFilter:
    """
    Document-wide row filter.

    One instance per parser run. The driver calls start_page() before the
    rows of each page and accept() for every candidate row.

    Args:
        heading: Matcher for the row preceding the table
        stop_heading: Matcher for the row following the table
        cells: Allowed cell count window
        repeating_headers: Suppress the header row repeated on later pages
        first_page: Page number on which the header row is captured
    """

    def __init__(
        self,
        heading: Optional[HeadingMatcher] = None,
        stop_heading: Optional[HeadingMatcher] = None,
        cells: Optional[CellRange] = None,
        repeating_headers: bool = False,
        first_page: int = 1,
    ):
        self.heading = heading
        self.stop_heading = stop_heading
        self.cells = cells or CellRange()
        self.repeating_headers = repeating_headers
        self.first_page = first_page

        self.state = FilterState.SEEKING_HEADING if heading else FilterState.SEEKING_TABLE_START
        self.headers_row: Optional[Row] = None
        self.page_number: Optional[int] = None
        self.page_row_count = 0

    @property
    def heading_found(self) -> bool:
        return self.heading is None or self.state is not FilterState.SEEKING_HEADING

    @property
    def table_found(self) -> bool:
        return self.state in (FilterState.IN_TABLE, FilterState.DONE)

    @property
    def done(self) -> bool:
        return self.state is FilterState.DONE

    def start_page(self, page_number: int) -> None:
        """Reset the per-page row counter."""
        self.page_number = page_number
        self.page_row_count = 0

    def in_window(self, row: Row) -> bool:
        """Whether a pending row may be flushed at end of page."""
        return self.cells.accepts(len(row))

    def accept(self, row: Row) -> bool:
        """
        Evaluate one row.

        Returns:
            True if the row belongs to the table and should be emitted
        """
        if self.state is FilterState.DONE:
            return False

        first = row[0] if row else None

        if self.state is FilterState.SEEKING_HEADING:
            if self.heading.matches(first):
                logger.debug(f"Heading found: {first!r}")
                self.state = FilterState.SEEKING_TABLE_START
            return False

        if self.state is FilterState.SEEKING_TABLE_START:
            if not self.cells.contains(len(row)):
                return False
            logger.debug(f"Table starts with {len(row)} cells: {row!r}")
            self.state = FilterState.IN_TABLE

        elif self.state is FilterState.IN_TABLE:
            if self.stop_heading is not None and self.stop_heading.matches(first):
                logger.debug(f"Stop heading found: {first!r}")
                self.state = FilterState.DONE
                return False
            if not self.cells.accepts(len(row)):
                # only a table found by its heading ends on a short or long row
                if self.heading is not None:
                    logger.debug(f"Table ends at row with {len(row)} cells")
                    self.state = FilterState.DONE
                return False

        if self._is_repeated_header(row):
            return False

        self.page_row_count += 1
        return True

    def _is_repeated_header(self, row: Row) -> bool:
        if not self.repeating_headers or self.page_row_count > 0:
            return False

        if self.page_number is None or self.page_number == self.first_page:
            if self.headers_row is None:
                self.headers_row = list(row)
            return False

        if self.headers_row is not None and row == self.headers_row:
            logger.debug(f"Suppressed repeating header on page {self.page_number}")
            return True
        return False
