"""
Cell Builders

Cluster a page's fragments into cells. Two strategies:

- MarkedCellBuilder: for documents with marked content. Paragraph/span
  group starts are the points where a new cell may begin; artifacts
  (page furniture) are dropped unless asked for.
- LinedCellBuilder: for documents without structural grouping. Cell
  boundaries come from edge alignment against the working cell.

Both builders are generators: they yield each finished cell so the caller
can hand it to the sequencer.
"""

from __future__ import annotations

from typing import Iterable, Iterator, List, Optional

from loguru import logger

from extractor.errors import UnsupportedContentWarning
from .box import (
    Cell,
    ContentItem,
    Fragment,
    GroupMarker,
    GroupTag,
    MarkerKind,
    DEFAULT_FONT_WIDTH,
    DEFAULT_LINE_HEIGHT,
)


class CellBuilder:
    """
    Base class holding the options shared by both strategies.

    Args:
        line_height: Line height ratio used for adjacency thresholds
        newlines: Preserve line breaks inside cell text
        artifacts: Keep artifact content (headers, footers) as cells
    """

    def __init__(
        self,
        line_height: float = DEFAULT_LINE_HEIGHT,
        newlines: bool = False,
        artifacts: bool = False,
    ):
        self.line_height = line_height
        self.newlines = newlines
        self.artifacts = artifacts
        self.warnings: List[UnsupportedContentWarning] = []

    def new_cell(self) -> Cell:
        return Cell(line_height_ratio=self.line_height, newlines=self.newlines)

    def build(self, items: Iterable[ContentItem]) -> Iterator[Cell]:
        raise NotImplementedError

    def _warn(self, message: str) -> None:
        """Record an UnsupportedContentWarning, logging each distinct message once."""
        if all(str(w) != message for w in self.warnings):
            self.warnings.append(UnsupportedContentWarning(message))
            logger.warning(message)

    def _check_direction(self, item: Fragment) -> None:
        if item.direction != 'ltr':
            self._warn(f"Unsupported text direction '{item.direction}', treating as ltr")


class MarkedCellBuilder(CellBuilder):
    """
    Build cells from marked content.

    A cell keeps accumulating fragments while inside a group. When a
    paragraph or span group starts, the incoming fragment is tested for
    adjacency and a new cell starts if it is not adjacent.
    """

    def build(self, items: Iterable[ContentItem]) -> Iterator[Cell]:
        cell: Optional[Cell] = None
        group: Optional[GroupTag] = None  # groups are not nested
        paragraph = False
        span = False

        for item in items:
            if isinstance(item, GroupMarker):
                if item.kind is MarkerKind.BEGIN:
                    group = item.tag
                    if item.tag is GroupTag.ARTIFACT:
                        # headers and footers are usually artifacts
                        if cell is not None:
                            yield cell
                        cell = None
                    elif item.tag is GroupTag.PARAGRAPH:
                        paragraph = True
                    elif item.tag is GroupTag.SPAN:
                        span = True
                    else:
                        self._warn(f"Unsupported content tag '{item.raw_tag}', ignored")
                else:
                    if group is GroupTag.ARTIFACT:
                        if self.artifacts and cell is not None:
                            yield cell
                        cell = None
                    group = None
                continue

            self._check_direction(item)

            if paragraph or span:
                # padding and separators between cells
                if paragraph and item.text == '' and item.width == 0 and item.has_line_break:
                    continue
                font_width = cell.font_width if cell is not None else DEFAULT_FONT_WIDTH
                if item.text == ' ' and (paragraph or item.width > font_width):
                    continue

                if cell is not None and cell.count > 0:
                    cell.has_span = cell.has_span or span
                    if not cell.is_adjacent(item):
                        yield cell
                        cell = None

            if cell is None:
                cell = self.new_cell()
            cell.add_item(item)
            paragraph = False
            span = False

        if cell is not None:
            yield cell


class LinedCellBuilder(CellBuilder):
    """
    Build cells from geometry alone.

    Used when the document has no structural grouping. A fragment joins
    the working cell when it is aligned with and adjacent to it. A line
    break in the middle of an aligned run (e.g. a heading split over two
    lines) does not end the cell.
    """

    def build(self, items: Iterable[ContentItem]) -> Iterator[Cell]:
        cell = self.new_cell()
        was_eol = False

        for item in items:
            if isinstance(item, GroupMarker):
                continue

            self._check_direction(item)
            aligns = cell.alignment(item)

            if cell.count > 0 and not aligns.adjacent:
                yield cell
                cell = self.new_cell()

            if was_eol and (aligns.top or ((aligns.left or aligns.right) and aligns.adjacent)):
                # split heading, not a real line break
                was_eol = False

            if was_eol and cell.count > 0:
                yield cell
                cell = self.new_cell()

            cell.add_item(item)
            was_eol = item.has_line_break

        if cell.count > 0:
            yield cell
