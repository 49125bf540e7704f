"""
Fragment and Cell Primitives

This module provides the geometric primitives the cell/row reconstruction
engine works with: the read-only text fragments and group markers a
fragment source hands over, and the mutable Cell accumulator that clusters
fragments into one logical table cell.

Design Decisions:
- Coordinates are in PDF units (points, 1/72 inch)
- Origin is bottom-left (PDF convention); a fragment's (x, y) is its
  left baseline origin
- Fragments and markers are immutable; a Cell is mutated by add_item()
  until the sequencer takes it
- Font metrics are adaptive: the thresholds used for adjacency grow with
  the largest glyphs seen in the cell
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional, Dict, Any, Union


# Tuned defaults. Changing them changes output, keep them reproducible.
DEFAULT_LINE_HEIGHT = 1.67      # line height as a ratio of font height
DEFAULT_FONT_HEIGHT = 8.0
DEFAULT_FONT_WIDTH = 4.0
SAME_LINE_RATIO = 0.125         # max baseline delta for same-line continuation
WRAP_MIN_RATIO = 0.75           # wrapped continuation window, in line heights
WRAP_MAX_RATIO = 1.25
ALIGN_TOLERANCE = 2.0           # points, for lined-mode edge alignment
LINE_FUZZ = 1.0                 # points, slack in the same-line comparator


class GroupTag(Enum):
    """Structural group tags reported by marked-content sources."""
    ARTIFACT = auto()       # Page furniture: headers, footers, watermarks
    PARAGRAPH = auto()      # P
    SPAN = auto()           # Span
    OTHER = auto()          # Anything else, ignored by the cell builder

    @classmethod
    def from_name(cls, name: Optional[str]) -> 'GroupTag':
        """Map a raw marked-content tag name to a GroupTag."""
        return _TAG_NAMES.get(name or '', cls.OTHER)


_TAG_NAMES = {
    'Artifact': GroupTag.ARTIFACT,
    'P': GroupTag.PARAGRAPH,
    'Span': GroupTag.SPAN,
}


class MarkerKind(Enum):
    """Begin or end of a structural group."""
    BEGIN = auto()
    END = auto()


class LinePosition(Enum):
    """
    Result of comparing a candidate cell's vertical band to a cell's.

    PRECEDES means the candidate belongs on an earlier (higher) line,
    FOLLOWS on a later (lower) line.
    """
    SAME_LINE = 0
    PRECEDES = 1
    FOLLOWS = -1


@dataclass(frozen=True)
class Fragment:
    """
    One positioned run of text.

    Attributes:
        text: The text content (may be empty for pure line breaks)
        x: Left edge of the baseline origin
        y: Baseline
        width: Advance width of the run
        height: Height of the run
        has_line_break: Whether the run ends a line
        direction: Writing direction, 'ltr' expected
        font_size: Font size in points if the source knows it
    """
    text: str
    x: float
    y: float
    width: float
    height: float
    has_line_break: bool = False
    direction: str = 'ltr'
    font_size: Optional[float] = None

    @property
    def x2(self) -> float:
        """Right edge."""
        return self.x + self.width

    @property
    def y2(self) -> float:
        """Top edge."""
        return self.y + self.height

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'text': self.text,
            'x': round(self.x, 3),
            'y': round(self.y, 3),
            'width': round(self.width, 3),
            'height': round(self.height, 3),
            'has_line_break': self.has_line_break,
            'direction': self.direction,
            'font_size': self.font_size,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Fragment':
        """Create a Fragment from a dump produced by to_dict()."""
        return cls(
            text=data.get('text', ''),
            x=float(data['x']),
            y=float(data['y']),
            width=float(data.get('width', 0.0)),
            height=float(data.get('height', 0.0)),
            has_line_break=bool(data.get('has_line_break', False)),
            direction=data.get('direction', 'ltr'),
            font_size=data.get('font_size'),
        )


@dataclass(frozen=True)
class GroupMarker:
    """Begin or end of a marked-content group."""
    kind: MarkerKind
    tag: GroupTag
    group_id: Optional[int] = None
    raw_tag: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {
            'marker': self.kind.name.lower(),
            'tag': self.raw_tag or self.tag.name,
            'group_id': self.group_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GroupMarker':
        raw_tag = data.get('tag', '')
        return cls(
            kind=MarkerKind[data['marker'].upper()],
            tag=GroupTag.from_name(raw_tag),
            group_id=data.get('group_id'),
            raw_tag=raw_tag,
        )


ContentItem = Union[Fragment, GroupMarker]


@dataclass
class Alignment:
    """Edge alignment of a fragment relative to a cell (lined mode)."""
    top: bool = False
    bottom: bool = False
    left: bool = False
    right: bool = False
    adjacent: bool = False


@dataclass
class Cell:
    """
    A cluster of fragments representing one logical table cell.

    The bounding box starts inverted (x1/y1 at +inf, x2/y2 at -inf) and
    grows with every fragment added.

    Example:
        cell = Cell()
        cell.add_item(Fragment('Total', x=72, y=700, width=24, height=10))
        if cell.is_adjacent(next_fragment):
            cell.add_item(next_fragment)
    """
    line_height_ratio: float = DEFAULT_LINE_HEIGHT
    newlines: bool = False

    text: str = ''
    x1: float = math.inf
    y1: float = math.inf
    x2: float = -math.inf
    y2: float = -math.inf
    font_height: float = DEFAULT_FONT_HEIGHT
    font_width: float = DEFAULT_FONT_WIDTH
    count: int = 0

    # last fragment added
    prev_x: float = 0.0
    prev_y: float = 0.0
    prev_x2: float = 0.0
    prev_y2: float = 0.0

    has_span: bool = False
    inserted: bool = field(default=False, repr=False)

    @property
    def line_height(self) -> float:
        return self.font_height * self.line_height_ratio

    @property
    def height(self) -> float:
        """Vertical span of the cell."""
        return self.y2 - self.y1

    @property
    def is_empty(self) -> bool:
        return self.count == 0

    def add_item(self, item: Fragment) -> None:
        """Append a fragment, growing the box and the font metrics."""
        self.count += 1

        if item.text:
            self.text += item.text
        if item.has_line_break:
            self.text += '\n' if self.newlines else ' '

        self.x1 = min(self.x1, item.x)
        self.y1 = min(self.y1, item.y)
        self.x2 = max(self.x2, item.x2)
        self.y2 = max(self.y2, item.y2)

        glyph_height = item.font_size or item.height
        glyph_width = item.width / len(item.text) if item.text else 0.0
        self.font_height = max(self.font_height, glyph_height)
        self.font_width = max(self.font_width, glyph_width)

        self.prev_x = item.x
        self.prev_y = item.y
        self.prev_x2 = item.x2
        self.prev_y2 = item.y2

    def is_adjacent(self, item: Fragment) -> bool:
        """
        Check if a fragment continues this cell.

        Same line: baseline within an eighth of a line height of the last
        fragment and a gap smaller than one average glyph. A wider gap on the
        same baseline is a new cell, which is how side-by-side columns split.

        Next line: only for cells flagged has_span, with the baseline roughly
        one line lower and x ranges overlapping.
        """
        if (abs(item.y - self.prev_y) <= self.line_height * SAME_LINE_RATIO
                and item.x - self.prev_x2 < self.font_width):
            return True

        drop = self.prev_y - item.y
        if (self.has_span
                and self.line_height * WRAP_MIN_RATIO < drop <= self.line_height * WRAP_MAX_RATIO
                and ((self.x1 <= item.x <= self.x2) or (item.x <= self.x1 <= item.x2))):
            return True

        return False

    def alignment(self, item: Fragment) -> Alignment:
        """Edge alignment of a fragment against this cell's box."""
        aligns = Alignment()
        if self.count == 0:
            return aligns

        aligns.bottom = abs(item.y - self.y1) <= ALIGN_TOLERANCE
        aligns.top = abs(item.y2 - self.y2) <= ALIGN_TOLERANCE
        aligns.left = abs(item.x - self.x1) <= ALIGN_TOLERANCE
        aligns.right = abs(item.x2 - self.x2) <= ALIGN_TOLERANCE

        # fragments arrive top to bottom, left to right
        if (aligns.top or aligns.bottom) and abs(item.x - self.x2) < self.font_width:
            aligns.adjacent = True
        if (aligns.left or aligns.right) and abs(item.y2 - self.y1) < self.font_width:
            aligns.adjacent = True

        return aligns

    def is_same_line(self, cell: 'Cell') -> LinePosition:
        """
        Compare the vertical band of a candidate cell with this one.

        A candidate that nominally overlaps but starts further left and is
        shorter than this cell is treated as a later line, so a short cell
        is not folded into a tall multi-line cell's row.
        """
        if cell.y1 - LINE_FUZZ > self.y2:
            return LinePosition.PRECEDES
        if cell.y2 + LINE_FUZZ < self.y1:
            return LinePosition.FOLLOWS
        if cell.x1 < self.x1 and cell.height < self.height:
            return LinePosition.FOLLOWS
        return LinePosition.SAME_LINE

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for diagnostics."""
        return {
            'text': self.text,
            'x1': round(self.x1, 2),
            'y1': round(self.y1, 2),
            'x2': round(self.x2, 2),
            'y2': round(self.y2, 2),
            'count': self.count,
            'has_span': self.has_span,
        }
