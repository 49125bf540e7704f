"""
PDF Fragment Sources

This module reads positioned text runs from the native text layer of PDFs.
It uses a two-library approach:
1. pdfplumber (primary) - exposes marked-content tags per character, so
   tagged documents can be clustered with their structural grouping
2. PyMuPDF/fitz (fallback) - faster, geometry only (lined mode)

Both report coordinates in PDF points with a bottom-left origin, so the
reconstruction engine sees the same geometry whatever the backend.
"""

import io
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union

import pdfplumber
from loguru import logger
from pdfminer.pdftypes import resolve1

from layout.box import ContentItem, Fragment, GroupMarker, GroupTag, MarkerKind
from .errors import DocumentOpenError, PageAccessError
from .sources import FragmentSource, PageContent


# Words whose tops differ by more than this fraction of their height are on
# different lines.
LINE_BREAK_RATIO = 0.5

WORD_ATTRS = ['size', 'upright', 'mcid', 'tag']


def _describe(source: Union[str, Path, bytes]) -> str:
    if isinstance(source, (bytes, bytearray)):
        return f"<{len(source)} bytes>"
    return str(source)


class PdfPlumberFragmentSource(FragmentSource):
    """
    Fragment source backed by pdfplumber.

    Words are extracted in content-stream order (use_text_flow) with blank
    characters kept, which yields runs much like the text items a PDF
    renderer produces. A change of marked-content (tag, mcid) between
    consecutive words becomes a group end/begin marker pair.

    Usage:
        with PdfPlumberFragmentSource(Path("report.pdf")) as source:
            with source.page(1) as page:
                for item in page.items:
                    ...
    """

    name = 'pdfplumber'

    def __init__(self, source: Union[str, Path, bytes], password: Optional[str] = None):
        super().__init__()
        self.source = source
        self.password = password
        self._pdf = None

    def _open(self) -> None:
        target = io.BytesIO(self.source) if isinstance(self.source, (bytes, bytearray)) else self.source
        logger.info(f"Opening {_describe(self.source)} with pdfplumber")

        try:
            self._pdf = pdfplumber.open(target, password=self.password)
            self.page_count = len(self._pdf.pages)
        except Exception as e:
            raise DocumentOpenError(
                f"Cannot open PDF {_describe(self.source)}: {e}", _describe(self.source)
            ) from e

        self.is_marked = self._read_mark_info()
        if not self.is_marked:
            logger.info("PDF document does not contain marked content, using lined mode")

    def _read_mark_info(self) -> bool:
        """Check the catalog's MarkInfo/Marked flag."""
        try:
            mark_info = resolve1(self._pdf.doc.catalog.get('MarkInfo'))
            if isinstance(mark_info, dict):
                return bool(resolve1(mark_info.get('Marked')))
        except Exception as e:
            logger.warning(f"Could not read MarkInfo: {e}")
        return False

    def _close(self) -> None:
        if self._pdf is not None:
            self._pdf.close()
            self._pdf = None

    @contextmanager
    def _load_page(self, page_number: int) -> Iterator[PageContent]:
        try:
            page = self._pdf.pages[page_number - 1]
        except Exception as e:
            raise PageAccessError(f"Cannot load page {page_number}: {e}", page_number) from e

        try:
            try:
                items = self._page_items(page)
            except Exception as e:
                raise PageAccessError(
                    f"Cannot read content of page {page_number}: {e}", page_number
                ) from e

            logger.debug(f"Page {page_number}: {len(items)} content items")
            yield PageContent(
                page_number=page_number,
                width=float(page.width),
                height=float(page.height),
                items=items,
            )
        finally:
            page.flush_cache()

    def _page_items(self, page) -> List[ContentItem]:
        attrs = WORD_ATTRS
        if page.chars:
            attrs = [a for a in WORD_ATTRS if a in page.chars[0]]

        words = page.extract_words(
            keep_blank_chars=True,
            use_text_flow=True,
            extra_attrs=attrs,
        )

        items: List[ContentItem] = []
        current: Optional[Tuple[str, Optional[int]]] = None
        height = float(page.height)

        for i, word in enumerate(words):
            key = (word['tag'], word.get('mcid')) if word.get('tag') else None
            if key != current:
                if current is not None:
                    items.append(_marker(MarkerKind.END, current))
                if key is not None:
                    items.append(_marker(MarkerKind.BEGIN, key))
                current = key

            next_word = words[i + 1] if i + 1 < len(words) else None
            items.append(_word_fragment(word, next_word, height))

        if current is not None:
            items.append(_marker(MarkerKind.END, current))

        return items


def _marker(kind: MarkerKind, key: Tuple[str, Optional[int]]) -> GroupMarker:
    tag, mcid = key
    return GroupMarker(kind=kind, tag=GroupTag.from_name(tag), group_id=mcid, raw_tag=tag)


def _word_fragment(word: dict, next_word: Optional[dict], page_height: float) -> Fragment:
    """Convert a pdfplumber word (top-left origin) to a baseline Fragment."""
    top = float(word['top'])
    bottom = float(word['bottom'])
    x0 = float(word['x0'])
    word_height = bottom - top

    if next_word is None:
        has_line_break = True
    else:
        has_line_break = (
            abs(float(next_word['top']) - top) > word_height * LINE_BREAK_RATIO
            or float(next_word['x0']) < x0
        )

    direction = word.get('direction')
    if direction is None:
        direction = 'ltr' if word.get('upright', True) else 'ttb'

    return Fragment(
        text=word['text'],
        x=x0,
        y=page_height - bottom,
        width=float(word['x1']) - x0,
        height=word_height,
        has_line_break=has_line_break,
        direction=direction,
        font_size=float(word['size']) if word.get('size') else None,
    )


class PyMuPDFFragmentSource(FragmentSource):
    """
    Fragment source backed by PyMuPDF.

    PyMuPDF does not expose marked content, so documents read through it
    are always clustered in lined mode. Each text span becomes a fragment;
    the last span of a line carries the line break.
    """

    name = 'pymupdf'

    def __init__(self, source: Union[str, Path, bytes], password: Optional[str] = None):
        super().__init__()
        self.source = source
        self.password = password
        self._doc = None

    def _open(self) -> None:
        import fitz  # PyMuPDF

        logger.info(f"Opening {_describe(self.source)} with PyMuPDF")
        try:
            if isinstance(self.source, (bytes, bytearray)):
                doc = fitz.open(stream=bytes(self.source), filetype='pdf')
            else:
                doc = fitz.open(self.source)
        except Exception as e:
            raise DocumentOpenError(
                f"Cannot open PDF {_describe(self.source)}: {e}", _describe(self.source)
            ) from e

        if doc.needs_pass and not (self.password and doc.authenticate(self.password)):
            doc.close()
            raise DocumentOpenError(
                f"PDF {_describe(self.source)} is encrypted", _describe(self.source)
            )

        self._doc = doc
        self.page_count = len(doc)
        self.is_marked = False

    def _close(self) -> None:
        if self._doc is not None:
            self._doc.close()
            self._doc = None

    @contextmanager
    def _load_page(self, page_number: int) -> Iterator[PageContent]:
        try:
            page = self._doc.load_page(page_number - 1)
            height = float(page.rect.height)
            content = PageContent(
                page_number=page_number,
                width=float(page.rect.width),
                height=height,
                items=self._page_items(page.get_text('dict'), height),
            )
        except Exception as e:
            raise PageAccessError(f"Cannot read page {page_number}: {e}", page_number) from e

        logger.debug(f"Page {page_number}: {len(content.items)} content items")
        yield content

    def _page_items(self, text_dict: dict, page_height: float) -> List[ContentItem]:
        items: List[ContentItem] = []
        for block in text_dict.get('blocks', []):
            if block.get('type', 0) != 0:
                continue  # image block
            for line in block.get('lines', []):
                direction = _line_direction(line.get('dir', (1.0, 0.0)))
                spans = [s for s in line.get('spans', []) if s.get('text')]
                for i, span in enumerate(spans):
                    x0, y0, x1, y1 = span['bbox']
                    origin_x, origin_y = span['origin']
                    items.append(Fragment(
                        text=span['text'],
                        x=float(origin_x),
                        y=page_height - float(origin_y),
                        width=float(x1 - x0),
                        height=float(y1 - y0),
                        has_line_break=(i == len(spans) - 1),
                        direction=direction,
                        font_size=float(span.get('size') or 0) or None,
                    ))
        return items


def _line_direction(dir_vector) -> str:
    """Writing direction from a PyMuPDF line's unit direction vector."""
    cos, sin = dir_vector
    if cos > 0.99:
        return 'ltr'
    if cos < -0.99:
        return 'rtl'
    return 'ttb' if sin > 0 else 'btt'
