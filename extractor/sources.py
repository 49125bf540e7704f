"""
Fragment Sources

A fragment source opens a document and hands out, page by page, the
positioned text fragments and structural group markers found on it.

Every source follows the same contract so the reconstruction engine does
not care which backend produced the content:
- open() / close(), or use it as a context manager
- page_count and is_marked (structural grouping available)
- page(n) is a context manager yielding PageContent; page-scoped
  resources are released when the block exits, however it exits
"""

from __future__ import annotations

import json
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

import httpx
from loguru import logger

from layout.box import ContentItem, Fragment, GroupMarker
from .errors import ConfigurationError, DocumentOpenError, PageAccessError


@dataclass
class PageContent:
    """Dimensions and ordered content items of one page."""
    page_number: int
    width: float
    height: float
    items: List[ContentItem] = field(default_factory=list)

    @property
    def fragments(self) -> List[Fragment]:
        """Text fragments only, markers dropped."""
        return [item for item in self.items if isinstance(item, Fragment)]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'page_number': self.page_number,
            'width': self.width,
            'height': self.height,
            'items': [item.to_dict() for item in self.items],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], page_number: Optional[int] = None) -> 'PageContent':
        items: List[ContentItem] = []
        for entry in data.get('items', []):
            if 'marker' in entry:
                items.append(GroupMarker.from_dict(entry))
            else:
                items.append(Fragment.from_dict(entry))
        return cls(
            page_number=data.get('page_number', page_number or 1),
            width=float(data.get('width', 612)),
            height=float(data.get('height', 792)),
            items=items,
        )


class FragmentSource:
    """
    Base class for fragment sources.

    Subclasses implement _open(), _close() and _load_page().
    """

    name: str = 'source'

    def __init__(self):
        self._opened = False
        self.page_count = 0
        self.is_marked = False

    def open(self) -> 'FragmentSource':
        """Open the document. Raises DocumentOpenError."""
        if not self._opened:
            self._open()
            self._opened = True
        return self

    def close(self) -> None:
        if self._opened:
            self._opened = False
            self._close()

    def __enter__(self) -> 'FragmentSource':
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def is_open(self) -> bool:
        return self._opened

    @contextmanager
    def page(self, page_number: int) -> Iterator[PageContent]:
        """
        Fetch one page's content.

        Raises:
            PageAccessError: page number out of range or content unreadable
        """
        if not self._opened:
            raise PageAccessError("Document is not open", page_number)
        if not 1 <= page_number <= self.page_count:
            raise PageAccessError(
                f"Page {page_number} out of range (1-{self.page_count})", page_number
            )
        with self._load_page(page_number) as content:
            yield content

    def _open(self) -> None:
        raise NotImplementedError

    def _close(self) -> None:
        pass

    def _load_page(self, page_number: int):
        raise NotImplementedError


class MemoryFragmentSource(FragmentSource):
    """
    Pages held in memory.

    Used to replay fragment dumps (see the `fragments` CLI command) and to
    drive the pipeline without a PDF file.

    Usage:
        source = MemoryFragmentSource([page1, page2], is_marked=False)
        rows = PdfDataParser(options, source=source).parse()
    """

    name = 'memory'

    def __init__(self, pages: List[PageContent], is_marked: bool = False):
        super().__init__()
        self._pages = list(pages)
        self._marked = is_marked
        self.released: List[int] = []

    def _open(self) -> None:
        self.page_count = len(self._pages)
        self.is_marked = self._marked

    @contextmanager
    def _load_page(self, page_number: int) -> Iterator[PageContent]:
        try:
            yield self._pages[page_number - 1]
        finally:
            self.released.append(page_number)

    @classmethod
    def from_dicts(cls, pages: List[Dict[str, Any]], is_marked: bool = False) -> 'MemoryFragmentSource':
        return cls(
            [PageContent.from_dict(p, page_number=i) for i, p in enumerate(pages, start=1)],
            is_marked=is_marked,
        )

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> 'MemoryFragmentSource':
        """
        Load a fragment dump.

        The file holds one JSON object per line, one line per page, as
        written by the `fragments` command. An optional first line
        {"is_marked": ...} sets the grouping mode.
        """
        pages = []
        is_marked = False
        try:
            with open(path, 'r', encoding='utf-8') as f:
                for line in f:
                    line = line.strip()
                    if not line:
                        continue
                    data = json.loads(line)
                    if 'items' not in data:
                        is_marked = bool(data.get('is_marked', False))
                        continue
                    pages.append(data)
        except (OSError, ValueError) as e:
            raise DocumentOpenError(f"Cannot read fragment dump {path}: {e}", str(path)) from e

        logger.debug(f"Loaded {len(pages)} pages from fragment dump {path}")
        return cls.from_dicts(pages, is_marked=is_marked)


URL_SCHEMES = ('http://', 'https://')
DOWNLOAD_TIMEOUT = 60.0


def is_url(source: Any) -> bool:
    return isinstance(source, str) and source.lower().startswith(URL_SCHEMES)


def fetch_url(url: str, timeout: float = DOWNLOAD_TIMEOUT) -> bytes:
    """
    Download a remote PDF.

    Raises:
        DocumentOpenError: the request failed or returned an error status
    """
    logger.info(f"Downloading {url}")
    try:
        response = httpx.get(url, follow_redirects=True, timeout=timeout)
        response.raise_for_status()
    except httpx.HTTPError as e:
        raise DocumentOpenError(f"Cannot download {url}: {e}", url) from e

    logger.debug(f"Downloaded {len(response.content)} bytes from {url}")
    return response.content


def create_fragment_source(
    source: Union[str, Path, bytes, FragmentSource],
    backend: str = 'pdfplumber',
) -> FragmentSource:
    """
    Build a fragment source for a document reference.

    Args:
        source: PDF path, http(s) URL, raw PDF bytes, a .jsonl fragment
                dump, or an existing FragmentSource (returned unchanged)
        backend: "pdfplumber" (marked content aware) or "pymupdf"

    Returns:
        An unopened FragmentSource
    """
    if isinstance(source, FragmentSource):
        return source

    if isinstance(source, (str, Path)) and not is_url(source) and str(source).lower().endswith('.jsonl'):
        return MemoryFragmentSource.from_json(source)

    from .pdf_text import PdfPlumberFragmentSource, PyMuPDFFragmentSource

    backends = {
        'pdfplumber': PdfPlumberFragmentSource,
        'pymupdf': PyMuPDFFragmentSource,
    }
    if backend not in backends:
        raise ConfigurationError(f"Unknown backend: {backend}")

    if is_url(source):
        source = fetch_url(source)
    return backends[backend](source)
