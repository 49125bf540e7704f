"""
Extractor Package

This package reads positioned text fragments out of PDF documents and
defines the errors shared by the whole pipeline.

The extractor package exposes:
- FragmentSource: The page-by-page fragment contract
- PdfPlumberFragmentSource: pdfplumber backend, marked content aware
- PyMuPDFFragmentSource: PyMuPDF backend, geometry only
- MemoryFragmentSource: In-memory pages, replays fragment dumps
- fetch_url: Downloads http(s) sources with httpx

Usage:
    from extractor import create_fragment_source

    with create_fragment_source(Path("report.pdf")) as source:
        for n in range(1, source.page_count + 1):
            with source.page(n) as page:
                print(len(page.fragments))
"""

from .errors import (
    PdfDataError,
    DocumentOpenError,
    PageAccessError,
    ConfigurationError,
    UnsupportedContentWarning,
)
from .sources import (
    PageContent,
    FragmentSource,
    MemoryFragmentSource,
    create_fragment_source,
    fetch_url,
    is_url,
)
from .pdf_text import PdfPlumberFragmentSource, PyMuPDFFragmentSource

__all__ = [
    # Sources
    'PageContent',
    'FragmentSource',
    'MemoryFragmentSource',
    'PdfPlumberFragmentSource',
    'PyMuPDFFragmentSource',
    'create_fragment_source',
    'fetch_url',
    'is_url',

    # Errors
    'PdfDataError',
    'DocumentOpenError',
    'PageAccessError',
    'ConfigurationError',
    'UnsupportedContentWarning',
]
