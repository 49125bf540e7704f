"""
Error types shared across the extraction pipeline.

Fatal errors stop the run and are reported to the consumer exactly once.
UnsupportedContentWarning is never raised by the pipeline: instances are
logged and collected in PdfDataParser.warnings while processing continues.
"""

from typing import Optional


class PdfDataError(Exception):
    """Base class for pipeline errors."""


class DocumentOpenError(PdfDataError):
    """
    The document cannot be opened: unreadable, not a PDF, or encrypted.

    Raised before any row is produced.
    """

    def __init__(self, message: str, source: Optional[str] = None):
        super().__init__(message)
        self.source = source


class PageAccessError(PdfDataError):
    """
    A page's content cannot be fetched.

    Rows already emitted before the failure stay valid.
    """

    def __init__(self, message: str, page_number: Optional[int] = None):
        super().__init__(message)
        self.page_number = page_number


class ConfigurationError(PdfDataError, ValueError):
    """Malformed option: cell window, heading matcher, trim mode, pages, ..."""


class UnsupportedContentWarning(UserWarning):
    """Unrecognized structural tag or non left-to-right text."""
