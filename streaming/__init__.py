"""
Streaming Package

Page-by-page driver for the row stream with batch, push and pull
consumption.

Usage:
    from streaming import PdfDataParser, PdfDataReader, CallbackSink

    rows = PdfDataParser({"source": "report.pdf"}).parse()

    for row in PdfDataReader({"source": "report.pdf"}):
        ...
"""

from .sinks import RowSink, BufferSink, CallbackSink
from .data_parser import PdfDataParser
from .reader import PdfDataReader, DEFAULT_HIGH_WATER_MARK

__all__ = [
    'RowSink',
    'BufferSink',
    'CallbackSink',
    'PdfDataParser',
    'PdfDataReader',
    'DEFAULT_HIGH_WATER_MARK',
]
