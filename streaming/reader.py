"""
PDF Data Reader

Pull-mode access to the row stream: iterate a reader to get rows as the
parser produces them. The reader buffers at most high_water_mark rows
before the parser is paused; it is resumed once the buffer is drained.
"""

from __future__ import annotations

from collections import deque
from typing import Any, Callable, Deque, Dict, List, Optional, Union

from extractor.errors import UnsupportedContentWarning
from parser.options import ParserOptions
from tables.table_filter import Row
from .data_parser import PdfDataParser
from .sinks import RowSink


DEFAULT_HIGH_WATER_MARK = 16


class PdfDataReader(RowSink):
    """
    Iterator over the rows of a parser run.

    Usage:
        for row in PdfDataReader({"source": "report.pdf", "cells": "3-5"}):
            print(row)

    A fatal error is raised from the iteration, after the rows produced
    before it have been read.
    """

    def __init__(
        self,
        options: Union[ParserOptions, Dict[str, Any], None] = None,
        source: Any = None,
        high_water_mark: int = DEFAULT_HIGH_WATER_MARK,
        progress_callback: Optional[Callable[[int, int, str], None]] = None,
    ):
        if high_water_mark < 1:
            raise ValueError(f"high_water_mark must be at least 1: {high_water_mark}")
        self.parser = PdfDataParser(options, source=source, progress_callback=progress_callback)
        self.high_water_mark = high_water_mark

        self._buffer: Deque[Row] = deque()
        self._ended = False
        self._exception: Optional[BaseException] = None

    @property
    def warnings(self) -> List[UnsupportedContentWarning]:
        return self.parser.warnings

    # RowSink

    def write(self, row: Row) -> bool:
        self._buffer.append(row)
        return len(self._buffer) < self.high_water_mark

    def end(self) -> None:
        self._ended = True

    def error(self, exc: BaseException) -> None:
        self._exception = exc

    # Iterator

    def __iter__(self) -> 'PdfDataReader':
        return self

    def __next__(self) -> Row:
        while not self._buffer:
            if self._exception is not None:
                exc, self._exception = self._exception, None
                self._ended = True
                raise exc
            if self._ended or self.parser.finished:
                raise StopIteration
            if not self.parser.started:
                self.parser.stream(self)
            elif self.parser.paused:
                self.parser.resume()
            else:
                raise StopIteration
        return self._buffer.popleft()

    def read_all(self) -> List[Row]:
        return list(self)

    def cancel(self) -> None:
        """Stop the parser and drop buffered rows."""
        self._buffer.clear()
        self.parser.cancel()
