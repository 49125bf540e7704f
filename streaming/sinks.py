"""
Row Sinks

A sink receives the row stream of one parser run: rows one at a time, then
exactly one of end() or error().
"""

from __future__ import annotations

from typing import Callable, List, Optional

from tables.table_filter import Row


class RowSink:
    """
    Base class for row consumers.

    write() returns False when the sink cannot take more rows for now; the
    parser then stops fetching pages until resume() is called.
    """

    def write(self, row: Row) -> bool:
        raise NotImplementedError

    def end(self) -> None:
        """No more rows will be written."""

    def error(self, exc: BaseException) -> None:
        """The run failed. No more rows will be written."""
        raise exc


class BufferSink(RowSink):
    """Collects every row; used for batch parsing."""

    def __init__(self):
        self.rows: List[Row] = []
        self.ended = False
        self.exception: Optional[BaseException] = None

    def write(self, row: Row) -> bool:
        self.rows.append(row)
        return True

    def end(self) -> None:
        self.ended = True

    def error(self, exc: BaseException) -> None:
        self.exception = exc


class CallbackSink(RowSink):
    """
    Adapts plain callables to the sink interface.

    on_row may return False to apply backpressure; any other return value
    (including None) means "keep going". Without on_error, errors are
    re-raised to the caller of stream().

    Usage:
        parser.stream(CallbackSink(rows.append, on_end=lambda: print("done")))
    """

    def __init__(
        self,
        on_row: Callable[[Row], Optional[bool]],
        on_end: Optional[Callable[[], None]] = None,
        on_error: Optional[Callable[[BaseException], None]] = None,
    ):
        self.on_row = on_row
        self.on_end = on_end
        self.on_error = on_error

    def write(self, row: Row) -> bool:
        return self.on_row(row) is not False

    def end(self) -> None:
        if self.on_end is not None:
            self.on_end()

    def error(self, exc: BaseException) -> None:
        if self.on_error is None:
            raise exc
        self.on_error(exc)
