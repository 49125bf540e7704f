"""
PDF Data Parser

Drives the reconstruction pipeline over a document, one page at a time:

    FragmentSource -> CellBuilder -> CellSequencer -> RowAssembler
        -> TableFilter -> RowSink

Pages are processed strictly in order since the table filter's state
depends on every row before it. The same row stream can be consumed in
batch (parse), pushed to a sink (stream) or pulled (PdfDataReader).

Flow control:
- pause(): no further page is fetched until resume()
- a sink write() returning False pauses after the current page
- cancel(): checked between rows and between pages; the stream ends
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Union

from loguru import logger

from extractor.errors import ConfigurationError, PageAccessError, PdfDataError, UnsupportedContentWarning
from extractor.sources import FragmentSource, create_fragment_source
from layout.cell_builder import CellBuilder, LinedCellBuilder, MarkedCellBuilder
from layout.sequencer import CellSequencer, PageState
from parser.options import ParserOptions
from tables.row_assembler import RowAssembler
from tables.table_filter import Row, TableFilter
from .sinks import BufferSink, RowSink


class PdfDataParser:
    """
    Extract the rows of one table from a document.

    Args:
        options: ParserOptions, or a mapping accepted by ParserOptions.from_dict
        source: Document to read; overrides options.source. May be a path,
                PDF bytes, a .jsonl fragment dump or a FragmentSource.
        progress_callback: Called as (current, total, name) after each page

    Usage:
        rows = PdfDataParser(ParserOptions(source="report.pdf", cells="3-5")).parse()

        parser = PdfDataParser({"source": "report.pdf", "heading": "Table 1"})
        parser.stream(CallbackSink(print))
    """

    def __init__(
        self,
        options: Union[ParserOptions, Dict[str, Any], None] = None,
        source: Union[str, bytes, FragmentSource, None] = None,
        progress_callback: Optional[Callable[[int, int, str], None]] = None,
    ):
        if options is None:
            options = ParserOptions()
        elif isinstance(options, dict):
            options = ParserOptions.from_dict(options)
        self.options = options

        self._source_ref = source if source is not None else options.source
        if self._source_ref is None:
            raise ConfigurationError("No document source given")

        self.progress_callback = progress_callback
        self.assembler = RowAssembler(trim=options.trim)

        self.source: Optional[FragmentSource] = None
        self.builder: Optional[CellBuilder] = None
        self.table_filter: Optional[TableFilter] = None
        self.warnings: List[UnsupportedContentWarning] = []
        self.rows_emitted = 0

        self._sink: Optional[RowSink] = None
        self._pages: List[int] = []
        self._page_index = 0
        self._started = False
        self._finished = False
        self._paused = False
        self._cancelled = False
        self._pumping = False

    @property
    def started(self) -> bool:
        return self._started

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def parse(self) -> List[Row]:
        """
        Batch mode: run the whole document and return every accepted row.

        Raises:
            PdfDataError: on a fatal error (rows already produced are lost
                          to the caller; use stream() to keep them)
        """
        sink = BufferSink()
        self.stream(sink)
        if sink.exception is not None:
            raise sink.exception
        return sink.rows

    def stream(self, sink: RowSink) -> None:
        """
        Push mode: deliver rows to a sink.

        Returns when the stream has ended, failed, or was paused. After a
        pause, resume() continues delivery to the same sink. An exception
        raised by the sink or the progress callback propagates to the
        caller and is not passed to sink.error().
        """
        if self._started:
            raise RuntimeError("PdfDataParser can only be run once")
        self._sink = sink
        self._started = True

        if self._cancelled:
            self._finish()
            return

        try:
            self._open()
        except PdfDataError as e:
            self._fail(e)
            return

        self._pump()

    def pause(self) -> None:
        self._paused = True

    def resume(self) -> None:
        if not self._paused:
            return
        self._paused = False
        if self._started and not self._finished:
            self._pump()

    def cancel(self) -> None:
        """Stop at the next row or page boundary and end the stream."""
        if self._cancelled or self._finished:
            return
        self._cancelled = True
        logger.info("Parsing cancelled")
        if self._started and not self._pumping:
            self._finish()

    def _open(self) -> None:
        options = self.options
        self.source = create_fragment_source(self._source_ref, backend=options.backend)
        self.source.open()

        page_count = self.source.page_count
        if options.pages:
            for page_number in options.pages:
                if page_number > page_count:
                    raise PageAccessError(
                        f"Page {page_number} out of range (1-{page_count})", page_number
                    )
            self._pages = list(options.pages)
        else:
            self._pages = list(range(1, page_count + 1))

        builder_class = MarkedCellBuilder if self.source.is_marked else LinedCellBuilder
        self.builder = builder_class(
            line_height=options.line_height,
            newlines=options.newlines,
            artifacts=options.artifacts,
        )

        self.table_filter = TableFilter(
            heading=options.heading,
            stop_heading=options.stop_heading,
            cells=options.cells,
            repeating_headers=options.repeating_headers,
            first_page=self._pages[0] if self._pages else 1,
        )

        logger.info(
            f"Parsing {len(self._pages)} of {page_count} pages "
            f"({'marked' if self.source.is_marked else 'lined'} mode)"
        )

    def _pump(self) -> None:
        """Process pages until paused, cancelled, done or out of pages."""
        if self._pumping:
            return
        self._pumping = True
        try:
            while not self._finished:
                if self._paused:
                    return
                if self._cancelled or self.table_filter.done:
                    self._finish()
                    return
                if self._page_index >= len(self._pages):
                    self._finish()
                    return

                page_number = self._pages[self._page_index]
                self._page_index += 1
                rows = self._process_page(page_number)

                for row in rows:
                    if self._cancelled:
                        break
                    self.rows_emitted += 1
                    if not self._call_consumer(self._sink.write, row):
                        self._paused = True

                if self.progress_callback:
                    self._call_consumer(
                        self.progress_callback,
                        self._page_index, len(self._pages), f"page {page_number}",
                    )
        except Exception as e:
            if self._finished:
                raise
            if not isinstance(e, PdfDataError):
                logger.exception(f"Unexpected error while parsing: {e}")
            self._fail(e)
        finally:
            self._pumping = False

    def _process_page(self, page_number: int) -> List[Row]:
        options = self.options

        with self.source.page(page_number) as page:
            state = PageState.for_page(page.height, options.page_header, options.page_footer)
            sequencer = CellSequencer(state, order_xy=options.order_xy)
            for cell in self.builder.build(page.items):
                sequencer.insert_cell(cell)

        for warning in self.builder.warnings:
            if warning not in self.warnings:
                self.warnings.append(warning)

        self.table_filter.start_page(page_number)
        rows = self.assembler.assemble(sequencer.cells, self.table_filter)
        logger.debug(f"Page {page_number}: {len(sequencer.cells)} cells, {len(rows)} rows")
        return rows

    def _call_consumer(self, callback, *args):
        """
        Call back into the consumer.

        A consumer exception is not a parsing failure: the stream is shut
        down without signalling the sink and the exception propagates to
        the caller.
        """
        try:
            return callback(*args)
        except Exception:
            if not self._finished:
                self._finished = True
                self._close_source()
                logger.debug("Parsing stopped by an exception in the consumer")
            raise

    def _close_source(self) -> None:
        if self.source is None:
            return
        try:
            self.source.close()
        except Exception as e:
            logger.warning(f"Error closing document: {e}")

    def _finish(self) -> None:
        if self._finished:
            return
        self._finished = True
        self._close_source()
        logger.info(f"Parsing finished: {self.rows_emitted} rows")
        self._sink.end()

    def _fail(self, exc: BaseException) -> None:
        self._finished = True
        self._close_source()
        logger.error(f"Parsing failed: {exc}")
        self._sink.error(exc)
