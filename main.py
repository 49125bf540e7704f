"""
PDF Data Parser - Main Entry Point

Command-line interface and programmatic entry points for extracting a data
table from a PDF document.

Pipeline:

    PDF / fragment dump
        -> PdfDataReader        (cells, rows, table window)
        -> RepeatCellTransform  (optional, column carry-forward)
        -> RepeatHeadingTransform (optional, subheading carry-forward)
        -> RowAsObjectTransform (rows to records)
        -> CSV / JSON / NDJSON writer
"""

import json
import sys
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional

import click
from loguru import logger
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn
from rich.table import Table

# Local imports
from extractor import PdfDataError, create_fragment_source, is_url
from parser import OptionsLoader, parse_pages
from streaming import PdfDataReader
from tables import RepeatCellTransform, RepeatHeadingTransform, RowAsObjectTransform
from output import CSVWriter, JSONWriter, NDJSONWriter


WRITERS = {
    'csv': CSVWriter,
    'json': JSONWriter,
    'ndjson': NDJSONWriter,
}


# Configure logging
def setup_logging(verbose: bool = False, log_file: Optional[Path] = None):
    """Configure loguru logging."""
    # Remove default handler
    logger.remove()

    # Console logging
    log_level = "DEBUG" if verbose else "INFO"
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{message}</cyan>",
        level=log_level,
        colorize=True
    )

    # File logging
    if log_file:
        logger.add(
            log_file,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}",
            level="DEBUG",
            rotation="10 MB"
        )


def build_records(
    rows: Iterable[List[str]],
    loader: OptionsLoader,
    headers: Optional[List[str]] = None,
    repeat_cell: Optional[int] = None,
    repeat_heading: Optional[str] = None,
) -> Iterator[Dict[str, Any]]:
    """
    Chain the record transforms onto a row stream.

    Command-line values win over the options file sections.
    """
    if repeat_cell is not None or loader.has_section('RepeatCell'):
        cell_options = loader.transform_options('RepeatCell')
        if repeat_cell is not None:
            cell_options['column'] = repeat_cell
        rows = RepeatCellTransform(column=int(cell_options.get('column', 0)))(rows)

    if repeat_heading is not None or loader.has_section('RepeatHeading'):
        heading_options = loader.transform_options('RepeatHeading')
        if repeat_heading is not None:
            heading_options['header'] = repeat_heading
        rows = RepeatHeadingTransform(
            header=str(heading_options.get('header', 'subheading:0')),
            has_header=bool(heading_options.get('has_header', True)),
        )(rows)

    object_options = loader.transform_options('RowAsObject')
    if headers:
        object_options['headers'] = headers
    return RowAsObjectTransform(
        headers=object_options.get('headers'),
        has_header=object_options.get('has_header'),
    )(rows)


def _print_summary(console: Console, source: str, count: int, warnings: List[Warning]):
    """Print a summary table of the run."""
    table = Table(title="Parse Summary")

    table.add_column("Source", style="cyan")
    table.add_column("Records", justify="right")
    table.add_column("Warnings", justify="right")

    name = Path(source).name
    if len(name) > 30:
        name = name[:27] + "..."
    table.add_row(name, str(count), str(len(warnings)))

    console.print()
    console.print(table)
    for message in warnings:
        console.print(f"  [yellow]Warning:[/] {message}")


def _document_argument(ctx, param, value: str) -> str:
    """Accept an http(s) URL or an existing file."""
    if is_url(value) or Path(value).exists():
        return value
    raise click.BadParameter(f"File '{value}' does not exist.")


# CLI Interface
@click.group()
def cli():
    """PDF Data Parser - Extract tabular data from PDF documents."""


@cli.command()
@click.argument('input_path', callback=_document_argument)
@click.argument('output_path', type=click.Path(path_type=Path), required=False)
@click.option('--format', '-f', 'output_format', type=click.Choice(list(WRITERS)), default='csv',
              help='Output format')
@click.option('--options', '-c', 'options_path', type=click.Path(exists=True, path_type=Path),
              default=None, help='YAML options file')
@click.option('--pages', default=None, help='Pages to process, e.g. "1,3-5"')
@click.option('--heading', default=None, help='Text or /pattern/ of the heading preceding the table')
@click.option('--stop-heading', default=None, help='Text or /pattern/ of the heading following the table')
@click.option('--cells', default=None, help='Cells per row, "min" or "min-max"')
@click.option('--newlines/--no-newlines', default=None, help='Keep line breaks in cell text')
@click.option('--page-header', type=float, default=None, help='Page header height to ignore, in points')
@click.option('--page-footer', type=float, default=None, help='Page footer height to ignore, in points')
@click.option('--repeating-headers/--no-repeating-headers', default=None,
              help='Table headers repeat on each page')
@click.option('--trim', default=None, help='Trim cell text: none, both, leading, trailing')
@click.option('--line-height', type=float, default=None, help='Line height as a ratio of font height')
@click.option('--order/--no-order', 'order_xy', default=None, help='Sort cells into reading order')
@click.option('--artifacts/--no-artifacts', default=None, help='Keep artifact content')
@click.option('--headers', default=None, help='Comma separated column names')
@click.option('--repeat-cell', type=int, default=None, help='Carry forward values of this column')
@click.option('--repeat-heading', default=None, help='Carry forward subheadings, "name[:index[:index]]"')
@click.option('--backend', type=click.Choice(['pdfplumber', 'pymupdf']), default=None,
              help='PDF library used to read fragments')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--log-file', type=click.Path(path_type=Path), default=None, help='Write logs to file')
def parse(
    input_path: str,
    output_path: Optional[Path],
    output_format: str,
    options_path: Optional[Path],
    pages: Optional[str],
    heading: Optional[str],
    stop_heading: Optional[str],
    cells: Optional[str],
    newlines: Optional[bool],
    page_header: Optional[float],
    page_footer: Optional[float],
    repeating_headers: Optional[bool],
    trim: Optional[str],
    line_height: Optional[float],
    order_xy: Optional[bool],
    artifacts: Optional[bool],
    headers: Optional[str],
    repeat_cell: Optional[int],
    repeat_heading: Optional[str],
    backend: Optional[str],
    verbose: bool,
    log_file: Optional[Path],
):
    """
    Parse the table of a PDF into CSV or JSON.

    Examples:

        # Whole document to stdout
        python main.py parse report.pdf

        # Table between two headings, at least 3 cells per row
        python main.py parse report.pdf table.csv --heading "Table 1" --stop-heading "/^Source/" --cells 3

        # JSON output with repeating page headers removed
        python main.py parse report.pdf table.json -f json --repeating-headers
    """
    setup_logging(verbose=verbose, log_file=log_file)
    console = Console(stderr=True)

    try:
        loader = OptionsLoader(options_path)
        options = loader.parser_options(
            source=input_path,
            pages=pages,
            heading=heading,
            stop_heading=stop_heading,
            cells=cells,
            newlines=newlines,
            page_header=page_header,
            page_footer=page_footer,
            repeating_headers=repeating_headers,
            trim=trim,
            line_height=line_height,
            order_xy=order_xy,
            artifacts=artifacts,
            backend=backend,
        )
    except PdfDataError as e:
        console.print(f"[bold red]Invalid options: {e}[/]")
        raise SystemExit(2)

    column_names = [h.strip() for h in headers.split(',')] if headers else None
    writer = WRITERS[output_format](output_path=output_path)

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            console=console,
            disable=output_path is None,
        ) as progress:
            task = progress.add_task(f"Parsing {Path(input_path).name}...", total=None)

            def on_page(current: int, total: int, name: str):
                progress.update(task, completed=current, total=total, description=f"Parsing {name}...")

            reader = PdfDataReader(options, progress_callback=on_page)
            records = build_records(
                reader,
                loader,
                headers=column_names,
                repeat_cell=repeat_cell,
                repeat_heading=repeat_heading,
            )
            count = writer.write_records(records)

    except KeyboardInterrupt:
        console.print("\n[yellow]Processing interrupted[/]")
        raise SystemExit(1)
    except PdfDataError as e:
        console.print(f"[bold red]Error: {e}[/]")
        raise SystemExit(1)
    except Exception as e:
        console.print(f"[bold red]Error: {e}[/]")
        if verbose:
            logger.exception("Full traceback:")
        raise SystemExit(1)

    if output_path is not None:
        console.print(f"[green]✓ Output written to: {output_path}[/]")
        _print_summary(console, input_path, count, reader.warnings)


@cli.command()
@click.argument('input_path', callback=_document_argument)
@click.argument('output_path', type=click.Path(path_type=Path), required=False)
@click.option('--pages', default=None, help='Pages to dump, e.g. "1,3-5"')
@click.option('--backend', type=click.Choice(['pdfplumber', 'pymupdf']), default='pdfplumber',
              help='PDF library used to read fragments')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
def fragments(
    input_path: str,
    output_path: Optional[Path],
    pages: Optional[str],
    backend: str,
    verbose: bool,
):
    """
    Dump the text fragments and group markers of a PDF as line-delimited JSON.

    The dump can be fed back to `parse` in place of the PDF, which makes
    tuning options for a difficult document quick.
    """
    setup_logging(verbose=verbose)
    console = Console(stderr=True)

    try:
        page_numbers = parse_pages(pages)
        with create_fragment_source(input_path, backend=backend) as source:
            out = open(output_path, 'w', encoding='utf-8') if output_path else sys.stdout
            try:
                out.write(json.dumps({'is_marked': source.is_marked}) + '\n')
                for page_number in page_numbers or range(1, source.page_count + 1):
                    with source.page(page_number) as page:
                        out.write(json.dumps(page.to_dict(), ensure_ascii=False) + '\n')
            finally:
                if output_path:
                    out.close()
    except PdfDataError as e:
        console.print(f"[bold red]Error: {e}[/]")
        raise SystemExit(1)

    if output_path is not None:
        console.print(f"[green]✓ Fragments written to: {output_path}[/]")


if __name__ == "__main__":
    cli()
