"""
Parser Package

This package handles parser configuration: the options dataclass used by
every run and the YAML options file loader.

Usage:
    from parser import ParserOptions, OptionsLoader

    options = ParserOptions(source="report.pdf", heading="Table 1", cells="3-5")

    loader = OptionsLoader(Path("options.yaml"))
    options = loader.parser_options(source="report.pdf")
"""

from .options import (
    ParserOptions,
    OptionsLoader,
    parse_pages,
    BACKENDS,
)

__all__ = [
    'ParserOptions',
    'OptionsLoader',
    'parse_pages',
    'BACKENDS',
]
