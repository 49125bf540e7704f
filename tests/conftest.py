"""
Shared fixtures.
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent))

from factories import table_lines, page, source


@pytest.fixture
def two_column_source():
    """One lined page holding a two-column table."""
    return source(page(table_lines([
        ['Name', 'Value'],
        ['a', '1'],
        ['b', '2'],
    ])))
