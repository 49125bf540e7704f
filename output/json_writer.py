"""
JSON Writers

JSONWriter emits a JSON array with one record per line; NDJSONWriter emits
line-delimited JSON. Both write records as they arrive.
"""

import io
import json
from pathlib import Path
from typing import Any, Iterable, Optional, TextIO, Union

from loguru import logger

from .base import OutputWriter


class JSONWriter(OutputWriter):
    """
    Write records as a JSON array.

    Output layout:
        [
        {"a": "1", "b": "2"},
        {"a": "3", "b": "4"}
        ]
    """

    def __init__(self, output_path: Optional[Union[str, Path]] = None, encoding: str = 'utf-8'):
        super().__init__(output_path, encoding=encoding)

    def write_records(self, records: Iterable[Any], stream: Optional[TextIO] = None) -> int:
        count = 0
        with self._open(stream) as out:
            out.write('[\n')
            for record in records:
                if count:
                    out.write(',\n')
                out.write(json.dumps(record, ensure_ascii=False, default=str))
                count += 1
            out.write('\n]\n')

        logger.debug(f"Wrote {count} JSON records")
        return count

    def to_string(self, records: Iterable[Any]) -> str:
        buffer = io.StringIO()
        self.write_records(records, stream=buffer)
        return buffer.getvalue()


class NDJSONWriter(JSONWriter):
    """Write records as line-delimited JSON, one record per line."""

    def write_records(self, records: Iterable[Any], stream: Optional[TextIO] = None) -> int:
        count = 0
        with self._open(stream) as out:
            for record in records:
                out.write(json.dumps(record, ensure_ascii=False, default=str))
                out.write('\n')
                count += 1

        logger.debug(f"Wrote {count} NDJSON records")
        return count
