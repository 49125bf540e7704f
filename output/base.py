"""
Shared plumbing for the record writers.
"""

import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, TextIO, Union


class OutputWriter:
    """
    Base class for writers that target a file path, an open text stream,
    or stdout when neither is given.
    """

    def __init__(self, output_path: Optional[Union[str, Path]] = None, encoding: str = 'utf-8'):
        self.output_path = Path(output_path) if output_path else None
        self.encoding = encoding

    @contextmanager
    def _open(self, stream: Optional[TextIO] = None) -> Iterator[TextIO]:
        if stream is not None:
            yield stream
        elif self.output_path is not None:
            self.output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.output_path, 'w', newline='', encoding=self.encoding) as f:
                yield f
        else:
            yield sys.stdout
