"""Element feed Protocol: turns an input source into a stream of elements."""
from __future__ import annotations

import sys
from collections.abc import Hashable
from contextlib import contextmanager
from typing import Iterator, Protocol, TextIO, runtime_checkable

STDIN = "-"


@runtime_checkable
class ElementFeed(Protocol):
    """Protocol for element feeds. Duck-typed, no inheritance required."""

    @property
    def name(self) -> str:
        """Human-readable feed name (e.g. 'lines', 'json')."""
        ...

    def element_from_line(self, line: str) -> Hashable | None:
        """Extract the element carried by one input line. Returns None to skip it."""
        ...

    def elements(self, path: str) -> Iterator[Hashable]:
        """Stream elements from a file, or from stdin when path is '-'."""
        ...


@contextmanager
def open_source(path: str) -> Iterator[TextIO]:
    """Open ``path`` for streaming text reads; '-' yields stdin without closing it.

    Files are split on ``\\n`` only, the same boundaries ``watch`` uses when it
    reads appended bytes.
    """
    if path == STDIN:
        yield sys.stdin
        return
    with open(path, encoding="utf-8", errors="replace", newline="\n") as f:
        yield f
