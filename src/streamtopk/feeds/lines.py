"""Plain-text feed: every input line is one element."""
from __future__ import annotations

from typing import Iterator

from .base import open_source


class LineFeed:
    """Yield each line of a text stream as an element.

    Args:
        strip:      Strip surrounding whitespace, not just the newline.
        keep_blank: Count empty lines as the element ``""`` instead of skipping them.
    """

    def __init__(self, strip: bool = False, keep_blank: bool = False) -> None:
        self._strip = strip
        self._keep_blank = keep_blank

    @property
    def name(self) -> str:
        return "lines"

    def element_from_line(self, line: str) -> str | None:
        value = line.strip() if self._strip else line.rstrip("\r\n")
        if not value and not self._keep_blank:
            return None
        return value

    def elements(self, path: str) -> Iterator[str]:
        """Stream-read a file. Memory usage: O(1), one line at a time."""
        with open_source(path) as f:
            for line in f:
                element = self.element_from_line(line)
                if element is not None:
                    yield element
