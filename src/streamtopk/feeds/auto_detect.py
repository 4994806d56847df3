"""Pick a feed from a --format choice or from the content itself."""
from __future__ import annotations

import logging
from typing import Iterator

from .base import ElementFeed, open_source
from .json_field import JsonFieldFeed
from .lines import LineFeed

logger = logging.getLogger(__name__)

FORMATS = ("auto", "lines", "json")


def detect_format(line: str) -> str:
    """Return the format name detected from a single sample line.

    Returns one of: 'json', 'lines'.
    """
    line = line.strip()
    if line.startswith("{") and line.endswith("}"):
        return "json"
    return "lines"


class AutoDetectFeed:
    """Detect the input format from the first non-empty line and delegate.

    JSON is only chosen when a field to count was given; without one every
    line is counted verbatim. Blank lines always go to the text feed, so
    they are skipped unless ``keep_blank`` is set.

    The first non-empty line passed to ``element_from_line`` locks the
    format for the lifetime of the feed, matching what ``elements`` does for
    a whole file.
    """

    def __init__(self, field: str = "", strip: bool = False, keep_blank: bool = False) -> None:
        self._lines = LineFeed(strip=strip, keep_blank=keep_blank)
        self._json = JsonFieldFeed(field) if field else None
        self._locked: ElementFeed | None = None

    @property
    def name(self) -> str:
        return "auto"

    def _pick(self, line: str) -> ElementFeed:
        if self._json is not None and detect_format(line) == "json":
            return self._json
        return self._lines

    def element_from_line(self, line: str) -> str | None:
        if not line.strip():
            return self._lines.element_from_line(line)
        if self._locked is None:
            self._locked = self._pick(line)
            logger.debug("Detected %s input", self._locked.name)
        return self._locked.element_from_line(line)

    def elements(self, path: str) -> Iterator[str]:
        """Stream a file, locking the format detected on the first non-empty line.

        No per-line re-detection overhead on large inputs.
        """
        locked: ElementFeed | None = None
        with open_source(path) as f:
            for line in f:
                if not line.strip():
                    element = self._lines.element_from_line(line)
                else:
                    if locked is None:
                        locked = self._pick(line)
                        logger.debug("Detected %s input in %s", locked.name, path)
                    element = locked.element_from_line(line)
                if element is not None:
                    yield element


def make_feed(
    fmt: str = "auto",
    field: str = "",
    strip: bool = False,
    keep_blank: bool = False,
) -> ElementFeed:
    """Return the feed for a --format choice.

    ``keep_blank`` applies to text input only; JSON records are never blank.

    Raises:
        ValueError: unknown format, or 'json' without a field.
    """
    fmt = fmt.lower()
    if fmt == "lines":
        return LineFeed(strip=strip, keep_blank=keep_blank)
    if fmt == "json":
        if not field:
            raise ValueError("--format json requires --field")
        return JsonFieldFeed(field)
    if fmt == "auto":
        return AutoDetectFeed(field=field, strip=strip, keep_blank=keep_blank)
    raise ValueError(f"Unknown format {fmt!r}; expected one of {', '.join(FORMATS)}")
