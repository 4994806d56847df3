"""Bounded-memory top-K counter for unbounded streams.

The counter keeps exactly ``k`` slots. Elements already being tracked are
counted exactly; new elements take a free slot while there is one. Once every
slot is occupied, each untracked element decrements one slot chosen by a
round-robin cursor, and takes that slot over only when its count drops to
zero.

Usage::

    counter = TopKCounter(100)
    for line in sys.stdin:
        counter.add(line.rstrip("\\n"))

    counter.top()     # {'GET /', 'GET /health', ...}
    counter.counts()  # {'GET /': 812, 'GET /health': 97, ...}

Memory usage is O(k) regardless of stream length or cardinality.
"""
from __future__ import annotations

import logging
import numbers
import threading
from collections.abc import Hashable
from typing import Any, Iterable

logger = logging.getLogger(__name__)


class InvalidArgument(ValueError):
    """Raised when a counter is constructed with a capacity that is not a positive integer."""


def _validate_capacity(k: Any) -> int:
    """Return ``k`` as an int, or raise InvalidArgument.

    Only integral numbers are accepted. Numeric strings such as ``"5"`` are
    rejected too, unlike Statistics::TopK which matched ``/^\\d+$/``; callers
    parsing text (the CLI does) convert before constructing.
    """
    # bool is an Integral subclass; True must not silently mean k=1
    if isinstance(k, bool) or not isinstance(k, numbers.Integral):
        raise InvalidArgument(f"expecting a positive integer, got {k!r}")
    if k < 1:
        raise InvalidArgument(f"expecting a positive integer, got {k!r}")
    return int(k)


class TopKCounter:
    """Approximate top-K frequency counter with a fixed number of slots.

    Args:
        k: Capacity, the maximum number of distinct elements tracked at once.

    Raises:
        InvalidArgument: ``k`` is missing, not an integer, or less than 1.
    """

    def __init__(self, k: int | None = None) -> None:
        self._k = _validate_capacity(k)
        self._counts: list[int] = [0] * self._k
        self._slots: list[Hashable] = [None] * self._k  # slot -> element
        self._index: dict[Hashable, int] = {}  # element -> slot
        self._size = 0
        self._cursor = 0
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Feed
    # ------------------------------------------------------------------

    def add(self, element: Hashable) -> int:
        """Count one occurrence of ``element``.

        Returns the element's count after the call, or 0 when the element is
        still not tracked.
        """
        with self._lock:
            return self._add(element)

    def update(self, elements: Iterable[Hashable]) -> None:
        """Add every element of an iterable, in order."""
        for element in elements:
            self.add(element)

    def _add(self, element: Hashable) -> int:
        counts = self._counts

        slot = self._index.get(element)
        if slot is not None:
            counts[slot] += 1
            return counts[slot]

        if self._size < self._k:
            slot = self._size
            self._size += 1
            self._assign(slot, element)
            if self._size == self._k:
                logger.debug("Counter saturated: all %d slots occupied", self._k)
            return 1

        slot = self._cursor
        counts[slot] -= 1
        self._cursor = (slot + 1) % self._k
        if counts[slot] == 0:
            del self._index[self._slots[slot]]
            self._assign(slot, element)
            return 1
        return 0

    def _assign(self, slot: int, element: Hashable) -> None:
        self._slots[slot] = element
        self._index[element] = slot
        self._counts[slot] = 1

    # ------------------------------------------------------------------
    # Query
    # ------------------------------------------------------------------

    def top(self) -> set[Hashable]:
        """Return the currently tracked elements (unordered)."""
        with self._lock:
            return set(self._index)

    def counts(self) -> dict[Hashable, int]:
        """Return every tracked element mapped to its count, from one snapshot."""
        with self._lock:
            return {element: self._counts[slot] for element, slot in self._index.items()}

    @property
    def capacity(self) -> int:
        return self._k

    @property
    def cursor(self) -> int:
        """Slot that the next eviction attempt will decrement."""
        return self._cursor

    @property
    def saturated(self) -> bool:
        return self._size == self._k

    def __len__(self) -> int:
        return self._size

    def __contains__(self, element: object) -> bool:
        return element in self._index

    def __repr__(self) -> str:
        return f"TopKCounter(k={self._k}, tracked={self._size})"
