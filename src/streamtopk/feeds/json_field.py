"""NDJSON feed that counts the value of one field per record.

Nested objects are reached with dotted names: ``--field user.id`` reads
``record["user"]["id"]``. Records without the field count as ``"unknown"``.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Iterator

from .base import open_source

logger = logging.getLogger(__name__)

MISSING = "unknown"


def _lookup(record: dict[str, Any], path: list[str]) -> Any:
    value: Any = record
    for part in path:
        if not isinstance(value, dict) or part not in value:
            return None
        value = value[part]
    return value


class JsonFieldFeed:
    """Extract ``field`` from newline-delimited JSON records."""

    def __init__(self, field: str) -> None:
        if not field:
            raise ValueError("JsonFieldFeed needs a field name")
        self._field = field
        self._path = field.split(".")

    @property
    def name(self) -> str:
        return "json"

    @property
    def field(self) -> str:
        return self._field

    def element_from_line(self, line: str) -> str | None:
        """Return the field value as a string. Returns None for blank lines or parse errors."""
        line = line.strip()
        if not line:
            return None
        try:
            record = json.loads(line)
        except json.JSONDecodeError:
            logger.debug("Skipping invalid JSON line: %.80s", line)
            return None
        if not isinstance(record, dict):
            logger.debug("Skipping non-object JSON line: %.80s", line)
            return None
        value = _lookup(record, self._path)
        if value is None:
            return MISSING
        if isinstance(value, (dict, list)):
            return json.dumps(value, sort_keys=True)
        return str(value)

    def elements(self, path: str) -> Iterator[str]:
        with open_source(path) as f:
            for line in f:
                element = self.element_from_line(line)
                if element is not None:
                    yield element
