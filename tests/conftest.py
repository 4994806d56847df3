"""Shared pytest fixtures for streamtopk tests."""
from __future__ import annotations

import json
from pathlib import Path

import pytest


@pytest.fixture()
def tmp_stream_file(tmp_path: Path):
    """Return a factory that creates temporary input files."""

    def _make(lines: list[str], name: str = "stream.txt") -> Path:
        p = tmp_path / name
        p.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return p

    return _make


@pytest.fixture()
def word_lines() -> list[str]:
    return ["apple", "banana", "apple", "cherry", "apple", "banana", "durian"]


@pytest.fixture()
def ndjson_lines() -> list[str]:
    return [
        json.dumps({"path": "/", "status": 200, "user": {"id": "u1"}}),
        json.dumps({"path": "/health", "status": 200, "user": {"id": "u2"}}),
        json.dumps({"path": "/", "status": 500, "user": {"id": "u1"}}),
        json.dumps({"status": 404}),
    ]
