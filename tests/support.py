"""Test doubles and decoding helpers shared across the suites."""

from __future__ import annotations

import json
from typing import Any


class MemorySink:
    """Sink collecting ``(level, line)`` pairs in memory."""

    def __init__(self) -> None:
        self.lines: list[tuple[str, str]] = []
        self.closed = False

    def write(self, level: str, line: str) -> None:
        self.lines.append((level, line))

    def close(self) -> None:
        self.closed = True

    def events(self) -> list[dict[str, Any]]:
        return [json.loads(line) for _level, line in self.lines]


def parse_lines(text: str) -> list[dict[str, Any]]:
    """Decode newline-delimited JSON output captured from a stream or file."""

    return [json.loads(line) for line in text.splitlines() if line.strip()]
