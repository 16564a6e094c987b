"""Application-layer ports describing adapter responsibilities.

Purpose
-------
Define the structural contracts sinks must satisfy so the dispatcher can route
lines without depending on concrete destinations.

Contents
--------
* :class:`Sink` – accepts one serialized line per call.

System Role
-----------
The console and file adapters implement :class:`Sink`; tests substitute
in-memory implementations.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Sink(Protocol):
    """Write serialized event lines to a destination.

    Why
    ----
    Keep stream selection, file handling, and failure policy inside adapters
    while the dispatcher only decides which sinks receive a line.

    Methods
    -------
    :meth:`write`
        Append ``line`` plus a terminator; never raise on I/O failures.
    :meth:`close`
        Release held resources; later writes are dropped.
    """

    def write(self, level: str, line: str) -> None:
        """Write *line* emitted at *level*."""

    def close(self) -> None:
        """Release resources held by the sink."""
