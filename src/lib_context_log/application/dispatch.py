"""Route serialized lines to the sinks implied by the output mode."""

from __future__ import annotations

from typing import Iterable, Sequence

from ..observability import log_error
from .ports import Sink


class Dispatcher:
    """Fan a serialized line out to every configured sink."""

    def __init__(self, sinks: Iterable[Sink]) -> None:
        self._sinks: tuple[Sink, ...] = tuple(sinks)

    @property
    def sinks(self) -> Sequence[Sink]:
        return self._sinks

    def dispatch(self, level: str, line: str) -> None:
        """Hand *line* to each sink; a failing sink never starves the others."""

        for sink in self._sinks:
            try:
                sink.write(level, line)
            except Exception as exc:  # noqa: BLE001 - one destination must not block the rest
                log_error("sink_write_failed", sink=type(sink).__name__, level=level, error=f"{type(exc).__name__}: {exc}")

    def close(self) -> None:
        for sink in self._sinks:
            sink.close()
