"""Terminal sink splitting lines between stdout and stderr.

``error`` and ``warn`` lines go to the error stream, every other level to the
output stream. Streams are written directly, never through the intercepted
``logging`` functions, so a line cannot loop back into the pipeline.
"""

from __future__ import annotations

import sys
from typing import Final, TextIO

from ...observability import log_debug

_ERROR_LEVELS: Final[frozenset[str]] = frozenset({"error", "warn"})


class ConsoleSink:
    """Write lines to the process streams.

    When no stream is passed, ``sys.stdout`` / ``sys.stderr`` are looked up at
    write time so redirections made after installation are honoured.
    """

    def __init__(self, *, stdout: TextIO | None = None, stderr: TextIO | None = None) -> None:
        self._stdout = stdout
        self._stderr = stderr

    def write(self, level: str, line: str) -> None:
        stream = self._select(level)
        try:
            stream.write(line + "\n")
            stream.flush()
        except (OSError, ValueError) as exc:
            log_debug("console_write_failed", level=level, error=str(exc))

    def close(self) -> None:
        """Console streams belong to the process; nothing to release."""

    def _select(self, level: str) -> TextIO:
        if level in _ERROR_LEVELS:
            return self._stderr if self._stderr is not None else sys.stderr
        return self._stdout if self._stdout is not None else sys.stdout
