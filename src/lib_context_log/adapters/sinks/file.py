"""Append-only file sink.

Purpose
-------
Persist wire lines to a single file, one event per line. The parent directory
is created and the file opened when the sink is built, that is at
configuration time, never per line.

Delivery is best-effort: write failures (disk full, permission revoked, closed
handle) are reported to the package diagnostics logger and dropped so a logging
side channel cannot destabilise the host program. Rotation is left to external
tooling.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import TextIO

from ...observability import log_debug, log_error


class FileSink:
    """Line-buffered append-only writer for one log file."""

    def __init__(self, path: str | Path) -> None:
        """Create parent directories and open *path* for appending.

        Raises
        ------
        OSError
            When the directory cannot be created or the file cannot be opened;
            this happens during initialisation, where failing loudly is wanted.
        """

        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._handle: TextIO | None = self.path.open("a", encoding="utf-8", buffering=1)
        self._lock = threading.Lock()
        log_debug("file_sink_opened", path=str(self.path))

    @property
    def closed(self) -> bool:
        return self._handle is None

    def write(self, level: str, line: str) -> None:
        with self._lock:
            if self._handle is None:
                log_debug("file_sink_closed_write_dropped", path=str(self.path), level=level)
                return
            try:
                self._handle.write(line + "\n")
            except (OSError, ValueError) as exc:
                log_error("file_sink_write_failed", path=str(self.path), level=level, error=str(exc))

    def close(self) -> None:
        with self._lock:
            handle, self._handle = self._handle, None
        if handle is None:
            return
        try:
            handle.close()
        except OSError as exc:
            log_error("file_sink_close_failed", path=str(self.path), error=str(exc))
