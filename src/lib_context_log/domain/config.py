"""Domain-level configuration value object.

Purpose
-------
Anchor the immutable :class:`LogConfig` that the composition root reads on
every emission. The module contains no I/O: creating directories and opening
files is left to the sink adapters.

Contents
--------
* :data:`OUTPUT_MODES` – accepted destination modes.
* :class:`LogConfig` – validated, write-once process configuration.
* :data:`DEFAULT_CONFIG` – console output at ``info`` level.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .errors import ConfigurationError
from .levels import DEFAULT_LEVEL, normalize_level

OUTPUT_MODES: Final[tuple[str, ...]] = ("console", "file", "both")
_FILE_MODES: Final[frozenset[str]] = frozenset({"file", "both"})


@dataclass(frozen=True, slots=True)
class LogConfig:
    """Process-wide logging options, validated at construction.

    Why
    ----
    Misconfiguration must surface at initialisation rather than as silently
    missing log lines later on.

    What
    ----
    Normalises ``level`` (unknown names fall back to ``info``), validates
    ``output`` and resolves ``file_path`` to an absolute path.

    Parameters
    ----------
    level:
        Minimum level: ``debug``, ``info``, ``warn``, ``error`` or ``none``.
    output:
        ``console``, ``file`` or ``both``.
    file_path:
        Destination file; required iff ``output`` writes to a file.

    Examples
    --------
    >>> LogConfig(level="WARNING").level
    'warn'
    >>> LogConfig(output="file")
    Traceback (most recent call last):
    ...
    lib_context_log.domain.errors.ConfigurationError: file_path is required when output is 'file'
    """

    level: str = DEFAULT_LEVEL
    output: str = "console"
    file_path: Path | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "level", normalize_level(self.level))
        output = str(self.output).strip().lower()
        if output not in OUTPUT_MODES:
            raise ConfigurationError(f"output must be one of {', '.join(OUTPUT_MODES)}; got {self.output!r}")
        object.__setattr__(self, "output", output)
        if output in _FILE_MODES:
            if not self.file_path:
                raise ConfigurationError(f"file_path is required when output is {output!r}")
            object.__setattr__(self, "file_path", Path(self.file_path).expanduser().resolve())
        elif self.file_path is not None:
            object.__setattr__(self, "file_path", Path(self.file_path).expanduser().resolve())

    @property
    def writes_console(self) -> bool:
        return self.output in ("console", "both")

    @property
    def writes_file(self) -> bool:
        return self.output in _FILE_MODES


DEFAULT_CONFIG: Final[LogConfig] = LogConfig()
"""Configuration active before :func:`lib_context_log.install` is called."""
