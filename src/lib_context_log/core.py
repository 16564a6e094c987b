"""Composition root for ``lib_context_log``.

Purpose
-------
Wire configuration, sinks, the emission pipeline, and the interception layer
into the process-wide logging surface. This is the one place holding mutable
process state: the active :class:`Emitter`.

Contents
--------
* :func:`install` – validate options, build sinks, intercept ``logging``.
* :func:`uninstall` – restore ``logging``, close sinks, reset defaults.
* :func:`current_config` / :func:`is_installed` – introspection helpers.
* :func:`emit` / :func:`enabled_for` – emit through, or query the gate of,
  the active pipeline.
* :class:`ContextLogger` / :data:`log` – the explicit facade application code
  may call instead of (or alongside) the intercepted ``logging`` functions.

System Role
-----------
Configuration is write-once at startup. Calling :func:`install` again replaces
the configuration; concurrent initialisers are not synchronised.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from .adapters.interception import is_patched, logging_fields, patch_logging, restore_logging, split_arguments
from .adapters.sinks.console import ConsoleSink
from .adapters.sinks.file import FileSink
from .application.dispatch import Dispatcher
from .application.emission import Emitter
from .application.lifecycle import add_context, capture_context
from .application.ports import Sink
from .domain.config import DEFAULT_CONFIG, LogConfig
from .domain.levels import normalize_level
from .domain.record import ContextRecord
from .observability import log_info


def build_dispatcher(config: LogConfig) -> Dispatcher:
    """Create the sinks for *config*; the file sink opens its file here.

    Examples
    --------
    >>> [type(sink).__name__ for sink in build_dispatcher(LogConfig()).sinks]
    ['ConsoleSink']
    """

    sinks: list[Sink] = []
    if config.writes_file and config.file_path is not None:
        sinks.append(FileSink(config.file_path))
    if config.writes_console:
        sinks.append(ConsoleSink())
    return Dispatcher(sinks)


class _Runtime:
    """Holder for the active pipeline."""

    def __init__(self) -> None:
        self.emitter = Emitter(DEFAULT_CONFIG, build_dispatcher(DEFAULT_CONFIG))

    def swap(self, emitter: Emitter) -> None:
        previous, self.emitter = self.emitter, emitter
        previous.dispatcher.close()


_RUNTIME = _Runtime()


def install(
    config: LogConfig | None = None,
    /,
    *,
    level: str = "info",
    output: str = "console",
    file_path: str | Path | None = None,
) -> LogConfig:
    """Configure the pipeline and intercept the ``logging`` entry points.

    Why
    ----
    Call once at the application entry point, before anything logs, so every
    unmodified ``logging.info(...)`` call site carries the active context.

    Parameters
    ----------
    config:
        Prebuilt :class:`LogConfig`; when omitted one is built from the
        keyword options.
    level / output / file_path:
        See :class:`LogConfig`.

    Returns
    -------
    LogConfig
        The configuration now in effect.

    Raises
    ------
    ConfigurationError
        ``file_path`` missing for file output, or unknown output mode.
    """

    resolved = config if config is not None else LogConfig(level=level, output=output, file_path=file_path)
    _RUNTIME.swap(Emitter(resolved, build_dispatcher(resolved)))
    patch_logging(emit, enabled_for)
    log_info(
        "logging_installed",
        level=resolved.level,
        output=resolved.output,
        path=str(resolved.file_path) if resolved.file_path else None,
    )
    return resolved


def uninstall() -> None:
    """Restore the original ``logging`` functions and the default configuration."""

    restore_logging()
    _RUNTIME.swap(Emitter(DEFAULT_CONFIG, build_dispatcher(DEFAULT_CONFIG)))
    log_info("logging_uninstalled")


def shutdown() -> None:
    """Flush and close the active sinks, keeping interception in place."""

    _RUNTIME.emitter.dispatcher.close()


def is_installed() -> bool:
    return is_patched()


def current_config() -> LogConfig:
    return _RUNTIME.emitter.config


def enabled_for(level: str) -> bool:
    """Return ``True`` when *level* passes the active minimum level."""

    return _RUNTIME.emitter.enabled_for(normalize_level(level))


def emit(level: str, message: Any, data: Mapping[str, Any] | None = None) -> None:
    """Emit through the active pipeline (never raises)."""

    _RUNTIME.emitter.emit(level, message, data)


class ContextLogger:
    """Process-wide logging facade enriched with the active context.

    Each method follows the interception argument rules: the first positional
    argument is the message, a single mapping is structured data, other
    positionals become ``args`` and keyword fields are merged in.

    Examples
    --------
    ``log.info("contact created", {"contact_id": 42})``
    ``log.warn("slow query", elapsed_ms=812)``
    """

    def debug(self, *args: Any, **fields: Any) -> None:
        self._emit("debug", args, fields)

    def info(self, *args: Any, **fields: Any) -> None:
        self._emit("info", args, fields)

    def warn(self, *args: Any, **fields: Any) -> None:
        self._emit("warn", args, fields)

    def error(self, *args: Any, **fields: Any) -> None:
        self._emit("error", args, fields)

    warning = warn
    log = info

    @staticmethod
    def get_context() -> ContextRecord:
        """Snapshot of the active record, for handing to background work."""

        return capture_context()

    @staticmethod
    def add_context(fields: Mapping[str, Any] | None = None, /, **extra: Any) -> None:
        """Merge fields into the active record (no-op outside a chain)."""

        add_context(fields, **extra)

    @staticmethod
    def _emit(level: str, args: tuple[Any, ...], fields: Mapping[str, Any]) -> None:
        if not enabled_for(level):
            return
        message, data = split_arguments(args, logging_fields(fields))
        emit(level, message, data)


log = ContextLogger()
"""Shared facade instance."""


__all__ = [
    "ContextLogger",
    "build_dispatcher",
    "current_config",
    "emit",
    "enabled_for",
    "install",
    "is_installed",
    "log",
    "shutdown",
    "uninstall",
]
