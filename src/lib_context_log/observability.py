"""Package diagnostics routed through the standard :mod:`logging` package.

Purpose
    Report what the library itself does (fallback events, dropped reserved
    fields, sink failures, installation) without ever going through the
    intercepted entry points it installs, and without printing anything unless
    the host application attaches a handler.

Contents
    - ``get_logger``: returns the shared package logger (quiet by default).
    - ``log_debug`` / ``log_info`` / ``log_error``: emit structured entries via a
      single private emitter.

System Integration
    Diagnostics use :class:`logging.Logger` methods, never the module-level
    ``logging.info`` family, so they cannot recurse into the interception layer.
    The active correlation identifier is attached so diagnostics can be joined
    with the application lines they concern.
"""

from __future__ import annotations

import logging
from typing import Any, Final, Mapping

from .application.store import current_context

_LOGGER: Final[logging.Logger] = logging.getLogger("lib_context_log")
_LOGGER.addHandler(logging.NullHandler())


def get_logger() -> logging.Logger:
    """Expose the package logger so applications may attach handlers.

    Why
        Leaves the library silent by default while giving host applications full
        control over handler and formatter configuration.
    """

    return _LOGGER


def log_debug(message: str, **fields: Any) -> None:
    """Emit a structured debug diagnostic that includes the correlation id."""

    _emit(logging.DEBUG, message, fields)


def log_info(message: str, **fields: Any) -> None:
    """Emit a structured info diagnostic that includes the correlation id."""

    _emit(logging.INFO, message, fields)


def log_error(message: str, **fields: Any) -> None:
    """Emit a structured error diagnostic that includes the correlation id."""

    _emit(logging.ERROR, message, fields)


def _emit(level: int, message: str, fields: Mapping[str, Any]) -> None:
    """Send a diagnostic through the package logger with contextual metadata."""

    _LOGGER.log(level, message, extra={"context": _with_correlation(fields)})


def _with_correlation(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Attach the active correlation identifier to the provided fields."""

    record = current_context()
    context: dict[str, Any] = {"tx_id": record.tx_id if record is not None else None}
    context.update(fields)
    return context
