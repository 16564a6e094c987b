"""Public package surface for context-enriched structured logging.

Importing :mod:`lib_context_log` exposes the lifecycle API (establish, mutate,
capture, restore), the ``log`` facade, :func:`install` for intercepting the
module-level :mod:`logging` functions, and the request middleware. Both
``import lib_context_log`` and ``python -m lib_context_log`` reach the same
composition root.
"""

from __future__ import annotations

from .adapters.http.request import (
    RESPONSE_HEADER,
    RequestContextMiddleware,
    RequestContextOptions,
    add_request_context,
    establish_from_request,
)
from .application.lifecycle import (
    add_context,
    capture_context,
    restore_context,
    scoped_context,
    with_context,
    wrap_with_context,
)
from .application.store import current_context, run
from .core import ContextLogger, current_config, emit, install, is_installed, log, shutdown, uninstall
from .domain.config import LogConfig
from .domain.errors import ConfigurationError, ContextLogError, InvalidEvent
from .domain.record import ContextRecord
from .domain.wire import RESERVED_FIELDS, parse_event
from .observability import get_logger

__all__ = [
    "RESERVED_FIELDS",
    "RESPONSE_HEADER",
    "ConfigurationError",
    "ContextLogError",
    "ContextLogger",
    "ContextRecord",
    "InvalidEvent",
    "LogConfig",
    "RequestContextMiddleware",
    "RequestContextOptions",
    "add_context",
    "add_request_context",
    "capture_context",
    "current_config",
    "current_context",
    "emit",
    "establish_from_request",
    "get_logger",
    "install",
    "is_installed",
    "log",
    "parse_event",
    "restore_context",
    "run",
    "scoped_context",
    "shutdown",
    "uninstall",
    "with_context",
    "wrap_with_context",
]
