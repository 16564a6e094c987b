"""Interception of the module-level :mod:`logging` entry points.

Purpose
-------
Route unmodified call sites such as ``logging.info("contact created", {...})``
through the context-aware emission pipeline. ``logging.debug``,
``logging.info``, ``logging.warning`` and ``logging.error`` are replaced;
``logging.critical`` maps to ``error``.

Argument rules (shared with the ``log`` facade)
-----------------------------------------------
* The first positional argument is the message, coerced to text.
* A single remaining mapping argument is the structured data, used verbatim.
* Any other remaining positional arguments become ``data["args"]``.
* Keyword fields are merged into the data, with the stdlib ``logging``
  keywords translated: ``extra`` is merged, ``exc_info`` is rendered
  as a traceback string, ``stack_info`` and ``stacklevel`` are ignored.

The original functions are captured once, at import time, and unwrapped if an
adapter is found, so installing twice never wraps an adapter. :func:`original`
exposes them for host code that needs the plain stdlib behaviour while
interception is active. The sinks do not use them: they write to
``sys.stdout``/``sys.stderr`` or their file directly, so an emitted line never
passes back through ``logging``.

Named loggers (``logging.getLogger(__name__).info(...)``) are not affected.
"""

from __future__ import annotations

import logging
import sys
import traceback
from typing import Any, Callable, Final, Mapping, Optional

from ..domain.wire import ARGS

EmitFn = Callable[[str, Any, Optional[Mapping[str, Any]]], None]
EnabledFn = Callable[[str], bool]

ENTRY_POINTS: Final[Mapping[str, str]] = {
    "debug": "debug",
    "info": "info",
    "warning": "warn",
    "error": "error",
    "critical": "error",
}
"""``logging`` function name mapped to the wire level it emits."""

_ADAPTER_MARKER: Final[str] = "__lib_context_log_original__"


def _capture_originals() -> dict[str, Callable[..., Any]]:
    """Return the pre-interception functions, unwrapping any installed adapter."""

    originals: dict[str, Callable[..., Any]] = {}
    for name in ENTRY_POINTS:
        current = getattr(logging, name)
        originals[name] = getattr(current, _ADAPTER_MARKER, current)
    return originals


_ORIGINALS: Final[dict[str, Callable[..., Any]]] = _capture_originals()


def split_arguments(args: tuple[Any, ...], fields: Mapping[str, Any] | None = None) -> tuple[Any, Mapping[str, Any] | None]:
    """Split positional call arguments into ``(message, data)``.

    Examples
    --------
    >>> split_arguments(("contact created", {"id": 7}))
    ('contact created', {'id': 7})
    >>> split_arguments(("retry", 1, "x"))
    ('retry', {'args': [1, 'x']})
    >>> split_arguments(("done",), {"elapsed_ms": 12})
    ('done', {'elapsed_ms': 12})
    """

    message: Any = args[0] if args else ""
    rest = args[1:]
    data: Mapping[str, Any] | None
    if len(rest) == 1 and isinstance(rest[0], Mapping):
        data = rest[0]
    elif rest:
        data = {ARGS: list(rest)}
    else:
        data = None
    if fields:
        data = {**(data or {}), **fields}
    return message, data


def logging_fields(kwargs: Mapping[str, Any]) -> dict[str, Any]:
    """Translate stdlib ``logging`` keyword arguments into structured fields."""

    fields: dict[str, Any] = {}
    for key, value in kwargs.items():
        if key in ("stack_info", "stacklevel"):
            continue
        if key == "extra":
            if isinstance(value, Mapping):
                fields.update(value)
            continue
        if key == "exc_info":
            rendered = _render_exc_info(value)
            if rendered is not None:
                fields["exc_info"] = rendered
            continue
        fields[key] = value
    return fields


def _render_exc_info(value: Any) -> str | None:
    if not value:
        return None
    if isinstance(value, BaseException):
        exc_type, exc, tb = type(value), value, value.__traceback__
    elif isinstance(value, tuple) and len(value) == 3:
        exc_type, exc, tb = value
    else:
        exc_type, exc, tb = sys.exc_info()
    if exc_type is None:
        return None
    try:
        return "".join(traceback.format_exception(exc_type, exc, tb)).rstrip()
    except Exception:  # noqa: BLE001 - malformed exc_info tuple from the caller
        return repr(value)


def make_adapter(name: str, emit: EmitFn, enabled: Optional[EnabledFn] = None) -> Callable[..., None]:
    """Build the replacement for ``logging.<name>``.

    When *enabled* reports the level as filtered out, the call returns before
    any argument is translated, so suppressed ``exc_info`` calls never format
    a traceback.
    """

    level = ENTRY_POINTS[name]

    def adapter(*args: Any, **kwargs: Any) -> None:
        if enabled is not None and not enabled(level):
            return
        message, data = split_arguments(args, logging_fields(kwargs))
        emit(level, message, data)

    adapter.__name__ = name
    adapter.__qualname__ = name
    adapter.__doc__ = f"Context-aware replacement for logging.{name}."
    setattr(adapter, _ADAPTER_MARKER, _ORIGINALS[name])
    return adapter


def patch_logging(emit: EmitFn, enabled: Optional[EnabledFn] = None) -> None:
    """Replace the ``logging`` entry points with adapters calling *emit*."""

    for name in ENTRY_POINTS:
        setattr(logging, name, make_adapter(name, emit, enabled))


def restore_logging() -> None:
    """Put the captured original functions back."""

    for name, function in _ORIGINALS.items():
        setattr(logging, name, function)


def is_patched() -> bool:
    return any(getattr(logging, name) is not function for name, function in _ORIGINALS.items())


def original(name: str) -> Callable[..., Any]:
    """Return the pre-interception ``logging.<name>`` function."""

    return _ORIGINALS[name]


__all__ = [
    "ENTRY_POINTS",
    "is_patched",
    "logging_fields",
    "make_adapter",
    "original",
    "patch_logging",
    "restore_logging",
    "split_arguments",
]
