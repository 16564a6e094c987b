"""Cycle-safe JSON encoding for log events.

Purpose
-------
Turn an assembled event into a single compact JSON line without ever raising
on reference cycles. Values JSON cannot represent natively are either encoded
to a stable textual form or rejected so the emission pipeline can fall back to
a minimal event.

Contents
--------
* :data:`CIRCULAR_MARKER` – placeholder written in place of cyclic references.
* :func:`break_cycles` – returns a cycle-free copy of nested containers.
* :func:`dumps_event` – compact JSON encoding used for every wire line.
"""

from __future__ import annotations

import datetime as _dt
import enum
import json
import math
import uuid
from collections.abc import Mapping
from decimal import Decimal
from pathlib import PurePath
from typing import Any, Final

CIRCULAR_MARKER: Final[str] = "[Circular]"


def break_cycles(value: Any, _ancestors: frozenset[int] = frozenset()) -> Any:
    """Return a copy of *value* with cyclic references replaced by a marker.

    Only true cycles are replaced: the same object appearing twice in sibling
    branches is encoded twice. Non-finite floats become ``None`` to keep the
    output strict JSON.

    Examples
    --------
    >>> payload = {"name": "loop"}
    >>> payload["self"] = payload
    >>> break_cycles(payload)
    {'name': 'loop', 'self': '[Circular]'}
    >>> shared = [1]
    >>> break_cycles({"a": shared, "b": shared})
    {'a': [1], 'b': [1]}
    """

    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if not isinstance(value, (Mapping, list, tuple)):
        return value
    marker = id(value)
    if marker in _ancestors:
        return CIRCULAR_MARKER
    ancestors = _ancestors | {marker}
    if isinstance(value, Mapping):
        return {key: break_cycles(item, ancestors) for key, item in value.items()}
    return [break_cycles(item, ancestors) for item in value]


def dumps_event(event: Mapping[str, Any]) -> str:
    """Encode *event* as one compact JSON line.

    Raises
    ------
    TypeError / ValueError / RecursionError
        When a value has no JSON representation; callers convert these into a
        fallback event.

    Examples
    --------
    >>> dumps_event({"msg": "hi", "when": _dt.date(2024, 5, 1)})
    '{"msg":"hi","when":"2024-05-01"}'
    """

    return json.dumps(
        break_cycles(event),
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
        default=_encode_value,
    )


def _encode_value(value: Any) -> Any:
    """Encode well-known non-JSON values; reject everything else."""

    if isinstance(value, (_dt.datetime, _dt.date, _dt.time)):
        return value.isoformat()
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, (uuid.UUID, PurePath, Decimal)):
        return str(value)
    if isinstance(value, (set, frozenset)):
        return [break_cycles(item) for item in value]
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8", errors="replace")
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


__all__ = ["CIRCULAR_MARKER", "break_cycles", "dumps_event"]
