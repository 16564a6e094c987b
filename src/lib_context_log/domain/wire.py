"""Wire format shared by emitters and downstream consumers.

Every emitted line is one self-contained JSON object. The fixed fields below
are authoritative: custom context can never replace them.
"""

from __future__ import annotations

import json
from typing import Any, Final

from .errors import InvalidEvent
from .levels import EVENT_LEVELS

TS: Final[str] = "ts"
LEVEL: Final[str] = "level"
USER_ID: Final[str] = "userId"
TX_ID: Final[str] = "txId"
MSG: Final[str] = "msg"
ARGS: Final[str] = "args"

RESERVED_FIELDS: Final[frozenset[str]] = frozenset({TS, LEVEL, MSG, USER_ID, TX_ID})
"""Event fields custom context may not overwrite."""

FALLBACK_MESSAGE: Final[str] = "Failed to serialize log entry"


def parse_event(line: str) -> dict[str, Any]:
    """Parse and validate one wire line, returning the event mapping.

    Examples
    --------
    >>> parse_event('{"ts":"2024-01-01T00:00:00.000Z","level":"info","userId":null,"txId":"t1","msg":"hi"}')["txId"]
    't1'
    >>> parse_event('[]')
    Traceback (most recent call last):
    ...
    lib_context_log.domain.errors.InvalidEvent: event must be a JSON object
    """

    try:
        event = json.loads(line)
    except ValueError as exc:
        raise InvalidEvent(f"line is not valid JSON: {exc}") from exc
    if not isinstance(event, dict):
        raise InvalidEvent("event must be a JSON object")
    missing = sorted(name for name in RESERVED_FIELDS if name not in event)
    if missing:
        raise InvalidEvent(f"event is missing fields: {', '.join(missing)}")
    if event[LEVEL] not in EVENT_LEVELS:
        raise InvalidEvent(f"unknown level {event[LEVEL]!r}")
    if not isinstance(event[MSG], str) or not isinstance(event[TS], str):
        raise InvalidEvent("ts and msg must be strings")
    if ARGS in event and not isinstance(event[ARGS], list):
        raise InvalidEvent("args must be a list when present")
    return event
