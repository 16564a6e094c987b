"""Turn a raw log call plus the active record into one structured line.

Purpose
-------
Apply level gating, assemble the event, protect the authoritative fields from
custom context, serialize defensively, and hand the line to the dispatcher.

Contents
--------
* :func:`assemble_event` – build the event mapping for a log call.
* :func:`serialize_event` – encode an event, degrading to a fallback line.
* :class:`Emitter` – the pipeline bound to one configuration and dispatcher.

System Role
-----------
Invoked by the ``log`` facade and by the intercepted ``logging`` entry points.
This path runs from arbitrary, possibly buggy call sites, so
:meth:`Emitter.emit` never raises.
"""

from __future__ import annotations

import datetime as _dt
from typing import Any, Mapping

from ..domain.config import LogConfig
from ..domain.levels import is_enabled, normalize_level
from ..domain.record import ContextRecord
from ..domain.serialization import dumps_event
from ..domain.wire import FALLBACK_MESSAGE, LEVEL, MSG, RESERVED_FIELDS, TS, TX_ID, USER_ID
from ..observability import log_debug, log_error
from .dispatch import Dispatcher
from .store import current_context


def utc_timestamp() -> str:
    """Return the current UTC time as ISO-8601 with milliseconds and ``Z``."""

    now = _dt.datetime.now(_dt.timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def assemble_event(
    level: str,
    message: str,
    data: Mapping[str, Any] | None,
    record: ContextRecord | None,
    ts: str,
) -> dict[str, Any]:
    """Build the event for one log call.

    Why
    ----
    The authoritative fields must win over anything contributed through custom
    context, whatever code path populated it.

    What
    ----
    Fixed fields come first, then caller *data*, which may set ``userId`` or
    ``txId`` for the line but never ``ts``, ``level`` or ``msg``, so every line
    stays a valid wire event. Custom fields are merged last; keys named in
    :data:`RESERVED_FIELDS` are dropped.

    Examples
    --------
    >>> record = ContextRecord(user_id="u1", tx_id="t1", custom={"msg": "spoof", "plan": "pro"})
    >>> event = assemble_event("info", "real", None, record, "2024-01-01T00:00:00.000Z")
    >>> event["msg"], event["plan"]
    ('real', 'pro')
    """

    event: dict[str, Any] = {
        TS: ts,
        LEVEL: level,
        USER_ID: record.user_id if record is not None else None,
        TX_ID: record.tx_id if record is not None else None,
        MSG: message,
    }
    if data:
        event.update(data)
        event.update({TS: ts, LEVEL: level, MSG: message})
    if record is not None and record.custom:
        dropped = []
        for key, value in record.custom.items():
            if key in RESERVED_FIELDS:
                dropped.append(key)
                continue
            event[key] = value
        if dropped:
            log_debug("reserved_context_fields_dropped", fields=sorted(dropped))
    return event


def serialize_event(event: Mapping[str, Any]) -> str:
    """Encode *event*, returning a minimal fallback line if encoding fails.

    Examples
    --------
    >>> serialize_event({"ts": "t", "level": "info", "userId": None, "txId": None, "msg": "m", "bad": object()})
    '{"ts":"t","level":"error","userId":null,"txId":null,"msg":"Failed to serialize log entry","originalMsg":"m","originalLevel":"info"}'
    """

    try:
        return dumps_event(event)
    except (TypeError, ValueError, RecursionError) as exc:
        log_error("event_serialization_failed", error=f"{type(exc).__name__}: {exc}")
        return dumps_event(_fallback_event(event))


def _fallback_event(event: Mapping[str, Any]) -> dict[str, Any]:
    """Keep only the fixed fields plus an error-level notice."""

    return {
        TS: str(event.get(TS)),
        LEVEL: "error",
        USER_ID: _plain(event.get(USER_ID)),
        TX_ID: _plain(event.get(TX_ID)),
        MSG: FALLBACK_MESSAGE,
        "originalMsg": str(event.get(MSG)),
        "originalLevel": str(event.get(LEVEL)),
    }


def _plain(value: Any) -> Any:
    """Return *value* when it is a JSON scalar, otherwise its text form."""

    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


class Emitter:
    """Emission pipeline bound to a configuration and a dispatcher."""

    def __init__(self, config: LogConfig, dispatcher: Dispatcher) -> None:
        self.config = config
        self.dispatcher = dispatcher

    def enabled_for(self, level: str) -> bool:
        return is_enabled(level, self.config.level)

    def emit(self, level: str, message: Any, data: Mapping[str, Any] | None = None) -> None:
        """Emit one event for the active chain; never raises.

        Parameters
        ----------
        level:
            ``debug``, ``info``, ``warn`` or ``error`` (aliases such as
            ``warning`` are normalised).
        message:
            Coerced to text.
        data:
            Structured fields merged into the event.
        """

        level = normalize_level(level)
        if not self.enabled_for(level):
            return
        try:
            event = assemble_event(level, _as_text(message), data, current_context(), utc_timestamp())
            line = serialize_event(event)
            self.dispatcher.dispatch(level, line)
        except Exception as exc:  # noqa: BLE001 - logging must not break the host program
            log_error("event_emission_failed", level=level, error=f"{type(exc).__name__}: {exc}")


def _as_text(message: Any) -> str:
    try:
        return message if isinstance(message, str) else str(message)
    except Exception:  # noqa: BLE001 - broken __str__ on a caller object
        return f"<unprintable {type(message).__name__}>"


__all__ = ["Emitter", "assemble_event", "serialize_event", "utc_timestamp"]
