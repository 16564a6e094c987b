"""Emission pipeline tests: gating, reserved fields, defensive serialization."""

from __future__ import annotations

import asyncio
import logging
import re

import pytest
from hypothesis import given
from hypothesis import strategies as st

from lib_context_log.application.emission import assemble_event, serialize_event
from lib_context_log.application.lifecycle import add_context, scoped_context, with_context
from lib_context_log.domain.record import ContextRecord
from lib_context_log.domain.serialization import CIRCULAR_MARKER
from lib_context_log.domain.wire import parse_event

TS_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$")
CUSTOM_KEYS = st.one_of(st.sampled_from(["ts", "level", "msg", "userId", "txId"]), st.text(min_size=1, max_size=6))


def test_event_outside_chain_has_null_identity(make_emitter, memory_sink) -> None:
    make_emitter().emit("info", "boot")
    (event,) = memory_sink.events()
    assert event["userId"] is None and event["txId"] is None
    assert event["msg"] == "boot" and event["level"] == "info"
    assert TS_PATTERN.match(event["ts"])


def test_level_gate(make_emitter, memory_sink) -> None:
    emitter = make_emitter("warn")
    emitter.emit("debug", "d")
    emitter.emit("info", "i")
    emitter.emit("warn", "w")
    emitter.emit("error", "e")
    assert [event["msg"] for event in memory_sink.events()] == ["w", "e"]


def test_level_none_silences_everything(make_emitter, memory_sink) -> None:
    make_emitter("none").emit("error", "e")
    assert memory_sink.lines == []


def test_added_context_included_only_in_its_chain(make_emitter, memory_sink) -> None:
    emitter = make_emitter()
    with scoped_context(user_id="u1", tx_id="t1"):
        add_context(contact_id=42)
        emitter.emit("info", "inside")
    emitter.emit("info", "outside")
    inside, outside = memory_sink.events()
    assert inside["contact_id"] == 42
    assert "contact_id" not in outside


def test_reserved_fields_cannot_be_spoofed(make_emitter, memory_sink) -> None:
    emitter = make_emitter()
    with scoped_context(user_id="alex_123", tx_id="abc-789"):
        add_context({"msg": "spoof", "level": "error", "userId": "mallory", "txId": "forged", "ts": "x", "ok": 1})
        emitter.emit("info", "real")
    (event,) = memory_sink.events()
    assert event["msg"] == "real"
    assert event["level"] == "info"
    assert event["userId"] == "alex_123"
    assert event["txId"] == "abc-789"
    assert event["ts"] != "x"
    assert event["ok"] == 1


def test_dropped_reserved_fields_reported_to_diagnostics(make_emitter, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="lib_context_log")
    with scoped_context(tx_id="t1"):
        add_context(msg="spoof")
        make_emitter().emit("info", "real")
    assert any(record.getMessage() == "reserved_context_fields_dropped" for record in caplog.records)


@given(st.dictionaries(CUSTOM_KEYS, st.integers(), max_size=6))
def test_custom_context_never_overrides_authoritative_fields(custom) -> None:
    record = ContextRecord(user_id="u", tx_id="t", custom=custom)
    event = assemble_event("warn", "message", {"k": "v"}, record, "2024-01-01T00:00:00.000Z")
    assert (event["ts"], event["level"], event["userId"], event["txId"], event["msg"]) == (
        "2024-01-01T00:00:00.000Z",
        "warn",
        "u",
        "t",
        "message",
    )


def test_caller_data_and_args_are_merged(make_emitter, memory_sink) -> None:
    make_emitter().emit("info", "with data", {"contact_id": 7, "args": [1, 2]})
    (event,) = memory_sink.events()
    assert event["contact_id"] == 7
    assert event["args"] == [1, 2]


def test_caller_data_cannot_replace_message(make_emitter, memory_sink) -> None:
    make_emitter().emit("info", "real", {"msg": "other"})
    assert memory_sink.events()[0]["msg"] == "real"


def test_circular_data_emits_marker(make_emitter, memory_sink) -> None:
    payload: dict[str, object] = {"id": 1}
    payload["parent"] = payload
    make_emitter().emit("info", "cyclic", {"payload": payload})
    (event,) = memory_sink.events()
    assert event["payload"] == {"id": 1, "parent": CIRCULAR_MARKER}


def test_unserializable_data_produces_fallback_event(make_emitter, memory_sink) -> None:
    with scoped_context(user_id="u1", tx_id="t1"):
        make_emitter().emit("info", "weird", {"obj": object()})
    (event,) = memory_sink.events()
    assert event == {
        "ts": event["ts"],
        "level": "error",
        "userId": "u1",
        "txId": "t1",
        "msg": "Failed to serialize log entry",
        "originalMsg": "weird",
        "originalLevel": "info",
    }


def test_emit_never_raises_when_sink_fails(make_emitter) -> None:
    class ExplodingSink:
        def write(self, level: str, line: str) -> None:
            raise RuntimeError("sink down")

        def close(self) -> None:
            pass

    emitter = make_emitter()
    emitter.dispatcher = type(emitter.dispatcher)([ExplodingSink()])
    emitter.emit("error", "still fine")


def test_unprintable_message_is_coerced(make_emitter, memory_sink) -> None:
    class Broken:
        def __str__(self) -> str:
            raise ValueError("no text")

    make_emitter().emit("info", Broken())
    assert memory_sink.events()[0]["msg"] == "<unprintable Broken>"


def test_serialize_event_returns_valid_json_line() -> None:
    line = serialize_event({"ts": "t", "level": "info", "userId": None, "txId": None, "msg": "m"})
    assert "\n" not in line


def test_interleaved_chains_report_their_own_identity(make_emitter, memory_sink) -> None:
    emitter = make_emitter()

    async def handler(name: str) -> None:
        for step in range(3):
            await asyncio.sleep(0)
            emitter.emit("info", f"{name}-{step}")

    async def main() -> None:
        await asyncio.gather(
            with_context({"user_id": "A", "tx_id": "tx-A"}, handler, "A"),
            with_context({"user_id": "B", "tx_id": "tx-B"}, handler, "B"),
        )

    asyncio.run(main())
    events = memory_sink.events()
    assert len(events) == 6
    for event in events:
        owner = event["msg"].split("-")[0]
        assert event["userId"] == owner
        assert event["txId"] == f"tx-{owner}"


def test_caller_data_cannot_break_wire_contract(make_emitter, memory_sink) -> None:
    """Caller keys named ``level`` or ``ts`` must not make the line unreadable to consumers."""

    make_emitter().emit("info", "level up", {"level": 3, "ts": None, "player": "p1"})
    (level, line) = memory_sink.lines[0]
    event = parse_event(line)
    assert level == "info"
    assert event["level"] == "info"
    assert TS_PATTERN.match(event["ts"])
    assert event["player"] == "p1"
