from __future__ import annotations

import pytest

from lib_context_log.domain.errors import InvalidEvent
from lib_context_log.domain.wire import RESERVED_FIELDS, parse_event

VALID = '{"ts":"2024-01-01T00:00:00.000Z","level":"info","userId":"alex_123","txId":"abc-789","msg":"contact created"}'


def test_parse_valid_event() -> None:
    event = parse_event(VALID)
    assert event["userId"] == "alex_123"
    assert event["msg"] == "contact created"


@pytest.mark.parametrize(
    "line",
    [
        "not json",
        "[1, 2]",
        '{"ts":"t","level":"info","msg":"m"}',
        '{"ts":"t","level":"fatal","userId":null,"txId":null,"msg":"m"}',
        '{"ts":"t","level":"info","userId":null,"txId":null,"msg":3}',
        '{"ts":"t","level":"info","userId":null,"txId":null,"msg":"m","args":"x"}',
    ],
)
def test_parse_rejects_malformed_lines(line: str) -> None:
    with pytest.raises(InvalidEvent):
        parse_event(line)


def test_reserved_fields_cover_authoritative_keys() -> None:
    assert RESERVED_FIELDS == {"ts", "level", "msg", "userId", "txId"}
