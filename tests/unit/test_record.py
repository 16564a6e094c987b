"""Unit tests for the propagated context record value object."""

from __future__ import annotations

from lib_context_log.domain.levels import is_enabled, normalize_level
from lib_context_log.domain.record import ContextRecord


def test_from_seed_uses_values_verbatim() -> None:
    record = ContextRecord.from_seed({"user_id": "system", "tx_id": "batch-job-123", "custom": {"job": "nightly"}})
    assert record.user_id == "system"
    assert record.tx_id == "batch-job-123"
    assert record.custom == {"job": "nightly"}


def test_from_seed_generates_distinct_correlation_ids() -> None:
    first = ContextRecord.from_seed({})
    second = ContextRecord.from_seed(None)
    assert first.tx_id and second.tx_id
    assert first.tx_id != second.tx_id
    assert first.user_id is None


def test_merge_custom_replaces_dict_so_snapshots_stay_intact() -> None:
    record = ContextRecord(tx_id="t1", custom={"a": 1})
    snapshot = record.snapshot()
    record.merge_custom({"a": 2, "b": 3})
    assert record.custom == {"a": 2, "b": 3}
    assert snapshot.custom == {"a": 1}


def test_level_helpers() -> None:
    assert normalize_level("critical") == "error"
    assert normalize_level(None) == "info"
    assert is_enabled("warn", "warn")
    assert not is_enabled("info", "warn")
    assert not is_enabled("error", "none")
