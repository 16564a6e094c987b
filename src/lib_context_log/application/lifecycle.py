"""Establish, mutate, capture, and restore context records.

Purpose
-------
Give entry points and application code a small vocabulary over the context
store: scoped establishment for jobs and scripts, ambient mutation of custom
fields, and a capture/restore pair for work that outlives its originating
chain (for example a thread started after a response has been sent).

Contents
--------
* :func:`with_context` / :func:`scoped_context` – explicit establishment.
* :func:`add_context` – merge custom fields into the active record.
* :func:`capture_context` / :func:`restore_context` – detach and reattach.
* :func:`wrap_with_context` – capture now, restore around every later call.

All functions are total: absent context, absent identity, and absent
correlation id are ordinary states, never errors.
"""

from __future__ import annotations

import functools
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Mapping, TypeVar

from ..domain.record import ContextRecord
from .store import bind_record, current_context, run

T = TypeVar("T")


def with_context(
    seed: Mapping[str, Any] | ContextRecord | None,
    fn: Callable[..., T],
    *args: Any,
    **kwargs: Any,
) -> T:
    """Run *fn* inside a freshly established record built from *seed*.

    ``seed`` may carry ``user_id``, ``tx_id`` and ``custom``; a missing
    ``tx_id`` is generated. Coroutine functions return an awaitable that keeps
    the record active until it completes.

    Examples
    --------
    >>> with_context({"user_id": "system", "tx_id": "batch-job-123"}, lambda: current_context().user_id)
    'system'
    """

    return run(ContextRecord.from_seed(seed), fn, *args, **kwargs)


@contextmanager
def scoped_context(
    *,
    user_id: Any = None,
    tx_id: str | None = None,
    custom: Mapping[str, Any] | None = None,
) -> Iterator[ContextRecord]:
    """Statement form of :func:`with_context` yielding the established record."""

    record = ContextRecord.from_seed({"user_id": user_id, "tx_id": tx_id, "custom": custom})
    with bind_record(record):
        yield record


def add_context(fields: Mapping[str, Any] | None = None, /, **extra: Any) -> None:
    """Merge custom fields into the active record; no-op without one.

    Lines emitted later in the same chain (including tasks forked afterwards)
    carry the fields. Lines already emitted are unaffected.

    Examples
    --------
    >>> add_context({"ignored": True})  # no active record
    >>> with scoped_context(tx_id="t-2") as record:
    ...     add_context({"plan": "pro"}, region="eu")
    ...     sorted(record.custom.items())
    [('plan', 'pro'), ('region', 'eu')]
    """

    record = current_context()
    if record is None:
        return
    merged = dict(fields or {})
    merged.update(extra)
    if merged:
        record.merge_custom(merged)


def capture_context() -> ContextRecord:
    """Return a snapshot of the active record, or an empty record."""

    record = current_context()
    if record is None:
        return ContextRecord()
    return record.snapshot()


def restore_context(captured: ContextRecord, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Re-establish *captured* for the extent of *fn*; same semantics as ``run``."""

    return run(captured, fn, *args, **kwargs)


def wrap_with_context(fn: Callable[..., T]) -> Callable[..., T]:
    """Capture the active record now and restore it around every call of *fn*.

    Useful for ``threading.Thread`` targets and executor jobs, which do not
    inherit the caller's context.
    """

    captured = capture_context()

    @functools.wraps(fn)
    def _restored(*args: Any, **kwargs: Any) -> T:
        return restore_context(captured, fn, *args, **kwargs)

    return _restored


__all__ = [
    "add_context",
    "capture_context",
    "restore_context",
    "scoped_context",
    "with_context",
    "wrap_with_context",
]
