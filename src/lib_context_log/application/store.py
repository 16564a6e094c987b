"""Causally-scoped storage for the active :class:`ContextRecord`.

Purpose
-------
Hold at most one active record per asynchronous execution chain. The store is
a :class:`contextvars.ContextVar`: asyncio copies the current context into every
task, ``call_soon``/``call_later`` callback and ``asyncio.to_thread`` call, so
code scheduled from inside a chain observes the chain's record with no explicit
re-attachment, while concurrently interleaved chains stay isolated.

Contents
--------
* :data:`ACTIVE_RECORD` – the context variable backing the store.
* :func:`current_context` – read the active record.
* :func:`bind_record` – bind a record for the extent of a ``with`` block.
* :func:`run` – call a function (sync or async) with a record active.

System Role
-----------
Lowest application layer: the lifecycle API establishes records through
:func:`run`/:func:`bind_record`; the emission pipeline reads them through
:func:`current_context`.
"""

from __future__ import annotations

import inspect
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Awaitable, Callable, Iterator, TypeVar

from ..domain.record import ContextRecord

T = TypeVar("T")

ACTIVE_RECORD: ContextVar[ContextRecord | None] = ContextVar("lib_context_log_record", default=None)
"""Record visible to the current execution chain (``None`` outside any chain)."""


def current_context() -> ContextRecord | None:
    """Return the record active for the calling chain, or ``None``.

    Examples
    --------
    >>> current_context() is None
    True
    """

    return ACTIVE_RECORD.get()


@contextmanager
def bind_record(record: ContextRecord) -> Iterator[ContextRecord]:
    """Make *record* active for the ``with`` block and restore the previous one.

    Tasks and callbacks created inside the block keep *record* after the block
    exits because they run on their own copy of the context.

    Examples
    --------
    >>> with bind_record(ContextRecord(tx_id="t-1")) as bound:
    ...     current_context() is bound
    True
    >>> current_context() is None
    True
    """

    token = ACTIVE_RECORD.set(record)
    try:
        yield record
    finally:
        ACTIVE_RECORD.reset(token)


def run(record: ContextRecord, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Call ``fn(*args, **kwargs)`` with *record* active and return its outcome.

    Why
    ----
    Entry points (requests, jobs, restored callbacks) need one primitive that
    works for both plain functions and coroutine functions.

    What
    ----
    The synchronous part of ``fn`` runs inside :func:`bind_record`. When ``fn``
    returns a coroutine, the coroutine is wrapped so *record* is bound again
    for its whole execution, whichever task awaits it. Any other result,
    including a ``Task`` or ``Future`` that ``fn`` scheduled, is returned
    exactly as ``fn`` produced it. Exceptions propagate unchanged.

    Examples
    --------
    >>> run(ContextRecord(tx_id="job-7"), lambda: current_context().tx_id)
    'job-7'
    """

    with bind_record(record):
        result = fn(*args, **kwargs)
    if inspect.iscoroutine(result):
        return _await_bound(record, result)  # type: ignore[return-value]
    return result


async def _await_bound(record: ContextRecord, awaitable: Awaitable[T]) -> T:
    """Await *awaitable* with *record* bound in the awaiting task."""

    with bind_record(record):
        return await awaitable


__all__ = ["ACTIVE_RECORD", "bind_record", "current_context", "run"]
