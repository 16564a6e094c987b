"""Context record value object propagated along a causal chain.

Purpose
-------
Describe the bundle every log line is enriched with: who is acting
(``user_id``), which logical operation the work belongs to (``tx_id``), and
free-form business fields contributed while the operation runs (``custom``).

Contents
--------
* :class:`ContextRecord` – the propagated record.
* :func:`new_correlation_id` – default correlation identifier generator.

System Role
-----------
Records are created by the lifecycle API, stored by the context store, and read
by the emission pipeline. The record carries no back-reference to its owner, so
it is reclaimed as soon as no suspended work references it.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Mapping


def new_correlation_id() -> str:
    """Return a fresh random correlation identifier (UUID4 string)."""

    return str(uuid.uuid4())


@dataclass(slots=True)
class ContextRecord:
    """Identity, correlation id, and custom fields shared by one causal chain.

    Why
    ----
    The emission pipeline needs a single object it can read without callers
    threading identifiers through every function signature.

    What
    ----
    ``user_id`` and ``tx_id`` are fixed once the record is established.
    ``custom`` grows through :meth:`merge_custom`, which swaps in a new
    ``dict`` instead of mutating the old one so earlier snapshots stay intact.

    Examples
    --------
    >>> record = ContextRecord(user_id="alex_123", tx_id="abc-789")
    >>> record.merge_custom({"plan": "pro"})
    >>> record.custom
    {'plan': 'pro'}
    >>> record.snapshot() == record
    True
    """

    user_id: Any = None
    tx_id: str | None = None
    custom: dict[str, Any] = field(default_factory=dict)

    def merge_custom(self, fields: Mapping[str, Any]) -> None:
        """Merge *fields* into :attr:`custom`; later writes win per key."""

        self.custom = {**self.custom, **dict(fields)}

    def snapshot(self) -> ContextRecord:
        """Return a shallow copy safe to hand to work that outlives the chain."""

        return ContextRecord(user_id=self.user_id, tx_id=self.tx_id, custom=dict(self.custom))

    @classmethod
    def from_seed(cls, seed: Mapping[str, Any] | ContextRecord | None) -> ContextRecord:
        """Build a record from a seed mapping, generating ``tx_id`` when absent.

        Examples
        --------
        >>> ContextRecord.from_seed({"user_id": "system", "tx_id": "batch-1"}).tx_id
        'batch-1'
        >>> ContextRecord.from_seed(None).tx_id is not None
        True
        """

        if isinstance(seed, ContextRecord):
            return cls(
                user_id=seed.user_id,
                tx_id=seed.tx_id or new_correlation_id(),
                custom=dict(seed.custom),
            )
        values: Mapping[str, Any] = seed or {}
        return cls(
            user_id=values.get("user_id"),
            tx_id=values.get("tx_id") or new_correlation_id(),
            custom=dict(values.get("custom") or {}),
        )


__all__ = ["ContextRecord", "new_correlation_id"]
