"""Log level ranking shared by configuration, emission, and the wire parser."""

from __future__ import annotations

from typing import Final, Mapping

LEVEL_RANKS: Final[Mapping[str, int]] = {"debug": 0, "info": 1, "warn": 2, "error": 3, "none": 4}
"""Numeric rank per level name; ``none`` silences every emission."""

EVENT_LEVELS: Final[tuple[str, ...]] = ("debug", "info", "warn", "error")
"""Levels that may appear on the wire (``none`` is a threshold only)."""

DEFAULT_LEVEL: Final[str] = "info"

_ALIASES: Final[Mapping[str, str]] = {
    "warning": "warn",
    "critical": "error",
    "fatal": "error",
}


def normalize_level(name: str | None, *, default: str = DEFAULT_LEVEL) -> str:
    """Return the canonical level name for *name*, or *default* when unknown.

    Examples
    --------
    >>> normalize_level("WARNING")
    'warn'
    >>> normalize_level("verbose")
    'info'
    """

    if not name:
        return default
    lowered = str(name).strip().lower()
    lowered = _ALIASES.get(lowered, lowered)
    return lowered if lowered in LEVEL_RANKS else default


def is_enabled(level: str, minimum: str) -> bool:
    """Return ``True`` when *level* ranks at or above *minimum*."""

    return LEVEL_RANKS.get(level, LEVEL_RANKS["error"]) >= LEVEL_RANKS[minimum]
