"""Domain-level exception hierarchy.

Purpose
-------
Expose the small error taxonomy shared by the composition root, the wire
parser, and consuming applications. Logging calls themselves never raise; the
exceptions below are reserved for configuration time and for tooling that
reads emitted lines back.

Contents
--------
* :class:`ContextLogError` – umbrella base class for all library errors.
* :class:`ConfigurationError` – invalid options passed to ``install``.
* :class:`InvalidEvent` – a wire line that is not a well-formed event.
"""

from __future__ import annotations


class ContextLogError(Exception):
    """Base type for all exceptions emitted by ``lib_context_log``.

    Why
    ----
    Provide a single catch-all type for consumers that do not need fine-grained
    handling.
    """


class ConfigurationError(ContextLogError):
    """Raised synchronously when initialisation options are unusable.

    Typical Sources
    ---------------
    Selecting ``file`` or ``both`` output without a ``file_path``, or naming an
    output mode that does not exist. Initialisation is aborted; callers fix the
    options and retry.
    """


class InvalidEvent(ContextLogError):
    """Raised when a line read back from a sink is not a valid wire event."""
