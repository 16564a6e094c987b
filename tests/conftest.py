"""Shared fixtures keeping the process-wide logging state isolated per test."""

from __future__ import annotations

from typing import Callable, Iterator

import pytest

from lib_context_log import uninstall
from lib_context_log.application.dispatch import Dispatcher
from lib_context_log.application.emission import Emitter
from lib_context_log.domain.config import LogConfig
from tests.support import MemorySink


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    """Undo any ``install`` performed by a test."""

    yield
    uninstall()


@pytest.fixture()
def memory_sink() -> MemorySink:
    return MemorySink()


@pytest.fixture()
def make_emitter(memory_sink: MemorySink) -> Callable[..., Emitter]:
    """Build an :class:`Emitter` writing into ``memory_sink``."""

    def _factory(level: str = "debug") -> Emitter:
        return Emitter(LogConfig(level=level), Dispatcher([memory_sink]))

    return _factory
