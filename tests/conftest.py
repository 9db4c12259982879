"""Shared test fixtures for Scrivener."""

from __future__ import annotations

import io
import time
from collections.abc import Callable, Iterator
from typing import Any

import pytest

from scrivener.core.engine import Engine


class FakeSyslog:
    """Stand-in for the platform ``syslog`` module that records calls."""

    LOG_EMERG = 0
    LOG_ALERT = 1
    LOG_CRIT = 2
    LOG_ERR = 3
    LOG_WARNING = 4
    LOG_NOTICE = 5
    LOG_INFO = 6
    LOG_DEBUG = 7
    LOG_PID = 0x01
    LOG_USER = 8 << 3

    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []

    def openlog(self, ident: str, logoption: int = 0, facility: int = 0) -> None:
        self.calls.append(("openlog", ident))

    def syslog(self, priority: int, message: str) -> None:
        self.calls.append(("syslog", priority, message))

    def closelog(self) -> None:
        self.calls.append(("closelog",))

    def names(self) -> list[str]:
        return [call[0] for call in self.calls]


class FailingStream(io.StringIO):
    """A stream whose writes always fail."""

    def __init__(self) -> None:
        super().__init__()
        self.attempts = 0

    def write(self, s: str) -> int:
        self.attempts += 1
        raise OSError("disk full")


@pytest.fixture
def fake_syslog() -> FakeSyslog:
    return FakeSyslog()


@pytest.fixture
def failing_stream() -> FailingStream:
    return FailingStream()


@pytest.fixture
def stream() -> io.StringIO:
    """An in-memory caller-owned output stream."""
    return io.StringIO()


@pytest.fixture
def make_engine(fake_syslog: FakeSyslog) -> Iterator[Callable[..., Engine]]:
    """Build engines with small test defaults; shut them all down afterwards.

    Engines are returned *not started* so tests control when the writer
    thread begins draining.
    """
    engines: list[Engine] = []

    def _make(**overrides: Any) -> Engine:
        options: dict[str, Any] = {
            "app_name": "test",
            "min_level": "trace",
            "queue_capacity": 16,
            "syslog_enabled": False,
        }
        options.update(overrides)
        engine = Engine(syslog_backend=fake_syslog, **options)
        engines.append(engine)
        return engine

    yield _make

    for engine in engines:
        engine.shutdown(timeout=5.0)


@pytest.fixture
def wait_until() -> Callable[..., bool]:
    """Poll a predicate until it holds or the timeout expires."""

    def _wait(predicate: Callable[[], bool], timeout: float = 5.0) -> bool:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if predicate():
                return True
            time.sleep(0.005)
        return predicate()

    return _wait
