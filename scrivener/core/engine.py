"""Engine — the explicitly constructed handle applications log through.

The engine owns the record queue, the sink registry, the syslog adapter
and the writer thread.  It holds the minimum-level threshold, the
application name, and a write-once fault slot.

Every public operation checks the fault slot first.  Once the writer
thread has failed, each call raises :class:`EngineFaultedError` carrying
the captured exception.  The engine never heals itself.

Usage
-----
>>> import sys
>>> from scrivener import Engine, Record, Severity
>>> with Engine(app_name="billing", min_level="info") as engine:
...     engine.add_output(sys.stdout)
...     engine.write(Record(severity=Severity.INFO, text="ready"))
"""

from __future__ import annotations

import logging
import os
import threading
from typing import Any, TextIO, Union

from scrivener.config import EngineSettings
from scrivener.core.dispatcher import Dispatcher
from scrivener.core.queue import BoundedQueue, QueueClosedError
from scrivener.models.record import Record
from scrivener.models.severity import Severity
from scrivener.routing.registry import LevelSpec, SinkRegistry
from scrivener.routing.syslog_adapter import SyslogAdapter, SyslogState

logger = logging.getLogger(__name__)

OutputTarget = Union[str, "os.PathLike[str]", TextIO]


class EngineFaultedError(RuntimeError):
    """Raised by every public call after the writer thread has failed.

    The captured failure is available as :attr:`fault` and as
    ``__cause__``.
    """

    def __init__(self, fault: BaseException) -> None:
        super().__init__(f"Logging engine faulted: {fault!r}")
        self.fault = fault


class EngineStoppedError(RuntimeError):
    """Raised when writing to or configuring an engine that was shut down."""


class Engine:
    """Asynchronous logging engine with a single writer thread.

    Parameters
    ----------
    settings:
        Base settings.  Defaults to :class:`EngineSettings` read from the
        environment.
    syslog_backend:
        Replacement for the platform ``syslog`` module.
    **overrides:
        Individual :class:`EngineSettings` fields, applied on top of
        *settings* (e.g. ``queue_capacity=64``, ``min_level="debug"``).
    """

    def __init__(
        self,
        settings: EngineSettings | None = None,
        *,
        syslog_backend: Any = None,
        **overrides: Any,
    ) -> None:
        settings = settings or EngineSettings()
        if overrides:
            settings = EngineSettings(**{**settings.model_dump(), **overrides})
        self._settings = settings

        self._lock = threading.RLock()
        self._queue = BoundedQueue(settings.queue_capacity, lock=self._lock)
        self._registry = SinkRegistry(lock=self._lock)
        self._syslog = SyslogAdapter(backend=syslog_backend)

        self._min_level: Severity = settings.min_level
        self._app_name: str = settings.app_name
        self._fault: Exception | None = None
        self._shutdown_requested = False

        self._dispatcher = Dispatcher(
            self._queue,
            self._registry,
            self._syslog,
            app_name=lambda: self._app_name,
            line_format=settings.line_format,
            wake_timeout=settings.wake_timeout,
            on_fault=self._record_fault,
        )

        if settings.syslog_enabled:
            self._syslog.enable()

    # ------------------------------------------------------------------
    # Fault slot
    # ------------------------------------------------------------------

    def _record_fault(self, exc: Exception) -> None:
        """Store the first failure and stop accepting records."""
        with self._lock:
            if self._fault is not None:
                return
            self._fault = exc
        logger.error("Writer thread faulted; engine halted.", exc_info=exc)
        self._queue.close()

    def _check_fault(self) -> None:
        fault = self._fault
        if fault is not None:
            raise EngineFaultedError(fault) from fault

    def _check_usable(self) -> None:
        self._check_fault()
        if self._shutdown_requested:
            raise EngineStoppedError("Logging engine has been shut down")

    @property
    def fault(self) -> Exception | None:
        """The captured writer failure, or ``None``."""
        return self._fault

    @property
    def is_faulted(self) -> bool:
        return self._fault is not None

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def settings(self) -> EngineSettings:
        return self._settings

    @property
    def registry(self) -> SinkRegistry:
        return self._registry

    @property
    def is_running(self) -> bool:
        """``True`` while the writer thread is alive and accepting records."""
        return (
            self._dispatcher.is_alive()
            and not self._shutdown_requested
            and self._fault is None
        )

    @property
    def pending(self) -> int:
        """Number of records queued but not yet written."""
        return len(self._queue)

    @property
    def dispatched(self) -> int:
        """Number of records the writer thread has written."""
        return self._dispatcher.dispatched

    @property
    def syslog_state(self) -> SyslogState:
        with self._lock:
            return self._syslog.state

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> Engine:
        """Start the writer thread.  Returns the engine for chaining."""
        self._check_usable()
        self._dispatcher.start()
        return self

    def shutdown(self, timeout: float | None = None) -> bool:
        """Stop accepting records, drain the queue, and join the writer.

        Records queued before the call are written to every subscribed
        sink before this returns (unless *timeout* expires first or the
        writer faults).  Safe to call repeatedly and on a faulted engine.
        Returns ``True`` once the writer thread has exited.
        """
        with self._lock:
            self._shutdown_requested = True
        self._queue.close()
        if timeout is None:
            timeout = self._settings.join_timeout_s
        stopped = self._dispatcher.stop(timeout)
        if not stopped:
            logger.warning(
                "Writer thread still draining after %ss (%d pending).",
                timeout,
                self.pending,
            )
        return stopped

    def __enter__(self) -> Engine:
        return self.start()

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()

    # ------------------------------------------------------------------
    # Threshold and identity
    # ------------------------------------------------------------------

    def get_min_level(self) -> Severity:
        self._check_fault()
        return self._min_level

    def set_min_level(self, level: Severity | int | str) -> None:
        """Set the inclusive threshold applied to records written from now on.

        Records already queued keep the decision made when they were
        written.
        """
        self._check_fault()
        self._min_level = Severity.parse(level)

    min_level = property(get_min_level, set_min_level)

    def get_app_name(self) -> str:
        self._check_fault()
        with self._lock:
            return self._app_name

    def set_app_name(self, name: str) -> None:
        """Rename the application; an open system log is reopened lazily."""
        self._check_fault()
        with self._lock:
            if name == self._app_name:
                return
            self._app_name = name
            self._syslog.rename()

    app_name = property(get_app_name, set_app_name)

    # ------------------------------------------------------------------
    # Outputs
    # ------------------------------------------------------------------

    def add_output(
        self,
        target: OutputTarget,
        levels: LevelSpec | None = None,
        *,
        append: bool = False,
    ) -> bool | None:
        """Subscribe a stream or a file path to *levels* (default: all).

        A ``str`` or path-like *target* is a file the engine opens and
        owns; the return value reports whether it could be opened.  Any
        other *target* is a caller-owned stream and ``None`` is returned.
        """
        self._check_usable()
        if isinstance(target, (str, os.PathLike)):
            return self._registry.add_file(target, levels, append=append)
        self._registry.add(target, levels)
        return None

    def remove_output(
        self, target: OutputTarget, levels: LevelSpec | None = None
    ) -> None:
        """Unsubscribe a stream or file from *levels* (default: all).

        Removing a file from every level closes it on the writer thread.
        """
        self._check_fault()
        if isinstance(target, (str, os.PathLike)):
            self._registry.remove_file(target, levels)
        else:
            self._registry.remove(target, levels)

    def enable_syslog(self) -> None:
        """Open the system log before the next record.  No-op if unsupported."""
        self._check_usable()
        with self._lock:
            self._syslog.enable()

    def disable_syslog(self) -> None:
        """Close the system log before the next record.  No-op if unsupported."""
        self._check_fault()
        with self._lock:
            self._syslog.disable()

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def write(self, record: Record, timeout: float | None = None) -> None:
        """Queue *record* for the writer thread.

        Records below the minimum level are dropped without taking a queue
        slot.  Blocks while the queue is full; with a *timeout*, raises
        :class:`~scrivener.core.queue.QueueFullError` if no slot frees.

        Raises
        ------
        EngineFaultedError
            If the writer thread has failed (also while blocked).
        EngineStoppedError
            If the engine has been shut down.
        """
        self._check_fault()
        if record.severity < self._min_level:
            return
        if self._shutdown_requested:
            raise EngineStoppedError("Logging engine has been shut down")
        try:
            self._queue.enqueue(record, timeout)
        except QueueClosedError as exc:
            self._check_fault()
            raise EngineStoppedError("Logging engine has been shut down") from exc
