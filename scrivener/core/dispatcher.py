"""Dispatcher — the single writer thread draining the record queue.

State machine: ``CREATED -> RUNNING -> DRAINING -> STOPPED``.

- RUNNING: dispatch records as they arrive; on an empty queue wait for the
  wake signal with a bounded timeout, then retry.
- DRAINING: entered on stop request; dispatch everything still queued
  without waiting, so no record accepted before shutdown is lost.
- STOPPED: managed files and the system log are closed.

Any exception raised while dispatching is handed to ``on_fault`` and ends
the thread permanently (fail-stop).  A broken sink must not silently
swallow later diagnostics.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from enum import Enum

from scrivener.core.queue import BoundedQueue
from scrivener.routing.registry import SinkRegistry
from scrivener.routing.sinks._formatting import format_line
from scrivener.routing.syslog_adapter import SyslogAdapter

logger = logging.getLogger(__name__)


class DispatcherState(str, Enum):
    """Lifecycle of the writer thread."""

    CREATED = "created"
    RUNNING = "running"
    DRAINING = "draining"
    STOPPED = "stopped"


class Dispatcher:
    """Drains *queue* and writes each record to its subscribed sinks.

    Parameters
    ----------
    queue:
        The record queue.  Its lock is held for the whole dispatch of one
        record, so configuration changes never interleave with a write.
    registry:
        Severity subscriptions, sharing the queue's lock.
    syslog:
        System log adapter, reconciled before each record.
    app_name:
        Returns the current application name; called under the lock.
    line_format:
        Template passed to :func:`format_line`.
    wake_timeout:
        Upper bound, in seconds, on the idle wait for new records.
    on_fault:
        Receives the exception that stopped the thread.
    """

    def __init__(
        self,
        queue: BoundedQueue,
        registry: SinkRegistry,
        syslog: SyslogAdapter,
        *,
        app_name: Callable[[], str],
        line_format: str,
        wake_timeout: float,
        on_fault: Callable[[Exception], None],
    ) -> None:
        self._queue = queue
        self._registry = registry
        self._syslog = syslog
        self._app_name = app_name
        self._line_format = line_format
        self._wake_timeout = wake_timeout
        self._on_fault = on_fault

        self._stop_requested = threading.Event()
        self._thread: threading.Thread | None = None
        self._state = DispatcherState.CREATED
        self._dispatched = 0

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def state(self) -> DispatcherState:
        return self._state

    @property
    def dispatched(self) -> int:
        """Number of records written so far."""
        return self._dispatched

    @property
    def started(self) -> bool:
        return self._thread is not None

    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Spawn the writer thread.  Calling it again is a no-op."""
        if self._thread is not None:
            return
        self._thread = threading.Thread(
            target=self._run, name="scrivener-writer", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: float | None = None) -> bool:
        """Request draining and wait for the thread to finish.

        A dispatcher that was never started is started now, so records
        queued before shutdown are still written.  Returns ``True`` when
        the thread has exited.
        """
        self._stop_requested.set()
        if self._thread is None:
            self.start()
        assert self._thread is not None
        self._thread.join(timeout)
        return not self._thread.is_alive()

    # ------------------------------------------------------------------
    # Writer thread
    # ------------------------------------------------------------------

    def _run(self) -> None:
        self._state = DispatcherState.RUNNING
        try:
            while not self._stop_requested.is_set():
                if not self.dispatch_one():
                    self._queue.wait_for_record(self._wake_timeout)
                    self._registry.close_pending()

            self._state = DispatcherState.DRAINING
            while self.dispatch_one():
                pass
        except Exception as exc:  # noqa: BLE001
            self._on_fault(exc)
        finally:
            try:
                self._release()
            except Exception as exc:  # noqa: BLE001
                self._on_fault(exc)
            self._state = DispatcherState.STOPPED
            logger.debug(
                "Dispatcher stopped after %d record(s).", self._dispatched
            )

    def dispatch_one(self) -> bool:
        """Write the oldest queued record to every destination.

        Returns ``False`` when the queue was empty.  The record's slot is
        only freed after every sink has accepted it.
        """
        with self._queue.lock:
            record = self._queue.peek()
            if record is None:
                return False

            self._registry.close_pending()
            app_name = self._app_name()
            self._syslog.reconcile(app_name)
            self._syslog.emit(record)

            line = format_line(record, app_name, self._line_format)
            for sink in self._registry.sinks_for(record.severity):
                sink.accept(line)

            self._queue.advance()
            self._dispatched += 1
        return True

    def _release(self) -> None:
        with self._queue.lock:
            self._registry.close_all()
            self._syslog.close()
