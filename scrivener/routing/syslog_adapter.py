"""Syslog adapter — forwards records to the platform system log.

Configuration calls (:meth:`SyslogAdapter.enable`, :meth:`disable`,
:meth:`rename`) only record the *desired* state.  The writer thread calls
:meth:`reconcile` before each record, and that is the only place the
underlying ``openlog``/``closelog`` calls happen.  A configuration call
therefore never blocks on a system call.

The adapter has no lock of its own; callers hold the engine lock.

On platforms without the ``syslog`` module every operation is a no-op.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from scrivener.models.record import Record
from scrivener.models.severity import Severity

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Try-import the platform syslog module
# ---------------------------------------------------------------------------

_SYSLOG_AVAILABLE: bool = False
_syslog: Any = None

try:
    import syslog as _platform_syslog

    _syslog = _platform_syslog
    _SYSLOG_AVAILABLE = True
except ImportError:
    logger.debug("syslog module not available; SyslogAdapter disabled.")


def is_syslog_available() -> bool:
    """Return ``True`` if the platform ``syslog`` module is loaded."""
    return _SYSLOG_AVAILABLE


# Highest severity maps to the most urgent priority; TRACE shares DEBUG.
SEVERITY_PRIORITY_NAMES: dict[Severity, str] = {
    Severity.TRACE: "LOG_DEBUG",
    Severity.DEBUG: "LOG_DEBUG",
    Severity.INFO: "LOG_INFO",
    Severity.NOTIFY: "LOG_NOTICE",
    Severity.WARN: "LOG_WARNING",
    Severity.ERROR: "LOG_ERR",
    Severity.FATAL: "LOG_CRIT",
    Severity.EXCEPTIONAL: "LOG_EMERG",
}


class SyslogState(str, Enum):
    """Desired/actual state of the system log connection."""

    DISABLED = "disabled"  # closed, nothing pending
    ENABLED = "enabled"  # open requested
    NAME_CHANGED = "name_changed"  # open, reopen under a new ident requested
    OPEN = "open"
    CLOSED = "closed"  # open, close requested


class SyslogAdapter:
    """Lazily reconciled connection to the system log.

    Parameters
    ----------
    backend:
        Object exposing ``openlog``, ``syslog``, ``closelog`` and the
        ``LOG_*`` constants.  Defaults to the platform ``syslog`` module;
        ``None`` on platforms without one.
    """

    def __init__(self, backend: Any = None) -> None:
        self._backend = backend if backend is not None else _syslog
        self._state = SyslogState.DISABLED
        self._ident: str | None = None

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def available(self) -> bool:
        return self._backend is not None

    @property
    def state(self) -> SyslogState:
        return self._state

    @property
    def ident(self) -> str | None:
        """The application name the log is currently opened under."""
        return self._ident

    def priority_for(self, severity: Severity) -> int:
        return getattr(self._backend, SEVERITY_PRIORITY_NAMES[severity])

    # ------------------------------------------------------------------
    # Desired state (configuration callers)
    # ------------------------------------------------------------------

    def enable(self) -> None:
        if not self.available:
            return
        if self._state in (SyslogState.DISABLED, SyslogState.ENABLED):
            self._state = SyslogState.ENABLED
        elif self._state is SyslogState.CLOSED:
            # Still physically open; cancel the pending close.
            self._state = SyslogState.OPEN

    def disable(self) -> None:
        if not self.available:
            return
        if self._state is SyslogState.ENABLED:
            self._state = SyslogState.DISABLED
        elif self._state in (SyslogState.OPEN, SyslogState.NAME_CHANGED):
            self._state = SyslogState.CLOSED

    def rename(self) -> None:
        """Request a reopen under the current application name."""
        if self._state is SyslogState.OPEN:
            self._state = SyslogState.NAME_CHANGED

    # ------------------------------------------------------------------
    # Actual state (writer thread)
    # ------------------------------------------------------------------

    def reconcile(self, app_name: str) -> None:
        """Apply the desired state with real open/close calls."""
        if self._state is SyslogState.ENABLED:
            self._open(app_name)
        elif self._state is SyslogState.NAME_CHANGED:
            self._close()
            self._open(app_name)
        elif self._state is SyslogState.CLOSED:
            self._close()

    def emit(self, record: Record) -> None:
        """Send *record* to the system log if the connection is open."""
        if self._state is SyslogState.OPEN:
            self._backend.syslog(self.priority_for(record.severity), record.text)

    def close(self) -> None:
        """Close the connection if it is physically open."""
        if self._state in (
            SyslogState.OPEN,
            SyslogState.NAME_CHANGED,
            SyslogState.CLOSED,
        ):
            self._close()
        else:
            self._state = SyslogState.DISABLED

    def _open(self, app_name: str) -> None:
        self._backend.openlog(
            ident=app_name,
            logoption=self._backend.LOG_PID,
            facility=self._backend.LOG_USER,
        )
        self._ident = app_name
        self._state = SyslogState.OPEN
        logger.debug("SyslogAdapter: opened as %r", app_name)

    def _close(self) -> None:
        self._backend.closelog()
        logger.debug("SyslogAdapter: closed %r", self._ident)
        self._ident = None
        self._state = SyslogState.DISABLED
