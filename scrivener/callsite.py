"""Call-site capture — build records stamped with the caller's location.

The engine only consumes finished :class:`Record` objects.  These helpers
build them the convenient way: the text is assembled from any number of
parts and the source file, function and line come from the caller's frame.

>>> from scrivener.callsite import Channel
>>> log = Channel(engine)
>>> log.warn("retrying ", attempt, " of ", limit)
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Any

from scrivener.models.record import Record
from scrivener.models.severity import Severity

if TYPE_CHECKING:
    from scrivener.core.engine import Engine


def capture(
    severity: Severity | int | str,
    *parts: Any,
    sep: str = "",
    stacklevel: int = 1,
) -> Record:
    """Build a record whose location is *stacklevel* frames above this call.

    ``stacklevel=1`` stamps the direct caller of :func:`capture`.
    """
    frame = sys._getframe(stacklevel)
    return Record(
        severity=severity,
        text=sep.join(str(part) for part in parts),
        file=frame.f_code.co_filename,
        function=frame.f_code.co_name,
        line=frame.f_lineno,
    )


class Channel:
    """Per-severity convenience methods bound to an engine."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @property
    def engine(self) -> Engine:
        return self._engine

    def log(self, severity: Severity | int | str, *parts: Any, sep: str = "") -> None:
        self._emit(severity, parts, sep)

    def trace(self, *parts: Any, sep: str = "") -> None:
        self._emit(Severity.TRACE, parts, sep)

    def debug(self, *parts: Any, sep: str = "") -> None:
        self._emit(Severity.DEBUG, parts, sep)

    def info(self, *parts: Any, sep: str = "") -> None:
        self._emit(Severity.INFO, parts, sep)

    def notify(self, *parts: Any, sep: str = "") -> None:
        self._emit(Severity.NOTIFY, parts, sep)

    def warn(self, *parts: Any, sep: str = "") -> None:
        self._emit(Severity.WARN, parts, sep)

    def error(self, *parts: Any, sep: str = "") -> None:
        self._emit(Severity.ERROR, parts, sep)

    def fatal(self, *parts: Any, sep: str = "") -> None:
        self._emit(Severity.FATAL, parts, sep)

    def exception(self, *parts: Any, sep: str = "") -> None:
        self._emit(Severity.EXCEPTIONAL, parts, sep)

    def _emit(self, severity: Severity | int | str, parts: tuple[Any, ...], sep: str) -> None:
        # capture <- _emit <- public method <- caller
        self._engine.write(capture(severity, *parts, sep=sep, stacklevel=3))
