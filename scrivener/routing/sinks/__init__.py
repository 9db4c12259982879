"""Sink protocol for Scrivener output destinations.

All sinks implement the ``BaseSink`` protocol: a ``sink_name`` property
and an ``accept(line)`` method that writes and flushes one formatted line.
The writer thread calls ``accept`` on every sink subscribed to a record's
severity, in subscription order.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class BaseSink(Protocol):
    """Protocol that every Scrivener sink must implement.

    Attributes
    ----------
    sink_name : str
        A human-readable identifier for this sink instance
        (e.g. ``"stream:<stdout>"``, ``"file:/var/log/app.log"``).
    """

    @property
    def sink_name(self) -> str:
        """Return the name of this sink."""
        ...

    def accept(self, line: str) -> None:
        """Write one formatted line and flush it.

        Any exception raised here is a dispatch fault: the engine stops
        consuming permanently and reports the failure to every later call.
        """
        ...
