"""SinkRegistry — maps each severity to the sinks subscribed to it.

Every severity owns an ordered subscription list.  A sink appears at most
once per list, and an empty ``levels`` request means "every severity".

Caller-owned streams are wrapped once per stream object; engine-owned
files are keyed by resolved path, so registering the same path twice
reuses the open handle.  Removing a file entirely only *schedules* its
handle for closing: the writer thread closes it, keeping all I/O on
one thread.
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Iterable
from pathlib import Path
from typing import TextIO, Union

from scrivener.models.severity import ALL_SEVERITIES, Severity
from scrivener.routing.sinks import BaseSink
from scrivener.routing.sinks.file import FileSink
from scrivener.routing.sinks.stream import StreamSink

logger = logging.getLogger(__name__)

Level = Union[Severity, int, str]
LevelSpec = Union[Level, Iterable[Level]]
PathSpec = Union[str, "os.PathLike[str]"]


def _as_levels(levels: LevelSpec | None) -> tuple[Level, ...]:
    """Accept a single level as well as a collection of them."""
    if levels is None:
        return ()
    if isinstance(levels, (str, int)):
        return (levels,)
    return tuple(levels)


def _normalize_levels(levels: LevelSpec | None) -> tuple[Severity, ...]:
    """Expand an empty request to every severity and deduplicate."""
    parsed = tuple(dict.fromkeys(Severity.parse(lvl) for lvl in _as_levels(levels)))
    return parsed or ALL_SEVERITIES


def _path_key(path: PathSpec) -> Path:
    return Path(path).expanduser().resolve()


class SinkRegistry:
    """Severity-indexed subscription table for stream and file sinks.

    Parameters
    ----------
    lock:
        The lock shared with the record queue.  Every mutation and every
        dispatch-side read happens while holding it.
    """

    def __init__(self, lock: threading.RLock | None = None) -> None:
        self._lock = lock if lock is not None else threading.RLock()
        self._subscriptions: dict[Severity, list[BaseSink]] = {
            severity: [] for severity in Severity
        }
        self._streams: dict[int, StreamSink] = {}
        self._files: dict[Path, FileSink] = {}
        self._pending_close: list[FileSink] = []

    # ------------------------------------------------------------------
    # Subscription primitives
    # ------------------------------------------------------------------

    def _subscribe(self, sink: BaseSink, levels: LevelSpec | None) -> None:
        for severity in _normalize_levels(levels):
            subscribers = self._subscriptions[severity]
            if not any(existing is sink for existing in subscribers):
                subscribers.append(sink)

    def _unsubscribe(self, sink: BaseSink, levels: LevelSpec | None) -> None:
        for severity in _normalize_levels(levels):
            self._subscriptions[severity] = [
                existing
                for existing in self._subscriptions[severity]
                if existing is not sink
            ]

    def subscribed(self, sink: BaseSink) -> tuple[Severity, ...]:
        """Return the severities *sink* is currently subscribed to."""
        with self._lock:
            return tuple(
                severity
                for severity, subscribers in self._subscriptions.items()
                if any(existing is sink for existing in subscribers)
            )

    # ------------------------------------------------------------------
    # External (caller-owned) streams
    # ------------------------------------------------------------------

    def add(self, stream: TextIO, levels: LevelSpec | None = None) -> StreamSink:
        """Subscribe a caller-owned *stream* to *levels* (default: all)."""
        levels = _normalize_levels(levels)
        with self._lock:
            sink = self._streams.get(id(stream))
            if sink is None:
                sink = StreamSink(stream)
                self._streams[id(stream)] = sink
                logger.info("Registered sink: %s", sink.sink_name)
            self._subscribe(sink, levels)
            return sink

    def remove(self, stream: TextIO, levels: LevelSpec | None = None) -> None:
        """Unsubscribe *stream* from *levels*; empty removes it entirely."""
        levels = _as_levels(levels)
        with self._lock:
            sink = self._streams.get(id(stream))
            if sink is None:
                return
            self._unsubscribe(sink, levels)
            if not levels:
                del self._streams[id(stream)]
                logger.info("Unregistered sink: %s", sink.sink_name)

    # ------------------------------------------------------------------
    # Managed (engine-owned) files
    # ------------------------------------------------------------------

    def add_file(
        self,
        path: PathSpec,
        levels: LevelSpec | None = None,
        *,
        append: bool = False,
    ) -> bool:
        """Open (or reuse) the file at *path* and subscribe it to *levels*.

        Returns ``False`` when the file cannot be opened; the registry is
        left unchanged in that case.
        """
        levels = _normalize_levels(levels)
        with self._lock:
            try:
                key = _path_key(path)
                sink = self._files.get(key)
                if sink is None:
                    sink = FileSink(key, append=append)
                    created = True
                else:
                    created = False
            except (OSError, ValueError) as exc:
                # ValueError: paths with an embedded NUL byte
                logger.warning("Could not open log file %s: %s", path, exc)
                return False
            if created:
                self._files[key] = sink
                logger.info("Registered sink: %s", sink.sink_name)
            self._subscribe(sink, levels)
            return True

    def remove_file(self, path: PathSpec, levels: LevelSpec | None = None) -> None:
        """Unsubscribe the file at *path* from *levels*.

        With no levels the file is unsubscribed everywhere, forgotten, and
        queued for closing by the writer thread.  Unknown paths are ignored.
        """
        levels = _as_levels(levels)
        key = _path_key(path)
        with self._lock:
            sink = self._files.get(key)
            if sink is None:
                return
            self._unsubscribe(sink, levels)
            if not levels:
                del self._files[key]
                self._pending_close.append(sink)
                logger.info("Unregistered sink: %s", sink.sink_name)

    def has_file(self, path: PathSpec) -> bool:
        with self._lock:
            return _path_key(path) in self._files

    def file_sink(self, path: PathSpec) -> FileSink | None:
        with self._lock:
            return self._files.get(_path_key(path))

    # ------------------------------------------------------------------
    # Dispatch side (writer thread)
    # ------------------------------------------------------------------

    def sinks_for(self, severity: Severity) -> list[BaseSink]:
        """Return a snapshot of the sinks subscribed to *severity*."""
        with self._lock:
            return list(self._subscriptions[severity])

    def close_pending(self) -> int:
        """Close files whose removal was requested; return how many."""
        with self._lock:
            pending, self._pending_close = self._pending_close, []
        for sink in pending:
            sink.close()
        return len(pending)

    def close_all(self) -> None:
        """Close every managed file, pending or registered."""
        with self._lock:
            sinks = self._pending_close + list(self._files.values())
            self._pending_close = []
        for sink in sinks:
            sink.close()
