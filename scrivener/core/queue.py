"""Bounded record queue — block-never-drop backpressure between threads.

Producers block while the queue is full; they are never dropped. The single
consumer peeks at the oldest record, writes it, and only then advances, so
a slot stays occupied until its record has reached every sink.

The queue's lock is reentrant and is shared with the sink registry and the
syslog desired state, which makes a configuration change atomic with
respect to the dispatch of any one record.
"""

from __future__ import annotations

import collections
import threading

from scrivener.models.record import Record


class QueueClosedError(RuntimeError):
    """Raised when enqueueing into a queue that no longer accepts records."""


class QueueFullError(RuntimeError):
    """Raised when a timed enqueue finds no free slot before its deadline."""


class BoundedQueue:
    """Fixed-capacity FIFO of records with producer/consumer signalling.

    Parameters
    ----------
    capacity:
        Maximum number of queued records.  Must be at least 1.
    lock:
        Reentrant lock to guard the queue.  Pass one in to share it with
        other state that must change atomically with dispatch.
    """

    def __init__(
        self, capacity: int, lock: threading.RLock | None = None
    ) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self._capacity = capacity
        self._lock = lock if lock is not None else threading.RLock()
        self._not_empty = threading.Condition(self._lock)
        self._not_full = threading.Condition(self._lock)
        self._items: collections.deque[Record] = collections.deque()
        self._closed = False

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def lock(self) -> threading.RLock:
        """The lock guarding queue state."""
        return self._lock

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def closed(self) -> bool:
        """``True`` once :meth:`close` has been called."""
        with self._lock:
            return self._closed

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    # ------------------------------------------------------------------
    # Producer side
    # ------------------------------------------------------------------

    def enqueue(self, record: Record, timeout: float | None = None) -> None:
        """Append *record*, blocking while the queue is full.

        Raises
        ------
        QueueClosedError
            If the queue is closed before or while waiting for a slot.
        QueueFullError
            If *timeout* is given and no slot frees up in time.
        """
        with self._not_full:
            has_room = self._not_full.wait_for(
                lambda: self._closed or len(self._items) < self._capacity,
                timeout,
            )
            if self._closed:
                raise QueueClosedError("Queue is closed to new records")
            if not has_room:
                raise QueueFullError(
                    f"No free slot in {timeout}s (capacity {self._capacity})"
                )
            self._items.append(record)
            self._not_empty.notify()

    def close(self) -> None:
        """Refuse further records and wake every waiting thread.

        Records already queued remain available to the consumer.
        """
        with self._lock:
            self._closed = True
            self._not_full.notify_all()
            self._not_empty.notify_all()

    # ------------------------------------------------------------------
    # Consumer side
    # ------------------------------------------------------------------

    def try_dequeue(self) -> Record | None:
        """Remove and return the oldest record, or ``None`` when empty."""
        with self._lock:
            if not self._items:
                return None
            record = self._items.popleft()
            self._not_full.notify()
            return record

    def peek(self) -> Record | None:
        """Return the oldest record without freeing its slot."""
        with self._lock:
            return self._items[0] if self._items else None

    def advance(self) -> None:
        """Discard the oldest record and free its slot."""
        with self._lock:
            self._items.popleft()
            self._not_full.notify()

    def wait_for_record(self, timeout: float) -> bool:
        """Wait up to *timeout* seconds for the queue to become non-empty.

        Returns whether a record is available.  The wait is bounded so a
        consumer also notices state changes that do not signal the queue.
        """
        with self._not_empty:
            if not self._items and not self._closed:
                self._not_empty.wait(timeout)
            return bool(self._items)
