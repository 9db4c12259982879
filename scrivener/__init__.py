"""Scrivener: an in-process asynchronous logging engine.

Application threads build immutable records; one background writer thread
drains a bounded queue and fans each record out to the streams, files and
system log subscribed to its severity.

  - Block-never-drop backpressure on a fixed-capacity queue
  - Severity-indexed sink subscriptions (caller-owned streams, engine-owned files)
  - Lazily reconciled syslog connection, opened and closed only by the writer
  - Fail-stop fault capture: the first writer failure is reported to every later call
  - Drain-on-shutdown: nothing accepted before shutdown is lost
"""

__version__ = "0.1.0"
__description__ = "In-process asynchronous logging engine with a single writer thread"

from scrivener.callsite import Channel, capture
from scrivener.config import EngineSettings
from scrivener.core.engine import Engine, EngineFaultedError, EngineStoppedError
from scrivener.core.queue import QueueClosedError, QueueFullError
from scrivener.models import Record, Severity

__all__ = [
    "Channel",
    "Engine",
    "EngineFaultedError",
    "EngineSettings",
    "EngineStoppedError",
    "QueueClosedError",
    "QueueFullError",
    "Record",
    "Severity",
    "capture",
    "__version__",
]
