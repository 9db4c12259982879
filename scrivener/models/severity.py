"""Record severity levels, ordered from least to most urgent."""

from __future__ import annotations

from enum import IntEnum


class Severity(IntEnum):
    """Totally ordered urgency of a log record.

    Filtering compares the integer values: a record passes a threshold
    when ``record.severity >= threshold``.
    """

    TRACE = 0  # entry and exit of function calls
    DEBUG = 1  # developer-only detail
    INFO = 2  # more verbose than NOTIFY, less dense than DEBUG
    NOTIFY = 3  # significant status: start, stop, config loaded
    WARN = 4  # not fatal, but results may differ from expectations
    ERROR = 5  # a single operation could not complete
    FATAL = 6  # the application must shut down
    EXCEPTIONAL = 7  # unhandled failures outside normal error detection

    @property
    def label(self) -> str:
        """Upper-case name used when rendering a line."""
        if self is Severity.EXCEPTIONAL:
            return "EXCEPTION"
        return self.name

    @classmethod
    def parse(cls, value: Severity | int | str) -> Severity:
        """Coerce a member, an int, or a case-insensitive name or label."""
        if isinstance(value, cls):
            return value
        if isinstance(value, int):
            return cls(value)
        key = str(value).strip().upper()
        if key.isdigit():
            return cls(int(key))
        if key == "EXCEPTION":
            return cls.EXCEPTIONAL
        if key == "WARNING":
            return cls.WARN
        try:
            return cls[key]
        except KeyError as exc:
            raise ValueError(f"Unknown severity: {value!r}") from exc


ALL_SEVERITIES: tuple[Severity, ...] = tuple(Severity)
