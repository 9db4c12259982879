"""Engine configuration — env-driven defaults for a logging engine.

Reads from a .env file and SCRIVENER_* environment variables. Values passed
to ``Engine(...)`` as keyword arguments override whatever the settings hold.
"""

from __future__ import annotations

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from scrivener.models.severity import Severity

DEFAULT_LINE_FORMAT = "{app} | {level} | {text}"


class EngineSettings(BaseSettings):
    """Engine settings with environment variable overrides.

    Examples
    --------
    Override via environment::

        export SCRIVENER_APP_NAME=billing-worker
        export SCRIVENER_MIN_LEVEL=debug
        export SCRIVENER_QUEUE_CAPACITY=512

    Or via .env file::

        SCRIVENER_SYSLOG_ENABLED=true
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="SCRIVENER_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Identity and filtering
    app_name: str = "scrivener"
    min_level: Severity = Severity.NOTIFY

    # Queue and writer thread
    queue_capacity: int = 10000
    wake_timeout_ms: float = 1.0
    join_timeout_s: float | None = None

    # Output
    line_format: str = DEFAULT_LINE_FORMAT
    syslog_enabled: bool = False

    # Level for the package's own stdlib diagnostics
    log_level: str = "WARNING"

    @field_validator("min_level", mode="before")
    @classmethod
    def _parse_min_level(cls, value: object) -> Severity:
        return Severity.parse(value)  # type: ignore[arg-type]

    @field_validator("queue_capacity")
    @classmethod
    def _check_capacity(cls, value: int) -> int:
        if value < 1:
            raise ValueError("queue_capacity must be at least 1")
        return value

    @field_validator("wake_timeout_ms")
    @classmethod
    def _check_wake_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("wake_timeout_ms must be positive")
        return value

    @property
    def wake_timeout(self) -> float:
        """The consumer's bounded wait, in seconds."""
        return self.wake_timeout_ms / 1000.0
