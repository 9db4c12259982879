"""The immutable log record handed from producers to the writer thread."""

from __future__ import annotations

import threading
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator

from scrivener.models.severity import Severity


class Record(BaseModel):
    """A single log record.

    Built once at the call site, then owned by the engine. The model is
    frozen, so a record cannot change between enqueue and dispatch.
    """

    model_config = ConfigDict(frozen=True)

    severity: Severity
    text: str = ""
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    thread_id: int = Field(default_factory=threading.get_ident)
    thread_name: str = Field(
        default_factory=lambda: threading.current_thread().name
    )

    # Source location, empty when the caller did not capture one
    file: str = ""
    function: str = ""
    line: int = 0

    @field_validator("severity", mode="before")
    @classmethod
    def _coerce_severity(cls, value: object) -> Severity:
        return Severity.parse(value)  # type: ignore[arg-type]
