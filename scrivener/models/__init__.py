"""Scrivener data models: severities and records (Pydantic v2, frozen)."""

from scrivener.models.record import Record
from scrivener.models.severity import ALL_SEVERITIES, Severity

__all__ = [
    "ALL_SEVERITIES",
    "Record",
    "Severity",
]
