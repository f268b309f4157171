from __future__ import annotations

from dataclasses import dataclass

from .row import Row

"""Cleanup result models.

Counters count rows mutated by a stage, not fields.
"""

__all__ = [
    "CleanupSummary",
    "CleanupResult",
    "StageResult",
]


@dataclass(frozen=True)
class StageResult:
    """Outcome of a single cleanup stage: possibly extended columns + row count."""
    columns: list[str]
    count: int


@dataclass(frozen=True)
class CleanupSummary:
    names_split: int = 0
    caps_fixed: int = 0
    phones_formatted: int = 0
    emails_classified: int = 0
    duplicates_found: int = 0
    missing_flagged: int = 0

    @property
    def total_changes(self) -> int:
        return (
            self.names_split
            + self.caps_fixed
            + self.phones_formatted
            + self.emails_classified
            + self.duplicates_found
            + self.missing_flagged
        )


@dataclass(frozen=True)
class CleanupResult:
    rows: list[Row]
    columns: list[str]
    summary: CleanupSummary
