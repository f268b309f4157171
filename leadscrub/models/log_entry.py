from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

"""Enrichment audit log entry.

Each enrichment run appends LogEntry records in execution order. Entries are
serialized one per line (JSON Lines) by the audit log buffer; the key set is
fixed: timestamp, row_id, row_label, action, result, detail.

System-level entries (column resolution, planning, the final summary) carry an
empty row_id.
"""

__all__ = [
    "LogAction",
    "LogResult",
    "LogEntry",
]


class LogAction(Enum):
    RESOLVE_COLUMNS = "resolve_columns"
    ANALYZE_NEEDS = "analyze_needs"
    SCRAPE = "scrape"
    FIND_EMAIL = "find_email"
    GENERATE_PATTERN = "generate_pattern"
    VERIFY_EMAIL = "verify_email"
    COMPLETE = "complete"


class LogResult(Enum):
    SUCCESS = "success"
    ERROR = "error"
    SKIP = "skip"


@dataclass(frozen=True)
class LogEntry:
    """One audit log line.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        row_id: Row identifier, "" for system-level entries
        row_label: Short human-readable label for the row ("" for system entries)
        action: Which step produced the entry
        result: success / error / skip
        detail: Free-text explanation
    """
    timestamp: str
    row_id: str
    row_label: str
    action: LogAction
    result: LogResult
    detail: str

    @staticmethod
    def create(
        action: LogAction,
        result: LogResult,
        detail: str,
        row_id: str = "",
        row_label: str = "",
    ) -> LogEntry:
        """Create a new LogEntry stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return LogEntry(
            timestamp=ts,
            row_id=row_id,
            row_label=row_label,
            action=action,
            result=result,
            detail=detail,
        )

    def to_dict(self) -> dict[str, str]:
        return {
            "timestamp": self.timestamp,
            "row_id": self.row_id,
            "row_label": self.row_label,
            "action": self.action.value,
            "result": self.result.value,
            "detail": self.detail,
        }

    def to_json_line(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)
