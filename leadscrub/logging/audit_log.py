from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path

from ..models.log_entry import LogEntry

"""Enrichment audit log persistence.

- JSON Lines, fixed key set (timestamp, row_id, row_label, action, result, detail)
- One file per run: `<logs_directory>/enrichment-YYYYMMDD-HHMMSS.log` (UTC),
  path fixed on first access
- Entries are buffered and appended on flush(); repeated flushes append to
  the same file
- Serial use only
"""

__all__ = [
    "AuditLogBuffer",
    "DEFAULT_LOGS_DIR",
    "TIMESTAMP_FMT",
]

DEFAULT_LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class AuditLogBuffer:
    def __init__(self, logs_dir: Path | str = DEFAULT_LOGS_DIR) -> None:
        self.logs_dir = Path(logs_dir)
        self._entries: list[LogEntry] = []
        self._file_path: Path | None = None

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self.logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(timezone.utc).strftime(TIMESTAMP_FMT)
            self._file_path = self.logs_dir / f"enrichment-{stamp}.log"
        return self._file_path

    def append(self, entry: LogEntry) -> None:
        self._entries.append(entry)

    def extend(self, entries: Iterable[LogEntry]) -> None:
        self._entries.extend(entries)

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._entries)

    def flush(self) -> Path | None:
        """Append buffered entries to the run file. Returns None when empty."""
        if not self._entries:
            return None
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            for entry in self._entries:
                f.write(entry.to_json_line() + "\n")
        self._entries.clear()
        return fp
