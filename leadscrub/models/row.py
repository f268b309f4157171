from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

"""Row / list domain models.

A Row is one record of an imported list. Its `data` maps column name to string
value (absent and "" both mean "no value") and `flags` attaches at most one
CellFlag per column describing where the value came from or its quality.
Rows are mutated in place by cleanup stages; enrichment writes go through the
row store.
"""

__all__ = [
    "CellFlag",
    "TERMINAL_FLAGS",
    "Row",
    "ListRecord",
]


class CellFlag(Enum):
    """Per-field status tag.

    Cleanup flags: missing, cleaned, split, formatted, personal_email,
    business_email. Enrichment flags: enriched, needs_enrichment and the
    verification outcomes valid, invalid, risky, unknown, role_account.
    """
    MISSING = "missing"
    CLEANED = "cleaned"
    SPLIT = "split"
    FORMATTED = "formatted"
    PERSONAL_EMAIL = "personal_email"
    BUSINESS_EMAIL = "business_email"
    ENRICHED = "enriched"
    NEEDS_ENRICHMENT = "needs_enrichment"
    VALID = "valid"
    INVALID = "invalid"
    RISKY = "risky"
    UNKNOWN = "unknown"
    ROLE_ACCOUNT = "role_account"


# A row carrying any of these has already been through enrichment.
TERMINAL_FLAGS: frozenset[CellFlag] = frozenset({
    CellFlag.ENRICHED,
    CellFlag.VALID,
    CellFlag.INVALID,
    CellFlag.RISKY,
    CellFlag.ROLE_ACCOUNT,
})


@dataclass
class Row:
    id: str
    list_id: str
    row_index: int  # stable insertion order within the list
    data: dict[str, str] = field(default_factory=dict)
    flags: dict[str, CellFlag] = field(default_factory=dict)
    is_duplicate: bool = False

    def value(self, column: str | None) -> str:
        """Return the raw value for `column`, "" when absent or None."""
        if column is None:
            return ""
        val = self.data.get(column)
        return val if val is not None else ""

    def set_value(self, column: str, value: str, flag: CellFlag) -> None:
        # value and flag always change together
        self.data[column] = value
        self.flags[column] = flag

    def has_terminal_flag(self) -> bool:
        return any(f in TERMINAL_FLAGS for f in self.flags.values())


@dataclass
class ListRecord:
    """An imported list: its ordered column set and lifecycle markers."""
    id: str
    name: str
    columns: list[str]
    row_count: int = 0
    cleaned: bool = False
    enriched: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
