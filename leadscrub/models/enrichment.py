from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .log_entry import LogAction, LogEntry, LogResult

"""Enrichment planning / result models.

EnrichmentPlan is an ephemeral per-row work record. It is created by the
planner, then owned by one pipeline phase at a time; phases fill in
first/last name, domain and email and may re-tag `need` (find_email ->
generate_patterns on lookup failure). Plans are discarded after the run.
"""

__all__ = [
    "EnrichmentNeed",
    "EnrichmentPlan",
    "EnrichmentProgress",
    "EnrichmentSummary",
]


class EnrichmentNeed(Enum):
    SCRAPE_AND_FIND = "scrape_and_find"  # website known, needs contact + email
    FIND_EMAIL = "find_email"  # name + domain known, needs email lookup
    VERIFY_ONLY = "verify_only"  # business email present, verify it
    GENERATE_PATTERNS = "generate_patterns"  # lookup failed, guess from patterns
    SKIP = "skip"  # already enriched, duplicate, or nothing to work with


@dataclass
class EnrichmentPlan:
    row_id: str
    need: EnrichmentNeed
    existing_data: dict[str, str]  # snapshot at planning time, never re-read
    website_url: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    domain: str | None = None
    email: str | None = None
    label: str = ""

    @property
    def has_lookup_inputs(self) -> bool:
        """True when first name, last name and domain are all known."""
        return bool(self.first_name and self.last_name and self.domain)


@dataclass(frozen=True)
class EnrichmentProgress:
    step: str
    current: int
    total: int
    errors: int


@dataclass
class EnrichmentSummary:
    contacts_extracted: int = 0
    emails_found: int = 0
    emails_verified: int = 0
    valid_emails: int = 0
    invalid_emails: int = 0
    risky_emails: int = 0
    unknown_emails: int = 0
    role_accounts: int = 0
    patterns_generated: int = 0
    errors: int = 0
    rows_skipped: int = 0
    log: list[LogEntry] = field(default_factory=list)

    def add_log(
        self,
        action: LogAction,
        result: LogResult,
        detail: str,
        row_id: str = "",
        row_label: str = "",
    ) -> LogEntry:
        entry = LogEntry.create(action, result, detail, row_id=row_id, row_label=row_label)
        self.log.append(entry)
        return entry

    def counters(self) -> dict[str, int]:
        return {
            "contacts_extracted": self.contacts_extracted,
            "emails_found": self.emails_found,
            "emails_verified": self.emails_verified,
            "valid_emails": self.valid_emails,
            "invalid_emails": self.invalid_emails,
            "risky_emails": self.risky_emails,
            "unknown_emails": self.unknown_emails,
            "role_accounts": self.role_accounts,
            "patterns_generated": self.patterns_generated,
            "errors": self.errors,
            "rows_skipped": self.rows_skipped,
        }
