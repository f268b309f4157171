from __future__ import annotations

import logging
from dataclasses import dataclass

from ..constants import DEFAULT_EMAIL_COLUMN, ENRICHMENT_SOURCE_COLUMN, TITLE_COLUMN
from ..db.row_store import RowStore
from ..models.enrichment import EnrichmentPlan
from ..models.row import CellFlag
from ..providers.base import ContactInferrer, EmailFinder, EmailVerifier, TextExtractor, VerificationStatus
from .columns import ResolvedColumns

"""Enrichment actions: one external lookup plus its row write-back.

Each function performs a single enrichment step for one plan, writes the
outcome to the row store (values and flags together, in one update) and
returns an ActionResult. Expected failures never raise; they come back as
ActionResult(success=False, error=...). The pipeline decides what a result
means for its counters and fallbacks.

Provenance: every write also appends its source ("website", "icypeas",
"pattern") to the row's enrichment_source value, "+"-joined, without repeats,
and flags that value enriched.
"""

__all__ = [
    "ActionResult",
    "SOURCE_WEBSITE",
    "SOURCE_ICYPEAS",
    "SOURCE_PATTERN",
    "append_source",
    "scrape_contact",
    "find_email",
    "apply_pattern_email",
    "verify_email",
]

logger = logging.getLogger(__name__)

SOURCE_WEBSITE = "website"
SOURCE_ICYPEAS = "icypeas"
SOURCE_PATTERN = "pattern"

_STATUS_FLAGS = {
    VerificationStatus.VALID: CellFlag.VALID,
    VerificationStatus.INVALID: CellFlag.INVALID,
    VerificationStatus.RISKY: CellFlag.RISKY,
    VerificationStatus.UNKNOWN: CellFlag.UNKNOWN,
}


@dataclass(frozen=True)
class ActionResult:
    success: bool
    error: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    title: str | None = None
    email: str | None = None
    status: VerificationStatus | None = None
    is_role_account: bool = False


def append_source(current: str, source: str) -> str:
    parts = [p for p in current.split("+") if p]
    if source not in parts:
        parts.append(source)
    return "+".join(parts)


def _email_column(columns: ResolvedColumns) -> str:
    return columns.email_col or DEFAULT_EMAIL_COLUMN


def _write(
    store: RowStore,
    row_id: str,
    data: dict[str, str],
    flags: dict[str, CellFlag],
    source: str,
) -> str | None:
    """Write values + flags + provenance for one row. Returns an error or None.

    The provenance value is flagged enriched too, so the row stays terminal
    after verification replaces the email column's flag with its status.
    """
    row = store.get_row(row_id)
    if row is None:
        return f"row not found: {row_id}"
    data = {**data, ENRICHMENT_SOURCE_COLUMN: append_source(row.value(ENRICHMENT_SOURCE_COLUMN), source)}
    flags = {**flags, ENRICHMENT_SOURCE_COLUMN: CellFlag.ENRICHED}
    result = store.update_row(row_id, data=data, flags=flags)
    if result.ok:
        return None
    logger.warning("write-back failed row=%s source=%s error=%s", row_id, source, result.error)
    return result.error or "row update failed"


def scrape_contact(
    store: RowStore,
    plan: EnrichmentPlan,
    columns: ResolvedColumns,
    extractor: TextExtractor,
    inferrer: ContactInferrer,
) -> ActionResult:
    """Scrape the plan's website and extract its decision-maker contact."""
    if not plan.website_url:
        return ActionResult(success=False, error="no website to scrape")

    extracted = extractor.extract(plan.website_url)
    if extracted.error or not extracted.text:
        return ActionResult(success=False, error=extracted.error or "No text extracted")

    contact = inferrer.infer(extracted.text, plan.existing_data)
    if not contact.identified:
        return ActionResult(success=False, error=contact.error or "No contact identified")

    data: dict[str, str] = {}
    flags: dict[str, CellFlag] = {}
    if contact.first_name:
        data[columns.first_name_col] = contact.first_name
        flags[columns.first_name_col] = CellFlag.ENRICHED
    if contact.last_name:
        data[columns.last_name_col] = contact.last_name
        flags[columns.last_name_col] = CellFlag.ENRICHED
    if contact.title:
        data[TITLE_COLUMN] = contact.title
        flags[TITLE_COLUMN] = CellFlag.ENRICHED

    error = _write(store, plan.row_id, data, flags, SOURCE_WEBSITE)
    if error:
        return ActionResult(success=False, error=error)
    return ActionResult(
        success=True,
        first_name=contact.first_name,
        last_name=contact.last_name,
        title=contact.title,
    )


def find_email(
    store: RowStore,
    plan: EnrichmentPlan,
    columns: ResolvedColumns,
    finder: EmailFinder,
) -> ActionResult:
    if not plan.has_lookup_inputs:
        return ActionResult(success=False, error="first name, last name and domain are required")

    lookup = finder.find(plan.first_name or "", plan.last_name or "", plan.domain or "")
    if not lookup.email:
        return ActionResult(success=False, error=lookup.error)

    email_col = _email_column(columns)
    error = _write(
        store, plan.row_id, {email_col: lookup.email}, {email_col: CellFlag.ENRICHED}, SOURCE_ICYPEAS
    )
    if error:
        return ActionResult(success=False, error=error)
    return ActionResult(success=True, email=lookup.email)


def apply_pattern_email(
    store: RowStore,
    plan: EnrichmentPlan,
    columns: ResolvedColumns,
    email: str,
) -> ActionResult:
    email_col = _email_column(columns)
    error = _write(store, plan.row_id, {email_col: email}, {email_col: CellFlag.ENRICHED}, SOURCE_PATTERN)
    if error:
        return ActionResult(success=False, error=error)
    return ActionResult(success=True, email=email)


def verify_email(
    store: RowStore,
    plan: EnrichmentPlan,
    columns: ResolvedColumns,
    verifier: EmailVerifier,
) -> ActionResult:
    """Verify the plan's email and write the terminal status flag.

    The flag is role_account for generic mailboxes, otherwise the returned
    status. A verifier error (missing credentials, transport failure) is an
    action failure and leaves the row untouched.
    """
    if not plan.email:
        return ActionResult(success=False, error="no email to verify")

    verification = verifier.verify(plan.email)
    if verification.error:
        return ActionResult(
            success=False,
            error=verification.error,
            status=verification.status,
            is_role_account=verification.is_role_account,
        )

    if verification.is_role_account:
        flag = CellFlag.ROLE_ACCOUNT
    else:
        flag = _STATUS_FLAGS[verification.status]
    result = store.update_row(plan.row_id, flags={_email_column(columns): flag})
    if not result.ok:
        return ActionResult(success=False, error=result.error or "row update failed")
    return ActionResult(
        success=True,
        email=plan.email,
        status=verification.status,
        is_role_account=verification.is_role_account,
    )
