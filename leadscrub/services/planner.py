from __future__ import annotations

import logging
from collections.abc import Sequence
from urllib.parse import urlsplit

from ..constants import FREE_EMAIL_DOMAINS
from ..models.enrichment import EnrichmentNeed, EnrichmentPlan
from ..models.row import Row
from .columns import ResolvedColumns, resolve_columns

"""Enrichment planner.

Classifies every row into exactly one EnrichmentNeed. First matching rule
wins:

1. any terminal enrichment flag on the row       -> skip
2. row marked duplicate                          -> skip
3. business email present                        -> verify_only
4. website present, email absent or personal     -> scrape_and_find
5. first name, last name and domain all present  -> find_email
6. otherwise                                     -> skip

The target domain is the email's domain for business addresses, otherwise
the website's hostname (without "www."), otherwise the value of a domain
column. Unparseable emails/URLs simply yield no domain.
"""

__all__ = [
    "email_domain",
    "url_domain",
    "is_personal_domain",
    "row_label",
    "plan_row",
    "analyze_needs",
]

logger = logging.getLogger(__name__)


def email_domain(email: str) -> str | None:
    """Lower-cased domain of `email`, None unless it has exactly one "@"."""
    parts = email.split("@")
    if len(parts) != 2 or not parts[1]:
        return None
    return parts[1].lower()


def url_domain(url: str) -> str | None:
    """Hostname of `url` (https:// assumed when schemeless) without "www."."""
    normalized = url.strip()
    if not normalized:
        return None
    if not normalized.lower().startswith(("http://", "https://")):
        normalized = "https://" + normalized
    try:
        host = urlsplit(normalized).hostname
    except ValueError:
        return None
    if not host or any(ch.isspace() for ch in host):
        return None
    return host.removeprefix("www.")


def is_personal_domain(domain: str | None) -> bool:
    return domain is not None and domain in FREE_EMAIL_DOMAINS


def row_label(row: Row, first_name: str = "", last_name: str = "", fallback: str = "") -> str:
    """Short label for log entries: person name, else website/email, else row number."""
    full = f"{first_name} {last_name}".strip()
    if full:
        return full
    if fallback:
        return fallback
    return f"Row {row.row_index + 1}"


def plan_row(row: Row, resolved: ResolvedColumns) -> EnrichmentPlan:
    data = row.data

    if row.has_terminal_flag() or row.is_duplicate:
        return EnrichmentPlan(
            row_id=row.id,
            need=EnrichmentNeed.SKIP,
            existing_data=dict(data),
            label=row_label(row),
        )

    email = row.value(resolved.email_col).strip()
    website = row.value(resolved.website_col).strip()
    first_name = row.value(resolved.first_name_col).strip()
    last_name = row.value(resolved.last_name_col).strip()
    domain_hint = row.value(resolved.domain_col).strip()

    mail_domain = email_domain(email) if email else None
    is_business = mail_domain is not None and not is_personal_domain(mail_domain)
    site_domain = url_domain(website) if website else None
    if is_business:
        domain = mail_domain
    else:
        domain = site_domain or (url_domain(domain_hint) if domain_hint else None)

    label = row_label(row, first_name, last_name, fallback=website or email)

    if email and is_business:
        return EnrichmentPlan(
            row_id=row.id,
            need=EnrichmentNeed.VERIFY_ONLY,
            existing_data=dict(data),
            email=email,
            domain=domain,
            label=label,
        )

    if website:
        return EnrichmentPlan(
            row_id=row.id,
            need=EnrichmentNeed.SCRAPE_AND_FIND,
            existing_data=dict(data),
            website_url=website,
            first_name=first_name or None,
            last_name=last_name or None,
            domain=domain,
            label=label,
        )

    if first_name and last_name and domain:
        return EnrichmentPlan(
            row_id=row.id,
            need=EnrichmentNeed.FIND_EMAIL,
            existing_data=dict(data),
            first_name=first_name,
            last_name=last_name,
            domain=domain,
            label=label,
        )

    return EnrichmentPlan(
        row_id=row.id,
        need=EnrichmentNeed.SKIP,
        existing_data=dict(data),
        label=label,
    )


def analyze_needs(
    rows: Sequence[Row],
    columns: Sequence[str],
    resolved: ResolvedColumns | None = None,
) -> list[EnrichmentPlan]:
    """Build one EnrichmentPlan per row, in row order.

    Args:
        rows: Rows of the list
        columns: The list's column set (used when `resolved` is not given)
        resolved: Pre-resolved column roles

    Returns:
        Plans in the same order as `rows`
    """
    if resolved is None:
        resolved = resolve_columns(columns)
    plans = [plan_row(row, resolved) for row in rows]
    logger.debug(
        "planned rows=%d active=%d",
        len(plans),
        sum(1 for p in plans if p.need is not EnrichmentNeed.SKIP),
    )
    return plans
