from __future__ import annotations

from ..models.cleanup_result import CleanupSummary
from ..models.enrichment import EnrichmentSummary

"""SUMMARY line rendering for cleanup and enrichment runs.

Formats (one line each, space separated key=value, fixed key order):

    SUMMARY cleanup names_split={n} caps_fixed={n} phones_formatted={n}
        emails_classified={n} duplicates={n} missing_flagged={n}
    SUMMARY enrichment contacts={n} found={n} patterns={n} verified={n}
        valid={n} invalid={n} risky={n} unknown={n} role={n} skipped={n}
        errors={n}
"""

__all__ = [
    "render_cleanup_summary_line",
    "render_enrichment_summary_line",
]


def render_cleanup_summary_line(summary: CleanupSummary) -> str:
    """Render the cleanup SUMMARY line.

    Examples:
        >>> render_cleanup_summary_line(CleanupSummary(names_split=2, duplicates_found=1))
        'SUMMARY cleanup names_split=2 caps_fixed=0 phones_formatted=0 emails_classified=0 duplicates=1 missing_flagged=0'
    """
    return (
        f"SUMMARY cleanup names_split={summary.names_split} "
        f"caps_fixed={summary.caps_fixed} "
        f"phones_formatted={summary.phones_formatted} "
        f"emails_classified={summary.emails_classified} "
        f"duplicates={summary.duplicates_found} "
        f"missing_flagged={summary.missing_flagged}"
    )


def render_enrichment_summary_line(summary: EnrichmentSummary) -> str:
    return (
        f"SUMMARY enrichment contacts={summary.contacts_extracted} "
        f"found={summary.emails_found} "
        f"patterns={summary.patterns_generated} "
        f"verified={summary.emails_verified} "
        f"valid={summary.valid_emails} "
        f"invalid={summary.invalid_emails} "
        f"risky={summary.risky_emails} "
        f"unknown={summary.unknown_emails} "
        f"role={summary.role_accounts} "
        f"skipped={summary.rows_skipped} "
        f"errors={summary.errors}"
    )
