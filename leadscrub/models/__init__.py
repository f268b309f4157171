"""Domain models for the leadscrub cleanup / enrichment tool.

Rows and lists, cleanup results, enrichment plans and summaries, and the
enrichment audit log entry.
"""

from .cleanup_result import CleanupResult, CleanupSummary, StageResult
from .enrichment import EnrichmentNeed, EnrichmentPlan, EnrichmentProgress, EnrichmentSummary
from .log_entry import LogAction, LogEntry, LogResult
from .row import TERMINAL_FLAGS, CellFlag, ListRecord, Row

__all__ = [
    # Rows and lists
    "CellFlag",
    "TERMINAL_FLAGS",
    "Row",
    "ListRecord",
    # Cleanup
    "CleanupResult",
    "CleanupSummary",
    "StageResult",
    # Enrichment
    "EnrichmentNeed",
    "EnrichmentPlan",
    "EnrichmentProgress",
    "EnrichmentSummary",
    "LogAction",
    "LogEntry",
    "LogResult",
]
