from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from pathlib import Path

import requests

from ..config.loader import AppConfig
from ..csvio.reader import collect_columns, read_csv_file, write_csv_file
from ..db.postgres_store import PostgresRowStore
from ..db.row_store import MemoryRowStore, RowStore
from ..models.cleanup_result import CleanupSummary
from ..models.enrichment import EnrichmentSummary
from ..models.row import TERMINAL_FLAGS, ListRecord, Row
from ..providers.contact_inference import ClaudeContactInferrer
from ..providers.icypeas import IcypeasEmailFinder
from ..providers.millionverifier import MillionVerifierClient
from ..providers.scraper import WebsiteScraper
from .cleanup import run_cleanup
from .pipeline import EnrichmentPipeline, ProgressCallback

"""List-level orchestration: import -> cleanup -> enrich -> export.

Each operation loads what it needs from the row store, does its work and
writes the result back, so the steps can run in one process (memory
backend, `leadscrub run`) or across invocations (PostgreSQL backend).

Fatal conditions (unknown list, unreadable CSV, failed bulk write) raise;
per-row enrichment failures never do, they are counted in the summary.
"""

__all__ = [
    "ProcessingError",
    "open_store",
    "build_pipeline",
    "import_csv",
    "cleanup_list",
    "clear_enrichment_flags",
    "enrich_list",
    "export_csv",
]

logger = logging.getLogger(__name__)


class ProcessingError(Exception):
    """Base exception for orchestration failures."""


def open_store(config: AppConfig) -> RowStore:
    if config.storage.backend == "postgres":
        if not config.storage.dsn:
            raise ProcessingError("postgres backend selected but no DSN configured")
        store = PostgresRowStore.connect(config.storage.dsn)
        store.ensure_schema()
        return store
    return MemoryRowStore()


def build_pipeline(
    config: AppConfig,
    store: RowStore,
    *,
    session: requests.Session | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> EnrichmentPipeline:
    """Wire the production providers from configuration and environment."""
    session = session or requests.Session()
    scraper_cfg = config.scraper
    return EnrichmentPipeline(
        store,
        WebsiteScraper(
            session=session,
            timeout_seconds=scraper_cfg.timeout_seconds,
            max_sub_pages=scraper_cfg.max_sub_pages,
            max_text_length=scraper_cfg.max_text_length,
            user_agent=scraper_cfg.user_agent,
        ),
        ClaudeContactInferrer(model=config.enrichment.contact_model),
        IcypeasEmailFinder(session=session),
        MillionVerifierClient(session=session),
        api_delay_seconds=config.enrichment.api_delay_seconds,
        sleep=sleep,
    )


def import_csv(store: RowStore, path: Path, name: str | None = None) -> ListRecord:
    """Read a CSV file and store it as a new list. CsvReadError propagates."""
    table = read_csv_file(path)
    record = store.create_list(name or path.stem, table.columns, table.records)
    logger.info("imported list=%s name=%s rows=%d columns=%d", record.id, record.name, record.row_count, len(record.columns))
    return record


def cleanup_list(store: RowStore, list_id: str) -> CleanupSummary:
    """Run the cleanup stages over a stored list and write the rows back."""
    record = store.get_list(list_id)
    rows = store.list_rows(list_id)
    result = run_cleanup(rows, record.columns)
    saved = store.save_rows(result.rows)
    if saved != len(result.rows):
        raise ProcessingError(f"cleanup write-back incomplete list={list_id} saved={saved}/{len(result.rows)}")
    store.update_list(list_id, columns=result.columns, cleaned=True)
    logger.info("cleaned list=%s rows=%d changes=%d", list_id, len(rows), result.summary.total_changes)
    return result.summary


def clear_enrichment_flags(store: RowStore, rows: Sequence[Row]) -> int:
    """Remove terminal flags so previously enriched rows are planned again.

    Values are kept; only enriched / valid / invalid / risky / role_account
    flags are dropped. Returns the number of rows changed.
    """
    changed = 0
    for row in rows:
        kept = {col: flag for col, flag in row.flags.items() if flag not in TERMINAL_FLAGS}
        if len(kept) == len(row.flags):
            continue
        result = store.update_row(row.id, flags=kept, replace_flags=True)
        if not result.ok:
            raise ProcessingError(f"failed clearing flags row={row.id}: {result.error}")
        row.flags = kept
        changed += 1
    logger.info("cleared enrichment flags rows=%d", changed)
    return changed


def enrich_list(
    store: RowStore,
    list_id: str,
    pipeline: EnrichmentPipeline,
    *,
    rerun: bool = False,
    on_progress: ProgressCallback | None = None,
) -> EnrichmentSummary:
    """Run the enrichment pipeline over a stored list.

    Rows already carrying a terminal flag are skipped unless `rerun` clears
    those flags first. The list's columns are extended with any keys the
    run wrote (Title, enrichment_source, ...).
    """
    record = store.get_list(list_id)
    rows = store.list_rows(list_id)
    if rerun:
        clear_enrichment_flags(store, rows)

    summary = pipeline.run(rows, record.columns, list_id, on_progress)

    updated = store.list_rows(list_id)
    columns = collect_columns(record.columns, (row.data for row in updated))
    store.update_list(list_id, columns=columns, enriched=True)
    return summary


def export_csv(store: RowStore, list_id: str, path: Path, *, exclude_duplicates: bool = False) -> int:
    """Write a stored list to CSV. Returns the number of rows written."""
    record = store.get_list(list_id)
    rows = store.list_rows(list_id)
    if exclude_duplicates:
        rows = [row for row in rows if not row.is_duplicate]
    columns = collect_columns(record.columns, (row.data for row in rows))
    written = write_csv_file(path, columns, [row.data for row in rows])
    logger.info("exported list=%s rows=%d path=%s", list_id, written, path)
    return written
