from __future__ import annotations

import logging
import time
from collections import Counter
from collections.abc import Callable, Sequence

from ..db.row_store import RowStore
from ..models.enrichment import EnrichmentNeed, EnrichmentPlan, EnrichmentProgress, EnrichmentSummary
from ..models.log_entry import LogAction, LogResult
from ..models.row import Row
from ..providers.base import ContactInferrer, EmailFinder, EmailVerifier, TextExtractor, VerificationStatus
from . import actions
from .actions import ActionResult
from .columns import ResolvedColumns, resolve_columns
from .patterns import generate_email_patterns
from .planner import analyze_needs

"""Staged enrichment pipeline.

Phases run strictly in order, one plan at a time:

1. resolve columns     (system log entry)
2. scrape & extract    scrape_and_find plans -> contact names / title
3. find email          scrape_and_find / find_email plans with name + domain;
                       a failed lookup demotes the plan to generate_patterns
4. generate patterns   first of the twelve candidates becomes the email
5. verify              every plan now carrying an email

A failure is confined to its plan: it is counted in `errors`, logged, and
the run moves on. The run always completes and returns the summary.

Progress `total` is the number of non-skip plans computed up front. Phases
3-5 can add work beyond it (a scraped row is also looked up and verified),
so `current` is clamped to `total` rather than exceeding it.
"""

__all__ = [
    "ProgressCallback",
    "DEFAULT_API_DELAY_SECONDS",
    "EnrichmentPipeline",
]

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[EnrichmentProgress], None]

DEFAULT_API_DELAY_SECONDS = 0.2


def _noop_progress(progress: EnrichmentProgress) -> None:
    return None


class EnrichmentPipeline:
    """Runs planned enrichment work against the capability providers.

    One instance may run many times; each run() builds fresh plans and a
    fresh summary. Runs are not serialized here: callers must not start two
    runs for the same list concurrently.
    """

    def __init__(
        self,
        store: RowStore,
        extractor: TextExtractor,
        inferrer: ContactInferrer,
        finder: EmailFinder,
        verifier: EmailVerifier,
        *,
        api_delay_seconds: float = DEFAULT_API_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.store = store
        self.extractor = extractor
        self.inferrer = inferrer
        self.finder = finder
        self.verifier = verifier
        self.api_delay_seconds = api_delay_seconds
        self._sleep = sleep

        # per-run state
        self._summary = EnrichmentSummary()
        self._on_progress: ProgressCallback = _noop_progress
        self._current = 0
        self._total = 0

    # -- progress / bookkeeping -------------------------------------------

    def _advance(self, step: str) -> None:
        self._current = min(self._current + 1, self._total)
        self._on_progress(
            EnrichmentProgress(
                step=f"{step} ({self._current}/{self._total})",
                current=self._current,
                total=self._total,
                errors=self._summary.errors,
            )
        )

    def _delay(self) -> None:
        if self.api_delay_seconds > 0:
            self._sleep(self.api_delay_seconds)

    def _log(self, action: LogAction, result: LogResult, detail: str, plan: EnrichmentPlan | None = None) -> None:
        self._summary.add_log(
            action,
            result,
            detail,
            row_id=plan.row_id if plan else "",
            row_label=plan.label if plan else "",
        )
        level = logging.WARNING if result is LogResult.ERROR else logging.DEBUG
        logger.log(level, "%s %s %s %s", action.value, result.value, plan.label if plan else "-", detail)

    def _call(self, action: Callable[[], ActionResult]) -> ActionResult:
        """Invoke one action; unexpected exceptions become a failed result."""
        try:
            return action()
        except Exception as e:
            logger.exception("enrichment action raised")
            return ActionResult(success=False, error=f"unexpected error: {e}")

    # -- run -----------------------------------------------------------------

    def run(
        self,
        rows: Sequence[Row],
        columns: Sequence[str],
        list_id: str,
        on_progress: ProgressCallback | None = None,
    ) -> EnrichmentSummary:
        """Enrich one list.

        Args:
            rows: Current rows of the list (read only; writes go to the store)
            columns: The list's column set
            list_id: Identifier of the list, used for log context
            on_progress: Called synchronously before each unit of work

        Returns:
            EnrichmentSummary with counters and the audit log
        """
        self._summary = EnrichmentSummary()
        self._on_progress = on_progress or _noop_progress
        self._current = 0
        self._total = 0

        resolved = resolve_columns(columns)
        self._log(LogAction.RESOLVE_COLUMNS, LogResult.SUCCESS, resolved.describe())

        plans = analyze_needs(rows, columns, resolved)
        needs = Counter(p.need for p in plans)
        active = [p for p in plans if p.need is not EnrichmentNeed.SKIP]
        self._summary.rows_skipped = needs[EnrichmentNeed.SKIP]
        self._total = len(active)
        self._log(
            LogAction.ANALYZE_NEEDS,
            LogResult.SUCCESS,
            " ".join(f"{need.value}={needs[need]}" for need in EnrichmentNeed),
        )
        self._on_progress(
            EnrichmentProgress(step="Analyzing rows...", current=0, total=self._total, errors=0)
        )
        logger.info("enrichment list=%s rows=%d active=%d", list_id, len(plans), self._total)

        if not active:
            self._log(LogAction.COMPLETE, LogResult.SUCCESS, "Nothing to enrich")
            return self._summary

        self._scrape_phase(active, resolved)
        self._find_email_phase(active, resolved)
        self._pattern_phase(active, resolved)
        self._verify_phase(active, resolved)
        self._complete()
        return self._summary

    # -- phases ----------------------------------------------------------------

    def _scrape_phase(self, plans: list[EnrichmentPlan], resolved: ResolvedColumns) -> None:
        for plan in plans:
            if plan.need is not EnrichmentNeed.SCRAPE_AND_FIND:
                continue
            self._advance("Scraping websites...")
            result = self._call(
                lambda: actions.scrape_contact(self.store, plan, resolved, self.extractor, self.inferrer)
            )
            if result.success:
                self._summary.contacts_extracted += 1
                if result.first_name:
                    plan.first_name = result.first_name
                if result.last_name:
                    plan.last_name = result.last_name
                name = f"{result.first_name or ''} {result.last_name or ''}".strip()
                detail = f"Found {name}" + (f" ({result.title})" if result.title else "")
                self._log(LogAction.SCRAPE, LogResult.SUCCESS, detail, plan)
            else:
                self._summary.errors += 1
                self._log(LogAction.SCRAPE, LogResult.ERROR, result.error or "scrape failed", plan)
            self._delay()

    def _find_email_phase(self, plans: list[EnrichmentPlan], resolved: ResolvedColumns) -> None:
        lookup_needs = (EnrichmentNeed.SCRAPE_AND_FIND, EnrichmentNeed.FIND_EMAIL)
        for plan in plans:
            if plan.need not in lookup_needs:
                continue
            if not plan.has_lookup_inputs:
                self._log(LogAction.FIND_EMAIL, LogResult.SKIP, "Missing first name, last name or domain", plan)
                continue
            self._advance("Finding emails...")
            result = self._call(lambda: actions.find_email(self.store, plan, resolved, self.finder))
            if result.success and result.email:
                self._summary.emails_found += 1
                plan.email = result.email
                self._log(LogAction.FIND_EMAIL, LogResult.SUCCESS, f"Found {result.email}", plan)
            else:
                plan.need = EnrichmentNeed.GENERATE_PATTERNS
                if result.error:
                    self._summary.errors += 1
                    self._log(
                        LogAction.FIND_EMAIL,
                        LogResult.ERROR,
                        f"{result.error}; falling back to patterns",
                        plan,
                    )
                else:
                    self._log(LogAction.FIND_EMAIL, LogResult.SKIP, "No email found; falling back to patterns", plan)
            self._delay()

    def _pattern_phase(self, plans: list[EnrichmentPlan], resolved: ResolvedColumns) -> None:
        for plan in plans:
            if plan.need is not EnrichmentNeed.GENERATE_PATTERNS:
                continue
            self._advance("Generating patterns...")
            candidates = generate_email_patterns(plan.first_name or "", plan.last_name or "", plan.domain or "")
            if not candidates:
                self._summary.errors += 1
                self._log(
                    LogAction.GENERATE_PATTERN,
                    LogResult.ERROR,
                    "Missing first name, last name or domain",
                    plan,
                )
                continue
            best_guess = candidates[0]
            result = self._call(lambda: actions.apply_pattern_email(self.store, plan, resolved, best_guess))
            if result.success:
                self._summary.patterns_generated += 1
                plan.email = best_guess
                self._log(
                    LogAction.GENERATE_PATTERN,
                    LogResult.SUCCESS,
                    f"Guessed {best_guess} (1 of {len(candidates)} patterns)",
                    plan,
                )
            else:
                self._summary.errors += 1
                self._log(LogAction.GENERATE_PATTERN, LogResult.ERROR, result.error or "write failed", plan)

    def _verify_phase(self, plans: list[EnrichmentPlan], resolved: ResolvedColumns) -> None:
        summary = self._summary
        for plan in plans:
            if not plan.email:
                continue
            self._advance("Verifying emails...")
            result = self._call(lambda: actions.verify_email(self.store, plan, resolved, self.verifier))
            if result.success:
                summary.emails_verified += 1
                if result.status is VerificationStatus.VALID:
                    summary.valid_emails += 1
                elif result.status is VerificationStatus.INVALID:
                    summary.invalid_emails += 1
                elif result.status is VerificationStatus.RISKY:
                    summary.risky_emails += 1
                else:
                    summary.unknown_emails += 1
                if result.is_role_account:
                    summary.role_accounts += 1
                detail = f"{plan.email}: {result.status.value}" + (" (role account)" if result.is_role_account else "")
                self._log(LogAction.VERIFY_EMAIL, LogResult.SUCCESS, detail, plan)
            else:
                summary.errors += 1
                self._log(LogAction.VERIFY_EMAIL, LogResult.ERROR, result.error or "verification failed", plan)
            self._delay()

    def _complete(self) -> None:
        s = self._summary
        detail = (
            f"contacts={s.contacts_extracted} emails={s.emails_found} patterns={s.patterns_generated} "
            f"verified={s.emails_verified} errors={s.errors}"
        )
        if s.errors:
            self._log(LogAction.COMPLETE, LogResult.ERROR, f"Completed with errors: {detail}")
        else:
            self._log(LogAction.COMPLETE, LogResult.SUCCESS, f"Completed: {detail}")
