from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from ..constants import (
    EMAIL_COLUMN_PATTERNS,
    EMAIL_TYPE_COLUMN,
    FIRST_NAME_PATTERNS,
    FREE_EMAIL_DOMAINS,
    LAST_NAME_PATTERNS,
    NAME_COLUMN_PATTERNS,
    PHONE_COLUMN_PATTERNS,
    PRESERVE_ACRONYMS,
    SPLIT_FIRST_NAME_COLUMN,
    SPLIT_LAST_NAME_COLUMN,
)
from ..models.cleanup_result import CleanupResult, CleanupSummary, StageResult
from ..models.row import CellFlag, Row
from .columns import find_column, matches_any

"""Deterministic list cleanup.

Six stages run in a fixed order by run_cleanup(); each stage mutates rows in
place, may extend the column list, and reports how many rows it changed:

1. split_names          full name -> first_name / last_name
2. standardize_caps     ALL CAPS / all lower names -> Title Case
3. format_phones        10/11 digit US numbers -> (AAA) BBB-CCCC
4. detect_email_type    personal vs business email -> email_type column
5. remove_duplicates    email+phone composite key, later rows marked duplicate
6. flag_missing         blank cells flagged "missing" (existing flags kept)

Re-running cleanup on its own output changes nothing: every stage only counts
a row when a value, flag or duplicate marker actually changed.
"""

__all__ = [
    "split_names",
    "standardize_caps",
    "format_phone",
    "format_phones",
    "detect_email_type",
    "dedup_key",
    "remove_duplicates",
    "flag_missing",
    "run_cleanup",
    "to_title_case",
]

logger = logging.getLogger(__name__)

_NAME_ROLE_PATTERNS = (*NAME_COLUMN_PATTERNS, *FIRST_NAME_PATTERNS, *LAST_NAME_PATTERNS)
_ACRONYMS_BY_UPPER = {a.upper(): a for a in PRESERVE_ACRONYMS}
_WHITESPACE = re.compile(r"\s+")
_NON_DIGIT = re.compile(r"\D")


def split_names(rows: list[Row], columns: Sequence[str]) -> StageResult:
    """Split a full-name column into first_name / last_name.

    Skipped entirely when no name column resolves or when the list already
    has a first-name or last-name column. The two new columns are inserted
    right after the source column, once, if at least one row was split.
    """
    name_col = find_column(columns, NAME_COLUMN_PATTERNS)
    if name_col is None:
        return StageResult(list(columns), 0)
    if find_column(columns, FIRST_NAME_PATTERNS) or find_column(columns, LAST_NAME_PATTERNS):
        return StageResult(list(columns), 0)

    count = 0
    for row in rows:
        full_name = row.value(name_col).strip()
        if not full_name:
            continue
        parts = _WHITESPACE.split(full_name)
        row.set_value(SPLIT_FIRST_NAME_COLUMN, parts[0], CellFlag.SPLIT)
        row.set_value(SPLIT_LAST_NAME_COLUMN, " ".join(parts[1:]), CellFlag.SPLIT)
        count += 1

    new_columns = list(columns)
    if count:
        idx = new_columns.index(name_col)
        new_columns[idx + 1:idx + 1] = [SPLIT_FIRST_NAME_COLUMN, SPLIT_LAST_NAME_COLUMN]
    return StageResult(new_columns, count)


def to_title_case(value: str) -> str:
    words = []
    for word in _WHITESPACE.split(value):
        preserved = _ACRONYMS_BY_UPPER.get(word.upper())
        if preserved is not None:
            words.append(preserved)
        elif word:
            words.append(word[0].upper() + word[1:].lower())
        else:
            words.append(word)
    return " ".join(words)


def _needs_case_fix(value: str) -> bool:
    if len(value) <= 1:
        return False
    return value == value.upper() or value == value.lower()


def standardize_caps(rows: list[Row], columns: Sequence[str]) -> StageResult:
    """Title-case name columns whose value is entirely upper or lower case."""
    name_cols = [c for c in columns if matches_any(c, _NAME_ROLE_PATTERNS)]
    if not name_cols:
        return StageResult(list(columns), 0)

    count = 0
    for row in rows:
        changed = False
        for col in name_cols:
            val = row.value(col)
            if not val or not _needs_case_fix(val):
                continue
            fixed = to_title_case(val)
            if fixed != val:
                row.set_value(col, fixed, CellFlag.CLEANED)
                changed = True
        if changed:
            count += 1
    return StageResult(list(columns), count)


def format_phone(raw: str) -> str | None:
    """Format a US phone number as (AAA) BBB-CCCC, None when not 10/11 digits."""
    digits = _NON_DIGIT.sub("", raw)
    if len(digits) == 11 and digits.startswith("1"):
        digits = digits[1:]
    if len(digits) != 10:
        return None
    return f"({digits[:3]}) {digits[3:6]}-{digits[6:]}"


def format_phones(rows: list[Row], columns: Sequence[str]) -> StageResult:
    phone_cols = [c for c in columns if matches_any(c, PHONE_COLUMN_PATTERNS)]
    if not phone_cols:
        return StageResult(list(columns), 0)

    count = 0
    for row in rows:
        changed = False
        for col in phone_cols:
            val = row.value(col)
            if not val:
                continue
            formatted = format_phone(val)
            if formatted and formatted != val:
                row.set_value(col, formatted, CellFlag.FORMATTED)
                changed = True
        if changed:
            count += 1
    return StageResult(list(columns), count)


def detect_email_type(rows: list[Row], columns: Sequence[str]) -> StageResult:
    """Classify each email as personal (free provider) or business.

    The classification goes to the email_type column, which is appended to
    the column list once. Rows without an "@" in the email are left alone.
    """
    email_col = find_column(columns, EMAIL_COLUMN_PATTERNS)
    if email_col is None:
        return StageResult(list(columns), 0)

    count = 0
    for row in rows:
        email = row.value(email_col).strip().lower()
        if not email or "@" not in email:
            continue
        domain = email.split("@")[1]
        if domain in FREE_EMAIL_DOMAINS:
            email_type, flag = "personal", CellFlag.PERSONAL_EMAIL
        else:
            email_type, flag = "business", CellFlag.BUSINESS_EMAIL
        if row.data.get(EMAIL_TYPE_COLUMN) == email_type and row.flags.get(EMAIL_TYPE_COLUMN) == flag:
            continue
        row.set_value(EMAIL_TYPE_COLUMN, email_type, flag)
        count += 1

    new_columns = list(columns)
    if EMAIL_TYPE_COLUMN not in new_columns:
        new_columns.append(EMAIL_TYPE_COLUMN)
    return StageResult(new_columns, count)


def dedup_key(row: Row, email_col: str | None, phone_col: str | None) -> str:
    """Composite key: lower-cased trimmed email + "||" + phone digits."""
    email_val = row.value(email_col).strip().lower() if email_col else ""
    phone_val = _NON_DIGIT.sub("", row.value(phone_col)) if phone_col else ""
    return f"{email_val}||{phone_val}"


def remove_duplicates(rows: list[Row], columns: Sequence[str]) -> StageResult:
    """Mark every row whose composite key was already seen as a duplicate.

    The key is compared as a literal string; rows with an empty key (no email
    and no phone) are never duplicates. Duplicate markers are never cleared.
    """
    email_col = find_column(columns, EMAIL_COLUMN_PATTERNS)
    phone_col = find_column(columns, PHONE_COLUMN_PATTERNS)
    if email_col is None and phone_col is None:
        return StageResult(list(columns), 0)

    seen: set[str] = set()
    count = 0
    for row in rows:
        key = dedup_key(row, email_col, phone_col)
        if key == "||":
            continue
        if key in seen:
            if not row.is_duplicate:
                row.is_duplicate = True
                count += 1
            continue
        seen.add(key)
    return StageResult(list(columns), count)


def flag_missing(rows: list[Row], columns: Sequence[str]) -> StageResult:
    count = 0
    for row in rows:
        changed = False
        for col in columns:
            val = row.data.get(col)
            if val is not None and val.strip() != "":
                continue
            # never overwrite an existing flag
            if col not in row.flags:
                row.flags[col] = CellFlag.MISSING
                changed = True
        if changed:
            count += 1
    return StageResult(list(columns), count)


def run_cleanup(rows: list[Row], columns: Sequence[str]) -> CleanupResult:
    """Run the six cleanup stages in order.

    Args:
        rows: Rows of one list; mutated in place
        columns: The list's ordered column set

    Returns:
        CleanupResult with the same rows, the (possibly extended) column list
        and per-stage row counts
    """
    names = split_names(rows, columns)
    caps = standardize_caps(rows, names.columns)
    phones = format_phones(rows, caps.columns)
    emails = detect_email_type(rows, phones.columns)
    dupes = remove_duplicates(rows, emails.columns)
    missing = flag_missing(rows, dupes.columns)

    summary = CleanupSummary(
        names_split=names.count,
        caps_fixed=caps.count,
        phones_formatted=phones.count,
        emails_classified=emails.count,
        duplicates_found=dupes.count,
        missing_flagged=missing.count,
    )
    logger.debug(
        "cleanup rows=%d names_split=%d caps_fixed=%d phones_formatted=%d "
        "emails_classified=%d duplicates=%d missing_flagged=%d",
        len(rows), summary.names_split, summary.caps_fixed, summary.phones_formatted,
        summary.emails_classified, summary.duplicates_found, summary.missing_flagged,
    )
    return CleanupResult(rows=rows, columns=missing.columns, summary=summary)
