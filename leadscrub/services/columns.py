from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from ..constants import (
    DEFAULT_FIRST_NAME_COLUMN,
    DEFAULT_LAST_NAME_COLUMN,
    DOMAIN_COLUMN_PATTERNS,
    EMAIL_COLUMN_PATTERNS,
    FIRST_NAME_PATTERNS,
    LAST_NAME_PATTERNS,
    NAME_COLUMN_PATTERNS,
    PHONE_COLUMN_PATTERNS,
    WEBSITE_COLUMN_PATTERNS,
)

"""Column role resolution.

Given a list's column names, work out which column plays the name, first
name, last name, email, website, phone and domain roles. Every role has an
ordered list of case-insensitive whole-string patterns; the first column (in
column order) matching any of them wins. Resolution is pure.
"""

__all__ = [
    "ResolvedColumns",
    "matches_any",
    "find_column",
    "resolve_columns",
]

Patterns = Sequence[re.Pattern[str]]


@dataclass(frozen=True)
class ResolvedColumns:
    """Column name per semantic role.

    first_name_col / last_name_col always hold a column name: when no column
    matches, they fall back to "First Name" / "Last Name" so enrichment has
    somewhere to write. `has_first_name` / `has_last_name` tell whether the
    column actually exists in the list.
    """
    name_col: str | None
    first_name_col: str
    last_name_col: str
    email_col: str | None
    website_col: str | None
    phone_col: str | None
    domain_col: str | None = None
    has_first_name: bool = False
    has_last_name: bool = False

    def describe(self) -> str:
        return (
            f"first_name={self.first_name_col} last_name={self.last_name_col} "
            f"email={self.email_col or '-'} website={self.website_col or '-'} "
            f"domain={self.domain_col or '-'}"
        )


def matches_any(column: str, patterns: Patterns) -> bool:
    return any(p.match(column) for p in patterns)


def find_column(columns: Iterable[str], patterns: Patterns) -> str | None:
    """Return the first column matching any of `patterns`, else None."""
    for col in columns:
        if matches_any(col, patterns):
            return col
    return None


def resolve_columns(columns: Sequence[str]) -> ResolvedColumns:
    first = find_column(columns, FIRST_NAME_PATTERNS)
    last = find_column(columns, LAST_NAME_PATTERNS)
    return ResolvedColumns(
        name_col=find_column(columns, NAME_COLUMN_PATTERNS),
        first_name_col=first or DEFAULT_FIRST_NAME_COLUMN,
        last_name_col=last or DEFAULT_LAST_NAME_COLUMN,
        email_col=find_column(columns, EMAIL_COLUMN_PATTERNS),
        website_col=find_column(columns, WEBSITE_COLUMN_PATTERNS),
        phone_col=find_column(columns, PHONE_COLUMN_PATTERNS),
        domain_col=find_column(columns, DOMAIN_COLUMN_PATTERNS),
        has_first_name=first is not None,
        has_last_name=last is not None,
    )
