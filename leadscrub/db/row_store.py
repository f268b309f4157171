from __future__ import annotations

import uuid
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, replace
from typing import Protocol

from ..models.row import CellFlag, ListRecord, Row

"""Row storage contract and in-memory implementation.

The store is the only durable state of a run: every enrichment write is
committed immediately through update_row(), so a crash mid-run leaves the
already-written rows intact. Row-level write failures (unknown row, rejected
write) come back as StoreResult(ok=False) and never raise; list-level lookups
of an unknown list raise StoreError.

MemoryRowStore backs the one-shot CLI mode and the test suite; the PostgreSQL
implementation lives in postgres_store.
"""

__all__ = [
    "StoreError",
    "StoreResult",
    "RowStore",
    "MemoryRowStore",
    "new_id",
]


class StoreError(Exception):
    """Raised for list-level storage failures (unknown list, connection)."""


@dataclass(frozen=True)
class StoreResult:
    ok: bool
    error: str | None = None


def new_id() -> str:
    return str(uuid.uuid4())


class RowStore(Protocol):
    def create_list(
        self, name: str, columns: Sequence[str], records: Iterable[Mapping[str, str]]
    ) -> ListRecord: ...

    def get_list(self, list_id: str) -> ListRecord: ...

    def update_list(
        self,
        list_id: str,
        *,
        columns: Sequence[str] | None = None,
        cleaned: bool | None = None,
        enriched: bool | None = None,
    ) -> ListRecord: ...

    def list_rows(self, list_id: str) -> list[Row]: ...

    def get_row(self, row_id: str) -> Row | None: ...

    def update_row(
        self,
        row_id: str,
        *,
        data: Mapping[str, str] | None = None,
        flags: Mapping[str, CellFlag] | None = None,
        is_duplicate: bool | None = None,
        replace_flags: bool = False,
    ) -> StoreResult: ...

    def save_rows(self, rows: Sequence[Row]) -> int: ...


def _copy_row(row: Row) -> Row:
    return replace(row, data=dict(row.data), flags=dict(row.flags))


class MemoryRowStore:
    """Dict-backed RowStore. Hands out copies so callers never alias stored rows."""

    def __init__(self) -> None:
        self._lists: dict[str, ListRecord] = {}
        self._rows: dict[str, Row] = {}
        self._row_ids: dict[str, list[str]] = {}

    def create_list(
        self, name: str, columns: Sequence[str], records: Iterable[Mapping[str, str]]
    ) -> ListRecord:
        list_id = new_id()
        ids: list[str] = []
        for index, record in enumerate(records):
            row = Row(id=new_id(), list_id=list_id, row_index=index, data=dict(record))
            self._rows[row.id] = row
            ids.append(row.id)
        record_ = ListRecord(id=list_id, name=name, columns=list(columns), row_count=len(ids))
        self._lists[list_id] = record_
        self._row_ids[list_id] = ids
        return replace(record_, columns=list(record_.columns))

    def get_list(self, list_id: str) -> ListRecord:
        try:
            found = self._lists[list_id]
        except KeyError:
            raise StoreError(f"list not found: {list_id}") from None
        return replace(found, columns=list(found.columns))

    def update_list(
        self,
        list_id: str,
        *,
        columns: Sequence[str] | None = None,
        cleaned: bool | None = None,
        enriched: bool | None = None,
    ) -> ListRecord:
        current = self.get_list(list_id)
        updated = replace(
            current,
            columns=list(columns) if columns is not None else current.columns,
            cleaned=current.cleaned if cleaned is None else cleaned,
            enriched=current.enriched if enriched is None else enriched,
        )
        self._lists[list_id] = updated
        return replace(updated, columns=list(updated.columns))

    def list_rows(self, list_id: str) -> list[Row]:
        if list_id not in self._lists:
            raise StoreError(f"list not found: {list_id}")
        rows = [_copy_row(self._rows[rid]) for rid in self._row_ids[list_id]]
        return sorted(rows, key=lambda r: r.row_index)

    def get_row(self, row_id: str) -> Row | None:
        row = self._rows.get(row_id)
        return _copy_row(row) if row is not None else None

    def update_row(
        self,
        row_id: str,
        *,
        data: Mapping[str, str] | None = None,
        flags: Mapping[str, CellFlag] | None = None,
        is_duplicate: bool | None = None,
        replace_flags: bool = False,
    ) -> StoreResult:
        row = self._rows.get(row_id)
        if row is None:
            return StoreResult(ok=False, error=f"row not found: {row_id}")
        # data and flags are applied together
        new_data = {**row.data, **(data or {})}
        if replace_flags:
            new_flags = dict(flags or {})
        else:
            new_flags = {**row.flags, **(flags or {})}
        self._rows[row_id] = replace(
            row,
            data=new_data,
            flags=new_flags,
            is_duplicate=row.is_duplicate if is_duplicate is None else is_duplicate,
        )
        return StoreResult(ok=True)

    def save_rows(self, rows: Sequence[Row]) -> int:
        saved = 0
        for row in rows:
            if row.id not in self._rows:
                continue
            self._rows[row.id] = _copy_row(row)
            saved += 1
        return saved
