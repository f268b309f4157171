from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

import psycopg2
from psycopg2.extras import execute_values

from ..models.row import CellFlag, ListRecord, Row
from .row_store import StoreError, StoreResult, new_id

"""PostgreSQL RowStore (psycopg2).

Lists live in `lists`, rows in `list_rows` with `data` / `flags` as JSONB.
Bulk writes (list import, post-cleanup write-back) go through
psycopg2.extras.execute_values; single-row updates merge JSONB with `||` and
are committed immediately so enrichment progress survives a crash.

update_row() never raises: database errors are rolled back and reported as
StoreResult(ok=False, error=...).
"""

__all__ = [
    "PostgresRowStore",
    "BatchMetrics",
    "SCHEMA_SQL",
    "PAGE_SIZE",
]

logger = logging.getLogger(__name__)

PAGE_SIZE = 500

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS lists (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    columns JSONB NOT NULL DEFAULT '[]'::jsonb,
    row_count INTEGER NOT NULL DEFAULT 0,
    cleaned BOOLEAN NOT NULL DEFAULT FALSE,
    enriched BOOLEAN NOT NULL DEFAULT FALSE,
    created_at TIMESTAMPTZ NOT NULL DEFAULT now()
);
CREATE TABLE IF NOT EXISTS list_rows (
    id TEXT PRIMARY KEY,
    list_id TEXT NOT NULL REFERENCES lists(id) ON DELETE CASCADE,
    row_index INTEGER NOT NULL,
    data JSONB NOT NULL DEFAULT '{}'::jsonb,
    flags JSONB NOT NULL DEFAULT '{}'::jsonb,
    is_duplicate BOOLEAN NOT NULL DEFAULT FALSE
);
CREATE INDEX IF NOT EXISTS list_rows_list_id_idx ON list_rows (list_id, row_index);
"""

_ROW_COLUMNS = "id, list_id, row_index, data, flags, is_duplicate"
_LIST_COLUMNS = "id, name, columns, row_count, cleaned, enriched, created_at"


@dataclass(frozen=True)
class BatchMetrics:
    """Timing of one execute_values call."""
    batch_size: int
    elapsed_seconds: float


def _flags_to_json(flags: Mapping[str, CellFlag]) -> str:
    return json.dumps({col: flag.value for col, flag in flags.items()})


def _flags_from_json(raw: Any) -> dict[str, CellFlag]:
    if isinstance(raw, str):
        raw = json.loads(raw)
    flags: dict[str, CellFlag] = {}
    for col, value in (raw or {}).items():
        try:
            flags[col] = CellFlag(value)
        except ValueError:
            logger.warning("ignoring unknown flag %r on column %r", value, col)
    return flags


def _json_obj(raw: Any) -> Any:
    return json.loads(raw) if isinstance(raw, str) else raw


def _row_from_record(rec: Sequence[Any]) -> Row:
    return Row(
        id=rec[0],
        list_id=rec[1],
        row_index=rec[2],
        data={k: ("" if v is None else str(v)) for k, v in (_json_obj(rec[3]) or {}).items()},
        flags=_flags_from_json(rec[4]),
        is_duplicate=bool(rec[5]),
    )


def _list_from_record(rec: Sequence[Any]) -> ListRecord:
    return ListRecord(
        id=rec[0],
        name=rec[1],
        columns=list(_json_obj(rec[2]) or []),
        row_count=rec[3],
        cleaned=bool(rec[4]),
        enriched=bool(rec[5]),
        created_at=rec[6],
    )


class PostgresRowStore:
    def __init__(
        self,
        connection: Any,
        *,
        page_size: int = PAGE_SIZE,
        metrics_callback: Callable[[BatchMetrics], None] | None = None,
    ) -> None:
        self.connection = connection
        self.page_size = page_size
        self.metrics_callback = metrics_callback

    @classmethod
    def connect(cls, dsn: str, **kwargs: Any) -> PostgresRowStore:
        try:
            conn = psycopg2.connect(dsn)
        except psycopg2.Error as e:
            raise StoreError(f"database connection failed: {e}") from e
        conn.autocommit = False
        return cls(conn, **kwargs)

    def close(self) -> None:
        self.connection.close()

    def ensure_schema(self) -> None:
        try:
            with self.connection.cursor() as cur:
                cur.execute(SCHEMA_SQL)
            self.connection.commit()
        except psycopg2.Error as e:
            self.connection.rollback()
            raise StoreError(f"failed creating schema: {e}") from e

    def _fetch(self, sql: str, params: tuple[Any, ...], *, many: bool = False) -> Any:
        try:
            with self.connection.cursor() as cur:
                cur.execute(sql, params)
                return cur.fetchall() if many else cur.fetchone()
        except psycopg2.Error as e:
            self.connection.rollback()
            raise StoreError(f"query failed: {e}") from e

    def _execute_values(self, cur: Any, sql: str, rows: list[tuple[Any, ...]]) -> None:
        if not rows:
            return
        start = time.time()
        try:
            execute_values(cur, sql, rows, page_size=self.page_size)
        finally:
            if self.metrics_callback is not None:
                self.metrics_callback(BatchMetrics(batch_size=len(rows), elapsed_seconds=time.time() - start))

    def create_list(
        self, name: str, columns: Sequence[str], records: Iterable[Mapping[str, str]]
    ) -> ListRecord:
        list_id = new_id()
        values = [
            (new_id(), list_id, index, json.dumps(dict(record)), "{}", False)
            for index, record in enumerate(records)
        ]
        try:
            with self.connection.cursor() as cur:
                cur.execute(
                    f"INSERT INTO lists ({_LIST_COLUMNS}) VALUES (%s, %s, %s, %s, FALSE, FALSE, now()) "
                    f"RETURNING {_LIST_COLUMNS}",
                    (list_id, name, json.dumps(list(columns)), len(values)),
                )
                created = cur.fetchone()
                self._execute_values(
                    cur,
                    f"INSERT INTO list_rows ({_ROW_COLUMNS}) VALUES %s",
                    values,
                )
            self.connection.commit()
        except psycopg2.Error as e:
            self.connection.rollback()
            raise StoreError(f"failed creating list '{name}': {e}") from e
        return _list_from_record(created)

    def get_list(self, list_id: str) -> ListRecord:
        found = self._fetch(f"SELECT {_LIST_COLUMNS} FROM lists WHERE id = %s", (list_id,))
        if found is None:
            raise StoreError(f"list not found: {list_id}")
        return _list_from_record(found)

    def update_list(
        self,
        list_id: str,
        *,
        columns: Sequence[str] | None = None,
        cleaned: bool | None = None,
        enriched: bool | None = None,
    ) -> ListRecord:
        assignments: list[str] = []
        params: list[Any] = []
        if columns is not None:
            assignments.append("columns = %s::jsonb")
            params.append(json.dumps(list(columns)))
        if cleaned is not None:
            assignments.append("cleaned = %s")
            params.append(cleaned)
        if enriched is not None:
            assignments.append("enriched = %s")
            params.append(enriched)
        if not assignments:
            return self.get_list(list_id)

        try:
            with self.connection.cursor() as cur:
                cur.execute(
                    f"UPDATE lists SET {', '.join(assignments)} WHERE id = %s RETURNING {_LIST_COLUMNS}",
                    (*params, list_id),
                )
                updated = cur.fetchone()
            self.connection.commit()
        except psycopg2.Error as e:
            self.connection.rollback()
            raise StoreError(f"failed updating list {list_id}: {e}") from e
        if updated is None:
            raise StoreError(f"list not found: {list_id}")
        return _list_from_record(updated)

    def list_rows(self, list_id: str) -> list[Row]:
        records = self._fetch(
            f"SELECT {_ROW_COLUMNS} FROM list_rows WHERE list_id = %s ORDER BY row_index",
            (list_id,),
            many=True,
        )
        return [_row_from_record(rec) for rec in records]

    def get_row(self, row_id: str) -> Row | None:
        rec = self._fetch(f"SELECT {_ROW_COLUMNS} FROM list_rows WHERE id = %s", (row_id,))
        return _row_from_record(rec) if rec is not None else None

    def update_row(
        self,
        row_id: str,
        *,
        data: Mapping[str, str] | None = None,
        flags: Mapping[str, CellFlag] | None = None,
        is_duplicate: bool | None = None,
        replace_flags: bool = False,
    ) -> StoreResult:
        assignments: list[str] = []
        params: list[Any] = []
        if data:
            assignments.append("data = data || %s::jsonb")
            params.append(json.dumps(dict(data)))
        if replace_flags:
            assignments.append("flags = %s::jsonb")
            params.append(_flags_to_json(flags or {}))
        elif flags:
            assignments.append("flags = flags || %s::jsonb")
            params.append(_flags_to_json(flags))
        if is_duplicate is not None:
            assignments.append("is_duplicate = %s")
            params.append(is_duplicate)
        if not assignments:
            return StoreResult(ok=True)

        try:
            with self.connection.cursor() as cur:
                cur.execute(
                    f"UPDATE list_rows SET {', '.join(assignments)} WHERE id = %s",
                    (*params, row_id),
                )
                updated = cur.rowcount
            self.connection.commit()
        except psycopg2.Error as e:
            self.connection.rollback()
            logger.error("row update failed row=%s error=%s", row_id, e)
            return StoreResult(ok=False, error=str(e))
        if updated == 0:
            return StoreResult(ok=False, error=f"row not found: {row_id}")
        return StoreResult(ok=True)

    def save_rows(self, rows: Sequence[Row]) -> int:
        values = [
            (row.id, json.dumps(row.data), _flags_to_json(row.flags), row.is_duplicate)
            for row in rows
        ]
        try:
            with self.connection.cursor() as cur:
                self._execute_values(
                    cur,
                    "UPDATE list_rows AS r SET data = v.data::jsonb, flags = v.flags::jsonb, "
                    "is_duplicate = v.is_duplicate "
                    "FROM (VALUES %s) AS v(id, data, flags, is_duplicate) WHERE r.id = v.id",
                    values,
                )
            self.connection.commit()
        except psycopg2.Error as e:
            self.connection.rollback()
            raise StoreError(f"failed saving rows: {e}") from e
        return len(values)
