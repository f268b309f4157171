"""Row storage backends."""

from .postgres_store import PostgresRowStore
from .row_store import MemoryRowStore, RowStore, StoreError, StoreResult

__all__ = [
    "MemoryRowStore",
    "PostgresRowStore",
    "RowStore",
    "StoreError",
    "StoreResult",
]
