from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import pandas as pd

"""CSV import / export (pandas).

Every cell is read as text: no NA conversion, no numeric inference, so
"NA", "0123" or "1e5" survive untouched. Header names are trimmed; rows with
no non-blank cell are dropped. Export writes the given column order and
fills missing values with "".
"""

__all__ = [
    "CsvReadError",
    "CsvTable",
    "read_csv_file",
    "write_csv_file",
    "collect_columns",
]


class CsvReadError(Exception):
    """Raised when a CSV file is missing, unreadable or has no header."""


@dataclass
class CsvTable:
    columns: list[str]
    records: list[dict[str, str]] = field(default_factory=list)


def read_csv_file(path: Path) -> CsvTable:
    if not path.exists():
        raise CsvReadError(f"csv file not found: {path}")
    try:
        df = pd.read_csv(
            path,
            dtype=str,
            keep_default_na=False,
            na_filter=False,
            skip_blank_lines=True,
            encoding="utf-8-sig",
        )
    except pd.errors.EmptyDataError as e:
        raise CsvReadError(f"csv file has no header: {path}") from e
    except (pd.errors.ParserError, UnicodeDecodeError) as e:
        raise CsvReadError(f"failed to parse {path}: {e}") from e

    columns = [str(c).strip() for c in df.columns]
    if not any(columns):
        raise CsvReadError(f"csv file has no header: {path}")
    df.columns = columns

    records: list[dict[str, str]] = []
    for raw in df.itertuples(index=False, name=None):
        # short rows come back padded with NaN
        values = [v if isinstance(v, str) else "" for v in raw]
        # delimiter-only lines survive skip_blank_lines
        if not any(v.strip() for v in values):
            continue
        records.append(dict(zip(columns, values)))
    return CsvTable(columns=columns, records=records)


def collect_columns(columns: Sequence[str], records: Iterable[Mapping[str, str]]) -> list[str]:
    """List columns followed by any data keys not yet listed, first-seen order."""
    out = list(columns)
    seen = set(out)
    for record in records:
        for key in record:
            if key not in seen:
                seen.add(key)
                out.append(key)
    return out


def write_csv_file(path: Path, columns: Sequence[str], records: Iterable[Mapping[str, str]]) -> int:
    """Write records in column order. Returns the number of data rows written."""
    rows = [[record.get(col, "") or "" for col in columns] for record in records]
    path.parent.mkdir(parents=True, exist_ok=True)
    pd.DataFrame(rows, columns=list(columns)).to_csv(path, index=False)
    return len(rows)
