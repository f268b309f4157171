from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

from ..models.enrichment import EnrichmentProgress

"""Enrichment progress display with tqdm (TTY only).

The pipeline reports progress through a callback; EnrichmentProgressBar is
that callback for the CLI. In non-TTY environments (CI, piped output) no
bar is created and updates are ignored.

The bar is created lazily on the first update because the total is only
known once the pipeline has planned the rows.
"""

__all__ = [
    "EnrichmentProgressBar",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class EnrichmentProgressBar:
    """Callable progress sink: `pipeline.run(..., on_progress=bar)`."""

    def __init__(self, *, description: str = "Enriching", enabled: bool | None = None) -> None:
        self.description = description
        self.enabled = is_tty_enabled() if enabled is None else enabled
        self.pbar: TqdmType[Any] | None = None
        self.last: EnrichmentProgress | None = None

    def __call__(self, progress: EnrichmentProgress) -> None:
        self.last = progress
        if not self.enabled or progress.total <= 0:
            return
        if self.pbar is None:
            self.pbar = tqdm(
                total=progress.total,
                desc=self.description,
                unit="row",
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )
        # current is clamped by the pipeline, so n never passes total
        self.pbar.n = progress.current
        self.pbar.set_description(progress.step.split(" (", 1)[0].rstrip("."))
        self.pbar.set_postfix(errors=progress.errors)
        self.pbar.refresh()

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> EnrichmentProgressBar:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
