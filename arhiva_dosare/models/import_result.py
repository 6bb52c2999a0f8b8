from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path

"""Result models for reconciliation and whole import runs."""

__all__ = [
    "ImportOutcome",
    "ImportStatus",
    "ReconcileResult",
]


class ImportStatus(Enum):
    """Final state of one import run."""
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class ReconcileResult:
    """Write counts of a reconciliation run (or of the part that ran)."""
    inserted: int = 0
    updated: int = 0
    skipped: int = 0


@dataclass(frozen=True)
class ImportOutcome:
    """Outcome of importing one spreadsheet into one inventory.

    On failure ``error`` holds the operator-facing reason and ``error_type`` its
    classification. ``counts`` are the writes issued before a write failure;
    when ``rolled_back`` is True none of them remain committed.
    """
    path: Path
    inventory_id: str
    status: ImportStatus
    counts: ReconcileResult
    start_time: datetime | None = None
    end_time: datetime | None = None
    error: str | None = None
    error_type: str | None = None
    failed_row: int | None = None  # sequence number (write phase) or sheet row (validation)
    rolled_back: bool = False

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def elapsed_seconds(self) -> float:
        if self.start_time is None or self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time).total_seconds()
