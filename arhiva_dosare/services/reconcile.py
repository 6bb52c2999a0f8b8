from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from enum import Enum

from arhiva_dosare.db.store import RecordStore, StoreError
from arhiva_dosare.errors import ArchiveError
from arhiva_dosare.models.case_record import CaseRecord
from arhiva_dosare.models.import_result import ReconcileResult
from arhiva_dosare.models.import_row import ImportRow

from .progress import ProgressTracker

"""Reconciliation Engine.

Classifies each validated candidate against the persisted records of the target
inventory and issues one write per decision, in ascending Nr. crt order:

- no persisted record with that number  -> insert
- one exists and overwrite is effective -> update every mutable field
- one exists, overwrite not effective   -> skip (no write)

Overwrite is effective only when requested *and* the caller holds elevated
access. Writes are not batched. The first failing write stops the run with a
``WriteFailure`` that carries the counts issued so far; earlier writes are not
undone here (see ``services.importer`` for the transactional wrapper).
"""

__all__ = [
    "Decision",
    "WriteFailure",
    "PersistedReadFailure",
    "effective_overwrite",
    "persisted_index",
    "decide",
    "reconcile",
]

logger = logging.getLogger(__name__)


class Decision(Enum):
    INSERT = "insert"
    UPDATE = "update"
    SKIP = "skip"


class PersistedReadFailure(ArchiveError):
    error_type = "PERSISTED_READ_FAILURE"


class WriteFailure(ArchiveError):
    """A single insert/update failed; ``partial`` holds the writes issued before it."""

    error_type = "WRITE_FAILURE"

    def __init__(
        self,
        sequence_number: int,
        decision: Decision,
        partial: ReconcileResult,
        cause: Exception,
        row_number: int = -1,
        rolled_back: bool = False,
    ) -> None:
        self.sequence_number = sequence_number
        self.row_number = row_number
        self.decision = decision
        self.partial = partial
        self.cause = cause
        self.rolled_back = rolled_back
        super().__init__(self._describe())

    def _describe(self) -> str:
        kept = "rolled back" if self.rolled_back else "kept"
        return (
            f"{self.decision.value} of Nr. crt {self.sequence_number} failed: {self.cause}; "
            f"writes before it ({self.partial.inserted} inserted, {self.partial.updated} updated) were {kept}"
        )

    def mark_rolled_back(self) -> WriteFailure:
        self.rolled_back = True
        self.message = self._describe()
        self.args = (self.message,)
        return self


def effective_overwrite(requested: bool, elevated: bool) -> bool:
    """Overwrite only takes effect for callers with elevated access."""
    return requested and elevated


def persisted_index(store: RecordStore, inventory_id: str) -> dict[int, str]:
    """Read the inventory's records once: Nr. crt -> record id."""
    try:
        records: list[CaseRecord] = store.list_records(inventory_id)
    except StoreError as e:
        raise PersistedReadFailure(f"cannot read existing case records of inventory {inventory_id}: {e}") from e
    return {r.sequence_number: r.id for r in records}


def decide(sequence_number: int, persisted: Mapping[int, str], overwrite: bool) -> Decision:
    if sequence_number not in persisted:
        return Decision.INSERT
    return Decision.UPDATE if overwrite else Decision.SKIP


def reconcile(
    store: RecordStore,
    inventory_id: str,
    candidates: Sequence[ImportRow],
    persisted: Mapping[int, str],
    *,
    overwrite: bool = False,
    elevated: bool = False,
) -> ReconcileResult:
    """Apply the insert/update/skip decision for every candidate.

    Parameters
    ----------
    store: datastore collaborator
    inventory_id: target inventory
    candidates: validated batch (any order; processed by ascending Nr. crt)
    persisted: snapshot from ``persisted_index``; not re-read during the run
    overwrite: requested overwrite of existing records
    elevated: caller holds elevated access (otherwise overwrite is ignored)

    Raises
    ------
    WriteFailure: first write that failed, with counts issued before it
    """
    do_overwrite = effective_overwrite(overwrite, elevated)
    if overwrite and not elevated:
        logger.warning("overwrite requested without elevated access; existing records will be skipped")

    inserted = updated = skipped = 0
    ordered = sorted(candidates, key=lambda c: c.sequence_number)
    with ProgressTracker(len(ordered), description=f"Inventory {inventory_id}") as progress:
        for candidate in ordered:
            seq = candidate.sequence_number
            decision = decide(seq, persisted, do_overwrite)
            try:
                if decision is Decision.INSERT:
                    store.insert_record(inventory_id, candidate.fields)
                    inserted += 1
                elif decision is Decision.UPDATE:
                    store.update_record(persisted[seq], candidate.fields.mutable_values())
                    updated += 1
                else:
                    skipped += 1
            except StoreError as e:
                partial = ReconcileResult(inserted=inserted, updated=updated, skipped=skipped)
                raise WriteFailure(seq, decision, partial, e, row_number=candidate.row_number) from e
            logger.debug("nr_crt=%d decision=%s", seq, decision.value)
            progress.advance(inserted=inserted, updated=updated, skipped=skipped)

    return ReconcileResult(inserted=inserted, updated=updated, skipped=skipped)
