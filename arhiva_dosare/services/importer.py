from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path

from arhiva_dosare.db.store import RecordStore, StoreError
from arhiva_dosare.errors import ArchiveError
from arhiva_dosare.excel.extractor import FIELD_SPECS, extract_rows
from arhiva_dosare.excel.header import map_columns, rules_with_aliases
from arhiva_dosare.excel.reader import SheetGrid, read_sheet
from arhiva_dosare.logging.error_log import ErrorLogBuffer, ErrorRecord
from arhiva_dosare.models.config_models import ImportSettings
from arhiva_dosare.models.import_result import ImportOutcome, ImportStatus, ReconcileResult

from .reconcile import WriteFailure, persisted_index, reconcile
from .sequence import validate_batch_sequence

"""Import orchestration for one spreadsheet into one inventory.

Pipeline: Grid Reader -> Header Locator -> Row Extractor -> Sequence Validator
-> Reconciliation Engine. Every validation step runs before the first write,
so a rejected document leaves the store untouched.

When ``ImportSettings.atomic`` is set the reconciliation runs inside one store
transaction and a failed write rolls back the whole run; otherwise writes that
succeeded before the failure stay committed and are reported as such.

Failures are not raised to the caller: they are logged, appended to the error
log and returned as an ``ImportOutcome`` with status FAILED.
"""

__all__ = [
    "import_file",
    "run_import",
]

logger = logging.getLogger(__name__)

FILE_LEVEL = "<FILE_LEVEL>"


def run_import(
    sheet: SheetGrid,
    inventory_id: str,
    store: RecordStore,
    settings: ImportSettings,
    *,
    overwrite: bool,
    elevated: bool,
) -> ReconcileResult:
    """Validate the sheet and reconcile it; raises on the first failure."""
    column_map = map_columns(sheet.rows, rules_with_aliases(settings.header_aliases))
    logger.debug(
        "sheet=%s header_row=%d columns=%s",
        sheet.sheet_name,
        column_map.header_row + 1,
        column_map.columns,
    )
    unmapped = [field for field in FIELD_SPECS if field not in column_map]
    if unmapped:
        logger.debug("sheet=%s no column for: %s", sheet.sheet_name, ", ".join(unmapped))
    rows = extract_rows(sheet.rows, column_map)
    validate_batch_sequence(r.sequence_number for r in rows)
    logger.info("sheet=%s validated %d case records", sheet.sheet_name, len(rows))

    persisted = persisted_index(store, inventory_id)
    logger.debug("inventory=%s persisted_records=%d", inventory_id, len(persisted))

    if not settings.atomic:
        return reconcile(store, inventory_id, rows, persisted, overwrite=overwrite, elevated=elevated)

    try:
        with store.transaction():
            return reconcile(store, inventory_id, rows, persisted, overwrite=overwrite, elevated=elevated)
    except WriteFailure as e:
        raise e.mark_rolled_back() from e.cause


def _failed_row(error: ArchiveError) -> tuple[int | None, int]:
    """(row reported in the outcome, sheet row for the error log or -1).

    Write failures are reported by Nr. crt, validation failures by sheet row.
    """
    if isinstance(error, WriteFailure):
        return error.sequence_number, error.row_number
    row_number = getattr(error, "row_number", None)
    if isinstance(row_number, int) and row_number > 0:
        return row_number, row_number
    return None, -1


def import_file(
    source: Path,
    inventory_id: str,
    store: RecordStore,
    settings: ImportSettings | None = None,
    *,
    overwrite: bool | None = None,
    elevated: bool = False,
    error_log: ErrorLogBuffer | None = None,
) -> ImportOutcome:
    """Import ``source`` into ``inventory_id`` and report the outcome.

    Args:
        source: spreadsheet to import (first sheet is read)
        inventory_id: target inventory
        store: datastore collaborator
        settings: import settings (defaults when None)
        overwrite: requested overwrite; None uses ``settings.overwrite``
        elevated: caller holds elevated access (required for overwrite)
        error_log: buffer receiving an ErrorRecord on failure

    Returns:
        ImportOutcome with SUCCESS and counts, or FAILED with the reason
    """
    settings = settings or ImportSettings()
    requested = settings.overwrite if overwrite is None else overwrite
    start_time = datetime.now(UTC)
    logger.info("importing %s into inventory %s (overwrite=%s)", source.name, inventory_id, requested)

    sheet_name = FILE_LEVEL
    try:
        sheet = read_sheet(source)
        sheet_name = sheet.sheet_name
        counts = run_import(sheet, inventory_id, store, settings, overwrite=requested, elevated=elevated)
    except ArchiveError as e:
        failed_row, log_row = _failed_row(e)
        rolled_back = isinstance(e, WriteFailure) and e.rolled_back
        # BEGIN/COMMIT failing inside an atomic run leaves nothing committed
        if isinstance(e, StoreError) and settings.atomic:
            rolled_back = True
        if isinstance(e, WriteFailure) and not rolled_back:
            counts = e.partial
        else:
            counts = ReconcileResult()
        logger.error("import %s: %s", source.name, e.message)
        if error_log is not None:
            error_log.append(
                ErrorRecord.create(
                    file=source.name,
                    sheet=FILE_LEVEL if log_row == -1 else sheet_name,
                    row=log_row,
                    error_type=e.error_type,
                    message=e.message,
                )
            )
        return ImportOutcome(
            path=source,
            inventory_id=inventory_id,
            status=ImportStatus.FAILED,
            counts=counts,
            start_time=start_time,
            end_time=datetime.now(UTC),
            error=e.message,
            error_type=e.error_type,
            failed_row=failed_row,
            rolled_back=rolled_back,
        )

    logger.info(
        "import %s done: inserted=%d updated=%d skipped=%d",
        source.name,
        counts.inserted,
        counts.updated,
        counts.skipped,
    )
    return ImportOutcome(
        path=source,
        inventory_id=inventory_id,
        status=ImportStatus.SUCCESS,
        counts=counts,
        start_time=start_time,
        end_time=datetime.now(UTC),
    )
