from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

import pandas as pd

from arhiva_dosare.db.store import RecordStore
from arhiva_dosare.excel.extractor import FIELD_SPECS
from arhiva_dosare.models.case_record import CaseRecord, InventoryInfo

from .template import retention_text, write_atomically

"""Round-trip export of one inventory.

The exported sheet starts with a metadata block (fonds, department, year,
retention term), then one blank row, then the case-record table with the same
headers the importer recognises. Importing the file again yields the same batch.
"""

__all__ = [
    "EXPORT_SHEET",
    "export_rows",
    "write_export",
    "export_inventory",
]

logger = logging.getLogger(__name__)

EXPORT_SHEET = "Dosare"


def export_rows(records: Sequence[CaseRecord], inventory: InventoryInfo) -> list[list[object]]:
    """Sheet content as a list of rows (ragged; missing cells are blank)."""
    rows: list[list[object]] = [
        ["Fond", inventory.fonds_name],
        ["Compartiment", inventory.department_name],
        ["An", inventory.year],
        ["Termen de păstrare", retention_text(inventory.retention_term)],
        [],
        [spec.label for spec in FIELD_SPECS.values()],
    ]
    for record in sorted(records, key=lambda r: r.sequence_number):
        rows.append([getattr(record, name) for name in FIELD_SPECS])
    return rows


def write_export(records: Sequence[CaseRecord], inventory: InventoryInfo, out_path: Path) -> Path:
    """Write the export workbook.

    Raises:
        DocumentWriteFailure: the output could not be saved
    """
    df = pd.DataFrame(export_rows(records, inventory), dtype=object)

    def _write(tmp: Path) -> None:
        with pd.ExcelWriter(tmp, engine="openpyxl") as writer:
            df.to_excel(writer, sheet_name=EXPORT_SHEET, header=False, index=False)

    path = write_atomically(out_path, _write)
    logger.info("exported inventory %s (%d records) to %s", inventory.id, len(records), path.name)
    return path


def export_inventory(store: RecordStore, inventory_id: str, out_path: Path) -> Path:
    inventory = store.get_inventory(inventory_id)
    return write_export(store.list_records(inventory_id), inventory, out_path)
