from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from arhiva_dosare.db.store import RecordStore
from arhiva_dosare.models.case_record import InventoryInfo
from arhiva_dosare.models.config_models import RegistrySettings

from .template import load_template, retention_text, save_workbook

"""Registry of inventories for one fonds.

One row per inventory, ordered by year then department, with the number of
case records counted from the persisted records (the inventories' cached
``numar_dosare`` column is not trusted). Layout: title in row 1, column headers
in row 2, data from row 3.

After the rows are written the worksheet's range metadata (auto-filter, table
refs, print area) is re-derived from the last written row. Readers that trust
these ranges would otherwise ignore rows added beyond the template's original
extent.
"""

__all__ = [
    "REGISTRY_HEADERS",
    "RegistryRow",
    "RegistryReport",
    "registry_rows",
    "refresh_used_range",
    "render_registry",
    "generate_registry",
]

logger = logging.getLogger(__name__)

REGISTRY_HEADERS = ("An", "Compartiment", "Număr dosare", "Termen de păstrare")
TITLE_ROW = 1
HEADER_ROW = 2
FIRST_DATA_ROW = 3


@dataclass(frozen=True)
class RegistryRow:
    year: int
    department: str
    record_count: int
    retention: str

    def as_cells(self) -> tuple[object, ...]:
        return (self.year, self.department, self.record_count, self.retention)


@dataclass(frozen=True)
class RegistryReport:
    path: Path
    rows: int
    ref: str  # data range including the header row, e.g. "A2:D7"


def registry_rows(store: RecordStore, inventories: Sequence[InventoryInfo]) -> list[RegistryRow]:
    """One row per inventory, by year then department, counting persisted records."""
    rows = []
    for inventory in sorted(inventories, key=lambda i: (i.year, i.department_name)):
        count = len(store.list_records(inventory.id))
        rows.append(
            RegistryRow(
                year=inventory.year,
                department=inventory.department_name,
                record_count=count,
                retention=retention_text(inventory.retention_term),
            )
        )
    return rows


def refresh_used_range(ws: Worksheet, last_row: int, last_col: int = len(REGISTRY_HEADERS)) -> str:
    """Point auto-filter, tables and print area at A{HEADER_ROW}:{last_col}{last_row}.

    Returns the data reference that was applied.
    """
    col = get_column_letter(last_col)
    ref = f"A{HEADER_ROW}:{col}{last_row}"
    if ws.tables:
        # a table needs at least one body row besides its header; its own
        # filter replaces the sheet-level one
        table_ref = f"A{HEADER_ROW}:{col}{max(last_row, HEADER_ROW + 1)}"
        for table in ws.tables.values():
            table.ref = table_ref
            if table.autoFilter is not None:
                table.autoFilter.ref = table_ref
    else:
        ws.auto_filter.ref = ref
    ws.print_area = f"A{TITLE_ROW}:{col}{last_row}"
    return ref


def _blank_registry(settings: RegistrySettings) -> Workbook:
    wb = Workbook()
    ws = wb.active
    ws.title = settings.sheet
    for index, width in enumerate((8, 40, 14, 20), start=1):
        ws.column_dimensions[get_column_letter(index)].width = width
    return wb


def render_registry(
    rows: Sequence[RegistryRow],
    fonds_name: str,
    settings: RegistrySettings,
    out_path: Path,
) -> RegistryReport:
    """Write the registry rows under the template's header and save.

    Raises:
        TemplateLoadFailure: before anything is written
        DocumentWriteFailure: the output could not be saved
    """
    if settings.template:
        wb = load_template(settings.template, (settings.sheet,))
    else:
        wb = _blank_registry(settings)
    ws = wb[settings.sheet]

    ws.cell(row=TITLE_ROW, column=1, value=f"Registru inventare — {fonds_name}").font = Font(bold=True)
    for col, header in enumerate(REGISTRY_HEADERS, start=1):
        ws.cell(row=HEADER_ROW, column=col, value=header).font = Font(bold=True)

    # drop whatever body rows the template carried
    if ws.max_row >= FIRST_DATA_ROW:
        ws.delete_rows(FIRST_DATA_ROW, ws.max_row - FIRST_DATA_ROW + 1)

    for offset, row in enumerate(rows):
        for col, value in enumerate(row.as_cells(), start=1):
            ws.cell(row=FIRST_DATA_ROW + offset, column=col, value=value)

    last_row = HEADER_ROW + len(rows)
    ref = refresh_used_range(ws, last_row)
    path = save_workbook(wb, out_path)
    logger.info("registry for %s: inventories=%d range=%s", fonds_name, len(rows), ref)
    return RegistryReport(path=path, rows=len(rows), ref=ref)


def generate_registry(
    store: RecordStore,
    fonds_id: str,
    settings: RegistrySettings,
    out_path: Path,
    fonds_name: str | None = None,
) -> RegistryReport:
    """Aggregate the fonds's inventories from the store and render the registry."""
    inventories = store.list_inventories(fonds_id)
    if fonds_name is None:
        fonds_name = inventories[0].fonds_name if inventories else fonds_id
    return render_registry(registry_rows(store, inventories), fonds_name, settings, out_path)
