from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Alignment
from openpyxl.utils import get_column_letter

from arhiva_dosare.db.store import RecordStore
from arhiva_dosare.models.case_record import CaseRecord, InventoryInfo
from arhiva_dosare.models.config_models import LabelSettings

from .layout import (
    COVER_GROUP_COLS,
    COVER_PER_PAGE,
    SPINE_COL_STRIDE,
    SPINE_FIRST_COL,
    SPINE_FIRST_ROW,
    cover_place,
    page_count,
    spine_place,
)
from .template import add_pages, load_template, retention_text, save_workbook, truncate

"""Spine and cover label generation.

Both label kinds are computed first as plain placements (page, row, col and the
lines to print) and only then written into copies of the template sheets, so
the layout can be checked without a workbook. Records are laid out in Nr. crt
order; spine pages come first in the output workbook, then cover pages.
"""

__all__ = [
    "SpineLabel",
    "CoverCard",
    "LabelReport",
    "spine_labels",
    "cover_cards",
    "blank_label_template",
    "render_labels",
    "generate_labels",
]

logger = logging.getLogger(__name__)

COVER_LINE_LABELS = (
    "Compartiment",
    "Fond",
    "Indicativ",
    "Nr. crt",
    "Conținut",
    "Date extreme",
    "Termen de păstrare",
)


@dataclass(frozen=True)
class SpineLabel:
    page: int
    row: int
    col: int
    sequence_number: int
    lines: tuple[str, ...]  # Nr. crt, year, content, retention term


@dataclass(frozen=True)
class CoverCard:
    page: int
    row: int  # baseRow
    col: int  # baseCol (labels); values go one column to the right
    sequence_number: int
    lines: tuple[tuple[str, str], ...]


@dataclass(frozen=True)
class LabelReport:
    path: Path | None
    records: int
    spine_pages: int
    cover_pages: int


def _ordered(records: Sequence[CaseRecord]) -> list[CaseRecord]:
    return sorted(records, key=lambda r: r.sequence_number)


def spine_labels(
    records: Sequence[CaseRecord],
    inventory: InventoryInfo,
    per_page: int,
    content_chars: int,
) -> list[SpineLabel]:
    retention = retention_text(inventory.retention_term)
    labels = []
    for index, record in enumerate(_ordered(records)):
        page, row, col = spine_place(index, per_page)
        labels.append(
            SpineLabel(
                page=page,
                row=row,
                col=col,
                sequence_number=record.sequence_number,
                lines=(
                    str(record.sequence_number),
                    str(inventory.year),
                    truncate(record.content, content_chars),
                    retention,
                ),
            )
        )
    return labels


def cover_cards(
    records: Sequence[CaseRecord],
    inventory: InventoryInfo,
    content_chars: int,
) -> list[CoverCard]:
    retention = retention_text(inventory.retention_term)
    cards = []
    for index, record in enumerate(_ordered(records)):
        page, row, col = cover_place(index)
        values = (
            inventory.department_name,
            inventory.fonds_name,
            record.nomenclature_code,
            str(record.sequence_number),
            truncate(record.content, content_chars),
            record.date_range,
            retention,
        )
        cards.append(
            CoverCard(
                page=page,
                row=row,
                col=col,
                sequence_number=record.sequence_number,
                lines=tuple(zip(COVER_LINE_LABELS, values)),
            )
        )
    return cards


def blank_label_template(settings: LabelSettings) -> Workbook:
    """Minimal template used when no template file is configured."""
    wb = Workbook()
    spine = wb.active
    spine.title = settings.spine_sheet
    for slot in range(settings.spine_per_page):
        col = SPINE_FIRST_COL + slot * SPINE_COL_STRIDE
        spine.column_dimensions[get_column_letter(col)].width = 9
        spine.column_dimensions[get_column_letter(col - 1)].width = 2
    spine.row_dimensions[SPINE_FIRST_ROW + 2].height = 320
    cover = wb.create_sheet(settings.cover_sheet)
    for base in COVER_GROUP_COLS:
        cover.column_dimensions[get_column_letter(base)].width = 18
        cover.column_dimensions[get_column_letter(base + 1)].width = 30
    return wb


def render_labels(
    records: Sequence[CaseRecord],
    inventory: InventoryInfo,
    settings: LabelSettings,
    out_path: Path,
) -> LabelReport:
    """Write spine and cover label pages for ``records`` to ``out_path``.

    Raises:
        TemplateLoadFailure: before anything is written
        DocumentWriteFailure: the output could not be saved
    """
    if settings.template:
        wb = load_template(settings.template, (settings.spine_sheet, settings.cover_sheet))
    else:
        wb = blank_label_template(settings)

    spines = spine_labels(records, inventory, settings.spine_per_page, settings.spine_content_chars)
    cards = cover_cards(records, inventory, settings.cover_content_chars)
    spine_total = page_count(len(records), settings.spine_per_page)
    cover_total = page_count(len(records), COVER_PER_PAGE)

    if not records:
        logger.warning("inventory %s has no case records; no labels written", inventory.id)
        return LabelReport(path=None, records=0, spine_pages=0, cover_pages=0)

    spine_pages = add_pages(wb, settings.spine_sheet, spine_total)
    cover_pages = add_pages(wb, settings.cover_sheet, cover_total)

    rotated = Alignment(text_rotation=90, horizontal="center", vertical="center", wrap_text=True)
    for label in spines:
        ws = spine_pages[label.page - 1]
        for offset, text in enumerate(label.lines):
            cell = ws.cell(row=label.row + offset, column=label.col, value=text)
            if offset == 2:
                cell.alignment = rotated

    for card in cards:
        ws = cover_pages[card.page - 1]
        for offset, (caption, value) in enumerate(card.lines):
            ws.cell(row=card.row + offset, column=card.col, value=caption)
            ws.cell(row=card.row + offset, column=card.col + 1, value=value)

    wb.remove(wb[settings.spine_sheet])
    wb.remove(wb[settings.cover_sheet])
    path = save_workbook(wb, out_path)
    logger.info(
        "labels for inventory %s: records=%d spine_pages=%d cover_pages=%d",
        inventory.id,
        len(records),
        spine_total,
        cover_total,
    )
    return LabelReport(path=path, records=len(records), spine_pages=spine_total, cover_pages=cover_total)


def generate_labels(
    store: RecordStore,
    inventory_id: str,
    settings: LabelSettings,
    out_path: Path,
) -> LabelReport:
    """Read the inventory's persisted records and render their labels."""
    inventory = store.get_inventory(inventory_id)
    records = store.list_records(inventory_id)
    return render_labels(records, inventory, settings, out_path)
