from __future__ import annotations

"""Label layout arithmetic.

Pure functions placing the i-th record (0-based, in Nr. crt order) on a page
of a fixed template grid. Nothing is carried between pages except the running
index, so any record's position can be computed on its own. Rows and columns
are 1-based worksheet coordinates.

Spine labels (cotoare): ``per_page`` narrow vertical strips side by side. Strip
``slot`` occupies column ``SPINE_FIRST_COL + slot * SPINE_COL_STRIDE`` (one
spacer column between strips) and rows ``SPINE_FIRST_ROW`` onward, one line
per row.

Cover labels (coperți): a 5 x 2 grid of cards per page, filled row by row
(left card, then right card). Card ``(row_offset, col_group)`` starts at
``baseRow = 1 + row_offset * ROWS_PER_CARD`` and ``baseCol = COVER_GROUP_COLS[col_group]``;
each card line puts a label in ``baseCol`` and its value in ``baseCol + 1``.
"""

__all__ = [
    "SPINE_FIRST_ROW",
    "SPINE_FIRST_COL",
    "SPINE_COL_STRIDE",
    "COVER_ROWS",
    "COVER_COLS",
    "COVER_PER_PAGE",
    "ROWS_PER_CARD",
    "COVER_GROUP_COLS",
    "page_count",
    "spine_slot",
    "spine_cell",
    "spine_place",
    "cover_slot",
    "cover_cell",
    "cover_place",
]

SPINE_FIRST_ROW = 2
SPINE_FIRST_COL = 2
SPINE_COL_STRIDE = 2

COVER_ROWS = 5
COVER_COLS = 2
COVER_PER_PAGE = COVER_ROWS * COVER_COLS
ROWS_PER_CARD = 8  # 7 card lines + 1 spacer row
COVER_GROUP_COLS = (1, 4)  # left card: A/B, right card: D/E


def page_count(records: int, capacity: int) -> int:
    """ceil(records / capacity)."""
    if capacity < 1:
        raise ValueError(f"page capacity must be positive, got {capacity}")
    return -(-records // capacity)


def spine_slot(index: int, per_page: int) -> tuple[int, int]:
    """(page, slot) for record ``index``; pages are 1-based, slots 0-based."""
    if index < 0:
        raise ValueError(f"record index must be >= 0, got {index}")
    if per_page < 1:
        raise ValueError(f"spine labels per page must be positive, got {per_page}")
    return index // per_page + 1, index % per_page


def spine_cell(slot: int) -> tuple[int, int]:
    """(row, col) of the first line of spine strip ``slot``."""
    return SPINE_FIRST_ROW, SPINE_FIRST_COL + slot * SPINE_COL_STRIDE


def spine_place(index: int, per_page: int) -> tuple[int, int, int]:
    """(page, row, col) of record ``index`` on the spine sheets."""
    page, slot = spine_slot(index, per_page)
    row, col = spine_cell(slot)
    return page, row, col


def cover_slot(index: int) -> tuple[int, int, int]:
    """(page, row_offset, col_group) for record ``index``."""
    if index < 0:
        raise ValueError(f"record index must be >= 0, got {index}")
    within = index % COVER_PER_PAGE
    return index // COVER_PER_PAGE + 1, within // COVER_COLS, within % COVER_COLS


def cover_cell(row_offset: int, col_group: int) -> tuple[int, int]:
    """(baseRow, baseCol) of the card at grid position (row_offset, col_group)."""
    return 1 + row_offset * ROWS_PER_CARD, COVER_GROUP_COLS[col_group]


def cover_place(index: int) -> tuple[int, int, int]:
    """(page, baseRow, baseCol) of record ``index`` on the cover sheets."""
    page, row_offset, col_group = cover_slot(index)
    row, col = cover_cell(row_offset, col_group)
    return page, row, col
