from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .case_record import CaseFields

"""Transient import models: ImportRow and ColumnMap.

Both live only for the duration of one import run. ``ImportRow`` is the typed
candidate extracted from one sheet row; ``ColumnMap`` is the field → column
index mapping discovered from the header row.
"""

__all__ = [
    "ColumnMap",
    "ImportRow",
]


@dataclass(frozen=True)
class ColumnMap:
    """Field name → 0-based column index, plus where the header was found."""
    header_row: int  # 0-based row index of the header inside the grid
    columns: dict[str, int]

    def __contains__(self, field: object) -> bool:
        return field in self.columns

    def index_of(self, field: str) -> int | None:
        return self.columns.get(field)


@dataclass(frozen=True)
class ImportRow:
    """Typed candidate produced from one data row.

    ``row_number`` is the 1-based sheet row, as the operator sees it in a
    spreadsheet application, so error messages can point at it directly.
    """
    row_number: int
    fields: CaseFields
    raw_values: dict[str, Any] | None = None  # cell values before coercion (diagnostics)

    @property
    def sequence_number(self) -> int:
        return self.fields.sequence_number
