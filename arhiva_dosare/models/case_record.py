from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

"""Case record (dosar) domain models.

A case record is one physical folder inside a yearly inventory. ``CaseFields``
holds the values an operator (or an import row) supplies; ``CaseRecord`` is the
persisted form, with the store-assigned ``id`` and its parent inventory.
"""

__all__ = [
    "MUTABLE_FIELDS",
    "CaseFields",
    "CaseRecord",
    "InventoryInfo",
]

# Fields an update may change. sequence_number identifies the record inside its
# inventory and is never rewritten.
MUTABLE_FIELDS: tuple[str, ...] = (
    "nomenclature_code",
    "content",
    "date_range",
    "page_count",
    "notes",
    "box_number",
)


@dataclass(frozen=True)
class CaseFields:
    """Values of a case record as supplied by the operator or an import row."""
    sequence_number: int  # nr_crt
    nomenclature_code: str  # indicativ nomenclator
    content: str  # conținut
    date_range: str  # date extreme (free text, may span years)
    page_count: int | None = None  # număr file
    notes: str | None = None  # observații
    box_number: int | None = None  # nr. cutie

    def mutable_values(self) -> dict[str, Any]:
        """Values written by an update (everything except sequence_number)."""
        return {name: getattr(self, name) for name in MUTABLE_FIELDS}


@dataclass(frozen=True)
class CaseRecord:
    """Persisted case record. ``id`` is assigned by the store, never by us."""
    id: str
    inventory_id: str
    sequence_number: int
    nomenclature_code: str
    content: str
    date_range: str
    page_count: int | None = None
    notes: str | None = None
    box_number: int | None = None

    @classmethod
    def from_fields(cls, record_id: str, inventory_id: str, fields: CaseFields) -> CaseRecord:
        return cls(id=record_id, inventory_id=inventory_id, **asdict(fields))

    def to_fields(self) -> CaseFields:
        return CaseFields(
            sequence_number=self.sequence_number,
            nomenclature_code=self.nomenclature_code,
            content=self.content,
            date_range=self.date_range,
            page_count=self.page_count,
            notes=self.notes,
            box_number=self.box_number,
        )


@dataclass(frozen=True)
class InventoryInfo:
    """Read-only view of an inventory and its parents, used for document headers.

    The fonds → department → inventory hierarchy is maintained elsewhere; here we
    only need the names and the retention term printed on labels and registries.
    """
    id: str
    year: int
    retention_term: str  # termen de păstrare, e.g. "10" or "permanent"
    department_name: str
    fonds_name: str
    department_id: str | None = None
    fonds_id: str | None = None
