from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
import logging
from typing import Any, Protocol

from arhiva_dosare.errors import ArchiveError
from arhiva_dosare.models.case_record import MUTABLE_FIELDS, CaseFields, CaseRecord, InventoryInfo

"""Datastore collaborator.

``RecordStore`` is the contract the import and document code consume: list,
insert and update case records, read inventory metadata, and open a
transaction. Every call may fail independently; failures surface as
``StoreError``.

``PostgresStore`` implements it over a psycopg2 cursor against the archive
schema (fonduri → compartimente → inventare → dosare). The connection runs
in autocommit mode; ``transaction()`` opens an explicit BEGIN/COMMIT/ROLLBACK block.
"""

__all__ = [
    "StoreError",
    "RecordStore",
    "PostgresStore",
]

logger = logging.getLogger(__name__)

# dosare column per CaseFields attribute
COLUMNS: dict[str, str] = {
    "sequence_number": "nr_crt",
    "nomenclature_code": "indicativ_nomenclator",
    "content": "continut",
    "date_range": "date_extreme",
    "page_count": "numar_file",
    "notes": "observatii",
    "box_number": "nr_cutie",
}

_RECORD_SELECT = (
    "SELECT id, inventar_id, nr_crt, indicativ_nomenclator, continut, date_extreme, "
    "numar_file, observatii, nr_cutie FROM dosare"
)
_INVENTORY_SELECT = (
    "SELECT i.id, i.an, i.termen_pastrare, c.nume, f.nume, c.id, f.id "
    "FROM inventare i JOIN compartimente c ON c.id = i.compartiment_id "
    "JOIN fonduri f ON f.id = c.fond_id"
)


class StoreError(ArchiveError):
    error_type = "STORE_ERROR"


class RecordStore(Protocol):
    def list_records(self, inventory_id: str) -> list[CaseRecord]: ...

    def insert_record(self, inventory_id: str, fields: CaseFields) -> str: ...

    def update_record(self, record_id: str, values: Mapping[str, Any]) -> None: ...

    def get_inventory(self, inventory_id: str) -> InventoryInfo: ...

    def list_inventories(self, fonds_id: str) -> list[InventoryInfo]: ...

    def has_elevated_access(self, user_id: str) -> bool: ...

    def transaction(self) -> Any: ...


def _record_from_row(row: tuple[Any, ...]) -> CaseRecord:
    return CaseRecord(
        id=str(row[0]),
        inventory_id=str(row[1]),
        sequence_number=int(row[2]),
        nomenclature_code=row[3],
        content=row[4],
        date_range=row[5],
        page_count=row[6],
        notes=row[7],
        box_number=row[8],
    )


def _inventory_from_row(row: tuple[Any, ...]) -> InventoryInfo:
    return InventoryInfo(
        id=str(row[0]),
        year=int(row[1]),
        retention_term=str(row[2]),
        department_name=row[3],
        fonds_name=row[4],
        department_id=str(row[5]),
        fonds_id=str(row[6]),
    )


class PostgresStore:
    """RecordStore over a psycopg2 cursor (the connection must be in autocommit mode)."""

    def __init__(self, cursor: Any) -> None:
        self.cursor = cursor

    def _execute(self, sql: str, params: tuple[Any, ...] | None = None) -> None:
        try:
            self.cursor.execute(sql, params)
        except Exception as e:
            raise StoreError(f"database error: {e}") from e

    def _fetchall(self) -> list[tuple[Any, ...]]:
        try:
            return list(self.cursor.fetchall())
        except Exception as e:
            raise StoreError(f"database error while fetching rows: {e}") from e

    def list_records(self, inventory_id: str) -> list[CaseRecord]:
        self._execute(f"{_RECORD_SELECT} WHERE inventar_id = %s ORDER BY nr_crt", (inventory_id,))
        return [_record_from_row(r) for r in self._fetchall()]

    def insert_record(self, inventory_id: str, fields: CaseFields) -> str:
        cols = ["inventar_id"] + [COLUMNS[name] for name in COLUMNS]
        values = [inventory_id] + [getattr(fields, name) for name in COLUMNS]
        placeholders = ",".join(["%s"] * len(cols))
        self._execute(
            f"INSERT INTO dosare ({','.join(cols)}) VALUES ({placeholders}) RETURNING id",
            tuple(values),
        )
        try:
            row = self.cursor.fetchone()
        except Exception as e:
            raise StoreError(f"database error while reading inserted id: {e}") from e
        if not row:
            raise StoreError("insert returned no id")
        return str(row[0])

    def update_record(self, record_id: str, values: Mapping[str, Any]) -> None:
        unknown = set(values) - set(MUTABLE_FIELDS)
        if unknown:
            raise StoreError(f"fields cannot be updated: {sorted(unknown)}")
        if not values:
            return
        assignments = ", ".join(f"{COLUMNS[name]} = %s" for name in values)
        self._execute(
            f"UPDATE dosare SET {assignments} WHERE id = %s",
            tuple(values.values()) + (record_id,),
        )
        if getattr(self.cursor, "rowcount", 1) == 0:
            raise StoreError(f"case record {record_id} no longer exists")

    def get_inventory(self, inventory_id: str) -> InventoryInfo:
        self._execute(f"{_INVENTORY_SELECT} WHERE i.id = %s", (inventory_id,))
        rows = self._fetchall()
        if not rows:
            raise StoreError(f"inventory {inventory_id} not found")
        return _inventory_from_row(rows[0])

    def list_inventories(self, fonds_id: str) -> list[InventoryInfo]:
        self._execute(f"{_INVENTORY_SELECT} WHERE f.id = %s ORDER BY i.an, c.nume", (fonds_id,))
        return [_inventory_from_row(r) for r in self._fetchall()]

    def has_elevated_access(self, user_id: str) -> bool:
        self._execute(
            "SELECT 1 FROM user_roles WHERE user_id = %s AND role = 'admin' LIMIT 1",
            (user_id,),
        )
        return bool(self._fetchall())

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """BEGIN ... COMMIT, with ROLLBACK when the body raises."""
        self._execute("BEGIN")
        try:
            yield
        except BaseException:
            try:
                self.cursor.execute("ROLLBACK")
            except Exception as rollback_e:  # pragma: no cover - keep the original error
                logger.warning("rollback failed: %s", rollback_e)
            raise
        self._execute("COMMIT")
