# Shared pytest fixtures
from __future__ import annotations

import dataclasses
import itertools
import logging
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import pandas as pd
import pytest

from arhiva_dosare.db.store import StoreError
from arhiva_dosare.logging.init import APP_LOGGER_NAME, reset_logging
from arhiva_dosare.models.case_record import CaseFields, CaseRecord, InventoryInfo


class MemoryStore:
    """In-memory RecordStore double.

    ``calls`` records every store operation in order. Failure injection:
    ``fail_list`` makes list_records raise, ``fail_on_write=n`` makes the n-th
    insert/update raise, ``fail_begin`` makes transaction() raise on entry.
    A transaction restores the record set when its body raises.
    """

    def __init__(self, inventories: list[InventoryInfo] | None = None, admins: list[str] | None = None) -> None:
        self.inventories = {i.id: i for i in inventories or []}
        self.admins = set(admins or [])
        self.records: dict[str, CaseRecord] = {}
        self.calls: list[tuple[Any, ...]] = []
        self.fail_list = False
        self.fail_on_write: int | None = None
        self.fail_begin = False
        self._writes = 0
        self._ids = itertools.count(1)

    # seeding (not recorded in calls)
    def seed(self, inventory_id: str, fields: CaseFields) -> str:
        record_id = f"r{next(self._ids)}"
        self.records[record_id] = CaseRecord.from_fields(record_id, inventory_id, fields)
        return record_id

    def writes(self) -> list[tuple[Any, ...]]:
        return [c for c in self.calls if c[0] in ("insert", "update")]

    def by_sequence(self, inventory_id: str) -> dict[int, CaseRecord]:
        return {r.sequence_number: r for r in self.records.values() if r.inventory_id == inventory_id}

    def _count_write(self) -> None:
        self._writes += 1
        if self.fail_on_write is not None and self._writes == self.fail_on_write:
            raise StoreError("duplicate key value violates unique constraint")

    def list_records(self, inventory_id: str) -> list[CaseRecord]:
        self.calls.append(("list", inventory_id))
        if self.fail_list:
            raise StoreError("connection reset by peer")
        found = [r for r in self.records.values() if r.inventory_id == inventory_id]
        return sorted(found, key=lambda r: r.sequence_number)

    def insert_record(self, inventory_id: str, fields: CaseFields) -> str:
        self.calls.append(("insert", fields.sequence_number))
        self._count_write()
        return self.seed(inventory_id, fields)

    def update_record(self, record_id: str, values: dict[str, Any]) -> None:
        current = self.records[record_id]
        self.calls.append(("update", current.sequence_number))
        self._count_write()
        self.records[record_id] = dataclasses.replace(current, **values)

    def get_inventory(self, inventory_id: str) -> InventoryInfo:
        if inventory_id not in self.inventories:
            raise StoreError(f"inventory {inventory_id} not found")
        return self.inventories[inventory_id]

    def list_inventories(self, fonds_id: str) -> list[InventoryInfo]:
        return [i for i in self.inventories.values() if i.fonds_id == fonds_id]

    def has_elevated_access(self, user_id: str) -> bool:
        return user_id in self.admins

    @contextmanager
    def transaction(self):
        if self.fail_begin:
            raise StoreError("could not begin transaction")
        snapshot = dict(self.records)
        self.calls.append(("begin",))
        try:
            yield
        except BaseException:
            self.records = snapshot
            self.calls.append(("rollback",))
            raise
        self.calls.append(("commit",))


@pytest.fixture(autouse=True)
def _fresh_logging():
    reset_logging()
    logging.getLogger(APP_LOGGER_NAME).handlers.clear()
    yield
    reset_logging()
    logging.getLogger(APP_LOGGER_NAME).handlers.clear()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """logs_directory: ./logs
import:
  overwrite: false
  atomic: true
labels:
  spine_per_page: 10
registry:
  sheet: Registru
database:
  host: localhost
  port: 5432
  user: arhiva
  password: secret
  database: arhiva
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "arhiva.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def inventory() -> InventoryInfo:
    return InventoryInfo(
        id="inv-2020",
        year=2020,
        retention_term="10",
        department_name="Contabilitate",
        fonds_name="Primăria Comunei Vadu",
        department_id="dep-1",
        fonds_id="fond-1",
    )


@pytest.fixture()
def store(inventory: InventoryInfo) -> MemoryStore:
    return MemoryStore([inventory], admins=["admin"])


@pytest.fixture()
def case_fields():
    """Factory: case_fields(n, **overrides) -> CaseFields with plausible values."""
    def make(n: int, **overrides: Any) -> CaseFields:
        values: dict[str, Any] = dict(
            sequence_number=n,
            nomenclature_code=f"I-{n}",
            content=f"Dosar {n}",
            date_range="2020",
            page_count=10 + n,
            notes=None,
            box_number=1,
        )
        values.update(overrides)
        return CaseFields(**values)
    return make


@pytest.fixture()
def case_row():
    """Factory: case_row(n, **overrides) -> sheet row in HEADER column order."""
    def make(n: Any, **overrides: Any) -> list[Any]:
        values: dict[str, Any] = dict(
            sequence_number=n,
            nomenclature_code=f"I-{n}",
            content=f"Dosar {n}",
            date_range="2020",
            page_count=10,
            notes=None,
            box_number=1,
        )
        values.update(overrides)
        return list(values.values())
    return make


@pytest.fixture()
def write_sheet():
    """Factory: write_sheet(path, rows, sheet_name) writes rows verbatim (no header added)."""
    def write(path: Path, rows: list[list[Any]], sheet_name: str = "Inventar") -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            pd.DataFrame(rows, dtype=object).to_excel(writer, sheet_name=sheet_name, header=False, index=False)
        return path
    return write


@pytest.fixture()
def make_store():
    """The MemoryStore class, for tests that need their own inventories."""
    return MemoryStore
