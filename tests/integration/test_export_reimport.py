from __future__ import annotations

from arhiva_dosare.documents.export import export_inventory
from arhiva_dosare.models.case_record import InventoryInfo
from arhiva_dosare.models.import_result import ImportStatus, ReconcileResult
from arhiva_dosare.services.importer import import_file

"""An exported inventory imports back as the same batch."""


def test_export_then_import_into_empty_inventory(tmp_path, store, inventory, case_fields):
    originals = [
        case_fields(1, notes="copie xerox", page_count=None),
        case_fields(2, nomenclature_code="12", box_number=None),
        case_fields(3, content="Registru de intrare-ieșire", date_range="2019-2020"),
        case_fields(4, content="NA", notes="NA"),
    ]
    for fields in originals:
        store.seed(inventory.id, fields)
    target = InventoryInfo(id="inv-copie", year=2020, retention_term="P", department_name="D", fonds_name="F")
    store.inventories[target.id] = target

    path = export_inventory(store, inventory.id, tmp_path / "export.xlsx")
    outcome = import_file(path, target.id, store)

    assert outcome.status is ImportStatus.SUCCESS
    assert outcome.counts == ReconcileResult(inserted=4, updated=0, skipped=0)
    copied = store.by_sequence(target.id)
    assert [copied[n].to_fields() for n in sorted(copied)] == originals


def test_reimport_into_same_inventory_skips_everything(tmp_path, store, inventory, case_fields):
    for n in (1, 2, 3):
        store.seed(inventory.id, case_fields(n))
    path = export_inventory(store, inventory.id, tmp_path / "export.xlsx")
    outcome = import_file(path, inventory.id, store)
    assert outcome.counts == ReconcileResult(inserted=0, updated=0, skipped=3)
