from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from arhiva_dosare.db.store import RecordStore, StoreError
from arhiva_dosare.excel.extractor import build_fields
from arhiva_dosare.models.case_record import CaseFields, CaseRecord

from .reconcile import PersistedReadFailure
from .sequence import validate_next_sequence

"""Manual single-record addition.

Outside bulk import a record can only be appended: its Nr. crt must be the
next number after the inventory's current maximum, which keeps 1..N
contiguous. Field rules are the same as for imported rows.
"""

__all__ = [
    "add_record",
]

logger = logging.getLogger(__name__)


def add_record(store: RecordStore, inventory_id: str, values: Mapping[str, Any] | CaseFields) -> CaseRecord:
    """Validate and insert one case record.

    Raises:
        MissingRequiredField / TypeCoercionError / InvalidFieldValue: bad field values
        PersistedReadFailure: existing records could not be read
        SequenceNotNext: Nr. crt is not max(existing) + 1
        StoreError: the insert failed
    """
    if isinstance(values, CaseFields):
        fields = build_fields(vars(values))
    else:
        fields = build_fields(values)

    try:
        existing = store.list_records(inventory_id)
    except StoreError as e:
        raise PersistedReadFailure(f"cannot read existing case records of inventory {inventory_id}: {e}") from e
    validate_next_sequence((r.sequence_number for r in existing), fields.sequence_number)

    record_id = store.insert_record(inventory_id, fields)
    logger.info("inventory=%s added nr_crt=%d id=%s", inventory_id, fields.sequence_number, record_id)
    return CaseRecord.from_fields(record_id, inventory_id, fields)
