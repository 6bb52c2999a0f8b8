from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from arhiva_dosare.errors import ImportValidationError
from arhiva_dosare.models.case_record import CaseFields
from arhiva_dosare.models.import_row import ColumnMap, ImportRow

from .reader import is_blank

"""Row Extractor & Field Validator.

Every row below the header becomes an ``ImportRow`` unless it is entirely
blank. The first invalid row aborts the whole import: nothing is produced for
the rows that were fine, so a batch is either fully valid or rejected.
"""

__all__ = [
    "FieldSpec",
    "FIELD_SPECS",
    "MissingRequiredField",
    "TypeCoercionError",
    "InvalidFieldValue",
    "build_fields",
    "extract_rows",
]


def _where(row_number: int) -> str:
    return f"row {row_number}" if row_number > 0 else "record"


class MissingRequiredField(ImportValidationError):
    error_type = "MISSING_REQUIRED_FIELD"

    def __init__(self, field: str, row_number: int, sequence_hint: int | None = None) -> None:
        self.field = field
        self.row_number = row_number
        self.sequence_hint = sequence_hint
        label = FIELD_SPECS[field].label
        where = _where(row_number)
        if sequence_hint is not None:
            where += f" (Nr. crt {sequence_hint})"
        super().__init__(f"{where}: required column '{label}' is empty or missing")


class TypeCoercionError(ImportValidationError):
    error_type = "TYPE_COERCION_ERROR"

    def __init__(self, field: str, row_number: int, value: Any) -> None:
        self.field = field
        self.row_number = row_number
        self.value = value
        label = FIELD_SPECS[field].label
        super().__init__(f"{_where(row_number)}: '{label}' must be a whole number, got {value!r}")


class InvalidFieldValue(ImportValidationError):
    error_type = "INVALID_FIELD_VALUE"

    def __init__(self, field: str, row_number: int, reason: str) -> None:
        self.field = field
        self.row_number = row_number
        label = FIELD_SPECS[field].label
        super().__init__(f"{_where(row_number)}: '{label}' {reason}")


@dataclass(frozen=True)
class FieldSpec:
    name: str
    label: str  # header text used in exports and messages
    numeric: bool
    required: bool
    max_length: int | None = None  # text fields
    max_value: int | None = None  # numeric fields (values must also be positive)


FIELD_SPECS: dict[str, FieldSpec] = {
    spec.name: spec
    for spec in (
        FieldSpec("sequence_number", "Nr. crt", numeric=True, required=True, max_value=999_999),
        FieldSpec("nomenclature_code", "Indicativ nomenclator", numeric=False, required=True, max_length=100),
        FieldSpec("content", "Conținut", numeric=False, required=True, max_length=1000),
        FieldSpec("date_range", "Date extreme", numeric=False, required=True, max_length=100),
        FieldSpec("page_count", "Număr file", numeric=True, required=False, max_value=999_999),
        FieldSpec("notes", "Observații", numeric=False, required=False, max_length=500),
        FieldSpec("box_number", "Nr. cutie", numeric=True, required=False, max_value=9_999),
    )
}


def _coerce_int(value: Any, field: str, row_number: int) -> int:
    if isinstance(value, bool):
        raise TypeCoercionError(field, row_number, value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value.is_integer():
            return int(value)
        raise TypeCoercionError(field, row_number, value)
    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text.replace(",", "."))
    except ValueError as e:
        raise TypeCoercionError(field, row_number, value) from e
    if not number.is_integer():
        raise TypeCoercionError(field, row_number, value)
    return int(number)


def _coerce_text(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime, date)):
        return value.strftime("%d.%m.%Y")
    return str(value).strip()


def _check(spec: FieldSpec, value: Any, row_number: int) -> None:
    if spec.numeric:
        if value <= 0:
            raise InvalidFieldValue(spec.name, row_number, f"must be positive, got {value}")
        if spec.max_value is not None and value > spec.max_value:
            raise InvalidFieldValue(spec.name, row_number, f"must be at most {spec.max_value}, got {value}")
    elif spec.max_length is not None and len(value) > spec.max_length:
        raise InvalidFieldValue(
            spec.name, row_number, f"is {len(value)} characters long (limit {spec.max_length})"
        )


def _sequence_hint(raw: Any) -> int | None:
    if is_blank(raw):
        return None
    try:
        return _coerce_int(raw, "sequence_number", 0)
    except TypeCoercionError:
        return None


def build_fields(values: Mapping[str, Any], row_number: int = 0) -> CaseFields:
    """Coerce and validate raw field values into CaseFields.

    ``values`` maps field names to raw cell values; absent keys count as blank.
    Shared by the bulk import and manual single-record addition.
    """
    hint = _sequence_hint(values.get("sequence_number"))
    typed: dict[str, Any] = {}
    for name, spec in FIELD_SPECS.items():
        raw = values.get(name)
        if is_blank(raw):
            if spec.required:
                raise MissingRequiredField(name, row_number, hint)
            typed[name] = None
            continue
        value = _coerce_int(raw, name, row_number) if spec.numeric else _coerce_text(raw)
        _check(spec, value, row_number)
        typed[name] = value
    return CaseFields(**typed)


def extract_rows(grid: Sequence[Sequence[Any]], column_map: ColumnMap) -> list[ImportRow]:
    """Convert every non-blank row below the header into an ImportRow.

    Raises
    ------
    MissingRequiredField, TypeCoercionError, InvalidFieldValue: on the first bad row
    """
    rows: list[ImportRow] = []
    for row_index in range(column_map.header_row + 1, len(grid)):
        cells = grid[row_index]
        if all(is_blank(v) for v in cells):
            continue
        raw: dict[str, Any] = {}
        for field, col in column_map.columns.items():
            raw[field] = cells[col] if col < len(cells) else None
        row_number = row_index + 1
        rows.append(ImportRow(row_number=row_number, fields=build_fields(raw, row_number), raw_values=raw))
    return rows
