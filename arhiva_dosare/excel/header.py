from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from arhiva_dosare.errors import ImportValidationError
from arhiva_dosare.models.import_row import ColumnMap

"""Header Locator & Column Mapper.

The source spreadsheets come from many offices: column order varies, and title
or metadata rows may sit above the table. The header row is therefore found by
content, and each column is mapped to a field through a rule table of header
substrings. Accepting a new header spelling means adding a term to
``HEADER_RULES`` (or to ``import.header_aliases`` in the config).
"""

__all__ = [
    "HeaderNotFound",
    "HeaderRule",
    "HEADER_RULES",
    "normalize_header",
    "locate_header",
    "map_columns",
    "rules_with_aliases",
]


class HeaderNotFound(ImportValidationError):
    error_type = "HEADER_NOT_FOUND"


@dataclass(frozen=True)
class HeaderRule:
    """A header cell matches when it contains every ``all_of`` term and,
    if ``any_of`` is non-empty, at least one ``any_of`` term."""
    field: str
    all_of: tuple[str, ...] = ()
    any_of: tuple[str, ...] = ()

    def matches(self, text: str) -> bool:
        if not self.all_of and not self.any_of:
            return False
        if any(term not in text for term in self.all_of):
            return False
        return not self.any_of or any(term in text for term in self.any_of)


# Order matters: a cell is assigned to the first rule that matches and whose
# field is still unmapped.
HEADER_RULES: tuple[HeaderRule, ...] = (
    HeaderRule("sequence_number", all_of=("nr",), any_of=("crt", "curent")),
    HeaderRule("nomenclature_code", any_of=("indicativ", "nomenclator")),
    HeaderRule("content", any_of=("conținut", "continut")),
    HeaderRule("date_range", all_of=("date", "extreme")),
    HeaderRule("page_count", all_of=("file",), any_of=("număr", "numar")),
    HeaderRule("notes", any_of=("observații", "observatii")),
    HeaderRule("box_number", any_of=("cutie",)),
)

SEQUENCE_RULE = HEADER_RULES[0]

# Legacy cedilla forms (ş ţ) are still common in older Romanian documents.
_CEDILLA = str.maketrans({"ş": "ș", "ţ": "ț", "Ş": "ș", "Ţ": "ț"})
_WS = re.compile(r"\s+")


def normalize_header(value: Any) -> str:
    """Lower-case, trim, collapse whitespace, unify ș/ț spellings."""
    if value is None:
        return ""
    text = str(value).translate(_CEDILLA).lower().strip()
    return _WS.sub(" ", text)


def rules_with_aliases(aliases: Mapping[str, Sequence[str]] | None) -> tuple[HeaderRule, ...]:
    """Extend the default rule table with configured header spellings.

    Each alias becomes an extra ``any_of`` alternative for its field, matched
    as a plain substring (the field's ``all_of`` terms do not apply to it).
    Blank aliases are dropped: an empty substring would match any cell.
    """
    if not aliases:
        return HEADER_RULES
    extra = []
    for field, terms in aliases.items():
        spellings = tuple(s for s in (normalize_header(a) for a in terms or ()) if s)
        if spellings:
            extra.append(HeaderRule(field, any_of=spellings))
    return HEADER_RULES + tuple(extra)


def locate_header(grid: Sequence[Sequence[Any]]) -> int:
    """Return the 0-based index of the first row holding the nr. crt. column.

    Raises
    ------
    HeaderNotFound: no row has a cell matching the sequence-number signature
    """
    for row_index, row in enumerate(grid):
        for value in row:
            if SEQUENCE_RULE.matches(normalize_header(value)):
                return row_index
    raise HeaderNotFound(
        "header row not found: no cell contains 'Nr. crt' (or 'Nr. curent'); "
        "check that the first sheet holds the case-record table"
    )


def map_columns(
    grid: Sequence[Sequence[Any]],
    rules: Sequence[HeaderRule] = HEADER_RULES,
) -> ColumnMap:
    """Locate the header row and map fields to column indices.

    Only the first column matching each field is kept.
    """
    header_row = locate_header(grid)
    columns: dict[str, int] = {}
    for col_index, value in enumerate(grid[header_row]):
        text = normalize_header(value)
        if not text:
            continue
        for rule in rules:
            if rule.field not in columns and rule.matches(text):
                columns[rule.field] = col_index
                break
    return ColumnMap(header_row=header_row, columns=columns)
