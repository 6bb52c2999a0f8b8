from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Any

import pandas as pd

from arhiva_dosare.errors import ImportValidationError

"""Grid Reader.

Turns an external spreadsheet into a row-major grid of scalar cells
(text, number or None). Only the first sheet is read, without any header
interpretation: header discovery is done on the grid by ``excel.header``.
"""

__all__ = [
    "Grid",
    "GridReadError",
    "SheetGrid",
    "read_grid",
    "read_sheet",
    "grid_from_frame",
    "is_blank",
]

Grid = list[list[Any]]


class GridReadError(ImportValidationError):
    """Raised when the document cannot be opened or holds no sheet."""

    error_type = "GRID_READ_ERROR"


@dataclass(frozen=True)
class SheetGrid:
    sheet_name: str
    rows: Grid


def is_blank(value: Any) -> bool:
    """True for None, NaN and whitespace-only text."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _cell(value: Any) -> Any:
    if is_blank(value):
        return None
    # numpy scalars -> python scalars so downstream isinstance checks stay simple
    if hasattr(value, "item") and not isinstance(value, (str, bytes)):
        try:
            return value.item()
        except (AttributeError, ValueError):
            return value
    return value


def grid_from_frame(df: pd.DataFrame) -> Grid:
    """Convert a header-less DataFrame into a grid with blanks as None."""
    return [[_cell(v) for v in row] for row in df.itertuples(index=False, name=None)]


def read_grid(source: Path | bytes) -> Grid:
    """Read the first sheet of a spreadsheet into a grid."""
    return read_sheet(source).rows


def read_sheet(source: Path | bytes) -> SheetGrid:
    """Read the first sheet of a spreadsheet, keeping its name.

    Parameters
    ----------
    source: path to the document, or its raw bytes (e.g. an upload)

    Raises
    ------
    GridReadError: the container cannot be opened or has no sheet
    """
    name = source.name if isinstance(source, Path) else "<upload>"
    handle: Path | BytesIO = BytesIO(source) if isinstance(source, bytes) else source
    try:
        xls = pd.ExcelFile(handle)
    except FileNotFoundError as e:
        raise GridReadError(f"document not found: {name}") from e
    except Exception as e:
        raise GridReadError(f"document {name} cannot be read as a spreadsheet: {e}") from e

    with xls:
        if not xls.sheet_names:
            raise GridReadError(f"document {name} contains no sheet")
        # keep_default_na=False: text such as "NA" stays text; only empty cells are blank
        sheet_name = str(xls.sheet_names[0])
        df = xls.parse(sheet_name, header=None, keep_default_na=False, na_values=[""])
    return SheetGrid(sheet_name=sheet_name, rows=grid_from_frame(df))
