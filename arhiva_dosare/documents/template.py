from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterable
from pathlib import Path

from openpyxl import Workbook, load_workbook
from openpyxl.worksheet.worksheet import Worksheet

from arhiva_dosare.errors import ArchiveError

"""Template workbook handling shared by the document generators.

A template is an .xlsx workbook whose sheets carry the page formatting (column
widths, fonts, borders, print setup). Generators copy the template sheet once
per page and write values into fixed cells; the template sheet itself is not
part of the output.

Output is written to a temporary sibling file first and moved into place only
after a successful save, so a failed write never leaves a truncated document
at the target path.
"""

__all__ = [
    "TemplateLoadFailure",
    "DocumentWriteFailure",
    "load_template",
    "add_pages",
    "save_workbook",
    "write_atomically",
    "retention_text",
    "truncate",
]

logger = logging.getLogger(__name__)


class TemplateLoadFailure(ArchiveError):
    error_type = "TEMPLATE_LOAD_FAILURE"


class DocumentWriteFailure(ArchiveError):
    error_type = "DOCUMENT_WRITE_FAILURE"


def load_template(path: str | Path, sheets: Iterable[str]) -> Workbook:
    """Load a template workbook and check it has every sheet in ``sheets``.

    Raises:
        TemplateLoadFailure: missing file, corrupt container or missing sheet
    """
    path = Path(path).expanduser()
    if not path.exists():
        raise TemplateLoadFailure(f"template not found: {path}")
    try:
        wb = load_workbook(path)
    except Exception as e:
        raise TemplateLoadFailure(f"template {path.name} cannot be opened: {e}") from e
    missing = [name for name in sheets if name not in wb.sheetnames]
    if missing:
        raise TemplateLoadFailure(f"template {path.name} lacks sheet(s): {', '.join(missing)}")
    return wb


def add_pages(wb: Workbook, template_sheet: str, count: int) -> list[Worksheet]:
    """Append ``count`` copies of ``template_sheet`` named "<sheet> 1", "<sheet> 2", ..."""
    source = wb[template_sheet]
    pages: list[Worksheet] = []
    for number in range(1, count + 1):
        page = wb.copy_worksheet(source)
        page.title = f"{template_sheet} {number}"
        pages.append(page)
    return pages


def write_atomically(target: Path, write: Callable[[Path], None]) -> Path:
    """Run ``write(tmp_path)`` and move the result to ``target``.

    Raises:
        DocumentWriteFailure: the write or the final move failed; the
            temporary file is removed and ``target`` is left untouched
    """
    target = Path(target)
    tmp = target.with_name(f".{target.stem}.tmp{target.suffix}")
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        write(tmp)
        os.replace(tmp, target)
    except Exception as e:
        if tmp.exists():
            tmp.unlink()
        raise DocumentWriteFailure(f"cannot write {target.name}: {e}") from e
    logger.info("wrote %s", target)
    return target


def save_workbook(wb: Workbook, target: Path) -> Path:
    return write_atomically(target, wb.save)


def retention_text(term: str | int | None) -> str:
    """Printable retention term: "10" -> "10 ani", "P"/"permanent" -> "Permanent"."""
    if term is None:
        return ""
    text = str(term).strip()
    if text.isdigit():
        years = int(text)
        return "1 an" if years == 1 else f"{years} ani"
    if text.lower() in ("p", "permanent"):
        return "Permanent"
    return text


def truncate(text: str | None, limit: int) -> str:
    """Cut ``text`` to at most ``limit`` characters, ending with an ellipsis when cut."""
    if not text:
        return ""
    if len(text) <= limit:
        return text
    return text[: max(limit - 1, 0)].rstrip() + "…"
