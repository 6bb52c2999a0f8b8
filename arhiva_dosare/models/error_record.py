from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for the JSON Lines error log.

One record per aborted import or generation run. ``row`` is the 1-based sheet
row the failure points at, or -1 for failures that concern the whole document
(header not found, template missing, store unreachable).
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: Source or target document name
        sheet: Sheet name within the document ("<FILE_LEVEL>" when not applicable)
        row: Row number (1-based). Use -1 for document-level errors
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Human-readable reason shown to the operator
    """
    timestamp: str  # ISO8601 UTC
    file: str
    sheet: str
    row: int
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(file: str, sheet: str, row: int, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            sheet=sheet,
            row=row,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        # asdict keeps the key set fixed to the dataclass fields
        return json.dumps(asdict(self), ensure_ascii=False)
