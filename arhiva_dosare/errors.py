from __future__ import annotations

"""Exception hierarchy shared by the import and document pipelines.

Each error carries an UPPER_SNAKE ``error_type`` used verbatim in the JSON Lines
error log and in the SUMMARY line, and a message meant for the operator: it
must say what is wrong with the source document, not only that something failed.
"""

__all__ = [
    "ArchiveError",
    "ImportValidationError",
]


class ArchiveError(Exception):
    """Base class for every failure reported to the caller."""

    error_type = "ARCHIVE_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ImportValidationError(ArchiveError):
    """Raised before any write; the caller fixes the input and retries."""

    error_type = "IMPORT_VALIDATION_ERROR"
