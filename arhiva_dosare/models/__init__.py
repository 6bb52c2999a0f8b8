"""Domain models for the case-record import and document generator.

Persisted entities (``CaseRecord``, ``InventoryInfo``), transient import models
(``ImportRow``, ``ColumnMap``), results and configuration.
"""

from .case_record import MUTABLE_FIELDS, CaseFields, CaseRecord, InventoryInfo
from .config_models import AppConfig, DatabaseConfig, ImportSettings, LabelSettings, RegistrySettings
from .error_record import ErrorRecord
from .import_result import ImportOutcome, ImportStatus, ReconcileResult
from .import_row import ColumnMap, ImportRow

__all__ = [
    # Persisted entities
    "MUTABLE_FIELDS",
    "CaseFields",
    "CaseRecord",
    "InventoryInfo",
    # Import models
    "ColumnMap",
    "ImportRow",
    # Results
    "ErrorRecord",
    "ImportOutcome",
    "ImportStatus",
    "ReconcileResult",
    # Configuration models
    "AppConfig",
    "DatabaseConfig",
    "ImportSettings",
    "LabelSettings",
    "RegistrySettings",
]
