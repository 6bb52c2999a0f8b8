from __future__ import annotations

from dataclasses import dataclass, field

"""Configuration dataclasses.

Populated by ``arhiva_dosare.config.loader.load_config`` from the YAML file.
Every section is optional; the defaults below are what an empty file yields.
"""


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection fallback.

    Environment variables (DATABASE_URL / PGDSN / PG*) take precedence.
    """
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class ImportSettings:
    """Bulk import behaviour."""
    overwrite: bool = False  # still requires elevated access to take effect
    atomic: bool = True  # one store transaction per run
    header_aliases: dict[str, list[str]] = field(default_factory=dict)  # field -> extra substrings


@dataclass(frozen=True)
class LabelSettings:
    """Spine (cotor) and cover (copertă) label generation."""
    template: str | None = None
    spine_sheet: str = "Cotor"
    cover_sheet: str = "Coperta"
    spine_per_page: int = 10  # 9 for the narrow format
    spine_content_chars: int = 60
    cover_content_chars: int = 120


@dataclass(frozen=True)
class RegistrySettings:
    """Fonds registry generation."""
    template: str | None = None
    sheet: str = "Registru"


@dataclass(frozen=True)
class AppConfig:
    """Root configuration object."""
    logs_directory: str = "./logs"
    import_settings: ImportSettings = field(default_factory=ImportSettings)
    labels: LabelSettings = field(default_factory=LabelSettings)
    registry: RegistrySettings = field(default_factory=RegistrySettings)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
