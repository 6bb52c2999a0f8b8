from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from arhiva_dosare.models.config_models import (
    AppConfig,
    DatabaseConfig,
    ImportSettings,
    LabelSettings,
    RegistrySettings,
)

"""Config loader.

Responsibilities:
- Load the YAML config (default ``config/arhiva.yml``)
- Validate it against the bundled JSON schema (unknown keys are rejected)
- Apply defaults for every missing section
"""

SCHEMA_PATH = Path(__file__).parent / "config_schema.json"
DEFAULT_CONFIG_PATH = Path("config/arhiva.yml")


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: If the schema file is missing or not valid JSON, or the
            config data fails schema validation.
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def load_config(path: Path | None = None) -> AppConfig:
    path = path or DEFAULT_CONFIG_PATH
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")

    _validate_config_schema(data)
    return config_from_dict(data)


def config_from_dict(data: dict[str, Any]) -> AppConfig:
    """Build an AppConfig from already-validated data, filling defaults.

    Raises:
        ConfigError: spine and cover labels would share one template sheet
    """
    imp = data.get("import") or {}
    lbl = data.get("labels") or {}
    reg = data.get("registry") or {}
    db_raw = data.get("database") or {}

    defaults_lbl = LabelSettings()
    defaults_reg = RegistrySettings()
    spine_sheet = lbl.get("spine_sheet", defaults_lbl.spine_sheet)
    cover_sheet = lbl.get("cover_sheet", defaults_lbl.cover_sheet)
    if spine_sheet == cover_sheet:
        raise ConfigError(f"labels: spine_sheet and cover_sheet must differ, both are '{spine_sheet}'")
    return AppConfig(
        logs_directory=data.get("logs_directory", AppConfig.logs_directory),
        import_settings=ImportSettings(
            overwrite=bool(imp.get("overwrite", False)),
            atomic=bool(imp.get("atomic", True)),
            header_aliases={k: list(v) for k, v in (imp.get("header_aliases") or {}).items()},
        ),
        labels=LabelSettings(
            template=lbl.get("template"),
            spine_sheet=spine_sheet,
            cover_sheet=cover_sheet,
            spine_per_page=lbl.get("spine_per_page", defaults_lbl.spine_per_page),
            spine_content_chars=lbl.get("spine_content_chars", defaults_lbl.spine_content_chars),
            cover_content_chars=lbl.get("cover_content_chars", defaults_lbl.cover_content_chars),
        ),
        registry=RegistrySettings(
            template=reg.get("template"),
            sheet=reg.get("sheet", defaults_reg.sheet),
        ),
        database=DatabaseConfig(
            host=db_raw.get("host"),
            port=db_raw.get("port"),
            user=db_raw.get("user"),
            password=db_raw.get("password"),
            database=db_raw.get("database"),
            dsn=db_raw.get("dsn"),
        ),
    )
