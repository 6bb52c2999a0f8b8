from __future__ import annotations

from pathlib import Path

import pytest

from arhiva_dosare.config.loader import ConfigError, config_from_dict, load_config
from arhiva_dosare.models.config_models import AppConfig, LabelSettings


def test_load_config_success(write_config: Path):
    cfg = load_config(write_config)
    assert cfg.logs_directory == "./logs"
    assert cfg.import_settings.atomic is True
    assert cfg.import_settings.overwrite is False
    assert cfg.labels.spine_per_page == 10
    assert cfg.registry.sheet == "Registru"
    assert cfg.database.port == 5432
    assert cfg.database.dsn is None


def test_empty_file_yields_defaults(temp_workdir: Path):
    path = temp_workdir / "config" / "gol.yml"
    path.write_text("", encoding="utf-8")
    assert load_config(path) == AppConfig()


def test_default_path_is_used(write_config: Path):
    assert load_config().database.user == "arhiva"


def test_partial_sections_keep_defaults():
    cfg = config_from_dict(
        {"labels": {"spine_per_page": 9, "template": "sabloane/etichete.xlsx"},
         "import": {"header_aliases": {"content": ["descriere", "obiect"]}}}
    )
    assert cfg.labels == LabelSettings(spine_per_page=9, template="sabloane/etichete.xlsx")
    assert cfg.import_settings.header_aliases == {"content": ["descriere", "obiect"]}
    assert cfg.import_settings.atomic is True


def test_load_config_missing_file(temp_workdir: Path):
    with pytest.raises(ConfigError) as e:
        load_config(temp_workdir / "config" / "not_exists.yml")
    assert "config file not found" in str(e.value)


@pytest.mark.parametrize(
    "extra",
    [
        "extra_field: not_allowed\n",
        "labels:\n  spine_per_page: 8\n",
        "labels:\n  font: Arial\n",
        "import:\n  header_aliases:\n    titlu: [denumire]\n",
        "import:\n  atomic: sometimes\n",
        "import:\n  header_aliases:\n    notes: [\"  \"]\n",
    ],
)
def test_schema_violations_are_rejected(temp_workdir: Path, extra: str):
    path = temp_workdir / "config" / "rau.yml"
    path.write_text(extra, encoding="utf-8")
    with pytest.raises(ConfigError) as e:
        load_config(path)
    assert "config validation failed" in str(e.value)


def test_root_must_be_mapping(temp_workdir: Path):
    path = temp_workdir / "config" / "lista.yml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError) as e:
        load_config(path)
    assert "mapping" in str(e.value)


def test_invalid_yaml(temp_workdir: Path):
    path = temp_workdir / "config" / "stricat.yml"
    path.write_text("labels: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError) as e:
        load_config(path)
    assert "invalid yaml" in str(e.value)


@pytest.mark.parametrize(
    "labels",
    [
        "labels:\n  spine_sheet: Etichete\n  cover_sheet: Etichete\n",
        "labels:\n  spine_sheet: Coperta\n",
    ],
)
def test_spine_and_cover_sheets_must_differ(temp_workdir: Path, labels: str):
    path = temp_workdir / "config" / "etichete.yml"
    path.write_text(labels, encoding="utf-8")
    with pytest.raises(ConfigError) as e:
        load_config(path)
    assert "spine_sheet and cover_sheet must differ" in str(e.value)
