from __future__ import annotations
import pytest
from pathlib import Path
from leadscrub.config.loader import ConfigError, default_config, load_config


def test_load_config_success(write_config: Path):
    cfg = load_config(write_config)
    assert cfg.storage.backend == "memory"
    assert cfg.storage.dsn is None
    assert cfg.enrichment.api_delay_seconds == 0
    assert cfg.scraper.max_sub_pages == 2
    assert cfg.scraper.max_text_length == 4000
    assert cfg.logs_directory == "./logs"


def test_load_config_defaults_for_omitted_keys(temp_workdir: Path):
    path = temp_workdir / "config" / "min.yml"
    path.write_text("storage:\n  backend: memory\n", encoding="utf-8")
    cfg = load_config(path)
    assert cfg.enrichment.api_delay_seconds == pytest.approx(0.2)
    assert cfg.scraper.timeout_seconds == pytest.approx(10.0)
    assert cfg.scraper.max_sub_pages == 3


def test_empty_file_is_all_defaults(temp_workdir: Path):
    path = temp_workdir / "config" / "empty.yml"
    path.write_text("", encoding="utf-8")
    assert load_config(path) == default_config()


def test_load_config_missing_file(temp_workdir: Path):
    missing = temp_workdir / "config" / "not_exists.yml"
    with pytest.raises(ConfigError):
        load_config(missing)


def test_load_config_invalid_yaml(temp_workdir: Path):
    path = temp_workdir / "config" / "bad.yml"
    path.write_text("storage: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError) as e:
        load_config(path)
    assert "invalid yaml" in str(e.value)


def test_load_config_extra_field(write_config: Path):
    # unknown keys are rejected by additionalProperties: false
    text = write_config.read_text(encoding="utf-8") + "\nextra_field: not_allowed\n"
    write_config.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError) as e:
        load_config(write_config)
    assert "config validation failed" in str(e.value)


def test_load_config_wrong_type_reports_path(write_config: Path):
    text = write_config.read_text(encoding="utf-8").replace("max_sub_pages: 2", "max_sub_pages: lots")
    write_config.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError) as e:
        load_config(write_config)
    assert "(at scraper/max_sub_pages)" in str(e.value)


def test_postgres_requires_dsn(write_config: Path):
    text = write_config.read_text(encoding="utf-8").replace("backend: memory", "backend: postgres")
    write_config.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError) as e:
        load_config(write_config)
    assert "DATABASE_URL" in str(e.value)


def test_postgres_dsn_from_environment(write_config: Path, monkeypatch):
    text = write_config.read_text(encoding="utf-8").replace("backend: memory", "backend: postgres")
    write_config.write_text(text, encoding="utf-8")
    monkeypatch.setenv("PGDSN", "dbname=leads")
    cfg = load_config(write_config)
    assert cfg.storage.backend == "postgres"
    assert cfg.storage.dsn == "dbname=leads"
