from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

"""Configuration loader.

Responsibilities:
- Load the YAML config (default config/leadscrub.yml)
- Validate it against config_schema.json (shipped beside this module)
- Apply defaults for every omitted key
- Resolve the database DSN from DATABASE_URL (or PGDSN) when the file leaves it out

Credentials (API keys, DSN passwords) are never read from YAML; providers
pick them up from the environment.
"""

__all__ = [
    "ConfigError",
    "StorageConfig",
    "EnrichmentConfig",
    "ScraperConfig",
    "AppConfig",
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "load_config",
    "default_config",
]

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config") / "leadscrub.yml"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class StorageConfig:
    backend: str = "memory"
    dsn: str | None = None


@dataclass(frozen=True)
class EnrichmentConfig:
    api_delay_seconds: float = 0.2
    contact_model: str = "claude-3-5-haiku-latest"


@dataclass(frozen=True)
class ScraperConfig:
    timeout_seconds: float = 10.0
    max_sub_pages: int = 3
    max_text_length: int = 8000
    user_agent: str = "Mozilla/5.0 (compatible; leadscrub/0.1)"


@dataclass(frozen=True)
class AppConfig:
    storage: StorageConfig = field(default_factory=StorageConfig)
    enrichment: EnrichmentConfig = field(default_factory=EnrichmentConfig)
    scraper: ScraperConfig = field(default_factory=ScraperConfig)
    logs_directory: str = "./logs"


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: If the schema file is missing or unreadable, or the
            config data fails validation (unknown keys, wrong types, ...).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        where = "/".join(str(p) for p in e.absolute_path)
        suffix = f" (at {where})" if where else ""
        raise ConfigError(f"config validation failed: {e.message}{suffix}") from e


def _env_dsn() -> str | None:
    return os.environ.get("DATABASE_URL") or os.environ.get("PGDSN") or None


def default_config() -> AppConfig:
    """Configuration used when no file is given: memory storage, DSN from env."""
    return AppConfig(storage=StorageConfig(dsn=_env_dsn()))


def load_config(path: Path) -> AppConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config validation failed: top level must be a mapping")

    _validate_config_schema(data)

    storage_raw = data.get("storage") or {}
    enrichment_raw = data.get("enrichment") or {}
    scraper_raw = data.get("scraper") or {}

    storage = StorageConfig(
        backend=storage_raw.get("backend", StorageConfig.backend),
        dsn=storage_raw.get("dsn") or _env_dsn(),
    )
    enrichment = EnrichmentConfig(
        api_delay_seconds=float(enrichment_raw.get("api_delay_seconds", EnrichmentConfig.api_delay_seconds)),
        contact_model=enrichment_raw.get("contact_model", EnrichmentConfig.contact_model),
    )
    scraper = ScraperConfig(
        timeout_seconds=float(scraper_raw.get("timeout_seconds", ScraperConfig.timeout_seconds)),
        max_sub_pages=int(scraper_raw.get("max_sub_pages", ScraperConfig.max_sub_pages)),
        max_text_length=int(scraper_raw.get("max_text_length", ScraperConfig.max_text_length)),
        user_agent=scraper_raw.get("user_agent", ScraperConfig.user_agent),
    )
    if storage.backend == "postgres" and not storage.dsn:
        raise ConfigError("config validation failed: storage.dsn, DATABASE_URL or PGDSN is required for postgres")

    return AppConfig(
        storage=storage,
        enrichment=enrichment,
        scraper=scraper,
        logs_directory=data.get("logs_directory", AppConfig.logs_directory),
    )
