"""YAML configuration loading and validation."""

from .loader import AppConfig, ConfigError, EnrichmentConfig, ScraperConfig, StorageConfig, load_config

__all__ = [
    "AppConfig",
    "ConfigError",
    "EnrichmentConfig",
    "ScraperConfig",
    "StorageConfig",
    "load_config",
]
