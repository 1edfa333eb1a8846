"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_env_list, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .importer import DEFAULT_PROTECTED_SETTINGS, ImportConfig, get_import_config
from .logging import configure_logging
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "DEFAULT_PROTECTED_SETTINGS",
    "ConfigurationError",
    "DatabaseConfig",
    "ImportConfig",
    "MissingConfigurationError",
    "StorageConfig",
    "configure_logging",
    "get_database_config",
    "get_import_config",
    "get_storage_config",
    "optional_env_list",
    "require_env_vars",
]
