"""Configuration module for LocalHands.

Loads settings from environment-specific config files:
- APP_ENV=dev  → config_dev.yaml
- APP_ENV=test → config_test.yaml
- Default      → config.yaml

Secrets (the API token) are loaded from the .env file.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


def _get_project_root() -> Path:
    """Get the project root directory (where config.yaml lives)."""
    # Navigate from localhands/config/ up to project root
    return Path(__file__).parent.parent.parent


def _get_config_filename() -> str:
    """Get config filename based on APP_ENV environment variable."""
    app_env = os.environ.get("APP_ENV", "").lower()

    if app_env == "dev":
        return "config_dev.yaml"
    elif app_env == "test":
        return "config_test.yaml"
    else:
        return "config.yaml"


def _load_yaml_config() -> dict:
    """Load configuration from environment-specific config file."""
    config_filename = _get_config_filename()
    config_path = _get_project_root() / config_filename

    if not config_path.exists():
        raise ConfigurationError(
            f"Configuration file not found: {config_path}. "
            f"Set APP_ENV to 'dev' or 'test', or create {config_filename}."
        )

    with open(config_path, "r") as f:
        return yaml.safe_load(f) or {}


def _get_optional_env(key: str, default: Optional[str] = None) -> Optional[str]:
    """Get optional environment variable with default."""
    return os.environ.get(key, default)


def _positive_number(section: dict, key: str, default, cast=float):
    """Read a positive number from a YAML section or raise ConfigurationError."""
    raw = section.get(key, default)
    try:
        value = cast(raw)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid value for '{key}': {raw!r}") from e
    if value <= 0:
        raise ConfigurationError(f"'{key}' must be > 0, got {value}")
    return value


@dataclass(frozen=True)
class ApiConfig:
    """Remote catalog API configuration."""
    base_url: str
    timeout_seconds: float
    token: Optional[str]


@dataclass(frozen=True)
class DatabaseConfig:
    """Local catalog database configuration."""
    path: str


@dataclass(frozen=True)
class SyncConfig:
    """Sync behaviour configuration."""
    fallback_id_modulus: int
    propagation_concurrency: int
    initial_sync_on_startup: bool


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""
    level: str


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration container."""
    api: ApiConfig
    database: DatabaseConfig
    sync: SyncConfig
    logging: LoggingConfig


def load_config() -> AppConfig:
    """
    Load and validate all application configuration.

    Loads from the YAML file for non-sensitive settings and .env for the API token.
    Fails fast if configuration is missing or invalid.

    Returns:
        AppConfig: Validated application configuration.

    Raises:
        ConfigurationError: If required configuration is missing or invalid.
    """
    # Load environment variables from .env file
    load_dotenv()

    yaml_config = _load_yaml_config()

    # Build API config
    api_section = yaml_config.get("api", {})
    base_url = _get_optional_env("LOCALHANDS_API_BASE_URL") or api_section.get("base_url")
    if not base_url:
        raise ConfigurationError(
            "Remote catalog base URL is not set. "
            "Add api.base_url to the config file or set LOCALHANDS_API_BASE_URL."
        )

    api_config = ApiConfig(
        base_url=base_url,
        timeout_seconds=_positive_number(api_section, "timeout_seconds", 10.0),
        token=_get_optional_env("LOCALHANDS_API_TOKEN"),
    )

    # Build Database config
    db_section = yaml_config.get("database", {})

    database_config = DatabaseConfig(
        path=db_section.get("path", "localhands.db"),
    )

    # Build Sync config
    sync_section = yaml_config.get("sync", {})

    sync_config = SyncConfig(
        fallback_id_modulus=_positive_number(sync_section, "fallback_id_modulus", 1_000_000, int),
        propagation_concurrency=_positive_number(sync_section, "propagation_concurrency", 4, int),
        initial_sync_on_startup=bool(sync_section.get("initial_sync_on_startup", True)),
    )

    # Build Logging config
    logging_section = yaml_config.get("logging", {})

    logging_config = LoggingConfig(
        level=str(logging_section.get("level", "INFO")).upper(),
    )

    return AppConfig(
        api=api_config,
        database=database_config,
        sync=sync_config,
        logging=logging_config,
    )


# Module-level singleton for convenience
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """
    Get the application configuration singleton.

    Lazy-loads configuration on first access.
    Config file is selected based on APP_ENV environment variable.

    Returns:
        AppConfig: Application configuration.

    Raises:
        ConfigurationError: If required configuration is missing.
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def get_environment() -> str:
    """Get current environment name.

    Returns:
        'dev', 'test', or 'default' based on APP_ENV.
    """
    app_env = os.environ.get("APP_ENV", "").lower()
    return app_env if app_env in ("dev", "test") else "default"


def reset_config() -> None:
    """Reset the config singleton. Useful for testing."""
    global _config
    _config = None
