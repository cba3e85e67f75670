"""Configuration loading for the coopreg service."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

DEFAULT_CONFIG_FILE = "coopreg.yaml"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigError(Exception):
    """Raised when configuration is invalid or missing."""


@dataclass
class IdentityConfig:
    """Connection settings for the external identity provider."""

    base_url: str = ""
    api_key: str = ""
    app_id: str = ""
    timeout: float = 10.0

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url and self.api_key and self.app_id)


@dataclass
class LoggingConfig:
    """Log output settings."""

    log_dir: str = "logs"
    level: str = "INFO"
    console: bool = True
    levels: dict[str, str] = field(default_factory=dict)

    def validate(self) -> None:
        """Raise ConfigError for an unknown level name."""
        for name in [self.level, *self.levels.values()]:
            if str(name).upper() not in LOG_LEVELS:
                raise ConfigError(f"Unknown log level: {name!r}")


@dataclass
class Settings:
    """coopreg service settings.

    Values come from an optional YAML file; environment variables win over
    the file so deployments can inject secrets without editing it.
    """

    db_path: str = "coopreg.db"
    identity: IdentityConfig = field(default_factory=IdentityConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Settings:
        """Create settings from a dictionary.

        Args:
            data: Settings mapping, usually parsed from YAML.

        Returns:
            Parsed settings object.

        Raises:
            ConfigError: If a section has the wrong shape.
        """
        identity_data = data.get("identity", {}) or {}
        logging_data = data.get("logging", {}) or {}
        if not isinstance(identity_data, dict) or not isinstance(logging_data, dict):
            raise ConfigError("'identity' and 'logging' sections must be mappings")

        levels = logging_data.get("levels", {}) or {}
        if not isinstance(levels, dict):
            raise ConfigError("'logging.levels' must map component names to levels")

        try:
            timeout = float(identity_data.get("timeout", 10.0))
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid identity timeout: {identity_data.get('timeout')!r}") from e

        identity = IdentityConfig(
            base_url=str(identity_data.get("base_url", "")),
            api_key=str(identity_data.get("api_key", "")),
            app_id=str(identity_data.get("app_id", "")),
            timeout=timeout,
        )
        log_config = LoggingConfig(
            log_dir=str(logging_data.get("log_dir", "logs")),
            level=str(logging_data.get("level", "INFO")),
            console=bool(logging_data.get("console", True)),
            levels={str(k): str(v) for k, v in levels.items()},
        )
        log_config.validate()

        return cls(
            db_path=str(data.get("db_path", "coopreg.db")),
            identity=identity,
            logging=log_config,
        )

    def apply_env(self, environ: dict[str, str] | None = None) -> Settings:
        """Override settings from environment variables.

        Args:
            environ: Environment mapping. Defaults to os.environ.

        Returns:
            self, for chaining.

        Raises:
            ConfigError: If COOPREG_LOG_LEVEL names an unknown level.
        """
        env = os.environ if environ is None else environ

        self.db_path = env.get("COOPREG_DB_PATH", self.db_path)
        self.identity.base_url = env.get("AUTH_API_URL", self.identity.base_url)
        self.identity.api_key = env.get("AUTH_API_KEY", self.identity.api_key)
        self.identity.app_id = env.get("AUTH_APP_ID", self.identity.app_id)
        self.logging.log_dir = env.get("COOPREG_LOG_DIR", self.logging.log_dir)
        self.logging.level = env.get("COOPREG_LOG_LEVEL", self.logging.level)
        self.logging.validate()
        return self


def load_settings(
    config_path: Path | str | None = None,
    environ: dict[str, str] | None = None,
) -> Settings:
    """Load settings from YAML (if present) and the environment.

    Args:
        config_path: Path to coopreg.yaml. When None, COOPREG_CONFIG or
            ./coopreg.yaml is used if it exists.
        environ: Environment mapping. Defaults to os.environ.

    Returns:
        Parsed settings object.

    Raises:
        ConfigError: If an explicit file doesn't exist or is invalid.
    """
    env = os.environ if environ is None else environ

    explicit = config_path is not None
    if config_path is None:
        config_path = env.get("COOPREG_CONFIG", DEFAULT_CONFIG_FILE)
    config_path = Path(config_path)

    if not config_path.exists():
        if explicit:
            raise ConfigError(f"Configuration file not found: {config_path}")
        return Settings().apply_env(env)

    try:
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Configuration must be a YAML mapping, got {type(data).__name__}")

    return Settings.from_dict(data).apply_env(env)
