"""
Configuration management using Pydantic models loaded from YAML.
"""

import os
from pathlib import Path
from typing import List

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator

from .domain.exceptions import ConfigurationError


class StoreConfig(BaseModel):
    """Connection settings for the hosted record store."""
    url: str = ""
    api_key: str = ""
    api_key_env: str = "SUPABASE_SERVICE_ROLE_KEY"
    timeout_seconds: float = 10.0

    @field_validator("url")
    @classmethod
    def validate_url(cls, value: str) -> str:
        """Strip trailing slashes and require an http(s) scheme."""
        value = value.strip().rstrip("/")
        if value and not value.startswith(("http://", "https://")):
            raise ValueError(f"store.url must start with http:// or https://, got {value!r}")
        return value

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        """Ensure the request timeout is positive."""
        if value <= 0:
            raise ValueError("timeout_seconds must be greater than zero")
        return value

    def resolve_api_key(self) -> str:
        """
        Return the API key, preferring the environment variable.

        Raises:
            ConfigurationError: If no key is configured anywhere
        """
        key = os.environ.get(self.api_key_env) or self.api_key
        if not key:
            raise ConfigurationError(
                f"No store API key configured. Set {self.api_key_env} "
                f"or store.api_key in the config file."
            )
        return key

    def require_url(self) -> str:
        """Return the store URL or raise if it is missing."""
        if not self.url:
            raise ConfigurationError("store.url is not configured.")
        return self.url


class AppConfig(BaseModel):
    """Application configuration."""
    store: StoreConfig = Field(default_factory=StoreConfig)
    timezone: str = "UTC"
    blocking_booking_statuses: List[str] = Field(default_factory=lambda: ["confirmed"])
    admin_role: str = "admin"
    log_level: str = "INFO"

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the timezone is a known IANA name."""
        try:
            pendulum.timezone(value)
        except Exception as exc:
            raise ValueError(f"Unknown timezone: {value!r}") from exc
        return value

    @field_validator("blocking_booking_statuses")
    @classmethod
    def validate_statuses(cls, value: List[str]) -> List[str]:
        """Ensure at least one status blocks slot changes, without duplicates."""
        # Preserve order while removing duplicates
        seen: set[str] = set()
        deduped: List[str] = []
        for status in value:
            key = status.strip().lower()
            if key and key not in seen:
                deduped.append(key)
                seen.add(key)
        if not deduped:
            raise ValueError("blocking_booking_statuses must name at least one status")
        return deduped

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate log level name."""
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value!r}")
        return level

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of slotguard/)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path


def load_config(config_path: Path | None = None) -> AppConfig:
    """
    Load the configuration, falling back to defaults when no file exists.

    An explicitly given path must exist.
    """
    if config_path is not None:
        return AppConfig.load_from_yaml(config_path)

    default_path = get_default_config_path()
    if default_path.exists():
        return AppConfig.load_from_yaml(default_path)
    return AppConfig()
