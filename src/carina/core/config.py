"""Configuration management for Carina."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from carina.core.exceptions import ConfigurationError


class HttpConfig(BaseModel):
    """HTTP transport configuration."""

    timeout_seconds: float = 30.0


class PollingConfig(BaseModel):
    """Cluster polling configuration.

    A timeout of None waits until the cluster settles, however long that takes.
    """

    interval_seconds: float = 10.0
    timeout_seconds: float | None = 3600.0


class CacheConfig(BaseModel):
    """Credential cache configuration."""

    enabled: bool = True
    path: str = "~/.carina/cache.json"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "console"
    output: str = "stderr"


class CarinaConfig(BaseModel):
    """Main Carina configuration."""

    home: str = "~/.carina"
    http: HttpConfig = Field(default_factory=HttpConfig)
    polling: PollingConfig = Field(default_factory=PollingConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_file(cls, path: str | Path) -> "CarinaConfig":
        """Load configuration from YAML file.

        Args:
            path: Path to configuration file

        Returns:
            CarinaConfig instance

        Raises:
            ConfigurationError: If file cannot be loaded or parsed
        """
        config_path = Path(path).expanduser()

        if not config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with config_path.open() as f:
                data = yaml.safe_load(f)
        except Exception as e:
            raise ConfigurationError(f"Failed to load configuration: {e}") from e

        try:
            return cls(**(data or {}))
        except Exception as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    @property
    def home_path(self) -> Path:
        """Expanded Carina home directory."""
        return Path(self.home).expanduser()

    @property
    def cache_path(self) -> Path:
        """Expanded credential cache file path."""
        return Path(self.cache.path).expanduser()

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary.

        Returns:
            Dictionary representation
        """
        return self.model_dump()
