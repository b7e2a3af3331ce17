"""
Settings management.

Loads docsync settings from YAML files, with database connection
parameters falling back to environment variables.
"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from .errors import ConfigError

# Reference upload limit for the import boundary
DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024


class DatabaseSettings(BaseModel):
    """Connection parameters for the PostgreSQL document store."""

    host: str = Field(default_factory=lambda: os.getenv("DB_HOST", "localhost"))
    port: int = Field(default_factory=lambda: int(os.getenv("DB_PORT", "5432")))
    name: str = Field(default_factory=lambda: os.getenv("DB_NAME", "documents"))
    user: str = Field(default_factory=lambda: os.getenv("DB_USER", "docsync"))
    password: str | None = Field(default_factory=lambda: os.getenv("DB_PASSWORD"))
    table: str = "documents"


class SyncSettings(BaseModel):
    """
    Runtime settings for docsync.

    Attributes:
        csv_delimiter: Field delimiter for CSV parsing and writing
        literal_fields: Fields never cast to numbers on import
        default_exclude_fields: Export exclusions applied when the caller gives none
        max_upload_bytes: Largest accepted import payload
        log_level: Logger level name
        log_format: "json" or "text"
        database: Document store connection settings
    """

    csv_delimiter: str = Field(",", min_length=1, max_length=1)
    literal_fields: list[str] = Field(default_factory=list)
    default_exclude_fields: list[str] = Field(default_factory=list)
    max_upload_bytes: int = Field(DEFAULT_MAX_UPLOAD_BYTES, gt=0)
    log_level: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_format: str = Field(default_factory=lambda: os.getenv("LOG_FORMAT", "json"))
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)


class SettingsLoader:
    """
    Loads settings from a YAML configuration file.

    Expected YAML format:
    ```yaml
    docsync:
      csv_delimiter: ","
      literal_fields: [sku, zip_code]
      default_exclude_fields: [createdAt, updatedAt]
      max_upload_bytes: 10485760
      database:
        host: localhost
        port: 5432
        name: documents
    ```
    """

    SECTION = "docsync"

    def __init__(self, config_path: str | Path):
        """
        Initialize the settings loader.

        Args:
            config_path: Path to the YAML configuration file
        """
        self.config_path = Path(config_path)
        if not self.config_path.exists():
            raise FileNotFoundError(f"Settings file not found: {config_path}")

    def load(self) -> SyncSettings:
        """
        Load and validate settings.

        Returns:
            SyncSettings instance

        Raises:
            ConfigError: If YAML is invalid or the section is malformed
        """
        try:
            with open(self.config_path) as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {self.config_path}: {e}") from e

        if not isinstance(config, dict) or self.SECTION not in config:
            raise ConfigError(f"Configuration file must contain '{self.SECTION}' section")

        section: Any = config[self.SECTION] or {}
        if not isinstance(section, dict):
            raise ConfigError(f"'{self.SECTION}' section must be a mapping")

        try:
            return SyncSettings.model_validate(section)
        except ValidationError as e:
            raise ConfigError(f"Invalid settings in {self.config_path}: {e}") from e


def load_settings(config_path: str | Path | None = None) -> SyncSettings:
    """Load settings from ``config_path`` or return defaults when no path is given."""
    if config_path is None:
        return SyncSettings()
    return SettingsLoader(config_path).load()
