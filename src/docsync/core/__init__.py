"""
Core types, errors and settings shared by every docsync component.
"""

from .config import DatabaseSettings, SettingsLoader, SyncSettings, load_settings
from .errors import (
    ConfigError,
    DocSyncError,
    ParseError,
    RepositoryNotFoundError,
    RequestValidationError,
    StoreError,
)

__all__ = [
    "DatabaseSettings",
    "SettingsLoader",
    "SyncSettings",
    "load_settings",
    "ConfigError",
    "DocSyncError",
    "ParseError",
    "RepositoryNotFoundError",
    "RequestValidationError",
    "StoreError",
]
