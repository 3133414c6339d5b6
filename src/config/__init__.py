"""Configuration package."""

from src.config.settings import (
    AppConfig,
    Settings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppConfig",
    "Settings",
    "StorageSettings",
    "get_settings",
    "validate_all_settings",
]
