"""Configuration package."""

from piggybank.config.settings import (
    AppSettings,
    GoogleSheetsSettings,
    SECTIONS,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "GoogleSheetsSettings",
    "SECTIONS",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
