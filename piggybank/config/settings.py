"""
Configuration Management for Piggy Bank

Every setting comes from the environment or a .env file via pydantic-settings.

DESIGN DECISION: Nothing else in the package reads the environment.
The storage backend is chosen by configuration (in-memory demo or Google
Sheets), never by running a different UI.
"""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GoogleSheetsSettings(BaseSettings):
    """Remote store settings, read from GOOGLE_SHEETS_* variables."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )

    # Worksheet titles; created on first use if missing
    transactions_sheet_name: str = Field(
        default="Transactions",
        description="Name of the sheet for transactions"
    )
    goals_sheet_name: str = Field(
        default="Goals",
        description="Name of the sheet for savings goals"
    )
    users_sheet_name: str = Field(
        default="Users",
        description="Name of the sheet for accounts (email and password hash)"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


class AppSettings(BaseSettings):
    """
    Settings without a prefix: environment, storage choice and display.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Minimum level written to the local log"
    )

    # Storage
    storage_backend: Literal["memory", "google_sheets"] = Field(
        default="memory",
        description="Where transactions and goals live"
    )
    seed_demo_data: bool = Field(
        default=True,
        description="Fill the in-memory store with sample records on startup"
    )

    # Display
    currency_symbol: str = Field(
        default="$",
        max_length=3,
        description="Symbol shown in front of amounts"
    )
    quick_add_amounts: str = Field(
        default="5,10",
        description="Comma-separated goal quick-add button amounts"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def quick_add_amounts_list(self) -> list[Decimal]:
        """Get quick-add amounts as a list of Decimals."""
        return [
            Decimal(amount.strip())
            for amount in self.quick_add_amounts.split(",")
            if amount.strip()
        ]


SECTIONS = ("app", "google_sheets")


class Settings(BaseSettings):
    """
    Holds one property per settings section.

    Sections are built on access, so a missing Google Sheets setup only
    fails when something actually asks for it.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """Process-wide settings. Tests call get_settings.cache_clear()."""
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Try to load every section.

    Returns {section: loaded_ok}; a failed section also gets a
    `<section>_error` entry with the reason, for the sidebar status.
    """
    settings = get_settings()
    status: dict = {}
    for section in SECTIONS:
        try:
            getattr(settings, section)
        except Exception as e:
            status[section] = False
            status[f"{section}_error"] = str(e)
        else:
            status[section] = True
    return status
