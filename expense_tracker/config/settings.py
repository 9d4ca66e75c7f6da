"""
Configuration Management for Expense Tracker

DESIGN DECISION: All configuration is centralized here and loaded once at
process start. The resulting objects are handed to the storage adapters and
services through their constructors; nothing below the app factory reads
settings on its own.
"""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GoogleSheetsSettings(BaseSettings):
    """Where the Google Sheets backend keeps its worksheets."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
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

    # Sheet names within the spreadsheet
    expenses_sheet_name: str = Field(
        default="Expenses",
        description="Name of the sheet for expenses"
    )
    users_sheet_name: str = Field(
        default="Users",
        description="Name of the sheet for users"
    )
    audit_sheet_name: str = Field(
        default="AuditLog",
        description="Name of the sheet for audit logs"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """A missing credentials file is a warning; it may be mounted after startup."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


class AppSettings(BaseSettings):
    """
    Expense tracker settings: storage backend, budget bands, display
    currency and the thresholds behind validation warnings.

    Read from environment variables (no prefix) and .env.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Log at DEBUG regardless of log_level"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Log level for the structured logger"
    )

    # Storage
    storage_backend: str = Field(
        default="memory",
        pattern="^(memory|google_sheets)$",
        description="Which record store to use"
    )

    # Presentation
    currency_symbol: str = Field(
        default="₹",
        max_length=5,
        description="Symbol prefixed to formatted amounts"
    )
    near_budget_threshold: Decimal = Field(
        default=Decimal("80"),
        ge=0,
        description="Percentage used above which the budget is 'near'"
    )
    over_budget_threshold: Decimal = Field(
        default=Decimal("100"),
        ge=0,
        description="Percentage used above which the budget is exceeded"
    )

    # Validation thresholds (warnings only)
    future_date_tolerance_days: int = Field(
        default=7,
        ge=0,
        description="How many days in the future an expense date can be"
    )
    max_expense_amount: Decimal = Field(
        default=Decimal("1000000"),
        gt=0,
        description="Maximum reasonable expense amount (for sanity checking)"
    )

    @model_validator(mode='after')
    def validate_thresholds(self) -> 'AppSettings':
        """Near-budget band must sit below the over-budget band."""
        if self.near_budget_threshold > self.over_budget_threshold:
            raise ValueError(
                "near_budget_threshold cannot exceed over_budget_threshold"
            )
        return self


class Settings(BaseSettings):
    """Entry point for the AppSettings and GoogleSheetsSettings groups."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sub-settings are loaded lazily so the in-memory backend
    # runs without any Google configuration

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """Process-wide Settings. get_settings.cache_clear() forces a reload."""
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Startup check: load every settings group the selected backend needs.

    Returns {group: loaded_ok}, plus "<group>_error" messages for failures.
    """
    results = {}

    settings = get_settings()

    try:
        app_settings = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)
        return results

    # Sheets configuration only matters when it is the selected backend
    if app_settings.storage_backend == "google_sheets":
        try:
            _ = settings.google_sheets
            results["google_sheets"] = True
        except Exception as e:
            results["google_sheets"] = False
            results["google_sheets_error"] = str(e)

    return results
