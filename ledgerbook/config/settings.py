"""
Configuration Management for the Ledger Book

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets record store configuration."""

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

    # One worksheet per record collection
    transactions_sheet_name: str = Field(default="Transactions")
    persons_sheet_name: str = Field(default="Persons")
    person_entries_sheet_name: str = Field(default="PersonEntries")
    commodity_sheet_name: str = Field(
        default="ToriRecords",
        description="Sheet holding weight x price trade records"
    )
    notes_sheet_name: str = Field(default="MonthlyNotes")

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


class GeminiSettings(BaseSettings):
    """Gemini LLM configuration (spending insights)."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    api_key: str = Field(
        ...,
        description="Gemini API key"
    )
    model_name: str = Field(
        default="gemini-1.5-flash",
        description="Gemini model to use"
    )
    max_tokens: int = Field(
        default=512,
        ge=100,
        le=8192,
        description="Maximum tokens in response"
    )
    temperature: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        description="Model temperature"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
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
        description="Enable debug mode"
    )

    # Branding on statements
    business_name: str = Field(
        default="RDF Expenditure",
        description="Name printed on statement headers"
    )
    business_subtitle: str = Field(
        default="Expenditure Management",
    )
    currency_label: str = Field(
        default="PKR",
        description="Label printed next to amounts (single currency)"
    )

    # Statement layout
    statement_rows_per_page: int = Field(
        default=28,
        ge=5,
        le=200,
        description="Detail rows per statement page"
    )

    # Validation thresholds
    max_reasonable_amount: float = Field(
        default=10000000.0,
        description="Amount above which a record is flagged for review"
    )
    future_date_tolerance_days: int = Field(
        default=1,
        ge=0,
        description="How many days in the future a record date can be"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Loaded lazily to allow partial configuration

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def gemini(self) -> GeminiSettings:
        return GeminiSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus
    {setting_name}_error messages for the failures.
    """
    results = {}

    settings = get_settings()

    for name in ("google_sheets", "gemini", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
