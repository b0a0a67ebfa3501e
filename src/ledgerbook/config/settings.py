"""
Configuration Management for Ledgerbook

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AuthSettings(BaseSettings):
    """Shared-secret gate configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_AUTH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    secret: str = Field(
        ...,
        min_length=1,
        description="Shared PIN that unlocks the ledger and authorizes remote calls"
    )
    session_days: int = Field(
        default=7,
        ge=1,
        le=90,
        description="How long a granted session stays valid"
    )
    wrong_secret_message: str = Field(
        default="The PIN is wrong. Please contact the owner.",
        description="Message shown when the PIN check fails"
    )


class RemoteLedgerSettings(BaseSettings):
    """Remote ledger (sync target) configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_REMOTE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    backend: str = Field(
        default="apps_script",
        pattern="^(apps_script|google_sheets|none)$",
        description="Which remote ledger implementation to use"
    )
    endpoint_url: str = Field(
        default="",
        description="Deployed Apps Script web app URL"
    )
    timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        le=120,
        description="Per-request timeout for remote calls"
    )
    retry_attempts: int = Field(
        default=3,
        ge=1,
        le=5,
        description="Attempts for requests that never reached the endpoint"
    )
    credential_field: str = Field(
        default="credential",
        min_length=1,
        description="Name of the credential parameter expected by the endpoint"
    )

    @property
    def is_configured(self) -> bool:
        """Whether a remote ledger should be used at all."""
        if self.backend == "none":
            return False
        if self.backend == "apps_script":
            return bool(self.endpoint_url)
        return True


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets storage configuration."""

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

    # Worksheet holding one entry per row
    entries_sheet_name: str = Field(
        default="Sheet1",
        description="Name of the sheet for entries"
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
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Minimum level for structured logs"
    )

    # Local client state (entry cache, session, theme)
    state_dir: str = Field(
        default=".ledgerbook",
        description="Directory holding the local state file"
    )
    state_file_name: str = Field(
        default="state.json",
        description="Name of the local state file"
    )

    # Presentation
    default_note: str = Field(
        default="No note",
        min_length=1,
        description="Note used when an entry is recorded without one"
    )
    currency_symbol: str = Field(
        default="₹",
        description="Symbol shown in front of amounts"
    )
    recent_entries_limit: int = Field(
        default=10,
        ge=1,
        le=100,
        description="How many of today's entries the home screen lists"
    )

    @property
    def state_path(self) -> Path:
        """Full path of the local state file."""
        return Path(self.state_dir) / self.state_file_name


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

    # Sub-settings are loaded lazily to allow partial configuration

    @property
    def auth(self) -> AuthSettings:
        return AuthSettings()

    @property
    def remote(self) -> RemoteLedgerSettings:
        return RemoteLedgerSettings()

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    groups = {
        "auth": lambda: settings.auth,
        "remote": lambda: settings.remote,
        "app": lambda: settings.app,
    }

    for name, load in groups.items():
        try:
            load()
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    # Sheets credentials only matter when that backend is selected
    if results["remote"] and settings.remote.backend == "google_sheets":
        try:
            _ = settings.google_sheets
            results["google_sheets"] = True
        except Exception as e:
            results["google_sheets"] = False
            results["google_sheets_error"] = str(e)

    return results
