"""Configuration package."""

from ledgerbook.config.settings import (
    AppSettings,
    AuthSettings,
    GoogleSheetsSettings,
    RemoteLedgerSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "AuthSettings",
    "GoogleSheetsSettings",
    "RemoteLedgerSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
