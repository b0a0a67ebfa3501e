"""PIN gate and session package."""

from ledgerbook.auth.gate import (
    SESSION_KEY,
    THEME_KEY,
    AuthGate,
    load_theme,
    save_theme,
)

__all__ = ["SESSION_KEY", "THEME_KEY", "AuthGate", "load_theme", "save_theme"]
