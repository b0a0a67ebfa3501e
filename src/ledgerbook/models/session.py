"""
Session Models

A session is opened by the PIN gate and closed at logout. Everything that
used to live in process-wide globals (the credential for remote calls, the
theme) is carried by an explicit SessionContext instead.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Theme(str, Enum):
    """Display theme preference."""
    LIGHT = "light"
    DARK = "dark"


class SessionState(BaseModel):
    """Persisted proof that the gate was passed, with an expiry."""
    model_config = ConfigDict(populate_by_name=True)

    authenticated: bool = False
    expires_at: int = Field(
        ...,
        alias="expiresAt",
        description="Expiry in epoch milliseconds"
    )

    def is_valid(self, now_ms: int) -> bool:
        return self.authenticated and now_ms <= self.expires_at


class SessionContext(BaseModel):
    """
    Per-session context handed to the ledger service and the UI.

    Lifecycle:
    - created by AuthGate.login / AuthGate.restore
    - closed by AuthGate.logout (credential wiped, active=False)
    A closed context is never reused; a new login creates a new one.
    """
    model_config = ConfigDict(validate_assignment=True)

    credential: str = Field(
        ...,
        repr=False,
        description="Shared secret used to authorize remote calls"
    )
    theme: Theme = Theme.LIGHT
    opened_at: datetime = Field(default_factory=datetime.now)
    active: bool = True

    def close(self) -> None:
        self.credential = ""
        self.active = False
