"""
PIN Gate

A single shared secret unlocks the ledger. Passing the gate stores a
SessionState with a fixed validity window in local client state, so the
user is not asked again until it expires or they log out.

The gate hands out a SessionContext; the rest of the system only ever
sees that context, never the gate's internals.
"""

import hmac
import time
from typing import Callable, Optional

from pydantic import ValidationError

from ledgerbook.logs import get_logger
from ledgerbook.models.session import SessionContext, SessionState, Theme
from ledgerbook.services.storage.local_cache import LocalStateStore


SESSION_KEY = "authentication_key"
THEME_KEY = "theme"
DAY_MS = 24 * 60 * 60 * 1000

logger = get_logger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


def load_theme(store: LocalStateStore) -> Theme:
    """Stored theme preference, light if absent or unrecognised."""
    try:
        return Theme(store.get(THEME_KEY, Theme.LIGHT.value))
    except ValueError:
        return Theme.LIGHT


def save_theme(store: LocalStateStore, theme: Theme) -> None:
    store.set(THEME_KEY, theme.value)


class AuthGate:
    """
    Shared-secret gate with an expiring persisted session.

    Args:
        secret: The configured PIN
        store: Local client state where the session is persisted
        session_days: Validity window of a granted session
        clock: Returns "now" in epoch milliseconds (tests inject this)
    """

    def __init__(
        self,
        secret: str,
        store: LocalStateStore,
        session_days: int = 7,
        clock: Optional[Callable[[], int]] = None,
    ):
        self._secret = secret
        self._store = store
        self._session_days = session_days
        self._clock = clock or _now_ms

    def verify(self, candidate: str) -> bool:
        """Constant-time comparison against the configured secret."""
        return hmac.compare_digest(
            candidate.encode("utf-8"),
            self._secret.encode("utf-8"),
        )

    def _open_context(self) -> SessionContext:
        return SessionContext(
            credential=self._secret,
            theme=load_theme(self._store),
        )

    def login(self, candidate: str) -> Optional[SessionContext]:
        """
        Check the secret and start a session.

        Returns the new context, or None if the secret is wrong.
        """
        if not self.verify(candidate):
            logger.warning("login_rejected")
            return None

        state = SessionState(
            authenticated=True,
            expires_at=self._clock() + self._session_days * DAY_MS,
        )
        self._store.set(SESSION_KEY, state.model_dump(by_alias=True))
        logger.info("login_succeeded", expires_at=state.expires_at)
        return self._open_context()

    def _load_state(self) -> Optional[SessionState]:
        raw = self._store.get(SESSION_KEY)
        if raw is None:
            return None
        try:
            return SessionState.model_validate(raw)
        except ValidationError:
            logger.warning("session_state_corrupt")
            self._store.remove(SESSION_KEY)
            return None

    def is_authenticated(self) -> bool:
        """Whether a persisted, unexpired session exists. Expired state is cleared."""
        state = self._load_state()
        if state is None:
            return False
        if not state.is_valid(self._clock()):
            self._store.remove(SESSION_KEY)
            return False
        return True

    def restore(self) -> Optional[SessionContext]:
        """Resume a persisted session without asking for the secret again."""
        if not self.is_authenticated():
            return None
        logger.info("session_restored")
        return self._open_context()

    def logout(self, context: Optional[SessionContext] = None) -> None:
        """Forget the persisted session and tear down the context."""
        self._store.remove(SESSION_KEY)
        if context is not None:
            context.close()
        logger.info("logged_out")
