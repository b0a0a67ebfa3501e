"""
Main Orchestrator for Ledgerbook

This module ties together the local cache, the remote ledger and the
aggregation engine for one authenticated session, and defines the flows:
1. Write  (validate → commit locally → push to remote)
2. Delete (remove locally → push deletion to remote)
3. Refresh (fetch remote → replace local cache)
4. Read   (local cache → aggregation)

DESIGN DECISION: Offline-first.
- A local commit always completes before the remote call is issued
- A failed remote push is logged and never rolled back
- A failed refresh leaves the local cache exactly as it was
"""

from datetime import date, datetime
from typing import Callable, Optional, Union
from uuid import uuid4

from pydantic import BaseModel, ValidationError

from ledgerbook.auth import AuthGate
from ledgerbook.config import Settings, get_settings
from ledgerbook.logs import get_logger
from ledgerbook.models.entry import (
    DEFAULT_NOTE,
    ChartBucket,
    DateRange,
    Entry,
    EntryDraft,
    EntryType,
    StatsPeriod,
    Totals,
)
from ledgerbook.models.session import SessionContext
from ledgerbook.queries import (
    filter_by_date,
    filter_by_range,
    period_series,
    period_totals,
    recent_entries,
    totals,
)
from ledgerbook.services.storage import (
    AppsScriptRemoteLedger,
    EntryCacheInterface,
    GoogleSheetsClient,
    GoogleSheetsRemoteLedger,
    LocalEntryCache,
    LocalStateStore,
    RemoteLedgerInterface,
)


logger = get_logger(__name__)


class InvalidEntryError(ValueError):
    """Entry input rejected before reaching the store."""
    pass


class SessionClosedError(RuntimeError):
    """The ledger was used after its session was closed."""
    pass


class WriteOutcome(BaseModel):
    """Result of a write: the committed entry and whether the remote took it."""

    entry: Entry
    synced: bool


def new_entry_id(created_at: int) -> str:
    return f"{created_at}-{uuid4().hex[:9]}"


def _first_error(error: ValidationError) -> str:
    details = error.errors()
    if not details:
        return str(error)
    first = details[0]
    field = ".".join(str(part) for part in first.get("loc", ()))
    return f"{field}: {first.get('msg', 'invalid value')}" if field else first.get("msg", str(error))


class LedgerService:
    """
    The ledger as seen by one session.

    Reads always come from the local cache. Writes are split into a
    synchronous local commit (record_entry / discard_entry) and an
    asynchronous best-effort remote push (push_entry / push_delete);
    add_entry and delete_entry run both in order.

    The in-flight journal lives in the cache, which every session of the
    process shares: local writes committed by any session while a fetch is
    in flight are replayed on top of the fetched collection, so a refresh
    never drops them.
    """

    def __init__(
        self,
        cache: EntryCacheInterface,
        context: SessionContext,
        remote: Optional[RemoteLedgerInterface] = None,
        clock: Optional[Callable[[], datetime]] = None,
        default_note: str = DEFAULT_NOTE,
    ):
        """
        Args:
            cache: Local entry cache
            context: Session context from the gate
            remote: Remote ledger. None runs local-only.
            clock: Returns the current local datetime (tests inject this)
            default_note: Note used when none is given
        """
        self._cache = cache
        self._context = context
        self._remote = remote
        self._clock = clock or datetime.now
        self._default_note = default_note

    @property
    def context(self) -> SessionContext:
        return self._context

    @property
    def has_remote(self) -> bool:
        return self._remote is not None

    def _require_active(self) -> None:
        if not self._context.active:
            raise SessionClosedError("Session is closed; log in again")

    def today(self) -> date:
        return self._clock().date()

    # -------------------------------------------------------------------------
    # Write path
    # -------------------------------------------------------------------------

    def record_entry(
        self,
        amount: Union[float, str],
        note: Optional[str],
        entry_type: Union[EntryType, str],
    ) -> Entry:
        """
        Validate and commit a new entry to the local cache.

        Raises:
            InvalidEntryError: amount missing, non-numeric or not positive
        """
        self._require_active()
        try:
            draft = EntryDraft(amount=amount, note=note or "", type=entry_type)
        except ValidationError as e:
            raise InvalidEntryError(_first_error(e)) from e

        now = self._clock()
        created_at = int(now.timestamp() * 1000)
        entry = Entry(
            id=new_entry_id(created_at),
            amount=draft.amount,
            note=draft.note or self._default_note,
            type=draft.type,
            date=now.strftime("%Y-%m-%d"),
            time=now.strftime("%H:%M:%S"),
            created_at=created_at,
        )

        self._cache.append(entry)

        logger.info("entry_recorded", entry_id=entry.id, type=entry.type.value, date=entry.date)
        return entry

    async def push_entry(self, entry: Entry) -> bool:
        """Offer a committed entry to the remote ledger. Never rolls back."""
        self._require_active()
        if self._remote is None:
            return False
        synced = await self._remote.append(entry, self._context.credential)
        if not synced:
            logger.warning("entry_sync_failed", entry_id=entry.id)
        return synced

    async def add_entry(
        self,
        amount: Union[float, str],
        note: Optional[str],
        entry_type: Union[EntryType, str],
    ) -> WriteOutcome:
        entry = self.record_entry(amount, note, entry_type)
        synced = await self.push_entry(entry)
        return WriteOutcome(entry=entry, synced=synced)

    def discard_entry(self, entry_id: str) -> None:
        """Remove an entry from the local cache. Unknown ids are ignored."""
        self._require_active()
        self._cache.remove_by_id(entry_id)
        logger.info("entry_discarded", entry_id=entry_id)

    async def push_delete(self, entry_id: str) -> bool:
        self._require_active()
        if self._remote is None:
            return False
        synced = await self._remote.remove_by_id(entry_id, self._context.credential)
        if not synced:
            logger.warning("delete_sync_failed", entry_id=entry_id)
        return synced

    async def delete_entry(self, entry_id: str) -> bool:
        """Remove locally, then propagate. Returns whether the remote confirmed."""
        self.discard_entry(entry_id)
        return await self.push_delete(entry_id)

    # -------------------------------------------------------------------------
    # Refresh
    # -------------------------------------------------------------------------

    async def refresh(self) -> bool:
        """
        Replace the local cache with the remote collection.

        Returns False (cache untouched) when there is no remote or it is
        unavailable.
        """
        self._require_active()
        if self._remote is None:
            return False

        marker = self._cache.begin_refresh()
        fetched = None
        try:
            fetched = await self._remote.fetch_all(self._context.credential)
        finally:
            if fetched is None:
                self._cache.abort_refresh(marker)

        if fetched is None:
            logger.info("refresh_skipped", reason="remote_unavailable")
            return False

        replayed = self._cache.commit_refresh(marker, fetched)
        logger.info("refresh_completed", count=len(fetched), replayed=replayed)
        return True

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def entries(self) -> list[Entry]:
        self._require_active()
        return self._cache.load_all()

    def entries_for_date(self, day: str) -> list[Entry]:
        return filter_by_date(self.entries(), day)

    def entries_for_range(self, date_range: DateRange) -> list[Entry]:
        return filter_by_range(self.entries(), date_range)

    def today_totals(self) -> Totals:
        return totals(self.entries_for_date(self.today().isoformat()))

    def range_totals(self, date_range: DateRange) -> Totals:
        return totals(self.entries_for_range(date_range))

    def all_time_totals(self) -> Totals:
        return totals(self.entries())

    def period_totals(self, period: StatsPeriod, reference: Optional[date] = None) -> Totals:
        return period_totals(period, self.entries(), reference or self.today())

    def chart(self, period: StatsPeriod, reference: Optional[date] = None) -> list[ChartBucket]:
        return period_series(period, self.entries(), reference or self.today())

    def recent(self, limit: int = 10) -> list[Entry]:
        """Today's entries, newest first."""
        return recent_entries(self.entries(), self.today().isoformat(), limit)


def _create_remote(settings: Settings) -> Optional[RemoteLedgerInterface]:
    remote_settings = settings.remote
    if not remote_settings.is_configured:
        logger.info("remote_disabled", backend=remote_settings.backend)
        return None

    if remote_settings.backend == "google_sheets":
        return GoogleSheetsRemoteLedger(
            expected_credential=settings.auth.secret,
            client=GoogleSheetsClient(settings.google_sheets),
        )
    return AppsScriptRemoteLedger(remote_settings)


def create_app_components(
    settings: Optional[Settings] = None,
    use_remote: bool = True,
) -> tuple[AuthGate, LocalStateStore, LocalEntryCache, Optional[RemoteLedgerInterface]]:
    """
    Factory function to create all application components.

    Args:
        settings: Settings to build from. Defaults to the global settings.
        use_remote: Whether to initialize the remote ledger.
                    Set to False to run local-only.

    Returns:
        (auth_gate, state_store, entry_cache, remote_ledger)
    """
    settings = settings or get_settings()
    app_settings = settings.app
    auth_settings = settings.auth

    store = LocalStateStore(app_settings.state_path)
    cache = LocalEntryCache(store)
    gate = AuthGate(
        secret=auth_settings.secret,
        store=store,
        session_days=auth_settings.session_days,
    )

    remote = None
    if use_remote:
        try:
            remote = _create_remote(settings)
        except Exception as e:
            # Remote not configured - continue local-only
            logger.warning("remote_init_failed", error=str(e))
            remote = None

    return gate, store, cache, remote
