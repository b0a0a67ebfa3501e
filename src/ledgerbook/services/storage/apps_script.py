"""
Apps Script Remote Ledger

The remote copy of the ledger lives in a Google Sheet fronted by a
deployed Apps Script web app. The script speaks a tiny JSON protocol:

    GET  <endpoint>?credential=<secret>       -> {"entries": [...]} | {"error": "..."}
    POST <endpoint>  data={"credential", "action": "ADD_ENTRY", "entry"}
                                              -> {"success": true}   | {"error": "..."}
    POST <endpoint>  data={"credential", "action": "DELETE_ENTRY", "id"}
                                              -> {"success": true}   | {"error": "..."}

DESIGN DECISION: Nothing in this module raises to the caller.
Transport errors, timeouts, HTML error pages and rejected credentials
all collapse to None / False and a warning in the log.

Only connection-level failures are retried: in those cases the request
never reached the script, so retrying an ADD_ENTRY cannot duplicate a row.
"""

import json
import time
from typing import Any, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from ledgerbook.config import RemoteLedgerSettings, get_settings
from ledgerbook.logs import get_logger
from ledgerbook.models.entry import Entry
from ledgerbook.services.storage.interface import RemoteLedgerInterface


ADD_ENTRY = "ADD_ENTRY"
DELETE_ENTRY = "DELETE_ENTRY"

# Request never reached the endpoint
RETRYABLE_ERRORS = (httpx.ConnectError, httpx.ConnectTimeout)

logger = get_logger(__name__)


def decode_entries(raw_entries: list[Any]) -> tuple[list[Entry], int]:
    """
    Coerce remote records into entries.

    Records that cannot become entries, and repeated ids, are dropped.
    Returns (entries, discarded_count).
    """
    entries = []
    seen = set()
    discarded = 0
    for raw in raw_entries:
        entry = Entry.from_remote(raw)
        if entry is None or entry.id in seen:
            discarded += 1
            continue
        seen.add(entry.id)
        entries.append(entry)
    return entries, discarded


class AppsScriptRemoteLedger(RemoteLedgerInterface):
    """
    HTTP client for the Apps Script endpoint.

    A fresh httpx.AsyncClient is opened per call; calls are rare
    (startup refresh, one per write) so pooling buys nothing.
    """

    def __init__(
        self,
        settings: Optional[RemoteLedgerSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        wait: Optional[wait_base] = None,
    ):
        """
        Args:
            settings: Remote ledger settings. Defaults to the global settings.
            transport: Custom httpx transport (used by tests).
            wait: Backoff between retried attempts.
        """
        self._settings = settings or get_settings().remote
        self._transport = transport
        self._wait = wait or wait_exponential(multiplier=1, min=1, max=8)

    @property
    def is_configured(self) -> bool:
        return bool(self._settings.endpoint_url)

    async def _send(self, method: str, **kwargs: Any) -> httpx.Response:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._settings.retry_attempts),
            wait=self._wait,
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            reraise=True,
        ):
            with attempt:
                async with httpx.AsyncClient(
                    timeout=self._settings.timeout_seconds,
                    follow_redirects=True,
                    transport=self._transport,
                ) as client:
                    return await client.request(
                        method, self._settings.endpoint_url, **kwargs
                    )

    @staticmethod
    def _decode(response: httpx.Response) -> Optional[dict]:
        try:
            payload = response.json()
        except ValueError:
            return None
        return payload if isinstance(payload, dict) else None

    async def fetch_all(self, credential: str) -> Optional[list[Entry]]:
        """Fetch every remote entry, or None if the remote is unavailable."""
        if not self.is_configured:
            logger.warning("remote_not_configured", operation="fetch")
            return None

        params = {
            self._settings.credential_field: credential,
            # Cache buster; script responses are otherwise cached by Google
            "v": str(int(time.time() * 1000)),
        }
        try:
            response = await self._send("GET", params=params)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("remote_fetch_failed", error=str(e) or type(e).__name__)
            return None

        payload = self._decode(response)
        if response.is_error or payload is None:
            logger.warning(
                "remote_fetch_malformed",
                status=response.status_code,
            )
            return None
        if payload.get("error"):
            logger.warning("remote_fetch_rejected", error=str(payload["error"]))
            return None

        raw_entries = payload.get("entries") or []
        if not isinstance(raw_entries, list):
            logger.warning("remote_fetch_malformed", status=response.status_code)
            return None

        entries, discarded = decode_entries(raw_entries)
        logger.info("remote_fetch_completed", count=len(entries), discarded=discarded)
        return entries

    async def _post(self, action: str, body: dict[str, Any], credential: str) -> bool:
        if not self.is_configured:
            logger.warning("remote_not_configured", operation=action)
            return False

        data = {
            self._settings.credential_field: credential,
            "action": action,
            **body,
        }
        try:
            response = await self._send("POST", data={"data": json.dumps(data)})
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("remote_post_failed", action=action, error=str(e) or type(e).__name__)
            return False

        payload = self._decode(response)
        if payload is None:
            logger.warning("remote_post_malformed", action=action, status=response.status_code)
            return False
        if payload.get("success") is True:
            return True

        logger.warning(
            "remote_post_rejected",
            action=action,
            status=response.status_code,
            error=str(payload.get("error", "")),
        )
        return False

    async def append(self, entry: Entry, credential: str) -> bool:
        ok = await self._post(ADD_ENTRY, {"entry": entry.to_wire()}, credential)
        if ok:
            logger.info("remote_append_completed", entry_id=entry.id)
        return ok

    async def remove_by_id(self, entry_id: str, credential: str) -> bool:
        ok = await self._post(DELETE_ENTRY, {"id": entry_id}, credential)
        if ok:
            logger.info("remote_delete_completed", entry_id=entry_id)
        return ok
