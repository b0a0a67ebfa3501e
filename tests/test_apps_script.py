"""
Tests for the Apps Script remote ledger

All HTTP traffic goes through httpx.MockTransport; nothing leaves the process.
"""

import json
from urllib.parse import parse_qs

import httpx
import pytest
from tenacity import wait_none

from conftest import make_entry
from ledgerbook.config import RemoteLedgerSettings
from ledgerbook.models import EntryType
from ledgerbook.services.storage import AppsScriptRemoteLedger
from ledgerbook.services.storage.apps_script import decode_entries


ENDPOINT = "https://script.example.com/macros/s/abc/exec"


def make_remote(handler, **overrides) -> AppsScriptRemoteLedger:
    settings = RemoteLedgerSettings(endpoint_url=ENDPOINT, retry_attempts=2, **overrides)
    return AppsScriptRemoteLedger(
        settings=settings,
        transport=httpx.MockTransport(handler),
        wait=wait_none(),
    )


def posted_data(request: httpx.Request) -> dict:
    form = parse_qs(request.content.decode("utf-8"))
    return json.loads(form["data"][0])


class TestDecodeEntries:
    """Tests for remote record decoding."""

    def test_drops_unusable_and_duplicate_records(self):
        """Test invalid records and repeated ids are discarded."""
        entries, discarded = decode_entries([
            {"id": "a", "amount": 1, "type": "income", "date": "2024-01-01"},
            {"id": "a", "amount": 2, "type": "income", "date": "2024-01-01"},
            {"amount": 3, "type": "income", "date": "2024-01-01"},
            {"id": "b", "amount": 4, "type": "expense", "date": "2024-01-02T00:00:00Z"},
        ])
        assert [e.id for e in entries] == ["a", "b"]
        assert entries[0].amount == 1
        assert discarded == 2


class TestFetchAll:
    """Tests for fetching the remote collection."""

    @pytest.mark.asyncio
    async def test_fetch_success(self):
        """Test a good response becomes entries, with credential and cache buster sent."""
        seen = {}

        def handler(request):
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json={"entries": [
                {"id": "1", "amount": "50", "note": "Salary", "type": "income",
                 "date": "2024-01-01", "time": "09:00:00", "createdAt": 1},
            ]})

        entries = await make_remote(handler).fetch_all("1234")
        assert [e.id for e in entries] == ["1"]
        assert entries[0].amount == 50.0
        assert seen["params"]["credential"] == "1234"
        assert "v" in seen["params"]

    @pytest.mark.asyncio
    async def test_custom_credential_field(self):
        """Test the credential parameter name is configurable."""
        seen = {}

        def handler(request):
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json={"entries": []})

        await make_remote(handler, credential_field="pin").fetch_all("1234")
        assert seen["params"]["pin"] == "1234"

    @pytest.mark.asyncio
    async def test_missing_entries_key_is_empty(self):
        """Test a response without entries is an empty collection."""
        remote = make_remote(lambda request: httpx.Response(200, json={}))
        assert await remote.fetch_all("1234") == []

    @pytest.mark.asyncio
    async def test_error_payload_is_unavailable(self):
        """Test a rejected credential yields None."""
        remote = make_remote(lambda request: httpx.Response(200, json={"error": "Invalid credential"}))
        assert await remote.fetch_all("wrong") is None

    @pytest.mark.asyncio
    async def test_html_body_is_unavailable(self):
        """Test a non-JSON body yields None."""
        remote = make_remote(lambda request: httpx.Response(200, text="<html>Sign in</html>"))
        assert await remote.fetch_all("1234") is None

    @pytest.mark.asyncio
    async def test_http_error_status_is_unavailable(self):
        """Test a 5xx response yields None."""
        remote = make_remote(lambda request: httpx.Response(500, json={"entries": []}))
        assert await remote.fetch_all("1234") is None

    @pytest.mark.asyncio
    async def test_entries_not_a_list_is_unavailable(self):
        """Test a malformed entries field yields None."""
        remote = make_remote(lambda request: httpx.Response(200, json={"entries": "nope"}))
        assert await remote.fetch_all("1234") is None

    @pytest.mark.asyncio
    async def test_connection_error_is_retried_then_unavailable(self):
        """Test connection failures are retried and then reported as None."""
        calls = []

        def handler(request):
            calls.append(request)
            raise httpx.ConnectError("unreachable", request=request)

        assert await make_remote(handler).fetch_all("1234") is None
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_timeout_is_not_retried(self):
        """Test read timeouts are not retried."""
        calls = []

        def handler(request):
            calls.append(request)
            raise httpx.ReadTimeout("slow", request=request)

        assert await make_remote(handler).fetch_all("1234") is None
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_unconfigured_endpoint(self):
        """Test a remote without an endpoint never sends anything."""
        remote = AppsScriptRemoteLedger(settings=RemoteLedgerSettings(endpoint_url=""))
        assert remote.is_configured is False
        assert await remote.fetch_all("1234") is None


class TestWrites:
    """Tests for append and delete."""

    @pytest.mark.asyncio
    async def test_append_posts_entry(self):
        """Test append sends the ADD_ENTRY form payload."""
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["data"] = posted_data(request)
            return httpx.Response(200, json={"success": True})

        entry = make_entry("e1", 75, EntryType.INCOME, created_at=3)
        assert await make_remote(handler).append(entry, "1234") is True
        assert seen["method"] == "POST"
        assert seen["data"]["action"] == "ADD_ENTRY"
        assert seen["data"]["credential"] == "1234"
        assert seen["data"]["entry"] == entry.to_wire()

    @pytest.mark.asyncio
    async def test_delete_posts_id(self):
        """Test remove_by_id sends the DELETE_ENTRY form payload."""
        seen = {}

        def handler(request):
            seen["data"] = posted_data(request)
            return httpx.Response(200, json={"success": True})

        assert await make_remote(handler).remove_by_id("e1", "1234") is True
        assert seen["data"] == {"credential": "1234", "action": "DELETE_ENTRY", "id": "e1"}

    @pytest.mark.asyncio
    async def test_rejected_write(self):
        """Test an error payload makes the write fail."""
        remote = make_remote(lambda request: httpx.Response(200, json={"error": "Invalid credential"}))
        assert await remote.append(make_entry("e1", 1), "wrong") is False

    @pytest.mark.asyncio
    async def test_success_must_be_true(self):
        """Test only an explicit success flag counts as acknowledged."""
        remote = make_remote(lambda request: httpx.Response(200, json={"success": "yes"}))
        assert await remote.remove_by_id("e1", "1234") is False

    @pytest.mark.asyncio
    async def test_malformed_write_response(self):
        """Test a non-JSON response makes the write fail."""
        remote = make_remote(lambda request: httpx.Response(200, text="ok"))
        assert await remote.append(make_entry("e1", 1), "1234") is False

    @pytest.mark.asyncio
    async def test_write_connection_error(self):
        """Test a transport failure makes the write fail without raising."""
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        assert await make_remote(handler).append(make_entry("e1", 1), "1234") is False
