"""Tests for environment-driven configuration."""

import pytest

from ledgerbook.config import (
    AppSettings,
    AuthSettings,
    RemoteLedgerSettings,
    get_settings,
    validate_all_settings,
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)  # no stray .env
    for name in ("LEDGER_AUTH_SECRET", "LEDGER_REMOTE_BACKEND", "LEDGER_REMOTE_ENDPOINT_URL"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:
    """Tests for the settings groups."""

    def test_auth_from_env(self, monkeypatch):
        """Test the secret is read with its prefix."""
        monkeypatch.setenv("LEDGER_AUTH_SECRET", "4321")
        settings = AuthSettings()
        assert settings.secret == "4321"
        assert settings.session_days == 7

    def test_auth_requires_secret(self):
        """Test a missing secret is a configuration error."""
        with pytest.raises(ValueError):
            AuthSettings()

    def test_remote_defaults(self):
        """Test the remote is off until an endpoint is given."""
        settings = RemoteLedgerSettings()
        assert settings.backend == "apps_script"
        assert settings.credential_field == "credential"
        assert settings.is_configured is False

    def test_remote_backend_none(self, monkeypatch):
        """Test the none backend disables sync even with an endpoint."""
        monkeypatch.setenv("LEDGER_REMOTE_BACKEND", "none")
        monkeypatch.setenv("LEDGER_REMOTE_ENDPOINT_URL", "https://script.example.com/exec")
        assert RemoteLedgerSettings().is_configured is False

    def test_unknown_backend_rejected(self):
        """Test only known backends are accepted."""
        with pytest.raises(ValueError):
            RemoteLedgerSettings(backend="dropbox")

    def test_state_path(self):
        """Test the state file location is derived from its parts."""
        settings = AppSettings(state_dir="data", state_file_name="ledger.json")
        assert str(settings.state_path).replace("\\", "/") == "data/ledger.json"

    def test_validate_all_settings(self, monkeypatch):
        """Test the startup check reports each group."""
        results = validate_all_settings()
        assert results["auth"] is False
        assert "auth_error" in results
        assert results["remote"] is True
        assert results["app"] is True
        assert "google_sheets" not in results

        monkeypatch.setenv("LEDGER_AUTH_SECRET", "4321")
        get_settings.cache_clear()
        assert validate_all_settings()["auth"] is True
