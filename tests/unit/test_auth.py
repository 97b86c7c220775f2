"""
Unit tests for credential loading and the one-time token bootstrap.

Only InstalledAppFlow.run_local_server()
is mocked: from_client_secrets_file() parses the fake client_secrets.json
for real, without any network call.
"""

import json
from unittest.mock import MagicMock, patch

import pytest
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from drivegate.sdk.auth import (
    DRIVE_SCOPE,
    CredentialProvider,
    build_client_config,
    create_token,
    refresh_credentials,
)
from drivegate.sdk.exceptions import ConfigurationError


def _write_client_secrets(path):
    path.write_text(json.dumps({
        "installed": {
            "client_id": "test_id",
            "project_id": "test-project",
            "auth_uri": "https://accounts.google.com/o/oauth2/auth",
            "token_uri": "https://oauth2.googleapis.com/token",
            "client_secret": "test-secret",
            "redirect_uris": ["http://localhost"]
        }
    }))


def _write_token_file(path):
    path.write_text(json.dumps({
        "client_id": "test_id",
        "client_secret": "test-secret",
        "refresh_token": "rt-123",
        "type": "authorized_user",
    }))


class TestCredentialProvider:

    def test_refresh_token_triple(self):
        provider = CredentialProvider(client_id="cid", client_secret="secret", refresh_token="rt")

        creds = provider.get_credentials()

        assert isinstance(creds, Credentials)
        assert creds.refresh_token == "rt"
        assert creds.client_id == "cid"
        assert creds.scopes == [DRIVE_SCOPE]

    def test_credentials_are_reused(self):
        provider = CredentialProvider(client_id="cid", client_secret="secret", refresh_token="rt")

        assert provider.get_credentials() is provider.get_credentials()

    def test_token_file(self, tmp_path):
        token_file = tmp_path / "token.json"
        _write_token_file(token_file)

        provider = CredentialProvider(token_file=str(token_file))

        assert provider.get_credentials().refresh_token == "rt-123"
        assert str(token_file) in provider.source

    def test_missing_token_file(self, tmp_path):
        provider = CredentialProvider(token_file=str(tmp_path / "absent.json"))

        with pytest.raises(ConfigurationError):
            provider.get_credentials()

    def test_nothing_configured(self):
        with pytest.raises(ConfigurationError):
            CredentialProvider(client_id="cid")

    def test_from_config(self):
        provider = CredentialProvider.from_config({"auth": {
            "client_id": "cid",
            "client_secret": "secret",
            "refresh_token": "rt",
        }})

        assert provider.refresh_token == "rt"
        assert "cid" in provider.source


class TestRefresh:

    def test_refresh_calls_google(self):
        creds = MagicMock(refresh_token="rt")

        assert refresh_credentials(creds) is True
        creds.refresh.assert_called_once()

    def test_refresh_without_refresh_token(self):
        with pytest.raises(ConfigurationError):
            refresh_credentials(MagicMock(refresh_token=None))


class TestCreateToken:

    def test_writes_token_json(self, tmp_path):
        secrets = tmp_path / "client_secrets.json"
        _write_client_secrets(secrets)
        output = tmp_path / "out" / "token.json"
        fake_creds = MagicMock()
        fake_creds.to_json.return_value = '{"refresh_token": "rt-new"}'

        with patch.object(InstalledAppFlow, "run_local_server", return_value=fake_creds):
            assert create_token(str(secrets), str(output)) is True

        assert json.loads(output.read_text()) == {"refresh_token": "rt-new"}

    def test_flow_failure_returns_false(self, tmp_path):
        secrets = tmp_path / "client_secrets.json"
        _write_client_secrets(secrets)
        output = tmp_path / "token.json"

        with patch.object(InstalledAppFlow, "run_local_server", side_effect=Exception("cancelled")):
            assert create_token(str(secrets), str(output)) is False

        assert not output.exists()

    def test_missing_client_secrets(self, tmp_path):
        assert create_token(str(tmp_path / "nope.json"), str(tmp_path / "t.json")) is False

    def test_configured_client_uses_redirect_uri_for_callback(self, tmp_path):
        client_config = build_client_config("cid", "secret", "http://localhost:8765/")
        output = tmp_path / "token.json"
        fake_creds = MagicMock()
        fake_creds.to_json.return_value = '{"refresh_token": "rt-new"}'

        with patch.object(InstalledAppFlow, "run_local_server", return_value=fake_creds) as run:
            assert create_token(client_config, str(output)) is True

        run.assert_called_once_with(host="localhost", port=8765)
        assert output.exists()


def test_build_client_config_defaults_redirect():
    client_config = build_client_config("cid", "secret")

    assert client_config["installed"]["client_id"] == "cid"
    assert client_config["installed"]["redirect_uris"] == ["http://localhost"]
