import json

import pytest
from unittest.mock import MagicMock

from google.auth.exceptions import DefaultCredentialsError

from sheetserver.auth import SHEETS_SCOPES, get_sheets_credentials
from sheetserver.exceptions import AuthenticationError


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("SERVICE_ACCOUNT_FILE", raising=False)
    monkeypatch.delenv("GOOGLE_PROJECT_ID", raising=False)
    monkeypatch.setenv("TOKEN_FILE", str(tmp_path / "tokens.json"))


class TestGetSheetsCredentials:
    def test_service_account_file(self, mocker, monkeypatch, tmp_path):
        key_file = tmp_path / "sa.json"
        key_file.write_text("{}")
        monkeypatch.setenv("SERVICE_ACCOUNT_FILE", str(key_file))
        creds = MagicMock()
        from_file = mocker.patch(
            "sheetserver.auth.service_account.Credentials.from_service_account_file", return_value=creds
        )
        assert get_sheets_credentials() is creds
        from_file.assert_called_once_with(str(key_file), scopes=SHEETS_SCOPES)

    def test_missing_service_account_file(self, monkeypatch, tmp_path):
        monkeypatch.setenv("SERVICE_ACCOUNT_FILE", str(tmp_path / "missing.json"))
        with pytest.raises(AuthenticationError, match="Service account file not found"):
            get_sheets_credentials()

    def test_valid_token_file(self, mocker, tmp_path):
        (tmp_path / "tokens.json").write_text(json.dumps({"refresh_token": "r"}))
        creds = MagicMock(valid=True)
        from_info = mocker.patch("sheetserver.auth.Credentials.from_authorized_user_info", return_value=creds)
        assert get_sheets_credentials() is creds
        from_info.assert_called_once_with({"refresh_token": "r"}, SHEETS_SCOPES)

    def test_expired_token_refreshed(self, mocker, tmp_path):
        (tmp_path / "tokens.json").write_text("{}")
        creds = MagicMock(valid=False, expired=True, refresh_token="r")
        mocker.patch("sheetserver.auth.Credentials.from_authorized_user_info", return_value=creds)
        assert get_sheets_credentials() is creds
        creds.refresh.assert_called_once()

    def test_application_default_credentials(self, mocker, monkeypatch):
        monkeypatch.setenv("GOOGLE_PROJECT_ID", "my-project")
        creds = MagicMock()
        default = mocker.patch("sheetserver.auth.google.auth.default", return_value=(creds, "my-project"))
        assert get_sheets_credentials() is creds
        default.assert_called_once_with(scopes=SHEETS_SCOPES, quota_project_id="my-project")

    def test_no_credentials(self, mocker):
        mocker.patch("sheetserver.auth.google.auth.default", side_effect=DefaultCredentialsError("none"))
        with pytest.raises(AuthenticationError, match="No Google credentials found"):
            get_sheets_credentials()
