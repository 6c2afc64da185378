import json

import google.auth
from google.auth.exceptions import DefaultCredentialsError, RefreshError
from google.auth.transport.requests import Request
from google.oauth2 import service_account
from google.oauth2.credentials import Credentials

from sheetserver.config import get_settings
from sheetserver.exceptions import AuthenticationError

SHEETS_SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


def _load_authorized_user(settings) -> Credentials | None:
    """Load an authorized-user token file, refreshing it if expired."""
    if not settings.token_file.exists():
        return None
    token_data = json.loads(settings.token_file.read_text())
    creds = Credentials.from_authorized_user_info(token_data, SHEETS_SCOPES)
    if creds.valid:
        return creds
    if creds.expired and creds.refresh_token:
        try:
            creds.refresh(Request())
        except RefreshError as e:
            raise AuthenticationError(f"Failed to refresh token from {settings.token_file}: {e}") from e
        return creds
    raise AuthenticationError(f"Token in {settings.token_file} is invalid and cannot be refreshed.")


def get_sheets_credentials():
    """Resolve credentials: service account file, then token file, then Application Default Credentials."""
    settings = get_settings()

    if settings.service_account_file:
        if not settings.service_account_file.exists():
            raise AuthenticationError(f"Service account file not found at {settings.service_account_file}.")
        return service_account.Credentials.from_service_account_file(
            str(settings.service_account_file), scopes=SHEETS_SCOPES
        )

    creds = _load_authorized_user(settings)
    if creds is not None:
        return creds

    try:
        creds, _ = google.auth.default(scopes=SHEETS_SCOPES, quota_project_id=settings.google_project_id)
    except DefaultCredentialsError as e:
        raise AuthenticationError(
            f"No Google credentials found: {e}. Set SERVICE_ACCOUNT_FILE, provide {settings.token_file}, "
            "or run `gcloud auth application-default login`."
        ) from e
    return creds
