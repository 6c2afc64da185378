import pytest
from unittest.mock import AsyncMock, MagicMock

from fastapi.testclient import TestClient

from sheetserver.config import get_settings
from sheetserver.services.sheets import get_spreadsheet_client

# --- Canned API responses ---

SPREADSHEET_API_RESPONSE = {
    "spreadsheetId": "abc123",
    "properties": {"title": "Budget"},
    "sheets": [
        {"properties": {"title": "Sheet1", "sheetId": 0, "gridProperties": {"rowCount": 100, "columnCount": 20}}},
        {"properties": {"title": "Sheet2", "sheetId": 1, "gridProperties": {"rowCount": 50, "columnCount": 10}}},
    ],
}

VALUES_API_RESPONSE = {
    "range": "Sheet1!A1:B2",
    "values": [["Name", "Age"], ["Alice", "30"]],
}

UPDATE_API_RESPONSE = {
    "updatedRange": "Sheet1!A1:B2",
    "updatedRows": 2,
    "updatedColumns": 2,
    "updatedCells": 4,
}

BATCH_UPDATE_API_RESPONSE = {
    "totalUpdatedRows": 3,
    "totalUpdatedColumns": 2,
    "totalUpdatedCells": 5,
}

ADD_SHEET_API_RESPONSE = {
    "replies": [
        {"addSheet": {"properties": {"title": "Q2", "sheetId": 987654, "gridProperties": {"rowCount": 1000, "columnCount": 26}}}}
    ]
}


@pytest.fixture(autouse=True)
def clear_caches():
    get_settings.cache_clear()
    get_spreadsheet_client.cache_clear()
    yield
    get_settings.cache_clear()
    get_spreadsheet_client.cache_clear()


@pytest.fixture
def mock_sheets_service():
    """Sheets discovery client stand-in with canned responses for every call shape."""
    svc = MagicMock()
    spreadsheets = svc.spreadsheets.return_value
    spreadsheets.get.return_value.execute.return_value = SPREADSHEET_API_RESPONSE
    spreadsheets.batchUpdate.return_value.execute.return_value = ADD_SHEET_API_RESPONSE
    values = spreadsheets.values.return_value
    values.get.return_value.execute.return_value = VALUES_API_RESPONSE
    values.update.return_value.execute.return_value = UPDATE_API_RESPONSE
    values.batchUpdate.return_value.execute.return_value = BATCH_UPDATE_API_RESPONSE
    return svc


@pytest.fixture
def mock_client():
    """SpreadsheetClient stand-in for tool and router tests."""
    client = MagicMock()
    client.get_spreadsheet_info = AsyncMock()
    client.get_sheet_values = AsyncMock()
    client.update_cell_values = AsyncMock()
    client.batch_update_cell_values = AsyncMock()
    client.add_sheet = AsyncMock()
    return client


@pytest.fixture
def api_client():
    """FastAPI TestClient for router tests."""
    from sheetserver.main import api
    return TestClient(api)
