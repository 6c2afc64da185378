import asyncio
import json
import logging
import re
from functools import lru_cache

import httplib2
from google.auth.exceptions import GoogleAuthError
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from sheetserver.auth import get_sheets_credentials
from sheetserver.config import get_settings
from sheetserver.exceptions import (
    AuthenticationError,
    InvalidRangeError,
    PermissionDeniedError,
    RateLimitError,
    RemoteCallFailedError,
    ResponseTooLargeError,
    SheetAlreadyExistsError,
    SheetCreationFailedError,
    SheetNotFoundError,
)
from sheetserver.models.sheets import (
    BatchUpdateResult,
    CellMatrix,
    RangeUpdate,
    SheetInfo,
    SpreadsheetInfo,
    UpdateResult,
)

logger = logging.getLogger(__name__)

SPREADSHEET_INFO_FIELDS = "spreadsheetId,properties.title,sheets.properties"
VALUE_INPUT_OPTION = "USER_ENTERED"
DEFAULT_ROW_COUNT = 1000
DEFAULT_COLUMN_COUNT = 26

A1_CELL_RE = re.compile(r"[A-Z]+[0-9]+")
A1_RANGE_RE = re.compile(r"[A-Z]+[0-9]+:[A-Z]+[0-9]+")


def _handle_api_error(e: HttpError):
    message = str(e)
    status = e.resp.status
    if status == 429:
        raise RateLimitError(message, status) from e
    if status in (401, 403):
        raise PermissionDeniedError(message, status) from e
    raise RemoteCallFailedError(message, status) from e


def _sheet_from_properties(properties: dict) -> SheetInfo:
    grid = properties.get("gridProperties", {})
    return SheetInfo(
        title=properties.get("title", "Untitled Sheet"),
        sheet_id=properties.get("sheetId", 0),
        row_count=grid.get("rowCount", 0),
        column_count=grid.get("columnCount", 0),
    )


def is_valid_a1_range(range: str) -> bool:
    """True for a single cell (A1) or a rectangle (A1:B2), uppercase columns only."""
    if A1_CELL_RE.fullmatch(range):
        return True
    if ":" in range:
        return A1_RANGE_RE.fullmatch(range) is not None
    return False


def validate_a1_notation(qualified_range: str) -> None:
    """Validate the part after the sheet separator. A bare sheet title means the whole sheet."""
    if "!" not in qualified_range:
        return
    _, _, range = qualified_range.rpartition("!")
    if range and not is_valid_a1_range(range):
        raise InvalidRangeError(f"Invalid A1 notation range: {range}")


def build_qualified_range(sheet_name: str, range: str | None = None) -> str:
    """Qualify `range` with `sheet_name` unless it already names a sheet, then validate it."""
    if not range:
        return sheet_name
    qualified = range if "!" in range else f"{sheet_name}!{range}"
    validate_a1_notation(qualified)
    return qualified


def ensure_sheet_exists(info: SpreadsheetInfo, sheet_name: str) -> None:
    if not any(sheet.title == sheet_name for sheet in info.sheets):
        raise SheetNotFoundError(f'Sheet "{sheet_name}" does not exist in this spreadsheet')


class SpreadsheetClient:
    """Validated, size-bounded access to the Sheets v4 API.

    `service` is a Sheets discovery client (or anything with the same call shapes).
    It is shared by every call; metadata is fetched fresh for each operation.
    With `credentials` set, each request runs on its own authorized transport,
    since httplib2 connections must not be shared between threads.
    """

    def __init__(self, service, credentials=None, max_response_size: int | None = None):
        self.service = service
        self.credentials = credentials
        if max_response_size is None:
            max_response_size = get_settings().max_response_size
        self.max_response_size = max_response_size

    def _execute_blocking(self, request) -> dict:
        if self.credentials is None:
            return request.execute()
        return request.execute(http=AuthorizedHttp(self.credentials, http=httplib2.Http()))

    async def _execute(self, request) -> dict:
        try:
            return await asyncio.to_thread(self._execute_blocking, request)
        except HttpError as e:
            _handle_api_error(e)
        except GoogleAuthError as e:
            raise AuthenticationError(str(e)) from e
        except (httplib2.HttpLib2Error, OSError) as e:
            raise RemoteCallFailedError(str(e)) from e

    async def get_spreadsheet_info(self, spreadsheet_id: str) -> SpreadsheetInfo:
        """Fetch spreadsheet title and sheet properties (no cell data)."""
        logger.debug("Fetching spreadsheet info for %s", spreadsheet_id)
        result = await self._execute(
            self.service.spreadsheets().get(spreadsheetId=spreadsheet_id, fields=SPREADSHEET_INFO_FIELDS)
        )
        return SpreadsheetInfo(
            id=spreadsheet_id,
            title=result.get("properties", {}).get("title", "Untitled Spreadsheet"),
            sheets=[_sheet_from_properties(s.get("properties", {})) for s in result.get("sheets", [])],
        )

    async def get_sheet_values(self, spreadsheet_id: str, sheet_name: str, range: str | None = None) -> CellMatrix:
        """Read a sheet, or a range of it. An empty list means the range holds no data."""
        info = await self.get_spreadsheet_info(spreadsheet_id)
        ensure_sheet_exists(info, sheet_name)
        full_range = build_qualified_range(sheet_name, range)

        logger.debug("Reading %s from %s", full_range, spreadsheet_id)
        result = await self._execute(
            self.service.spreadsheets().values().get(spreadsheetId=spreadsheet_id, range=full_range)
        )
        values = result.get("values", [])

        size = len(json.dumps(values, separators=(",", ":"), ensure_ascii=False))
        if size > self.max_response_size:
            raise ResponseTooLargeError(size, self.max_response_size)
        return values

    async def update_cell_values(
        self, spreadsheet_id: str, sheet_name: str, range: str, values: CellMatrix
    ) -> UpdateResult:
        """Write one range. Strings are interpreted as if typed, so formulas are evaluated."""
        info = await self.get_spreadsheet_info(spreadsheet_id)
        ensure_sheet_exists(info, sheet_name)
        full_range = build_qualified_range(sheet_name, range)

        logger.debug("Writing %d rows to %s in %s", len(values), full_range, spreadsheet_id)
        result = await self._execute(
            self.service.spreadsheets().values().update(
                spreadsheetId=spreadsheet_id,
                range=full_range,
                valueInputOption=VALUE_INPUT_OPTION,
                body={"values": values},
            )
        )
        return UpdateResult(
            updated_rows=result.get("updatedRows", 0),
            updated_cells=result.get("updatedCells", 0),
        )

    async def batch_update_cell_values(self, spreadsheet_id: str, updates: list[RangeUpdate]) -> BatchUpdateResult:
        """Write several ranges with one metadata fetch and one API call.

        Every sheet and range is validated before anything is written.
        """
        info = await self.get_spreadsheet_info(spreadsheet_id)
        for sheet_name in dict.fromkeys(u.sheet_name for u in updates):
            ensure_sheet_exists(info, sheet_name)

        data = [
            {"range": build_qualified_range(u.sheet_name, u.range), "values": u.values}
            for u in updates
        ]

        logger.debug("Batch writing %d ranges to %s", len(data), spreadsheet_id)
        result = await self._execute(
            self.service.spreadsheets().values().batchUpdate(
                spreadsheetId=spreadsheet_id,
                body={"valueInputOption": VALUE_INPUT_OPTION, "data": data},
            )
        )
        return BatchUpdateResult(
            updated_rows=result.get("totalUpdatedRows", 0),
            updated_columns=result.get("totalUpdatedColumns", 0),
            updated_cells=result.get("totalUpdatedCells", 0),
        )

    async def add_sheet(
        self,
        spreadsheet_id: str,
        title: str,
        row_count: int | None = None,
        column_count: int | None = None,
    ) -> SheetInfo:
        """Add a sheet. The returned descriptor comes from the add-sheet reply itself."""
        info = await self.get_spreadsheet_info(spreadsheet_id)
        if any(sheet.title == title for sheet in info.sheets):
            raise SheetAlreadyExistsError(f'Sheet "{title}" already exists in this spreadsheet')

        request = {
            "addSheet": {
                "properties": {
                    "title": title,
                    "gridProperties": {
                        "rowCount": DEFAULT_ROW_COUNT if row_count is None else row_count,
                        "columnCount": DEFAULT_COLUMN_COUNT if column_count is None else column_count,
                    },
                }
            }
        }
        logger.debug("Adding sheet %r to %s", title, spreadsheet_id)
        result = await self._execute(
            self.service.spreadsheets().batchUpdate(spreadsheetId=spreadsheet_id, body={"requests": [request]})
        )

        replies = result.get("replies") or [{}]
        properties = (replies[0] or {}).get("addSheet", {}).get("properties")
        if not properties:
            raise SheetCreationFailedError(f'Failed to add new sheet "{title}": no sheet properties in response')
        return _sheet_from_properties(properties)


@lru_cache
def get_spreadsheet_client() -> SpreadsheetClient:
    """Process-wide client, built from credentials on first use."""
    credentials = get_sheets_credentials()
    service = build("sheets", "v4", credentials=credentials, cache_discovery=False)
    return SpreadsheetClient(service, credentials=credentials)
