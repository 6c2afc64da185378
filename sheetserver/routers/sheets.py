from fastapi import APIRouter

from sheetserver.exceptions import MalformedInputError
from sheetserver.models.sheets import (
    AddSheetRequest,
    BatchUpdateResult,
    BatchWriteRequest,
    ReadRangeResponse,
    SheetInfo,
    SpreadsheetInfo,
    UpdateResult,
    WriteRangeRequest,
)
from sheetserver.services.sheets import get_spreadsheet_client
from sheetserver.url_parser import extract_spreadsheet_id

router = APIRouter(prefix="/api/sheets", tags=["sheets"])


def _require_rows(values: list, label: str) -> None:
    if not values or any(not row for row in values):
        raise MalformedInputError(f"Values for range {label} must be a non-empty 2D array of non-empty rows")


@router.get("/spreadsheets/{spreadsheet}")
async def get_spreadsheet(spreadsheet: str) -> SpreadsheetInfo:
    spreadsheet_id = extract_spreadsheet_id(spreadsheet)
    return await get_spreadsheet_client().get_spreadsheet_info(spreadsheet_id)


@router.get("/spreadsheets/{spreadsheet}/values")
async def read_values(spreadsheet: str, sheet_name: str, range: str | None = None) -> ReadRangeResponse:
    spreadsheet_id = extract_spreadsheet_id(spreadsheet)
    values = await get_spreadsheet_client().get_sheet_values(spreadsheet_id, sheet_name, range)
    return ReadRangeResponse(spreadsheet_id=spreadsheet_id, sheet_name=sheet_name, range=range, values=values)


@router.put("/spreadsheets/{spreadsheet}/values")
async def write_values(spreadsheet: str, request: WriteRangeRequest) -> UpdateResult:
    spreadsheet_id = extract_spreadsheet_id(spreadsheet)
    _require_rows(request.values, request.range)
    return await get_spreadsheet_client().update_cell_values(
        spreadsheet_id, request.sheet_name, request.range, request.values
    )


@router.post("/spreadsheets/{spreadsheet}/values/batch")
async def batch_write_values(spreadsheet: str, request: BatchWriteRequest) -> BatchUpdateResult:
    spreadsheet_id = extract_spreadsheet_id(spreadsheet)
    if not request.updates:
        raise MalformedInputError("Updates must be a non-empty array")
    for update in request.updates:
        _require_rows(update.values, update.range)
    return await get_spreadsheet_client().batch_update_cell_values(spreadsheet_id, request.updates)


@router.post("/spreadsheets/{spreadsheet}/sheets")
async def add_sheet(spreadsheet: str, request: AddSheetRequest) -> SheetInfo:
    spreadsheet_id = extract_spreadsheet_id(spreadsheet)
    if not request.title.strip():
        raise MalformedInputError("Sheet title cannot be empty")
    return await get_spreadsheet_client().add_sheet(
        spreadsheet_id, request.title, request.row_count, request.column_count
    )
