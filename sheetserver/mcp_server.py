import logging

from fastmcp import FastMCP

from sheetserver.exceptions import MalformedInputError, SheetServerError
from sheetserver.formatting import (
    format_batch_update_result,
    format_new_sheet,
    format_sheet_values,
    format_spreadsheet_info,
    format_update_result,
)
from sheetserver.models.sheets import CellMatrix, RangeUpdate
from sheetserver.services.sheets import get_spreadsheet_client
from sheetserver.url_parser import extract_spreadsheet_id

logger = logging.getLogger(__name__)

mcp = FastMCP("Sheetserver")


def _handle_mcp_error(tool_name: str, e: Exception) -> str:
    """Render a failure as the text result agents see."""
    logger.error("Error executing %s tool: %s", tool_name, e)
    return f"Error: {e}"


def _check_values(values: CellMatrix) -> None:
    if not isinstance(values, list) or not values:
        raise MalformedInputError("Values must be a non-empty 2D array")
    if any(not isinstance(row, list) or not row for row in values):
        raise MalformedInputError("Each row in values must be a non-empty array")


def _check_updates(updates: list[RangeUpdate]) -> None:
    if not isinstance(updates, list) or not updates:
        raise MalformedInputError("Updates must be a non-empty array")
    for update in updates:
        if not isinstance(update.values, list) or not update.values:
            raise MalformedInputError(f"Values for range {update.range} must be a non-empty 2D array")
        for row in update.values:
            if not isinstance(row, list):
                raise MalformedInputError(f"Each row for range {update.range} must be an array")
            if not row:
                raise MalformedInputError(f"Each row for range {update.range} must be a non-empty array")


@mcp.tool
async def get_sheets(spreadsheet_url: str) -> str:
    """List the sheets in a Google Spreadsheet with their row/column counts and sheet IDs.
    Accepts a spreadsheet URL or a bare spreadsheet ID."""
    try:
        spreadsheet_id = extract_spreadsheet_id(spreadsheet_url)
        info = await get_spreadsheet_client().get_spreadsheet_info(spreadsheet_id)
        return format_spreadsheet_info(info)
    except SheetServerError as e:
        return _handle_mcp_error("get_sheets", e)


@mcp.tool
async def get_sheet_values(spreadsheet_url: str, sheet_name: str, range: str | None = None) -> str:
    """Get values from a specific sheet in a Google Spreadsheet.
    Optionally restrict to a cell range in A1 notation (e.g. 'A1:D5'). Use get_sheets first to find sheet names."""
    try:
        spreadsheet_id = extract_spreadsheet_id(spreadsheet_url)
        values = await get_spreadsheet_client().get_sheet_values(spreadsheet_id, sheet_name, range)
        return format_sheet_values(values, sheet_name, range)
    except SheetServerError as e:
        return _handle_mcp_error("get_sheet_values", e)


@mcp.tool
async def update_cells(spreadsheet_url: str, sheet_name: str, range: str, values: CellMatrix) -> str:
    """Update values in specific cells of a Google Spreadsheet.
    range is in A1 notation (e.g. 'A1:B2'); values is a 2D array where each inner array is a row.
    Values are interpreted as if typed by a user, so '=SUM(A1:A3)' becomes a formula."""
    try:
        spreadsheet_id = extract_spreadsheet_id(spreadsheet_url)
        _check_values(values)
        result = await get_spreadsheet_client().update_cell_values(spreadsheet_id, sheet_name, range, values)
        return format_update_result(result, sheet_name, range, values)
    except SheetServerError as e:
        return _handle_mcp_error("update_cells", e)


@mcp.tool
async def batch_update_cells(spreadsheet_url: str, updates: list[RangeUpdate]) -> str:
    """Update values in multiple cell ranges of a Google Spreadsheet in a single operation.
    Each update has sheet_name, range (A1 notation) and values (2D array). Nothing is written if any sheet or range is invalid."""
    try:
        spreadsheet_id = extract_spreadsheet_id(spreadsheet_url)
        _check_updates(updates)
        result = await get_spreadsheet_client().batch_update_cell_values(spreadsheet_id, updates)
        return format_batch_update_result(result, updates)
    except SheetServerError as e:
        return _handle_mcp_error("batch_update_cells", e)


@mcp.tool
async def add_sheet(
    spreadsheet_url: str,
    sheet_title: str,
    row_count: int | None = None,
    column_count: int | None = None,
) -> str:
    """Add a new sheet to a Google Spreadsheet. Defaults to 1000 rows and 26 columns."""
    try:
        spreadsheet_id = extract_spreadsheet_id(spreadsheet_url)
        if not sheet_title or not sheet_title.strip():
            raise MalformedInputError("Sheet title cannot be empty")
        if (row_count is not None and row_count <= 0) or (column_count is not None and column_count <= 0):
            raise MalformedInputError("Row and column counts must be positive")
        sheet = await get_spreadsheet_client().add_sheet(spreadsheet_id, sheet_title, row_count, column_count)
        return format_new_sheet(sheet)
    except SheetServerError as e:
        return _handle_mcp_error("add_sheet", e)
