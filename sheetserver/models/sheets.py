from pydantic import BaseModel, PositiveInt

# bool precedes int so True/False are not coerced to 1/0.
CellValue = bool | int | float | str | None
CellMatrix = list[list[CellValue]]


class SheetInfo(BaseModel):
    title: str
    sheet_id: int
    row_count: int = 0
    column_count: int = 0


class SpreadsheetInfo(BaseModel):
    id: str
    title: str
    sheets: list[SheetInfo]


class RangeUpdate(BaseModel):
    sheet_name: str
    range: str
    values: CellMatrix


class UpdateResult(BaseModel):
    updated_rows: int = 0
    updated_cells: int = 0


class BatchUpdateResult(BaseModel):
    updated_rows: int = 0
    updated_columns: int = 0
    updated_cells: int = 0


class ReadRangeResponse(BaseModel):
    spreadsheet_id: str
    sheet_name: str
    range: str | None = None
    values: CellMatrix


class WriteRangeRequest(BaseModel):
    sheet_name: str
    range: str
    values: CellMatrix


class BatchWriteRequest(BaseModel):
    updates: list[RangeUpdate]


class AddSheetRequest(BaseModel):
    title: str
    row_count: PositiveInt | None = None
    column_count: PositiveInt | None = None
