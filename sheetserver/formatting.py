"""Plain-text reports returned by the MCP tools."""

import json

from sheetserver.models.sheets import BatchUpdateResult, CellMatrix, RangeUpdate, SheetInfo, SpreadsheetInfo, UpdateResult

MIN_COLUMN_WIDTH = 3
MAX_COLUMN_WIDTH = 50


def column_letter(index: int) -> str:
    """0 -> A, 25 -> Z, 26 -> AA."""
    letters = ""
    index += 1
    while index > 0:
        index, remainder = divmod(index - 1, 26)
        letters = chr(ord("A") + remainder) + letters
    return letters


def _cell_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _range_suffix(cell_range: str | None) -> str:
    return f" range {cell_range}" if cell_range else ""


def format_spreadsheet_info(info: SpreadsheetInfo) -> str:
    blocks = [
        f"Sheet {i}: {sheet.title}\n"
        f"  - Rows: {sheet.row_count}\n"
        f"  - Columns: {sheet.column_count}\n"
        f"  - Sheet ID: {sheet.sheet_id}\n"
        for i, sheet in enumerate(info.sheets, start=1)
    ]
    header = f"Spreadsheet: {info.title} (ID: {info.id})\n\nTotal sheets: {len(info.sheets)}\n\n"
    return header + "\n".join(blocks)


def format_sheet_values(values: CellMatrix, sheet_name: str, cell_range: str | None = None) -> str:
    """Render values as a pipe table headed by column letters."""
    if not values:
        return f'No data found in sheet "{sheet_name}"{_range_suffix(cell_range)}.'

    col_count = max(len(row) for row in values)
    rows = [[_cell_text(row[c]) if c < len(row) else "" for c in range(col_count)] for row in values]
    widths = [
        min(MAX_COLUMN_WIDTH, max(MIN_COLUMN_WIDTH, *(len(row[c]) for row in rows)))
        for c in range(col_count)
    ]

    lines = [
        f'Data from sheet "{sheet_name}"{_range_suffix(cell_range)}',
        f"Rows: {len(values)}, Columns: {col_count}",
        "",
        "|" + "".join(f" {column_letter(c).ljust(widths[c])} |" for c in range(col_count)),
        "|" + "".join("-" * (w + 2) + "|" for w in widths),
    ]
    for row in rows:
        cells = []
        for text, width in zip(row, widths):
            if len(text) > width:
                text = text[: width - 3] + "..."
            cells.append(f" {text.ljust(width)} |")
        lines.append("|" + "".join(cells))
    return "\n".join(lines) + "\n"


def format_update_result(result: UpdateResult, sheet_name: str, range: str, values: CellMatrix) -> str:
    return (
        f"Successfully updated {result.updated_cells} cells across {result.updated_rows} rows "
        f'in sheet "{sheet_name}" at range "{range}".\n\n'
        f"Values updated: {json.dumps(values, indent=2, ensure_ascii=False)}"
    )


def format_batch_update_result(result: BatchUpdateResult, updates: list[RangeUpdate]) -> str:
    performed = "\n".join(
        f'- Sheet: "{u.sheet_name}", Range: "{u.range}", '
        f"Values: {json.dumps(u.values, separators=(',', ':'), ensure_ascii=False)}"
        for u in updates
    )
    return (
        f"Successfully updated {result.updated_cells} cells across {result.updated_rows} rows.\n\n"
        f"Updates performed:\n{performed}"
    )


def format_new_sheet(sheet: SheetInfo) -> str:
    return (
        f'Successfully added new sheet "{sheet.title}" to the spreadsheet.\n\n'
        f"Sheet details:\n"
        f"- Sheet ID: {sheet.sheet_id}\n"
        f"- Rows: {sheet.row_count}\n"
        f"- Columns: {sheet.column_count}"
    )
