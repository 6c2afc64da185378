"""Spreadsheet ID extraction from sharing URLs or bare IDs."""

import re

from sheetserver.exceptions import InvalidIdentifierError

# The ID segment runs until the first character outside the ID alphabet, so
# "/edit", "?usp=sharing", "#gid=0" and end-of-string all terminate it.
SPREADSHEET_URL_RE = re.compile(r"https://docs\.google\.com/spreadsheets/d/([a-zA-Z0-9_-]+)")
SPREADSHEET_ID_RE = re.compile(r"[a-zA-Z0-9_-]+")


def extract_spreadsheet_id(value: str) -> str:
    """Return the spreadsheet ID from a Google Sheets URL, or the value itself if it is already an ID.

    URLs are tried before the bare-ID rule so a URL is never taken whole.
    """
    match = SPREADSHEET_URL_RE.search(value)
    if match:
        return match.group(1)
    if SPREADSHEET_ID_RE.fullmatch(value):
        return value
    raise InvalidIdentifierError("Invalid Google Spreadsheet URL or ID")
