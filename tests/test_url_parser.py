import pytest

from sheetserver.exceptions import InvalidIdentifierError
from sheetserver.url_parser import extract_spreadsheet_id


class TestExtractSpreadsheetId:
    def test_standard_url(self):
        url = "https://docs.google.com/spreadsheets/d/1234567890abcdefghijklmnopqrstuvwxyz/edit"
        assert extract_spreadsheet_id(url) == "1234567890abcdefghijklmnopqrstuvwxyz"

    def test_url_with_query_parameters(self):
        url = "https://docs.google.com/spreadsheets/d/1234567890abcdefg/edit?usp=sharing"
        assert extract_spreadsheet_id(url) == "1234567890abcdefg"

    def test_short_url_without_edit_path(self):
        assert extract_spreadsheet_id("https://docs.google.com/spreadsheets/d/1234567890abcdefg") == "1234567890abcdefg"

    def test_url_with_query_directly_after_id(self):
        assert extract_spreadsheet_id("https://docs.google.com/spreadsheets/d/abc_DEF-123?gid=0") == "abc_DEF-123"

    def test_url_with_fragment(self):
        assert extract_spreadsheet_id("https://docs.google.com/spreadsheets/d/abc123/edit#gid=42") == "abc123"

    def test_bare_id(self):
        assert extract_spreadsheet_id("1BxiMVs0XRA5nFMdKvBdBZjgmUUqptlbs74OgvE2upms") == "1BxiMVs0XRA5nFMdKvBdBZjgmUUqptlbs74OgvE2upms"

    @pytest.mark.parametrize("value", [
        "https://example.com/invalid-url",
        "https://docs.google.com/document/d/abc123/edit",
        "not an id",
        "",
    ])
    def test_invalid_raises(self, value):
        with pytest.raises(InvalidIdentifierError, match="Invalid Google Spreadsheet URL or ID"):
            extract_spreadsheet_id(value)
