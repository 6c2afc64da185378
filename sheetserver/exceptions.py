class SheetServerError(Exception):
    """Base class for every failure surfaced to tools and HTTP callers."""


class AuthenticationError(SheetServerError):
    """Raised when Google credentials are missing or invalid."""


class InvalidIdentifierError(SheetServerError):
    """Raised when a spreadsheet URL or ID cannot be parsed."""


class SheetNotFoundError(SheetServerError):
    """Raised when the requested sheet is not in the spreadsheet."""


class SheetAlreadyExistsError(SheetServerError):
    """Raised when adding a sheet whose title is already taken."""


class SheetCreationFailedError(SheetServerError):
    """Raised when an add-sheet reply carries no sheet properties."""


class InvalidRangeError(SheetServerError):
    """Raised when a range is not valid A1 notation."""


class MalformedInputError(SheetServerError):
    """Raised by tools when a value matrix has the wrong shape."""


class ResponseTooLargeError(SheetServerError):
    """Raised when a read result exceeds the configured size ceiling."""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(
            f"Response size ({size} characters) exceeds the maximum allowed size "
            f"({limit} characters). Please specify a smaller range."
        )


class RemoteCallFailedError(SheetServerError):
    """Raised when the Sheets API rejects a call. Carries the API's own message."""

    def __init__(self, message: str, status: int | None = None):
        self.status = status
        super().__init__(message)


class RateLimitError(RemoteCallFailedError):
    """Raised when the Sheets API rate limit is hit."""


class PermissionDeniedError(RemoteCallFailedError):
    """Raised when the Sheets API refuses the credentials (401/403)."""
