import logging
import sys

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.routing import Mount

from sheetserver.config import get_settings
from sheetserver.exceptions import (
    AuthenticationError,
    InvalidIdentifierError,
    InvalidRangeError,
    MalformedInputError,
    PermissionDeniedError,
    RateLimitError,
    RemoteCallFailedError,
    ResponseTooLargeError,
    SheetAlreadyExistsError,
    SheetCreationFailedError,
    SheetNotFoundError,
    SheetServerError,
)
from sheetserver.mcp_server import mcp
from sheetserver.models.common import ErrorResponse
from sheetserver.routers.sheets import router as sheets_router

logger = logging.getLogger(__name__)

# Most specific classes first; the first isinstance match wins.
ERROR_STATUS = [
    (InvalidIdentifierError, 400, "invalid_identifier"),
    (InvalidRangeError, 400, "invalid_range"),
    (MalformedInputError, 400, "malformed_input"),
    (AuthenticationError, 401, "auth_error"),
    (SheetNotFoundError, 404, "sheet_not_found"),
    (SheetAlreadyExistsError, 409, "sheet_already_exists"),
    (ResponseTooLargeError, 413, "response_too_large"),
    (PermissionDeniedError, 403, "permission_denied"),
    (RateLimitError, 429, "rate_limit"),
    (SheetCreationFailedError, 502, "sheet_creation_failed"),
    (RemoteCallFailedError, 502, "remote_call_failed"),
]


def configure_logging(level: str) -> None:
    # stdout carries the MCP stdio transport.
    logging.basicConfig(
        level=level.upper(),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# --- Localhost-only middleware ---

class LocalhostOnlyMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        client_host = request.client.host if request.client else None
        if client_host not in ("127.0.0.1", "::1", "localhost"):
            return JSONResponse(
                status_code=403,
                content={"error_code": "forbidden", "message": "Localhost access only"},
            )
        return await call_next(request)


# --- FastAPI app ---

api = FastAPI(title="Sheetserver", version="0.1.0")
api.include_router(sheets_router)


@api.exception_handler(SheetServerError)
async def sheet_server_error_handler(request: Request, exc: SheetServerError):
    status_code, error_code = 500, "internal_error"
    for error_cls, status, code in ERROR_STATUS:
        if isinstance(exc, error_cls):
            status_code, error_code = status, code
            break
    body = ErrorResponse(error_code=error_code, message=str(exc))
    return JSONResponse(status_code=status_code, content=body.model_dump())


# --- Starlette root app ---

mcp_app = mcp.http_app(path="/", stateless_http=True)

app = Starlette(
    middleware=[Middleware(LocalhostOnlyMiddleware)],
    routes=[
        Mount("/mcp", app=mcp_app),
        Mount("/", app=api),
    ],
    lifespan=mcp_app.lifespan,
)


def run():
    settings = get_settings()
    configure_logging(settings.log_level)

    if settings.transport == "stdio":
        logger.info("Starting MCP spreadsheet server on stdio")
        mcp.run()
        return

    logger.info("Starting HTTP server on %s:%s", settings.host, settings.port)
    uvicorn.run(
        "sheetserver.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
