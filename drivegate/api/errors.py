"""Translate exceptions into plain-text HTTP responses.

Callers only see coarse messages; causes are logged server-side.
"""

import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from drivegate.sdk.exceptions import (
    DriveGateError,
    LocalFileNotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

GENERIC_FAILURE = "Internal server error."


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> PlainTextResponse:
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=exc.headers)


async def handle_validation_error(request: Request, exc: ValidationError) -> PlainTextResponse:
    return PlainTextResponse(str(exc), status_code=status.HTTP_400_BAD_REQUEST)


async def handle_local_not_found(request: Request, exc: LocalFileNotFoundError) -> PlainTextResponse:
    return PlainTextResponse("File not found.", status_code=status.HTTP_404_NOT_FOUND)


async def handle_drivegate_error(request: Request, exc: DriveGateError) -> PlainTextResponse:
    logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return PlainTextResponse(GENERIC_FAILURE, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


async def handle_broad_exceptions(request: Request, call_next):
    """Last-resort middleware: anything unhandled becomes a generic 500."""
    try:
        return await call_next(request)
    except Exception:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return PlainTextResponse(GENERIC_FAILURE, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


def _missing_input_message(request: Request) -> str:
    path = request.url.path
    if request.method == "POST" and path.endswith("/upload/image"):
        return "No image uploaded."
    if request.method == "POST" and path.endswith("/upload/file"):
        return "No file uploaded."
    if request.method == "PUT":
        return "No file provided for update."
    if request.method == "POST" and path == "/drive/folder":
        return "Folder name is required."
    return "Invalid request."


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> PlainTextResponse:
    """Malformed input (a file part without a filename, a non-JSON folder body) is a plain 400."""
    logger.warning(f"{request.method} {request.url.path} rejected: {len(exc.errors())} validation error(s)")
    return PlainTextResponse(_missing_input_message(request), status_code=status.HTTP_400_BAD_REQUEST)
