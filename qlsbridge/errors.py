import logging
from typing import Dict

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

ERROR_MESSAGES: Dict[int, str] = {
    404: "Not found",
    405: "Not allowed",
    500: "Server error",
    503: "Request timeout.",
}


class BridgeError(Exception):
    """Base class for errors surfaced to the bridge's callers."""

    status_code = 500


class DirectoryFetchError(BridgeError):
    """The upstream server directory could not be fetched or decoded."""

    status_code = 500


class DeadlineExceeded(BridgeError):
    """The request deadline elapsed before the work finished."""

    status_code = 503


def error_response(status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": status_code,
                "message": ERROR_MESSAGES.get(status_code, "Server error"),
            }
        },
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    response = error_response(exc.status_code)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def bridge_error_handler(request: Request, exc: BridgeError):
    if isinstance(exc, DeadlineExceeded):
        logger.warning("Deadline exceeded for %s", request.url.path)
    else:
        logger.error("Request to %s failed: %s", request.url.path, exc)
    return error_response(exc.status_code)


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error for {request.url.path}: {exc}", exc_info=True)
    return error_response(500)


def register_error_handlers(app: FastAPI) -> None:
    """Render every error as ``{"error": {"code": n, "message": "..."}}``."""
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(BridgeError, bridge_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
