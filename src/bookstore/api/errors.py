"""Exception handlers mapping bookstore and framework errors to JSON responses.

Protean's own exceptions (``ValidationError`` to 400, ``ObjectNotFoundError``
to 404 and the rest of its set) use the stock handlers from
``protean.integrations.fastapi``. Bookstore errors, request validation and
unexpected failures use the body
``{"status": "fail" | "error", "error": <type>, "message": <text>}``.
Client errors are "fail", server and upstream errors are "error".
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from bookstore.errors import BookstoreError

logger = structlog.get_logger(__name__)


def error_body(status_code: int, error: str, message: str) -> dict:
    return {
        "status": "fail" if 400 <= status_code < 500 else "error",
        "error": error,
        "message": message,
    }


async def bookstore_error_handler(request: Request, exc: BookstoreError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("request_failed", path=request.url.path, error=type(exc).__name__, reason=str(exc))
    else:
        logger.info("request_rejected", path=request.url.path, error=type(exc).__name__, reason=str(exc))
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.status_code, type(exc).__name__, str(exc)),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    parts = []
    for err in exc.errors():
        location = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    return JSONResponse(
        status_code=422,
        content=error_body(422, "RequestValidationError", "; ".join(parts) or "Invalid request"),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error", path=request.url.path, error=type(exc).__name__)
    return JSONResponse(status_code=500, content=error_body(500, "InternalError", "Something went wrong"))


def register_error_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)
    app.add_exception_handler(BookstoreError, bookstore_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
