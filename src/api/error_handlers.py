# This file defines the API error body and the exception handlers that produce it.
# Pricing failures never reach these handlers; the engine degrades to a fallback recommendation instead.
# What remains are malformed bodies, unknown routes, and unexpected failures.

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

LOGGER = logging.getLogger("api")

INVALID_BODY_MESSAGE = "Invalid pricing request body."
INTERNAL_ERROR_MESSAGE = "The server encountered an unexpected error."


def error_response(
    request: Request,
    *,
    status_code: int,
    error_code: str,
    message: str,
    details: Any | None = None,
) -> JSONResponse:
    body = {
        "error_code": error_code,
        "message": message,
        "details": jsonable_encoder(details),
        "request_id": str(getattr(request.state, "request_id", "unknown")),
        "timestamp": datetime.now(tz=UTC).isoformat(),
    }
    return JSONResponse(status_code=status_code, content=body)


async def _handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(
        request,
        status_code=422,
        error_code="VALIDATION_ERROR",
        message=INVALID_BODY_MESSAGE,
        details=exc.errors(),
    )


async def _handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:
    return error_response(request, status_code=exc.status_code, error_code="HTTP_ERROR", message=str(exc.detail))


async def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    LOGGER.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return error_response(
        request,
        status_code=500,
        error_code="INTERNAL_SERVER_ERROR",
        message=INTERNAL_ERROR_MESSAGE,
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, _handle_validation_error)
    app.add_exception_handler(HTTPException, _handle_http_exception)
    app.add_exception_handler(Exception, _handle_unexpected)
