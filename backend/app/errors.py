"""Translate failures into the JSON error responses returned by the API."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

LOGGER = logging.getLogger(__name__)

VALIDATION_ERROR_DETAIL = "Validation Error"
SERVER_ERROR_DETAIL = "Internal Server Error"


def _validation_messages(exc: RequestValidationError) -> list[str]:
    messages = []
    for error in exc.errors():
        message = str(error.get("msg") or VALIDATION_ERROR_DETAIL)
        if message not in messages:
            messages.append(message)
    return messages or [VALIDATION_ERROR_DETAIL]


def _integrity_messages(exc: IntegrityError) -> list[str]:
    original = getattr(exc, "orig", None)
    text = str(original) if original is not None else str(exc)
    return [line.strip() for line in text.splitlines() if line.strip()]


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = _validation_messages(exc)
    LOGGER.info(
        "Rejected %s %s: %s", request.method, request.url.path, "; ".join(messages)
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": messages[0], "errors": messages},
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    LOGGER.warning("Database rejected %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": VALIDATION_ERROR_DETAIL, "errors": _integrity_messages(exc)},
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    LOGGER.exception(
        "Database failure handling %s %s", request.method, request.url.path, exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": SERVER_ERROR_DETAIL},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    LOGGER.exception(
        "Unexpected failure handling %s %s", request.method, request.url.path, exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": SERVER_ERROR_DETAIL},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
