# taskboard/errors.py

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger("taskboard.errors")


def store_error(db: Session, exc: SQLAlchemyError, event: str, **context) -> HTTPException:
    """Roll back, log, and build the 500 carrying the store message verbatim."""
    db.rollback()
    message = str(getattr(exc, "orig", None) or exc)
    logger.exception(event, extra=context)
    return HTTPException(status_code=500, detail=message)


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    msg = first.get("msg", "Invalid value")
    return f"{location}: {msg}" if location else msg


def register_error_handlers(app: FastAPI) -> None:
    """Render every error as `{"error": "<message>"}`."""

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": _validation_message(exc)})
