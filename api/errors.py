"""
HTTP error boundary.

Every error response is ``{"error": "<message>"}``.  ``Failure`` values
from the store / auth layers are turned into ``HTTPException`` here, and
the handlers below shape FastAPI's own errors the same way.
"""

from __future__ import annotations

import logging
from typing import NoReturn

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from utils.results import Failure

logger = logging.getLogger(__name__)

_BODY_ERROR_TYPES = {"missing", "json_invalid", "model_attributes_type", "dict_type"}


def raise_for(failure: Failure) -> NoReturn:
    raise HTTPException(status_code=failure.status_code, detail=failure.message)


def internal_error(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=message,
    )


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if any(tuple(err.get("loc", ()))[:1] == ("path",) for err in errors):
        return "Invalid task ID."
    if exc.body == {}:
        return "Request body missing or invalid JSON format."

    fields = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        if not loc and err.get("type") in _BODY_ERROR_TYPES:
            return "Request body missing or invalid JSON format."
        if err.get("type") == "json_invalid":
            return "Request body missing or invalid JSON format."
        name = ".".join(loc)
        if name and name not in fields:
            fields.append(name)
    return "Missing or invalid field(s): " + ", ".join(fields)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        message = _describe_validation_error(exc)
        logger.debug("Rejected %s %s: %s", request.method, request.url.path, message)
        return error_response(status.HTTP_400_BAD_REQUEST, message)

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error."
        )
