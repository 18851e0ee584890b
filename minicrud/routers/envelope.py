"""Response envelope ``{ok, data?, error?}`` and error rendering."""
from __future__ import annotations

from typing import Any
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from minicrud.core.errors import ServiceError, StorageError, ValidationError
from minicrud.services.action_service import Outcome
from minicrud.services.session_service import clear_session_cookie, set_session_cookie

logger = logging.getLogger("minicrud.api")


def ok(data: Any = None, status_code: int = 200) -> JSONResponse:
    return JSONResponse({"ok": True, "data": [] if data is None else data}, status_code=status_code)


def err(message: str, status_code: int = 400) -> JSONResponse:
    return JSONResponse({"ok": False, "error": message}, status_code=status_code)


def render_outcome(outcome: Outcome) -> JSONResponse:
    response = ok(outcome.data)
    if outcome.session_token:
        set_session_cookie(response, outcome.session_token)
    elif outcome.clear_session:
        clear_session_cookie(response)
    return response


def render_error(exc: ServiceError) -> JSONResponse:
    if isinstance(exc, StorageError):
        # details stay in the logs
        return err(type(exc).default_message, exc.status_code)
    return err(exc.message, exc.status_code)


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ServiceError)
    async def _service_error(request: Request, exc: ServiceError):
        return render_error(exc)

    @app.exception_handler(RequestValidationError)
    async def _request_validation(request: Request, exc: RequestValidationError):
        return render_error(ValidationError())

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        return err(str(exc.detail), exc.status_code)

    @app.exception_handler(Exception)
    async def _unexpected(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return err("Internal error", 500)
