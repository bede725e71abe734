# api/responses.py
import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from common.logging_setup import log_with_context
from storage.manager import StorageError

logger = logging.getLogger(__name__)


class ApiError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def ok(data: Any, count: Optional[int] = None, **extra) -> dict:
    """Success envelope: {success, data, count?, ...}."""
    body = {"success": True, "data": data}
    if count is not None:
        body["count"] = count
    body.update(extra)
    return body


def listing(data: list, **extra) -> dict:
    return ok(data, count=len(data), **extra)


def error_body(message: str) -> dict:
    return {"success": False, "error": message}


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(x) for x in err.get("loc", ()) if x not in ("query", "path"))
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request"


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def api_error(request: Request, exc: ApiError):
        level = logging.ERROR if exc.status_code >= 500 else logging.INFO
        log_with_context(logger, level, "API error", path=request.url.path,
                         status=exc.status_code, error=exc.message)
        return JSONResponse(status_code=exc.status_code, content=error_body(exc.message))

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        message = _validation_message(exc)
        log_with_context(logger, logging.INFO, "Invalid request", path=request.url.path, error=message)
        return JSONResponse(status_code=400, content=error_body(message))

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        log_with_context(logger, logging.INFO, "HTTP error", path=request.url.path, status=exc.status_code)
        return JSONResponse(status_code=exc.status_code, content=error_body(str(exc.detail)))

    @app.exception_handler(StorageError)
    async def storage_error(request: Request, exc: StorageError):
        log_with_context(logger, logging.ERROR, "Database error", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=500, content=error_body(str(exc)))

    @app.exception_handler(Exception)
    async def unhandled(request: Request, exc: Exception):
        logger.exception("Unhandled API error on %s", request.url.path)
        return JSONResponse(status_code=500, content=error_body(str(exc)))
