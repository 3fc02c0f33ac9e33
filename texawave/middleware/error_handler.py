"""
Exception handlers and request logging.

Every error leaves the API as {"error": <class name>, "message": ...}
plus "details" when there is structured context to return.
"""
import logging
import time
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from texawave.exceptions import AppError
from texawave.utils.logger import log_api_request, log_api_response

logger = logging.getLogger(__name__)


def _where(request: Request) -> Dict[str, str]:
    return {"path": request.url.path, "method": request.method}


def _error_response(
    status_code: int,
    error: str,
    message: Any,
    details: Optional[Any] = None,
    headers: Optional[Dict[str, str]] = None
) -> JSONResponse:
    body: Dict[str, Any] = {"error": error, "message": message}
    if details is not None:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body), headers=headers)


def add_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(f"{type(exc).__name__}: {exc.message}", extra={**_where(request), "status_code": exc.status_code})
        return _error_response(exc.status_code, type(exc).__name__, exc.message, exc.details)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Request validation failed: {exc.errors()}", extra=_where(request))
        return _error_response(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "ValidationError",
            "Request validation failed",
            exc.errors()
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        logger.warning(f"HTTP {exc.status_code}: {exc.detail}", extra=_where(request))
        return _error_response(
            exc.status_code,
            "HTTPException",
            exc.detail,
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True, extra=_where(request))
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "InternalServerError",
            "An unexpected error occurred"
        )


async def request_logging_middleware(request: Request, call_next):
    """Log every API request with its status code and duration."""
    started = time.perf_counter()
    log_api_request(logger, request.method, request.url.path)

    response = await call_next(request)

    duration_ms = (time.perf_counter() - started) * 1000
    log_api_response(logger, request.method, request.url.path, response.status_code, duration_ms)
    return response
