"""
Exception handlers that render every failure in the response envelope.

    {"success": false, "message": "...", "error": {...}}
"""
import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from nexus.core.exceptions import AppError

logger = logging.getLogger(__name__)


def error_response(
    status_code: int,
    message: str,
    error: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    content: Dict[str, Any] = {"success": False, "message": message}
    if error:
        content["error"] = error
    return JSONResponse(status_code=status_code, content=content, headers=headers)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle structured application errors"""
    logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return error_response(exc.status_code, exc.message, exc.details or None)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle HTTPException raised by dependencies and routing (401, 403, 404, 405)"""
    if isinstance(exc.detail, dict):
        message = exc.detail.get("message") or exc.detail.get("error") or "Request failed"
        error = exc.detail
    else:
        message = str(exc.detail) if exc.detail else "Request failed"
        error = None
    return error_response(exc.status_code, message, error, headers=getattr(exc, "headers", None))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle FastAPI validation errors"""
    errors = []
    for err in exc.errors():
        errors.append({
            "field": ".".join(str(loc) for loc in err["loc"] if loc != "body"),
            "message": err["msg"],
            "type": err["type"],
        })

    logger.warning(f"Validation error on {request.url.path}: {errors}")

    return error_response(
        status.HTTP_400_BAD_REQUEST,
        "Validation failed",
        {"errors": errors},
    )


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected errors"""
    logger.exception(f"Unexpected error on {request.method} {request.url.path}: {type(exc).__name__}")
    # Don't expose internal details
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Server error")


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
