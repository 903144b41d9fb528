import logging

from fastapi import status
from fastapi.exceptions import RequestValidationError
from fastapi.requests import Request
from fastapi.responses import JSONResponse

from ...core.config import settings
from ...core.errors import PromptError

logger = logging.getLogger(__name__)


def error_response(status_code: int, code: str, message: str, details: dict = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": code,
                "message": message,
                "details": details or None,
            }
        },
    )


async def http_error_handler(request: Request, exc: PromptError) -> JSONResponse:
    """Convert engine exceptions to JSON error responses"""
    logger.warning(f"{exc.code} for {request.method} {request.url.path}: {exc.message}")
    return error_response(exc.status_code, exc.code, exc.message, exc.details)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning(f"Validation error for request: {request.method} {request.url.path}")
    return error_response(
        status.HTTP_400_BAD_REQUEST,
        "BAD_REQUEST",
        "Invalid request data",
        {"errors": [
            {"loc": list(error.get("loc", ())), "msg": error.get("msg")}
            for error in exc.errors()
        ]},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unhandled exceptions and return a JSON response."""
    logger.error(
        f"Unhandled exception: {str(exc)}\n"
        f"Request: {request.method} {request.url}",
        exc_info=exc,
    )
    details = None
    if settings.EXPOSE_ERROR_DETAILS:
        details = {"name": type(exc).__name__, "message": str(exc)}
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL", "Unexpected error", details)
