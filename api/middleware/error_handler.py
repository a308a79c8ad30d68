"""
Global exception handlers for the API.

Every error is rendered as ``{"success": false, "error": {code, message, details}}``.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.config import get_settings
from core.exceptions import AppException

logger = logging.getLogger(__name__)

HTTP_ERROR_CODES = {
    400: "bad_request",
    401: "authentication_failed",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    429: "rate_limited",
    501: "not_implemented",
    503: "service_unavailable",
}


def _error_response(status_code: int, error: dict) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": error,
        },
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers with the FastAPI app.

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        """Handle custom application exceptions."""
        logger.warning(
            f"AppException: {exc.error_code} - {exc.message}",
            extra={"path": request.url.path, "details": exc.details}
        )
        return _error_response(exc.status_code, exc.to_dict())

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request,
        exc: StarletteHTTPException
    ) -> JSONResponse:
        """Wrap framework HTTP errors in the structured format."""
        code = HTTP_ERROR_CODES.get(
            exc.status_code,
            "internal_error" if exc.status_code >= 500 else "http_error",
        )
        response = _error_response(
            exc.status_code,
            {"code": code, "message": str(exc.detail)},
        )
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError
    ) -> JSONResponse:
        """Handle request validation errors."""
        errors = []
        for error in exc.errors():
            loc = " -> ".join(str(x) for x in error["loc"])
            errors.append({
                "field": loc,
                "message": error["msg"],
                "type": error["type"],
            })

        logger.warning(
            f"Validation error on {request.url.path}",
            extra={"errors": errors}
        )

        return _error_response(
            422,
            {
                "code": "validation_error",
                "message": "Request validation failed",
                "details": {"errors": errors},
            },
        )

    @app.exception_handler(PydanticValidationError)
    async def pydantic_exception_handler(
        request: Request,
        exc: PydanticValidationError
    ) -> JSONResponse:
        """Handle Pydantic validation errors."""
        return _error_response(
            422,
            {
                "code": "validation_error",
                "message": "Data validation failed",
                "details": {"errors": exc.errors(include_url=False, include_context=False)},
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle all unhandled exceptions."""
        logger.exception(
            f"Unhandled exception on {request.url.path}: {exc}",
        )

        # In production, hide internal error details
        settings = get_settings()

        if settings.is_production:
            message = "An unexpected error occurred"
            details = None
        else:
            message = str(exc)
            details = {"type": type(exc).__name__}

        return _error_response(
            500,
            {
                "code": "internal_error",
                "message": message,
                "details": details,
            },
        )
