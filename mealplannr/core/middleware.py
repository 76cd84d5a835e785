from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
import logging
from typing import Sequence, Any

from mealplannr.schemas.result import Error, Result, ErrorCategory
from mealplannr.core.exception import CustomException

logger = logging.getLogger(__name__)


class ExceptionHandlingMiddleware(BaseHTTPMiddleware):
    """
    Last line of defence for exceptions that escape the registered handlers.
    Unexpected errors are logged and turned into a generic 500 Result.
    """

    def __init__(self, app, log_internal_errors: bool = True):
        super().__init__(app)
        self.log_internal_errors = log_internal_errors

    async def dispatch(self, request: Request, call_next):
        try:
            response = await call_next(request)
            return response
        except Exception as ex:
            return await self._handle_unhandled_exception(ex, request)

    async def _handle_unhandled_exception(
        self, ex: Exception, request: Request
    ) -> JSONResponse:
        """Handle unexpected exceptions"""
        if self.log_internal_errors:
            logger.error(
                f"Unhandled exception on {request.method} {request.url.path}",
                exc_info=ex,
                extra={
                    "path": request.url.path,
                    "method": request.method,
                    "client": request.client.host if request.client else None,
                },
            )

        # Don't expose internal error details in production
        error = Error(
            code="InternalError",
            message="An unexpected error occurred. Please try again later.",
            status_code=500,
            category=ErrorCategory.INTERNAL,
        )
        return create_error_response(error)


async def handle_custom_exception(request: Request, ex: CustomException) -> JSONResponse:
    """Handle custom application exceptions"""
    if ex.status_code >= 500:
        logger.error("%s on %s %s: %s", ex.code, request.method, request.url.path, ex.detail)
    error = Error(
        code=ex.code,
        message=ex.detail,
        status_code=ex.status_code,
        category=ex.category,
    )
    return create_error_response(error, headers=ex.headers)


async def handle_validation_error(request: Request, ex: RequestValidationError) -> JSONResponse:
    """Handle request body/query validation errors"""
    error = Error(
        code="InvalidInput",
        message=format_validation_error(ex.errors()),
        status_code=400,
        category=ErrorCategory.VALIDATION,
    )
    return create_error_response(error)


async def handle_http_exception(request: Request, ex: StarletteHTTPException) -> JSONResponse:
    """Handle framework HTTP exceptions (404 routes, 405 methods, ...)"""
    error = Error(
        message=ex.detail if isinstance(ex.detail, str) else str(ex.detail),
        status_code=ex.status_code,
        category=infer_category_from_status(ex.status_code),
    )
    return create_error_response(error, headers=getattr(ex, "headers", None))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CustomException, handle_custom_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)


def create_error_response(error: Error, headers: dict | None = None) -> JSONResponse:
    """Create standardized JSON error response"""
    return JSONResponse(
        status_code=error.status_code,
        content=Result.failure(error).model_dump(mode="json"),
        headers=headers,
    )


def format_validation_error(errors: Sequence[Any]) -> str:
    """Format validation errors into human-readable message"""
    messages = []
    for error in errors:
        loc = " -> ".join(str(loc) for loc in error.get("loc", []))
        msg = error.get("msg", "Unknown error")
        error_type = error.get("type", "unknown")

        messages.append(f"Error in {loc}: {msg} (type: {error_type})")

    return "; ".join(messages) if messages else "Validation failed"


def infer_category_from_status(status_code: int) -> ErrorCategory:
    """Infer error category from HTTP status code"""
    status_category_map = {
        401: ErrorCategory.AUTHENTICATION,
        403: ErrorCategory.AUTHORIZATION,
        404: ErrorCategory.NOT_FOUND,
        409: ErrorCategory.RESOURCE_CONFLICT,
        422: ErrorCategory.VALIDATION,
    }
    if status_code in status_category_map:
        return status_category_map[status_code]
    elif 400 <= status_code < 500:
        return ErrorCategory.BAD_REQUEST
    elif status_code >= 500:
        return ErrorCategory.INTERNAL
    else:
        return ErrorCategory.CUSTOM
