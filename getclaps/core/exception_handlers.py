"""
Global Exception Handlers
Turns the error taxonomy into consistent JSON responses.
"""

from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

from getclaps.utils.errors import (
    BaseAPIException,
    ErrorCode,
    ErrorMessages,
    log_error
)

logger = logging.getLogger(__name__)


async def base_api_exception_handler(request: Request, exc: BaseAPIException) -> JSONResponse:
    """
    Handle custom API exceptions with user-friendly responses.
    Client errors are logged as warnings, everything else as errors.
    """
    context = f"{request.method} {request.url.path}"
    if exc.status_code < 500:
        logger.warning(f"{context} rejected [{exc.status_code}]: {exc.code.value}")
    else:
        log_error(
            error=exc,
            context=context,
            additional_data={
                "status_code": exc.status_code,
                "error_code": exc.code.value
            }
        )

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """
    Handle HTTPExceptions raised by routing or handlers.
    """
    if isinstance(exc.detail, dict):
        content = exc.detail
    else:
        content = {
            "error": str(exc.detail),
            "code": _get_error_code_from_status(exc.status_code),
        }

    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None)
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Handle Pydantic validation errors with user-friendly messages.
    """
    errors = []
    for error in exc.errors():
        field_path = " -> ".join(str(loc) for loc in error["loc"])
        if error["type"] == "missing":
            user_msg = f"The field '{field_path}' is required."
        else:
            user_msg = f"The field '{field_path}' is invalid: {error['msg']}"
        errors.append({
            "field": field_path,
            "message": user_msg,
            "type": error["type"]
        })

    logger.warning(f"{request.method} {request.url.path}: {len(errors)} validation error(s)")

    return JSONResponse(
        status_code=422,
        content={
            "error": "The request contains invalid data.",
            "code": ErrorCode.VALIDATION_ERROR.value,
            "details": f"Found {len(errors)} validation error(s).",
            "validation_errors": errors
        }
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions with generic error response.
    """
    log_error(
        error=exc,
        context=f"{request.method} {request.url.path}",
        additional_data={"exception_type": type(exc).__name__}
    )

    # Don't expose internal error details to users
    return JSONResponse(
        status_code=500,
        content={
            "error": ErrorMessages.INTERNAL_ERROR,
            "code": ErrorCode.INTERNAL_ERROR.value,
        }
    )


def _get_error_code_from_status(status_code: int) -> str:
    """Get appropriate error code based on HTTP status code."""
    status_to_code = {
        400: ErrorCode.INVALID_INPUT,
        401: ErrorCode.UNAUTHORIZED,
        403: ErrorCode.FORBIDDEN,
        404: ErrorCode.NOT_FOUND,
        405: ErrorCode.INVALID_INPUT,
        422: ErrorCode.VALIDATION_ERROR,
    }
    return status_to_code.get(status_code, ErrorCode.INTERNAL_ERROR).value


def setup_exception_handlers(app):
    """
    Set up all exception handlers for the FastAPI app.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(BaseAPIException, base_api_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
