from typing import Any

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse


class AppError(Exception):
    """Base application error rendered as the provider-facing envelope."""

    def __init__(
        self,
        message: str,
        code: str = "ERROR",
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class BadRequestError(AppError):
    def __init__(self, message: str = "Bad request", details: dict[str, Any] | None = None):
        super().__init__(message, code="BAD_REQUEST", status_code=status.HTTP_400_BAD_REQUEST, details=details)


class InvalidSignatureError(AppError):
    def __init__(self, message: str = "Invalid Signature"):
        super().__init__(message, code="INVALID_SIGNATURE", status_code=status.HTTP_400_BAD_REQUEST)


class StoreUnavailableError(AppError):
    """Persistent store failed; nothing committed, so the provider should retry."""

    def __init__(self, message: str = "Store unavailable", details: dict[str, Any] | None = None):
        super().__init__(
            message,
            code="STORE_UNAVAILABLE",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            details=details,
        )


def error_response(request: Request, exc: AppError) -> ORJSONResponse:
    body: dict[str, Any] = {"success": False, "message": exc.message}
    if exc.details:
        body["details"] = exc.details
    return ORJSONResponse(status_code=exc.status_code, content=body)


async def app_exception_handler(request: Request, exc: AppError) -> ORJSONResponse:
    from callback_server.core.logging import get_logger
    get_logger(__name__).warning(
        "app_error",
        code=exc.code,
        status_code=exc.status_code,
        path=request.url.path,
    )
    return error_response(request, exc)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> ORJSONResponse:
    return ORJSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "success": False,
            "message": "Validation error",
            "details": {"errors": exc.errors()},
        },
    )


async def generic_exception_handler(request: Request, exc: Exception) -> ORJSONResponse:
    from callback_server.core.logging import get_logger
    get_logger(__name__).exception("unhandled_exception", exc_info=exc)
    return ORJSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "message": "Internal server error"},
    )
