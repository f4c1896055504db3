from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response schema."""

    error: str
    detail: str | None = None
    status_code: int


class AppError(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class ConfigurationError(AppError):
    """Required server configuration is missing."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


class AuthenticationError(AppError):
    """The caller could not be identified."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message, status_code=status.HTTP_401_UNAUTHORIZED)


class ForbiddenError(AppError):
    """The caller is identified but lacks the required authority."""

    def __init__(self, message: str = "You do not have permission to perform this action") -> None:
        super().__init__(message, status_code=status.HTTP_403_FORBIDDEN)


class BadRequestError(AppError):
    """The input is missing, malformed or fails validation."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST)


class InvalidTransitionError(BadRequestError):
    """The target record is not in a state that allows the action."""


class NotFoundError(AppError):
    """A required record does not exist."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=status.HTTP_404_NOT_FOUND)


class UpstreamError(AppError):
    """The remote HR platform failed or could not be reached."""

    def __init__(self, message: str, status_code: int = status.HTTP_502_BAD_GATEWAY) -> None:
        super().__init__(message, status_code=status_code)


class TokenRefreshError(UpstreamError):
    """Exchanging the refresh token for a new access token failed."""

    def __init__(self, message: str = "Failed to refresh Zoho access token") -> None:
        super().__init__(message, status_code=status.HTTP_401_UNAUTHORIZED)


class RemoteAuthError(UpstreamError):
    """Zoho rejected the access token and it could not be renewed."""

    def __init__(self, message: str = "Zoho authorization expired; reconnect the integration") -> None:
        super().__init__(message, status_code=status.HTTP_401_UNAUTHORIZED)


async def _app_exception_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=type(exc).__name__,
            detail=exc.message,
            status_code=exc.status_code,
        ).model_dump(),
    )


async def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=ErrorResponse(
            error="ValidationError",
            detail=str(exc.errors()),
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        ).model_dump(),
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers on the application."""
    app.add_exception_handler(AppError, _app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)  # type: ignore[arg-type]
