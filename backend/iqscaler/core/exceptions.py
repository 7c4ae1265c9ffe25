"""
IQScaler - Error Taxonomy
Typed application errors and the boundary handlers that map them to HTTP responses
"""
import logging
import traceback
from enum import Enum

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from iqscaler.core.config import settings

logger = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    """Every failure the API reports belongs to exactly one kind."""
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    NOT_FOUND = "not_found"
    PAYMENT_REQUIRED = "payment_required"
    CONFLICT = "conflict"
    UPSTREAM = "upstream"
    CONFIGURATION = "configuration"


ERROR_STATUS: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.AUTHENTICATION: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.AUTHORIZATION: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.PAYMENT_REQUIRED: status.HTTP_402_PAYMENT_REQUIRED,
    ErrorKind.CONFLICT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.UPSTREAM: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.CONFIGURATION: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class AppError(Exception):
    """Base application error."""

    kind: ErrorKind = ErrorKind.UPSTREAM
    default_message: str = "Something went wrong"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return ERROR_STATUS[self.kind]


class ValidationError(AppError):
    kind = ErrorKind.VALIDATION
    default_message = "Invalid request data"


class AuthenticationError(AppError):
    kind = ErrorKind.AUTHENTICATION
    default_message = "Not authorized, no token"


class AuthorizationError(AppError):
    kind = ErrorKind.AUTHORIZATION
    default_message = "Not authorized"


class NotFoundError(AppError):
    kind = ErrorKind.NOT_FOUND
    default_message = "Not found"


class PaymentRequiredError(AppError):
    kind = ErrorKind.PAYMENT_REQUIRED
    default_message = "Payment required"


class ConflictError(AppError):
    kind = ErrorKind.CONFLICT
    default_message = "Resource already exists"


class UpstreamServiceError(AppError):
    kind = ErrorKind.UPSTREAM
    default_message = "An external service failed"


class ConfigurationError(AppError):
    kind = ErrorKind.CONFIGURATION
    default_message = "Server is not configured"


# Domain errors

class ConfigurationMissing(ConfigurationError):
    default_message = "Test configuration not set."


class InsufficientQuestions(NotFoundError):
    default_message = "Not enough questions available."


class NoAnswers(ValidationError):
    default_message = "No answers submitted."


class ResultNotFound(NotFoundError):
    default_message = "Result not found"


class NotAuthorized(AuthorizationError):
    default_message = "Not authorized"


class PaymentRequired(PaymentRequiredError):
    default_message = "Payment required to download certificate."


class VerificationFailed(ValidationError):
    default_message = "Payment verification failed."


def _error_body(message: str, exc: BaseException | None = None) -> dict:
    stack = None
    if exc is not None and not settings.is_production:
        stack = "".join(traceback.format_exception(exc))
    return {"message": message, "stack": stack}


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message, exc))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    parts = []
    for error in exc.errors():
        location = ".".join(str(p) for p in error.get("loc", ())[1:])
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    message = "; ".join(parts) or ValidationError.default_message
    return JSONResponse(
        status_code=ERROR_STATUS[ErrorKind.VALIDATION],
        content=_error_body(message),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        message = f"Not Found - {request.url.path}"
    else:
        message = str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(message),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("Internal server error", exc),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the boundary handlers that turn errors into `{message}` bodies."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
