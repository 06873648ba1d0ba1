from typing import Any, Dict, Optional
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from sqlalchemy.exc import SQLAlchemyError

from schoolportal.core.logging import logger
from schoolportal.schemas.common import ErrorResponse


class BaseAPIError(Exception):
    """Base exception class for API errors"""
    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}
        super().__init__(message)

class AuthenticationError(BaseAPIError):
    """Raised when the caller has no valid session"""
    def __init__(
        self,
        message: str = "Unauthorized",
        error_code: str = "AUTH_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code=error_code,
            details=details
        )

class InvalidCredentialsException(AuthenticationError):
    """Raised when user credentials are invalid"""
    def __init__(
        self,
        message: str = "Invalid email or password",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_code="INVALID_CREDENTIALS",
            details=details
        )

class TokenError(AuthenticationError):
    """Raised when there's a token-related error"""
    def __init__(
        self,
        message: str = "Invalid or expired token",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_code="TOKEN_ERROR",
            details=details
        )

class PermissionDenied(BaseAPIError):
    """Raised when user doesn't have required permissions"""
    def __init__(
        self,
        message: str = "Permission denied",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            error_code="PERMISSION_DENIED",
            details=details
        )

class ValidationError(BaseAPIError):
    """Raised when input validation fails"""
    def __init__(
        self,
        message: str = "Validation error",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="VALIDATION_ERROR",
            details=details
        )

class InvalidTransitionError(BaseAPIError):
    """Raised when a status change is not allowed from the current state"""
    def __init__(
        self,
        current: str,
        target: str,
        entity: str = "Resource"
    ):
        super().__init__(
            message=f"{entity} cannot move from {current} to {target}",
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="INVALID_TRANSITION",
            details={"from": current, "to": target}
        )

class NotFoundError(BaseAPIError):
    """Raised when a requested resource is not found"""
    def __init__(
        self,
        message: str = "Resource not found",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="NOT_FOUND",
            details=details
        )

class ConflictError(BaseAPIError):
    """Raised when creating a resource that already exists"""
    def __init__(
        self,
        message: str = "Resource already exists",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_409_CONFLICT,
            error_code="CONFLICT",
            details=details
        )

class DatabaseError(BaseAPIError):
    """Raised when there's a database-related error"""
    def __init__(
        self,
        message: str = "Database error occurred",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="DB_ERROR",
            details=details
        )


def get_error_message(error: Exception, include_details: bool = False) -> Dict[str, Any]:
    """
    Formats an exception into the public error body.

    Args:
        error: The exception that was raised
        include_details: Whether to include error details in response

    Returns:
        Dict with ``message`` and ``error_code`` (and ``details`` when asked)
    """
    error_response: Dict[str, Any] = {
        "message": "Internal server error",
        "error_code": "INTERNAL_ERROR",
    }

    if isinstance(error, BaseAPIError):
        error_response.update({
            "message": error.message,
            "error_code": error.error_code
        })
        if include_details and error.details:
            error_response["details"] = error.details

    elif isinstance(error, HTTPException):
        error_response.update({
            "message": str(error.detail),
            "error_code": "HTTP_ERROR"
        })

    return ErrorResponse(**error_response).model_dump(exclude_none=True)


def _request_id(request: Request) -> Optional[str]:
    return getattr(request.state, "request_id", None)


def register_exception_handlers(app: FastAPI) -> None:
    """Render every error as ``{message, error_code}``"""

    @app.exception_handler(BaseAPIError)
    async def api_error_handler(request: Request, exc: BaseAPIError):
        if exc.status_code >= 500:
            logger.error(
                f"{exc.error_code} on {request.method} {request.url.path}: {exc.message}",
                extra={"request_id": _request_id(request)}
            )
        return JSONResponse(
            status_code=exc.status_code,
            content=get_error_message(exc, include_details=True)
        )

    @app.exception_handler(HTTPException)
    async def http_error_handler(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=get_error_message(exc),
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = first.get("msg", "Validation error")
        if location:
            message = f"{location}: {message}"
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": message, "error_code": "VALIDATION_ERROR"}
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.error(
            f"Database error on {request.method} {request.url.path}",
            exc_info=exc,
            extra={"request_id": _request_id(request)}
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=get_error_message(DatabaseError())
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(
            f"Unhandled error on {request.method} {request.url.path}",
            exc_info=exc,
            extra={"request_id": _request_id(request)}
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=get_error_message(exc)
        )
