"""API error taxonomy and the handlers that render it as JSON."""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ApiError(HTTPException):
    """
    Base exception for every error this API reports.

    Every error renders the same body shape::

        {"error": "<message>", "code": "<CODE>", "details": ..., **extensions}

    ``code`` and ``details`` are omitted when not set.
    """

    def __init__(
        self,
        status_code: int,
        error: str,
        code: Optional[str] = None,
        details: Any = None,
        extensions: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize an API error.

        Args:
            status_code: HTTP status code
            error: Human-readable message, safe to show to the caller
            code: Machine-readable error code
            details: Field-level validation messages or upstream detail
            extensions: Additional problem-specific members of the body
            headers: HTTP headers to include in response
        """
        self.status_code = status_code
        self.error = error
        self.code = code
        self.details = details
        self.extensions = extensions or {}

        self.body: Dict[str, Any] = {"error": error}
        if code:
            self.body["code"] = code
        if details is not None:
            self.body["details"] = details
        self.body.update(self.extensions)

        super().__init__(status_code=status_code, detail=self.body, headers=headers)


class ValidationError(ApiError):
    """Malformed or missing input."""

    def __init__(
        self,
        error: str = "Validation error",
        details: Any = None,
        code: str = "VALIDATION_ERROR",
    ):
        super().__init__(status_code=400, error=error, code=code, details=details)


class MissingFieldsError(ValidationError):
    """Required request fields are absent."""

    def __init__(self, fields: list[str]):
        super().__init__(
            error=f"Missing required fields: {', '.join(fields)}",
            details={"missing": fields},
            code="MISSING_FIELDS",
        )


class AuthenticationError(ApiError):
    """Missing or invalid credentials."""

    def __init__(self, error: str = "Authentication credentials are required"):
        super().__init__(
            status_code=401,
            error=error,
            code="UNAUTHENTICATED",
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthorizationError(ApiError):
    """Authenticated caller lacks a required capability."""

    def __init__(
        self,
        error: str = "Insufficient permissions",
        required_roles: Optional[list[str]] = None,
    ):
        extensions = {}
        if required_roles:
            extensions["required_roles"] = required_roles

        super().__init__(status_code=403, error=error, code="FORBIDDEN", extensions=extensions)


class SignatureError(ApiError):
    """Inbound callback whose signature is missing or does not verify."""

    def __init__(self, error: str = "Webhook signature verification failed"):
        super().__init__(status_code=400, error=error, code="INVALID_SIGNATURE")


class NotFoundError(ApiError):
    """Referenced entity is absent."""

    def __init__(
        self,
        resource_type: str = "resource",
        resource_id: Optional[str] = None,
        error: Optional[str] = None,
    ):
        if not error:
            error = f"{resource_type.replace('_', ' ').capitalize()} not found"

        extensions: Dict[str, Any] = {"resource_type": resource_type}
        if resource_id:
            extensions["resource_id"] = resource_id

        super().__init__(status_code=404, error=error, code="NOT_FOUND", extensions=extensions)


class ConflictError(ApiError):
    """The request conflicts with current state; carries the conflicting data."""

    def __init__(
        self,
        error: str = "The request conflicts with the current state of the resource",
        code: str = "CONFLICT",
        extensions: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(status_code=409, error=error, code=code, extensions=extensions)


class UpstreamError(ApiError):
    """
    A persistence or payment-processor call failed.

    The message is generic; the provider's own message travels in ``details``
    for operators.
    """

    def __init__(
        self,
        error: str = "An upstream service failed while processing the request",
        details: Any = None,
        status_code: int = 500,
        code: str = "UPSTREAM_ERROR",
    ):
        super().__init__(status_code=status_code, error=error, code=code, details=details)


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    """
    Exception handler for API errors.

    Args:
        request: FastAPI request object
        exc: API error

    Returns:
        JSONResponse: the error body
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.body,
        headers=exc.headers,
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render pydantic request validation failures as a 400 with field details."""
    details = [
        {
            "path": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": error.get("msg", ""),
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"error": "Validation error", "code": "VALIDATION_ERROR", "details": details},
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Convert unhandled exceptions to a 500 with an error id for log correlation.

    Args:
        request: FastAPI request object
        exc: Unhandled exception

    Returns:
        JSONResponse: error body
    """
    error_id = str(uuid.uuid4())

    logger.error(
        "Unhandled exception",
        extra={"error_id": error_id, "path": request.url.path, "error": str(exc)},
        exc_info=exc,
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "error_id": error_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render framework-raised HTTP errors (unknown route, wrong method) in the same body shape."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )
