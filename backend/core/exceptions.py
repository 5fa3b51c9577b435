"""
API errors shared by every module.

Services raise these; the handler registered by ``register_exception_handlers``
renders them as ``{"detail", "error_code", "path"}`` so clients see one error
shape whatever module failed.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class APIError(HTTPException):
    """Base API error carrying a machine readable ``error_code``."""

    status_code_default = status.HTTP_400_BAD_REQUEST
    error_code_default = "BAD_REQUEST"

    def __init__(
        self,
        detail: str,
        error_code: Optional[str] = None,
        status_code: Optional[int] = None,
        headers: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            status_code=status_code or self.status_code_default,
            detail=detail,
            headers=headers,
        )
        self.error_code = error_code or self.error_code_default


class NotFoundError(APIError):
    status_code_default = status.HTTP_404_NOT_FOUND
    error_code_default = "NOT_FOUND"


class ValidationError(APIError):
    status_code_default = status.HTTP_400_BAD_REQUEST
    error_code_default = "VALIDATION_ERROR"


class AuthenticationError(APIError):
    """Missing or invalid bearer token."""

    status_code_default = status.HTTP_401_UNAUTHORIZED
    error_code_default = "AUTH_FAILED"

    def __init__(self, detail: str = "Authentication failed", error_code: Optional[str] = None):
        super().__init__(detail, error_code, headers={"WWW-Authenticate": "Bearer"})


class PermissionError(APIError):
    status_code_default = status.HTTP_403_FORBIDDEN
    error_code_default = "PERMISSION_DENIED"


class ConflictError(APIError):
    status_code_default = status.HTTP_409_CONFLICT
    error_code_default = "CONFLICT"


async def handle_api_error(request: Request, exc: APIError) -> JSONResponse:
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("APIError at %s: %s", request.url.path, exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.detail,
            "error_code": exc.error_code,
            "path": str(request.url.path),
        },
        headers=exc.headers,
    )


def register_exception_handlers(app) -> None:
    app.add_exception_handler(APIError, handle_api_error)
