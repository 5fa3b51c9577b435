"""Tenant Context Management for Multi-Tenant Isolation.

Each request gets its own ``TenantContext`` handle. The middleware binds the
tenant id from the authenticated token exactly once; services receive the
handle explicitly and pass ``require()``'d tenant ids down to repositories.
"""

import logging
import uuid
from typing import Any, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from .auth import TokenData, verify_token
from .exceptions import AuthenticationError, PermissionError, handle_api_error

logger = logging.getLogger(__name__)


class AlreadyBoundError(RuntimeError):
    """A tenant id was bound twice on the same context."""


class TenantScopeError(PermissionError):
    """A tenant-scoped operation ran without (or outside) its tenant."""

    def __init__(self, detail: str = "Tenant context not established. Access denied."):
        super().__init__(detail=detail, error_code="TENANT_SCOPE_REQUIRED")


class TenantContext:
    """Holds the active tenant for a single request."""

    __slots__ = ("_tenant_id",)

    def __init__(self) -> None:
        self._tenant_id: Optional[uuid.UUID] = None

    def bind(self, tenant_id: uuid.UUID) -> None:
        """Set the tenant for this request. Can only be set once."""
        if tenant_id is None:
            raise TypeError("tenant_id must not be None")
        if self._tenant_id is not None:
            raise AlreadyBoundError("Tenant ID has already been set for this request")
        self._tenant_id = tenant_id

    def current(self) -> Optional[uuid.UUID]:
        """Bound tenant id, or ``None`` for platform-level/unauthenticated calls."""
        return self._tenant_id

    @property
    def is_bound(self) -> bool:
        return self._tenant_id is not None

    def require(self) -> uuid.UUID:
        """Return the bound tenant id or fail the operation."""
        if self._tenant_id is None:
            raise TenantScopeError()
        return self._tenant_id

    @classmethod
    def for_tenant(cls, tenant_id: uuid.UUID) -> "TenantContext":
        context = cls()
        context.bind(tenant_id)
        return context

    def __repr__(self) -> str:
        return f"TenantContext(tenant_id={self._tenant_id!r})"


class TenantContextMiddleware(BaseHTTPMiddleware):
    """Creates a fresh tenant context per request and binds it from the JWT."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        tenant_context = TenantContext()
        request.state.tenant_context = tenant_context
        request.state.token_data = None

        auth_header = request.headers.get("Authorization")
        if auth_header and auth_header.lower().startswith("bearer "):
            token = auth_header.split(" ", 1)[1].strip()
            token_data = verify_token(token)
            if token_data is None:
                logger.warning(
                    "Invalid bearer token on %s %s", request.method, request.url.path
                )
                return await handle_api_error(
                    request, AuthenticationError("Invalid authentication credentials")
                )
            request.state.token_data = token_data
            self._bind_from_token(request, tenant_context, token_data)
        else:
            logger.debug(
                "No tenant context for request %s (unauthenticated)", request.url.path
            )

        return await call_next(request)

    @staticmethod
    def _bind_from_token(
        request: Request, tenant_context: TenantContext, token_data: TokenData
    ) -> None:
        if token_data.tenant_id is not None:
            tenant_context.bind(token_data.tenant_id)
            logger.debug(
                "Tenant context set for request %s. TenantId: %s",
                request.url.path,
                token_data.tenant_id,
            )
        elif token_data.is_super_admin():
            logger.debug(
                "Platform-level request %s by super admin %s",
                request.url.path,
                token_data.user_id,
            )
        else:
            logger.warning(
                "Authenticated user %s with roles %s has no tenant_id claim on request %s",
                token_data.user_id,
                token_data.roles,
                request.url.path,
            )


def get_tenant_context(request: Request) -> TenantContext:
    """FastAPI dependency returning the request's tenant context."""
    context = getattr(request.state, "tenant_context", None)
    if context is None:
        context = TenantContext()
        request.state.tenant_context = context
    return context


def ensure_tenant_access(entity: Any, tenant_id: uuid.UUID) -> None:
    """Fail if ``entity`` belongs to a tenant other than ``tenant_id``."""
    entity_tenant = getattr(entity, "tenant_id", None)
    if entity_tenant is not None and entity_tenant != tenant_id:
        logger.critical(
            "CROSS-TENANT ACCESS ATTEMPT: %s:%s belongs to tenant %s, requested from tenant %s",
            entity.__class__.__name__,
            getattr(entity, "id", "unknown"),
            entity_tenant,
            tenant_id,
        )
        raise TenantScopeError("Access denied: Resource belongs to different tenant")
