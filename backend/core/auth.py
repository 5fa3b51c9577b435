"""
JWT verification for inbound requests.

Tokens are issued elsewhere; this module only validates them and extracts
the claims the tenant middleware needs.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional

from jose import JWTError, jwt
from pydantic import BaseModel, ValidationError

from .config import get_settings

logger = logging.getLogger(__name__)

TENANT_CLAIMS = ("tenant_id", "tenantId")
ROLE_CLAIMS = ("role", "http://schemas.microsoft.com/ws/2008/06/identity/claims/role")


class TokenData(BaseModel):
    """Token payload data."""

    user_id: Optional[str] = None
    email: Optional[str] = None
    roles: List[str] = []
    tenant_id: Optional[uuid.UUID] = None

    def is_super_admin(self) -> bool:
        return get_settings().super_admin_role in self.roles


def _first_claim(payload: Dict[str, Any], names) -> Optional[Any]:
    for name in names:
        value = payload.get(name)
        if value:
            return value
    return None


def _parse_role_claim(raw: Any) -> List[str]:
    """Role claims may carry a single role or a list of roles."""
    if raw is None:
        return []
    if isinstance(raw, (list, tuple)):
        return [str(role) for role in raw if role]
    return [str(raw)]


def _parse_tenant_claim(raw: Any) -> Optional[uuid.UUID]:
    if raw is None:
        return None
    try:
        return uuid.UUID(str(raw))
    except ValueError:
        logger.warning("Ignoring malformed tenant claim: %s", raw)
        return None


def verify_token(token: str) -> Optional[TokenData]:
    """Verify and decode a JWT token. Returns ``None`` when invalid."""
    settings = get_settings()
    try:
        payload = jwt.decode(
            token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm]
        )
    except JWTError as exc:
        logger.info("Rejected bearer token: %s", exc)
        return None

    user_id = payload.get("sub") or payload.get("user_id")
    if user_id is None:
        logger.info("Rejected bearer token without subject")
        return None

    try:
        return TokenData(
            user_id=str(user_id),
            email=payload.get("email"),
            roles=_parse_role_claim(_first_claim(payload, ROLE_CLAIMS)),
            tenant_id=_parse_tenant_claim(_first_claim(payload, TENANT_CLAIMS)),
        )
    except ValidationError as exc:
        logger.info("Rejected bearer token with malformed claims: %s", exc)
        return None
