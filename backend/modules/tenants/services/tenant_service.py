"""
Tenant onboarding and lookup.

Tenants are platform-level records, so this service works on the plain
session rather than a tenant-scoped repository.
"""

import logging
import re
import uuid
from datetime import date
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.config import get_settings
from core.exceptions import ConflictError, NotFoundError
from modules.tenants.models.tenant_models import Tenant
from modules.tenants.schemas.tenant_schemas import (
    RESERVED_SUBDOMAINS,
    SUBDOMAIN_MIN_LENGTH,
    SUBDOMAIN_PATTERN,
    SubdomainCheckResponse,
    TenantOnboardingRequest,
    TenantResponse,
)

logger = logging.getLogger(__name__)

SUGGESTION_SUFFIXES = ("-hrms", "-hq", "{year}", "-tech", "-corp")


def tenant_url(subdomain: str) -> str:
    return f"https://{subdomain}.{get_settings().tenant_base_domain}"


class TenantService:

    def __init__(self, db: Session):
        self.db = db

    def onboard(self, data: TenantOnboardingRequest) -> TenantResponse:
        logger.info("Starting tenant onboarding for subdomain: %s", data.subdomain)

        if self._find(data.subdomain) is not None:
            raise ConflictError(
                f"Subdomain '{data.subdomain}' is already taken",
                error_code="SUBDOMAIN_TAKEN",
            )

        tenant = Tenant(
            name=data.organization_name,
            subdomain=data.subdomain,
            is_active=True,
            subscription_start=data.subscription_start_date or date.today(),
            subscription_end=None,
        )
        self.db.add(tenant)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise ConflictError(
                f"Subdomain '{data.subdomain}' is already taken",
                error_code="SUBDOMAIN_TAKEN",
            ) from exc
        self.db.refresh(tenant)

        logger.info("Created tenant: %s, Subdomain: %s", tenant.id, tenant.subdomain)
        return self.to_response(tenant)

    def check_subdomain(self, subdomain: str) -> SubdomainCheckResponse:
        normalized = subdomain.strip().lower()

        if len(normalized) < SUBDOMAIN_MIN_LENGTH:
            return SubdomainCheckResponse(
                subdomain=normalized,
                is_available=False,
                message=f"Subdomain must be at least {SUBDOMAIN_MIN_LENGTH} characters",
            )

        if not re.match(SUBDOMAIN_PATTERN, normalized):
            return SubdomainCheckResponse(
                subdomain=normalized,
                is_available=False,
                message="Subdomain must be lowercase, alphanumeric, and can contain hyphens",
            )

        if normalized not in RESERVED_SUBDOMAINS and self._find(normalized) is None:
            return SubdomainCheckResponse(
                subdomain=normalized,
                is_available=True,
                suggested_url=tenant_url(normalized),
                message="Subdomain is available",
            )

        return SubdomainCheckResponse(
            subdomain=normalized,
            is_available=False,
            suggestions=self._suggestions(normalized),
            message="Subdomain is already taken or reserved",
        )

    def get(self, tenant_id: uuid.UUID) -> TenantResponse:
        tenant = self.db.get(Tenant, tenant_id)
        if tenant is None:
            raise NotFoundError(f"Tenant with ID {tenant_id} not found")
        return self.to_response(tenant)

    def get_by_subdomain(self, subdomain: str) -> Optional[TenantResponse]:
        tenant = self._find(subdomain.strip().lower())
        return self.to_response(tenant) if tenant else None

    def deactivate(self, tenant_id: uuid.UUID) -> TenantResponse:
        tenant = self.db.get(Tenant, tenant_id)
        if tenant is None:
            raise NotFoundError(f"Tenant with ID {tenant_id} not found")
        tenant.is_active = False
        tenant.subscription_end = date.today()
        self.db.commit()
        logger.info("Deactivated tenant %s", tenant.subdomain)
        return self.to_response(tenant)

    @staticmethod
    def to_response(tenant: Tenant) -> TenantResponse:
        return TenantResponse(
            id=tenant.id,
            name=tenant.name,
            subdomain=tenant.subdomain,
            tenant_url=tenant_url(tenant.subdomain),
            is_active=tenant.is_active,
            subscription_start=tenant.subscription_start,
            subscription_end=tenant.subscription_end,
            created_at=tenant.created_at,
        )

    def _find(self, subdomain: str) -> Optional[Tenant]:
        return self.db.query(Tenant).filter(Tenant.subdomain == subdomain).first()

    def _suggestions(self, subdomain: str) -> List[str]:
        year = date.today().year
        candidates = [
            f"{subdomain}{suffix.format(year=year)}" for suffix in SUGGESTION_SUFFIXES
        ]
        taken = {
            row[0]
            for row in self.db.query(Tenant.subdomain)
            .filter(Tenant.subdomain.in_(candidates))
            .all()
        }
        return [c for c in candidates if c not in taken and len(c) <= 63]
