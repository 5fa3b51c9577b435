"""
Tests for tenant onboarding and subdomain checks.
"""

from datetime import date

import pytest
from pydantic import ValidationError

from core.exceptions import ConflictError, NotFoundError
from modules.tenants.schemas.tenant_schemas import TenantOnboardingRequest
from modules.tenants.services.tenant_service import TenantService


@pytest.fixture
def tenant_service(db_session):
    return TenantService(db_session)


@pytest.fixture
def acme(tenant_service):
    return tenant_service.onboard(TenantOnboardingRequest(
        organization_name="Acme Corp", subdomain="acme",
        subscription_start_date=date(2024, 1, 1),
    ))


class TestOnboarding:

    def test_onboard_tenant(self, acme):
        assert acme.subdomain == "acme"
        assert acme.is_active is True
        assert acme.subscription_end is None
        assert acme.tenant_url == "https://acme.hrms.example.com"

    def test_subdomain_lowercased(self, tenant_service):
        tenant = tenant_service.onboard(TenantOnboardingRequest(
            organization_name="Globex", subdomain="  GloBex ",
        ))

        assert tenant.subdomain == "globex"
        assert tenant.subscription_start == date.today()

    def test_subdomain_taken(self, tenant_service, acme):
        with pytest.raises(ConflictError):
            tenant_service.onboard(TenantOnboardingRequest(
                organization_name="Acme Again", subdomain="ACME",
            ))

    @pytest.mark.parametrize("subdomain", ["www", "admin", "-acme", "acme-", "ac_me", "a"])
    def test_invalid_or_reserved_subdomain(self, subdomain):
        with pytest.raises(ValidationError):
            TenantOnboardingRequest(organization_name="Acme", subdomain=subdomain)


class TestLookup:

    def test_check_available(self, tenant_service):
        result = tenant_service.check_subdomain("Initech")

        assert result.is_available is True
        assert result.subdomain == "initech"
        assert result.suggested_url == "https://initech.hrms.example.com"
        assert result.suggestions == []

    def test_check_taken_suggests_alternatives(self, tenant_service, acme):
        tenant_service.onboard(TenantOnboardingRequest(
            organization_name="Acme HQ", subdomain="acme-hq",
        ))

        result = tenant_service.check_subdomain("acme")

        assert result.is_available is False
        assert result.suggestions == [
            "acme-hrms", f"acme{date.today().year}", "acme-tech", "acme-corp",
        ]

    def test_check_reserved(self, tenant_service):
        result = tenant_service.check_subdomain("api")

        assert result.is_available is False
        assert "api-hrms" in result.suggestions

    def test_check_malformed(self, tenant_service):
        result = tenant_service.check_subdomain("bad_name")

        assert result.is_available is False
        assert result.suggestions == []

    def test_check_too_short(self, tenant_service):
        result = tenant_service.check_subdomain("a")

        assert result.is_available is False
        assert result.suggested_url is None
        with pytest.raises(ValidationError):
            TenantOnboardingRequest(organization_name="Acme", subdomain="a")

    def test_get_by_subdomain(self, tenant_service, acme):
        assert tenant_service.get_by_subdomain("ACME").id == acme.id
        assert tenant_service.get_by_subdomain("missing") is None

    def test_get_unknown(self, tenant_service):
        import uuid

        with pytest.raises(NotFoundError):
            tenant_service.get(uuid.uuid4())

    def test_deactivate(self, tenant_service, acme):
        tenant = tenant_service.deactivate(acme.id)

        assert tenant.is_active is False
        assert tenant.subscription_end == date.today()
        assert tenant_service.get(acme.id).is_active is False
