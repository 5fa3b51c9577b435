from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

SUBDOMAIN_PATTERN = r"^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$"
SUBDOMAIN_MIN_LENGTH = 2
SUBDOMAIN_MAX_LENGTH = 63

RESERVED_SUBDOMAINS = frozenset({
    "www", "api", "app", "admin", "dashboard", "portal",
    "mail", "email", "smtp", "ftp", "ssh", "vpn",
    "test", "staging", "dev", "demo", "sandbox",
    "support", "help", "docs", "blog", "status",
    "cdn", "static", "assets", "media", "files",
    "hrms", "system", "root", "public",
})


class TenantOnboardingRequest(BaseModel):
    organization_name: str = Field(
        ..., min_length=2, max_length=200, pattern=r"^[a-zA-Z0-9\s\-_.&']+$"
    )
    subdomain: str = Field(
        ..., min_length=SUBDOMAIN_MIN_LENGTH, max_length=SUBDOMAIN_MAX_LENGTH,
        pattern=SUBDOMAIN_PATTERN,
    )
    subscription_start_date: Optional[date] = None

    @field_validator("subdomain", mode="before")
    @classmethod
    def normalize_subdomain(cls, v):
        if isinstance(v, str):
            v = v.strip().lower()
        return v

    @field_validator("subdomain")
    @classmethod
    def not_reserved(cls, v: str) -> str:
        if v in RESERVED_SUBDOMAINS:
            raise ValueError("This subdomain is reserved")
        return v


class TenantResponse(BaseModel):
    id: UUID
    name: str
    subdomain: str
    tenant_url: str
    is_active: bool
    subscription_start: date
    subscription_end: Optional[date] = None
    created_at: datetime


class SubdomainCheckResponse(BaseModel):
    subdomain: str
    is_available: bool
    suggested_url: Optional[str] = None
    suggestions: List[str] = Field(default_factory=list)
    message: str
