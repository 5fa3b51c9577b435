import uuid

from sqlalchemy import Column, DateTime, Uuid
from sqlalchemy.sql import func


class IdentifierMixin:
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)


class TimestampMixin:
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(),
                        onupdate=func.now(), nullable=False)


class TenantMixin:
    """Mixin for tenant-owned rows; filtered explicitly by repositories"""
    tenant_id = Column(Uuid, nullable=False, index=True)
