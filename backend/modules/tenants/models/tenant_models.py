from sqlalchemy import Column, String, Boolean, Date

from core.database import Base
from core.mixins import IdentifierMixin, TimestampMixin


class Tenant(Base, IdentifierMixin, TimestampMixin):
    """Organization using the platform. Not itself tenant-scoped."""
    __tablename__ = "tenants"

    name = Column(String(200), nullable=False)
    subdomain = Column(String(63), nullable=False, unique=True, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    subscription_start = Column(Date, nullable=False)
    # No end date means an open-ended subscription
    subscription_end = Column(Date, nullable=True)

    def __repr__(self):
        return f"<Tenant(subdomain={self.subdomain}, active={self.is_active})>"
