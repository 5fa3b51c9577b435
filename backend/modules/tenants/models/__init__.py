from .tenant_models import Tenant

__all__ = ["Tenant"]
