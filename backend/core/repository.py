"""Tenant-scoped repository base.

Every read and write takes the tenant id as an explicit argument; nothing is
filtered behind the caller's back.
"""

import logging
import uuid
from typing import Generic, List, Optional, Type, TypeVar

from sqlalchemy.orm import Query, Session

from .tenant_context import TenantScopeError, ensure_tenant_access

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")


class TenantScopedRepository(Generic[ModelT]):
    model: Type[ModelT]

    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def _check(tenant_id: Optional[uuid.UUID]) -> uuid.UUID:
        if tenant_id is None:
            raise TenantScopeError()
        return tenant_id

    def query(self, tenant_id: uuid.UUID) -> Query:
        tenant_id = self._check(tenant_id)
        return self.db.query(self.model).filter(self.model.tenant_id == tenant_id)

    def get(self, tenant_id: uuid.UUID, entity_id: uuid.UUID) -> Optional[ModelT]:
        return self.query(tenant_id).filter(self.model.id == entity_id).first()

    def list(self, tenant_id: uuid.UUID) -> List[ModelT]:
        return self.query(tenant_id).all()

    def exists(self, tenant_id: uuid.UUID, *criteria) -> bool:
        return self.db.query(
            self.query(tenant_id).filter(*criteria).exists()
        ).scalar()

    def add(self, tenant_id: uuid.UUID, entity: ModelT) -> ModelT:
        tenant_id = self._check(tenant_id)
        if entity.tenant_id is None:
            entity.tenant_id = tenant_id
        else:
            ensure_tenant_access(entity, tenant_id)
        self.db.add(entity)
        self.db.flush()
        return entity

    def delete(self, tenant_id: uuid.UUID, entity: ModelT) -> None:
        ensure_tenant_access(entity, self._check(tenant_id))
        self.db.delete(entity)
        self.db.flush()
