"""
Salary component catalog management.
"""

import logging
import uuid
from typing import List

from sqlalchemy.orm import Session

from core.tenant_context import TenantContext

from ..enums.payroll_enums import SalaryComponentType
from ..exceptions import PayrollBusinessRuleError, PayrollNotFoundError
from ..models.salary_models import SalaryComponent
from ..repositories.payroll_repository import (
    SalaryComponentRepository,
    SalaryStructureRepository,
)
from ..schemas.error_schemas import PayrollErrorCodes
from ..schemas.salary_schemas import SalaryComponentCreate, SalaryComponentUpdate

logger = logging.getLogger(__name__)


class SalaryComponentService:

    def __init__(self, db: Session, tenant: TenantContext):
        self.db = db
        self.tenant = tenant
        self.components = SalaryComponentRepository(db)
        self.structures = SalaryStructureRepository(db)

    def list(self, include_inactive: bool = False) -> List[SalaryComponent]:
        return self.components.list_components(
            self.tenant.require(), include_inactive=include_inactive
        )

    def list_by_type(self, component_type: SalaryComponentType) -> List[SalaryComponent]:
        return self.components.list_components(
            self.tenant.require(), component_type=component_type
        )

    def get(self, component_id: uuid.UUID) -> SalaryComponent:
        component = self.components.get(self.tenant.require(), component_id)
        if component is None:
            raise PayrollNotFoundError("Salary component", component_id)
        return component

    def create(self, data: SalaryComponentCreate) -> SalaryComponent:
        tenant_id = self.tenant.require()
        self._ensure_code_available(tenant_id, data.code)

        component = SalaryComponent(**data.model_dump())
        self.components.add(tenant_id, component)
        self.db.commit()
        self.db.refresh(component)

        logger.info("Created salary component %s (%s)", component.code, component.type.value)
        return component

    def update(self, component_id: uuid.UUID, data: SalaryComponentUpdate) -> SalaryComponent:
        """Update a component. Code and type are frozen once a structure uses it."""
        tenant_id = self.tenant.require()
        component = self.get(component_id)

        changes_identity = data.code != component.code or data.type != component.type
        if changes_identity and self.structures.referencing_component(tenant_id, component.code):
            raise PayrollBusinessRuleError(
                f"Cannot change code or type of component {component.code}: "
                "it is used by salary structures",
                code=PayrollErrorCodes.COMPONENT_IN_USE,
                status_code=409,
            )
        if data.code != component.code:
            self._ensure_code_available(tenant_id, data.code)

        for field, value in data.model_dump().items():
            setattr(component, field, value)
        self.db.commit()
        return component

    def delete(self, component_id: uuid.UUID) -> SalaryComponent:
        """Soft delete; refused while any salary structure references the component."""
        tenant_id = self.tenant.require()
        component = self.get(component_id)

        users = self.structures.referencing_component(tenant_id, component.code)
        if users:
            raise PayrollBusinessRuleError(
                f"Component {component.code} is used by {len(users)} salary structure(s)",
                code=PayrollErrorCodes.COMPONENT_IN_USE,
                status_code=409,
            )

        component.is_active = False
        self.db.commit()
        logger.info("Deactivated salary component %s", component.code)
        return component

    def _ensure_code_available(self, tenant_id: uuid.UUID, code: str) -> None:
        if self.components.get_by_code(tenant_id, code):
            raise PayrollBusinessRuleError(
                f"Salary component with code {code} already exists",
                code=PayrollErrorCodes.DUPLICATE_RECORD,
                status_code=409,
            )
