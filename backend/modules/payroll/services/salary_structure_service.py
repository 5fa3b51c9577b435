"""
Salary structure management.

A structure stores an ordered list of ``{code, rule}`` lines. Names and
component types come from the tenant's component catalog and are joined in
by ``resolve_document`` before the calculator sees the structure.
"""

import logging
import uuid
from decimal import Decimal
from typing import Dict, List

from sqlalchemy.orm import Session

from core.tenant_context import TenantContext
from modules.employees.repositories.employee_repository import EmployeeRepository

from ..exceptions import (
    MalformedStructureError,
    PayrollBusinessRuleError,
    PayrollNotFoundError,
)
from ..models.salary_models import SalaryStructure
from ..repositories.payroll_repository import (
    SalaryComponentRepository,
    SalaryStructureRepository,
)
from ..schemas.error_schemas import PayrollErrorCodes
from ..schemas.payslip_schemas import PayslipBreakdown
from ..schemas.salary_schemas import SalaryStructureRequest, SalaryStructureResponse
from . import payroll_calculator

logger = logging.getLogger(__name__)


class SalaryStructureService:

    def __init__(self, db: Session, tenant: TenantContext):
        self.db = db
        self.tenant = tenant
        self.structures = SalaryStructureRepository(db)
        self.components = SalaryComponentRepository(db)
        self.employees = EmployeeRepository(db)

    def list(self) -> List[SalaryStructure]:
        return self.structures.list_structures(self.tenant.require())

    def get(self, structure_id: uuid.UUID) -> SalaryStructure:
        structure = self.structures.get(self.tenant.require(), structure_id)
        if structure is None:
            raise PayrollNotFoundError("Salary structure", structure_id)
        return structure

    def create(self, data: SalaryStructureRequest) -> SalaryStructure:
        tenant_id = self.tenant.require()
        self._ensure_name_available(tenant_id, data.name)
        lines = self._validated_lines(tenant_id, data)

        structure = SalaryStructure(name=data.name, components=lines)
        self.structures.add(tenant_id, structure)
        self.db.commit()
        self.db.refresh(structure)

        logger.info("Created salary structure %s with %d components", structure.name, len(lines))
        return structure

    def update(self, structure_id: uuid.UUID, data: SalaryStructureRequest) -> SalaryStructure:
        tenant_id = self.tenant.require()
        structure = self.get(structure_id)
        if data.name != structure.name:
            self._ensure_name_available(tenant_id, data.name)

        structure.name = data.name
        structure.components = self._validated_lines(tenant_id, data)
        self.db.commit()
        return structure

    def delete(self, structure_id: uuid.UUID) -> None:
        tenant_id = self.tenant.require()
        structure = self.get(structure_id)

        assigned = self.employees.count_by_structure(tenant_id, structure.id)
        if assigned:
            raise PayrollBusinessRuleError(
                f"Cannot delete salary structure {structure.name}: "
                f"{assigned} employee(s) are assigned to it",
                code=PayrollErrorCodes.STRUCTURE_IN_USE,
                status_code=409,
            )

        self.structures.delete(tenant_id, structure)
        self.db.commit()
        logger.info("Deleted salary structure %s", structure.name)

    def resolve_document(self, structure: SalaryStructure) -> List[Dict]:
        """Join stored lines with the catalog into calculator input."""
        tenant_id = self.tenant.require()
        lines = structure.components or []
        catalog = {
            c.code: c
            for c in self.components.get_by_codes(
                tenant_id, [line.get("code") for line in lines]
            )
        }

        document = []
        for line in lines:
            component = catalog.get(line.get("code"))
            if component is None:
                raise MalformedStructureError(line.get("code"), "component not found in catalog")
            document.append({
                "code": component.code,
                "name": component.name,
                "type": component.type.value,
                "rule": line.get("rule"),
            })
        return document

    def calculate_gross_salary(
        self, structure_id: uuid.UUID, working_days: int, present_days: int
    ) -> Decimal:
        structure = self.get(structure_id)
        return payroll_calculator.compute_gross(
            self.resolve_document(structure), working_days, present_days
        )

    def preview_breakdown(
        self, structure_id: uuid.UUID, working_days: int, present_days: int
    ) -> PayslipBreakdown:
        structure = self.get(structure_id)
        return payroll_calculator.compute_breakdown(
            self.resolve_document(structure),
            working_days,
            present_days,
        )

    def monthly_gross(self, structure: SalaryStructure) -> Decimal:
        """Gross at full attendance."""
        return payroll_calculator.compute_gross(self.resolve_document(structure), 1, 1)

    def to_response(self, structure: SalaryStructure) -> SalaryStructureResponse:
        return SalaryStructureResponse(
            id=structure.id,
            tenant_id=structure.tenant_id,
            name=structure.name,
            components=payroll_calculator.parse_structure(self.resolve_document(structure)),
            total_monthly_gross=self.monthly_gross(structure),
            employees_using_count=self.employees.count_by_structure(
                structure.tenant_id, structure.id
            ),
            created_at=structure.created_at,
            updated_at=structure.updated_at,
        )

    def _ensure_name_available(self, tenant_id: uuid.UUID, name: str) -> None:
        if self.structures.get_by_name(tenant_id, name):
            raise PayrollBusinessRuleError(
                f"Salary structure with name '{name}' already exists",
                code=PayrollErrorCodes.DUPLICATE_RECORD,
                status_code=409,
            )

    def _validated_lines(self, tenant_id: uuid.UUID, data: SalaryStructureRequest) -> List[Dict]:
        codes = [line.code for line in data.components]
        catalog = {c.code: c for c in self.components.get_by_codes(tenant_id, codes)}

        document = []
        for line in data.components:
            component = catalog.get(line.code)
            if component is None or not component.is_active:
                raise MalformedStructureError(line.code, "unknown or inactive component")
            document.append({
                "code": component.code,
                "name": component.name,
                "type": component.type.value,
                "rule": line.rule.model_dump(),
            })
        payroll_calculator.parse_structure(document)

        return [line.model_dump(mode="json") for line in data.components]
