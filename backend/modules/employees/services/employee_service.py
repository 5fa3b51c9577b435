import logging
import uuid
from typing import List, Optional

from sqlalchemy.orm import Session

from core.exceptions import ConflictError, NotFoundError
from core.tenant_context import TenantContext
from modules.employees.enums.employee_enums import EmployeeStatus
from modules.employees.models.employee_models import Employee
from modules.employees.repositories.employee_repository import EmployeeRepository
from modules.employees.schemas.employee_schemas import EmployeeCreate
from modules.payroll.repositories.payroll_repository import SalaryStructureRepository

logger = logging.getLogger(__name__)


class EmployeeService:
    """Employee records for the tenant bound on the request."""

    def __init__(self, db: Session, tenant: TenantContext):
        self.db = db
        self.tenant = tenant
        self.employees = EmployeeRepository(db)
        self.structures = SalaryStructureRepository(db)

    def create(self, data: EmployeeCreate) -> Employee:
        tenant_id = self.tenant.require()

        if self.employees.get_by_code(tenant_id, data.employee_code):
            raise ConflictError(
                f"Employee code '{data.employee_code}' already exists",
                error_code="EMPLOYEE_CODE_EXISTS",
            )
        if data.salary_structure_id is not None:
            self._get_structure(tenant_id, data.salary_structure_id)

        employee = Employee(**data.model_dump())
        self.employees.add(tenant_id, employee)
        self.db.commit()
        self.db.refresh(employee)

        logger.info("Created employee %s for tenant %s", employee.employee_code, tenant_id)
        return employee

    def get(self, employee_id: uuid.UUID) -> Employee:
        employee = self.employees.get(self.tenant.require(), employee_id)
        if employee is None:
            raise NotFoundError(f"Employee with ID {employee_id} not found")
        return employee

    def list(self, status: Optional[EmployeeStatus] = None) -> List[Employee]:
        return self.employees.list_by_status(self.tenant.require(), status)

    def list_active(self) -> List[Employee]:
        return self.list(EmployeeStatus.ACTIVE)

    def update_status(self, employee_id: uuid.UUID, status: EmployeeStatus) -> Employee:
        employee = self.get(employee_id)
        previous = employee.status
        employee.status = status
        self.db.commit()
        logger.info(
            "Employee %s status changed from %s to %s",
            employee.employee_code, previous.value, status.value,
        )
        return employee

    def assign_salary_structure(
        self, employee_id: uuid.UUID, structure_id: Optional[uuid.UUID]
    ) -> Employee:
        """Assign (or with ``None`` clear) the employee's salary structure."""
        tenant_id = self.tenant.require()
        employee = self.get(employee_id)
        if structure_id is not None:
            self._get_structure(tenant_id, structure_id)
        employee.salary_structure_id = structure_id
        self.db.commit()
        return employee

    def _get_structure(self, tenant_id: uuid.UUID, structure_id: uuid.UUID):
        structure = self.structures.get(tenant_id, structure_id)
        if structure is None:
            raise NotFoundError(f"Salary structure with ID {structure_id} not found")
        return structure
