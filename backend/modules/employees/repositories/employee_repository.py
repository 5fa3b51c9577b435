import uuid
from datetime import date
from typing import List, Optional, Set

from sqlalchemy import func

from core.repository import TenantScopedRepository
from modules.employees.enums.employee_enums import (
    PAYABLE_ATTENDANCE_STATUSES,
    EmployeeStatus,
)
from modules.employees.models.employee_models import AttendanceLog, Employee


class EmployeeRepository(TenantScopedRepository[Employee]):
    model = Employee

    def get_by_code(self, tenant_id: uuid.UUID, employee_code: str) -> Optional[Employee]:
        return self.query(tenant_id).filter(
            Employee.employee_code == employee_code
        ).first()

    def list_by_status(
        self, tenant_id: uuid.UUID, status: Optional[EmployeeStatus] = None
    ) -> List[Employee]:
        query = self.query(tenant_id)
        if status is not None:
            query = query.filter(Employee.status == status)
        return query.order_by(Employee.employee_code).all()

    def count_by_structure(self, tenant_id: uuid.UUID, structure_id: uuid.UUID) -> int:
        return self.query(tenant_id).filter(
            Employee.salary_structure_id == structure_id
        ).count()


class AttendanceRepository(TenantScopedRepository[AttendanceLog]):
    model = AttendanceLog

    def get_for_date(
        self, tenant_id: uuid.UUID, employee_id: uuid.UUID, day: date
    ) -> Optional[AttendanceLog]:
        return self.query(tenant_id).filter(
            AttendanceLog.employee_id == employee_id,
            AttendanceLog.date == day,
        ).first()

    def count_in_range(
        self, tenant_id: uuid.UUID, employee_id: uuid.UUID, start: date, end: date
    ) -> int:
        return self.query(tenant_id).filter(
            AttendanceLog.employee_id == employee_id,
            AttendanceLog.date >= start,
            AttendanceLog.date <= end,
        ).with_entities(func.count(AttendanceLog.id)).scalar()

    def payable_dates(
        self, tenant_id: uuid.UUID, employee_id: uuid.UUID, start: date, end: date
    ) -> Set[date]:
        rows = self.query(tenant_id).filter(
            AttendanceLog.employee_id == employee_id,
            AttendanceLog.date >= start,
            AttendanceLog.date <= end,
            AttendanceLog.status.in_(PAYABLE_ATTENDANCE_STATUSES),
        ).with_entities(AttendanceLog.date).distinct().all()
        return {row[0] for row in rows}
