"""
Attendance logging and the attendance figures payroll runs consume.
"""

import calendar
import logging
import uuid
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from core.exceptions import ConflictError, NotFoundError, ValidationError
from core.tenant_context import TenantContext
from modules.employees.enums.employee_enums import EmployeeStatus
from modules.employees.models.employee_models import AttendanceLog
from modules.employees.repositories.employee_repository import (
    AttendanceRepository,
    EmployeeRepository,
)
from modules.employees.schemas.employee_schemas import (
    AttendanceMark,
    AttendanceRegularize,
)

logger = logging.getLogger(__name__)


def month_bounds(year: int, month: int):
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def calculate_working_days(year: int, month: int) -> int:
    """Number of Monday-Friday days in the month."""
    start, end = month_bounds(year, month)
    return sum(
        1
        for day in range(start.day, end.day + 1)
        if date(year, month, day).weekday() < 5
    )


class AttendanceService:

    def __init__(self, db: Session, tenant: TenantContext):
        self.db = db
        self.tenant = tenant
        self.employees = EmployeeRepository(db)
        self.attendance = AttendanceRepository(db)

    def mark_attendance(self, data: AttendanceMark) -> AttendanceLog:
        tenant_id = self.tenant.require()

        employee = self.employees.get(tenant_id, data.employee_id)
        if employee is None:
            raise NotFoundError(f"Employee with ID {data.employee_id} not found")
        if employee.status != EmployeeStatus.ACTIVE:
            raise ValidationError(
                "Employee is not active and cannot record attendance",
                error_code="EMPLOYEE_NOT_ACTIVE",
            )
        if self.attendance.get_for_date(tenant_id, data.employee_id, data.date):
            raise ConflictError(
                f"Attendance already recorded for {data.date.isoformat()}",
                error_code="ATTENDANCE_EXISTS",
            )

        log = AttendanceLog(**data.model_dump())
        self.attendance.add(tenant_id, log)
        self.db.commit()
        self.db.refresh(log)
        return log

    def regularize(self, log_id: uuid.UUID, data: AttendanceRegularize) -> AttendanceLog:
        """Correct a log once; clears any late flag."""
        tenant_id = self.tenant.require()
        log = self.attendance.get(tenant_id, log_id)
        if log is None:
            raise NotFoundError(f"Attendance log with ID {log_id} not found")
        if log.is_regularized:
            raise ConflictError(
                "Attendance log has already been regularized",
                error_code="ATTENDANCE_ALREADY_REGULARIZED",
            )

        log.status = data.status
        log.is_regularized = True
        log.regularization_reason = data.reason
        if log.is_late:
            log.is_late = False
            log.late_by_minutes = 0
        self.db.commit()

        logger.info("Regularized attendance %s for employee %s", log.id, log.employee_id)
        return log

    def count_present_days(
        self, employee_id: uuid.UUID, year: int, month: int
    ) -> Optional[int]:
        """Distinct weekdays marked present or half-day.

        Returns ``None`` when the employee has no attendance records at all
        for the month, so callers can tell "absent" from "not tracked".
        """
        tenant_id = self.tenant.require()
        start, end = month_bounds(year, month)
        if not self.attendance.count_in_range(tenant_id, employee_id, start, end):
            return None
        dates = self.attendance.payable_dates(tenant_id, employee_id, start, end)
        return sum(1 for day in dates if day.weekday() < 5)

    def calculate_working_days(self, year: int, month: int) -> int:
        return calculate_working_days(year, month)
