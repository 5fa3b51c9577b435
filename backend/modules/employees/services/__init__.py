from .employee_service import EmployeeService
from .attendance_service import AttendanceService

__all__ = ["EmployeeService", "AttendanceService"]
