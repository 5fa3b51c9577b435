from .employee_models import AttendanceLog, Employee

__all__ = ["Employee", "AttendanceLog"]
