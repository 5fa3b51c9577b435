from enum import Enum


class EmployeeStatus(str, Enum):
    ACTIVE = "active"
    NOTICE = "notice"
    EXITED = "exited"


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    HALF_DAY = "half_day"
    ON_LEAVE = "on_leave"


# Statuses that count as a present day for payroll
PAYABLE_ATTENDANCE_STATUSES = (AttendanceStatus.PRESENT, AttendanceStatus.HALF_DAY)
