from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from ..enums.employee_enums import AttendanceStatus, EmployeeStatus


class EmployeeCreate(BaseModel):
    employee_code: str = Field(..., min_length=1, max_length=50)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    joining_date: date
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    salary_structure_id: Optional[UUID] = None


class EmployeeResponse(BaseModel):
    id: UUID
    tenant_id: UUID
    employee_code: str
    first_name: str
    last_name: str
    email: str
    joining_date: date
    status: EmployeeStatus
    salary_structure_id: Optional[UUID] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AttendanceMark(BaseModel):
    employee_id: UUID
    date: date
    status: AttendanceStatus
    clock_in: Optional[datetime] = None
    clock_out: Optional[datetime] = None
    is_late: bool = False
    late_by_minutes: Optional[int] = Field(None, ge=0)

    @model_validator(mode="after")
    def validate_clock_times(self):
        if self.clock_in and self.clock_out and self.clock_out < self.clock_in:
            raise ValueError("clock_out cannot be before clock_in")
        return self


class AttendanceRegularize(BaseModel):
    status: AttendanceStatus
    reason: str = Field(..., min_length=3, max_length=1000)


class AttendanceResponse(BaseModel):
    id: UUID
    employee_id: UUID
    date: date
    status: AttendanceStatus
    clock_in: Optional[datetime] = None
    clock_out: Optional[datetime] = None
    is_late: bool
    late_by_minutes: Optional[int] = None
    is_regularized: bool
    regularization_reason: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
