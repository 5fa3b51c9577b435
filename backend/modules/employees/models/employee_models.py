from sqlalchemy import (
    Column, String, Integer, Boolean, Date, DateTime, Enum, ForeignKey, Text,
    UniqueConstraint, Index, Uuid
)
from sqlalchemy.orm import relationship

from core.database import Base
from core.mixins import IdentifierMixin, TenantMixin, TimestampMixin
from modules.employees.enums.employee_enums import AttendanceStatus, EmployeeStatus


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Employee(Base, IdentifierMixin, TenantMixin, TimestampMixin):
    __tablename__ = "employees"

    employee_code = Column(String(50), nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)
    joining_date = Column(Date, nullable=False)
    status = Column(
        Enum(EmployeeStatus, values_callable=_enum_values),
        default=EmployeeStatus.ACTIVE,
        nullable=False,
    )
    salary_structure_id = Column(
        Uuid, ForeignKey("salary_structures.id"), nullable=True, index=True
    )

    salary_structure = relationship("SalaryStructure", back_populates="employees")
    attendance_logs = relationship(
        "AttendanceLog", back_populates="employee", cascade="all, delete-orphan"
    )

    __table_args__ = (
        UniqueConstraint('tenant_id', 'employee_code', name='uq_employees_tenant_code'),
        Index('ix_employees_tenant_status', 'tenant_id', 'status'),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self):
        return f"<Employee(code={self.employee_code}, status={self.status})>"


class AttendanceLog(Base, IdentifierMixin, TenantMixin, TimestampMixin):
    __tablename__ = "attendance_logs"

    employee_id = Column(
        Uuid, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False
    )
    date = Column(Date, nullable=False)
    clock_in = Column(DateTime, nullable=True)
    clock_out = Column(DateTime, nullable=True)
    status = Column(Enum(AttendanceStatus, values_callable=_enum_values), nullable=False)
    is_late = Column(Boolean, default=False, nullable=False)
    late_by_minutes = Column(Integer, nullable=True)
    is_regularized = Column(Boolean, default=False, nullable=False)
    regularization_reason = Column(Text, nullable=True)

    employee = relationship("Employee", back_populates="attendance_logs")

    __table_args__ = (
        UniqueConstraint('employee_id', 'date', name='uq_attendance_employee_date'),
        Index('ix_attendance_tenant_date', 'tenant_id', 'date'),
    )
