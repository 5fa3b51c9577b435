from sqlalchemy import (
    Column, Integer, String, Numeric, ForeignKey, DateTime, Enum, JSON,
    UniqueConstraint, Index, CheckConstraint, Uuid, text
)
from sqlalchemy.orm import relationship

from core.database import Base
from core.mixins import IdentifierMixin, TenantMixin, TimestampMixin
from modules.payroll.enums.payroll_enums import (
    MAX_PAYROLL_YEAR, MIN_PAYROLL_YEAR, PayrollRunStatus
)

from .salary_models import _enum_values

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June", "July",
    "August", "September", "October", "November", "December",
]


class PayrollRun(Base, IdentifierMixin, TenantMixin, TimestampMixin):
    """One payroll run per tenant and month (rejected runs excepted)."""
    __tablename__ = "payroll_runs"

    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)
    status = Column(
        Enum(PayrollRunStatus, values_callable=_enum_values),
        default=PayrollRunStatus.DRAFT,
        nullable=False,
        index=True,
    )
    processed_at = Column(DateTime, nullable=True)
    published_at = Column(DateTime, nullable=True)

    payslips = relationship(
        "Payslip", back_populates="payroll_run", cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint('month BETWEEN 1 AND 12', name='ck_payroll_runs_month'),
        CheckConstraint(
            f'year BETWEEN {MIN_PAYROLL_YEAR} AND {MAX_PAYROLL_YEAR}',
            name='ck_payroll_runs_year',
        ),
        Index(
            'uq_payroll_runs_tenant_month_year',
            'tenant_id', 'month', 'year',
            unique=True,
            postgresql_where=text("status <> 'rejected'"),
            sqlite_where=text("status <> 'rejected'"),
        ),
    )

    @property
    def month_year_display(self) -> str:
        return f"{MONTH_NAMES[self.month - 1]} {self.year}"

    def __repr__(self):
        return f"<PayrollRun(month={self.month}, year={self.year}, status={self.status})>"


class Payslip(Base, IdentifierMixin, TenantMixin, TimestampMixin):
    __tablename__ = "payslips"

    payroll_run_id = Column(
        Uuid, ForeignKey("payroll_runs.id", ondelete="CASCADE"), nullable=False, index=True
    )
    employee_id = Column(Uuid, ForeignKey("employees.id"), nullable=False, index=True)
    working_days = Column(Integer, nullable=False)
    present_days = Column(Integer, nullable=False)
    gross_earnings = Column(Numeric(12, 2), nullable=False)
    total_deductions = Column(Numeric(12, 2), nullable=False)
    net_pay = Column(Numeric(12, 2), nullable=False)
    # Serialized PayslipBreakdown
    breakdown = Column(JSON, nullable=False)
    pdf_path = Column(String(500), nullable=True)

    payroll_run = relationship("PayrollRun", back_populates="payslips")
    employee = relationship("Employee")

    __table_args__ = (
        UniqueConstraint('payroll_run_id', 'employee_id', name='uq_payslips_run_employee'),
        Index('ix_payslips_tenant_employee', 'tenant_id', 'employee_id'),
    )

    def __repr__(self):
        return f"<Payslip(employee_id={self.employee_id}, net_pay={self.net_pay})>"
