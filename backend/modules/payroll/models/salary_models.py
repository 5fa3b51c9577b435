from sqlalchemy import Column, String, Boolean, Enum, JSON, UniqueConstraint
from sqlalchemy.orm import relationship

from core.database import Base
from core.mixins import IdentifierMixin, TenantMixin, TimestampMixin
from modules.payroll.enums.payroll_enums import SalaryComponentType


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class SalaryComponent(Base, IdentifierMixin, TenantMixin, TimestampMixin):
    """Catalog entry for an earning or deduction (BASIC, HRA, PF, ...)."""
    __tablename__ = "salary_components"

    name = Column(String(200), nullable=False)
    code = Column(String(50), nullable=False)
    type = Column(Enum(SalaryComponentType, values_callable=_enum_values), nullable=False)
    is_taxable = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    __table_args__ = (
        UniqueConstraint('tenant_id', 'code', name='uq_salary_components_tenant_code'),
    )

    def __repr__(self):
        return f"<SalaryComponent(code={self.code}, type={self.type})>"


class SalaryStructure(Base, IdentifierMixin, TenantMixin, TimestampMixin):
    __tablename__ = "salary_structures"

    name = Column(String(200), nullable=False)
    # Ordered list of {"code": ..., "rule": {...}} referencing the component catalog
    components = Column(JSON, nullable=False, default=list)

    employees = relationship("Employee", back_populates="salary_structure")

    __table_args__ = (
        UniqueConstraint('tenant_id', 'name', name='uq_salary_structures_tenant_name'),
    )

    def __repr__(self):
        return f"<SalaryStructure(name={self.name})>"
