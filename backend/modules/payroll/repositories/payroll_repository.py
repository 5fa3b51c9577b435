import uuid
from typing import List, Optional

from sqlalchemy import func

from core.repository import TenantScopedRepository
from modules.payroll.enums.payroll_enums import PayrollRunStatus, SalaryComponentType
from modules.payroll.models.payroll_models import PayrollRun, Payslip
from modules.payroll.models.salary_models import SalaryComponent, SalaryStructure


class SalaryComponentRepository(TenantScopedRepository[SalaryComponent]):
    model = SalaryComponent

    def get_by_code(self, tenant_id: uuid.UUID, code: str) -> Optional[SalaryComponent]:
        return self.query(tenant_id).filter(SalaryComponent.code == code).first()

    def get_by_codes(self, tenant_id: uuid.UUID, codes: List[str]) -> List[SalaryComponent]:
        if not codes:
            return []
        return self.query(tenant_id).filter(SalaryComponent.code.in_(codes)).all()

    def list_components(
        self,
        tenant_id: uuid.UUID,
        include_inactive: bool = False,
        component_type: Optional[SalaryComponentType] = None,
    ) -> List[SalaryComponent]:
        query = self.query(tenant_id)
        if not include_inactive:
            query = query.filter(SalaryComponent.is_active.is_(True))
        if component_type is not None:
            query = query.filter(SalaryComponent.type == component_type)
        return query.order_by(SalaryComponent.type, SalaryComponent.code).all()


class SalaryStructureRepository(TenantScopedRepository[SalaryStructure]):
    model = SalaryStructure

    def get_by_name(self, tenant_id: uuid.UUID, name: str) -> Optional[SalaryStructure]:
        return self.query(tenant_id).filter(SalaryStructure.name == name).first()

    def list_structures(self, tenant_id: uuid.UUID) -> List[SalaryStructure]:
        return self.query(tenant_id).order_by(SalaryStructure.name).all()

    def referencing_component(self, tenant_id: uuid.UUID, code: str) -> List[SalaryStructure]:
        # Components live in a JSON document; scanned in Python for portability
        return [
            structure
            for structure in self.query(tenant_id).all()
            if any(line.get("code") == code for line in structure.components or [])
        ]


class PayrollRunRepository(TenantScopedRepository[PayrollRun]):
    model = PayrollRun

    def find_active_for_period(
        self, tenant_id: uuid.UUID, month: int, year: int
    ) -> Optional[PayrollRun]:
        """Run for the month that blocks a new one (anything not rejected)."""
        return self.query(tenant_id).filter(
            PayrollRun.month == month,
            PayrollRun.year == year,
            PayrollRun.status != PayrollRunStatus.REJECTED,
        ).first()

    def list_runs(self, tenant_id: uuid.UUID, year: Optional[int] = None) -> List[PayrollRun]:
        query = self.query(tenant_id)
        if year is not None:
            query = query.filter(PayrollRun.year == year)
        return query.order_by(PayrollRun.year.desc(), PayrollRun.month.desc()).all()


class PayslipRepository(TenantScopedRepository[Payslip]):
    model = Payslip

    def list_for_run(self, tenant_id: uuid.UUID, run_id: uuid.UUID) -> List[Payslip]:
        return self.query(tenant_id).filter(Payslip.payroll_run_id == run_id).all()

    def list_for_employee(
        self, tenant_id: uuid.UUID, employee_id: uuid.UUID, year: Optional[int] = None
    ) -> List[Payslip]:
        query = self.query(tenant_id).join(PayrollRun).filter(
            Payslip.employee_id == employee_id
        )
        if year is not None:
            query = query.filter(PayrollRun.year == year)
        return query.order_by(PayrollRun.year.desc(), PayrollRun.month.desc()).all()

    def totals_for_run(self, tenant_id: uuid.UUID, run_id: uuid.UUID):
        """(payslip count, total gross, total net) for a run."""
        return self.query(tenant_id).filter(
            Payslip.payroll_run_id == run_id
        ).with_entities(
            func.count(Payslip.id),
            func.coalesce(func.sum(Payslip.gross_earnings), 0),
            func.coalesce(func.sum(Payslip.net_pay), 0),
        ).one()
