import uuid
from typing import List, Optional

from sqlalchemy.orm import Session

from core.tenant_context import TenantContext

from ..exceptions import PayrollNotFoundError
from ..models.payroll_models import Payslip
from ..repositories.payroll_repository import PayrollRunRepository, PayslipRepository
from ..schemas.payslip_schemas import PayslipBreakdown, PayslipResponse


class PayslipService:
    """Read access to generated payslips."""

    def __init__(self, db: Session, tenant: TenantContext):
        self.db = db
        self.tenant = tenant
        self.payslips = PayslipRepository(db)
        self.runs = PayrollRunRepository(db)

    def list_for_run(self, run_id: uuid.UUID) -> List[Payslip]:
        tenant_id = self.tenant.require()
        if self.runs.get(tenant_id, run_id) is None:
            raise PayrollNotFoundError("Payroll run", run_id)
        return self.payslips.list_for_run(tenant_id, run_id)

    def list_for_employee(
        self, employee_id: uuid.UUID, year: Optional[int] = None
    ) -> List[Payslip]:
        return self.payslips.list_for_employee(self.tenant.require(), employee_id, year)

    def get(self, payslip_id: uuid.UUID) -> Payslip:
        payslip = self.payslips.get(self.tenant.require(), payslip_id)
        if payslip is None:
            raise PayrollNotFoundError("Payslip", payslip_id)
        return payslip

    def get_breakdown(self, payslip_id: uuid.UUID) -> PayslipBreakdown:
        return PayslipBreakdown.model_validate(self.get(payslip_id).breakdown)

    def to_response(self, payslip: Payslip) -> PayslipResponse:
        employee = payslip.employee
        run = payslip.payroll_run
        return PayslipResponse(
            id=payslip.id,
            tenant_id=payslip.tenant_id,
            payroll_run_id=payslip.payroll_run_id,
            employee_id=payslip.employee_id,
            employee_code=employee.employee_code if employee else None,
            employee_name=employee.full_name if employee else None,
            month=run.month,
            year=run.year,
            working_days=payslip.working_days,
            present_days=payslip.present_days,
            gross_earnings=payslip.gross_earnings,
            total_deductions=payslip.total_deductions,
            net_pay=payslip.net_pay,
            breakdown=PayslipBreakdown.model_validate(payslip.breakdown),
            pdf_path=payslip.pdf_path,
            created_at=payslip.created_at,
        )
