from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class PayslipLineItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    name: str
    amount: Decimal
    calculation_note: Optional[str] = None


class PayslipBreakdown(BaseModel):
    """Line items plus totals; serialized onto the payslip."""

    model_config = ConfigDict(frozen=True)

    earnings: List[PayslipLineItem]
    deductions: List[PayslipLineItem]
    gross_earnings: Decimal
    total_deductions: Decimal
    net_pay: Decimal

    @property
    def requires_override(self) -> bool:
        """Deductions exceed gross; issuing this payslip needs an explicit override."""
        return self.net_pay < 0


class PayslipResponse(BaseModel):
    id: UUID
    tenant_id: UUID
    payroll_run_id: UUID
    employee_id: UUID
    employee_code: Optional[str] = None
    employee_name: Optional[str] = None
    month: int
    year: int
    working_days: int
    present_days: int
    gross_earnings: Decimal
    total_deductions: Decimal
    net_pay: Decimal
    breakdown: PayslipBreakdown
    pdf_path: Optional[str] = None
    created_at: datetime
