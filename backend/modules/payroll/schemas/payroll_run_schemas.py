from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from ..enums.payroll_enums import MAX_PAYROLL_YEAR, MIN_PAYROLL_YEAR, PayrollRunStatus


class PayrollRunRequest(BaseModel):
    month: int = Field(..., ge=1, le=12, description="Month must be between 1 and 12")
    year: int = Field(
        ..., ge=MIN_PAYROLL_YEAR, le=MAX_PAYROLL_YEAR,
        description=f"Year must be between {MIN_PAYROLL_YEAR} and {MAX_PAYROLL_YEAR}",
    )


class PayrollRunResponse(BaseModel):
    id: UUID
    tenant_id: UUID
    month: int
    year: int
    month_year_display: str
    status: PayrollRunStatus
    processed_at: Optional[datetime] = None
    published_at: Optional[datetime] = None
    total_employees: int = 0
    total_gross_pay: Decimal = Decimal("0.00")
    total_net_pay: Decimal = Decimal("0.00")
    created_at: datetime
    updated_at: datetime
