# backend/modules/payroll/schemas/salary_schemas.py

"""
Schemas for salary components, salary structures and the component rule
documents stored inside a structure.
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, List, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..enums.payroll_enums import PercentBase, SalaryComponentType

COMPONENT_CODE_PATTERN = r"^[A-Z0-9_-]+$"
NAME_PATTERN = r"^[a-zA-Z0-9\s\-_.&'()]+$"


# Component rules

class FixedAmountRule(BaseModel):
    """Monthly amount, optionally prorated by attendance."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["fixed"] = "fixed"
    amount: Decimal = Field(..., ge=0, max_digits=14, decimal_places=4)
    prorate: bool = True


class PercentOfRule(BaseModel):
    """Percentage of a base; ``rate`` is a fraction (0.40 == 40%)."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["percent_of"] = "percent_of"
    base: PercentBase
    rate: Decimal = Field(..., ge=0, max_digits=10, decimal_places=6)
    of: Optional[str] = Field(None, pattern=COMPONENT_CODE_PATTERN)


ComponentRule = Annotated[
    Union[FixedAmountRule, PercentOfRule], Field(discriminator="kind")
]


class StructureComponent(BaseModel):
    """A fully resolved structure line as consumed by the payroll calculator."""

    model_config = ConfigDict(frozen=True)

    code: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    type: SalaryComponentType
    rule: ComponentRule


class SalaryStructureLine(BaseModel):
    """A structure line as stored: a catalog component code plus its rule."""

    code: str = Field(..., min_length=2, max_length=50, pattern=COMPONENT_CODE_PATTERN)
    rule: ComponentRule


# Salary components

class SalaryComponentBase(BaseModel):
    name: str = Field(..., min_length=2, max_length=200, pattern=NAME_PATTERN)
    code: str = Field(..., min_length=2, max_length=50, pattern=COMPONENT_CODE_PATTERN)
    type: SalaryComponentType
    is_taxable: bool = False
    is_active: bool = True


class SalaryComponentCreate(SalaryComponentBase):
    pass


class SalaryComponentUpdate(SalaryComponentBase):
    pass


class SalaryComponentResponse(SalaryComponentBase):
    id: UUID
    tenant_id: UUID
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# Salary structures

class SalaryStructureRequest(BaseModel):
    name: str = Field(..., min_length=2, max_length=200, pattern=NAME_PATTERN)
    components: List[SalaryStructureLine] = Field(..., min_length=1)

    @field_validator("components")
    @classmethod
    def unique_codes(cls, v: List[SalaryStructureLine]) -> List[SalaryStructureLine]:
        seen = set()
        for line in v:
            if line.code in seen:
                raise ValueError(f"Component {line.code} appears more than once")
            seen.add(line.code)
        return v


class SalaryStructureResponse(BaseModel):
    id: UUID
    tenant_id: UUID
    name: str
    components: List[StructureComponent]
    total_monthly_gross: Decimal
    employees_using_count: int
    created_at: datetime
    updated_at: datetime
