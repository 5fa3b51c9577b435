"""Payroll schemas module."""

from .payslip_schemas import PayslipBreakdown, PayslipLineItem, PayslipResponse
from .payroll_run_schemas import PayrollRunRequest, PayrollRunResponse
from .salary_schemas import (
    ComponentRule,
    FixedAmountRule,
    PercentOfRule,
    SalaryComponentCreate,
    SalaryComponentResponse,
    SalaryComponentUpdate,
    SalaryStructureLine,
    SalaryStructureRequest,
    SalaryStructureResponse,
    StructureComponent,
)

__all__ = [
    'PayslipBreakdown',
    'PayslipLineItem',
    'PayslipResponse',
    'PayrollRunRequest',
    'PayrollRunResponse',
    'ComponentRule',
    'FixedAmountRule',
    'PercentOfRule',
    'SalaryComponentCreate',
    'SalaryComponentResponse',
    'SalaryComponentUpdate',
    'SalaryStructureLine',
    'SalaryStructureRequest',
    'SalaryStructureResponse',
    'StructureComponent',
]
