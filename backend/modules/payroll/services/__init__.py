"""Payroll services module."""

from .payroll_calculator import compute_breakdown, compute_gross, parse_structure
from .salary_component_service import SalaryComponentService
from .salary_structure_service import SalaryStructureService
from .payroll_run_service import PayrollRunService
from .payslip_service import PayslipService

__all__ = [
    'compute_breakdown',
    'compute_gross',
    'parse_structure',
    'SalaryComponentService',
    'SalaryStructureService',
    'PayrollRunService',
    'PayslipService',
]
