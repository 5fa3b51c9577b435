from .salary_models import SalaryComponent, SalaryStructure
from .payroll_models import PayrollRun, Payslip

__all__ = [
    "SalaryComponent",
    "SalaryStructure",
    "PayrollRun",
    "Payslip",
]
