# backend/modules/payroll/__init__.py

"""
Payroll module.

- Salary component catalog and salary structures
- Pure payroll calculator (earnings, deductions, net pay)
- Monthly payroll runs and payslips
"""

__version__ = "1.0.0"
