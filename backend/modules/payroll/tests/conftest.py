# backend/modules/payroll/tests/conftest.py

"""
Pytest fixtures for payroll module tests.

Provides a small component catalog, a standard salary structure and the
calculator documents used by the worked examples.
"""

from decimal import Decimal

import pytest

from modules.payroll.enums.payroll_enums import SalaryComponentType
from modules.payroll.schemas.salary_schemas import (
    SalaryComponentCreate,
    SalaryStructureRequest,
)
from modules.payroll.services.salary_component_service import SalaryComponentService
from modules.payroll.services.salary_structure_service import SalaryStructureService

CATALOG = [
    ("BASIC", "Basic Salary", SalaryComponentType.EARNING),
    ("HRA", "House Rent Allowance", SalaryComponentType.EARNING),
    ("TRANSPORT", "Transport Allowance", SalaryComponentType.EARNING),
    ("PF", "Provident Fund", SalaryComponentType.DEDUCTION),
    ("PT", "Professional Tax", SalaryComponentType.DEDUCTION),
]


def fixed(amount, prorate=True):
    return {"kind": "fixed", "amount": str(amount), "prorate": prorate}


def percent_of(rate, base="present_fraction", of=None):
    rule = {"kind": "percent_of", "base": base, "rate": str(rate)}
    if of is not None:
        rule["of"] = of
    return rule


def line(code, name, type_, rule):
    return {"code": code, "name": name, "type": type_, "rule": rule}


@pytest.fixture
def basic_hra_document():
    """BASIC 3000 prorated and HRA at 40% of BASIC."""
    return [
        line("BASIC", "Basic Salary", "earning", fixed("3000.00")),
        line("HRA", "House Rent Allowance", "earning", percent_of("0.40", of="BASIC")),
    ]


@pytest.fixture
def full_document(basic_hra_document):
    """Earnings plus PF at 12% of gross and a flat professional tax."""
    return basic_hra_document + [
        line("PF", "Provident Fund", "deduction", percent_of("0.12", base="gross")),
        line("PT", "Professional Tax", "deduction", fixed("200.00", prorate=False)),
    ]


@pytest.fixture
def component_service(db_session, tenant_context):
    return SalaryComponentService(db_session, tenant_context)


@pytest.fixture
def structure_service(db_session, tenant_context):
    return SalaryStructureService(db_session, tenant_context)


@pytest.fixture
def catalog(component_service):
    return {
        code: component_service.create(
            SalaryComponentCreate(code=code, name=name, type=type_)
        )
        for code, name, type_ in CATALOG
    }


@pytest.fixture
def standard_structure(catalog, structure_service):
    return structure_service.create(SalaryStructureRequest(
        name="Standard Monthly",
        components=[
            {"code": "BASIC", "rule": fixed(Decimal("3000.00"))},
            {"code": "HRA", "rule": percent_of(Decimal("0.40"), of="BASIC")},
            {"code": "PF", "rule": percent_of(Decimal("0.12"), base="gross")},
            {"code": "PT", "rule": fixed(Decimal("200.00"), prorate=False)},
        ],
    ))
