"""
Pytest configuration file for backend testing.
"""
import os
import sys
import uuid
from pathlib import Path

import pytest

# Settings and the engine are built at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-hrms-tests")

# Add the backend directory to Python path so imports work correctly
backend_dir = Path(__file__).parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

from core.database import Base, SessionLocal, engine  # noqa: E402
from core.tenant_context import TenantContext  # noqa: E402

# Import all models to register them with SQLAlchemy
from modules.employees.models import employee_models  # noqa: E402,F401
from modules.payroll.models import payroll_models, salary_models  # noqa: E402,F401
from modules.tenants.models import tenant_models  # noqa: E402,F401


@pytest.fixture
def db_session():
    """Fresh schema per test on the in-memory database."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def tenant_id():
    return uuid.uuid4()


@pytest.fixture
def other_tenant_id():
    return uuid.uuid4()


@pytest.fixture
def tenant_context(tenant_id):
    return TenantContext.for_tenant(tenant_id)


@pytest.fixture
def other_tenant_context(other_tenant_id):
    return TenantContext.for_tenant(other_tenant_id)


@pytest.fixture
def employee_factory(db_session, tenant_context):
    """Create employees for the bound tenant."""
    from datetime import date

    from modules.employees.schemas.employee_schemas import EmployeeCreate
    from modules.employees.services.employee_service import EmployeeService

    counter = {"n": 0}

    def create_employee(context=None, **overrides):
        counter["n"] += 1
        data = {
            "employee_code": f"EMP{counter['n']:03d}",
            "first_name": "Test",
            "last_name": f"Employee{counter['n']}",
            "email": f"employee{counter['n']}@example.com",
            "joining_date": date(2023, 1, 1),
        }
        data.update(overrides)
        service = EmployeeService(db_session, context or tenant_context)
        return service.create(EmployeeCreate(**data))

    return create_employee
