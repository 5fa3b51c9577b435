"""
Tests for payroll run lifecycle, payslip generation and payslip reads.

June 2024 has 20 weekdays, which keeps the expected figures round.
"""

import logging
import uuid
from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from core.config import get_settings
from modules.employees.enums.employee_enums import AttendanceStatus, EmployeeStatus
from modules.employees.schemas.employee_schemas import AttendanceMark
from modules.employees.services.attendance_service import AttendanceService
from modules.employees.services.employee_service import EmployeeService
from modules.payroll.enums.payroll_enums import PayrollRunStatus
from modules.payroll.exceptions import (
    InvalidAttendanceError,
    PayrollBusinessRuleError,
    PayrollNotFoundError,
)
from modules.payroll.models.payroll_models import PayrollRun, Payslip
from modules.payroll.schemas.error_schemas import PayrollErrorCodes
from modules.payroll.schemas.payroll_run_schemas import PayrollRunRequest
from modules.payroll.schemas.salary_schemas import SalaryStructureRequest
from modules.payroll.services.payroll_run_service import PayrollRunService
from modules.payroll.services.payslip_service import PayslipService

from .conftest import fixed

JUNE_2024 = PayrollRunRequest(month=6, year=2024)


@pytest.fixture
def run_service(db_session, tenant_context):
    return PayrollRunService(db_session, tenant_context)


@pytest.fixture
def payslip_service(db_session, tenant_context):
    return PayslipService(db_session, tenant_context)


@pytest.fixture
def june_run(run_service):
    return run_service.create_run(JUNE_2024)


def mark_june(db_session, tenant_context, employee, days, status):
    service = AttendanceService(db_session, tenant_context)
    for day in days:
        service.mark_attendance(AttendanceMark(
            employee_id=employee.id, date=date(2024, 6, day), status=status,
        ))


class TestRunCreation:

    def test_create_run(self, june_run, tenant_id):
        assert june_run.status == PayrollRunStatus.DRAFT
        assert june_run.tenant_id == tenant_id
        assert june_run.month_year_display == "June 2024"

    def test_duplicate_period_rejected(self, run_service, june_run):
        with pytest.raises(PayrollBusinessRuleError) as exc_info:
            run_service.create_run(JUNE_2024)

        assert exc_info.value.code == PayrollErrorCodes.RUN_ALREADY_EXISTS
        assert exc_info.value.status_code == 409

    def test_rejected_run_frees_period(self, run_service, june_run):
        run_service.reject_run(june_run.id)

        replacement = run_service.create_run(JUNE_2024)

        assert replacement.id != june_run.id
        assert len(run_service.list_runs(2024)) == 2

    def test_other_tenant_may_use_period(self, db_session, june_run, other_tenant_context):
        other_run = PayrollRunService(db_session, other_tenant_context).create_run(JUNE_2024)

        assert other_run.tenant_id != june_run.tenant_id

    def test_database_enforces_single_active_run(self, db_session, june_run, tenant_id):
        db_session.add(PayrollRun(tenant_id=tenant_id, month=6, year=2024))

        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

    def test_integrity_error_reported_as_conflict(self, run_service, june_run, monkeypatch):
        monkeypatch.setattr(run_service.runs, "find_active_for_period", lambda *args: None)

        with pytest.raises(PayrollBusinessRuleError) as exc_info:
            run_service.create_run(JUNE_2024)

        assert exc_info.value.code == PayrollErrorCodes.RUN_ALREADY_EXISTS

    @pytest.mark.parametrize("year", [2019, 2101])
    def test_year_bounds(self, year):
        with pytest.raises(ValidationError):
            PayrollRunRequest(month=1, year=year)

    def test_database_enforces_year_bounds(self, db_session, tenant_id):
        db_session.add(PayrollRun(tenant_id=tenant_id, month=1, year=2101))

        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

    def test_list_runs_newest_first(self, run_service):
        run_service.create_run(PayrollRunRequest(month=1, year=2024))
        run_service.create_run(PayrollRunRequest(month=3, year=2024))
        run_service.create_run(PayrollRunRequest(month=12, year=2023))

        runs = run_service.list_runs()

        assert [(r.year, r.month) for r in runs] == [(2024, 3), (2024, 1), (2023, 12)]
        assert len(run_service.list_runs(2023)) == 1

    def test_get_run_of_other_tenant(self, db_session, june_run, other_tenant_context):
        with pytest.raises(PayrollNotFoundError):
            PayrollRunService(db_session, other_tenant_context).get_run(june_run.id)


class TestRunProcessing:

    def test_payslip_uses_attendance(
        self, db_session, tenant_context, run_service, payslip_service,
        standard_structure, employee_factory, june_run,
    ):
        employee = employee_factory(salary_structure_id=standard_structure.id)
        mark_june(db_session, tenant_context, employee,
                  [3, 4, 5, 6, 7, 10, 11, 12, 13, 14, 17, 18, 19], AttendanceStatus.PRESENT)
        mark_june(db_session, tenant_context, employee, [20, 21], AttendanceStatus.HALF_DAY)
        mark_june(db_session, tenant_context, employee, [24, 25], AttendanceStatus.ABSENT)
        # Saturday is not a working day
        mark_june(db_session, tenant_context, employee, [8], AttendanceStatus.PRESENT)

        run = run_service.process_run(june_run.id)

        assert run.status == PayrollRunStatus.COMPLETED
        assert run.processed_at is not None
        payslips = payslip_service.list_for_run(run.id)
        assert len(payslips) == 1
        payslip = payslips[0]
        assert payslip.working_days == 20
        assert payslip.present_days == 15
        assert payslip.gross_earnings == Decimal("3150.00")
        assert payslip.total_deductions == Decimal("578.00")
        assert payslip.net_pay == Decimal("2572.00")

    def test_missing_attendance_defaults_to_full_month(
        self, run_service, payslip_service, standard_structure, employee_factory,
        june_run, caplog,
    ):
        employee_factory(salary_structure_id=standard_structure.id)

        with caplog.at_level(logging.WARNING):
            run_service.process_run(june_run.id)

        payslip = payslip_service.list_for_run(june_run.id)[0]
        assert payslip.present_days == 20
        assert payslip.net_pay == Decimal("3496.00")
        assert "assuming full attendance" in caplog.text

    def test_missing_attendance_without_default(
        self, run_service, payslip_service, standard_structure, employee_factory,
        june_run, monkeypatch,
    ):
        monkeypatch.setattr(run_service.settings, "payroll_default_full_attendance", False)
        monkeypatch.setattr(run_service.settings, "payroll_allow_negative_net_pay", True)
        employee_factory(salary_structure_id=standard_structure.id)

        run_service.process_run(june_run.id)

        payslip = payslip_service.list_for_run(june_run.id)[0]
        assert payslip.present_days == 0
        assert payslip.gross_earnings == Decimal("0.00")
        # Only the flat professional tax remains
        assert payslip.net_pay == Decimal("-200.00")

    def test_skips_employees_without_structure_or_inactive(
        self, db_session, tenant_context, run_service, payslip_service,
        standard_structure, employee_factory, june_run, caplog,
    ):
        paid = employee_factory(salary_structure_id=standard_structure.id)
        unassigned = employee_factory()
        leaver = employee_factory(salary_structure_id=standard_structure.id)
        EmployeeService(db_session, tenant_context).update_status(leaver.id, EmployeeStatus.EXITED)

        with caplog.at_level(logging.WARNING):
            run_service.process_run(june_run.id)

        assert [p.employee_id for p in payslip_service.list_for_run(june_run.id)] == [paid.id]
        assert unassigned.employee_code in caplog.text

    def test_breakdown_stored_on_payslip(
        self, run_service, payslip_service, standard_structure, employee_factory, june_run,
    ):
        employee_factory(salary_structure_id=standard_structure.id)
        run_service.process_run(june_run.id)
        payslip = payslip_service.list_for_run(june_run.id)[0]

        breakdown = payslip_service.get_breakdown(payslip.id)

        assert [i.code for i in breakdown.earnings] == ["BASIC", "HRA"]
        assert breakdown.net_pay == payslip.net_pay
        response = payslip_service.to_response(payslip)
        assert response.month == 6
        assert response.employee_name == "Test Employee1"

    def test_only_draft_runs_process(
        self, run_service, standard_structure, employee_factory, june_run,
    ):
        employee_factory(salary_structure_id=standard_structure.id)
        run_service.process_run(june_run.id)

        with pytest.raises(PayrollBusinessRuleError) as exc_info:
            run_service.process_run(june_run.id)

        assert exc_info.value.code == PayrollErrorCodes.INVALID_RUN_TRANSITION

    def test_failure_reverts_to_draft(
        self, db_session, run_service, standard_structure, employee_factory, june_run,
        monkeypatch,
    ):
        employee_factory(salary_structure_id=standard_structure.id)
        employee_factory(salary_structure_id=standard_structure.id)
        present = iter([20, 25])
        monkeypatch.setattr(run_service, "_present_days", lambda *args: next(present))

        with pytest.raises(InvalidAttendanceError):
            run_service.process_run(june_run.id)

        run = run_service.get_run(june_run.id)
        assert run.status == PayrollRunStatus.DRAFT
        assert run.processed_at is None
        assert db_session.query(Payslip).count() == 0

    def test_overdrawn_employee_skipped(
        self, run_service, payslip_service, structure_service, catalog,
        standard_structure, employee_factory, june_run, caplog,
    ):
        overdrawn = structure_service.create(SalaryStructureRequest(
            name="Overdrawn",
            components=[
                {"code": "BASIC", "rule": fixed("100.00")},
                {"code": "PT", "rule": fixed("200.00", prorate=False)},
            ],
        ))
        paid = employee_factory(salary_structure_id=standard_structure.id)
        skipped = employee_factory(salary_structure_id=overdrawn.id)

        with caplog.at_level(logging.WARNING):
            run = run_service.process_run(june_run.id)

        assert run.status == PayrollRunStatus.COMPLETED
        assert [p.employee_id for p in payslip_service.list_for_run(run.id)] == [paid.id]
        assert f"Skipping employee {skipped.employee_code}: deductions 200.00 exceed gross 100.00" \
            in caplog.text

    def test_run_claimed_by_another_worker(
        self, db_session, run_service, standard_structure, employee_factory, june_run,
    ):
        employee_factory(salary_structure_id=standard_structure.id)
        db_session.refresh(june_run)
        # Another session moves the run on without this session noticing
        db_session.execute(
            update(PayrollRun)
            .where(PayrollRun.id == june_run.id)
            .values(status=PayrollRunStatus.PROCESSING)
            .execution_options(synchronize_session=False)
        )
        assert june_run.status == PayrollRunStatus.DRAFT

        with pytest.raises(PayrollBusinessRuleError) as exc_info:
            run_service.process_run(june_run.id)

        assert exc_info.value.code == PayrollErrorCodes.INVALID_RUN_TRANSITION
        assert run_service.get_run(june_run.id).status == PayrollRunStatus.PROCESSING
        assert db_session.query(Payslip).count() == 0

    def test_failure_keeps_status_set_by_another_worker(
        self, db_session, run_service, standard_structure, employee_factory, june_run,
        monkeypatch,
    ):
        employee_factory(salary_structure_id=standard_structure.id)

        def completed_elsewhere(tenant_id, run):
            db_session.execute(
                update(PayrollRun)
                .where(PayrollRun.id == run.id)
                .values(status=PayrollRunStatus.COMPLETED)
                .execution_options(synchronize_session=False)
            )
            db_session.commit()
            raise RuntimeError("worker crashed")

        monkeypatch.setattr(run_service, "_generate_payslips", completed_elsewhere)

        with pytest.raises(RuntimeError):
            run_service.process_run(june_run.id)

        assert run_service.get_run(june_run.id).status == PayrollRunStatus.COMPLETED

    def test_negative_net_pay_when_allowed(
        self, run_service, payslip_service, structure_service, catalog,
        employee_factory, june_run, monkeypatch,
    ):
        monkeypatch.setattr(get_settings(), "payroll_allow_negative_net_pay", True)
        overdrawn = structure_service.create(SalaryStructureRequest(
            name="Overdrawn",
            components=[
                {"code": "BASIC", "rule": fixed("100.00")},
                {"code": "PT", "rule": fixed("200.00", prorate=False)},
            ],
        ))
        employee_factory(salary_structure_id=overdrawn.id)

        run_service.process_run(june_run.id)

        assert payslip_service.list_for_run(june_run.id)[0].net_pay == Decimal("-100.00")

    def test_summary(
        self, run_service, standard_structure, employee_factory, june_run,
    ):
        employee_factory(salary_structure_id=standard_structure.id)
        employee_factory(salary_structure_id=standard_structure.id)
        run_service.process_run(june_run.id)

        summary = run_service.summarize(run_service.get_run(june_run.id))

        assert summary.total_employees == 2
        assert summary.total_gross_pay == Decimal("8400.00")
        assert summary.total_net_pay == Decimal("6992.00")
        assert summary.month_year_display == "June 2024"


class TestRunTransitions:

    @pytest.fixture
    def completed_run(self, run_service, standard_structure, employee_factory, june_run):
        employee_factory(salary_structure_id=standard_structure.id)
        return run_service.process_run(june_run.id)

    def test_publish_completed_run(self, run_service, completed_run):
        run = run_service.publish_run(completed_run.id)

        assert run.status == PayrollRunStatus.PUBLISHED
        assert run.published_at is not None

    def test_publish_requires_completed(self, run_service, june_run):
        with pytest.raises(PayrollBusinessRuleError) as exc_info:
            run_service.publish_run(june_run.id)

        assert exc_info.value.code == PayrollErrorCodes.INVALID_RUN_TRANSITION

    def test_completed_run_cannot_be_rejected(self, run_service, completed_run):
        with pytest.raises(PayrollBusinessRuleError):
            run_service.reject_run(completed_run.id)

    def test_published_run_is_terminal(self, run_service, completed_run):
        run_service.publish_run(completed_run.id)

        with pytest.raises(PayrollBusinessRuleError):
            run_service.reject_run(completed_run.id)
        with pytest.raises(PayrollBusinessRuleError):
            run_service.publish_run(completed_run.id)

    def test_delete_draft(self, run_service, june_run):
        run_service.delete_run(june_run.id)

        with pytest.raises(PayrollNotFoundError):
            run_service.get_run(june_run.id)

    def test_delete_refused_after_processing(self, run_service, completed_run):
        with pytest.raises(PayrollBusinessRuleError):
            run_service.delete_run(completed_run.id)


class TestPayslipReads:

    def test_list_for_employee(
        self, run_service, payslip_service, standard_structure, employee_factory,
    ):
        employee = employee_factory(salary_structure_id=standard_structure.id)
        for month in (4, 5):
            run = run_service.create_run(PayrollRunRequest(month=month, year=2024))
            run_service.process_run(run.id)

        payslips = payslip_service.list_for_employee(employee.id, year=2024)

        assert [p.payroll_run.month for p in payslips] == [5, 4]
        assert payslip_service.list_for_employee(employee.id, year=2023) == []

    def test_list_for_unknown_run(self, payslip_service):
        with pytest.raises(PayrollNotFoundError):
            payslip_service.list_for_run(uuid.uuid4())

    def test_payslips_isolated_by_tenant(
        self, db_session, run_service, payslip_service, standard_structure,
        employee_factory, june_run, other_tenant_context,
    ):
        employee_factory(salary_structure_id=standard_structure.id)
        run_service.process_run(june_run.id)
        payslip = payslip_service.list_for_run(june_run.id)[0]

        other = PayslipService(db_session, other_tenant_context)

        with pytest.raises(PayrollNotFoundError):
            other.get(payslip.id)
