"""
Monthly payroll runs.

A run moves draft -> processing -> completed -> published. Processing
computes one payslip per active employee with a salary structure; any failure
discards the payslips and returns the run to draft. Employees whose
deductions exceed gross are skipped unless negative net pay is allowed.
"""

import logging
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.config import get_settings
from core.tenant_context import TenantContext
from modules.employees.enums.employee_enums import EmployeeStatus
from modules.employees.models.employee_models import Employee
from modules.employees.repositories.employee_repository import EmployeeRepository
from modules.employees.services.attendance_service import (
    AttendanceService,
    calculate_working_days,
)

from ..enums.payroll_enums import RUN_TRANSITIONS, PayrollRunStatus
from ..exceptions import PayrollBusinessRuleError, PayrollNotFoundError
from ..models.payroll_models import PayrollRun, Payslip
from ..repositories.payroll_repository import PayrollRunRepository, PayslipRepository
from ..schemas.error_schemas import PayrollErrorCodes
from ..schemas.payroll_run_schemas import PayrollRunRequest, PayrollRunResponse
from . import payroll_calculator
from .salary_structure_service import SalaryStructureService

logger = logging.getLogger(__name__)


class PayrollRunService:

    def __init__(self, db: Session, tenant: TenantContext):
        self.db = db
        self.tenant = tenant
        self.settings = get_settings()
        self.runs = PayrollRunRepository(db)
        self.payslips = PayslipRepository(db)
        self.employees = EmployeeRepository(db)
        self.attendance = AttendanceService(db, tenant)
        self.structures = SalaryStructureService(db, tenant)

    def list_runs(self, year: Optional[int] = None) -> List[PayrollRun]:
        return self.runs.list_runs(self.tenant.require(), year)

    def get_run(self, run_id: uuid.UUID) -> PayrollRun:
        run = self.runs.get(self.tenant.require(), run_id)
        if run is None:
            raise PayrollNotFoundError("Payroll run", run_id)
        return run

    def create_run(self, data: PayrollRunRequest) -> PayrollRun:
        tenant_id = self.tenant.require()
        if self.runs.find_active_for_period(tenant_id, data.month, data.year):
            raise self._run_exists(data.month, data.year)

        run = PayrollRun(month=data.month, year=data.year, status=PayrollRunStatus.DRAFT)
        try:
            self.runs.add(tenant_id, run)
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise self._run_exists(data.month, data.year) from exc

        self.db.refresh(run)
        logger.info("Created payroll run %s for tenant %s", run.month_year_display, tenant_id)
        return run

    def process_run(self, run_id: uuid.UUID) -> PayrollRun:
        tenant_id = self.tenant.require()
        run = self.get_run(run_id)
        if run.status != PayrollRunStatus.DRAFT:
            raise self._invalid_transition(run, PayrollRunStatus.PROCESSING)

        claimed = self._move_status(
            tenant_id, run, PayrollRunStatus.DRAFT, PayrollRunStatus.PROCESSING
        )
        self.db.commit()
        if not claimed:
            raise self._invalid_transition(run, PayrollRunStatus.PROCESSING)
        logger.info("Processing payroll run %s", run.month_year_display)

        try:
            count = self._generate_payslips(tenant_id, run)
            run.status = PayrollRunStatus.COMPLETED
            run.processed_at = datetime.utcnow()
            self.db.commit()
        except Exception:
            logger.exception("Payroll run %s failed; reverting to draft", run_id)
            self.db.rollback()
            self._move_status(tenant_id, run, PayrollRunStatus.PROCESSING, PayrollRunStatus.DRAFT)
            self.db.commit()
            raise

        logger.info("Payroll run %s completed with %d payslips", run.month_year_display, count)
        return run

    def publish_run(self, run_id: uuid.UUID) -> PayrollRun:
        run = self.get_run(run_id)
        self._transition(run, PayrollRunStatus.PUBLISHED)
        run.published_at = datetime.utcnow()
        self.db.commit()
        logger.info("Published payroll run %s", run.month_year_display)
        return run

    def reject_run(self, run_id: uuid.UUID) -> PayrollRun:
        run = self.get_run(run_id)
        self._transition(run, PayrollRunStatus.REJECTED)
        self.db.commit()
        logger.info("Rejected payroll run %s", run.month_year_display)
        return run

    def delete_run(self, run_id: uuid.UUID) -> None:
        tenant_id = self.tenant.require()
        run = self.get_run(run_id)
        if run.status != PayrollRunStatus.DRAFT:
            raise PayrollBusinessRuleError(
                f"Only draft payroll runs can be deleted (run is {run.status.value})",
                code=PayrollErrorCodes.INVALID_RUN_TRANSITION,
                status_code=409,
            )
        self.runs.delete(tenant_id, run)
        self.db.commit()

    def summarize(self, run: PayrollRun) -> PayrollRunResponse:
        count, total_gross, total_net = self.payslips.totals_for_run(run.tenant_id, run.id)
        return PayrollRunResponse(
            id=run.id,
            tenant_id=run.tenant_id,
            month=run.month,
            year=run.year,
            month_year_display=run.month_year_display,
            status=run.status,
            processed_at=run.processed_at,
            published_at=run.published_at,
            total_employees=count,
            total_gross_pay=Decimal(str(total_gross)),
            total_net_pay=Decimal(str(total_net)),
            created_at=run.created_at,
            updated_at=run.updated_at,
        )

    def _generate_payslips(self, tenant_id: uuid.UUID, run: PayrollRun) -> int:
        working_days = calculate_working_days(run.year, run.month)
        documents: Dict[uuid.UUID, List[Dict]] = {}
        count = 0

        for employee in self.employees.list_by_status(tenant_id, EmployeeStatus.ACTIVE):
            if employee.salary_structure_id is None:
                logger.warning(
                    "Skipping employee %s: no salary structure assigned",
                    employee.employee_code,
                )
                continue

            if employee.salary_structure_id not in documents:
                documents[employee.salary_structure_id] = self.structures.resolve_document(
                    employee.salary_structure
                )

            present_days = self._present_days(employee, run, working_days)
            breakdown = payroll_calculator.compute_breakdown(
                documents[employee.salary_structure_id],
                working_days,
                present_days,
            )
            if breakdown.requires_override and not self.settings.payroll_allow_negative_net_pay:
                logger.warning(
                    "Skipping employee %s: deductions %s exceed gross %s",
                    employee.employee_code,
                    breakdown.total_deductions,
                    breakdown.gross_earnings,
                )
                continue

            self.payslips.add(tenant_id, Payslip(
                payroll_run_id=run.id,
                employee_id=employee.id,
                working_days=working_days,
                present_days=present_days,
                gross_earnings=breakdown.gross_earnings,
                total_deductions=breakdown.total_deductions,
                net_pay=breakdown.net_pay,
                breakdown=breakdown.model_dump(mode="json"),
            ))
            count += 1

        return count

    def _present_days(self, employee: Employee, run: PayrollRun, working_days: int) -> int:
        present_days = self.attendance.count_present_days(employee.id, run.year, run.month)
        if present_days is not None:
            return present_days
        if self.settings.payroll_default_full_attendance:
            logger.warning(
                "No attendance records for employee %s in %s; assuming full attendance",
                employee.employee_code, run.month_year_display,
            )
            return working_days
        return 0

    def _move_status(
        self,
        tenant_id: uuid.UUID,
        run: PayrollRun,
        expected: PayrollRunStatus,
        target: PayrollRunStatus,
    ) -> bool:
        """Compare-and-set on the run status; False when another writer got there first."""
        result = self.db.execute(
            update(PayrollRun)
            .where(
                PayrollRun.id == run.id,
                PayrollRun.tenant_id == tenant_id,
                PayrollRun.status == expected,
            )
            .values(status=target)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def _transition(self, run: PayrollRun, target: PayrollRunStatus) -> None:
        if target not in RUN_TRANSITIONS[run.status]:
            raise self._invalid_transition(run, target)
        run.status = target

    @staticmethod
    def _invalid_transition(run: PayrollRun, target: PayrollRunStatus) -> PayrollBusinessRuleError:
        return PayrollBusinessRuleError(
            f"Cannot move payroll run from {run.status.value} to {target.value}",
            code=PayrollErrorCodes.INVALID_RUN_TRANSITION,
            status_code=409,
        )

    @staticmethod
    def _run_exists(month: int, year: int) -> PayrollBusinessRuleError:
        return PayrollBusinessRuleError(
            f"A payroll run already exists for {month:02d}/{year}",
            code=PayrollErrorCodes.RUN_ALREADY_EXISTS,
            status_code=409,
        )
