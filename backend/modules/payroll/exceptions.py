# backend/modules/payroll/exceptions.py

"""
Custom exceptions for payroll module.
"""

import logging
from typing import Any, List, Optional

from fastapi import Request
from fastapi.responses import JSONResponse

from .schemas.error_schemas import ErrorDetail, PayrollErrorCodes

logger = logging.getLogger(__name__)


class PayrollException(Exception):
    """Base exception for payroll module"""
    def __init__(
        self,
        message: str,
        code: str = PayrollErrorCodes.DATABASE_ERROR,
        details: Optional[List[ErrorDetail]] = None,
        status_code: int = 400
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or []
        self.status_code = status_code


class PayrollCalculationError(PayrollException):
    """Error during payroll calculations"""
    def __init__(self, message: str, code: str = PayrollErrorCodes.INVALID_DATA_FORMAT,
                 details: Optional[List[ErrorDetail]] = None):
        super().__init__(
            message=message,
            code=code,
            details=details,
            status_code=400
        )


class InvalidPeriodError(PayrollCalculationError):
    """Working days for the period are not positive"""
    def __init__(self, working_days: Any):
        super().__init__(
            f"Working days must be greater than 0 (got {working_days})",
            code=PayrollErrorCodes.INVALID_PERIOD,
            details=[ErrorDetail(field="working_days", message="Must be greater than 0")],
        )
        self.working_days = working_days


class InvalidAttendanceError(PayrollCalculationError):
    """Present days outside ``0..working_days``"""
    def __init__(self, present_days: Any, working_days: Any):
        super().__init__(
            f"Present days must be between 0 and {working_days} (got {present_days})",
            code=PayrollErrorCodes.INVALID_ATTENDANCE,
            details=[ErrorDetail(field="present_days", message="Out of range")],
        )
        self.present_days = present_days
        self.working_days = working_days


class MalformedStructureError(PayrollCalculationError):
    """Salary structure configuration cannot be evaluated"""
    def __init__(self, component_code: Optional[str], reason: str):
        code_label = component_code or "<unknown>"
        super().__init__(
            f"Component {code_label}: {reason}",
            code=PayrollErrorCodes.MALFORMED_STRUCTURE,
            details=[ErrorDetail(field=code_label, message=reason,
                                 code=PayrollErrorCodes.MALFORMED_STRUCTURE)],
        )
        self.component_code = component_code
        self.reason = reason


class PayrollNotFoundError(PayrollException):
    """Resource not found error"""
    def __init__(self, resource: str, identifier: Any):
        super().__init__(
            message=f"{resource} with identifier {identifier} not found",
            code=PayrollErrorCodes.RECORD_NOT_FOUND,
            status_code=404
        )


class PayrollBusinessRuleError(PayrollException):
    """Business rule violation errors"""
    def __init__(self, message: str, code: str, details: Optional[List[ErrorDetail]] = None,
                 status_code: int = 400):
        super().__init__(
            message=message,
            code=code,
            details=details,
            status_code=status_code
        )


async def handle_payroll_exception(request: Request, exc: PayrollException) -> JSONResponse:
    """Convert payroll errors to the standard API error body"""
    logger.warning("%s at %s: %s", exc.__class__.__name__, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.message,
            "error_code": exc.code,
            "errors": [d.model_dump() for d in exc.details],
            "path": str(request.url.path),
        },
    )
