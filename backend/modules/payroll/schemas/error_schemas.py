# backend/modules/payroll/schemas/error_schemas.py

"""
Error response schemas for structured error handling.
"""

from typing import Optional

from pydantic import BaseModel


class ErrorDetail(BaseModel):
    """Detailed error information"""

    field: Optional[str] = None
    message: str
    code: Optional[str] = None


class PayrollErrorCodes:
    """Centralized error codes for payroll module"""

    # Calculation input errors
    INVALID_PERIOD = "PAYROLL_INVALID_PERIOD"
    INVALID_ATTENDANCE = "PAYROLL_INVALID_ATTENDANCE"
    MALFORMED_STRUCTURE = "PAYROLL_MALFORMED_STRUCTURE"

    # Validation errors
    INVALID_DATA_FORMAT = "PAYROLL_INVALID_DATA_FORMAT"

    # Business logic errors
    DUPLICATE_RECORD = "PAYROLL_DUPLICATE_RECORD"
    RUN_ALREADY_EXISTS = "PAYROLL_RUN_ALREADY_EXISTS"
    INVALID_RUN_TRANSITION = "PAYROLL_INVALID_RUN_TRANSITION"
    COMPONENT_IN_USE = "PAYROLL_COMPONENT_IN_USE"
    STRUCTURE_IN_USE = "PAYROLL_STRUCTURE_IN_USE"

    # Database errors
    DATABASE_ERROR = "PAYROLL_DATABASE_ERROR"
    RECORD_NOT_FOUND = "PAYROLL_RECORD_NOT_FOUND"
