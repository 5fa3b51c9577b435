from enum import Enum


class SalaryComponentType(str, Enum):
    EARNING = "earning"
    DEDUCTION = "deduction"


class PercentBase(str, Enum):
    """What a percentage rule is applied to."""
    PRESENT_FRACTION = "present_fraction"
    GROSS = "gross"


class PayrollRunStatus(str, Enum):
    DRAFT = "draft"
    PROCESSING = "processing"
    COMPLETED = "completed"
    PUBLISHED = "published"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self in (PayrollRunStatus.PUBLISHED, PayrollRunStatus.REJECTED)


# Allowed payroll run transitions
RUN_TRANSITIONS = {
    PayrollRunStatus.DRAFT: {PayrollRunStatus.PROCESSING, PayrollRunStatus.REJECTED},
    PayrollRunStatus.PROCESSING: {
        PayrollRunStatus.COMPLETED,
        PayrollRunStatus.REJECTED,
        PayrollRunStatus.DRAFT,  # revert after a failed processing attempt
    },
    PayrollRunStatus.COMPLETED: {PayrollRunStatus.PUBLISHED},
    PayrollRunStatus.PUBLISHED: set(),
    PayrollRunStatus.REJECTED: set(),
}

# Supported payroll years
MIN_PAYROLL_YEAR = 2020
MAX_PAYROLL_YEAR = 2100
