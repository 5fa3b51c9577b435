"""
Payroll calculator.

Turns a salary structure document plus the attendance figures for a period
into a payslip breakdown. Pure functions only: no database, no clock and no
shared state, so the same inputs always produce cent-identical output.

Structure document lines look like::

    {"code": "BASIC", "name": "Basic Salary", "type": "earning",
     "rule": {"kind": "fixed", "amount": "3000.00", "prorate": true}}
    {"code": "HRA", "name": "House Rent", "type": "earning",
     "rule": {"kind": "percent_of", "base": "present_fraction",
              "rate": "0.40", "of": "BASIC"}}
    {"code": "PF", "name": "Provident Fund", "type": "deduction",
     "rule": {"kind": "percent_of", "base": "gross", "rate": "0.12"}}
"""

from collections.abc import Iterable, Mapping
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Dict, List, Sequence, Union

from pydantic import ValidationError

from ..enums.payroll_enums import PercentBase, SalaryComponentType
from ..exceptions import (
    InvalidAttendanceError,
    InvalidPeriodError,
    MalformedStructureError,
)
from ..schemas.payslip_schemas import PayslipBreakdown, PayslipLineItem
from ..schemas.salary_schemas import (
    FixedAmountRule,
    PercentOfRule,
    StructureComponent,
)

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")

StructureInput = Sequence[Union[StructureComponent, Mapping]]


def round_money(value: Decimal) -> Decimal:
    """Round to cents, half away from zero."""
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def _fmt(value: Decimal) -> str:
    return f"{value:.2f}"


def _to_decimal(value, error) -> Decimal:
    if isinstance(value, bool):
        raise error
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise error


def _check_period(working_days, present_days) -> tuple:
    working = _to_decimal(working_days, InvalidPeriodError(working_days))
    if not working.is_finite() or working <= 0:
        raise InvalidPeriodError(working_days)

    present = _to_decimal(
        present_days, InvalidAttendanceError(present_days, working_days)
    )
    if not present.is_finite() or present < 0 or present > working:
        raise InvalidAttendanceError(present_days, working_days)
    return working, present


def _validation_reason(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first['msg']}" if location else first["msg"]


def parse_structure(structure: StructureInput) -> List[StructureComponent]:
    """Validate a structure document and return its components in order.

    Raises ``MalformedStructureError`` naming the offending component when a
    line cannot be evaluated. Nothing is computed on a malformed structure.
    """
    if isinstance(structure, (str, bytes, Mapping)) or not isinstance(
        structure, Iterable
    ):
        raise MalformedStructureError(None, "structure must be a list of components")

    components: List[StructureComponent] = []
    for raw in structure:
        if isinstance(raw, StructureComponent):
            components.append(raw)
            continue
        if not isinstance(raw, Mapping):
            raise MalformedStructureError(None, "component must be an object")
        code = raw.get("code")
        if "rule" not in raw or raw["rule"] is None:
            raise MalformedStructureError(code, "rule is missing")
        try:
            components.append(StructureComponent.model_validate(raw))
        except ValidationError as exc:
            raise MalformedStructureError(code, _validation_reason(exc)) from exc

    seen = set()
    for component in components:
        if component.code in seen:
            raise MalformedStructureError(component.code, "duplicate component code")
        seen.add(component.code)

    fixed_earnings = _fixed_earning_amounts(components)
    for component in components:
        rule = component.rule
        if not isinstance(rule, PercentOfRule):
            continue
        if rule.base == PercentBase.GROSS:
            if component.type == SalaryComponentType.EARNING:
                raise MalformedStructureError(
                    component.code, "gross base is only valid for deductions"
                )
            if rule.of is not None:
                raise MalformedStructureError(
                    component.code, "'of' cannot be combined with the gross base"
                )
        elif rule.of is not None:
            if rule.of not in seen:
                raise MalformedStructureError(
                    component.code, f"references missing component {rule.of}"
                )
            if rule.of not in fixed_earnings:
                raise MalformedStructureError(
                    component.code, f"{rule.of} is not a fixed earning"
                )

    return components


def _fixed_earning_amounts(components: List[StructureComponent]) -> Dict[str, Decimal]:
    return {
        c.code: c.rule.amount
        for c in components
        if c.type == SalaryComponentType.EARNING and isinstance(c.rule, FixedAmountRule)
    }


def _line(
    component: StructureComponent,
    working: Decimal,
    present: Decimal,
    fixed_earnings: Dict[str, Decimal],
    gross: Decimal = ZERO,
) -> PayslipLineItem:
    rule = component.rule

    if isinstance(rule, FixedAmountRule):
        if rule.prorate:
            amount = round_money(rule.amount * present / working)
            note = f"({_fmt(rule.amount)} / {working} days) × {present} days"
        else:
            amount = round_money(rule.amount)
            note = f"Fixed {_fmt(rule.amount)}"
    elif rule.base == PercentBase.GROSS:
        amount = round_money(rule.rate * gross)
        note = f"{_fmt(rule.rate * 100)}% of gross {_fmt(gross)}"
    else:
        if rule.of is not None:
            base = fixed_earnings[rule.of]
            base_label = rule.of
        else:
            base = sum(fixed_earnings.values(), ZERO)
            base_label = "fixed earnings"
        monthly = rule.rate * base
        amount = round_money(monthly * present / working)
        note = (
            f"{_fmt(rule.rate * 100)}% of {base_label} {_fmt(base)} = {_fmt(monthly)}, "
            f"pro-rated: ({_fmt(monthly)} / {working}) × {present}"
        )

    return PayslipLineItem(
        code=component.code,
        name=component.name,
        amount=amount,
        calculation_note=note,
    )


def compute_breakdown(structure: StructureInput, working_days, present_days) -> PayslipBreakdown:
    """Compute earnings, deductions and net pay for one employee-period.

    Net pay is never clamped. When deductions exceed gross the breakdown is
    returned with a negative ``net_pay`` and ``requires_override`` set; the
    caller decides whether such a payslip may be issued.
    """
    working, present = _check_period(working_days, present_days)
    components = parse_structure(structure)
    fixed_earnings = _fixed_earning_amounts(components)

    earnings = [
        _line(c, working, present, fixed_earnings)
        for c in components
        if c.type == SalaryComponentType.EARNING
    ]
    gross = sum((line.amount for line in earnings), ZERO)

    deductions = [
        _line(c, working, present, fixed_earnings, gross)
        for c in components
        if c.type == SalaryComponentType.DEDUCTION
    ]
    total_deductions = sum((line.amount for line in deductions), ZERO)

    return PayslipBreakdown(
        earnings=earnings,
        deductions=deductions,
        gross_earnings=gross,
        total_deductions=total_deductions,
        net_pay=gross - total_deductions,
    )


def compute_gross(structure: StructureInput, working_days, present_days) -> Decimal:
    """Gross earnings for the period; identical to the breakdown's gross."""
    working, present = _check_period(working_days, present_days)
    components = parse_structure(structure)
    fixed_earnings = _fixed_earning_amounts(components)
    return sum(
        (
            _line(c, working, present, fixed_earnings).amount
            for c in components
            if c.type == SalaryComponentType.EARNING
        ),
        ZERO,
    )
