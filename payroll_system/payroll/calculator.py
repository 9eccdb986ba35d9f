"""
Payroll assembler.

``PayrollCalculator.calculate_payroll`` drives one employee's payroll for one
period through a fixed sequence of states::

    INITIALIZED -> RATES_RESOLVED -> EARNINGS_COMPUTED -> DEDUCTIONS_COMPUTED
        -> CONTRIBUTIONS_RESOLVED -> ASSEMBLED -> VALIDATED

Each stage reads from the injected providers and returns an ``Outcome``. The
first failing stage stops the run; its error records the state the run was in
and no partial result is returned. Providers are only ever read, and nothing
is shared between calls, so separate calculators may run side by side.
"""
import logging
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Any, List, Optional

from payroll_system.payroll.deductions import compute_deductions
from payroll_system.payroll.earnings import compute_earnings
from payroll_system.payroll.errors import (
    InvalidInput, InvalidPosition, NotFound, Outcome, ValidationFailure, call_provider,
)
from payroll_system.payroll.rates import resolve_rates
from payroll_system.payroll.records import LineItem, PayrollResult
from payroll_system.payroll.statutory import compute_statutory_amounts

log = logging.getLogger(__name__)

NET_PAY_TOLERANCE = 1e-6


class PipelineState(Enum):
    INITIALIZED = "initialized"
    RATES_RESOLVED = "rates_resolved"
    EARNINGS_COMPUTED = "earnings_computed"
    DEDUCTIONS_COMPUTED = "deductions_computed"
    CONTRIBUTIONS_RESOLVED = "contributions_resolved"
    ASSEMBLED = "assembled"
    VALIDATED = "validated"


@dataclass
class PayrollRun:
    """Working state of a single calculation."""
    employee_id: int
    period_start: date
    period_end: date
    state: PipelineState = PipelineState.INITIALIZED
    employee: Any = None
    position: Any = None
    rates: Any = None
    attendance: List[Any] = field(default_factory=list)
    earnings: Any = None
    deductions: Any = None
    statutory: Any = None
    result: Optional[PayrollResult] = None
    warnings: List[str] = field(default_factory=list)


def validate_request(employee_id, period_start, period_end):
    """Reject bad input before any provider is touched. Returns an error or None."""
    if isinstance(employee_id, bool) or not isinstance(employee_id, int):
        return InvalidInput("Employee ID must be an integer", employee_id=employee_id)
    if employee_id <= 0:
        return InvalidInput("Employee ID must be positive", employee_id=employee_id)
    if period_start is None or period_end is None:
        return InvalidInput("Pay period start and end dates are required")
    if not isinstance(period_start, date) or not isinstance(period_end, date):
        return InvalidInput("Pay period bounds must be dates")
    if period_end < period_start:
        return InvalidInput(
            "Pay period end cannot be before period start",
            period_start=period_start.isoformat(),
            period_end=period_end.isoformat(),
        )
    return None


def _as_date(value):
    if isinstance(value, datetime):
        return value.date()
    return value


class PayrollCalculator:

    def __init__(self, employees, positions, attendance, leave, overtime,
                 compensation, contributions, warning_sink=None):
        self.employees = employees
        self.positions = positions
        self.attendance = attendance
        self.leave = leave
        self.overtime = overtime
        self.compensation = compensation
        self.contributions = contributions
        self.warning_sink = warning_sink

    @classmethod
    def from_store(cls, store, warning_sink=None, employees=None):
        """Wire one object implementing every provider (optionally overriding the employee lookup)."""
        return cls(
            employees=employees if employees is not None else store,
            positions=store,
            attendance=store,
            leave=store,
            overtime=store,
            compensation=store,
            contributions=store,
            warning_sink=warning_sink,
        )

    def close(self):
        closed = set()
        for provider in (self.employees, self.positions, self.attendance, self.leave,
                         self.overtime, self.compensation, self.contributions):
            if id(provider) in closed or not hasattr(provider, 'close'):
                continue
            closed.add(id(provider))
            provider.close()

    # =========================================================
    # Public entry points
    # =========================================================
    def calculate_payroll(self, employee_id, period_start, period_end) -> Outcome:
        """Compute one employee's payroll for an inclusive pay period."""
        period_start = _as_date(period_start)
        period_end = _as_date(period_end)

        error = validate_request(employee_id, period_start, period_end)
        if error is not None:
            error.at(PipelineState.INITIALIZED)
            log.error("Rejected payroll request for employee %r: %s", employee_id, error.message)
            return Outcome.failure(error)

        run = PayrollRun(employee_id, period_start, period_end)
        stages = (
            (PipelineState.RATES_RESOLVED, self._resolve_rates),
            (PipelineState.EARNINGS_COMPUTED, self._compute_earnings),
            (PipelineState.DEDUCTIONS_COMPUTED, self._compute_deductions),
            (PipelineState.CONTRIBUTIONS_RESOLVED, self._resolve_contributions),
            (PipelineState.ASSEMBLED, self._assemble),
            (PipelineState.VALIDATED, self._validate),
        )
        for next_state, stage in stages:
            outcome = stage(run)
            if not outcome.ok:
                error = outcome.error.at(run.state)
                log.error(
                    "Payroll for employee %s halted at %s: %s",
                    employee_id, run.state.value, error.message,
                )
                return Outcome.failure(error)
            run.state = next_state

        log.info(
            "Calculated payroll for employee %s (%s to %s): gross %.2f, net %.2f",
            employee_id, period_start, period_end, run.result.gross_pay, run.result.net_pay,
        )
        return Outcome.success(run.result)

    def calculate_or_raise(self, employee_id, period_start, period_end):
        return self.calculate_payroll(employee_id, period_start, period_end).unwrap()

    def recalculate(self, result) -> Outcome:
        """Recompute a previous result from current provider data; the caller swaps it in."""
        return self.calculate_payroll(result.employee_id, result.period_start, result.period_end)

    # =========================================================
    # Stages
    # =========================================================
    def _warn(self, run, message):
        log.warning("Employee %s: %s", run.employee_id, message)
        run.warnings.append(message)
        if self.warning_sink is not None:
            self.warning_sink(run.employee_id, message)

    def _resolve_rates(self, run):
        outcome = call_provider("EmployeeProvider", self.employees.get_employee, run.employee_id)
        if not outcome.ok:
            return outcome
        employee = outcome.value
        if employee is None:
            return Outcome.failure(NotFound(f"Employee {run.employee_id} not found", employee_id=run.employee_id))
        if employee.position_id is None:
            return Outcome.failure(InvalidPosition(
                f"Employee {run.employee_id} has no position", employee_id=run.employee_id))
        run.employee = employee

        outcome = call_provider("PositionProvider", self.positions.get_position, employee.position_id)
        if not outcome.ok:
            return outcome
        if outcome.value is None:
            return Outcome.failure(InvalidPosition(
                f"Position {employee.position_id} not found", position_id=employee.position_id))
        run.position = outcome.value

        outcome = resolve_rates(run.position)
        if outcome.ok:
            run.rates = outcome.value
        return outcome

    def _compute_earnings(self, run):
        period = (run.employee_id, run.period_start, run.period_end)

        outcome = call_provider("AttendanceProvider", self.attendance.get_attendance, *period)
        if not outcome.ok:
            return outcome
        run.attendance = list(outcome.value or [])

        outcome = call_provider("OvertimeProvider", self.overtime.get_overtime, *period)
        if not outcome.ok:
            return outcome
        overtime = list(outcome.value or [])

        outcome = call_provider("CompensationProvider", self.compensation.get_compensation_profile, run.employee_id)
        if not outcome.ok:
            return outcome
        compensation = outcome.value

        run.earnings = compute_earnings(
            run.attendance, overtime, compensation, run.rates, run.period_start, run.period_end)
        for message in run.earnings.warnings:
            # already logged by the aggregator
            run.warnings.append(message)
            if self.warning_sink is not None:
                self.warning_sink(run.employee_id, message)
        return Outcome.success(run.earnings)

    def _compute_deductions(self, run):
        outcome = call_provider(
            "LeaveProvider", self.leave.get_approved_leave,
            run.employee_id, run.period_start, run.period_end,
        )
        if not outcome.ok:
            return outcome

        run.deductions = compute_deductions(
            run.attendance, list(outcome.value or []), run.rates, run.period_start, run.period_end)
        return Outcome.success(run.deductions)

    def _resolve_contributions(self, run):
        outcome = call_provider(
            "ContributionProvider", self.contributions.get_contribution_profile, run.employee_id)
        if not outcome.ok:
            return outcome
        profile = outcome.value
        if profile is None:
            self._warn(run, "No contribution profile; statutory amounts computed from the tables")

        run.statutory = compute_statutory_amounts(run.rates.monthly_rate, profile)
        return Outcome.success(run.statutory)

    def _assemble(self, run):
        rates, earnings, deductions, statutory = run.rates, run.earnings, run.deductions, run.statutory

        result = PayrollResult(
            employee_id=run.employee_id,
            period_start=run.period_start,
            period_end=run.period_end,
            monthly_rate=rates.monthly_rate,
            daily_rate=rates.daily_rate,
            hourly_rate=rates.hourly_rate,
            days_worked=earnings.days_worked,
            overtime_hours=earnings.overtime_hours,
            unpaid_leave_count=deductions.unpaid_leave_count,
            gross_earnings=earnings.basic_pay,
            overtime_pay=earnings.overtime_pay,
            rice_subsidy=earnings.rice_subsidy,
            phone_allowance=earnings.phone_allowance,
            clothing_allowance=earnings.clothing_allowance,
            late_deduction=deductions.late_deduction,
            undertime_deduction=deductions.undertime_deduction,
            unpaid_leave_deduction=deductions.unpaid_leave_deduction,
            sss=statutory.sss,
            philhealth=statutory.philhealth,
            pagibig=statutory.pagibig,
            tax=statutory.tax,
            earnings=earnings.line_items(),
            deductions=deductions.line_items() + (
                LineItem("SSS", "SSS Contribution", statutory.sss),
                LineItem("PHILHEALTH", "PhilHealth Contribution", statutory.philhealth),
                LineItem("PAGIBIG", "Pag-IBIG Contribution", statutory.pagibig),
                LineItem("TAX", "Withholding Tax", statutory.tax),
            ),
            warnings=tuple(run.warnings),
        )
        run.result = result.recompute()
        return Outcome.success(run.result)

    def _validate(self, run):
        result = run.result
        problems = []

        if result.employee_id <= 0:
            problems.append("employee_id must be positive")
        if result.period_start is None or result.period_end is None:
            problems.append("pay period is incomplete")
        elif result.period_end < result.period_start:
            problems.append("period_end is before period_start")
        for name in ("gross_pay", "total_deductions"):
            amount = getattr(result, name)
            if not math.isfinite(amount):
                problems.append(f"{name} is not a finite number")
            elif amount < 0:
                problems.append(f"{name} is negative")
        if result.days_worked < 0:
            problems.append("days_worked is negative")
        for item in result.earnings + result.deductions:
            if not math.isfinite(item.amount):
                problems.append(f"{item.code} amount is not a finite number")
            elif item.amount < 0:
                problems.append(f"{item.code} amount is negative")
        if not math.isfinite(result.net_pay):
            problems.append("net_pay is not a finite number")
        elif abs(result.net_pay - (result.gross_pay - result.total_deductions)) > NET_PAY_TOLERANCE:
            problems.append("net_pay does not equal gross_pay - total_deductions")

        if problems:
            return Outcome.failure(ValidationFailure(
                "Payroll result failed validation: " + "; ".join(problems),
                problems=problems,
            ))

        if result.net_pay < 0:
            self._warn(run, f"Net pay is negative ({result.net_pay:.2f})")
            run.result = replace(result, warnings=tuple(run.warnings))
        return Outcome.success(run.result)


# =========================================================
# Batch runs
# =========================================================
def calculate_batch(calculator_factory, employee_ids, period_start, period_end, max_workers=4):
    """
    Calculate several employees' payrolls in parallel.

    ``calculator_factory`` is called once per employee so every calculation
    owns its provider handles; the calculator is closed afterwards. Returns
    ``{employee_id: Outcome}`` in the order the ids were given; a repeated id is
    calculated once.
    """
    def run_one(employee_id):
        calculator = calculator_factory()
        try:
            return calculator.calculate_payroll(employee_id, period_start, period_end)
        finally:
            calculator.close()

    employee_ids = list(dict.fromkeys(employee_ids))
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        outcomes = list(executor.map(run_one, employee_ids))

    failed = sum(1 for outcome in outcomes if not outcome.ok)
    log.info("Batch payroll for %s employees finished, %s failed", len(employee_ids), failed)
    return dict(zip(employee_ids, outcomes))
