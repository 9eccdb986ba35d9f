import math
from dataclasses import dataclass

from payroll_system.payroll.errors import InvalidPosition, Outcome

WORKING_DAYS_PER_MONTH = 22
HOURS_PER_DAY = 8


@dataclass(frozen=True)
class PayRates:
    monthly_rate: float
    daily_rate: float
    hourly_rate: float


def resolve_rates(position) -> Outcome:
    """Derive daily and hourly rates from a position's monthly salary."""
    if position is None:
        return Outcome.failure(InvalidPosition("Position could not be resolved"))

    monthly_salary = position.monthly_salary
    if monthly_salary is None or not math.isfinite(monthly_salary) or monthly_salary < 0:
        return Outcome.failure(InvalidPosition(
            f"Position {position.position_id} has an invalid monthly salary",
            position_id=position.position_id,
            monthly_salary=monthly_salary,
        ))

    daily_rate = monthly_salary / WORKING_DAYS_PER_MONTH
    hourly_rate = daily_rate / HOURS_PER_DAY
    return Outcome.success(PayRates(monthly_salary, daily_rate, hourly_rate))
