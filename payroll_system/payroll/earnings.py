import logging
from dataclasses import dataclass
from typing import Tuple

from payroll_system.payroll.records import LineItem

log = logging.getLogger(__name__)

OVERTIME_PREMIUM = 1.25  # 125% of the hourly rate


@dataclass(frozen=True)
class EarningsBreakdown:
    days_worked: int
    basic_pay: float
    overtime_hours: float
    overtime_pay: float
    rice_subsidy: float
    phone_allowance: float
    clothing_allowance: float
    warnings: Tuple[str, ...] = ()

    @property
    def total(self):
        """Basic pay plus overtime plus fixed allowances."""
        return (self.basic_pay + self.overtime_pay + self.rice_subsidy
                + self.phone_allowance + self.clothing_allowance)

    def line_items(self):
        return (
            LineItem("BASIC", "Basic Pay", self.basic_pay),
            LineItem("OVERTIME", "Overtime Pay", self.overtime_pay),
            LineItem("RICE", "Rice Subsidy", self.rice_subsidy),
            LineItem("PHONE", "Phone Allowance", self.phone_allowance),
            LineItem("CLOTHING", "Clothing Allowance", self.clothing_allowance),
        )


def _in_period(day, period_start, period_end):
    return day is not None and period_start <= day <= period_end


def count_days_worked(attendance, period_start, period_end):
    """Each attendance record with a login time counts as one day, partial or not."""
    return sum(
        1 for record in attendance
        if record.login_time is not None and _in_period(record.date, period_start, period_end)
    )


def total_overtime_hours(overtime, period_start, period_end):
    return sum(
        record.hours for record in overtime
        if _in_period(record.date, period_start, period_end)
    )


def compute_earnings(attendance, overtime, compensation, rates, period_start, period_end):
    """Turn attendance, overtime and fixed allowances into earnings components."""
    warnings = []

    days_worked = count_days_worked(attendance, period_start, period_end)
    basic_pay = days_worked * rates.daily_rate

    in_period_overtime = [o for o in overtime if _in_period(o.date, period_start, period_end)]
    overtime_hours = sum(o.hours for o in in_period_overtime)
    overtime_pay = overtime_hours * rates.hourly_rate * OVERTIME_PREMIUM

    for record in in_period_overtime:
        if record.hours > 0 and not record.is_within_practical_limit:
            message = f"Overtime of {record.hours:g}h on {record.date.isoformat()} exceeds the practical daily limit"
            log.warning(message)
            warnings.append(message)

    if compensation is None:
        message = "No compensation profile; allowances default to 0"
        log.warning(message)
        warnings.append(message)
        rice = phone = clothing = 0.0
    else:
        rice = compensation.rice_subsidy or 0.0
        phone = compensation.phone_allowance or 0.0
        clothing = compensation.clothing_allowance or 0.0

    log.debug("Earnings: %s days worked, %.2f overtime hours", days_worked, overtime_hours)

    return EarningsBreakdown(
        days_worked=days_worked,
        basic_pay=basic_pay,
        overtime_hours=overtime_hours,
        overtime_pay=overtime_pay,
        rice_subsidy=rice,
        phone_allowance=phone,
        clothing_allowance=clothing,
        warnings=tuple(warnings),
    )
