"""
Time-based and leave-based deductions.

Lateness is measured from the nominal 08:00 start, but only once the login is
past the 08:15 grace threshold: a login at 08:15:00 costs nothing, a login at
08:16 costs sixteen minutes. Undertime is measured against the 17:00 end.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, time

from payroll_system.payroll.records import LineItem

log = logging.getLogger(__name__)

SHIFT_START = time(8, 0)
LATE_GRACE_THRESHOLD = time(8, 15)
SHIFT_END = time(17, 0)


@dataclass(frozen=True)
class DeductionBreakdown:
    late_minutes: float
    late_deduction: float
    undertime_minutes: float
    undertime_deduction: float
    unpaid_leave_count: int
    unpaid_leave_deduction: float

    @property
    def total(self):
        return self.late_deduction + self.undertime_deduction + self.unpaid_leave_deduction

    def line_items(self):
        return (
            LineItem("LATE", "Late", self.late_deduction),
            LineItem("UNDERTIME", "Undertime", self.undertime_deduction),
            LineItem("UNPAID_LEAVE", "Unpaid Leave", self.unpaid_leave_deduction),
        )


def _minutes_between(day, earlier, later):
    return (datetime.combine(day, later) - datetime.combine(day, earlier)).total_seconds() / 60


def _in_period(day, period_start, period_end):
    return day is not None and period_start <= day <= period_end


def minutes_late(record):
    if record.login_time is None or record.login_time <= LATE_GRACE_THRESHOLD:
        return 0.0
    return _minutes_between(record.date, SHIFT_START, record.login_time)


def minutes_short(record):
    if record.logout_time is None or record.logout_time >= SHIFT_END:
        return 0.0
    return _minutes_between(record.date, record.logout_time, SHIFT_END)


def calculate_late_deduction(attendance, hourly_rate, period_start, period_end):
    """Return (total minutes late, deduction)."""
    total_minutes = 0.0
    total = 0.0
    for record in attendance:
        if not _in_period(record.date, period_start, period_end):
            continue
        late = minutes_late(record)
        if late:
            total_minutes += late
            total += (late / 60) * hourly_rate
    return total_minutes, total


def calculate_undertime_deduction(attendance, hourly_rate, period_start, period_end):
    """Return (total minutes short, deduction)."""
    total_minutes = 0.0
    total = 0.0
    for record in attendance:
        if not _in_period(record.date, period_start, period_end):
            continue
        short = minutes_short(record)
        if short:
            total_minutes += short
            total += (short / 60) * hourly_rate
    return total_minutes, total


def count_unpaid_leave(leaves, period_start, period_end):
    # One approved record is one unit, whatever its date span
    return sum(
        1 for leave in leaves
        if leave.is_approved
        and leave.is_unpaid
        and leave.overlaps(period_start, period_end)
    )


def compute_deductions(attendance, leaves, rates, period_start, period_end):
    late_minutes, late_deduction = calculate_late_deduction(
        attendance, rates.hourly_rate, period_start, period_end)
    undertime_minutes, undertime_deduction = calculate_undertime_deduction(
        attendance, rates.hourly_rate, period_start, period_end)

    unpaid_leave_count = count_unpaid_leave(leaves, period_start, period_end)
    unpaid_leave_deduction = unpaid_leave_count * rates.daily_rate

    log.debug(
        "Deductions: %.0f min late, %.0f min undertime, %s unpaid leave",
        late_minutes, undertime_minutes, unpaid_leave_count,
    )

    return DeductionBreakdown(
        late_minutes=late_minutes,
        late_deduction=late_deduction,
        undertime_minutes=undertime_minutes,
        undertime_deduction=undertime_deduction,
        unpaid_leave_count=unpaid_leave_count,
        unpaid_leave_deduction=unpaid_leave_deduction,
    )
