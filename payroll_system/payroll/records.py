# records.py
"""
Read-only snapshots handed to the payroll engine by the record providers,
plus the PayrollResult the engine produces.

All records are frozen: the engine never writes back to a provider and a
snapshot cannot change halfway through a calculation.
"""
from dataclasses import dataclass, field, asdict, replace
from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple

# Practical upper bound used to flag suspicious overtime entries
PRACTICAL_OVERTIME_LIMIT = 12


# -------------------------
# HR records
# -------------------------
@dataclass(frozen=True)
class EmployeeRecord:
    employee_id: int
    first_name: str
    last_name: str
    position_id: Optional[int] = None

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class PositionRecord:
    position_id: int
    name: str
    monthly_salary: float


@dataclass(frozen=True)
class AttendanceRecord:
    employee_id: int
    date: date
    login_time: Optional[time] = None
    logout_time: Optional[time] = None

    def __post_init__(self):
        if self.login_time and self.logout_time and self.logout_time < self.login_time:
            raise ValueError("Logout time cannot be before login time")

    @property
    def work_duration(self):
        if self.login_time is None or self.logout_time is None:
            return timedelta(0)
        return datetime.combine(self.date, self.logout_time) - datetime.combine(self.date, self.login_time)

    @property
    def is_full_day(self):
        return self.work_duration >= timedelta(hours=8)


@dataclass(frozen=True)
class LeaveRecord:
    employee_id: int
    start_date: date
    end_date: date
    leave_type: str
    status: str

    def __post_init__(self):
        if self.end_date < self.start_date:
            raise ValueError("End date cannot be before start date")
        if not self.leave_type or not self.leave_type.strip():
            raise ValueError("Leave type cannot be null or empty")
        if not self.status or not self.status.strip():
            raise ValueError("Status cannot be null or empty")

    @property
    def leave_days(self):
        """Inclusive calendar span of the request."""
        return (self.end_date - self.start_date).days + 1

    @property
    def is_approved(self):
        return self.status.strip().lower() == "approved"

    @property
    def is_unpaid(self):
        return self.leave_type.strip().lower() == "unpaid"

    def overlaps(self, period_start, period_end):
        return self.start_date <= period_end and self.end_date >= period_start


@dataclass(frozen=True)
class OvertimeRecord:
    employee_id: int
    date: date
    hours: float

    def __post_init__(self):
        if self.hours < 0:
            raise ValueError("Overtime hours cannot be negative")
        if self.hours > 24:
            raise ValueError("Overtime hours cannot exceed 24 hours in a day")

    @property
    def is_within_practical_limit(self):
        return 0 < self.hours <= PRACTICAL_OVERTIME_LIMIT

    def pay(self, hourly_rate, multiplier):
        if hourly_rate < 0 or multiplier < 0:
            raise ValueError("Rates cannot be negative")
        return self.hours * hourly_rate * multiplier


# -------------------------
# Payroll configuration records
# -------------------------
@dataclass(frozen=True)
class CompensationProfile:
    employee_id: int
    rice_subsidy: float = 0.0
    phone_allowance: float = 0.0
    clothing_allowance: float = 0.0

    @property
    def total_allowances(self):
        return self.rice_subsidy + self.phone_allowance + self.clothing_allowance


@dataclass(frozen=True)
class ContributionProfile:
    """Pre-recorded statutory amounts; a ``None`` field falls back to the tables."""
    employee_id: int
    sss: Optional[float] = None
    philhealth: Optional[float] = None
    pagibig: Optional[float] = None


# -------------------------
# Output
# -------------------------
@dataclass(frozen=True)
class LineItem:
    code: str
    label: str
    amount: float


@dataclass(frozen=True)
class PayrollResult:
    """One employee's payroll for one period. Built fresh by every calculation."""
    employee_id: int
    period_start: date
    period_end: date
    monthly_rate: float
    daily_rate: float
    hourly_rate: float
    days_worked: int
    overtime_hours: float
    unpaid_leave_count: int

    # Earnings
    gross_earnings: float  # basic pay only
    overtime_pay: float
    rice_subsidy: float
    phone_allowance: float
    clothing_allowance: float

    # Deductions
    late_deduction: float
    undertime_deduction: float
    unpaid_leave_deduction: float
    sss: float
    philhealth: float
    pagibig: float
    tax: float

    earnings: Tuple[LineItem, ...] = ()
    deductions: Tuple[LineItem, ...] = ()
    gross_pay: float = 0.0
    total_deductions: float = 0.0
    net_pay: float = 0.0
    warnings: Tuple[str, ...] = field(default=())

    @property
    def payslip_number(self):
        return f"PS{self.period_start.year}{self.period_start.month:02d}{self.employee_id:04d}"

    def compute_gross_pay(self):
        return (self.gross_earnings + self.overtime_pay + self.rice_subsidy
                + self.phone_allowance + self.clothing_allowance)

    def compute_total_deductions(self):
        return (self.late_deduction + self.undertime_deduction + self.unpaid_leave_deduction
                + self.sss + self.philhealth + self.pagibig + self.tax)

    def recompute(self):
        """Return a copy whose gross, deduction and net totals match its components."""
        gross_pay = self.compute_gross_pay()
        total_deductions = self.compute_total_deductions()
        return replace(
            self,
            gross_pay=gross_pay,
            total_deductions=total_deductions,
            net_pay=gross_pay - total_deductions,
        )

    def to_dict(self):
        data = asdict(self)
        data['period_start'] = self.period_start.isoformat()
        data['period_end'] = self.period_end.isoformat()
        data['earnings'] = [asdict(item) for item in self.earnings]
        data['deductions'] = [asdict(item) for item in self.deductions]
        data['warnings'] = list(self.warnings)
        data['payslip_number'] = self.payslip_number
        return data
