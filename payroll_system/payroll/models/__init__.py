# payroll_system/payroll/models/__init__.py

from .hr_models import (
    Employee,
    Position,
    Attendance,
    LeaveType,
    LeaveRequest,
    Overtime
)
from .payroll_models import (
    CompensationDetails,
    GovernmentContribution
)

__all__ = [
    "Employee",
    "Position",
    "Attendance",
    "LeaveType",
    "LeaveRequest",
    "Overtime",
    "CompensationDetails",
    "GovernmentContribution"
]
