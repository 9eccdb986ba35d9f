"""
Read interfaces the payroll engine consumes, and the default SQLAlchemy-backed
implementation of all of them.

A provider returns ``None`` when an employee, position or profile does not
exist. Anything else that goes wrong is raised and becomes a ProviderFailure
inside the engine.
"""
from datetime import date
from typing import List, Optional, Protocol

from payroll_system.payroll.models import (
    Attendance, CompensationDetails, Employee, GovernmentContribution, LeaveRequest,
    Overtime, Position,
)
from payroll_system.payroll.records import (
    AttendanceRecord, CompensationProfile, ContributionProfile, EmployeeRecord,
    LeaveRecord, OvertimeRecord, PositionRecord,
)


class EmployeeProvider(Protocol):
    def get_employee(self, employee_id: int) -> Optional[EmployeeRecord]: ...


class PositionProvider(Protocol):
    def get_position(self, position_id: int) -> Optional[PositionRecord]: ...


class AttendanceProvider(Protocol):
    def get_attendance(self, employee_id: int, period_start: date, period_end: date) -> List[AttendanceRecord]: ...


class LeaveProvider(Protocol):
    def get_approved_leave(self, employee_id: int, period_start: date, period_end: date) -> List[LeaveRecord]: ...


class OvertimeProvider(Protocol):
    def get_overtime(self, employee_id: int, period_start: date, period_end: date) -> List[OvertimeRecord]: ...


class CompensationProvider(Protocol):
    def get_compensation_profile(self, employee_id: int) -> Optional[CompensationProfile]: ...


class ContributionProvider(Protocol):
    def get_contribution_profile(self, employee_id: int) -> Optional[ContributionProfile]: ...


# =========================================================
# SQLAlchemy record store
# =========================================================
class SqlAlchemyRecordStore:
    """All seven providers over one SQLAlchemy session."""

    def __init__(self, session):
        self.session = session

    def close(self):
        self.session.close()

    # ----- HR lookups -----
    def get_employee(self, employee_id):
        employee = self.session.get(Employee, employee_id)
        if employee is None:
            return None
        return EmployeeRecord(
            employee_id=employee.id,
            first_name=employee.first_name,
            last_name=employee.last_name,
            position_id=employee.position_id,
        )

    def get_position(self, position_id):
        position = self.session.get(Position, position_id)
        if position is None:
            return None
        return PositionRecord(
            position_id=position.id,
            name=position.name,
            monthly_salary=position.monthly_salary,
        )

    # ----- Period-scoped records -----
    def get_attendance(self, employee_id, period_start, period_end):
        rows = (
            self.session.query(Attendance)
            .filter(
                Attendance.employee_id == employee_id,
                Attendance.date >= period_start,
                Attendance.date <= period_end,
            )
            .order_by(Attendance.date)
            .all()
        )
        return [
            AttendanceRecord(
                employee_id=row.employee_id,
                date=row.date,
                login_time=row.time_in,
                logout_time=row.time_out,
            )
            for row in rows
        ]

    def get_approved_leave(self, employee_id, period_start, period_end):
        rows = (
            self.session.query(LeaveRequest)
            .filter(
                LeaveRequest.employee_id == employee_id,
                LeaveRequest.status == "Approved",
                LeaveRequest.start_date <= period_end,
                LeaveRequest.end_date >= period_start,
            )
            .order_by(LeaveRequest.start_date, LeaveRequest.id)
            .all()
        )
        return [
            LeaveRecord(
                employee_id=row.employee_id,
                start_date=row.start_date,
                end_date=row.end_date,
                leave_type=row.leave_type.name,
                status=row.status,
            )
            for row in rows
        ]

    def get_overtime(self, employee_id, period_start, period_end):
        rows = (
            self.session.query(Overtime)
            .filter(
                Overtime.employee_id == employee_id,
                Overtime.date >= period_start,
                Overtime.date <= period_end,
            )
            .order_by(Overtime.date, Overtime.id)
            .all()
        )
        return [
            OvertimeRecord(employee_id=row.employee_id, date=row.date, hours=row.hours)
            for row in rows
        ]

    # ----- Payroll configuration -----
    def get_compensation_profile(self, employee_id):
        row = self.session.query(CompensationDetails).filter_by(employee_id=employee_id).first()
        if row is None:
            return None
        return CompensationProfile(
            employee_id=row.employee_id,
            rice_subsidy=row.rice_subsidy or 0.0,
            phone_allowance=row.phone_allowance or 0.0,
            clothing_allowance=row.clothing_allowance or 0.0,
        )

    def get_contribution_profile(self, employee_id):
        row = self.session.query(GovernmentContribution).filter_by(employee_id=employee_id).first()
        if row is None:
            return None
        return ContributionProfile(
            employee_id=row.employee_id,
            sss=row.sss,
            philhealth=row.philhealth,
            pagibig=row.pagibig,
        )
