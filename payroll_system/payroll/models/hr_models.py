from payroll_system.payroll import db
from datetime import datetime, date
# =========================================================
# HR MODELS (read by the payroll record providers)
# =========================================================

class Employee(db.Model):
    __tablename__ = "employee"

    id = db.Column(db.Integer, primary_key=True)
    position_id = db.Column(db.Integer, db.ForeignKey('position.id', name='fk_employee_position_id'))

    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    middle_name = db.Column(db.String(100))
    email = db.Column(db.String(150), unique=True)
    sss_number = db.Column(db.String(20))
    philhealth_number = db.Column(db.String(20))
    pagibig_number = db.Column(db.String(20))
    tin_number = db.Column(db.String(20))
    active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    position = db.relationship("Position", back_populates="employees", foreign_keys=[position_id])
    attendances = db.relationship("Attendance", back_populates="employee", lazy=True)
    leaves = db.relationship("LeaveRequest", back_populates="employee", lazy=True)
    overtimes = db.relationship("Overtime", back_populates="employee", lazy=True)

    def __repr__(self):
        return f"<Employee {self.id}: {self.first_name} {self.last_name}>"


# =========================================================
# POSITION
# =========================================================
class Position(db.Model):
    __tablename__ = "position"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False)
    description = db.Column(db.Text)
    monthly_salary = db.Column(db.Float, nullable=False, default=0)

    employees = db.relationship("Employee", back_populates="position", lazy=True)

    def __repr__(self):
        return f"<Position {self.name}>"


# =========================================================
# ATTENDANCE
# =========================================================
class Attendance(db.Model):
    __tablename__ = "attendance"
    __table_args__ = (db.UniqueConstraint("employee_id", "date", name="uq_attendance_employee_date"),)

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employee.id"), nullable=False)
    date = db.Column(db.Date, nullable=False, default=date.today)
    time_in = db.Column(db.Time)
    time_out = db.Column(db.Time)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    employee = db.relationship("Employee", back_populates="attendances")

    def __repr__(self):
        return f"<Attendance {self.employee_id} - {self.date}>"


# =========================================================
# LEAVE
# =========================================================
class LeaveType(db.Model):
    __tablename__ = 'leave_type'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False)  # e.g. 'Vacation', 'Sick', 'Unpaid'
    description = db.Column(db.Text)

    leaves = db.relationship('LeaveRequest', back_populates='leave_type', lazy=True)

    def __repr__(self):
        return f'<LeaveType {self.name}>'


class LeaveRequest(db.Model):
    __tablename__ = "leave_request"

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employee.id"), nullable=False)
    leave_type_id = db.Column(db.Integer, db.ForeignKey("leave_type.id", name="fk_leave_leave_type_id"), nullable=False)
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=False)
    reason = db.Column(db.Text)
    status = db.Column(db.String(50), default="Pending")  # Pending, Approved, Rejected
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    employee = db.relationship("Employee", back_populates="leaves")
    leave_type = db.relationship("LeaveType", back_populates="leaves", foreign_keys=[leave_type_id])

    def __repr__(self):
        return f"<LeaveRequest {self.employee_id} - {self.leave_type_id}>"


# =========================================================
# OVERTIME
# =========================================================
class Overtime(db.Model):
    __tablename__ = "overtime"

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employee.id"), nullable=False)
    date = db.Column(db.Date, nullable=False)
    hours = db.Column(db.Float, nullable=False, default=0)
    reason = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    employee = db.relationship("Employee", back_populates="overtimes")

    def __repr__(self):
        return f"<Overtime {self.employee_id} - {self.date}: {self.hours}h>"
