# payroll_models.py
from payroll_system.payroll import db
from datetime import datetime

# -------------------------
# Payroll configuration tables
# -------------------------
class CompensationDetails(db.Model):
    """Fixed monthly allowances, at most one row per employee"""
    __tablename__ = "compensation_details"

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey('employee.id'), unique=True, nullable=False)
    rice_subsidy = db.Column(db.Float, default=0)
    phone_allowance = db.Column(db.Float, default=0)
    clothing_allowance = db.Column(db.Float, default=0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    employee = db.relationship('Employee', backref=db.backref('compensation_details', uselist=False), lazy=True)

    def __repr__(self):
        return f'<CompensationDetails {self.employee_id}>'


class GovernmentContribution(db.Model):
    """Pre-recorded SSS, PhilHealth and Pag-IBIG amounts"""
    __tablename__ = "government_contributions"

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey('employee.id'), unique=True, nullable=False)
    sss = db.Column(db.Float)
    philhealth = db.Column(db.Float)
    pagibig = db.Column(db.Float)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    employee = db.relationship('Employee', backref=db.backref('government_contribution', uselist=False), lazy=True)

    def __repr__(self):
        return f'<GovernmentContribution {self.employee_id}>'
