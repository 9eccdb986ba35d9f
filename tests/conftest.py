from datetime import date

import pytest

from fakes import FakeRecordStore, full_day
from payroll_system.payroll import create_app, db
from payroll_system.payroll.calculator import PayrollCalculator
from payroll_system.payroll.records import CompensationProfile, EmployeeRecord, PositionRecord


@pytest.fixture
def basic_store():
    """Employee 1, monthly salary 11000 (daily 500, hourly 62.5), three clean days."""
    return FakeRecordStore(
        employees=[EmployeeRecord(1, "Juan", "Dela Cruz", position_id=10)],
        positions=[PositionRecord(10, "Clerk", 11000.0)],
        attendance=[full_day(1, date(2024, 6, d)) for d in (3, 4, 5)],
        compensation=[CompensationProfile(1, rice_subsidy=1500.0, phone_allowance=500.0, clothing_allowance=300.0)],
    )


@pytest.fixture
def calculator_for():
    def build(store, **kwargs):
        return PayrollCalculator.from_store(store, **kwargs)
    return build


@pytest.fixture(scope="function")
def app():
    app = create_app("payroll_system.config.TestingConfig")
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope="function")
def session(app):
    with app.app_context():
        yield db.session


@pytest.fixture
def client(app):
    return app.test_client()
