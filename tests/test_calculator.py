from datetime import date, time

import pytest

from fakes import FakeRecordStore, PERIOD_END, PERIOD_START, full_day
from payroll_system.payroll.calculator import PayrollCalculator, PipelineState, calculate_batch
from payroll_system.payroll.errors import (
    ErrorKind, InvalidInput, InvalidPosition, NotFound, ProviderFailure, ValidationFailure,
)
from payroll_system.payroll.records import (
    CompensationProfile, ContributionProfile, EmployeeRecord, LeaveRecord, OvertimeRecord,
    PositionRecord,
)


def _total_deductions(result):
    return sum(item.amount for item in result.deductions)


def test_full_calculation(basic_store, calculator_for):
    basic_store.overtime.append(OvertimeRecord(1, date(2024, 6, 4), 2))
    basic_store.attendance.append(full_day(1, date(2024, 6, 6), login=time(8, 30), logout=time(16, 0)))
    basic_store.leaves.append(LeaveRecord(1, date(2024, 6, 10), date(2024, 6, 14), "Unpaid", "Approved"))

    result = calculator_for(basic_store).calculate_or_raise(1, PERIOD_START, PERIOD_END)

    assert result.daily_rate == pytest.approx(500.0)
    assert result.hourly_rate == pytest.approx(62.5)
    assert result.days_worked == 4
    assert result.gross_earnings == pytest.approx(2000.0)
    assert result.overtime_pay == pytest.approx(156.25)
    assert result.gross_pay == pytest.approx(2000.0 + 156.25 + 2300.0)

    assert result.late_deduction == pytest.approx(31.25)
    assert result.undertime_deduction == pytest.approx(62.5)
    assert result.unpaid_leave_count == 1
    assert result.unpaid_leave_deduction == pytest.approx(500.0)
    # 11000 salary: SSS 1125, PhilHealth 247.5, Pag-IBIG 220, tax 0
    assert result.sss == 1125.0
    assert result.philhealth == pytest.approx(247.5)
    assert result.pagibig == pytest.approx(220.0)
    assert result.tax == 0

    assert result.total_deductions == pytest.approx(_total_deductions(result))
    assert result.net_pay == pytest.approx(result.gross_pay - result.total_deductions, abs=1e-6)
    assert result.payslip_number == "PS2024060001"


def test_overtime_and_allowances_are_not_double_counted(basic_store, calculator_for):
    basic_store.overtime.append(OvertimeRecord(1, date(2024, 6, 4), 4))
    result = calculator_for(basic_store).calculate_or_raise(1, PERIOD_START, PERIOD_END)
    assert result.gross_pay == pytest.approx(sum(item.amount for item in result.earnings))


def test_statutory_amounts_for_5000_salary(calculator_for):
    store = FakeRecordStore(
        employees=[EmployeeRecord(2, "Ana", "Reyes", position_id=20)],
        positions=[PositionRecord(20, "Aide", 5000.0)],
        compensation=[CompensationProfile(2)],
    )
    result = calculator_for(store).calculate_or_raise(2, PERIOD_START, PERIOD_END)
    assert result.sss == 225.00
    assert result.philhealth == pytest.approx(112.5)
    assert result.pagibig == pytest.approx(100.0)
    assert result.days_worked == 0
    assert result.gross_earnings == 0


def test_contribution_profile_overrides_tables(basic_store, calculator_for):
    basic_store.contributions[1] = ContributionProfile(1, sss=581.3, philhealth=300.0, pagibig=100.0)
    result = calculator_for(basic_store).calculate_or_raise(1, PERIOD_START, PERIOD_END)
    assert (result.sss, result.philhealth, result.pagibig) == (581.3, 300.0, 100.0)
    assert not any("contribution profile" in w for w in result.warnings)


def test_missing_profiles_are_warnings(calculator_for):
    store = FakeRecordStore(
        employees=[EmployeeRecord(1, "Juan", "Dela Cruz", position_id=10)],
        positions=[PositionRecord(10, "Clerk", 11000.0)],
        attendance=[full_day(1, date(2024, 6, 3))],
    )
    seen = []
    calculator = calculator_for(store, warning_sink=lambda emp, msg: seen.append((emp, msg)))

    outcome = calculator.calculate_payroll(1, PERIOD_START, PERIOD_END)

    assert outcome.ok
    warnings = outcome.value.warnings
    assert any("No compensation profile" in w for w in warnings)
    assert any("No contribution profile" in w for w in warnings)
    assert [msg for _, msg in seen] == list(warnings)
    assert {emp for emp, _ in seen} == {1}
    assert outcome.value.rice_subsidy == 0


@pytest.mark.parametrize("employee_id, start, end", [
    (0, PERIOD_START, PERIOD_END),
    (-1, PERIOD_START, PERIOD_END),
    (1, PERIOD_END, PERIOD_START),
    (1, None, PERIOD_END),
    (1, PERIOD_START, None),
    ("1", PERIOD_START, PERIOD_END),
])
def test_invalid_input_rejected_before_provider_calls(basic_store, calculator_for, employee_id, start, end):
    outcome = calculator_for(basic_store).calculate_payroll(employee_id, start, end)
    assert isinstance(outcome.error, InvalidInput)
    assert outcome.error.state is PipelineState.INITIALIZED
    assert basic_store.total_calls == 0


def test_single_day_period_is_valid(basic_store, calculator_for):
    outcome = calculator_for(basic_store).calculate_payroll(1, date(2024, 6, 3), date(2024, 6, 3))
    assert outcome.ok
    assert outcome.value.days_worked == 1


def test_unknown_employee_is_not_found(basic_store, calculator_for):
    outcome = calculator_for(basic_store).calculate_payroll(99, PERIOD_START, PERIOD_END)
    assert isinstance(outcome.error, NotFound)
    assert outcome.error.kind is ErrorKind.NOT_FOUND
    assert outcome.error.state is PipelineState.INITIALIZED
    assert basic_store.calls['get_position'] == 0


def test_unknown_position_is_invalid_position(calculator_for):
    store = FakeRecordStore(employees=[EmployeeRecord(1, "Juan", "Dela Cruz", position_id=77)])
    outcome = calculator_for(store).calculate_payroll(1, PERIOD_START, PERIOD_END)
    assert isinstance(outcome.error, InvalidPosition)
    assert isinstance(outcome.error, NotFound)


def test_negative_salary_halts_pipeline(calculator_for):
    store = FakeRecordStore(
        employees=[EmployeeRecord(1, "Juan", "Dela Cruz", position_id=10)],
        positions=[PositionRecord(10, "Clerk", -100.0)],
    )
    outcome = calculator_for(store).calculate_payroll(1, PERIOD_START, PERIOD_END)
    assert isinstance(outcome.error, InvalidPosition)
    assert store.calls['get_attendance'] == 0


def test_provider_failure_is_wrapped_and_stops_pipeline(basic_store, calculator_for):
    boom = ConnectionError("database unavailable")
    basic_store.fail_on['get_overtime'] = boom

    outcome = calculator_for(basic_store).calculate_payroll(1, PERIOD_START, PERIOD_END)

    assert isinstance(outcome.error, ProviderFailure)
    assert outcome.error.__cause__ is boom
    assert outcome.error.details['provider'] == "OvertimeProvider"
    assert outcome.error.state is PipelineState.RATES_RESOLVED
    assert basic_store.calls['get_overtime'] == 1
    assert basic_store.calls['get_compensation_profile'] == 0
    assert basic_store.calls['get_approved_leave'] == 0


def test_provider_failure_is_not_retried(basic_store, calculator_for):
    basic_store.fail_on['get_contribution_profile'] = TimeoutError("slow")
    outcome = calculator_for(basic_store).calculate_payroll(1, PERIOD_START, PERIOD_END)
    assert outcome.error.state is PipelineState.DEDUCTIONS_COMPUTED
    assert basic_store.calls['get_contribution_profile'] == 1


def test_calculate_or_raise_raises_calculation_error(basic_store, calculator_for):
    with pytest.raises(NotFound):
        calculator_for(basic_store).calculate_or_raise(42, PERIOD_START, PERIOD_END)


def test_negative_allowance_fails_validation(basic_store, calculator_for):
    basic_store.compensation[1] = CompensationProfile(1, rice_subsidy=-50000.0)
    outcome = calculator_for(basic_store).calculate_payroll(1, PERIOD_START, PERIOD_END)
    assert isinstance(outcome.error, ValidationFailure)
    assert outcome.error.state is PipelineState.ASSEMBLED
    assert "gross_pay is negative" in outcome.error.details['problems']
    assert outcome.value is None


def test_negative_net_pay_is_a_warning(calculator_for, caplog):
    store = FakeRecordStore(
        employees=[EmployeeRecord(1, "Juan", "Dela Cruz", position_id=10)],
        positions=[PositionRecord(10, "Clerk", 11000.0)],
        compensation=[CompensationProfile(1)],
        contributions=[ContributionProfile(1)],
    )
    outcome = calculator_for(store).calculate_payroll(1, PERIOD_START, PERIOD_END)
    assert outcome.ok
    assert outcome.value.net_pay < 0
    assert any("Net pay is negative" in w for w in outcome.value.warnings)
    assert "Net pay is negative" in caplog.text


def test_recalculation_is_idempotent(basic_store, calculator_for):
    calculator = calculator_for(basic_store)
    first = calculator.calculate_or_raise(1, PERIOD_START, PERIOD_END)
    second = calculator.recalculate(first).unwrap()
    assert first == second
    assert first is not second
    assert repr(first) == repr(second)


def test_recalculation_picks_up_changed_records(basic_store, calculator_for):
    calculator = calculator_for(basic_store)
    first = calculator.calculate_or_raise(1, PERIOD_START, PERIOD_END)
    basic_store.attendance.append(full_day(1, date(2024, 6, 7)))
    second = calculator.recalculate(first).unwrap()
    assert second.days_worked == first.days_worked + 1
    assert first.days_worked == 3


def test_result_to_dict(basic_store, calculator_for):
    data = calculator_for(basic_store).calculate_or_raise(1, PERIOD_START, PERIOD_END).to_dict()
    assert data['period_start'] == "2024-06-01"
    assert data['payslip_number'] == "PS2024060001"
    assert {item['code'] for item in data['deductions']} == {
        "LATE", "UNDERTIME", "UNPAID_LEAVE", "SSS", "PHILHEALTH", "PAGIBIG", "TAX"}


def test_batch_builds_one_calculator_per_employee():
    stores = []
    records = dict(
        employees=[EmployeeRecord(i, "Emp", str(i), position_id=10) for i in (1, 2)],
        positions=[PositionRecord(10, "Clerk", 11000.0)],
        attendance=[full_day(1, date(2024, 6, 3)), full_day(2, date(2024, 6, 3))],
    )

    def factory():
        store = FakeRecordStore(**records)
        stores.append(store)
        return PayrollCalculator.from_store(store)

    outcomes = calculate_batch(factory, [1, 2, 3], PERIOD_START, PERIOD_END, max_workers=2)

    assert list(outcomes) == [1, 2, 3]
    assert outcomes[1].ok and outcomes[2].ok
    assert isinstance(outcomes[3].error, NotFound)
    assert len(stores) == 3
    assert all(store.closed for store in stores)


def test_nan_salary_halts_pipeline(calculator_for):
    store = FakeRecordStore(
        employees=[EmployeeRecord(1, "Juan", "Dela Cruz", position_id=10)],
        positions=[PositionRecord(10, "Clerk", float("nan"))],
        attendance=[full_day(1, date(2024, 6, 3))],
    )
    outcome = calculator_for(store).calculate_payroll(1, PERIOD_START, PERIOD_END)
    assert isinstance(outcome.error, InvalidPosition)
    assert outcome.error.state is PipelineState.INITIALIZED
    assert store.calls['get_attendance'] == 0


def test_non_finite_allowance_fails_validation(basic_store, calculator_for):
    basic_store.compensation[1] = CompensationProfile(1, rice_subsidy=float("nan"))
    outcome = calculator_for(basic_store).calculate_payroll(1, PERIOD_START, PERIOD_END)
    assert isinstance(outcome.error, ValidationFailure)
    problems = outcome.error.details['problems']
    assert "gross_pay is not a finite number" in problems
    assert "RICE amount is not a finite number" in problems
    assert "net_pay is not a finite number" in problems


def test_injected_employee_provider_is_used_even_if_falsy(basic_store):
    class EmptyEmployeeDirectory:
        def __len__(self):
            return 0

        def get_employee(self, employee_id):
            return None

    directory = EmptyEmployeeDirectory()
    calculator = PayrollCalculator.from_store(basic_store, employees=directory)
    assert calculator.employees is directory

    outcome = calculator.calculate_payroll(1, PERIOD_START, PERIOD_END)
    assert isinstance(outcome.error, NotFound)
    assert basic_store.calls['get_employee'] == 0


def test_batch_calculates_repeated_ids_once():
    built = []

    def factory():
        store = FakeRecordStore(
            employees=[EmployeeRecord(1, "Juan", "Dela Cruz", position_id=10)],
            positions=[PositionRecord(10, "Clerk", 11000.0)],
        )
        built.append(store)
        return PayrollCalculator.from_store(store)

    outcomes = calculate_batch(factory, [1, 2, 1], PERIOD_START, PERIOD_END, max_workers=1)

    assert list(outcomes) == [1, 2]
    assert len(built) == 2
