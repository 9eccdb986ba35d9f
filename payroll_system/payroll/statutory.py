"""
Statutory contribution and withholding tax schedules.

Pure functions of the monthly salary. The SSS schedule is an enumerated step
table; PhilHealth and Pag-IBIG are rates; income tax is progressive over the
annualized salary and returned as a monthly figure.
"""
from dataclasses import dataclass

# (upper bound of the salary band, employee contribution)
SSS_TABLE = [
    (4000.00, 180.00),
    (5500.00, 225.00),
    (7000.00, 270.00),
    (8500.00, 315.00),
    (10000.00, 360.00),
]
SSS_MAX_CONTRIBUTION = 1125.00

PHILHEALTH_RATE = 0.045
PHILHEALTH_CAP = 5000.00

PAGIBIG_LOW_SALARY = 1500.00
PAGIBIG_LOW_RATE = 0.01
PAGIBIG_RATE = 0.02

# (upper bound of the annual bracket, marginal rate); None = no upper bound
ANNUAL_TAX_BRACKETS = [
    (250_000.00, 0.00),
    (400_000.00, 0.15),
    (800_000.00, 0.20),
    (2_000_000.00, 0.25),
    (8_000_000.00, 0.30),
    (None, 0.35),
]


@dataclass(frozen=True)
class StatutoryAmounts:
    sss: float
    philhealth: float
    pagibig: float
    tax: float

    @property
    def total(self):
        return self.sss + self.philhealth + self.pagibig + self.tax


def calculate_sss_contribution(salary):
    """SSS employee share from the step table."""
    for upper_bound, contribution in SSS_TABLE:
        if salary <= upper_bound:
            return contribution
    return SSS_MAX_CONTRIBUTION


def calculate_philhealth_contribution(salary):
    """PhilHealth: 4.5% of monthly salary split equally (employee half), capped."""
    return min(salary * PHILHEALTH_RATE / 2, PHILHEALTH_CAP)


def calculate_pagibig_contribution(salary):
    """Pag-IBIG: 1% or 2% depending on salary."""
    if salary <= PAGIBIG_LOW_SALARY:
        return salary * PAGIBIG_LOW_RATE
    return salary * PAGIBIG_RATE


def calculate_annual_income_tax(annual_income):
    tax = 0.0
    lower_bound = 0.0
    for upper_bound, rate in ANNUAL_TAX_BRACKETS:
        if upper_bound is None or annual_income <= upper_bound:
            tax += (annual_income - lower_bound) * rate
            return tax
        tax += (upper_bound - lower_bound) * rate
        lower_bound = upper_bound
    return tax


def calculate_tax_withheld(monthly_salary):
    """Monthly withholding tax from the annualized progressive brackets."""
    if monthly_salary <= 0:
        return 0.0
    return calculate_annual_income_tax(monthly_salary * 12) / 12


def compute_statutory_amounts(monthly_salary, profile=None):
    """
    Statutory amounts for a monthly salary. Pre-recorded SSS / PhilHealth /
    Pag-IBIG amounts on the contribution profile take precedence over the
    tables; tax is always computed.
    """
    sss = calculate_sss_contribution(monthly_salary)
    philhealth = calculate_philhealth_contribution(monthly_salary)
    pagibig = calculate_pagibig_contribution(monthly_salary)

    if profile is not None:
        if profile.sss is not None:
            sss = profile.sss
        if profile.philhealth is not None:
            philhealth = profile.philhealth
        if profile.pagibig is not None:
            pagibig = profile.pagibig

    return StatutoryAmounts(
        sss=sss,
        philhealth=philhealth,
        pagibig=pagibig,
        tax=calculate_tax_withheld(monthly_salary),
    )
