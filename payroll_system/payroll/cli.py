import json
from datetime import datetime

import click
from flask import current_app

from payroll_system.payroll import db, calculator_factory
from payroll_system.payroll.calculator import calculate_batch


def _date(value):
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise click.BadParameter(f"{value!r} is not a YYYY-MM-DD date")


def register_commands(app):

    @app.cli.command("init-db")
    def init_db():
        """Create the payroll tables."""
        db.create_all()
        click.echo("Database tables created.")

    @app.cli.command("calculate-payroll")
    @click.argument("employee_id", type=int)
    @click.argument("start")
    @click.argument("end")
    def calculate_payroll(employee_id, start, end):
        """Calculate one employee's payroll for START..END (YYYY-MM-DD)."""
        calculator = calculator_factory()()
        try:
            outcome = calculator.calculate_payroll(employee_id, _date(start), _date(end))
        finally:
            calculator.close()

        if not outcome.ok:
            raise click.ClickException(f"{outcome.error.code}: {outcome.error.message}")
        click.echo(json.dumps(outcome.value.to_dict(), indent=2))

    @app.cli.command("calculate-batch")
    @click.argument("start")
    @click.argument("end")
    @click.option("--employee-id", "employee_ids", type=int, multiple=True,
                  help="Employee to include; defaults to every active employee.")
    def calculate_batch_command(start, end, employee_ids):
        """Calculate payroll for several employees in parallel."""
        from payroll_system.payroll.models import Employee

        if not employee_ids:
            employee_ids = [e.id for e in Employee.query.filter_by(active=True).order_by(Employee.id)]

        outcomes = calculate_batch(
            calculator_factory(), employee_ids, _date(start), _date(end),
            max_workers=current_app.config["PAYROLL_BATCH_WORKERS"],
        )
        for employee_id, outcome in outcomes.items():
            if outcome.ok:
                click.echo(f"{employee_id}\t{outcome.value.payslip_number}\tnet {outcome.value.net_pay:,.2f}")
            else:
                click.echo(f"{employee_id}\tFAILED\t{outcome.error.code}: {outcome.error.message}")
