import logging

from flask import Flask, current_app, redirect, url_for
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.orm import Session

# Extensions
db = SQLAlchemy()


def create_app(config_object="payroll_system.config.Config"):
    app = Flask(__name__)
    # Load payroll config
    app.config.from_object(config_object)

    configure_logging(app)

    # Initialize extensions
    db.init_app(app)

    # Import models so create_all() knows about them
    from payroll_system.payroll import models  # noqa: F401

    # -------------------------------------
    # BLUEPRINTS
    # -------------------------------------
    from payroll_system.payroll.routes.api_routes import payroll_api_bp

    app.register_blueprint(payroll_api_bp, url_prefix="/payroll/api")

    from payroll_system.payroll.cli import register_commands
    register_commands(app)

    # -------------------------------------
    # ROOT ROUTE
    # -------------------------------------
    @app.route("/")
    def index():
        return redirect(url_for("payroll_api.health"))

    return app


def configure_logging(app):
    level = app.config.get("LOG_LEVEL", "INFO")
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    app.logger.setLevel(level)
    logging.getLogger("payroll_system").setLevel(level)


def calculator_factory():
    """
    Return a zero-argument callable building a PayrollCalculator with its own
    database session (and HR API client when enabled). Must be called inside
    an app context; the returned callable is safe to use from worker threads.
    """
    from payroll_system.payroll.calculator import PayrollCalculator
    from payroll_system.payroll.hr_client import HttpEmployeeProvider
    from payroll_system.payroll.providers import SqlAlchemyRecordStore

    engine = db.engine
    use_hr_api = current_app.config.get("USE_HR_API", False)
    hr_url = current_app.config.get("HR_SYSTEM_URL")
    hr_timeout = current_app.config.get("HR_API_TIMEOUT", 30)

    def build():
        store = SqlAlchemyRecordStore(Session(engine))
        employees = HttpEmployeeProvider(hr_url, timeout=hr_timeout) if use_hr_api else None
        return PayrollCalculator.from_store(store, employees=employees)

    return build
