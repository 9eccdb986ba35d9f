from flask import Blueprint, jsonify, request, current_app
from datetime import date

from payroll_system.payroll import calculator_factory
from payroll_system.payroll.errors import ErrorKind

payroll_api_bp = Blueprint('payroll_api', __name__)

ERROR_STATUS = {
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INVALID_POSITION: 404,
    ErrorKind.PROVIDER_FAILURE: 502,
    ErrorKind.VALIDATION_FAILURE: 422,
}


def _parse_date(value):
    try:
        return date.fromisoformat(value) if value else None
    except ValueError:
        return None


@payroll_api_bp.route('/health')
def health():
    return jsonify({'success': True, 'status': 'ok'})


@payroll_api_bp.route('/employees/<int(signed=True):employee_id>/payroll')
def calculate_employee_payroll(employee_id):
    """Calculate one employee's payroll for ?start=YYYY-MM-DD&end=YYYY-MM-DD"""
    start = _parse_date(request.args.get('start'))
    end = _parse_date(request.args.get('end'))
    if start is None or end is None:
        return jsonify({
            'success': False,
            'error': {
                'code': ErrorKind.INVALID_INPUT.value,
                'message': 'start and end must be dates in YYYY-MM-DD format',
                'state': None,
            }
        }), 400

    calculator = calculator_factory()()
    try:
        outcome = calculator.calculate_payroll(employee_id, start, end)
    finally:
        calculator.close()

    if not outcome.ok:
        error = outcome.error
        current_app.logger.error(f"Payroll calculation failed for employee {employee_id}: {error.message}")
        return jsonify({
            'success': False,
            'error': error.to_dict()
        }), ERROR_STATUS.get(error.kind, 500)

    return jsonify({
        'success': True,
        'data': outcome.value.to_dict()
    })
