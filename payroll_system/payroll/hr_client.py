import logging

import requests

from payroll_system.payroll.records import EmployeeRecord

log = logging.getLogger(__name__)


class HrApiError(Exception):
    """The HR system answered, but not with a usable employee payload."""


class HttpEmployeeProvider:
    """Employee lookup against the HR system API."""

    def __init__(self, base_url, timeout=30, session=None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.http = session or requests

    def get_employee(self, employee_id):
        url = f"{self.base_url}/api/hr/employees/{employee_id}"
        response = self.http.get(url, timeout=self.timeout)

        if response.status_code == 404:
            return None
        if response.status_code != 200:
            raise HrApiError(f"HR system returned {response.status_code} for employee {employee_id}")

        payload = response.json()
        if not payload.get('success'):
            raise HrApiError(payload.get('error') or f"HR system rejected lookup of employee {employee_id}")

        data = payload.get('data')
        if not data:
            return None

        log.debug("Fetched employee %s from HR system", employee_id)
        return EmployeeRecord(
            employee_id=data['id'],
            first_name=data.get('first_name', ''),
            last_name=data.get('last_name', ''),
            position_id=data.get('position_id'),
        )
