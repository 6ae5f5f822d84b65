"""
Pytest configuration and fixtures for timesheet monitor tests.

Provides:
- Settings with every notification channel disabled
- A fake timesheet client returning canned records per day
- Flask application and test client
"""
import pytest

from timesheet_monitor.api.routes import create_app
from timesheet_monitor.utilities.config import Settings
from timesheet_monitor.utilities.exceptions import FetchError
from timesheet_monitor.utilities.models import EmployeeRecord


def make_record(employee_id="U1", name="Alice", logged=8.0, flagged=0.0, active=True, **extra):
    """Build an EmployeeRecord with sensible defaults."""
    return EmployeeRecord(
        employee_id=employee_id,
        name=name,
        email=extra.get("email", f"{name.lower()}@example.com"),
        allocated_hours=extra.get("allocated", 8.0),
        logged_hours=logged,
        flagged_hours=flagged,
        active=active,
        employment_status=extra.get("status", "Full-time"),
    )


class FakeTimesheetClient:
    """
    Stands in for TimesheetClient.

    ``roster`` maps a day to its records; a callable value is called with
    the day; days listed in ``failing`` raise FetchError.
    """

    def __init__(self, roster=None, default=None, failing=()):
        self.roster = roster or {}
        self.default = default if default is not None else []
        self.failing = set(failing)
        self.calls = []

    def fetch(self, day):
        self.calls.append(day)
        if day in self.failing:
            raise FetchError(day, "connection refused")
        records = self.roster.get(day, self.default)
        return records(day) if callable(records) else list(records)


@pytest.fixture
def make_employee():
    return make_record


@pytest.fixture
def settings():
    """Settings with no notification channel configured."""
    return Settings(
        api_url="https://timesheets.example.com/api/reports",
        max_concurrent_fetches=3,
        smtp_user=None,
        smtp_password=None,
        admin_email=None,
        hr_email=None,
        slack_webhook_url=None,
        slack_bot_token=None,
    )


@pytest.fixture
def fake_client_factory():
    return FakeTimesheetClient


@pytest.fixture
def app(settings):
    app = create_app(settings, client=FakeTimesheetClient())
    app.config.update({"TESTING": True})
    return app


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client
