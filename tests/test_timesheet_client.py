"""Tests for the timesheet source client and payload normalization."""
import threading
from datetime import date
from unittest.mock import MagicMock

import pytest
import requests

from timesheet_monitor.extractors.timesheet_client import SAMPLE_ROSTER, TimesheetClient
from timesheet_monitor.transformers import aggregator, classifier, data_processor
from timesheet_monitor.utilities.config import Settings
from timesheet_monitor.utilities.exceptions import ConfigurationError, FetchError

DAY = date(2025, 10, 6)


def _response(status_code=200, payload=None, json_error=None):
    response = MagicMock()
    response.status_code = status_code
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = payload
    return response


def _client(settings, response=None, error=None):
    session = MagicMock()
    session.headers = {}
    if error is not None:
        session.get.side_effect = error
    else:
        session.get.return_value = response
    return TimesheetClient(settings, session=session), session


class TestFetch:

    def test_queries_single_day_window(self, settings):
        client, session = _client(settings, _response(payload=[]))
        client.fetch(DAY)

        session.get.assert_called_once_with(
            "https://timesheets.example.com/api/reports/2025-10-06/2025-10-06",
            timeout=30,
        )
        assert session.headers["User-Agent"] == "TimesheetMonitor-API/1.0"

    def test_normalizes_records(self, settings):
        payload = [
            {
                "userId": "U1",
                "name": "Alice",
                "email": "alice@example.com",
                "allocatedHours": 8,
                "loggedHours": "7.5",
                "flaggedHours": 1,
                "isActive": True,
                "employementStatus": "Full-time",
            },
            {"userId": "U2", "name": "Bob", "loggedHours": 0, "isActive": False},
        ]
        client, _ = _client(settings, _response(payload=payload))

        records = client.fetch(DAY)

        assert [record.employee_id for record in records] == ["U1", "U2"]
        alice, bob = records
        assert alice.logged_hours == 7.5
        assert alice.flagged_hours == 1.0
        assert alice.employment_status == "Full-time"
        assert bob.email == "N/A"
        assert bob.employment_status == "N/A"
        assert bob.active is False
        assert bob.allocated_hours == 0.0

    def test_timeout_becomes_fetch_error(self, settings):
        client, _ = _client(settings, error=requests.exceptions.Timeout("slow"))
        with pytest.raises(FetchError) as excinfo:
            client.fetch(DAY)
        assert excinfo.value.day == DAY
        assert "Timed out" in excinfo.value.message

    def test_connection_refused_becomes_fetch_error(self, settings):
        client, _ = _client(settings, error=requests.exceptions.ConnectionError("refused"))
        with pytest.raises(FetchError) as excinfo:
            client.fetch(DAY)
        assert isinstance(excinfo.value.cause, requests.exceptions.ConnectionError)

    @pytest.mark.parametrize("status_code", [404, 500, 503])
    def test_non_2xx_becomes_fetch_error(self, settings, status_code):
        client, _ = _client(settings, _response(status_code=status_code, payload=[]))
        with pytest.raises(FetchError, match=str(status_code)):
            client.fetch(DAY)

    def test_undecodable_body_becomes_fetch_error(self, settings):
        client, _ = _client(settings, _response(json_error=ValueError("no json")))
        with pytest.raises(FetchError):
            client.fetch(DAY)

    def test_non_list_body_becomes_fetch_error(self, settings):
        client, _ = _client(settings, _response(payload={"error": "bad"}))
        with pytest.raises(FetchError, match="list of records"):
            client.fetch(DAY)

    def test_sample_roster_appended_when_enabled(self):
        settings = Settings(api_url="https://timesheets.example.com/api", include_sample_data=True)
        client, _ = _client(settings, _response(payload=[{"userId": "U1", "name": "Alice", "loggedHours": 8}]))

        records = client.fetch(DAY)

        assert len(records) == 1 + len(SAMPLE_ROSTER)
        assert records[1].employee_id == "SAMPLE001"

    def test_missing_base_url_is_configuration_error(self):
        with pytest.raises(ConfigurationError):
            TimesheetClient(Settings(api_url=""))

    def test_repeated_record_is_one_missed_day(self, settings):
        payload = [{"name": "Alex", "loggedHours": 0}, {"name": "Alex", "loggedHours": 0}]
        client, _ = _client(settings, _response(payload=payload))

        summary, _ = aggregator.aggregate([classifier.classify(client.fetch(DAY), DAY)])

        assert len(summary) == 1
        assert summary[0].total_days_missed == 1


class TestSessions:

    def test_each_thread_gets_its_own_session(self, settings):
        client = TimesheetClient(settings)
        sessions = []

        worker = threading.Thread(target=lambda: sessions.append(client.session))
        worker.start()
        worker.join()

        assert client.session is client.session
        assert sessions[0] is not client.session
        assert sessions[0].headers["User-Agent"] == "TimesheetMonitor-API/1.0"

    def test_injected_session_is_shared(self, settings):
        client, session = _client(settings, _response(payload=[]))
        sessions = []

        worker = threading.Thread(target=lambda: sessions.append(client.session))
        worker.start()
        worker.join()

        assert sessions == [session]
        assert client.session is session


class TestNormalizePayload:

    def test_empty_payload(self):
        frame = data_processor.normalize_timesheet_payload([])
        assert frame.empty
        assert list(frame.columns) == data_processor.RECORD_COLUMNS

    def test_invalid_and_negative_hours_default_to_zero(self):
        frame = data_processor.normalize_timesheet_payload([
            {"userId": "U1", "name": "A", "loggedHours": "abc", "flaggedHours": -3},
        ])
        assert frame.loc[0, "logged_hours"] == 0.0
        assert frame.loc[0, "flagged_hours"] == 0.0

    def test_active_flag_variants(self):
        frame = data_processor.normalize_timesheet_payload([
            {"userId": "U1", "name": "A"},
            {"userId": "U2", "name": "B", "isActive": "false"},
            {"userId": "U3", "name": "C", "isActive": 0},
            {"userId": "U4", "name": "D", "isActive": "true"},
        ])
        assert list(frame["active"]) == [True, False, False, True]

    def test_missing_id_falls_back_to_name(self):
        frame = data_processor.normalize_timesheet_payload([{"name": "Carol", "loggedHours": 8}])
        assert frame.loc[0, "employee_id"] == "Carol"

    def test_drops_records_without_identity(self):
        frame = data_processor.normalize_timesheet_payload([
            {"loggedHours": 8},
            {"userId": "U1", "name": "A"},
        ])
        assert list(frame["employee_id"]) == ["U1"]

    def test_accepts_both_status_spellings(self):
        frame = data_processor.normalize_timesheet_payload([
            {"userId": "U1", "name": "A", "employmentStatus": "Contract"},
            {"userId": "U2", "name": "B", "employementStatus": "Full-time"},
        ])
        assert list(frame["employment_status"]) == ["Contract", "Full-time"]
