"""HTTP client for the external timesheet reporting source."""
import logging
import threading
from datetime import date
from typing import Any, Dict, List, Optional

import requests

from timesheet_monitor.transformers import data_processor
from timesheet_monitor.utilities import config
from timesheet_monitor.utilities.config import Settings
from timesheet_monitor.utilities.exceptions import ConfigurationError, FetchError
from timesheet_monitor.utilities.models import EmployeeRecord

logger = logging.getLogger(__name__)

# Demo roster appended to every day when include_sample_data is set
SAMPLE_ROSTER: List[Dict[str, Any]] = [
    {
        "name": "Sneha Priyaa",
        "userId": "SAMPLE001",
        "email": "sneha.priyaa@fleetstudio.com",
        "allocatedHours": 40,
        "loggedHours": 0,
        "flaggedHours": 0,
        "isActive": True,
        "employementStatus": "Full-time",
    },
    {
        "name": "Test User - Partial Submission",
        "userId": "SAMPLE002",
        "email": "test.partial@fleetstudio.com",
        "allocatedHours": 40,
        "loggedHours": 25,
        "flaggedHours": 0,
        "isActive": True,
        "employementStatus": "Full-time",
    },
    {
        "name": "Test User - Flagged Hours",
        "userId": "SAMPLE003",
        "email": "test.flagged@fleetstudio.com",
        "allocatedHours": 40,
        "loggedHours": 40,
        "flaggedHours": 8,
        "isActive": True,
        "employementStatus": "Full-time",
    },
]


class TimesheetClient:
    """
    Queries the reporting endpoint one window at a time.

    Days are fetched from worker threads, so each thread gets its own
    requests.Session. A session passed in is used as given by every thread.
    """

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None):
        if not settings.api_url:
            raise ConfigurationError("TIMESHEET_API_URL is not configured")
        self.settings = settings
        self.base_url = settings.api_url.rstrip("/")
        self._shared_session = self._prepare(session) if session is not None else None
        self._local = threading.local()

    @staticmethod
    def _prepare(session: requests.Session) -> requests.Session:
        session.headers.update({
            "Content-Type": "application/json",
            "User-Agent": config.USER_AGENT,
        })
        return session

    @property
    def session(self) -> requests.Session:
        if self._shared_session is not None:
            return self._shared_session
        session = getattr(self._local, "session", None)
        if session is None:
            session = self._prepare(requests.Session())
            self._local.session = session
        return session

    def build_url(self, start: date, end: date) -> str:
        return f"{self.base_url}/{start.isoformat()}/{end.isoformat()}"

    def fetch_payload(self, start: date, end: date) -> List[Dict[str, Any]]:
        """
        Fetch raw records for a window.

        Args:
            start: First day of the window
            end: Last day of the window

        Returns:
            List of record dictionaries as sent by the source

        Raises:
            FetchError: On transport failure, non-2xx status or a malformed body
        """
        url = self.build_url(start, end)
        logger.debug("GET %s", url)

        try:
            response = self.session.get(url, timeout=self.settings.request_timeout)
        except requests.exceptions.Timeout as exc:
            raise FetchError(start, exc, f"Timed out after {self.settings.request_timeout}s fetching {start}") from exc
        except requests.exceptions.RequestException as exc:
            raise FetchError(start, exc) from exc

        if not 200 <= response.status_code < 300:
            raise FetchError(start, f"API returned status {response.status_code}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise FetchError(start, exc, f"Undecodable response body for {start}") from exc

        if not isinstance(payload, list) or not all(isinstance(item, dict) for item in payload):
            raise FetchError(start, f"Expected a list of records, got {type(payload).__name__}")

        return payload

    def fetch(self, day: date) -> List[EmployeeRecord]:
        """
        Fetch and normalize one day's records.

        Args:
            day: The day to query (as a single-day window)

        Returns:
            EmployeeRecord list in source order

        Raises:
            FetchError: If the source call fails
        """
        payload = self.fetch_payload(day, day)
        if self.settings.include_sample_data:
            payload = payload + [dict(user) for user in SAMPLE_ROSTER]

        frame = data_processor.normalize_timesheet_payload(payload)
        records = data_processor.records_from_frame(frame)
        logger.info("Fetched %d record(s) for %s", len(records), day)
        return records
