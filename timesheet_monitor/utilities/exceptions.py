"""
Exception hierarchy for the timesheet monitor.

Each exception carries the HTTP status code the API layer answers with,
so routes can raise and let the registered error handler format the reply.

Exception Hierarchy:
    TimesheetMonitorError (500)
    ├── ValidationError (400)
    ├── ConfigurationError (500)
    │   └── InvalidDateError (500)
    ├── FetchError (502)
    └── DispatchError (502)
"""
from datetime import date
from typing import Any, Dict, Optional


class TimesheetMonitorError(Exception):
    """
    Base exception for all timesheet monitor errors.

    Attributes:
        status_code: HTTP status code for the error
        error_type: String identifier for the error type
        message: Human-readable error message
        details: Additional context about the error
    """
    status_code = 500
    error_type = "TimesheetMonitorError"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        if status_code:
            self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to a JSON-serializable dictionary."""
        result = {
            "success": False,
            "error": self.error_type,
            "message": self.message,
        }
        if self.details:
            result.update(self.details)
        return result


class ValidationError(TimesheetMonitorError):
    """Bad or missing request input."""
    status_code = 400
    error_type = "ValidationError"


class ConfigurationError(TimesheetMonitorError):
    """Fatal setup problem, such as a malformed range or missing source URL."""
    status_code = 500
    error_type = "ConfigurationError"


class InvalidDateError(ConfigurationError):
    """A value that should be a calendar date is not one."""
    error_type = "InvalidDateError"


class FetchError(TimesheetMonitorError):
    """
    The timesheet source failed for a single day.

    Attributes:
        day: The day whose query failed
        cause: Underlying exception, if any
    """
    status_code = 502
    error_type = "FetchError"

    def __init__(self, day: date, cause: Any = None, message: Optional[str] = None):
        text = message or f"Failed to fetch timesheets for {day}: {cause}"
        super().__init__(text, details={"date": day.isoformat()})
        self.day = day
        self.cause = cause


class DispatchError(TimesheetMonitorError):
    """A notification could not be delivered on one channel or to one recipient."""
    status_code = 502
    error_type = "DispatchError"

    def __init__(self, channel: str, recipient: Optional[str] = None, cause: Any = None):
        target = f"{channel} -> {recipient}" if recipient else channel
        super().__init__(f"Delivery failed on {target}: {cause}")
        self.channel = channel
        self.recipient = recipient
        self.cause = cause
