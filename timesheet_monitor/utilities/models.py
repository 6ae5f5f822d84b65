"""Data models for timesheet monitoring."""
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class DateRange:
    """Inclusive window of calendar dates."""
    start: date
    end: date

    @property
    def is_empty(self) -> bool:
        return self.start > self.end


@dataclass(frozen=True)
class WeekInfo:
    """Resolved reporting week."""
    start_date: date
    end_date: date
    week_number: int

    @property
    def date_range(self) -> DateRange:
        return DateRange(start=self.start_date, end=self.end_date)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "weekNumber": self.week_number,
        }


@dataclass(frozen=True)
class DayRef:
    """A single day an employee had an issue on."""
    date: date
    day_name: str

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.date.isoformat(), "dayName": self.day_name}


@dataclass(frozen=True)
class EmployeeRecord:
    """One employee's timesheet totals for one queried day."""
    employee_id: str
    name: str
    email: str = "N/A"
    allocated_hours: float = 0.0
    logged_hours: float = 0.0
    flagged_hours: float = 0.0
    active: bool = True
    employment_status: str = "N/A"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "userId": self.employee_id,
            "name": self.name,
            "email": self.email,
            "allocatedHours": self.allocated_hours,
            "loggedHours": self.logged_hours,
            "flaggedHours": self.flagged_hours,
            "isActive": self.active,
            "employmentStatus": self.employment_status,
        }


@dataclass(frozen=True)
class DailyIssue:
    """An employee record placed in an issue bucket, with the reason."""
    record: EmployeeRecord
    issue: str

    def to_dict(self) -> Dict[str, Any]:
        payload = self.record.to_dict()
        payload["issue"] = self.issue
        return payload


@dataclass
class DailyIssueSet:
    """
    Classification of one working day.

    A day whose fetch failed keeps its date and name, carries ``error``,
    and leaves every bucket as None.
    """
    date: date
    day_name: str
    no_submission: Optional[List[DailyIssue]] = None
    flagged_hours: Optional[List[DailyIssue]] = None
    partial_submission: Optional[List[DailyIssue]] = None
    total_employees: Optional[int] = None
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def issues_found(self) -> int:
        if self.failed:
            return 0
        return len(self.no_submission or []) + len(self.flagged_hours or [])

    def to_dict(self) -> Dict[str, Any]:
        if self.failed:
            return {
                "date": self.date.isoformat(),
                "dayName": self.day_name,
                "error": self.error,
                "noSubmission": None,
                "flaggedHours": None,
            }
        return {
            "date": self.date.isoformat(),
            "dayName": self.day_name,
            "noSubmission": [issue.to_dict() for issue in self.no_submission or []],
            "flaggedHours": [issue.to_dict() for issue in self.flagged_hours or []],
            "partialSubmission": [issue.to_dict() for issue in self.partial_submission or []],
            "totalEmployees": self.total_employees,
            "issuesFound": self.issues_found,
        }


@dataclass
class EmployeeIssueSummary:
    """Per-employee issues across the whole window."""
    employee_id: str
    name: str
    email: str
    employment_status: str
    days_missed: List[DayRef] = field(default_factory=list)
    flagged_days: List[DayRef] = field(default_factory=list)
    flagged_hours: float = 0.0
    total_days_missed: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "userId": self.employee_id,
            "name": self.name,
            "email": self.email,
            "employmentStatus": self.employment_status,
            "daysWithNoSubmission": [day.to_dict() for day in self.days_missed],
            "totalDaysMissed": self.total_days_missed,
            "flaggedDays": [day.to_dict() for day in self.flagged_days],
            "flaggedHours": self.flagged_hours,
        }


@dataclass
class WindowAnalysis:
    """Result of analyzing every working day in a window."""
    week_info: WeekInfo
    working_days: List[date]
    daily_analysis: List[DailyIssueSet]
    summary: List[EmployeeIssueSummary]
    total_employees: int = 0
    analyzed_at: datetime = field(default_factory=datetime.now)

    @property
    def no_submission(self) -> List[EmployeeIssueSummary]:
        return [entry for entry in self.summary if entry.total_days_missed > 0]

    @property
    def flagged(self) -> List[EmployeeIssueSummary]:
        return [entry for entry in self.summary if entry.flagged_days]

    @property
    def partial_submission(self) -> List[EmployeeIssueSummary]:
        # Defined category with no rule feeding it yet
        return []

    @property
    def failed_days(self) -> List[DailyIssueSet]:
        return [day for day in self.daily_analysis if day.failed]

    @property
    def total_issues(self) -> int:
        return len(self.no_submission) + len(self.partial_submission) + len(self.flagged)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "weekInfo": self.week_info.to_dict(),
            "workingDays": [day.isoformat() for day in self.working_days],
            "dailyAnalysis": [day.to_dict() for day in self.daily_analysis],
            "summary": [entry.to_dict() for entry in self.summary],
            "totalEmployees": self.total_employees,
            "totalDaysAnalyzed": len(self.working_days),
            "analyzedAt": self.analyzed_at.isoformat(),
        }

    def missing_by_day(self) -> Dict[str, Any]:
        """Response shape listing only employees with missed days."""
        missed = self.no_submission
        return {
            "weekInfo": self.week_info.to_dict(),
            "workingDays": [day.isoformat() for day in self.working_days],
            "summary": [entry.to_dict() for entry in missed],
            "totalEmployeesWithMisses": len(missed),
            "analyzedAt": self.analyzed_at.isoformat(),
        }


@dataclass
class DispatchOutcome:
    """Result of one delivery attempt."""
    channel: str
    recipient: Optional[str] = None
    success: bool = True
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "channel": self.channel,
            "recipient": self.recipient,
            "success": self.success,
            "error": self.error,
        }
