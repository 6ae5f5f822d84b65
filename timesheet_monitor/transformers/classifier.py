"""Daily compliance rules applied to one day's timesheet records."""
from datetime import date
from typing import Sequence

from timesheet_monitor.utilities import utils
from timesheet_monitor.utilities.models import DailyIssue, DailyIssueSet, EmployeeRecord

FLAGGED_ISSUE_TEXT = "Timesheet has flagged hours requiring review"


def no_submission_text(day: date) -> str:
    return f"No timesheet submission for {day.isoformat()}"


def classify(records: Sequence[EmployeeRecord], day: date) -> DailyIssueSet:
    """
    Sort one day's active records into issue buckets.

    Rules (independent, a record may land in both):
      - 0 hours logged -> no_submission
      - any flagged hours -> flagged_hours

    Inactive records are skipped but still counted in total_employees.
    Buckets keep the input order.

    Args:
        records: Records fetched for ``day``
        day: The day being classified

    Returns:
        DailyIssueSet for the day
    """
    no_submission = []
    flagged = []

    for record in records:
        if not record.active:
            continue
        if record.logged_hours == 0:
            no_submission.append(DailyIssue(record=record, issue=no_submission_text(day)))
        if record.flagged_hours > 0:
            flagged.append(DailyIssue(record=record, issue=FLAGGED_ISSUE_TEXT))

    return DailyIssueSet(
        date=day,
        day_name=utils.day_name(day),
        no_submission=no_submission,
        flagged_hours=flagged,
        partial_submission=[],
        total_employees=len(records),
    )
