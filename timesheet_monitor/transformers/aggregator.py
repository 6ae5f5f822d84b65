"""Cross-day aggregation of daily issue sets into per-employee summaries."""
import logging
from typing import Dict, Iterable, List, Tuple

from timesheet_monitor.utilities.models import (
    DailyIssueSet,
    DayRef,
    EmployeeIssueSummary,
    EmployeeRecord,
)

logger = logging.getLogger(__name__)


def _summary_for(
    accumulator: Dict[str, EmployeeIssueSummary],
    record: EmployeeRecord,
) -> EmployeeIssueSummary:
    entry = accumulator.get(record.employee_id)
    if entry is None:
        entry = EmployeeIssueSummary(
            employee_id=record.employee_id,
            name=record.name,
            email=record.email,
            employment_status=record.employment_status,
        )
        accumulator[record.employee_id] = entry
    return entry


def sort_summary(entries: Iterable[EmployeeIssueSummary]) -> List[EmployeeIssueSummary]:
    """Most missed days first, then by name."""
    return sorted(entries, key=lambda entry: (-entry.total_days_missed, entry.name))


def aggregate(daily_sets: Iterable[DailyIssueSet]) -> Tuple[List[EmployeeIssueSummary], int]:
    """
    Fold daily issue sets into one summary entry per employee.

    Failed days are skipped. Each day is recorded at most once per
    employee, both as a missed day and as a flagged day, even when the
    source repeats a record. Flagged hours are added once per flagged day.

    Args:
        daily_sets: Classified days, failed ones included

    Returns:
        Tuple of (sorted summaries, largest per-day roster size)
    """
    accumulator: Dict[str, EmployeeIssueSummary] = {}
    total_employees = 0
    skipped = 0

    for day in daily_sets:
        if day.failed:
            skipped += 1
            continue

        day_ref = DayRef(date=day.date, day_name=day.day_name)

        for issue in day.no_submission or []:
            entry = _summary_for(accumulator, issue.record)
            if day_ref not in entry.days_missed:
                entry.days_missed.append(day_ref)

        for issue in day.flagged_hours or []:
            entry = _summary_for(accumulator, issue.record)
            if day_ref not in entry.flagged_days:
                entry.flagged_days.append(day_ref)
                entry.flagged_hours += issue.record.flagged_hours

        total_employees = max(total_employees, day.total_employees or 0)

    for entry in accumulator.values():
        entry.total_days_missed = len(entry.days_missed)

    if skipped:
        logger.warning("Aggregation skipped %d failed day(s)", skipped)

    return sort_summary(accumulator.values()), total_employees
