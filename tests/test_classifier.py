"""Tests for the daily compliance classifier."""
from datetime import date

from timesheet_monitor.transformers import classifier

DAY = date(2025, 10, 7)


def test_zero_hours_is_no_submission(make_employee):
    result = classifier.classify([make_employee(logged=0)], DAY)

    assert [issue.record.employee_id for issue in result.no_submission] == ["U1"]
    assert result.no_submission[0].issue == "No timesheet submission for 2025-10-07"
    assert result.flagged_hours == []
    assert result.day_name == "Tuesday"


def test_flagged_hours_requires_review(make_employee):
    result = classifier.classify([make_employee(logged=8, flagged=2)], DAY)

    assert result.no_submission == []
    assert len(result.flagged_hours) == 1
    assert "requiring review" in result.flagged_hours[0].issue


def test_record_can_land_in_both_buckets(make_employee):
    record = make_employee(logged=0, flagged=3)
    result = classifier.classify([record], DAY)

    assert result.no_submission[0].record is record
    assert result.flagged_hours[0].record is record


def test_inactive_records_excluded_but_counted(make_employee):
    records = [
        make_employee("U1", "Alice", logged=0, flagged=4, active=False),
        make_employee("U2", "Bob", logged=8),
    ]
    result = classifier.classify(records, DAY)

    assert result.no_submission == []
    assert result.flagged_hours == []
    assert result.total_employees == 2


def test_buckets_keep_input_order(make_employee):
    records = [
        make_employee("U3", "Carol", logged=0),
        make_employee("U1", "Alice", logged=0),
        make_employee("U2", "Bob", logged=0),
    ]
    result = classifier.classify(records, DAY)
    assert [issue.record.name for issue in result.no_submission] == ["Carol", "Alice", "Bob"]


def test_classification_is_pure(make_employee):
    records = [make_employee("U1", "Alice", logged=0, flagged=1), make_employee("U2", "Bob")]
    first = classifier.classify(records, DAY)
    second = classifier.classify(records, DAY)

    assert first == second
    assert first.partial_submission == []
    assert first.error is None
    assert first.issues_found == 2
