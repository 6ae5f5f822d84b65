"""Tests for cross-day aggregation."""
from datetime import date

from timesheet_monitor.transformers import aggregator, classifier
from timesheet_monitor.utilities.models import DailyIssueSet


def _day(n):
    return date(2025, 10, n)


def test_same_employee_on_three_days_is_one_entry(make_employee):
    sets = [classifier.classify([make_employee(logged=0)], _day(n)) for n in (6, 7, 8)]

    summary, _ = aggregator.aggregate(sets)

    assert len(summary) == 1
    entry = summary[0]
    assert entry.total_days_missed == 3
    assert [ref.date for ref in entry.days_missed] == [_day(6), _day(7), _day(8)]
    assert entry.total_days_missed == len(entry.days_missed)


def test_repeated_record_on_one_day_counts_once(make_employee):
    sets = [
        classifier.classify([make_employee(logged=0), make_employee(logged=0)], _day(6)),
        classifier.classify([make_employee(logged=0)], _day(7)),
    ]

    summary, _ = aggregator.aggregate(sets)

    entry = summary[0]
    assert [ref.date for ref in entry.days_missed] == [_day(6), _day(7)]
    assert entry.total_days_missed == 2


def test_flagged_merges_into_existing_entry(make_employee):
    sets = [
        classifier.classify([make_employee(logged=0, flagged=2)], _day(6)),
        classifier.classify([make_employee(logged=8, flagged=1.5)], _day(7)),
    ]

    summary, _ = aggregator.aggregate(sets)

    assert len(summary) == 1
    entry = summary[0]
    assert entry.total_days_missed == 1
    assert [ref.date for ref in entry.flagged_days] == [_day(6), _day(7)]
    assert entry.flagged_hours == 3.5


def test_flagged_only_employee_created_fresh(make_employee):
    summary, _ = aggregator.aggregate([
        classifier.classify([make_employee("U9", "Zed", logged=8, flagged=1)], _day(6)),
    ])

    assert summary[0].employee_id == "U9"
    assert summary[0].total_days_missed == 0
    assert summary[0].days_missed == []


def test_sorted_by_missed_days_then_name(make_employee):
    sets = [
        classifier.classify([
            make_employee("U1", "Carol", logged=0),
            make_employee("U2", "Bob", logged=0),
            make_employee("U3", "Alice", logged=0),
        ], _day(6)),
        classifier.classify([make_employee("U1", "Carol", logged=0)], _day(7)),
    ]

    summary, _ = aggregator.aggregate(sets)

    assert [entry.name for entry in summary] == ["Carol", "Alice", "Bob"]


def test_failed_days_are_skipped(make_employee):
    sets = [
        classifier.classify([make_employee(logged=0)], _day(6)),
        DailyIssueSet(date=_day(7), day_name="Tuesday", error="boom"),
        classifier.classify([make_employee(logged=0)], _day(8)),
    ]

    summary, _ = aggregator.aggregate(sets)

    assert summary[0].total_days_missed == 2
    assert _day(7) not in [ref.date for ref in summary[0].days_missed]


def test_total_employees_is_largest_roster(make_employee):
    sets = [
        classifier.classify([make_employee("U1", "A"), make_employee("U2", "B")], _day(6)),
        classifier.classify([make_employee("U1", "A")], _day(7)),
        classifier.classify(
            [make_employee("U1", "A"), make_employee("U2", "B"), make_employee("U3", "C", active=False)],
            _day(8),
        ),
    ]

    summary, total = aggregator.aggregate(sets)

    assert summary == []
    assert total == 3


def test_monday_only_miss(make_employee):
    sets = [
        classifier.classify([make_employee(logged=0 if n == 6 else 8)], _day(n))
        for n in range(6, 11)
    ]

    summary, _ = aggregator.aggregate(sets)

    assert summary[0].total_days_missed == 1
    assert summary[0].to_dict()["daysWithNoSubmission"] == [{"date": "2025-10-06", "dayName": "Monday"}]
