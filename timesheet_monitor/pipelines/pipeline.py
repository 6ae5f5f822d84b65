"""Main orchestration pipeline for timesheet compliance analysis."""
import logging
import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeoutError, as_completed
from datetime import date, datetime
from typing import List, Optional, Sequence, Tuple

from timesheet_monitor.extractors.timesheet_client import TimesheetClient
from timesheet_monitor.loaders.notification_service import NotificationDispatcher
from timesheet_monitor.transformers import aggregator, classifier
from timesheet_monitor.utilities import utils
from timesheet_monitor.utilities.config import Settings
from timesheet_monitor.utilities.exceptions import ConfigurationError, FetchError
from timesheet_monitor.utilities.models import (
    DailyIssueSet,
    DateRange,
    DispatchOutcome,
    WindowAnalysis,
)

logger = logging.getLogger(__name__)


def _error_entry(day: date, message: str) -> DailyIssueSet:
    return DailyIssueSet(date=day, day_name=utils.day_name(day), error=message)


def analyze_day(client: TimesheetClient, day: date) -> DailyIssueSet:
    """
    Fetch and classify a single working day.

    A failed fetch becomes an error entry for that day instead of an
    exception; only configuration errors propagate.
    """
    try:
        records = client.fetch(day)
    except FetchError as exc:
        logger.error("✗ Error analyzing %s: %s", day, exc.message)
        return _error_entry(day, exc.message)
    except ConfigurationError:
        raise
    except Exception as exc:
        logger.exception("✗ Unexpected error analyzing %s", day)
        return _error_entry(day, f"{type(exc).__name__}: {exc}")

    issue_set = classifier.classify(records, day)
    logger.info(
        "✓ %s (%s): %d employees, %d no submission, %d flagged",
        day,
        issue_set.day_name,
        issue_set.total_employees,
        len(issue_set.no_submission),
        len(issue_set.flagged_hours),
    )
    return issue_set


def analyze_days(
    client: TimesheetClient,
    days: Sequence[date],
    max_workers: int = 1,
    timeout: Optional[float] = None,
) -> List[DailyIssueSet]:
    """
    Analyze days concurrently, returning results in the order of ``days``.

    Args:
        client: Timesheet source client
        days: Working days to analyze
        max_workers: Upper bound on simultaneous source calls
        timeout: Seconds to wait for all days; unfinished days become error entries

    Returns:
        One DailyIssueSet per day, same order as ``days``
    """
    if not days:
        return []

    results: List[Optional[DailyIssueSet]] = [None] * len(days)
    executor = ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(days))))
    try:
        future_to_index = {
            executor.submit(analyze_day, client, day): index
            for index, day in enumerate(days)
        }
        try:
            for future in as_completed(future_to_index, timeout=timeout):
                results[future_to_index[future]] = future.result()
        except FuturesTimeoutError:
            logger.error("✗ Analysis timed out after %s seconds", timeout)
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    return [
        result if result is not None else _error_entry(day, f"Analysis timed out after {timeout} seconds")
        for day, result in zip(days, results)
    ]


def analyze_window(
    window: DateRange,
    client: Optional[TimesheetClient] = None,
    settings: Optional[Settings] = None,
) -> WindowAnalysis:
    """
    Analyze every working day in a window and aggregate per employee.

    Args:
        window: Inclusive date range to analyze
        client: Timesheet source client (built from settings if not provided)
        settings: Runtime settings (read from the environment if not provided)

    Returns:
        WindowAnalysis with daily results and the per-employee summary

    Raises:
        ConfigurationError: If the window is malformed or the source is not configured
    """
    settings = settings or Settings.from_env()
    if not isinstance(window, DateRange):
        raise ConfigurationError(f"Expected a DateRange, got {type(window).__name__}")
    window = utils.create_date_range(window.start, window.end)

    week_info = utils.week_info_for(window)
    days = utils.working_days(window)
    client = client or TimesheetClient(settings)

    logger.info(
        "Analyzing %s to %s (week %d): %d working day(s)",
        week_info.start_date,
        week_info.end_date,
        week_info.week_number,
        len(days),
    )

    daily = analyze_days(
        client,
        days,
        max_workers=settings.max_concurrent_fetches,
        timeout=settings.analysis_timeout,
    )
    summary, total_employees = aggregator.aggregate(daily)

    failed = sum(1 for day in daily if day.failed)
    if failed:
        logger.warning("⚠ %d of %d day(s) could not be analyzed", failed, len(daily))

    return WindowAnalysis(
        week_info=week_info,
        working_days=days,
        daily_analysis=daily,
        summary=summary,
        total_employees=total_employees,
        analyzed_at=datetime.now(),
    )


def run_full_pipeline(
    window: Optional[DateRange] = None,
    settings: Optional[Settings] = None,
    client: Optional[TimesheetClient] = None,
    dispatcher: Optional[NotificationDispatcher] = None,
    send_report: bool = False,
    send_reminders: bool = False,
) -> Tuple[WindowAnalysis, List[DispatchOutcome]]:
    """
    Run analysis and, if requested, notifications.

    Args:
        window: Date range to analyze (previous week if not provided)
        settings: Runtime settings (read from the environment if not provided)
        client: Timesheet source client
        dispatcher: Notification dispatcher
        send_report: If True, send the report to the report channels
        send_reminders: If True, direct-message each flagged employee

    Returns:
        Tuple of (analysis, delivery outcomes)
    """
    settings = settings or Settings.from_env()
    window = window or utils.previous_week().date_range

    logger.info("=" * 70)
    logger.info("STARTING TIMESHEET COMPLIANCE PIPELINE")
    logger.info("Date range: %s to %s", window.start, window.end)
    logger.info("=" * 70)

    start_time = time.time()
    analysis = analyze_window(window, client=client, settings=settings)

    logger.info(
        "Summary: %d employee(s) with missed days, %d with flagged hours, %d failed day(s)",
        len(analysis.no_submission),
        len(analysis.flagged),
        len(analysis.failed_days),
    )

    outcomes: List[DispatchOutcome] = []
    if send_report or send_reminders:
        dispatcher = dispatcher or NotificationDispatcher(settings)
        if send_report and send_reminders:
            outcomes = dispatcher.send_all(analysis)
        elif send_report:
            outcomes = dispatcher.send_report(analysis)
        else:
            outcomes = dispatcher.send_reminders(analysis)

        failures = [outcome for outcome in outcomes if not outcome.success]
        if failures:
            logger.warning("⚠ %d of %d notification(s) failed", len(failures), len(outcomes))
        else:
            logger.info("✓ %d notification(s) delivered", len(outcomes))

    elapsed_time = time.time() - start_time
    logger.info("=" * 70)
    logger.info("PIPELINE COMPLETE - Total time: %.2f seconds", elapsed_time)
    logger.info("=" * 70)

    return analysis, outcomes
