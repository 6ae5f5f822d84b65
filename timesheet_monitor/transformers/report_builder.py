"""Rendering of analysis results into report and reminder messages."""
import time
from datetime import datetime
from html import escape
from typing import Any, Callable, Dict, List, Sequence, Tuple

from timesheet_monitor.utilities import config
from timesheet_monitor.utilities.models import EmployeeIssueSummary, WeekInfo, WindowAnalysis


def format_hours(value: float) -> str:
    """8.0 -> '8', 7.5 -> '7.5'."""
    return ("%.2f" % value).rstrip("0").rstrip(".")


def preview(
    entries: Sequence[EmployeeIssueSummary],
    formatter: Callable[[EmployeeIssueSummary], str],
    limit: int = config.REPORT_PREVIEW_LIMIT,
) -> str:
    """
    List at most ``limit`` entries, one per line, with a '+N more' tail.

    Args:
        entries: Summaries to list
        formatter: Renders one entry as a line
        limit: Maximum entries shown

    Returns:
        Newline-joined preview text
    """
    lines = [formatter(entry) for entry in entries[:limit]]
    if len(entries) > limit:
        lines.append(f"... and {len(entries) - limit} more")
    return "\n".join(lines)


def _no_submission_line(entry: EmployeeIssueSummary) -> str:
    return f"• {entry.name} ({entry.employment_status}) - {entry.total_days_missed} day(s) missed"


def _flagged_line(entry: EmployeeIssueSummary) -> str:
    return f"• {entry.name} - {format_hours(entry.flagged_hours)}h flagged"


def _period(week_info: WeekInfo) -> str:
    return f"{week_info.start_date.isoformat()} to {week_info.end_date.isoformat()}"


def build_slack_report(analysis: WindowAnalysis, channel: str) -> Dict[str, Any]:
    """
    Build the Slack webhook payload for a window.

    Args:
        analysis: Completed window analysis
        channel: Target channel name

    Returns:
        Webhook message dictionary
    """
    week_info = analysis.week_info
    no_submission = analysis.no_submission
    partial = analysis.partial_submission
    flagged = analysis.flagged

    fields: List[Dict[str, Any]] = [
        {"title": "Week Period", "value": _period(week_info), "short": True},
        {"title": "Total Employees", "value": str(analysis.total_employees), "short": True},
        {"title": "No Submission", "value": str(len(no_submission)), "short": True},
        {"title": "Partial Submission", "value": str(len(partial)), "short": True},
        {"title": "Flagged Hours", "value": str(len(flagged)), "short": True},
    ]

    if analysis.failed_days:
        fields.append({
            "title": "Days Not Analyzed",
            "value": ", ".join(day.date.isoformat() for day in analysis.failed_days),
            "short": False,
        })

    if no_submission:
        fields.append({
            "title": f"No Timesheet Submission ({len(no_submission)})",
            "value": preview(no_submission, _no_submission_line),
            "short": False,
        })

    if flagged:
        fields.append({
            "title": f"Flagged Hours ({len(flagged)})",
            "value": preview(flagged, _flagged_line),
            "short": False,
        })

    return {
        "channel": channel,
        "username": config.SLACK_USERNAME,
        "icon_emoji": config.SLACK_ICON_EMOJI,
        "text": f"Weekly Timesheet Report - Week {week_info.week_number}",
        "attachments": [
            {
                "color": "warning" if analysis.total_issues > 0 else "good",
                "fields": fields,
                "footer": config.SLACK_FOOTER,
                "ts": int(time.time()),
            }
        ],
    }


def build_email_report(analysis: WindowAnalysis) -> Tuple[str, str]:
    """
    Build the HTML email report.

    Returns:
        Tuple of (subject, html body)
    """
    week_info = analysis.week_info
    no_submission = analysis.no_submission
    flagged = analysis.flagged

    subject = f"Weekly Timesheet Report - Week {week_info.week_number} ({_period(week_info)})"

    parts = [
        "<html><body style=\"font-family: Arial, sans-serif; margin: 20px;\">",
        "<h2>Weekly Timesheet Monitoring Report</h2>",
        f"<p><strong>Week:</strong> {week_info.week_number} ({_period(week_info)})</p>",
        f"<p><strong>Generated:</strong> {datetime.now().strftime('%Y-%m-%d %H:%M')}</p>",
        "<h3>Summary</h3><ul>",
        f"<li><strong>Total Employees:</strong> {analysis.total_employees}</li>",
        f"<li><strong>No Submission:</strong> {len(no_submission)}</li>",
        f"<li><strong>Partial Submission:</strong> {len(analysis.partial_submission)}</li>",
        f"<li><strong>Flagged Hours:</strong> {len(flagged)}</li>",
        "</ul>",
    ]

    if analysis.failed_days:
        parts.append("<h3>Days Not Analyzed</h3><ul>")
        for day in analysis.failed_days:
            parts.append(f"<li>{day.date.isoformat()} ({day.day_name}): {escape(day.error or '')}</li>")
        parts.append("</ul>")

    if no_submission:
        parts.append(f"<h3>No Timesheet Submission ({len(no_submission)} employees)</h3><ul>")
        for entry in no_submission:
            days = ", ".join(f"{ref.day_name} {ref.date.isoformat()}" for ref in entry.days_missed)
            parts.append(
                f"<li><strong>{escape(entry.name)}</strong> ({escape(entry.employment_status)})<br>"
                f"<small>User ID: {escape(entry.employee_id)} | Missed {entry.total_days_missed} day(s): {days}</small></li>"
            )
        parts.append("</ul>")

    if flagged:
        parts.append(f"<h3>Flagged Hours Requiring Review ({len(flagged)} employees)</h3><ul>")
        for entry in flagged:
            days = ", ".join(ref.date.isoformat() for ref in entry.flagged_days)
            parts.append(
                f"<li><strong>{escape(entry.name)}</strong><br>"
                f"<small>User ID: {escape(entry.employee_id)} | Flagged Hours: {format_hours(entry.flagged_hours)}h on {days}</small></li>"
            )
        parts.append("</ul>")

    parts.append(
        "<p style=\"font-size: 12px; color: #666;\">"
        "This is an automated report generated by the Timesheet Monitoring System.</p>"
    )
    parts.append("</body></html>")
    return subject, "\n".join(parts)


def build_no_submission_reminder(entry: EmployeeIssueSummary, week_info: WeekInfo) -> str:
    days = ", ".join(f"{ref.day_name} ({ref.date.isoformat()})" for ref in entry.days_missed)
    return (
        "*Timesheet Reminder*\n\n"
        f"Hi {entry.name}!\n\n"
        f"You haven't submitted your timesheet for Week {week_info.week_number} ({_period(week_info)}).\n"
        f"Days without a submission: {days}.\n\n"
        "Please submit your timesheet as soon as possible.\n\n"
        "If you have any questions, please contact HR.\n\nThanks!"
    )


def build_flagged_reminder(entry: EmployeeIssueSummary, week_info: WeekInfo) -> str:
    return (
        "*Flagged Hours Alert*\n\n"
        f"Hi {entry.name}!\n\n"
        f"Your timesheet for Week {week_info.week_number} ({_period(week_info)}) has "
        f"{format_hours(entry.flagged_hours)} flagged hours that require review.\n\n"
        "Please review and correct any flagged entries.\n\nThanks!"
    )
