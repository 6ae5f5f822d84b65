"""Main entry point for the timesheet compliance monitor."""
import argparse
import json
import logging
import sys
from datetime import date

from dotenv import load_dotenv

from timesheet_monitor.pipelines import pipeline
from timesheet_monitor.utilities import utils
from timesheet_monitor.utilities.config import Settings
from timesheet_monitor.utilities.exceptions import ConfigurationError
from timesheet_monitor.utilities.models import DateRange

logger = logging.getLogger(__name__)


def parse_date(date_str: str) -> date:
    """Parse date string in YYYY-MM-DD format."""
    try:
        return date.fromisoformat(date_str)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date format: {date_str}. Use YYYY-MM-DD")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Check employee timesheet compliance and send alerts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Analyze the previous week (default)
  python main.py

  # Analyze a specific date range
  python main.py --start-date 2025-10-06 --end-date 2025-10-10

  # Analyze the previous week and send the report plus reminders
  python main.py --notify --reminders

  # Print the full analysis as JSON
  python main.py --previous-week --json

  # Run the HTTP API
  python main.py --serve --port 3000
        """,
    )

    parser.add_argument(
        "--previous-week",
        action="store_true",
        help="Analyze the previous Monday-Sunday week (default behavior)",
    )

    parser.add_argument(
        "--start-date",
        type=parse_date,
        help="Start date for analysis (YYYY-MM-DD format)",
    )

    parser.add_argument(
        "--end-date",
        type=parse_date,
        help="End date for analysis (YYYY-MM-DD format)",
    )

    parser.add_argument(
        "--notify",
        action="store_true",
        help="Send the report to the configured email and Slack channels",
    )

    parser.add_argument(
        "--reminders",
        action="store_true",
        help="Send Slack direct messages to employees with issues",
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the full analysis as JSON",
    )

    parser.add_argument(
        "--serve",
        action="store_true",
        help="Run the HTTP API instead of a one-off analysis",
    )

    parser.add_argument(
        "--port",
        type=int,
        help="Port for --serve (default: PORT env or 3000)",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Set logging level (default: INFO)",
    )

    return parser


def resolve_window(args: argparse.Namespace) -> DateRange:
    """Pick the analysis window from the parsed arguments."""
    if args.previous_week or (args.start_date is None and args.end_date is None):
        return utils.previous_week().date_range
    if args.start_date is None or args.end_date is None:
        raise ConfigurationError("Both --start-date and --end-date are required for a custom range")
    return DateRange(start=args.start_date, end=args.end_date)


def print_summary(analysis) -> None:
    week = analysis.week_info
    print(f"Week {week.week_number}: {week.start_date} to {week.end_date}")
    print(f"Working days: {', '.join(day.isoformat() for day in analysis.working_days) or '-'}")
    for day in analysis.failed_days:
        print(f"  ! {day.date} ({day.day_name}) not analyzed: {day.error}")
    if not analysis.summary:
        print("No timesheet issues found.")
        return
    for entry in analysis.summary:
        flagged = f", {len(entry.flagged_days)} flagged day(s)" if entry.flagged_days else ""
        print(f"  {entry.name} ({entry.employee_id}): {entry.total_days_missed} day(s) missed{flagged}")


def main(argv=None) -> int:
    """Main entry point with CLI argument parsing."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Configure logging with detailed format
    log_format = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format=log_format,
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    load_dotenv()

    try:
        settings = Settings.from_env()
        if args.serve:
            from timesheet_monitor.api.routes import create_app

            port = args.port or settings.port
            logger.info("Starting Timesheet Monitor API on port %d", port)
            create_app(settings).run(host="0.0.0.0", port=port)
            return 0

        window = resolve_window(args)
    except ConfigurationError as exc:
        logger.error("Configuration error: %s", exc.message)
        return 2

    try:
        analysis, outcomes = pipeline.run_full_pipeline(
            window=window,
            settings=settings,
            send_report=args.notify,
            send_reminders=args.reminders,
        )
    except KeyboardInterrupt:
        logger.warning("Pipeline interrupted by user")
        return 130
    except Exception as exc:
        logger.error("=" * 70)
        logger.error("PIPELINE EXECUTION FAILED")
        logger.error("=" * 70)
        logger.exception("Fatal error: %s", exc)
        return 1

    if args.json:
        payload = analysis.to_dict()
        payload["notifications"] = [outcome.to_dict() for outcome in outcomes]
        print(json.dumps(payload, indent=2))
    else:
        print_summary(analysis)
    return 0


if __name__ == "__main__":
    sys.exit(main())
