"""Date helpers: reporting week resolution and working-day enumeration."""
import math
from datetime import date, datetime, timedelta
from typing import List, Optional, Union

from timesheet_monitor.utilities import config
from timesheet_monitor.utilities.exceptions import (
    ConfigurationError,
    InvalidDateError,
    ValidationError,
)
from timesheet_monitor.utilities.models import DateRange, WeekInfo


def _as_date(value: Union[date, datetime], label: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raise InvalidDateError(f"{label} must be a date, got {type(value).__name__}")


def parse_date(value: Optional[str], field_name: str = "date") -> date:
    """
    Parse date string in YYYY-MM-DD format.

    Raises:
        ValidationError: If the value is missing or not an ISO date
    """
    if value is None or str(value).strip() == "":
        raise ValidationError(f"{field_name} is required")
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise ValidationError(f"Invalid {field_name}: {value}. Use YYYY-MM-DD")


def day_name(day: date) -> str:
    """English weekday name for a date."""
    return config.WEEKDAY_NAMES[day.weekday()]


def week_number(day: Union[date, datetime]) -> int:
    """
    Week of the year for a date.

    Counts days since January 1st, offset by January 1st's weekday
    (Sunday = 0), and rounds up to whole weeks. Close to, but not the same
    as, the ISO-8601 week number around year boundaries.
    """
    day = _as_date(day, "day")
    first_day = date(day.year, 1, 1)
    past_days = (day - first_day).days
    first_weekday = (first_day.weekday() + 1) % 7
    return math.ceil((past_days + first_weekday + 1) / 7)


def previous_week(now: Optional[Union[date, datetime]] = None) -> WeekInfo:
    """
    Resolve the Monday-Sunday week before the one containing ``now``.

    Sunday belongs to the week that started six days earlier, so running on
    a Sunday still reports the week before that one.

    Args:
        now: Reference moment (defaults to the current local time)

    Returns:
        WeekInfo for the previous week

    Raises:
        InvalidDateError: If ``now`` is not a date or datetime
    """
    today = _as_date(datetime.now() if now is None else now, "now")
    current_monday = today - timedelta(days=today.weekday())
    last_monday = current_monday - timedelta(days=7)
    last_sunday = last_monday + timedelta(days=6)
    return WeekInfo(
        start_date=last_monday,
        end_date=last_sunday,
        week_number=week_number(last_monday),
    )


def week_info_for(window: DateRange) -> WeekInfo:
    """WeekInfo for an arbitrary window, numbered by its start date."""
    start = _as_date(window.start, "start")
    end = _as_date(window.end, "end")
    return WeekInfo(start_date=start, end_date=end, week_number=week_number(start))


def create_date_range(start_date: Union[str, date], end_date: Union[str, date]) -> DateRange:
    """
    Build a DateRange from dates or ISO strings.

    Raises:
        ConfigurationError: If either bound cannot be read as a date
    """
    bounds = []
    for label, value in (("startDate", start_date), ("endDate", end_date)):
        if isinstance(value, str):
            try:
                value = date.fromisoformat(value.strip())
            except ValueError:
                raise ConfigurationError(f"Unparseable {label}: {value!r}")
        bounds.append(_as_date(value, label))
    return DateRange(start=bounds[0], end=bounds[1])


def working_days(window: DateRange) -> List[date]:
    """
    List every Monday-Friday date in the window, inclusive and ascending.

    An inverted window (start after end) yields an empty list.

    Raises:
        ConfigurationError: If the window spans more than MAX_WINDOW_DAYS
    """
    start = _as_date(window.start, "start")
    end = _as_date(window.end, "end")
    if start > end:
        return []

    span = (end - start).days + 1
    if span > config.MAX_WINDOW_DAYS:
        raise ConfigurationError(
            f"Window {start} to {end} spans {span} days; limit is {config.MAX_WINDOW_DAYS}"
        )

    days = []
    for offset in range(span):
        current = start + timedelta(days=offset)
        if current.weekday() < 5:
            days.append(current)
    return days
