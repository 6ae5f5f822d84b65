"""Normalization of timesheet source payloads."""
import logging
from typing import Any, Iterable, List, Mapping

import pandas as pd

from timesheet_monitor.utilities import config
from timesheet_monitor.utilities.models import EmployeeRecord

logger = logging.getLogger(__name__)

RECORD_COLUMNS = [
    "employee_id",
    "name",
    "email",
    "allocated_hours",
    "logged_hours",
    "flagged_hours",
    "active",
    "employment_status",
]

HOURS_COLUMNS = {
    "allocatedHours": "allocated_hours",
    "loggedHours": "logged_hours",
    "flaggedHours": "flagged_hours",
}

FALSE_VALUES = {"false", "0", "no", "off", "inactive"}


def normalize_text_series(series: pd.Series) -> pd.Series:
    """
    Normalize a text series by stripping whitespace.

    Args:
        series: Input series

    Returns:
        Normalized series with missing values as empty strings
    """
    return series.apply(lambda value: "" if _is_missing(value) else str(value).strip())


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (list, dict, tuple)):
        return False
    return bool(pd.isna(value))


def _column(frame: pd.DataFrame, key: str) -> pd.Series:
    if key in frame.columns:
        return frame[key]
    return pd.Series([None] * len(frame), index=frame.index, dtype="object")


def _fill_missing_text(series: pd.Series) -> pd.Series:
    text = normalize_text_series(series)
    return text.where(text != "", config.MISSING_TEXT)


def _to_active(value: Any) -> bool:
    if _is_missing(value):
        return True
    if isinstance(value, str):
        return value.strip().lower() not in FALSE_VALUES
    return bool(value)


def normalize_timesheet_payload(payload: Iterable[Mapping[str, Any]]) -> pd.DataFrame:
    """
    Turn the source's JSON records into a typed frame.

    - Hours columns -> non-negative floats, missing/invalid as 0
    - isActive -> bool, missing treated as active
    - email / employment status -> 'N/A' when missing
    - employee id falls back to the name when the source omits it

    Args:
        payload: Records as returned by the timesheet source

    Returns:
        DataFrame with RECORD_COLUMNS
    """
    rows = list(payload)
    if not rows:
        return pd.DataFrame(columns=RECORD_COLUMNS)

    raw = pd.DataFrame(rows, dtype=object)
    work = pd.DataFrame(index=raw.index)

    work["employee_id"] = normalize_text_series(_column(raw, "userId"))
    work["name"] = normalize_text_series(_column(raw, "name"))
    work["employee_id"] = work["employee_id"].where(work["employee_id"] != "", work["name"])
    work["email"] = _fill_missing_text(_column(raw, "email"))

    for source, target in HOURS_COLUMNS.items():
        hours = pd.to_numeric(_column(raw, source), errors="coerce").astype(float)
        work[target] = hours.fillna(0.0).clip(lower=0.0)

    work["active"] = _column(raw, "isActive").apply(_to_active).astype(bool)

    # The source spells it "employementStatus"; accept either key
    status = _column(raw, "employmentStatus").where(
        _column(raw, "employmentStatus").notna(), _column(raw, "employementStatus")
    )
    work["employment_status"] = _fill_missing_text(status)

    keep_mask = work["employee_id"] != ""
    dropped = len(work) - int(keep_mask.sum())
    if dropped:
        logger.info("Rule: dropped %s record(s) with neither userId nor name", dropped)

    return work.loc[keep_mask, RECORD_COLUMNS].reset_index(drop=True)


def records_from_frame(frame: pd.DataFrame) -> List[EmployeeRecord]:
    """Convert a normalized frame to EmployeeRecord instances, keeping row order."""
    return [
        EmployeeRecord(
            employee_id=row.employee_id,
            name=row.name,
            email=row.email,
            allocated_hours=float(row.allocated_hours),
            logged_hours=float(row.logged_hours),
            flagged_hours=float(row.flagged_hours),
            active=bool(row.active),
            employment_status=row.employment_status,
        )
        for row in frame.itertuples(index=False)
    ]
