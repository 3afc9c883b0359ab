from __future__ import annotations

from datetime import datetime
from typing import Literal

import pandas as pd

from incident_insights.preprocess.normalize import reference_time

TimeRange = Literal["week", "month", "quarter"]

SEARCH_COLUMNS = ("title", "description", "location", "user_email")
_ALL = "all"


def filter_reports(
    reports: pd.DataFrame,
    *,
    status: str | None = None,
    category: str | None = None,
    search: str | None = None,
) -> pd.DataFrame:
    """Apply the triage view filters. ``None`` or ``"all"`` disables a filter."""
    mask = pd.Series(True, index=reports.index)
    if status and status != _ALL:
        mask &= reports["status"].eq(status)
    if category and category != _ALL:
        mask &= reports["category"].eq(category)
    if search:
        needle = search.lower()
        matched = pd.Series(False, index=reports.index)
        for column in SEARCH_COLUMNS:
            if column in reports.columns:
                values = reports[column].fillna("").astype(str).str.lower()
                matched |= values.str.contains(needle, regex=False)
        mask &= matched
    return reports.loc[mask]


def reported_between(
    reports: pd.DataFrame,
    start: pd.Timestamp,
    end: pd.Timestamp | None = None,
) -> pd.DataFrame:
    stamps = pd.to_datetime(reports["reported_at"], errors="coerce")
    mask = stamps >= start
    if end is not None:
        mask &= stamps <= end
    return reports.loc[mask.fillna(False)]


def within_days(
    reports: pd.DataFrame,
    now: datetime | pd.Timestamp | str,
    days: int,
) -> pd.DataFrame:
    now_ts = reference_time(now)
    return reported_between(reports, now_ts - pd.Timedelta(days=days))


def time_range_start(now: datetime | pd.Timestamp | str, time_range: TimeRange) -> pd.Timestamp:
    now_ts = reference_time(now)
    if time_range == "week":
        return now_ts - pd.Timedelta(days=7)
    if time_range == "month":
        return now_ts - pd.DateOffset(months=1)
    if time_range == "quarter":
        return now_ts - pd.DateOffset(months=3)
    raise ValueError(f"Unsupported time range: {time_range}")
