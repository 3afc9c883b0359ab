from __future__ import annotations

import pandas as pd

DAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


def sunday_first_day_index(timestamps: pd.Series) -> pd.Series:
    # pandas numbers Monday as 0; report views lay weeks out Sunday first.
    return (timestamps.dt.dayofweek + 1) % 7


def timed_reports(reports: pd.DataFrame) -> pd.DataFrame:
    """Rows that carry a reported_at; everything else is unbucketable."""
    if reports.empty or "reported_at" not in reports.columns:
        return reports.iloc[0:0]
    stamps = pd.to_datetime(reports["reported_at"], errors="coerce")
    return reports.loc[stamps.notna()]


def add_time_features(reports: pd.DataFrame) -> pd.DataFrame:
    working = reports.copy()
    stamps = pd.to_datetime(working["reported_at"], errors="coerce")
    working["reported_at"] = stamps
    working["date"] = stamps.dt.strftime("%Y-%m-%d")
    working["hour"] = stamps.dt.hour.astype("Int64")
    working["day_of_week"] = sunday_first_day_index(stamps).astype("Int64")
    # Object dtype keeps missing names as None rather than a string-dtype NaN.
    working["day_name"] = pd.Series(
        [DAY_NAMES[int(value)] if pd.notna(value) else None for value in working["day_of_week"]],
        index=working.index,
        dtype=object,
    )
    return working
