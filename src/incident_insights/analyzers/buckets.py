from __future__ import annotations

import pandas as pd

from incident_insights.analyzers.base import Analyzer, AnalysisResult
from incident_insights.config import Granularity
from incident_insights.preprocess.time import DAY_NAMES, add_time_features, timed_reports

GRANULARITIES = ("day", "week", "month")
BUCKET_COLUMNS = ["period", "total", "resolved", "pending"]


def _empty_buckets() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "period": pd.Series(dtype=str),
            "total": pd.Series(dtype="int64"),
            "resolved": pd.Series(dtype="int64"),
            "pending": pd.Series(dtype="int64"),
        }
    )


def _period_keys(timed: pd.DataFrame, granularity: str) -> tuple[pd.Series, pd.Series]:
    """Return (label, chronological sort key) per row."""
    stamps = timed["reported_at"]
    if granularity == "day":
        return timed["date"], stamps.dt.normalize()
    if granularity == "week":
        day_index = timed["day_of_week"].astype(int)
        return day_index.map(lambda value: DAY_NAMES[value]), day_index
    week_of_month = (stamps.dt.day + 6) // 7
    return "Week " + week_of_month.astype(str), week_of_month


def bucket_reports(
    reports: pd.DataFrame,
    granularity: Granularity = "week",
    *,
    chronological: bool = False,
) -> pd.DataFrame:
    """Count reports per time bucket, split into resolved and everything else.

    ``day`` keys are ISO calendar dates, ``week`` keys are weekday short names
    (Sun..Sat) and ``month`` keys are ``Week n`` with ``n = ceil(day_of_month / 7)``.
    Buckets come back in first-seen order unless ``chronological`` is set.
    Reports without ``reported_at`` are skipped.
    """
    if granularity not in GRANULARITIES:
        raise ValueError(f"Unsupported granularity: {granularity}")

    timed = timed_reports(reports)
    if timed.empty:
        return _empty_buckets()

    timed = add_time_features(timed)
    labels, order = _period_keys(timed, granularity)
    working = pd.DataFrame(
        {
            "period": labels.to_numpy(),
            "order": order.to_numpy(),
            "is_resolved": timed["status"].eq("resolved").to_numpy(),
        }
    )
    grouped = (
        working.groupby("period", sort=False)
        .agg(
            total=("is_resolved", "size"),
            resolved=("is_resolved", "sum"),
            order=("order", "min"),
        )
        .reset_index()
    )
    grouped["pending"] = grouped["total"] - grouped["resolved"]
    if chronological:
        grouped = grouped.sort_values("order", kind="stable")

    return grouped[BUCKET_COLUMNS].astype(
        {"total": "int64", "resolved": "int64", "pending": "int64"}
    ).reset_index(drop=True)


class TemporalBucketsAnalyzer(Analyzer):
    name = "buckets"

    def __init__(self, granularity: Granularity = "week", chronological: bool = False) -> None:
        self.granularity = granularity
        self.chronological = chronological

    def run(self, df: pd.DataFrame, now: pd.Timestamp) -> AnalysisResult:
        buckets = bucket_reports(df, self.granularity, chronological=self.chronological)
        n_bucketed = int(buckets["total"].sum())
        return AnalysisResult(
            analyzer=self.name,
            summary={
                "granularity": self.granularity,
                "chronological": self.chronological,
                "n_buckets": int(len(buckets)),
                "n_bucketed": n_bucketed,
                "n_unbucketable": int(len(df) - n_bucketed),
            },
            tables={"buckets": buckets},
        )
