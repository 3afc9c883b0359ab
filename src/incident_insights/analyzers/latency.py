from __future__ import annotations

import math

import pandas as pd

from incident_insights.analyzers.base import Analyzer, AnalysisResult

UNAVAILABLE_LABEL = "N/A"


def resolution_hours(reports: pd.DataFrame) -> pd.DataFrame:
    """Elapsed hours from report to resolution for every eligible resolved report.

    Eligible means status ``resolved`` with both timestamps present and a strictly
    positive elapsed time; anything else is dropped as a data error.
    """
    required = {"status", "reported_at", "updated_at"}
    if reports.empty or not required.issubset(reports.columns):
        return pd.DataFrame({"id": pd.Series(dtype=object), "hours": pd.Series(dtype=float)})

    resolved = reports.loc[reports["status"].eq("resolved")]
    reported = pd.to_datetime(resolved["reported_at"], errors="coerce")
    updated = pd.to_datetime(resolved["updated_at"], errors="coerce")
    hours = (updated - reported).dt.total_seconds() / 3600.0
    eligible = hours > 0
    ids = resolved["id"] if "id" in resolved.columns else pd.Series(None, index=resolved.index)
    return pd.DataFrame(
        {"id": ids.loc[eligible].to_numpy(), "hours": hours.loc[eligible].to_numpy(dtype=float)}
    )


def average_resolution_hours(reports: pd.DataFrame) -> float | None:
    """Mean time-to-resolution in hours, or ``None`` when no report qualifies."""
    hours = resolution_hours(reports)["hours"]
    if hours.empty:
        return None
    return float(hours.mean())


def format_duration(hours: float | None) -> str:
    if hours is None:
        return UNAVAILABLE_LABEL
    if hours < 1:
        return f"{int(math.floor(hours * 60 + 0.5))}m"
    return f"{hours:.1f}h"


class ResponseLatencyAnalyzer(Analyzer):
    name = "latency"

    def run(self, df: pd.DataFrame, now: pd.Timestamp) -> AnalysisResult:
        table = resolution_hours(df)
        average = None if table.empty else float(table["hours"].mean())
        return AnalysisResult(
            analyzer=self.name,
            summary={
                "average_resolution_hours": average,
                "average_response_time": format_duration(average),
                "n_eligible": int(len(table)),
            },
            tables={"resolution_times": table},
        )
