from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from datetime import datetime

import pandas as pd

from incident_insights.analyzers.base import Analyzer, AnalysisResult
from incident_insights.analyzers.latency import average_resolution_hours, format_duration
from incident_insights.preprocess.filters import reported_between, within_days
from incident_insights.preprocess.normalize import reference_time

ALERT_PRIORITIES = ("high", "critical")


@dataclass(frozen=True)
class OverviewStats:
    total_reports: int
    resolved_reports: int
    active_alerts: int
    recent_reports: int
    current_period_reports: int
    previous_period_reports: int
    current_period_resolved: int
    previous_period_resolved: int
    reports_change: int
    resolved_change: int
    reports_trend: str
    resolved_trend: str
    average_resolution_hours: float | None
    average_response_time: str


def percent_change(current: int, previous: int) -> int:
    if previous == 0:
        return 100 if current > 0 else 0
    return int(math.floor(((current - previous) / previous) * 100 + 0.5))


def trend_direction(change: int) -> str:
    return "up" if change >= 0 else "down"


def _resolved_count(reports: pd.DataFrame) -> int:
    return int(reports["status"].eq("resolved").sum())


def build_overview(
    reports: pd.DataFrame,
    now: datetime | pd.Timestamp | str,
    *,
    period_days: int = 30,
    recent_days: int = 7,
    alert_window_hours: int = 24,
) -> OverviewStats:
    """Headline dashboard numbers plus a period-over-period comparison.

    The current period is ``[now - period_days, now]`` and the previous one is the
    window of the same length right before it.
    """
    now_ts = reference_time(now)
    period = pd.Timedelta(days=period_days)
    current = reported_between(reports, now_ts - period, now_ts)
    previous = reported_between(reports, now_ts - 2 * period, now_ts - period)

    alert_window = reported_between(reports, now_ts - pd.Timedelta(hours=alert_window_hours))
    active_alerts = int(alert_window["priority"].isin(ALERT_PRIORITIES).sum())

    reports_change = percent_change(len(current), len(previous))
    resolved_change = percent_change(_resolved_count(current), _resolved_count(previous))
    average_hours = average_resolution_hours(reports)
    return OverviewStats(
        total_reports=int(len(reports)),
        resolved_reports=_resolved_count(reports),
        active_alerts=active_alerts,
        recent_reports=int(len(within_days(reports, now_ts, recent_days))),
        current_period_reports=int(len(current)),
        previous_period_reports=int(len(previous)),
        current_period_resolved=_resolved_count(current),
        previous_period_resolved=_resolved_count(previous),
        reports_change=reports_change,
        resolved_change=resolved_change,
        reports_trend=trend_direction(reports_change),
        resolved_trend=trend_direction(resolved_change),
        average_resolution_hours=average_hours,
        average_response_time=format_duration(average_hours),
    )


class OverviewAnalyzer(Analyzer):
    name = "overview"
    full_history = True

    def __init__(
        self,
        period_days: int = 30,
        recent_days: int = 7,
        alert_window_hours: int = 24,
    ) -> None:
        self.period_days = period_days
        self.recent_days = recent_days
        self.alert_window_hours = alert_window_hours

    def run(self, df: pd.DataFrame, now: pd.Timestamp) -> AnalysisResult:
        stats = build_overview(
            df,
            now,
            period_days=self.period_days,
            recent_days=self.recent_days,
            alert_window_hours=self.alert_window_hours,
        )
        return AnalysisResult(analyzer=self.name, summary=asdict(stats), tables={})
