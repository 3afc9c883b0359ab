from __future__ import annotations

import pandas as pd

from incident_insights.analyzers.overview import (
    OverviewAnalyzer,
    build_overview,
    percent_change,
    trend_direction,
)
from incident_insights.preprocess.normalize import normalize_reports

NOW = pd.Timestamp("2026-03-01 12:00:00")


def _days_ago(days: float) -> pd.Timestamp:
    return NOW - pd.Timedelta(days=days)


def _reports() -> pd.DataFrame:
    return normalize_reports(
        [
            {"id": "a", "timestamp": _days_ago(0.5), "priority": "high"},
            {"id": "b", "timestamp": _days_ago(2), "priority": "critical"},
            {
                "id": "c",
                "timestamp": _days_ago(10),
                "updatedAt": _days_ago(9.5),
                "status": "resolved",
            },
            {
                "id": "d",
                "timestamp": _days_ago(40),
                "updatedAt": _days_ago(39),
                "status": "resolved",
            },
            {"id": "e", "timestamp": _days_ago(45)},
            {"id": "f", "timestamp": _days_ago(90)},
            {"id": "g"},
        ]
    )


def test_percent_change_rounds_and_handles_empty_previous_period() -> None:
    assert percent_change(3, 2) == 50
    assert percent_change(1, 2) == -50
    assert percent_change(2, 3) == -33
    assert percent_change(1, 1) == 0
    assert percent_change(5, 0) == 100
    assert percent_change(0, 0) == 0


def test_trend_direction() -> None:
    assert trend_direction(0) == "up"
    assert trend_direction(12) == "up"
    assert trend_direction(-1) == "down"


def test_build_overview_compares_current_and_previous_periods() -> None:
    stats = build_overview(_reports(), NOW)

    assert stats.total_reports == 7
    assert stats.resolved_reports == 2
    assert stats.active_alerts == 1
    assert stats.recent_reports == 2
    assert stats.current_period_reports == 3
    assert stats.previous_period_reports == 2
    assert stats.reports_change == 50
    assert stats.reports_trend == "up"
    assert stats.current_period_resolved == 1
    assert stats.previous_period_resolved == 1
    assert stats.resolved_change == 0
    assert stats.average_resolution_hours == 18.0
    assert stats.average_response_time == "18.0h"


def test_build_overview_on_empty_reports() -> None:
    stats = build_overview(normalize_reports([]), NOW)

    assert stats.total_reports == 0
    assert stats.active_alerts == 0
    assert stats.reports_change == 0
    assert stats.average_resolution_hours is None
    assert stats.average_response_time == "N/A"


def test_overview_analyzer_uses_configured_windows() -> None:
    result = OverviewAnalyzer(period_days=7, recent_days=1, alert_window_hours=72).run(
        _reports(), NOW
    )

    assert result.summary["current_period_reports"] == 2
    assert result.summary["previous_period_reports"] == 1
    assert result.summary["recent_reports"] == 1
    assert result.summary["active_alerts"] == 2
    assert result.tables == {}
