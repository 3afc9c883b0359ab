from __future__ import annotations

from datetime import datetime

import pandas as pd

from incident_insights.analyzers.base import Analyzer, AnalysisResult
from incident_insights.preprocess.normalize import reference_time

PRIORITY_POINTS = {"high": 30, "critical": 50}
# (age in hours that must be exceeded, points); thresholds stack.
AGE_POINTS = ((24.0, 20), (72.0, 30))
ESCALATED_CATEGORIES = frozenset({"Public Safety", "Infrastructure"})
CATEGORY_POINTS = 25

ACTION_IMMEDIATE = "Immediate Attention"
ACTION_REVIEW = "Review Today"
ACTION_MONITOR = "Monitor"

DEFAULT_TOP_N = 5


def score_report(priority: str | None, category: str | None, age_hours: float | None) -> int:
    score = PRIORITY_POINTS.get(str(priority or "").lower(), 0)
    if age_hours is not None and not pd.isna(age_hours):
        for threshold, points in AGE_POINTS:
            if age_hours > threshold:
                score += points
    if category in ESCALATED_CATEGORIES:
        score += CATEGORY_POINTS
    return score


def recommended_action(score: int) -> str:
    if score > 60:
        return ACTION_IMMEDIATE
    if score > 30:
        return ACTION_REVIEW
    return ACTION_MONITOR


def _empty_ranking(columns: list[str]) -> pd.DataFrame:
    frame = pd.DataFrame(columns=columns)
    frame["age_hours"] = pd.Series(dtype=float)
    frame["score"] = pd.Series(dtype="int64")
    frame["recommended_action"] = pd.Series(dtype=str)
    return frame


def rank_pending(
    reports: pd.DataFrame,
    now: datetime | pd.Timestamp | str,
    top_n: int = DEFAULT_TOP_N,
) -> pd.DataFrame:
    """Score pending reports and return the highest-scoring ``top_n``.

    Each row keeps the report's columns plus ``age_hours``, ``score`` and
    ``recommended_action``. Sorting is stable, so ties keep input order. Reports
    without ``reported_at`` still score on priority and category with no age bonus.
    """
    if reports.empty or "status" not in reports.columns:
        return _empty_ranking(list(reports.columns))

    pending = reports.loc[reports["status"].eq("pending")].copy()
    if pending.empty:
        return _empty_ranking(list(reports.columns))

    now_ts = reference_time(now)
    if "reported_at" in pending.columns:
        reported = pd.to_datetime(pending["reported_at"], errors="coerce")
        pending["age_hours"] = (now_ts - reported).dt.total_seconds() / 3600.0
    else:
        pending["age_hours"] = float("nan")

    priorities = pending["priority"] if "priority" in pending.columns else [None] * len(pending)
    categories = pending["category"] if "category" in pending.columns else [None] * len(pending)
    pending["score"] = [
        score_report(priority, category, age)
        for priority, category, age in zip(priorities, categories, pending["age_hours"])
    ]
    pending["score"] = pending["score"].astype("int64")
    pending["recommended_action"] = pending["score"].map(recommended_action)

    ranked = pending.sort_values("score", ascending=False, kind="stable")
    return ranked.head(max(0, int(top_n))).reset_index(drop=True)


class PriorityRankingAnalyzer(Analyzer):
    name = "ranking"

    def __init__(self, top_n: int = DEFAULT_TOP_N) -> None:
        self.top_n = top_n

    def run(self, df: pd.DataFrame, now: pd.Timestamp) -> AnalysisResult:
        ranked = rank_pending(df, now, top_n=self.top_n)
        actions = ranked["recommended_action"].value_counts()
        return AnalysisResult(
            analyzer=self.name,
            summary={
                "top_n": self.top_n,
                "n_pending": int(df["status"].eq("pending").sum()) if "status" in df else 0,
                "n_ranked": int(len(ranked)),
                "n_immediate": int(actions.get(ACTION_IMMEDIATE, 0)),
                "n_review": int(actions.get(ACTION_REVIEW, 0)),
                "n_monitor": int(actions.get(ACTION_MONITOR, 0)),
            },
            tables={"top_pending": ranked},
        )
