from __future__ import annotations

from dataclasses import asdict, dataclass

import pandas as pd

from incident_insights.analyzers.base import Analyzer, AnalysisResult
from incident_insights.preprocess.time import add_time_features, timed_reports

HOTSPOT_MIN_EXCLUSIVE = 2
PEAK_HOUR_MIN_EXCLUSIVE = 3
TRENDING_MIN_EXCLUSIVE = 5


@dataclass(frozen=True)
class Pattern:
    type: str
    title: str
    description: str
    severity: str
    value: str
    count: int


def location_hotspot(reports: pd.DataFrame) -> Pattern | None:
    if reports.empty or "location" not in reports.columns:
        return None
    counts = reports.groupby("location", sort=False).size()
    qualifying = counts[counts > HOTSPOT_MIN_EXCLUSIVE]
    if qualifying.empty:
        return None
    # idxmax keeps the first-seen location on ties.
    location = qualifying.idxmax()
    count = int(qualifying.loc[location])
    return Pattern(
        type="location",
        title="Geographic Hotspots",
        description=f"{count} reports from {location}",
        severity="high",
        value=str(location),
        count=count,
    )


def peak_hour(reports: pd.DataFrame) -> Pattern | None:
    timed = timed_reports(reports)
    if timed.empty:
        return None
    hours = add_time_features(timed)["hour"].astype(int)
    counts = hours.value_counts().reindex(range(24), fill_value=0)
    hour = int(counts.idxmax())
    count = int(counts.loc[hour])
    if count <= PEAK_HOUR_MIN_EXCLUSIVE:
        return None
    return Pattern(
        type="time",
        title="Peak Reporting Time",
        description=f"Most reports submitted at {hour}:00",
        severity="medium",
        value=f"{hour:02d}:00",
        count=count,
    )


def trending_category(reports: pd.DataFrame) -> Pattern | None:
    if reports.empty or "category" not in reports.columns:
        return None
    counts = reports.groupby("category", sort=False).size()
    category = counts.idxmax()
    count = int(counts.loc[category])
    if count <= TRENDING_MIN_EXCLUSIVE:
        return None
    return Pattern(
        type="category",
        title="Trending Issue",
        description=f"{category} reports are trending with {count} incidents",
        severity="medium",
        value=str(category),
        count=count,
    )


def detect_patterns(reports: pd.DataFrame) -> list[Pattern]:
    candidates = (location_hotspot(reports), peak_hour(reports), trending_category(reports))
    return [pattern for pattern in candidates if pattern is not None]


class PatternsAnalyzer(Analyzer):
    name = "patterns"

    def run(self, df: pd.DataFrame, now: pd.Timestamp) -> AnalysisResult:
        patterns = detect_patterns(df)
        table = pd.DataFrame(
            [asdict(pattern) for pattern in patterns],
            columns=["type", "title", "description", "severity", "value", "count"],
        )
        return AnalysisResult(
            analyzer=self.name,
            summary={
                "n_patterns": len(patterns),
                "pattern_titles": [pattern.title for pattern in patterns],
            },
            tables={"patterns": table},
        )
