from __future__ import annotations

import pandas as pd

from incident_insights.analyzers.base import Analyzer, AnalysisResult
from incident_insights.config import Weighting
from incident_insights.preprocess.time import DAY_NAMES, add_time_features, timed_reports

WEIGHTINGS = ("count", "priority")
PRIORITY_WEIGHTS = {"critical": 4, "high": 3, "medium": 2, "low": 1}
DEFAULT_PRIORITY_WEIGHT = 1


def empty_grid() -> pd.DataFrame:
    return pd.DataFrame(
        0,
        index=pd.Index(DAY_NAMES, name="day"),
        columns=pd.RangeIndex(24, name="hour"),
        dtype="int64",
    )


def priority_weights(reports: pd.DataFrame) -> pd.Series:
    if "priority" not in reports.columns:
        return pd.Series(DEFAULT_PRIORITY_WEIGHT, index=reports.index, dtype="int64")
    priorities = reports["priority"].astype("string").str.strip().str.lower()
    return priorities.map(PRIORITY_WEIGHTS).fillna(DEFAULT_PRIORITY_WEIGHT).astype("int64")


def build_heatmap(reports: pd.DataFrame, weighting: Weighting = "count") -> pd.DataFrame:
    """Build a 7x24 day-of-week by hour-of-day grid (rows Sun..Sat, columns 0..23)."""
    if weighting not in WEIGHTINGS:
        raise ValueError(f"Unsupported heatmap weighting: {weighting}")

    grid = empty_grid()
    timed = timed_reports(reports)
    if timed.empty:
        return grid

    timed = add_time_features(timed)
    if weighting == "priority":
        weights = priority_weights(timed)
    else:
        weights = pd.Series(1, index=timed.index, dtype="int64")

    cells = pd.DataFrame(
        {
            "day": timed["day_of_week"].astype(int),
            "hour": timed["hour"].astype(int),
            "weight": weights,
        }
    )
    summed = cells.groupby(["day", "hour"])["weight"].sum()
    for (day, hour), value in summed.items():
        grid.iat[int(day), int(hour)] = int(value)
    return grid


def max_cell_value(grid: pd.DataFrame) -> int:
    """Largest cell, or 1 for an empty/all-zero grid so intensity scaling never divides by zero."""
    if grid.empty:
        return 1
    value = grid.to_numpy().max()
    return int(value) if value > 0 else 1


def normalized_heatmap(grid: pd.DataFrame) -> pd.DataFrame:
    return grid / max_cell_value(grid)


def heatmap_cells(grid: pd.DataFrame) -> pd.DataFrame:
    """Long-form (day, hour, value, intensity) view of a grid."""
    intensity = normalized_heatmap(grid)
    cells = grid.stack().rename("value").reset_index()
    cells["intensity"] = intensity.stack().to_numpy()
    cells["day"] = cells["day"].astype(str)
    return cells


class HeatmapAnalyzer(Analyzer):
    name = "heatmap"

    def __init__(self, weighting: Weighting = "priority") -> None:
        self.weighting = weighting

    def run(self, df: pd.DataFrame, now: pd.Timestamp) -> AnalysisResult:
        grid = build_heatmap(df, self.weighting)
        return AnalysisResult(
            analyzer=self.name,
            summary={
                "weighting": self.weighting,
                "max_cell_value": max_cell_value(grid),
                "grid_total": int(grid.to_numpy().sum()),
                "n_records": int(len(timed_reports(df))),
            },
            tables={"cells": heatmap_cells(grid)},
        )
