from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

import pandas as pd

from incident_insights.analyzers.base import AnalysisResult
from incident_insights.analyzers.registry import default_analyzers
from incident_insights.config import AppConfig
from incident_insights.io.read import load_reports
from incident_insights.io.write import write_summary, write_table
from incident_insights.paths import OutputPaths, build_output_paths
from incident_insights.preprocess.filters import (
    TimeRange,
    filter_reports,
    reported_between,
    time_range_start,
)
from incident_insights.preprocess.normalize import reference_time
from incident_insights.viz.heatmaps import cells_to_grid, plot_day_hour_heatmap
from incident_insights.viz.time_series import plot_bucket_counts

LOGGER = logging.getLogger(__name__)


def prepare_reports(
    input_path: Path,
    config: AppConfig,
    *,
    status: str | None = None,
    category: str | None = None,
    search: str | None = None,
) -> pd.DataFrame:
    reports = load_reports(input_path, config=config)
    return filter_reports(reports, status=status, category=category, search=search)


def limit_to_time_range(
    reports: pd.DataFrame,
    now: pd.Timestamp,
    time_range: TimeRange | None,
) -> pd.DataFrame:
    if time_range is None:
        return reports
    return reported_between(reports, time_range_start(now, time_range), now)


def run_analyzers(
    reports: pd.DataFrame,
    now: pd.Timestamp,
    config: AppConfig,
    *,
    history: pd.DataFrame | None = None,
) -> dict[str, AnalysisResult]:
    """Run every registered analyzer over ``reports``.

    Analyzers flagged ``full_history`` get ``history`` instead when it is given, so
    period comparisons still see reports that a time-range view leaves out.
    """
    results: dict[str, AnalysisResult] = {}
    for analyzer in default_analyzers(config):
        frame = history if analyzer.full_history and history is not None else reports
        LOGGER.info("Running analyzer %s over %d reports", analyzer.name, len(frame))
        results[analyzer.name] = analyzer.run(frame, now)
    return results


def write_results(
    results: dict[str, AnalysisResult],
    paths: OutputPaths,
    config: AppConfig,
) -> None:
    extension = config.outputs.tables_format
    for name, result in results.items():
        write_summary(result.summary, paths.summary_file(name))
        for table_name, table in result.tables.items():
            write_table(
                table,
                paths.table(name, table_name, extension),
                fmt=config.outputs.tables_format,
            )


def render_figures(
    results: dict[str, AnalysisResult],
    paths: OutputPaths,
    config: AppConfig,
) -> None:
    figure_format = config.outputs.figures_format
    try:
        heatmap = results.get("heatmap")
        if heatmap is not None:
            plot_day_hour_heatmap(
                cells_to_grid(heatmap.tables["cells"]),
                paths.figure("heatmap_day_hour", figure_format),
                title=f"Incident reports by day/hour ({heatmap.summary['weighting']} weighted)",
            )

        buckets = results.get("buckets")
        if buckets is not None:
            plot_bucket_counts(
                buckets.tables["buckets"],
                paths.figure("reports_over_time", figure_format),
            )
    except Exception:  # pragma: no cover
        LOGGER.exception("Failed rendering one or more figures")


def run_all(
    input_path: Path,
    out_dir: Path,
    config: AppConfig,
    now: datetime | pd.Timestamp | str,
    *,
    status: str | None = None,
    category: str | None = None,
    search: str | None = None,
    time_range: TimeRange | None = None,
) -> dict[str, AnalysisResult]:
    paths = build_output_paths(out_dir)
    now_ts = reference_time(now, timezone=config.time.timezone)
    history = prepare_reports(
        input_path,
        config,
        status=status,
        category=category,
        search=search,
    )
    reports = limit_to_time_range(history, now_ts, time_range)
    results = run_analyzers(reports, now_ts, config, history=history)
    write_results(results, paths, config)
    if config.outputs.render_figures:
        render_figures(results, paths, config)
    return results
