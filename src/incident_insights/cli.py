from __future__ import annotations

from dataclasses import asdict
from pathlib import Path
from typing import Literal

import pandas as pd
import typer

from incident_insights.analyzers.latency import format_duration
from incident_insights.analyzers.overview import build_overview
from incident_insights.analyzers.patterns import detect_patterns
from incident_insights.analyzers.ranking import rank_pending
from incident_insights.analyzers.sentiment import classify_sentiment
from incident_insights.config import DEFAULT_CONFIG_PATH, AppConfig, load_config
from incident_insights.io.read import load_reports
from incident_insights.io.write import export_reports
from incident_insights.logging import configure_logging
from incident_insights.pipeline.run_all import limit_to_time_range, prepare_reports, run_all
from incident_insights.preprocess.filters import filter_reports
from incident_insights.preprocess.normalize import reference_time

app = typer.Typer(no_args_is_help=True, add_completion=False)


def _load_app_config(config_path: Path) -> AppConfig:
    return load_config(config_path)


def _resolve_now(now: str | None, cfg: AppConfig) -> pd.Timestamp:
    # The clock is read here and only here; analyzers always receive an explicit time.
    raw = now if now is not None else pd.Timestamp.now(tz="UTC")
    try:
        return reference_time(raw, timezone=cfg.time.timezone)
    except ValueError as exc:
        raise typer.BadParameter(f"Invalid --now value: {now}") from exc


@app.command("run-all")
def run_all_command(
    input_path: Path = typer.Option(
        ...,
        "--input",
        exists=True,
        readable=True,
        resolve_path=True,
        help="Exported report documents (.csv, .json, .jsonl or .parquet).",
    ),
    out: Path = typer.Option(Path("out"), resolve_path=True),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, exists=True, readable=True, resolve_path=True),
    now: str | None = typer.Option(None, help="Reference time (ISO-8601). Defaults to now."),
    status: str | None = typer.Option(None, help="Only include reports with this status."),
    category: str | None = typer.Option(None, help="Only include reports in this category."),
    search: str | None = typer.Option(None, help="Case-insensitive text search."),
    time_range: Literal["week", "month", "quarter"] | None = typer.Option(
        None,
        help="Only include reports from the last week, month or quarter.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level."),
) -> None:
    """Run every analyzer and write tables, summaries and figures to out/."""
    configure_logging(verbose=verbose)
    cfg = _load_app_config(config)
    now_ts = _resolve_now(now, cfg)
    results = run_all(
        input_path=input_path,
        out_dir=out,
        config=cfg,
        now=now_ts,
        status=status,
        category=category,
        search=search,
        time_range=time_range,
    )
    typer.echo(f"Run complete. Analyzers: {', '.join(sorted(results))}")
    typer.echo(f"Outputs written to: {out}")


@app.command()
def summarize(
    input_path: Path = typer.Option(
        ..., "--input", exists=True, readable=True, resolve_path=True
    ),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, exists=True, readable=True, resolve_path=True),
    now: str | None = typer.Option(None, help="Reference time (ISO-8601). Defaults to now."),
    time_range: Literal["week", "month", "quarter"] | None = typer.Option(None),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level."),
) -> None:
    """Print headline statistics, response time, sentiment and detected patterns.

    Headline statistics cover every report; --time-range limits sentiment and patterns.
    """
    configure_logging(verbose=verbose)
    cfg = _load_app_config(config)
    now_ts = _resolve_now(now, cfg)
    history = prepare_reports(input_path, cfg)
    reports = limit_to_time_range(history, now_ts, time_range)

    overview = build_overview(
        history,
        now_ts,
        period_days=cfg.overview.period_days,
        recent_days=cfg.overview.recent_days,
        alert_window_hours=cfg.overview.alert_window_hours,
    )
    typer.echo("Overview")
    typer.echo(f"- total_reports: {overview.total_reports}")
    typer.echo(f"- resolved_reports: {overview.resolved_reports}")
    typer.echo(f"- active_alerts: {overview.active_alerts}")
    typer.echo(f"- recent_reports: {overview.recent_reports}")
    typer.echo(f"- reports_change: {overview.reports_trend} {abs(overview.reports_change)}%")
    typer.echo(f"- resolved_change: {overview.resolved_trend} {abs(overview.resolved_change)}%")
    typer.echo(f"- average_response_time: {format_duration(overview.average_resolution_hours)}")

    sentiment = classify_sentiment(reports)
    typer.echo("Sentiment")
    for key, value in asdict(sentiment).items():
        typer.echo(f"- {key}: {value}")

    patterns = detect_patterns(reports)
    typer.echo("Patterns")
    if not patterns:
        typer.echo("- none detected")
    for pattern in patterns:
        typer.echo(f"- {pattern.title} [{pattern.severity}]: {pattern.description}")


@app.command()
def rank(
    input_path: Path = typer.Option(
        ..., "--input", exists=True, readable=True, resolve_path=True
    ),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, exists=True, readable=True, resolve_path=True),
    now: str | None = typer.Option(None, help="Reference time (ISO-8601). Defaults to now."),
    top_n: int | None = typer.Option(None, min=1, help="Overrides ranking.top_n."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level."),
) -> None:
    """Print the pending reports that most need attention."""
    configure_logging(verbose=verbose)
    cfg = _load_app_config(config)
    now_ts = _resolve_now(now, cfg)
    reports = load_reports(input_path, config=cfg)
    ranked = rank_pending(reports, now_ts, top_n=top_n or cfg.ranking.top_n)
    if ranked.empty:
        typer.echo("No pending reports.")
        return
    for row in ranked.itertuples(index=False):
        typer.echo(f"{row.score:>4} {row.recommended_action:<19} {row.id} {row.title}")


@app.command()
def export(
    input_path: Path = typer.Option(
        ..., "--input", exists=True, readable=True, resolve_path=True
    ),
    output: Path = typer.Option(..., resolve_path=True),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, exists=True, readable=True, resolve_path=True),
    status: str | None = typer.Option(None),
    category: str | None = typer.Option(None),
    search: str | None = typer.Option(None),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level."),
) -> None:
    """Export normalized reports to CSV."""
    configure_logging(verbose=verbose)
    cfg = _load_app_config(config)
    reports = load_reports(input_path, config=cfg)
    reports = filter_reports(reports, status=status, category=category, search=search)
    export_reports(reports, output)
    typer.echo(f"Exported {len(reports)} reports to: {output}")


if __name__ == "__main__":
    app()
