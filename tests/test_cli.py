from __future__ import annotations

import json
from pathlib import Path

import pandas as pd
from typer.testing import CliRunner

from incident_insights.cli import app
from incident_insights.config import AppConfig

REPO_CONFIG = Path(__file__).resolve().parents[1] / "configs" / "default.yaml"
NOW = "2026-02-10T12:00:00"


def _write_reports(path: Path) -> Path:
    documents = [
        {
            "id": "r1",
            "title": "Downed power line",
            "category": "Public Safety",
            "priority": "critical",
            "status": "pending",
            "location": "Main St",
            "timestamp": "2026-02-07T04:00:00Z",
        },
        {
            "id": "r2",
            "title": "Pothole",
            "description": "Fixed quickly, thanks",
            "category": "Infrastructure",
            "priority": "high",
            "status": "resolved",
            "location": "Main St",
            "timestamp": "2026-02-08T09:00:00Z",
            "updatedAt": "2026-02-08T09:45:00Z",
        },
        {
            "id": "r3",
            "title": "Overflowing bin",
            "category": "Sanitation",
            "priority": "low",
            "status": "pending",
            "location": "Main St",
            "timestamp": "2026-02-10T09:30:00Z",
        },
    ]
    path.write_text(json.dumps(documents), encoding="utf-8")
    return path


def test_cli_help() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["--help"])

    assert result.exit_code == 0
    assert "run-all" in result.stdout
    assert "summarize" in result.stdout
    assert "rank" in result.stdout
    assert "export" in result.stdout


def test_rank_command_prints_scored_pending_reports(tmp_path: Path) -> None:
    input_path = _write_reports(tmp_path / "reports.json")

    runner = CliRunner()
    result = runner.invoke(
        app,
        ["rank", "--input", str(input_path), "--config", str(REPO_CONFIG), "--now", NOW],
    )

    assert result.exit_code == 0, result.stdout
    lines = result.stdout.strip().splitlines()
    assert lines[0].split() == ["125", "Immediate", "Attention", "r1", "Downed", "power", "line"]
    assert lines[1].split()[:2] == ["0", "Monitor"]
    assert len(lines) == 2


def test_rank_command_uses_config_top_n(monkeypatch, tmp_path: Path) -> None:
    input_path = _write_reports(tmp_path / "reports.json")
    config_path = tmp_path / "config.yaml"
    config_path.write_text("{}", encoding="utf-8")

    monkeypatch.setattr(
        "incident_insights.cli._load_app_config",
        lambda _path: AppConfig.model_validate({"ranking": {"top_n": 1}}),
    )

    runner = CliRunner()
    result = runner.invoke(
        app,
        ["rank", "--input", str(input_path), "--config", str(config_path), "--now", NOW],
    )

    assert result.exit_code == 0, result.stdout
    assert len(result.stdout.strip().splitlines()) == 1


def test_rank_command_without_pending_reports(tmp_path: Path) -> None:
    input_path = tmp_path / "reports.json"
    input_path.write_text(json.dumps([{"id": "x", "status": "resolved"}]), encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(
        app,
        ["rank", "--input", str(input_path), "--config", str(REPO_CONFIG), "--now", NOW],
    )

    assert result.exit_code == 0
    assert "No pending reports." in result.stdout


def test_rank_command_rejects_invalid_reference_time(tmp_path: Path) -> None:
    input_path = _write_reports(tmp_path / "reports.json")

    runner = CliRunner()
    result = runner.invoke(
        app,
        ["rank", "--input", str(input_path), "--config", str(REPO_CONFIG), "--now", "soon"],
    )

    assert result.exit_code != 0


def test_summarize_command_prints_overview_sentiment_and_patterns(tmp_path: Path) -> None:
    input_path = _write_reports(tmp_path / "reports.json")

    runner = CliRunner()
    result = runner.invoke(
        app,
        ["summarize", "--input", str(input_path), "--config", str(REPO_CONFIG), "--now", NOW],
    )

    assert result.exit_code == 0, result.stdout
    assert "- total_reports: 3" in result.stdout
    assert "- resolved_reports: 1" in result.stdout
    assert "- average_response_time: 45m" in result.stdout
    assert "- positive: 1" in result.stdout
    assert "Geographic Hotspots [high]: 3 reports from Main St" in result.stdout


def test_export_command_writes_filtered_csv(tmp_path: Path) -> None:
    input_path = _write_reports(tmp_path / "reports.json")
    output_path = tmp_path / "export.csv"

    runner = CliRunner()
    result = runner.invoke(
        app,
        [
            "export",
            "--input",
            str(input_path),
            "--output",
            str(output_path),
            "--config",
            str(REPO_CONFIG),
            "--status",
            "pending",
        ],
    )

    assert result.exit_code == 0, result.stdout
    assert "Exported 2 reports to:" in result.stdout
    exported = pd.read_csv(output_path)
    assert exported["id"].tolist() == ["r1", "r3"]


def test_run_all_command_writes_outputs(tmp_path: Path) -> None:
    input_path = _write_reports(tmp_path / "reports.json")
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        "outputs:\n  tables_format: csv\n  render_figures: false\n", encoding="utf-8"
    )
    out_dir = tmp_path / "out"

    runner = CliRunner()
    result = runner.invoke(
        app,
        [
            "run-all",
            "--input",
            str(input_path),
            "--out",
            str(out_dir),
            "--config",
            str(config_path),
            "--now",
            NOW,
        ],
    )

    assert result.exit_code == 0, result.stdout
    assert "Run complete." in result.stdout
    assert (out_dir / "summary" / "ranking.json").exists()
    assert (out_dir / "tables" / "buckets__buckets.csv").exists()


def test_summarize_trend_ignores_time_range_view(tmp_path: Path) -> None:
    now = pd.Timestamp(NOW)
    documents = [
        {"id": f"old{index}", "timestamp": (now - pd.Timedelta(days=40)).isoformat()}
        for index in range(10)
    ]
    documents.append({"id": "new", "timestamp": (now - pd.Timedelta(days=1)).isoformat()})
    input_path = tmp_path / "reports.json"
    input_path.write_text(json.dumps(documents), encoding="utf-8")

    runner = CliRunner()
    base_args = ["summarize", "--input", str(input_path), "--config", str(REPO_CONFIG)]
    plain = runner.invoke(app, [*base_args, "--now", NOW])
    ranged = runner.invoke(app, [*base_args, "--now", NOW, "--time-range", "week"])

    assert plain.exit_code == 0, plain.stdout
    assert ranged.exit_code == 0, ranged.stdout
    assert "- reports_change: down 90%" in plain.stdout
    assert "- reports_change: down 90%" in ranged.stdout
