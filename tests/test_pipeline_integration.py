from __future__ import annotations

import json
from pathlib import Path

import pandas as pd

from incident_insights.config import AppConfig
from incident_insights.io.read import load_table
from incident_insights.pipeline.run_all import run_all

NOW = "2026-02-10T12:00:00"


def _write_reports(path: Path) -> Path:
    documents = [
        {
            "id": "r1",
            "title": "Downed power line",
            "description": "Dangerous, needs attention immediately",
            "category": "Public Safety",
            "priority": "critical",
            "status": "pending",
            "location": "Main St",
            "timestamp": "2026-02-07T04:00:00Z",
        },
        {
            "id": "r2",
            "title": "Pothole",
            "category": "Infrastructure",
            "priority": "high",
            "status": "resolved",
            "location": "Main St",
            "timestamp": "2026-02-08T09:00:00Z",
            "updatedAt": "2026-02-08T11:00:00Z",
        },
        {
            "id": "r3",
            "title": "Overflowing bin",
            "description": "Thanks for the quick pickup last time",
            "category": "Sanitation",
            "priority": "low",
            "status": "pending",
            "location": "Main St",
            "timestamp": "2026-02-10T09:30:00Z",
        },
        {"id": "r4", "title": "Missing sign"},
    ]
    path.write_text(json.dumps(documents), encoding="utf-8")
    return path


def test_run_all_writes_summaries_tables_and_figures(tmp_path: Path) -> None:
    input_path = _write_reports(tmp_path / "reports.json")
    out_dir = tmp_path / "out"
    config = AppConfig.model_validate(
        {"outputs": {"tables_format": "csv", "render_figures": True}}
    )

    results = run_all(input_path=input_path, out_dir=out_dir, config=config, now=NOW)

    assert set(results) == {
        "overview",
        "buckets",
        "heatmap",
        "latency",
        "ranking",
        "patterns",
        "sentiment",
    }
    for name in results:
        assert (out_dir / "summary" / f"{name}.json").exists()

    overview = json.loads((out_dir / "summary" / "overview.json").read_text(encoding="utf-8"))
    assert overview["total_reports"] == 4
    assert overview["resolved_reports"] == 1
    assert overview["average_response_time"] == "2.0h"

    top_pending = load_table(out_dir / "tables" / "ranking__top_pending.csv")
    assert top_pending["id"].tolist()[0] == "r1"
    assert int(top_pending["score"].iloc[0]) == 125

    buckets = load_table(out_dir / "tables" / "buckets__buckets.csv")
    assert int(buckets["total"].sum()) == 3

    patterns = load_table(out_dir / "tables" / "patterns__patterns.csv")
    assert patterns["title"].tolist() == ["Geographic Hotspots"]

    assert (out_dir / "figures" / "heatmap_day_hour.png").exists()
    assert (out_dir / "figures" / "reports_over_time.png").exists()


def test_run_all_applies_filters_and_parquet_tables(tmp_path: Path) -> None:
    input_path = _write_reports(tmp_path / "reports.json")
    out_dir = tmp_path / "out"
    config = AppConfig.model_validate({"outputs": {"render_figures": False}})

    results = run_all(
        input_path=input_path,
        out_dir=out_dir,
        config=config,
        now=NOW,
        status="pending",
        time_range="week",
    )

    assert results["overview"].summary["total_reports"] == 3
    assert results["buckets"].summary["n_bucketed"] == 2
    cells = pd.read_parquet(out_dir / "tables" / "heatmap__cells.parquet")
    assert int(cells["value"].sum()) == 5
    assert not (out_dir / "figures" / "heatmap_day_hour.png").exists()


def test_run_all_is_deterministic_for_fixed_reference_time(tmp_path: Path) -> None:
    input_path = _write_reports(tmp_path / "reports.json")
    config = AppConfig.model_validate({"outputs": {"render_figures": False}})

    first = run_all(input_path=input_path, out_dir=tmp_path / "a", config=config, now=NOW)
    second = run_all(input_path=input_path, out_dir=tmp_path / "b", config=config, now=NOW)

    for name, result in first.items():
        assert result.summary == second[name].summary
        for table_name, table in result.tables.items():
            pd.testing.assert_frame_equal(table, second[name].tables[table_name])


def _write_declining_reports(path: Path) -> Path:
    now = pd.Timestamp(NOW)
    documents = [
        {"id": f"old{index}", "timestamp": (now - pd.Timedelta(days=40)).isoformat()}
        for index in range(10)
    ]
    documents.append({"id": "new", "timestamp": (now - pd.Timedelta(days=1)).isoformat()})
    path.write_text(json.dumps(documents), encoding="utf-8")
    return path


def test_run_all_time_range_keeps_previous_period_for_overview(tmp_path: Path) -> None:
    input_path = _write_declining_reports(tmp_path / "reports.json")
    config = AppConfig.model_validate({"outputs": {"render_figures": False}})

    results = run_all(
        input_path=input_path,
        out_dir=tmp_path / "out",
        config=config,
        now=NOW,
        time_range="week",
    )

    overview = results["overview"].summary
    assert overview["previous_period_reports"] == 10
    assert overview["current_period_reports"] == 1
    assert overview["reports_change"] == -90
    assert overview["reports_trend"] == "down"
    assert results["buckets"].summary["n_bucketed"] == 1
