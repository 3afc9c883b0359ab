from __future__ import annotations

import json
import math
from pathlib import Path
from typing import Any

import pandas as pd

EXPORT_COLUMNS = [
    "id",
    "title",
    "description",
    "category",
    "status",
    "priority",
    "location",
    "user_email",
    "reported_at",
    "updated_at",
]


def json_safe(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(key): json_safe(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [json_safe(item) for item in value]
    if isinstance(value, pd.Timestamp):
        return None if pd.isna(value) else value.isoformat()
    if isinstance(value, pd.Timedelta):
        return str(value)
    if hasattr(value, "item"):
        try:
            value = value.item()
        except (TypeError, ValueError):
            pass
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, (int, str, bool)) or value is None:
        return value
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    return str(value)


def write_table(df: pd.DataFrame, path: Path, fmt: str = "parquet") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    if fmt == "parquet":
        df.to_parquet(path, index=False)
        return path
    if fmt == "csv":
        df.to_csv(path, index=False)
        return path
    raise ValueError(f"Unsupported table format: {fmt}")


def write_summary(data: dict[str, Any], path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(json_safe(data), indent=2, sort_keys=True), encoding="utf-8")
    return path


def _iso_or_blank(values: pd.Series) -> pd.Series:
    stamps = pd.to_datetime(values, errors="coerce")
    return stamps.map(lambda stamp: "" if pd.isna(stamp) else stamp.isoformat())


def export_reports(reports: pd.DataFrame, path: Path) -> Path:
    """Write normalized reports as CSV with ISO-8601 timestamps (blank when missing)."""
    exported = reports.reindex(columns=EXPORT_COLUMNS).copy()
    for column in ("reported_at", "updated_at"):
        exported[column] = _iso_or_blank(exported[column])
    return write_table(exported, path, fmt="csv")
