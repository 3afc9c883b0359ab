from __future__ import annotations

import json
from pathlib import Path

import pandas as pd

from incident_insights.config import AppConfig
from incident_insights.io.schema import normalize_columns
from incident_insights.preprocess.normalize import normalize_reports


def _read_json_documents(path: Path) -> pd.DataFrame:
    with path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    if isinstance(payload, dict):
        payload = payload.get("reports", [])
    if not isinstance(payload, list):
        raise ValueError(f"Expected a list of report documents in {path}")
    return pd.DataFrame.from_records([item for item in payload if isinstance(item, dict)])


def read_report_documents(path: Path) -> pd.DataFrame:
    suffix = path.suffix.lower()
    if suffix == ".csv":
        # utf-8-sig strips BOM-prefixed headers commonly found in exported CSV files.
        return pd.read_csv(path, encoding="utf-8-sig", dtype=str, keep_default_na=False)
    if suffix == ".json":
        return _read_json_documents(path)
    if suffix in {".jsonl", ".ndjson"}:
        return pd.read_json(path, lines=True, dtype=False, convert_dates=False)
    if suffix == ".parquet":
        return pd.read_parquet(path)
    raise ValueError(f"Unsupported report file type: {path.suffix}")


def load_reports(path: Path, config: AppConfig) -> pd.DataFrame:
    """Load exported report documents and return normalized canonical records."""
    documents = read_report_documents(path)
    renamed = normalize_columns(df=documents, columns=config.columns)
    return normalize_reports(renamed, timezone=config.time.timezone)


def load_table(path: Path) -> pd.DataFrame:
    if path.suffix == ".parquet":
        return pd.read_parquet(path)
    if path.suffix == ".csv":
        return pd.read_csv(path)
    raise ValueError(f"Unsupported table file type: {path.suffix}")
