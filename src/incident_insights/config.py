from __future__ import annotations

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field

Granularity = Literal["day", "week", "month"]
Weighting = Literal["count", "priority"]


class ColumnsConfig(BaseModel):
    """Source field names in exported report documents, keyed by canonical column."""

    id: str = "id"
    title: str = "title"
    description: str = "description"
    category: str = "category"
    priority: str = "priority"
    status: str = "status"
    location: str = "location"
    reported_at: str = "timestamp"
    updated_at: str = "updatedAt"
    media_url: str = "media_url"
    is_video: str = "isVideo"
    user_email: str = "userEmail"


class TimeConfig(BaseModel):
    timezone: str = "UTC"


class BucketsConfig(BaseModel):
    granularity: Granularity = "week"
    chronological: bool = False


class HeatmapConfig(BaseModel):
    weighting: Weighting = "priority"


class RankingConfig(BaseModel):
    top_n: int = Field(default=5, ge=1)


class OverviewConfig(BaseModel):
    period_days: int = Field(default=30, ge=1)
    recent_days: int = Field(default=7, ge=1)
    alert_window_hours: int = Field(default=24, ge=1)


class OutputsConfig(BaseModel):
    tables_format: Literal["parquet", "csv"] = "parquet"
    figures_format: str = "png"
    render_figures: bool = True


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    columns: ColumnsConfig = Field(default_factory=ColumnsConfig)
    time: TimeConfig = Field(default_factory=TimeConfig)
    buckets: BucketsConfig = Field(default_factory=BucketsConfig)
    heatmap: HeatmapConfig = Field(default_factory=HeatmapConfig)
    ranking: RankingConfig = Field(default_factory=RankingConfig)
    overview: OverviewConfig = Field(default_factory=OverviewConfig)
    outputs: OutputsConfig = Field(default_factory=OutputsConfig)


DEFAULT_CONFIG_PATH = Path("configs/default.yaml")


def load_config(path: Path) -> AppConfig:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    return AppConfig.model_validate(data)
