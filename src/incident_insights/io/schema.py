from __future__ import annotations

import pandas as pd

from incident_insights.config import ColumnsConfig

CANONICAL_COLUMNS = [
    "id",
    "title",
    "description",
    "category",
    "priority",
    "status",
    "location",
    "reported_at",
    "updated_at",
    "media_url",
    "is_video",
    "user_email",
]

# Alternate spellings seen in exported report documents.
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "reported_at": ("reportedAt", "timestamp"),
    "updated_at": ("updatedAt",),
    "media_url": ("mediaUrl",),
    "is_video": ("isVideo",),
    "user_email": ("userEmail",),
}


def normalize_columns(df: pd.DataFrame, columns: ColumnsConfig) -> pd.DataFrame:
    """Rename source columns to canonical names; absent optional columns are left absent."""
    rename_map: dict[str, str] = {}
    for canonical, source in columns.model_dump().items():
        if source in df.columns and source != canonical and canonical not in df.columns:
            rename_map[source] = canonical
    renamed = df.rename(columns=rename_map)

    alias_map: dict[str, str] = {}
    for canonical, aliases in FIELD_ALIASES.items():
        if canonical in renamed.columns:
            continue
        for alias in aliases:
            if alias in renamed.columns:
                alias_map[alias] = canonical
                break
    return renamed.rename(columns=alias_map)
