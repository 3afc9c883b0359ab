from __future__ import annotations

import logging
import numbers
from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any

import pandas as pd

from incident_insights.io.schema import CANONICAL_COLUMNS, FIELD_ALIASES

LOGGER = logging.getLogger(__name__)

STATUSES = ("pending", "in-progress", "resolved", "rejected", "critical")
PRIORITIES = ("low", "medium", "high", "critical")
CATEGORIES = (
    "Infrastructure",
    "Public Safety",
    "Sanitation",
    "Environmental",
    "Transportation",
    "Other",
)

DEFAULT_STATUS = "pending"
DEFAULT_PRIORITY = "medium"
DEFAULT_CATEGORY = "Other"
DEFAULT_TITLE = "Untitled Report"
DEFAULT_DESCRIPTION = "No description provided"
DEFAULT_LOCATION = "Location not specified"
DEFAULT_USER_EMAIL = "Unknown"

# Epoch numbers above this are milliseconds (1e11 seconds is past the year 5000).
EPOCH_MILLISECONDS_ABOVE = 1e11
TIMESTAMP_MAPPING_KEYS = (("seconds", "nanoseconds"), ("_seconds", "_nanoseconds"))

_CATEGORY_LOOKUP = {category.lower(): category for category in CATEGORIES}
_TRUTHY = {"1", "true", "yes", "y"}


@dataclass(frozen=True)
class IncidentReport:
    id: str | None
    title: str
    description: str
    category: str
    priority: str
    status: str
    location: str
    reported_at: pd.Timestamp | None
    updated_at: pd.Timestamp | None
    media_url: str | None = None
    is_video: bool = False
    user_email: str = DEFAULT_USER_EMAIL


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, Mapping):
        return not value
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _text(value: Any, default: str) -> str:
    if _is_missing(value):
        return default
    return str(value).strip() or default


def _choice(value: Any, allowed: tuple[str, ...], default: str) -> str:
    if _is_missing(value):
        return default
    candidate = str(value).strip().lower()
    return candidate if candidate in allowed else default


def _category(value: Any) -> str:
    if _is_missing(value):
        return DEFAULT_CATEGORY
    return _CATEGORY_LOOKUP.get(str(value).strip().lower(), DEFAULT_CATEGORY)


def _flag(value: Any) -> bool:
    if _is_missing(value):
        return False
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY
    return bool(value)


def _field(raw: Mapping[str, Any], name: str) -> Any:
    if not _is_missing(raw.get(name)):
        return raw.get(name)
    for alias in FIELD_ALIASES.get(name, ()):
        if not _is_missing(raw.get(alias)):
            return raw.get(alias)
    return None


def _epoch_unit(value: numbers.Real) -> str:
    return "ms" if abs(float(value)) > EPOCH_MILLISECONDS_ABOVE else "s"


def _timestamp_mapping_seconds(value: Mapping[str, Any]) -> float | None:
    """Epoch seconds from a serialized store Timestamp (``seconds``/``nanoseconds``)."""
    for seconds_key, nanos_key in TIMESTAMP_MAPPING_KEYS:
        seconds = value.get(seconds_key)
        if isinstance(seconds, numbers.Real) and not isinstance(seconds, bool):
            nanos = value.get(nanos_key) or 0
            if not isinstance(nanos, numbers.Real):
                return None
            return float(seconds) + float(nanos) / 1e9
    return None


def coerce_timestamp(value: Any, timezone: str = "UTC") -> pd.Timestamp | None:
    """Parse a timestamp into naive wall-clock time in ``timezone``.

    Accepts datetimes, pandas Timestamps, ISO-8601 strings, epoch seconds or
    milliseconds (told apart by magnitude) and serialized store Timestamps such as
    ``{"seconds": ..., "nanoseconds": ...}``. Aware values are converted into
    ``timezone`` before the offset is dropped; naive values are assumed to already be
    wall-clock time there. Anything unparseable returns ``None``.
    """
    if _is_missing(value) or isinstance(value, bool):
        return None
    if isinstance(value, Mapping):
        value = _timestamp_mapping_seconds(value)
        if value is None:
            return None
    try:
        if isinstance(value, numbers.Real):
            parsed = pd.to_datetime(value, unit=_epoch_unit(value), utc=True)
        else:
            parsed = pd.to_datetime(value, errors="coerce")
    except (TypeError, ValueError, OverflowError):
        return None
    if not isinstance(parsed, pd.Timestamp) or pd.isna(parsed):
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.tz_convert(timezone).tz_localize(None)
    return parsed


def reference_time(now: datetime | pd.Timestamp | str, timezone: str = "UTC") -> pd.Timestamp:
    parsed = coerce_timestamp(now, timezone=timezone)
    if parsed is None:
        raise ValueError(f"Invalid reference time: {now!r}")
    return parsed


def normalize_record(raw: Mapping[str, Any], timezone: str = "UTC") -> IncidentReport:
    record_id = _field(raw, "id")
    media_url = _field(raw, "media_url")
    return IncidentReport(
        id=None if record_id is None else str(record_id),
        title=_text(_field(raw, "title"), DEFAULT_TITLE),
        description=_text(_field(raw, "description"), DEFAULT_DESCRIPTION),
        category=_category(_field(raw, "category")),
        priority=_choice(_field(raw, "priority"), PRIORITIES, DEFAULT_PRIORITY),
        status=_choice(_field(raw, "status"), STATUSES, DEFAULT_STATUS),
        location=_text(_field(raw, "location"), DEFAULT_LOCATION),
        reported_at=coerce_timestamp(_field(raw, "reported_at"), timezone=timezone),
        updated_at=coerce_timestamp(_field(raw, "updated_at"), timezone=timezone),
        media_url=None if media_url is None else str(media_url),
        is_video=_flag(_field(raw, "is_video")),
        user_email=_text(_field(raw, "user_email"), DEFAULT_USER_EMAIL),
    )


def normalize_reports(
    records: Iterable[Mapping[str, Any]] | pd.DataFrame,
    timezone: str = "UTC",
) -> pd.DataFrame:
    """Normalize raw report documents into a frame with canonical columns and defaults."""
    if isinstance(records, pd.DataFrame):
        records = records.to_dict(orient="records")

    rows = [asdict(normalize_record(raw, timezone=timezone)) for raw in records]
    frame = pd.DataFrame(rows, columns=CANONICAL_COLUMNS)
    for column in ("reported_at", "updated_at"):
        frame[column] = pd.to_datetime(frame[column])
    frame["is_video"] = frame["is_video"].astype(bool)

    missing_reported = int(frame["reported_at"].isna().sum())
    if missing_reported:
        LOGGER.debug(
            "%d of %d reports have no reported_at and are excluded from time-keyed aggregates",
            missing_reported,
            len(frame),
        )
    return frame
