"""Mapping raw Jira changelog JSON into domain models and models into DataFrames."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import asdict
from datetime import datetime
from typing import Any

import pandas as pd
import pytz

from .config import STATUS_INTERVAL_COLUMNS
from .errors import MalformedHistoryError
from .models import ChangeRecord, FieldDelta, StatusInterval, Transition


def parse_timestamp(value: Any, tz=None) -> datetime | None:
    """Parse a Jira timestamp into a timezone-aware datetime.

    Strings go through ``pd.to_datetime(utc=True)``; naive datetimes are
    taken as UTC. Returns None when the value is empty or unparseable.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        ts = pd.Timestamp(value)
        if ts.tzinfo is None:
            ts = ts.tz_localize(pytz.UTC)
    else:
        ts = pd.to_datetime(value, utc=True, errors="coerce")
    if ts is None or pd.isna(ts):
        return None
    if tz is not None:
        ts = ts.tz_convert(tz)
    return ts.to_pydatetime()


def _is_delta_list(value: Any) -> bool:
    if value is None or isinstance(value, (str, bytes, Mapping)):
        return False
    return isinstance(value, Iterable)


def map_field_delta(raw: Any) -> FieldDelta:
    if isinstance(raw, FieldDelta):
        return raw
    if not isinstance(raw, Mapping):
        raise MalformedHistoryError(f"Change item is not an object: {raw!r}")
    return FieldDelta(
        field=raw.get("field"),
        from_value=raw.get("fromString"),
        to_value=raw.get("toString"),
    )


def map_change_record(raw: Any, tz=None) -> ChangeRecord:
    """Validate one changelog entry and convert it to a ChangeRecord.

    Raises
    ------
    MalformedHistoryError
        If the entry has no parseable ``created`` timestamp or its ``items``
        are not a list of change objects.
    """
    if isinstance(raw, ChangeRecord):
        created_at = parse_timestamp(raw.created_at, tz)
        items, author = raw.items, raw.author
    elif isinstance(raw, Mapping):
        created_at = parse_timestamp(raw.get("created"), tz)
        items = raw.get("items")
        author = raw.get("author")
        author = author.get("displayName") if isinstance(author, Mapping) else None
    else:
        raise MalformedHistoryError(f"Change record is not an object: {raw!r}")

    if created_at is None:
        record_id = raw.get("id", "?") if isinstance(raw, Mapping) else "?"
        raise MalformedHistoryError(f"Change record {record_id} has no valid timestamp")
    if not _is_delta_list(items):
        raise MalformedHistoryError(f"Change record at {created_at.isoformat()} has no iterable item list")
    return ChangeRecord(
        created_at=created_at,
        items=tuple(map_field_delta(item) for item in items),
        author=author,
    )


def histories_from_payload(payload: Any) -> list:
    """Return the raw history list from an issue payload, changelog block or list."""
    if payload is None:
        return []
    if isinstance(payload, Mapping):
        if "changelog" in payload:
            payload = payload.get("changelog") or {}
        histories = payload.get("histories")
        if histories is None:
            return []
        if not _is_delta_list(histories):
            raise MalformedHistoryError("Changelog histories are not a list")
        return list(histories)
    if not _is_delta_list(payload):
        raise MalformedHistoryError(f"Unsupported change history payload: {type(payload)!r}")
    return list(payload)


def map_changelog(payload: Any, tz=None) -> list[ChangeRecord]:
    return [map_change_record(entry, tz) for entry in histories_from_payload(payload)]


def transitions_to_dataframe(transitions: Iterable[Transition]) -> pd.DataFrame:
    rows = [asdict(t) for t in transitions]
    if not rows:
        return pd.DataFrame(columns=["timestamp", "from_status", "to_status"])
    return pd.DataFrame(rows)


def intervals_to_dataframe(intervals: Iterable[StatusInterval]) -> pd.DataFrame:
    rows = []
    for interval in intervals:
        row = asdict(interval)
        row["working_days"] = interval.working_days
        rows.append(row)
    if not rows:
        return pd.DataFrame(columns=list(STATUS_INTERVAL_COLUMNS))
    return pd.DataFrame(rows)[list(STATUS_INTERVAL_COLUMNS)]


def durations_to_dataframe(durations: Mapping[str, float], key: str | None = None) -> pd.DataFrame:
    """Long-form frame (``key``, ``status``, ``duration``) sorted by duration."""
    rows = [{"key": key, "status": status, "duration": float(value)} for status, value in durations.items()]
    if not rows:
        return pd.DataFrame(columns=["key", "status", "duration"])
    df = pd.DataFrame(rows)
    return df.sort_values(by="duration", ascending=False, kind="stable").reset_index(drop=True)
