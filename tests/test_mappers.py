from datetime import UTC, datetime

import pandas as pd

from jira_timeline.core.config import STATUS_INTERVAL_COLUMNS
from jira_timeline.core.mappers import (
    durations_to_dataframe,
    intervals_to_dataframe,
    map_change_record,
    map_changelog,
    parse_timestamp,
    transitions_to_dataframe,
)
from jira_timeline.core.models import StatusInterval, Transition


def test_parse_timestamp_variants():
    expected = datetime(2024, 9, 1, 10, tzinfo=UTC)
    assert parse_timestamp("2024-09-01T10:00:00.000+0000") == expected
    assert parse_timestamp("2024-09-01T07:00:00.000-0300") == expected
    assert parse_timestamp(datetime(2024, 9, 1, 10)) == expected
    assert parse_timestamp(None) is None
    assert parse_timestamp("") is None
    assert parse_timestamp("garbage") is None


def test_map_change_record_keeps_all_items(make_history):
    raw = make_history(
        "2024-09-01T10:00:00.000+0000",
        ("status", "To Do", "In Progress"),
        ("assignee", None, "Alice"),
        author="Bob",
    )
    record = map_change_record(raw)
    assert record.author == "Bob"
    assert [d.field for d in record.items] == ["status", "assignee"]
    assert record.items[0].from_value == "To Do"
    assert record.items[0].to_value == "In Progress"


def test_map_change_record_ignores_non_object_author():
    raw = {
        "created": "2024-09-01T10:00:00.000+0000",
        "author": "bob",
        "items": [{"field": "status", "fromString": "Open", "toString": "Done"}],
    }
    record = map_change_record(raw)
    assert record.author is None
    assert record.items[0].to_value == "Done"


def test_map_changelog_from_issue_payload(scenario_histories):
    records = map_changelog({"key": "OBS-1", "changelog": {"histories": scenario_histories}})
    assert len(records) == 3
    assert map_changelog({"key": "OBS-1", "changelog": None}) == []


def test_transitions_to_dataframe():
    df = transitions_to_dataframe([Transition(datetime(2024, 1, 1, tzinfo=UTC), "Open", "Done")])
    assert list(df.columns) == ["timestamp", "from_status", "to_status"]
    assert transitions_to_dataframe([]).empty


def test_intervals_to_dataframe_includes_working_days():
    interval = StatusInterval(
        status="In Progress",
        start=datetime(2024, 1, 5, tzinfo=UTC),
        end=datetime(2024, 1, 8, tzinfo=UTC),
        elapsed_seconds=3 * 86400.0,
        calendar_days=3,
        weekend_days=2,
        seconds_in_status=86400.0,
    )
    df = intervals_to_dataframe([interval])
    assert list(df.columns) == list(STATUS_INTERVAL_COLUMNS)
    assert df.loc[0, "working_days"] == 1
    assert not df.loc[0, "is_open"]
    empty = intervals_to_dataframe([])
    assert empty.empty and list(empty.columns) == list(STATUS_INTERVAL_COLUMNS)


def test_durations_to_dataframe_sorted_descending():
    df = durations_to_dataframe({"To Do": 1.5, "In Progress": 4.0, "Done": 0.5}, key="OBS-1")
    assert df["status"].tolist() == ["In Progress", "To Do", "Done"]
    assert (df["key"] == "OBS-1").all()
    assert pd.api.types.is_float_dtype(df["duration"])
    assert durations_to_dataframe({}).empty
