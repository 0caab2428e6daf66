from datetime import UTC, datetime
from itertools import permutations

import pytest
import pytz

from jira_timeline.analytics.transitions import extract_transitions
from jira_timeline.core.errors import MalformedHistoryError
from jira_timeline.core.models import ChangeRecord, FieldDelta, Transition


def test_transitions_sorted_and_non_status_items_ignored(scenario_histories):
    out = extract_transitions(scenario_histories)
    assert out == [
        Transition(datetime(2024, 1, 1, tzinfo=UTC), "Open", "InProgress"),
        Transition(datetime(2024, 1, 3, tzinfo=UTC), "InProgress", "Done"),
    ]


def test_order_independent_of_record_order(make_history):
    records = [
        make_history("2024-02-01T08:00:00Z", ("status", "Open", "In Progress")),
        make_history("2024-02-03T09:30:00Z", ("status", "In Progress", "Review")),
        make_history("2024-02-05T17:15:00Z", ("status", "Review", "Done")),
    ]
    expected = [t.to_status for t in extract_transitions(records)]
    assert expected == ["In Progress", "Review", "Done"]
    for perm in permutations(records):
        out = extract_transitions(list(perm))
        assert [t.to_status for t in out] == expected
        assert all(a.timestamp <= b.timestamp for a, b in zip(out, out[1:]))


def test_equal_timestamps_keep_input_order(make_history):
    records = [
        make_history("2024-03-01T10:00:00Z", ("status", "Open", "Triage")),
        make_history("2024-03-01T10:00:00Z", ("status", "Triage", "Backlog"), ("status", "Backlog", "Ready")),
        make_history("2024-02-28T10:00:00Z", ("status", None, "Open")),
    ]
    out = extract_transitions(records)
    assert [t.to_status for t in out] == ["Open", "Triage", "Backlog", "Ready"]


def test_extraction_is_idempotent(scenario_histories):
    assert extract_transitions(scenario_histories) == extract_transitions(scenario_histories)


@pytest.mark.parametrize("payload", [None, [], {"changelog": {"histories": []}}, {"histories": []}])
def test_empty_history_yields_empty_list(payload):
    assert extract_transitions(payload) == []


def test_accepts_full_issue_payload(scenario_histories):
    issue = {"key": "OBS-1", "fields": {}, "changelog": {"histories": scenario_histories}}
    out = extract_transitions(issue)
    assert [t.to_status for t in out] == ["InProgress", "Done"]


def test_accepts_change_records():
    records = [
        ChangeRecord(datetime(2024, 1, 5), (FieldDelta("status", "A", "B"),)),
        ChangeRecord(datetime(2024, 1, 2, tzinfo=UTC), (FieldDelta("resolution", None, "Fixed"),)),
        ChangeRecord(datetime(2024, 1, 1, tzinfo=UTC), (FieldDelta("status", None, "A"),)),
    ]
    out = extract_transitions(records)
    assert [(t.from_status, t.to_status) for t in out] == [(None, "A"), ("A", "B")]
    # naive timestamps are read as UTC
    assert out[1].timestamp == datetime(2024, 1, 5, tzinfo=UTC)


def test_record_without_status_items_contributes_nothing(make_history):
    records = [make_history("2024-01-01T00:00:00Z", ("labels", "", "urgent")), make_history("2024-01-02T00:00:00Z")]
    assert extract_transitions(records) == []


def test_plain_string_author_does_not_block_extraction():
    records = [
        {
            "created": "2024-01-01T00:00:00Z",
            "author": "bob",
            "items": [{"field": "status", "fromString": "Open", "toString": "Done"}],
        }
    ]
    assert extract_transitions(records) == [Transition(datetime(2024, 1, 1, tzinfo=UTC), "Open", "Done")]


def test_timestamps_converted_to_requested_timezone(make_history):
    tz = pytz.timezone("America/Santiago")
    out = extract_transitions([make_history("2024-01-10T12:00:00.000+0000", ("status", "Open", "Done"))], tz=tz)
    assert out[0].timestamp.hour == 9
    assert out[0].timestamp == datetime(2024, 1, 10, 12, tzinfo=UTC)


@pytest.mark.parametrize(
    "bad_record",
    [
        {"items": [{"field": "status", "fromString": "Open", "toString": "Done"}]},
        {"created": None, "items": []},
        {"created": "not a timestamp", "items": []},
        {"created": "2024-01-01T00:00:00Z", "items": 5},
        {"created": "2024-01-01T00:00:00Z", "items": None},
        {"created": "2024-01-01T00:00:00Z", "items": ["status"]},
        "2024-01-01T00:00:00Z",
    ],
)
def test_malformed_record_fails_whole_extraction(make_history, bad_record):
    good = make_history("2024-01-02T00:00:00Z", ("status", "Open", "Done"))
    with pytest.raises(MalformedHistoryError):
        extract_transitions([good, bad_record])


def test_malformed_histories_block():
    with pytest.raises(MalformedHistoryError):
        extract_transitions({"changelog": {"histories": 42}})
