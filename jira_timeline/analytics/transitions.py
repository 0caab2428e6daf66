"""Status transition extraction from Jira change histories.

Turns an unordered changelog feed into a time-ordered list of status
transitions. Pure: no I/O, no logging, no clock access.
"""

from __future__ import annotations

from typing import Any

from jira_timeline.core.mappers import map_changelog
from jira_timeline.core.models import Transition

STATUS_FIELD = "status"


def extract_transitions(history: Any, tz=None) -> list[Transition]:
    """Extract status transitions from a change history, oldest first.

    Parameters
    ----------
    history : list | dict | None
        ChangeRecords or raw Jira histories, a ``{"histories": [...]}``
        changelog block, or a full issue payload with ``changelog``. None
        and empty inputs yield an empty list.
    tz : timezone, optional
        Convert transition timestamps to this zone (default: keep UTC).

    Returns
    -------
    list[Transition]
        One transition per status delta, sorted by timestamp. Transitions
        sharing a timestamp keep their input order.

    Raises
    ------
    MalformedHistoryError
        If any record lacks a timestamp or its item list is not iterable.

    Examples
    --------
    >>> rows = extract_transitions([
    ...     {"created": "2024-01-03T00:00:00Z",
    ...      "items": [{"field": "status", "fromString": "In Progress", "toString": "Done"}]},
    ...     {"created": "2024-01-01T00:00:00Z",
    ...      "items": [{"field": "status", "fromString": "Open", "toString": "In Progress"}]},
    ... ])
    >>> [t.to_status for t in rows]
    ['In Progress', 'Done']
    """
    records = map_changelog(history, tz)
    transitions: list[Transition] = []
    for record in records:
        for delta in record.items:
            if delta.field != STATUS_FIELD:
                continue
            transitions.append(Transition(record.created_at, delta.from_value, delta.to_value))
    # sorted() is stable, so equal timestamps keep feed order
    return sorted(transitions, key=lambda t: t.timestamp)
