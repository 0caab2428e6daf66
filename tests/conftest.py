"""Test configuration ensuring local package import when editable install not active.

If users invoke `pytest` outside the project's virtualenv, we still add the project
root to sys.path so `import jira_timeline` works.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def _history(created, *items, author=None):
    """Raw Jira changelog entry; each item is (field, from, to)."""
    entry = {
        "created": created,
        "items": [{"field": f, "fromString": frm, "toString": to} for f, frm, to in items],
    }
    if author:
        entry["author"] = {"displayName": author}
    return entry


@pytest.fixture
def make_history():
    return _history


@pytest.fixture
def scenario_histories():
    return [
        _history("2024-01-03T00:00:00.000+0000", ("status", "InProgress", "Done")),
        _history("2024-01-02T00:00:00.000+0000", ("assignee", None, "Alice")),
        _history("2024-01-01T00:00:00.000+0000", ("status", "Open", "InProgress")),
    ]
