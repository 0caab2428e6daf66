"""Issue key detection in free text such as commit messages."""

from __future__ import annotations

import re

from .config import ISSUE_KEY_PATTERN

DEFAULT_PATTERN = re.compile(ISSUE_KEY_PATTERN, re.IGNORECASE)


def match_issue_keys(text: str | None, pattern: re.Pattern = DEFAULT_PATTERN) -> dict[str, set[str]]:
    """Group issue keys found in ``text`` by project key.

    Keys are returned as written; ``"obs-1"`` and ``"OBS-1"`` land in
    different projects.

    >>> keys = match_issue_keys("Fix OBS-12 and OBS-7, see DM-3")
    >>> sorted(keys), sorted(keys["OBS"])
    (['DM', 'OBS'], ['OBS-12', 'OBS-7'])
    """
    issues: dict[str, set[str]] = {}
    if not text:
        return issues
    for match in pattern.finditer(text):
        key = match.group(0)
        project = key.rsplit("-", 1)[0]
        issues.setdefault(project, set()).add(key)
    return issues
