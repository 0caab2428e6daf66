"""IssueService: orchestrates fetching changelogs and time-in-status analytics."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

import pandas as pd
import pytz

from jira_timeline.analytics.durations import aggregate_durations, resolve_unit, status_intervals
from jira_timeline.analytics.transitions import extract_transitions

from .config import CHANGELOG_FETCH_FIELDS, TimeUnit
from .errors import JiraClientError, TimelineError
from .issue_keys import match_issue_keys
from .jira_client import JiraAPI
from .mappers import durations_to_dataframe, intervals_to_dataframe
from .models import Transition

ProgressCallback = Callable[[str, int | None, int | None], None]

logger = logging.getLogger(__name__)


class IssueService:
    def __init__(self, api: JiraAPI):
        self.api = api
        self.settings = api.settings
        self._tz = pytz.timezone(self.settings.timezone)

    def now(self) -> datetime:
        return datetime.now(tz=self._tz)

    # ------------------ Timeline Methods ------------------
    def get_transition_history(self, issue_key: str) -> list[Transition]:
        """Fetch an issue changelog and return its status transitions, oldest first."""
        raw = self.api.fetch_changelog(issue_key, fields=list(CHANGELOG_FETCH_FIELDS))
        transitions = extract_transitions(raw, tz=self._tz)
        logger.debug("%s has %d status transitions", issue_key, len(transitions))
        return transitions

    def get_status_durations(
        self,
        issue_key: str,
        unit: str | TimeUnit = TimeUnit.SECONDS,
        include_weekends: bool = False,
        now: datetime | None = None,
    ) -> dict[str, float]:
        """Time spent by ``issue_key`` in each status.

        ``now`` defaults to the current time in the configured timezone and
        closes the interval of the issue's current status.
        """
        resolved = resolve_unit(unit)
        transitions = self.get_transition_history(issue_key)
        durations = aggregate_durations(
            transitions,
            resolved,
            include_weekends,
            now or self.now(),
        )
        logger.info(
            "Computed %d status durations for %s in %s (weekends %s)",
            len(durations),
            issue_key,
            resolved.value,
            "included" if include_weekends else "excluded",
        )
        return durations

    def get_status_intervals(
        self,
        issue_key: str,
        now: datetime | None = None,
        include_weekends: bool = False,
    ) -> pd.DataFrame:
        transitions = self.get_transition_history(issue_key)
        intervals = status_intervals(transitions, now or self.now(), include_weekends=include_weekends)
        return intervals_to_dataframe(intervals)

    def fix_version_durations(
        self,
        project: str,
        fix_version: str,
        unit: str | TimeUnit = TimeUnit.DAYS,
        include_weekends: bool = False,
        now: datetime | None = None,
        *,
        progress: ProgressCallback | None = None,
    ) -> pd.DataFrame:
        """Status durations for every issue in a project's fix version.

        Returns a long-form DataFrame with columns ``key``, ``status`` and
        ``duration``. Issues that fail to load are logged and skipped.
        """
        resolved = resolve_unit(unit)
        if progress:
            progress(f"Looking up issues in {project} {fix_version}", None, None)
        keys = self.api.get_issues_in_fix_version(project, fix_version)
        now = now or self.now()
        frames: list[pd.DataFrame] = []
        for idx, key in enumerate(keys, start=1):
            if progress:
                progress(f"Computing durations for {key}", idx, len(keys))
            try:
                durations = self.get_status_durations(key, resolved, include_weekends, now)
            except (JiraClientError, TimelineError) as exc:
                logger.warning("Skipping %s: %s", key, exc)
                continue
            if durations:
                frames.append(durations_to_dataframe(durations, key=key))
        if not frames:
            return pd.DataFrame(columns=["key", "status", "duration"])
        return pd.concat(frames, ignore_index=True)

    # ------------------ Issue Actions ------------------
    def fetch_issue(self, issue_key: str) -> dict[str, Any]:
        return self.api.fetch_issue_raw(issue_key)

    def comment(self, issue_key: str, body: str, visible_to: str | None = None) -> None:
        self.api.add_comment(issue_key, body, visible_to=visible_to)

    def assign(self, issue_key: str, assignee: str, *, account_id: bool = False) -> None:
        self.api.assign(issue_key, assignee, account_id=account_id)

    def update_issue(self, issue_key: str, update: dict[str, Any]) -> None:
        logger.info("Updating %s", issue_key)
        self.api.update_issue(issue_key, update)

    def transition(self, issue_key: str, name: str) -> str:
        return self.api.transition(issue_key, name)

    def issues_mentioned(self, text: str) -> dict[str, set[str]]:
        """Issue keys referenced in ``text``, grouped by project."""
        return match_issue_keys(text, self.settings.issue_pattern)
