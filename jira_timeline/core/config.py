"""Central configuration: constants, unit tables, and immutable Jira settings."""

from __future__ import annotations

import os
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum

# =============================================================================
# Jira Connection Settings
# =============================================================================
JIRA_DEFAULT_API_VERSION = "3"
TIMEZONE = "UTC"
DEFAULT_LOG_LEVEL = "INFO"

# Matches issue keys such as "OBS-123" inside free text (commit messages etc.)
ISSUE_KEY_PATTERN = r"([a-zA-Z][a-zA-Z0-9_]+-[1-9][0-9]*)"


class ConfigurationError(ValueError):
    """Raised when Jira settings are incomplete."""


# =============================================================================
# Time-in-Status Configuration
# =============================================================================
SECONDS_PER_DAY = 86400

# Python weekday numbers (Monday == 0)
WEEKEND_DAYS: frozenset[int] = frozenset({5, 6})


class TimeUnit(str, Enum):
    SECONDS = "seconds"
    MINUTES = "minutes"
    HOURS = "hours"
    DAYS = "days"
    WEEKS = "weeks"


UNIT_SECONDS: dict[TimeUnit, int] = {
    TimeUnit.SECONDS: 1,
    TimeUnit.MINUTES: 60,
    TimeUnit.HOURS: 3600,
    TimeUnit.DAYS: SECONDS_PER_DAY,
    TimeUnit.WEEKS: 7 * SECONDS_PER_DAY,
}

# Keys should be lowercase for case-insensitive matching
UNIT_ALIASES: dict[str, TimeUnit] = {
    "seconds": TimeUnit.SECONDS,
    "second": TimeUnit.SECONDS,
    "secs": TimeUnit.SECONDS,
    "sec": TimeUnit.SECONDS,
    "s": TimeUnit.SECONDS,
    "minutes": TimeUnit.MINUTES,
    "minute": TimeUnit.MINUTES,
    "mins": TimeUnit.MINUTES,
    "min": TimeUnit.MINUTES,
    "m": TimeUnit.MINUTES,
    "hours": TimeUnit.HOURS,
    "hour": TimeUnit.HOURS,
    "h": TimeUnit.HOURS,
    "days": TimeUnit.DAYS,
    "day": TimeUnit.DAYS,
    "d": TimeUnit.DAYS,
    "weeks": TimeUnit.WEEKS,
    "week": TimeUnit.WEEKS,
    "w": TimeUnit.WEEKS,
}

# Units offered in the dashboard selectors
DISPLAY_UNITS: Sequence[str] = tuple(unit.value for unit in TimeUnit)

# =============================================================================
# Jira Fetch Settings
# =============================================================================
CHANGELOG_FETCH_FIELDS: Sequence[str] = ("summary", "status", "created", "updated")
SEARCH_PAGE_SIZE = 1000
SEARCH_CACHE_TTL = 300.0  # seconds

STATUS_INTERVAL_COLUMNS: Sequence[str] = (
    "status",
    "start",
    "end",
    "calendar_days",
    "weekend_days",
    "working_days",
    "elapsed_seconds",
    "seconds_in_status",
    "is_open",
)


@dataclass(frozen=True, slots=True)
class JiraSettings:
    """Immutable connection settings handed to every collaborator."""

    server: str
    email: str
    token: str
    api_version: str = JIRA_DEFAULT_API_VERSION
    timezone: str = TIMEZONE
    log_level: str = DEFAULT_LOG_LEVEL
    issue_pattern: re.Pattern = field(default_factory=lambda: re.compile(ISSUE_KEY_PATTERN, re.IGNORECASE))

    def __post_init__(self):
        missing = [name for name in ("server", "email", "token") if not getattr(self, name)]
        if missing:
            raise ConfigurationError(f"Missing Jira settings: {', '.join(missing)}")
        object.__setattr__(self, "server", self.server.rstrip("/"))


def _lookup(source: Mapping, *names: str) -> str | None:
    section = source.get("jira") or {}
    for name in names:
        value = section.get(name)
        if value:
            return str(value)
        value = source.get(name)
        if value:
            return str(value)
    return None


def load_settings(source: Mapping) -> JiraSettings:
    """Build settings from a secrets-like mapping.

    Keys are read from a ``[jira]`` section first and then from the top level,
    which matches how Streamlit exposes ``secrets.toml``.

    Parameters
    ----------
    source : Mapping
        ``st.secrets``, ``os.environ`` or a plain dict.

    Returns
    -------
    JiraSettings
        Validated, immutable settings.

    Raises
    ------
    ConfigurationError
        If server, email or token is missing.
    """
    return JiraSettings(
        server=_lookup(source, "JIRA_SERVER") or "",
        email=_lookup(source, "JIRA_EMAIL") or "",
        token=_lookup(source, "JIRA_API_TOKEN", "JIRA_TOKEN") or "",
        api_version=_lookup(source, "JIRA_API_VERSION") or JIRA_DEFAULT_API_VERSION,
        timezone=_lookup(source, "JIRA_TIMEZONE") or TIMEZONE,
        log_level=(_lookup(source, "JIRA_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
    )


def load_settings_from_env() -> JiraSettings:
    return load_settings(os.environ)
