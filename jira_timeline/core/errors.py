"""Exception hierarchy for timeline computation and Jira access."""

from __future__ import annotations


class TimelineError(ValueError):
    """Base class for invalid input to the transition/duration engine."""


class MalformedHistoryError(TimelineError):
    """A change record is missing its timestamp or its delta list is unusable."""


class InvalidUnitError(TimelineError):
    """The requested duration unit is not in the conversion table."""


class EmptyTimelineError(TimelineError):
    """At least one transition was required but none were supplied."""


class JiraClientError(RuntimeError):
    """Base class for failures talking to the Jira REST service."""


class JiraRequestError(JiraClientError):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class FixVersionNotFoundError(JiraClientError):
    pass


class TransitionNotAvailableError(JiraClientError):
    pass
