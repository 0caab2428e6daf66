"""Domain data models for change histories, transitions and status intervals."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True, slots=True)
class FieldDelta:
    field: str | None
    from_value: str | None = None
    to_value: str | None = None


@dataclass(frozen=True, slots=True)
class ChangeRecord:
    created_at: datetime
    items: tuple[FieldDelta, ...] = field(default_factory=tuple)
    author: str | None = None


@dataclass(frozen=True, slots=True)
class Transition:
    timestamp: datetime
    from_status: str | None
    to_status: str | None


@dataclass(slots=True)
class StatusInterval:
    """Time attributed to one status between two transitions (or until now)."""

    status: str | None
    start: datetime
    end: datetime
    elapsed_seconds: float
    calendar_days: int
    weekend_days: int
    seconds_in_status: float
    is_open: bool = False

    @property
    def working_days(self) -> int:
        return self.calendar_days - self.weekend_days
