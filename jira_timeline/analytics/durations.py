"""Time-in-status aggregation over an ordered transition timeline.

Each transition opens an interval for its ``to_status`` that closes at the
next transition; the last one stays open until ``now``. Intervals are
optionally discounted by the weekend days they touch, summed per status in
seconds, then converted to the requested unit.
"""

from __future__ import annotations

from collections.abc import Collection, Sequence
from datetime import datetime, timedelta

from jira_timeline.core.config import SECONDS_PER_DAY, UNIT_ALIASES, UNIT_SECONDS, WEEKEND_DAYS, TimeUnit
from jira_timeline.core.errors import EmptyTimelineError, InvalidUnitError
from jira_timeline.core.mappers import parse_timestamp
from jira_timeline.core.models import StatusInterval, Transition


def resolve_unit(unit: str | TimeUnit) -> TimeUnit:
    """Map a unit name or alias (``"days"``, ``"d"``, ``"Hour"``) to a TimeUnit.

    Raises
    ------
    InvalidUnitError
        If the unit is not in the conversion table.
    """
    if isinstance(unit, TimeUnit):
        return unit
    if isinstance(unit, str):
        resolved = UNIT_ALIASES.get(unit.strip().lower())
        if resolved is not None:
            return resolved
    raise InvalidUnitError(f"Unsupported duration unit: {unit!r}")


def to_unit(seconds: float, unit: str | TimeUnit) -> float:
    return seconds / UNIT_SECONDS[resolve_unit(unit)]


def count_weekend_days(start: datetime, end: datetime, weekend_days: Collection[int] = WEEKEND_DAYS) -> int:
    """Count weekend days touched by ``[start, end]``.

    Steps from ``start`` one day at a time while the step is ``<= end`` and
    counts steps whose weekday is in ``weekend_days``. The local time of day
    of ``start`` is carried through every step, also across DST changes, so an
    interval that begins on a Saturday counts that Saturday even if it ends an
    hour later.
    """
    tz = start.tzinfo
    wall_clock = start.replace(tzinfo=None)
    count = 0
    step = 0
    while True:
        day = _localize(wall_clock + timedelta(days=step), tz)
        if day > end:
            return count
        if day.weekday() in weekend_days:
            count += 1
        step += 1


def _localize(naive: datetime, tz) -> datetime:
    if tz is None:
        return naive
    # pytz zones pick their UTC offset only through localize()
    if hasattr(tz, "localize"):
        return tz.localize(naive)
    return naive.replace(tzinfo=tz)


def _resolve_now(now) -> datetime:
    resolved = parse_timestamp(now)
    if resolved is None:
        raise ValueError(f"A valid 'now' timestamp is required, got {now!r}")
    return resolved


def status_intervals(
    transitions: Sequence[Transition],
    now,
    *,
    weekend_days: Collection[int] = WEEKEND_DAYS,
    include_weekends: bool = True,
) -> list[StatusInterval]:
    """Break a sorted timeline into one interval per transition.

    Parameters
    ----------
    transitions : Sequence[Transition]
        Timeline sorted by timestamp (as returned by ``extract_transitions``).
    now : datetime
        End of the last, still open interval. Naive values are taken as UTC.
    weekend_days : Collection[int]
        Python weekday numbers treated as weekend (default Saturday, Sunday).
    include_weekends : bool
        When False, ``seconds_in_status`` has ``weekend_days * 86400``
        removed. The result is not clamped and can be negative when an
        interval starts and ends within the same weekend day.

    Returns
    -------
    list[StatusInterval]
        Empty when there are no transitions.

    Raises
    ------
    ValueError
        If ``now`` precedes the last transition.
    """
    if not transitions:
        return []
    now_dt = _resolve_now(now)
    # naive transition timestamps are read as UTC, like ``now``
    timestamps = [parse_timestamp(t.timestamp) for t in transitions]
    last_index = len(transitions) - 1
    if now_dt < timestamps[last_index]:
        raise ValueError(
            f"'now' ({now_dt.isoformat()}) precedes the last transition "
            f"({timestamps[last_index].isoformat()})"
        )

    intervals: list[StatusInterval] = []
    for index, transition in enumerate(transitions):
        is_open = index == last_index
        end = now_dt if is_open else timestamps[index + 1]
        start = timestamps[index]
        elapsed = (end - start).total_seconds()
        weekend_count = count_weekend_days(start, end, weekend_days)
        seconds = elapsed if include_weekends else elapsed - weekend_count * SECONDS_PER_DAY
        intervals.append(
            StatusInterval(
                status=transition.to_status,
                start=start,
                end=end,
                elapsed_seconds=elapsed,
                calendar_days=int(elapsed // SECONDS_PER_DAY),
                weekend_days=weekend_count,
                seconds_in_status=seconds,
                is_open=is_open,
            )
        )
    return intervals


def aggregate_durations(
    transitions: Sequence[Transition],
    unit: str | TimeUnit = TimeUnit.SECONDS,
    include_weekends: bool = True,
    now=None,
    *,
    weekend_days: Collection[int] = WEEKEND_DAYS,
    require_transitions: bool = False,
) -> dict[str, float]:
    """Total time spent in each status, in ``unit``.

    Parameters
    ----------
    transitions : Sequence[Transition]
        Timeline already sorted by timestamp; it is not re-sorted here.
    unit : str | TimeUnit
        seconds, minutes, hours, days or weeks (aliases accepted).
    include_weekends : bool
        When False, every interval loses 86400 seconds per weekend day it
        touches (see ``status_intervals``).
    now : datetime
        End of the still-open current status. Required unless
        ``transitions`` is empty.
    weekend_days : Collection[int]
        Weekday numbers that count as weekend.
    require_transitions : bool
        Raise ``EmptyTimelineError`` instead of returning ``{}`` for an
        empty timeline.

    Returns
    -------
    dict[str, float]
        Status name to duration, in order of first appearance. Seconds from
        repeated visits to a status are summed before conversion.

    Examples
    --------
    >>> from datetime import UTC, datetime
    >>> timeline = [
    ...     Transition(datetime(2024, 1, 1, tzinfo=UTC), "Open", "In Progress"),
    ...     Transition(datetime(2024, 1, 3, tzinfo=UTC), "In Progress", "Done"),
    ... ]
    >>> aggregate_durations(timeline, "days", True, datetime(2024, 1, 4, tzinfo=UTC))
    {'In Progress': 2.0, 'Done': 1.0}
    """
    resolved_unit = resolve_unit(unit)
    if not transitions:
        if require_transitions:
            raise EmptyTimelineError("No status transitions to aggregate")
        return {}

    totals: dict[str, float] = {}
    for interval in status_intervals(
        transitions, now, weekend_days=weekend_days, include_weekends=include_weekends
    ):
        totals[interval.status] = totals.get(interval.status, 0.0) + interval.seconds_in_status
    return {status: to_unit(seconds, resolved_unit) for status, seconds in totals.items()}
