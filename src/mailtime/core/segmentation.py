"""Office-hours segmentation of time intervals.

This module decomposes an interval ``[origin, cutoff)`` into consecutive
segments that alternate between inside and outside one user's office hours.
Each step moves a frontier to the next office-hours boundary in the user's
local zone:

    weekend             -> next Monday at ``start:00``
    before ``start``    -> same day at ``start:00``
    at/after ``end``    -> next weekday at ``start:00``
    inside the window   -> same day at ``end:00``

and clamps it to the cutoff. A segment contributes time only when the
frontier it started from was inside office hours.

Functions:
    to_instant: Normalize an aware datetime to a UTC instant (whole seconds).
    next_boundary: The next office-hours boundary after a frontier.
    advance: Produce the segment following a given one.
    segment: Full segmentation of an interval.

Design Notes:
    - All instants are normalized to UTC before comparison or subtraction;
      Python compares and subtracts datetimes sharing a ``tzinfo`` by wall
      clock, which is wrong across DST transitions.
    - Every step moves the frontier strictly forward (the next boundary is
      always later than the frontier), so segmentation of a finite interval
      terminates.

Example:
    >>> hours = OfficeHours("Asia/Singapore", 8, 9)
    >>> friday = datetime.fromisoformat("2024-01-05T08:59:00+08:00")
    >>> tuesday = datetime.fromisoformat("2024-01-09T08:01:00+08:00")
    >>> [s.duration for s in segment(hours, friday, tuesday)]
    [60, None, 3600, None, 60]
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone

from src.mailtime.core.office_hours import LAST_WEEKDAY, OfficeHours


_ONE_SECOND = timedelta(seconds=1)
_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S%z"


def to_instant(value: datetime) -> datetime:
    """Normalize an aware datetime to UTC, truncated to whole seconds.

    Args:
        value: A timezone-aware datetime.

    Returns:
        The same instant expressed in UTC with microseconds dropped.

    Raises:
        ValueError: If the datetime is naive.
    """
    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError(f"Instant must be timezone-aware: {value.isoformat()}")
    return value.astimezone(timezone.utc).replace(microsecond=0)


def seconds_between(earlier: datetime, later: datetime) -> int:
    """Whole seconds from ``earlier`` to ``later`` as absolute instants."""
    return (to_instant(later) - to_instant(earlier)) // _ONE_SECOND


def _local_hour_on(office_hours: OfficeHours, day: date, hour: int) -> datetime:
    """The UTC instant of ``hour:00:00`` local time on ``day``."""
    local = datetime.combine(day, time(hour), tzinfo=office_hours.zone)
    return local.astimezone(timezone.utc)


def next_boundary(office_hours: OfficeHours, frontier: datetime) -> datetime:
    """Find the next office-hours boundary strictly after a frontier.

    Args:
        office_hours: The window to segment against.
        frontier: The current frontier (any aware datetime).

    Returns:
        The boundary as a UTC datetime.
    """
    local = office_hours.localize(to_instant(frontier))
    day = local.date()
    weekday = local.weekday()

    if weekday > LAST_WEEKDAY:
        return _local_hour_on(office_hours, day + timedelta(days=7 - weekday), office_hours.start)
    if local.hour < office_hours.start:
        return _local_hour_on(office_hours, day, office_hours.start)
    if local.hour >= office_hours.end:
        skip = 3 if weekday == LAST_WEEKDAY else 1
        return _local_hour_on(office_hours, day + timedelta(days=skip), office_hours.start)
    return _local_hour_on(office_hours, day, office_hours.end)


@dataclass(frozen=True)
class Segment:
    """A contiguous piece of a segmented interval.

    Attributes:
        office_hours: The window the interval was segmented against.
        since: Where the piece starts when it lies inside office hours;
            None when it lies outside and contributes nothing.
        until: Where the piece ends.
    """

    office_hours: OfficeHours
    since: datetime | None
    until: datetime

    @property
    def duration(self) -> int | None:
        """Contributed seconds, or None for a piece outside office hours."""
        if self.since is None:
            return None
        return seconds_between(self.since, self.until)

    def __str__(self) -> str:
        since = "" if self.since is None else _format(self.since)
        return f"{since:<24} .. {_format(self.until)}"


def _format(instant: datetime) -> str:
    return instant.strftime(_TIMESTAMP_FORMAT)


def advance(current: Segment, cutoff: datetime) -> Segment:
    """Produce the segment that follows ``current``.

    The frontier is ``current.until``. It moves to the next office-hours
    boundary, clamped to ``cutoff``. The new segment starts at the old
    frontier when that frontier was inside office hours.

    Args:
        current: The segment whose end is the frontier.
        cutoff: End of the interval being segmented.

    Returns:
        The next segment.

    Raises:
        ValueError: If ``cutoff`` precedes the frontier.
    """
    frontier = to_instant(current.until)
    cutoff = to_instant(cutoff)
    if cutoff < frontier:
        raise ValueError(
            f"Cutoff {cutoff.isoformat()} precedes frontier {frontier.isoformat()}"
        )

    office_hours = current.office_hours
    boundary = min(next_boundary(office_hours, frontier), cutoff)
    since = frontier if office_hours.contains(frontier) else None
    return Segment(office_hours=office_hours, since=since, until=boundary)


def segment(
    office_hours: OfficeHours,
    origin: datetime,
    cutoff: datetime,
) -> Iterator[Segment]:
    """Segment ``[origin, cutoff)`` against one user's office hours.

    Args:
        office_hours: The window to segment against.
        origin: Start of the interval.
        cutoff: End of the interval.

    Yields:
        Segments in order; the last one ends exactly at ``cutoff``. Nothing
        is yielded when ``origin == cutoff``.

    Raises:
        ValueError: If ``cutoff`` precedes ``origin``.
    """
    current = Segment(office_hours=office_hours, since=None, until=to_instant(origin))
    cutoff = to_instant(cutoff)
    if cutoff < current.until:
        raise ValueError(
            f"Interval ends ({cutoff.isoformat()}) before it starts "
            f"({current.until.isoformat()})"
        )

    while current.until < cutoff:
        current = advance(current, cutoff)
        yield current
