"""Recurring weekday availability windows.

Classes:
    OfficeHours: Monday-Friday ``[start, end)`` local-hour window in one zone.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from src.mailtime.errors import InvalidConfigurationError


# Monday=0 ... Friday=4
LAST_WEEKDAY = 4


@dataclass(frozen=True)
class OfficeHours:
    """A recurring daily office-hours window in one IANA timezone.

    The window ``[start, end)`` applies identically Monday to Friday;
    Saturday and Sunday have no availability.

    Attributes:
        time_zone: IANA zone identifier (e.g. ``"Asia/Singapore"``).
        start: First local hour of the window (0-23).
        end: Local hour at which the window closes (exclusive, 1-23).

    Example:
        >>> hours = OfficeHours("Asia/Singapore", 8, 17)
        >>> hours.contains(datetime.fromisoformat("2024-01-08T08:00:00+08:00"))
        True
        >>> hours.contains(datetime.fromisoformat("2024-01-06T10:00:00+08:00"))
        False
    """

    time_zone: str
    start: int
    end: int

    def __post_init__(self) -> None:
        for name in ("start", "end"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidConfigurationError(
                    f"Office hours {name} must be an integer hour, got {value!r}"
                )
        if not 0 <= self.start < self.end < 24:
            raise InvalidConfigurationError(
                f"Office hours must satisfy start < end with both in [0, 24), "
                f"got start={self.start}, end={self.end}"
            )
        if not isinstance(self.time_zone, str) or not self.time_zone:
            raise InvalidConfigurationError(
                f"Office hours time zone must be a zone name, got {self.time_zone!r}"
            )
        try:
            ZoneInfo(self.time_zone)
        except (ZoneInfoNotFoundError, ValueError, OSError) as e:
            raise InvalidConfigurationError(
                f"Unknown time zone: {self.time_zone!r}"
            ) from e

    @property
    def zone(self) -> ZoneInfo:
        """The office-hours zone (ZoneInfo caches instances per key)."""
        return ZoneInfo(self.time_zone)

    def localize(self, instant: datetime) -> datetime:
        """Re-express an aware instant in the office-hours zone."""
        return instant.astimezone(self.zone)

    def contains(self, instant: datetime) -> bool:
        """Check whether an instant falls inside office hours.

        Args:
            instant: A timezone-aware datetime.

        Returns:
            True iff the local weekday is Monday-Friday and the local hour is
            in ``[start, end)``.
        """
        local = self.localize(instant)
        return local.weekday() <= LAST_WEEKDAY and self.start <= local.hour < self.end

    def __str__(self) -> str:
        return f"{self.start}..{self.end}@{self.time_zone}"
