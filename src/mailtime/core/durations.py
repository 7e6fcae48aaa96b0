"""Elapsed-time calculation between a received and a responded instant.

Two modes are supported:

- ``NAIVE``: wall-clock seconds between the instants.
- ``BUSINESS_HOURS``: seconds spent inside the responder's office hours,
  summed over the segmentation of the interval.

For any ``received <= responded``::

    0 <= business_hours_seconds(...) <= naive_seconds(...)
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from src.mailtime.core.office_hours import OfficeHours
from src.mailtime.core.segmentation import seconds_between, segment


class DurationMode(str, Enum):
    """How elapsed time between two messages is measured."""

    NAIVE = "naive"
    BUSINESS_HOURS = "business_hours"


def naive_seconds(received: datetime, responded: datetime) -> int:
    """Wall-clock seconds between two instants, ignoring office hours.

    Raises:
        ValueError: If ``responded`` precedes ``received``.
    """
    elapsed = seconds_between(received, responded)
    if elapsed < 0:
        raise ValueError(
            f"Response at {responded.isoformat()} precedes receipt at "
            f"{received.isoformat()}"
        )
    return elapsed


def business_hours_seconds(
    office_hours: OfficeHours,
    received: datetime,
    responded: datetime,
) -> int:
    """Seconds between two instants that fall inside office hours.

    Zero-length segments are skipped.

    Raises:
        ValueError: If ``responded`` precedes ``received``.
    """
    total = 0
    for piece in segment(office_hours, received, responded):
        if piece.duration:
            total += piece.duration
    return total


def elapsed_seconds(
    mode: DurationMode,
    office_hours: OfficeHours,
    received: datetime,
    responded: datetime,
) -> int:
    """Elapsed seconds in the given mode.

    Args:
        mode: Which notion of elapsed time to use.
        office_hours: The responder's office hours (unused in naive mode).
        received: When the message was received.
        responded: When the response was sent.

    Returns:
        Elapsed whole seconds.
    """
    if mode is DurationMode.NAIVE:
        return naive_seconds(received, responded)
    return business_hours_seconds(office_hours, received, responded)
