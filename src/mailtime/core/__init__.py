"""Core time arithmetic for the mailtime challenge.

Modules:
    office_hours: Recurring weekday availability window in one zone
    segmentation: Decomposition of an interval along office-hours boundaries
    durations: Naive and business-hours elapsed seconds
"""

from src.mailtime.core.durations import (
    DurationMode,
    business_hours_seconds,
    elapsed_seconds,
    naive_seconds,
)
from src.mailtime.core.office_hours import OfficeHours
from src.mailtime.core.segmentation import (
    Segment,
    advance,
    next_boundary,
    seconds_between,
    segment,
    to_instant,
)

__all__ = [
    # Office hours
    "OfficeHours",
    # Segmentation
    "Segment",
    "advance",
    "next_boundary",
    "segment",
    "seconds_between",
    "to_instant",
    # Durations
    "DurationMode",
    "business_hours_seconds",
    "elapsed_seconds",
    "naive_seconds",
]
