"""
Slot scheduling.

Booking ledgers per group, the earliest-start feasibility search and the
booking lifecycle. The reconciliation loop and the SlotScheduler service
live in their own modules (``reconciliation``, ``service``).
"""

from .models import (
    Booking,
    BookingResult,
    GroupFreeSeconds,
    SlotSearchResult,
    campaign_end,
    parse_day,
)
from .store import ScheduleStore
from .slot_finder import (
    DEFAULT_HORIZON_DAYS,
    WEEKLY_CAPACITY_SECONDS,
    SlotFinder,
    weekly_usage,
)
from .booking import BookingManager

__all__ = [
    "Booking",
    "BookingResult",
    "GroupFreeSeconds",
    "SlotSearchResult",
    "campaign_end",
    "parse_day",
    "ScheduleStore",
    "DEFAULT_HORIZON_DAYS",
    "WEEKLY_CAPACITY_SECONDS",
    "SlotFinder",
    "weekly_usage",
    "BookingManager",
]
