"""
Scheduling records.

Bookings are immutable: a change to a campaign is modelled as removing
its bookings and committing new ones.
"""

import math
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Optional

DAYS_PER_WEEK = 7


def parse_day(value: Any) -> date:
    """Parse an ISO date (or datetime) string to a calendar day."""
    if isinstance(value, date):
        return value if type(value) is date else value.date()
    return date.fromisoformat(str(value)[:10])


def parse_seconds(value: Any) -> float:
    """Parse a stored duration; numeric strings are accepted."""
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ValueError(f"Invalid durationSeconds: {value!r}")
    seconds = float(value)
    if not math.isfinite(seconds):
        raise ValueError(f"Invalid durationSeconds: {value!r}")
    return seconds


def campaign_end(start: date, weeks: int) -> date:
    """Exclusive end day of a campaign running ``weeks`` weeks from ``start``."""
    return start + timedelta(days=weeks * DAYS_PER_WEEK)


@dataclass(frozen=True)
class Booking:
    """Capacity reserved by one campaign on one group."""
    campaign_id: str
    start_date: date  # inclusive
    end_date: date  # exclusive
    duration_seconds: float

    def overlaps(self, window_start: date, window_end: date) -> bool:
        """Half-open overlap test against [window_start, window_end)."""
        return self.start_date < window_end and self.end_date > window_start

    def to_dict(self) -> dict[str, Any]:
        return {
            "campaignId": self.campaign_id,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "durationSeconds": self.duration_seconds,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Booking":
        # Older ledgers keyed bookings by adId
        campaign_id = data.get("campaignId", data.get("adId"))
        if campaign_id is None:
            raise ValueError("Booking record has no campaignId")
        if not isinstance(campaign_id, str):
            raise ValueError(f"Invalid campaignId: {campaign_id!r}")
        return cls(
            campaign_id=campaign_id,
            start_date=parse_day(data["startDate"]),
            end_date=parse_day(data["endDate"]),
            duration_seconds=parse_seconds(data["durationSeconds"]),
        )


@dataclass
class GroupFreeSeconds:
    """Free seconds per week left on a group for a candidate start day."""
    group_id: str
    free_seconds_by_week: list[float] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "groupId": self.group_id,
            "freeSecondsByWeek": list(self.free_seconds_by_week),
        }


@dataclass
class SlotSearchResult:
    """
    Outcome of a feasibility search.

    ``start_date`` is None when no day within the horizon fits; that is a
    legitimate negative result, not an error.
    """
    start_date: Optional[date] = None
    per_group: list[GroupFreeSeconds] = field(default_factory=list)

    @property
    def feasible(self) -> bool:
        return self.start_date is not None


@dataclass
class BookingResult:
    """Outcome of an attempt to commit a campaign."""
    campaign_id: str
    booked: bool
    group_ids: list[str] = field(default_factory=list)
    duration_seconds: float = 0.0
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    per_group: list[GroupFreeSeconds] = field(default_factory=list)

    @property
    def bookings(self) -> dict[str, Booking]:
        """The committed booking per group (empty when not booked)."""
        if not self.booked:
            return {}
        booking = Booking(
            campaign_id=self.campaign_id,
            start_date=self.start_date,
            end_date=self.end_date,
            duration_seconds=self.duration_seconds,
        )
        return {gid: booking for gid in self.group_ids}

    def to_dict(self) -> dict[str, Any]:
        return {
            "campaignId": self.campaign_id,
            "booked": self.booked,
            "groupIds": list(self.group_ids),
            "durationSeconds": self.duration_seconds,
            "startDate": self.start_date.isoformat() if self.start_date else None,
            "endDate": self.end_date.isoformat() if self.end_date else None,
            "groups": [g.to_dict() for g in self.per_group],
        }
