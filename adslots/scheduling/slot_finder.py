"""
Slot feasibility search.

Scans calendar days forward from a requested start and returns the first
day on which every targeted group has room for the campaign in every week
of its run.

Accounting rule: a booking that overlaps a 7-day window at all counts its
entire duration against that window, even when the overlap is a single
day. This never under-counts, but it can reject a start day that a
prorated rule would accept.
"""

from datetime import date, timedelta
from typing import Iterable, Sequence

import structlog

from ..errors import InvalidRequestError
from .models import DAYS_PER_WEEK, Booking, GroupFreeSeconds, SlotSearchResult
from .store import ScheduleStore

logger = structlog.get_logger()

WEEKLY_CAPACITY_SECONDS = 60.0
DEFAULT_HORIZON_DAYS = 365


def weekly_usage(bookings: Iterable[Booking], start: date, weeks: int) -> list[float]:
    """
    Seconds already booked in each week of a run starting on ``start``.

    Args:
        bookings: Existing bookings on one group
        start: Candidate first day
        weeks: Number of 7-day windows to measure

    Returns:
        One total per week index
    """
    usage = [0.0] * weeks
    for booking in bookings:
        for i in range(weeks):
            window_start = start + timedelta(days=i * DAYS_PER_WEEK)
            window_end = window_start + timedelta(days=DAYS_PER_WEEK)
            if booking.overlaps(window_start, window_end):
                usage[i] += booking.duration_seconds
    return usage


def validate_request(duration_seconds: float, weeks: int) -> None:
    if duration_seconds is None or duration_seconds <= 0:
        raise InvalidRequestError("durationSeconds must be > 0")
    if weeks is None or weeks < 1:
        raise InvalidRequestError("weeks must be >= 1")


class SlotFinder:
    """Earliest-start search over a ScheduleStore."""

    def __init__(
        self,
        weekly_capacity_seconds: float = WEEKLY_CAPACITY_SECONDS,
        horizon_days: int = DEFAULT_HORIZON_DAYS,
    ):
        self.weekly_capacity_seconds = weekly_capacity_seconds
        self.horizon_days = horizon_days

    def fits(
        self,
        bookings: Iterable[Booking],
        start: date,
        weeks: int,
        duration_seconds: float,
    ) -> bool:
        """Whether one group can take the booking in every week."""
        usage = weekly_usage(bookings, start, weeks)
        return all(u + duration_seconds <= self.weekly_capacity_seconds for u in usage)

    def find_earliest_start(
        self,
        store: ScheduleStore,
        group_ids: Sequence[str],
        duration_seconds: float,
        weeks: int,
        start_from: date,
    ) -> SlotSearchResult:
        """
        Find the first day every group can take the campaign.

        Candidates run from ``start_from`` through ``start_from +
        horizon_days`` inclusive. Day order is the only tie-break.

        Args:
            store: Current booking ledgers
            group_ids: Bearing groups that must all have room
            duration_seconds: Seconds per loop the campaign consumes
            weeks: Campaign length in weeks
            start_from: Earliest allowed start day

        Returns:
            SlotSearchResult with the start day and, per group, free seconds
            per week after adding the campaign; start_date is None if no
            day within the horizon fits
        """
        if not group_ids:
            raise InvalidRequestError("groupIds is required")
        validate_request(duration_seconds, weeks)
        group_ids = list(dict.fromkeys(group_ids))
        ledgers = {gid: store.bookings_for(gid) for gid in group_ids}

        for offset in range(self.horizon_days + 1):
            candidate = start_from + timedelta(days=offset)
            if all(
                self.fits(ledgers[gid], candidate, weeks, duration_seconds)
                for gid in group_ids
            ):
                per_group = [
                    GroupFreeSeconds(
                        group_id=gid,
                        free_seconds_by_week=[
                            self.weekly_capacity_seconds - used - duration_seconds
                            for used in weekly_usage(ledgers[gid], candidate, weeks)
                        ],
                    )
                    for gid in group_ids
                ]
                logger.debug(
                    "slot_finder.found",
                    start_date=candidate.isoformat(),
                    offset_days=offset,
                    groups=len(group_ids),
                )
                return SlotSearchResult(start_date=candidate, per_group=per_group)

        logger.info(
            "slot_finder.infeasible",
            start_from=start_from.isoformat(),
            horizon_days=self.horizon_days,
            duration_seconds=duration_seconds,
            weeks=weeks,
            groups=list(group_ids),
        )
        return SlotSearchResult()
