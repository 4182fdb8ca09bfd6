"""
Booking commit and cancellation.

Capacity is checked jointly across all targeted groups before anything is
written, so a successful search always commits one booking per group for
the same span.
"""

from datetime import date
from typing import Sequence

import structlog

from .models import Booking, BookingResult, campaign_end
from .slot_finder import SlotFinder
from .store import ScheduleStore

logger = structlog.get_logger()


class BookingManager:
    """Commits campaigns to the earliest feasible slot, or reports none."""

    def __init__(self, finder: SlotFinder):
        self.finder = finder

    def book_earliest(
        self,
        store: ScheduleStore,
        campaign_id: str,
        group_ids: Sequence[str],
        duration_seconds: float,
        weeks: int,
        start_from: date,
    ) -> BookingResult:
        """
        Reserve capacity for a campaign on every group, at the earliest day.

        The store is only mutated when the search succeeds. Whether an
        unbooked campaign is rejected or queued is the caller's decision.

        Args:
            store: Booking ledgers to search and mutate
            campaign_id: Campaign the bookings belong to
            group_ids: Bearing groups to book against
            duration_seconds: Seconds per loop
            weeks: Campaign length in weeks
            start_from: Earliest allowed start day

        Returns:
            BookingResult; ``booked`` is False when nothing fits
        """
        # One booking per group, however often it was listed
        group_ids = list(dict.fromkeys(group_ids))
        search = self.finder.find_earliest_start(
            store, group_ids, duration_seconds, weeks, start_from
        )
        if not search.feasible:
            logger.info(
                "booking.not_booked",
                campaign_id=campaign_id,
                groups=group_ids,
                start_from=start_from.isoformat(),
            )
            return BookingResult(
                campaign_id=campaign_id,
                booked=False,
                group_ids=group_ids,
                duration_seconds=duration_seconds,
            )

        booking = Booking(
            campaign_id=campaign_id,
            start_date=search.start_date,
            end_date=campaign_end(search.start_date, weeks),
            duration_seconds=duration_seconds,
        )
        for gid in group_ids:
            store.add_booking(gid, booking)

        logger.info(
            "booking.committed",
            campaign_id=campaign_id,
            groups=group_ids,
            start_date=booking.start_date.isoformat(),
            end_date=booking.end_date.isoformat(),
            duration_seconds=duration_seconds,
        )
        return BookingResult(
            campaign_id=campaign_id,
            booked=True,
            group_ids=group_ids,
            duration_seconds=duration_seconds,
            start_date=booking.start_date,
            end_date=booking.end_date,
            per_group=search.per_group,
        )

    def cancel(self, store: ScheduleStore, campaign_id: str) -> bool:
        """Release every booking held by a campaign."""
        return store.remove_by_campaign(campaign_id)
