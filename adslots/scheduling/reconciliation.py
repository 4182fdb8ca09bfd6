"""
Queued campaign reconciliation.

Run whenever campaigns are listed: expired bookings are pruned, then every
queued campaign is retried against what is left. Campaigns are retried in
collection order, each greedily against the state left by the promotions
before it. There is no priority between queued campaigns.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Sequence

import structlog

from ..campaigns.models import Campaign
from .booking import BookingManager
from .store import ScheduleStore

logger = structlog.get_logger()


@dataclass
class ReconciliationResult:
    """What a reconciliation pass changed."""
    campaigns: list[Campaign]
    pruned: bool = False
    released: list[str] = field(default_factory=list)  # stale bookings of queued campaigns
    promoted: list[str] = field(default_factory=list)

    @property
    def store_changed(self) -> bool:
        return self.pruned or bool(self.released) or bool(self.promoted)

    @property
    def campaigns_changed(self) -> bool:
        return bool(self.promoted)


class ReconciliationLoop:
    """Prunes expired bookings and promotes queued campaigns that now fit."""

    def __init__(self, manager: BookingManager):
        self.manager = manager

    def run(
        self,
        store: ScheduleStore,
        campaigns: Sequence[Campaign],
        today: date,
    ) -> ReconciliationResult:
        """
        Reconcile campaigns against a store, in memory.

        Promoted campaigns are updated in place. Persisting the store and
        the campaigns is left to the caller.

        Args:
            store: Booking ledgers (mutated)
            campaigns: Full campaign collection, in retry order
            today: Current day; expired bookings end on or before it and
                retries start from it

        Returns:
            ReconciliationResult describing the changes
        """
        result = ReconciliationResult(campaigns=list(campaigns))
        result.pruned = store.prune_expired(today)

        for campaign in result.campaigns:
            if not campaign.queued or not campaign.requested_groups:
                continue

            # A queued campaign holds no capacity
            if store.remove_by_campaign(campaign.id):
                result.released.append(campaign.id)

            booking = self.manager.book_earliest(
                store,
                campaign.id,
                campaign.requested_groups,
                campaign.duration_seconds,
                campaign.weeks,
                today,
            )
            if not booking.booked:
                continue

            campaign.place(booking)
            result.promoted.append(campaign.id)
            logger.info(
                "reconciliation.promoted",
                campaign_id=campaign.id,
                start_date=booking.start_date.isoformat(),
                groups=booking.group_ids,
            )

        logger.debug(
            "reconciliation.completed",
            pruned=result.pruned,
            promoted=len(result.promoted),
            released=len(result.released),
        )
        return result
