"""
Slot scheduler service.

Binds the group index, census, slot search and booking ledgers to their
repositories. Every read-modify-write cycle of the schedule runs under a
single lock, so two commits can never both pass feasibility against the
same stale snapshot. One SlotScheduler must own a given schedule; the
lock does not span processes.

Reconciliation during a listing is best-effort: a storage failure is
logged and the listing still returns the campaigns as stored.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional, Sequence

import structlog

from ..campaigns.models import Campaign
from ..config import SchedulerSettings, get_settings
from ..errors import CampaignRejectedError, RepositoryError
from ..groups.census import compute_census
from ..groups.index import GroupIndex
from ..groups.selection import expand_selection
from ..repositories.base import (
    CampaignRepository,
    DisplayRepository,
    GroupRepository,
    ScheduleRepository,
)
from .booking import BookingManager
from .models import BookingResult
from .reconciliation import ReconciliationLoop
from .slot_finder import SlotFinder
from .store import ScheduleStore

logger = structlog.get_logger()


@dataclass
class GroupAvailability:
    """Availability of one bearing group, with its display count."""
    group_id: str
    free_seconds_by_week: list[float] = field(default_factory=list)
    total_displays: int = 0

    @property
    def has_displays(self) -> bool:
        return self.total_displays > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "groupId": self.group_id,
            "freeSecondsByWeek": list(self.free_seconds_by_week),
            "hasDisplays": self.has_displays,
            "totalDisplays": self.total_displays,
        }


@dataclass
class AvailabilityReport:
    """Read-only preview of the earliest slot for a request."""
    start_from: date
    earliest_start_date: Optional[date]
    weekly_capacity_seconds: float
    weeks: int
    duration_seconds: float
    group_ids: list[str] = field(default_factory=list)
    groups: list[GroupAvailability] = field(default_factory=list)

    @property
    def feasible(self) -> bool:
        return self.earliest_start_date is not None

    @property
    def fits_now(self) -> bool:
        """Whether the campaign could start on the requested day."""
        return self.earliest_start_date == self.start_from

    def to_dict(self) -> dict[str, Any]:
        return {
            "earliestStartDate": (
                self.earliest_start_date.isoformat() if self.earliest_start_date else None
            ),
            "fitsNow": self.fits_now,
            "slotSeconds": self.weekly_capacity_seconds,
            "weeks": self.weeks,
            "durationSeconds": self.duration_seconds,
            "groups": [g.to_dict() for g in self.groups],
            "expandedGroupIds": list(self.group_ids),
        }


class SlotScheduler:
    """
    The scheduler's public surface.

    Operations:
    - expand_selection / preview / availability: read-only
    - book_earliest / remove_campaign_bookings / prune_expired: mutate the
      schedule and save it
    - reconcile_queued: prune, then promote queued campaigns that fit
    - place_campaign / delete_campaign / list_campaigns: campaign-level
      wrappers that also persist the campaign collection
    """

    def __init__(
        self,
        groups: GroupRepository,
        displays: DisplayRepository,
        schedules: ScheduleRepository,
        campaigns: CampaignRepository,
        settings: Optional[SchedulerSettings] = None,
    ):
        self.settings = settings or get_settings()
        self.groups = groups
        self.displays = displays
        self.schedules = schedules
        self.campaigns = campaigns

        self.finder = SlotFinder(
            weekly_capacity_seconds=self.settings.weekly_capacity_seconds,
            horizon_days=self.settings.horizon_days,
        )
        self.manager = BookingManager(self.finder)
        self.reconciler = ReconciliationLoop(self.manager)

        self._lock = asyncio.Lock()

    # -------------------------------------------------------------------------
    # Group selection
    # -------------------------------------------------------------------------

    def _census(self) -> tuple[GroupIndex, dict[str, int]]:
        index = GroupIndex.build(self.groups.load())
        return index, compute_census(index, self.displays.load())

    async def expand_selection(self, selected_ids: Sequence[str]) -> list[str]:
        """
        Expand selected groups to the bearing groups beneath them.

        Raises:
            UnknownGroupError: A selected id is not a known group
            NoDisplaysInSelectionError: Nothing selected carries displays
        """
        index, census = self._census()
        return expand_selection(selected_ids, index, census)

    # -------------------------------------------------------------------------
    # Availability (read-only)
    # -------------------------------------------------------------------------

    async def availability(
        self,
        group_ids: Sequence[str],
        duration_seconds: float,
        weeks: int,
        start_from: date,
    ) -> AvailabilityReport:
        """Find the earliest slot for bearing groups without committing."""
        group_ids = list(dict.fromkeys(group_ids))
        async with self._lock:
            store = self.schedules.load()

        search = self.finder.find_earliest_start(
            store, group_ids, duration_seconds, weeks, start_from
        )
        _, census = self._census()
        free = {g.group_id: g.free_seconds_by_week for g in search.per_group}

        return AvailabilityReport(
            start_from=start_from,
            earliest_start_date=search.start_date,
            weekly_capacity_seconds=self.finder.weekly_capacity_seconds,
            weeks=weeks,
            duration_seconds=duration_seconds,
            group_ids=group_ids,
            groups=[
                GroupAvailability(
                    group_id=gid,
                    free_seconds_by_week=free.get(gid, []),
                    total_displays=census.get(gid, 0),
                )
                for gid in group_ids
            ],
        )

    async def preview(
        self,
        selected_ids: Sequence[str],
        duration_seconds: float,
        weeks: int,
        start_from: date,
    ) -> AvailabilityReport:
        """Expand a selection, then check availability for it."""
        bearing = await self.expand_selection(selected_ids)
        return await self.availability(bearing, duration_seconds, weeks, start_from)

    # -------------------------------------------------------------------------
    # Schedule mutations
    # -------------------------------------------------------------------------

    async def book_earliest(
        self,
        campaign_id: str,
        group_ids: Sequence[str],
        duration_seconds: float,
        weeks: int,
        start_from: date,
    ) -> BookingResult:
        """
        Commit a campaign to the earliest slot and save the schedule.

        Raises:
            RepositoryError: Loading or saving the schedule failed; the
                booking must then be treated as not made
        """
        async with self._lock:
            store = self.schedules.load()
            result = self.manager.book_earliest(
                store, campaign_id, group_ids, duration_seconds, weeks, start_from
            )
            if result.booked:
                self.schedules.save(store)
            return result

    async def remove_campaign_bookings(self, campaign_id: str) -> bool:
        """Release a campaign's bookings on every group."""
        async with self._lock:
            store = self.schedules.load()
            changed = self.manager.cancel(store, campaign_id)
            if changed:
                self.schedules.save(store)
            return changed

    async def prune_expired(self, today: date) -> bool:
        """Drop bookings that ended on or before ``today``."""
        async with self._lock:
            store = self.schedules.load()
            changed = store.prune_expired(today)
            if changed:
                self.schedules.save(store)
            return changed

    async def reconcile_queued(
        self,
        campaigns: Sequence[Campaign],
        today: date,
    ) -> tuple[list[Campaign], bool]:
        """
        Prune expired bookings and promote queued campaigns that now fit.

        The schedule is saved when it changed. Saving the campaigns is the
        caller's job (see list_campaigns).

        Returns:
            (campaigns, changed) where changed means a campaign was promoted
        """
        async with self._lock:
            store = self.schedules.load()
            result = self.reconciler.run(store, campaigns, today)
            if result.store_changed:
                self.schedules.save(store)
        return result.campaigns, result.campaigns_changed

    # -------------------------------------------------------------------------
    # Campaign-level operations
    # -------------------------------------------------------------------------

    async def place_campaign(
        self,
        campaign: Campaign,
        selected_ids: Sequence[str],
        start_from: date,
        queue_when_full: Optional[bool] = None,
    ) -> Campaign:
        """
        Book (or re-book) a campaign and save it to the campaign collection.

        Existing bookings of the campaign are released first, so an edit
        never competes with its own previous placement. A rejected campaign
        keeps its previous placement. The caller's campaign is left as is;
        the placed copy is returned. If the campaign record cannot be saved
        the schedule is put back as it was.

        Raises:
            UnknownGroupError / NoDisplaysInSelectionError: Bad selection
            CampaignRejectedError: Nothing fits and queueing is disabled
            RepositoryError: Storage failed
        """
        if queue_when_full is None:
            queue_when_full = self.settings.queue_when_full
        bearing = await self.expand_selection(selected_ids)
        placed = campaign.model_copy(deep=True)

        async with self._lock:
            store = self.schedules.load()
            previous = store.copy()
            released = store.remove_by_campaign(campaign.id)
            result = self.manager.book_earliest(
                store,
                campaign.id,
                bearing,
                campaign.duration_seconds,
                campaign.weeks,
                start_from,
            )

            if result.booked:
                placed.place(result)
            elif queue_when_full:
                placed.mark_queued(bearing)
                logger.info("scheduler.campaign_queued", campaign_id=placed.id, groups=bearing)
            else:
                # The working store is dropped, previous bookings stay
                raise CampaignRejectedError(campaign.id)

            schedule_changed = result.booked or released
            if schedule_changed:
                self.schedules.save(store)
            try:
                self._upsert(placed)
            except RepositoryError:
                if schedule_changed:
                    self._restore_schedule(previous, placed.id)
                raise

        return placed

    def _restore_schedule(self, previous: ScheduleStore, campaign_id: str) -> None:
        try:
            self.schedules.save(previous)
        except RepositoryError as e:
            logger.error("scheduler.restore_failed", campaign_id=campaign_id, error=str(e))
        else:
            logger.warning("scheduler.schedule_restored", campaign_id=campaign_id)

    def _upsert(self, campaign: Campaign) -> None:
        campaigns = self.campaigns.load()
        for i, existing in enumerate(campaigns):
            if existing.id == campaign.id:
                campaigns[i] = campaign
                break
        else:
            campaigns.append(campaign)
        self.campaigns.save(campaigns)

    async def delete_campaign(self, campaign_id: str) -> bool:
        """
        Remove a campaign and release its bookings.

        Returns:
            True if the campaign existed
        """
        async with self._lock:
            campaigns = self.campaigns.load()
            kept = [c for c in campaigns if c.id != campaign_id]
            store = self.schedules.load()
            if self.manager.cancel(store, campaign_id):
                self.schedules.save(store)
            if len(kept) == len(campaigns):
                return False
            self.campaigns.save(kept)
            return True

    async def list_campaigns(self, today: date) -> list[Campaign]:
        """
        List campaigns, reconciling the schedule first.

        Reconciliation is best-effort: if it cannot load or save, the
        campaigns are returned as stored and the failure is logged.
        """
        async with self._lock:
            campaigns = self.campaigns.load()
            try:
                store = self.schedules.load()
                # Reconcile copies so a failed save leaves the listing as stored
                working = [c.model_copy(deep=True) for c in campaigns]
                result = self.reconciler.run(store, working, today)
                if result.store_changed:
                    self.schedules.save(store)
                if result.campaigns_changed:
                    self.campaigns.save(result.campaigns)
                return result.campaigns
            except RepositoryError as e:
                logger.warning("reconciliation.failed", error=str(e))
                return campaigns
