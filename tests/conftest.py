"""Shared pytest fixtures and configuration."""

from datetime import date

import pytest

from adslots.campaigns.models import Campaign
from adslots.config import SchedulerSettings
from adslots.groups.census import Display, compute_census
from adslots.groups.index import GroupIndex, GroupNode
from adslots.repositories.memory import (
    InMemoryCampaignRepository,
    InMemoryDisplayRepository,
    InMemoryGroupRepository,
    InMemoryScheduleRepository,
)
from adslots.scheduling.models import Booking
from adslots.scheduling.service import SlotScheduler
from adslots.scheduling.slot_finder import SlotFinder
from adslots.scheduling.store import ScheduleStore

@pytest.fixture
def forest():
    """
    GP-001 North
        S1GP-001-001 Mall            (2 displays)
        S1GP-001-002 Station
            S2GP-001-002-001 Platform (1 display)
    GP-002 South                     (no displays)
    GP-003 West                      (1 display)
        S1GP-003-001 Harbour         (1 display)
    """
    return [
        GroupNode(
            id="GP-001",
            name="North",
            subgroups=[
                GroupNode(id="S1GP-001-001", name="Mall"),
                GroupNode(
                    id="S1GP-001-002",
                    name="Station",
                    subgroups=[GroupNode(id="S2GP-001-002-001", name="Platform")],
                ),
            ],
        ),
        GroupNode(id="GP-002", name="South"),
        GroupNode(
            id="GP-003",
            name="West",
            subgroups=[GroupNode(id="S1GP-003-001", name="Harbour")],
        ),
    ]


@pytest.fixture
def displays():
    return [
        Display(id="DS-010124-001", group_id="S1GP-001-001"),
        Display(id="DS-010124-002", group_id="S1GP-001-001"),
        Display(id="DS-010124-003", group_id="S2GP-001-002-001"),
        Display(id="DS-010124-004", group_id="GP-003"),
        Display(id="DS-010124-005", group_id="S1GP-003-001"),
        Display(id="DS-010124-006"),
        Display(id="DS-010124-007", group_id="GP-404"),
    ]


@pytest.fixture
def index(forest):
    return GroupIndex.build(forest)


@pytest.fixture
def census(index, displays):
    return compute_census(index, displays)


@pytest.fixture
def finder():
    return SlotFinder(weekly_capacity_seconds=60, horizon_days=365)


@pytest.fixture
def store():
    return ScheduleStore()


@pytest.fixture
def make_booking():
    """Build a booking from ISO day strings."""
    def _make(campaign_id, start, end, seconds):
        return Booking(
            campaign_id=campaign_id,
            start_date=date.fromisoformat(start),
            end_date=date.fromisoformat(end),
            duration_seconds=seconds,
        )
    return _make


@pytest.fixture
def settings():
    return SchedulerSettings(
        weekly_capacity_seconds=60,
        horizon_days=365,
        queue_when_full=True,
    )


@pytest.fixture
def repositories(forest, displays):
    return {
        "groups": InMemoryGroupRepository(forest),
        "displays": InMemoryDisplayRepository(displays),
        "schedules": InMemoryScheduleRepository(),
        "campaigns": InMemoryCampaignRepository(),
    }


@pytest.fixture
def scheduler(repositories, settings):
    return SlotScheduler(settings=settings, **repositories)


@pytest.fixture
def sample_campaign():
    """Sample campaign for testing."""
    return Campaign(
        id="AD-010124-001",
        name="Winter Sale",
        weeks=1,
        duration_seconds=5,
        companyName="Acme",
    )
