"""Repositories for groups, displays, schedules and campaigns."""

from .base import (
    CampaignRepository,
    DisplayRepository,
    GroupRepository,
    ScheduleRepository,
)
from .json_files import (
    JsonCampaignRepository,
    JsonDisplayRepository,
    JsonGroupRepository,
    JsonScheduleRepository,
)
from .memory import (
    InMemoryCampaignRepository,
    InMemoryDisplayRepository,
    InMemoryGroupRepository,
    InMemoryScheduleRepository,
)

__all__ = [
    "CampaignRepository",
    "DisplayRepository",
    "GroupRepository",
    "ScheduleRepository",
    "JsonCampaignRepository",
    "JsonDisplayRepository",
    "JsonGroupRepository",
    "JsonScheduleRepository",
    "InMemoryCampaignRepository",
    "InMemoryDisplayRepository",
    "InMemoryGroupRepository",
    "InMemoryScheduleRepository",
]
