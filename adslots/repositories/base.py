"""
Contracts for the collections the scheduler reads and writes.

Implementations raise RepositoryError for any load or save failure.
"""

from typing import Protocol

from ..campaigns.models import Campaign
from ..groups.census import Display
from ..groups.index import GroupNode
from ..scheduling.store import ScheduleStore


class GroupRepository(Protocol):
    def load(self) -> list[GroupNode]: ...


class DisplayRepository(Protocol):
    def load(self) -> list[Display]: ...


class ScheduleRepository(Protocol):
    def load(self) -> ScheduleStore: ...

    def save(self, store: ScheduleStore) -> None: ...


class CampaignRepository(Protocol):
    def load(self) -> list[Campaign]: ...

    def save(self, campaigns: list[Campaign]) -> None: ...
