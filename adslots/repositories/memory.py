"""
In-memory repositories.

Each load returns a fresh copy and each save stores a copy, so callers
never share mutable state with the repository.
"""

import copy
from typing import Iterable, Optional

from ..campaigns.models import Campaign
from ..groups.census import Display
from ..groups.index import GroupNode
from ..scheduling.store import ScheduleStore


class InMemoryGroupRepository:
    def __init__(self, groups: Optional[Iterable[GroupNode]] = None):
        self.groups = list(groups or [])

    def load(self) -> list[GroupNode]:
        return copy.deepcopy(self.groups)


class InMemoryDisplayRepository:
    def __init__(self, displays: Optional[Iterable[Display]] = None):
        self.displays = list(displays or [])

    def load(self) -> list[Display]:
        return copy.deepcopy(self.displays)


class InMemoryScheduleRepository:
    def __init__(self, store: Optional[ScheduleStore] = None):
        self.store = store.copy() if store is not None else ScheduleStore()
        self.saves = 0

    def load(self) -> ScheduleStore:
        return self.store.copy()

    def save(self, store: ScheduleStore) -> None:
        self.store = store.copy()
        self.saves += 1


class InMemoryCampaignRepository:
    def __init__(self, campaigns: Optional[Iterable[Campaign]] = None):
        self.campaigns = [c.model_copy(deep=True) for c in campaigns or []]
        self.saves = 0

    def load(self) -> list[Campaign]:
        return [c.model_copy(deep=True) for c in self.campaigns]

    def save(self, campaigns: list[Campaign]) -> None:
        self.campaigns = [c.model_copy(deep=True) for c in campaigns]
        self.saves += 1
