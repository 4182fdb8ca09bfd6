"""
Campaign record.

The scheduler owns a handful of campaign fields (dates, placements, queue
state, requested groups). Every other field is carried through untouched.
"""

from datetime import date
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..scheduling.models import parse_day

if TYPE_CHECKING:
    from ..scheduling.models import BookingResult


class CampaignStatus(str, Enum):
    """Derived campaign status."""
    DRAFT = "draft"  # never placed, not queued
    QUEUED = "queued"
    PAUSED = "paused"  # placed, not started yet
    ACTIVE = "active"
    COMPLETED = "completed"


class Placement(BaseModel):
    """The agreed span of a campaign on one bearing group."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    group_id: str
    start_date: date
    end_date: date
    duration_seconds: float

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _day(cls, value: Any) -> date:
        return parse_day(value)


class Campaign(BaseModel):
    """An advertising campaign as stored by the campaign collection."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    id: str
    name: str = ""
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    weeks: int = Field(default=1, ge=1)
    duration_seconds: float = Field(default=5.0, gt=0)
    requested_groups: list[str] = Field(default_factory=list)
    placements: list[Placement] = Field(default_factory=list)
    queued: bool = False

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _optional_day(cls, value: Any) -> Optional[date]:
        if value in (None, ""):
            return None
        return parse_day(value)

    def status(self, today: date) -> CampaignStatus:
        """Status as of ``today``. The end date is exclusive."""
        if self.queued:
            return CampaignStatus.QUEUED
        if self.start_date is None or self.end_date is None:
            return CampaignStatus.DRAFT
        if today < self.start_date:
            return CampaignStatus.PAUSED
        if today >= self.end_date:
            return CampaignStatus.COMPLETED
        return CampaignStatus.ACTIVE

    def remaining_days(self, today: date) -> int:
        """Days left to run; a campaign not started yet counts its full span."""
        if self.start_date is None or self.end_date is None:
            return 0
        anchor = max(today, self.start_date)
        return max(0, (self.end_date - anchor).days)

    def place(self, result: "BookingResult") -> None:
        """Record a committed booking: one placement per booked group."""
        if not result.booked:
            raise ValueError(f"Campaign {self.id} was not booked")
        self.queued = False
        self.requested_groups = list(result.group_ids)
        self.start_date = result.start_date
        self.end_date = result.end_date
        self.placements = [
            Placement(
                group_id=gid,
                start_date=result.start_date,
                end_date=result.end_date,
                duration_seconds=result.duration_seconds,
            )
            for gid in result.group_ids
        ]

    def mark_queued(self, group_ids: list[str]) -> None:
        """Hold the campaign for retry against ``group_ids``."""
        self.queued = True
        self.requested_groups = list(group_ids)
        self.start_date = None
        self.end_date = None
        self.placements = []

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")

    @classmethod
    def from_record(cls, data: dict[str, Any]) -> "Campaign":
        return cls.model_validate(data)
