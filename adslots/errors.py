"""Error taxonomy for the slot scheduler."""

from typing import Iterable


class SchedulerError(Exception):
    """Base class for all scheduler errors."""


class UnknownGroupError(SchedulerError, KeyError):
    """A request references group ids missing from the group index."""

    def __init__(self, group_ids: Iterable[str]):
        self.group_ids = list(group_ids)
        super().__init__(f"Unknown groupIds: {', '.join(self.group_ids)}")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.args[0]


class NoDisplaysInSelectionError(SchedulerError, ValueError):
    """The selected groups carry no displays anywhere in their subtrees."""

    def __init__(self, selected_ids: Iterable[str]):
        self.selected_ids = list(selected_ids)
        super().__init__("Selected groups have no displays in subtree")


class InvalidRequestError(SchedulerError, ValueError):
    """A booking or availability request has out-of-range parameters."""


class CampaignRejectedError(SchedulerError):
    """A campaign could not be placed and queueing is disabled."""

    def __init__(self, campaign_id: str):
        self.campaign_id = campaign_id
        super().__init__(f"No capacity within the horizon for campaign {campaign_id}")


class RepositoryError(SchedulerError):
    """Loading or saving an external collection failed."""


class InvalidGroupTreeError(SchedulerError, ValueError):
    """The stored group forest cannot be indexed."""
