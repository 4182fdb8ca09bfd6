"""
Display census per group.

A display attached to a group counts toward that group and every one of
its ancestors, so a group's census is the number of displays anywhere in
its subtree.
"""

from collections import Counter
from dataclasses import dataclass
from typing import Any, Iterable, Optional

import structlog

from .index import GroupIndex

logger = structlog.get_logger()


@dataclass
class Display:
    """A physical display, optionally attached to one group."""
    id: str
    group_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Display":
        group_id = data.get("groupId") or None
        if not isinstance(data["id"], str):
            raise ValueError(f"Invalid display id: {data['id']!r}")
        if group_id is not None and not isinstance(group_id, str):
            raise ValueError(f"Invalid groupId: {group_id!r}")
        return cls(id=data["id"], group_id=group_id)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "groupId": self.group_id or ""}


def compute_census(index: GroupIndex, displays: Iterable[Display]) -> dict[str, int]:
    """
    Count displays per group, including displays in descendant groups.

    Displays that are unassigned, or assigned to a group the index does not
    know, are skipped.

    Args:
        index: Group index to count against
        displays: All displays

    Returns:
        Dict of group_id to display count (groups without displays omitted)
    """
    counts: Counter[str] = Counter()
    skipped = 0

    for display in displays:
        gid = display.group_id
        if not gid:
            continue
        if gid not in index:
            skipped += 1
            continue
        counts[gid] += 1
        for ancestor in index.ancestors(gid):
            counts[ancestor] += 1

    if skipped:
        logger.debug("census.unknown_group_displays_skipped", count=skipped)

    return dict(counts)
