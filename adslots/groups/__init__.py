"""
Display group hierarchy.

Indexes the group forest, counts displays per group and expands user
selections to the groups that actually carry displays.
"""

from .index import GroupEntry, GroupIndex, GroupNode
from .census import Display, compute_census
from .selection import direct_displays, expand_selection

__all__ = [
    "GroupEntry",
    "GroupIndex",
    "GroupNode",
    "Display",
    "compute_census",
    "direct_displays",
    "expand_selection",
]
