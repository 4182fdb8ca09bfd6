"""
Group selection expansion.

Users pick groups at any level of the hierarchy. Capacity, however, is
booked against "bearing" groups: the groups in the selected subtrees that
have displays attached to them directly, since only those run a loop of
their own. A bearing group and a bearing descendant of it are both
returned; each is an independently booked capacity pool.

The census itself stays cumulative, so summing census values over the
returned ids counts a nested bearing group's displays twice.
"""

from typing import Iterable, Mapping

from ..errors import NoDisplaysInSelectionError, UnknownGroupError
from .index import GroupIndex


def direct_displays(group_id: str, index: GroupIndex, census: Mapping[str, int]) -> int:
    """Displays attached to the group itself, not to a descendant."""
    below = sum(census.get(child, 0) for child in index.children(group_id))
    return census.get(group_id, 0) - below


def expand_selection(
    selected_ids: Iterable[str],
    index: GroupIndex,
    census: Mapping[str, int],
) -> list[str]:
    """
    Map selected group ids to the bearing groups beneath them.

    Args:
        selected_ids: Group ids chosen by the user (any level)
        index: Group index
        census: Cumulative display count per group, from compute_census()

    Returns:
        De-duplicated bearing group ids, first-seen order

    Raises:
        UnknownGroupError: If any selected id is not in the index
        NoDisplaysInSelectionError: If no selected subtree holds a display
    """
    selected = list(selected_ids)
    missing = index.missing(selected)
    if missing:
        raise UnknownGroupError(missing)

    expanded: dict[str, None] = {}
    for group_id in selected:
        for gid in index.subtree(group_id):
            if direct_displays(gid, index, census) > 0:
                expanded.setdefault(gid)

    if not expanded:
        raise NoDisplaysInSelectionError(selected)

    return list(expanded)
