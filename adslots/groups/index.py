"""
Group hierarchy index.

Display groups form a forest: each root group may hold subgroups, to any
depth. The index flattens that forest into an arena of entries keyed by
group id, each carrying explicit parent and child ids, so lookups never
walk pointer-linked nodes.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Optional

from ..errors import InvalidGroupTreeError, UnknownGroupError


@dataclass
class GroupNode:
    """A group as stored: a name plus ordered subgroups."""
    id: str
    name: str = ""
    subgroups: list["GroupNode"] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GroupNode":
        if not isinstance(data["id"], str):
            raise ValueError(f"Invalid group id: {data['id']!r}")
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            subgroups=[cls.from_dict(sg) for sg in data.get("subgroups") or []],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "subgroups": [sg.to_dict() for sg in self.subgroups],
        }


@dataclass(frozen=True)
class GroupEntry:
    """One indexed group."""
    group_id: str
    name: str
    parent_id: Optional[str]
    children: tuple[str, ...]
    path: tuple[str, ...]  # names from the root down to this group


class GroupIndex:
    """
    Lookup over a group forest.

    Built in a single depth-first pass. Answers, for every group id, its
    parent, its ordered children and its name path from the root.
    """

    def __init__(self, entries: dict[str, GroupEntry], roots: list[str]):
        self._entries = entries
        self._roots = roots

    @classmethod
    def build(cls, forest: Iterable[GroupNode]) -> "GroupIndex":
        """
        Index a group forest.

        Args:
            forest: Root groups, each with nested subgroups

        Returns:
            GroupIndex over every group in the forest

        Raises:
            InvalidGroupTreeError: If a group id appears more than once
        """
        entries: dict[str, GroupEntry] = {}
        roots: list[str] = []

        def walk(node: GroupNode, parent_id: Optional[str], path: tuple[str, ...]) -> None:
            if node.id in entries:
                raise InvalidGroupTreeError(f"Duplicate group id: {node.id}")
            current_path = path + (node.name,)
            entries[node.id] = GroupEntry(
                group_id=node.id,
                name=node.name,
                parent_id=parent_id,
                children=tuple(sg.id for sg in node.subgroups),
                path=current_path,
            )
            for sg in node.subgroups:
                walk(sg, node.id, current_path)

        for root in forest:
            roots.append(root.id)
            walk(root, None, ())

        return cls(entries, roots)

    def __contains__(self, group_id: object) -> bool:
        return group_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    @property
    def roots(self) -> list[str]:
        """Root group ids in forest order."""
        return list(self._roots)

    def get(self, group_id: str) -> GroupEntry:
        """Get the entry for a group, raising UnknownGroupError if absent."""
        try:
            return self._entries[group_id]
        except KeyError:
            raise UnknownGroupError([group_id]) from None

    def parent(self, group_id: str) -> Optional[str]:
        return self.get(group_id).parent_id

    def children(self, group_id: str) -> list[str]:
        return list(self.get(group_id).children)

    def path(self, group_id: str) -> list[str]:
        return list(self.get(group_id).path)

    def ancestors(self, group_id: str) -> list[str]:
        """Ancestor ids of a group, nearest first."""
        out = []
        current = self.get(group_id).parent_id
        while current is not None:
            out.append(current)
            current = self._entries[current].parent_id
        return out

    def subtree(self, group_id: str) -> Iterator[str]:
        """Yield a group id and all its descendants, pre-order."""
        self.get(group_id)
        stack = [group_id]
        while stack:
            current = stack.pop()
            yield current
            stack.extend(reversed(self._entries[current].children))

    def missing(self, group_ids: Iterable[str]) -> list[str]:
        """Ids from group_ids that are not indexed, in request order."""
        return [gid for gid in group_ids if gid not in self._entries]
