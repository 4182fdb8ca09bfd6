"""
In-memory schedule store.

Holds one booking ledger per group id. The store is loaded from and saved
to a ScheduleRepository by the caller; it never touches storage itself.
Callers must serialize read-modify-write cycles against a store (see
SlotScheduler), otherwise two commits validated against the same snapshot
can jointly overbook a group.
"""

from datetime import date
from typing import Any, Iterable, Iterator, Optional

import structlog

from .models import Booking

logger = structlog.get_logger()


class ScheduleStore:
    """Booking ledgers keyed by group id."""

    def __init__(self, ledgers: Optional[dict[str, Iterable[Booking]]] = None):
        self._ledgers: dict[str, list[Booking]] = {
            gid: list(bookings) for gid, bookings in (ledgers or {}).items()
        }

    def __iter__(self) -> Iterator[str]:
        return iter(self._ledgers)

    def __len__(self) -> int:
        return len(self._ledgers)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ScheduleStore):
            return NotImplemented
        return self._ledgers == other._ledgers

    @property
    def group_ids(self) -> list[str]:
        return list(self._ledgers)

    def bookings_for(self, group_id: str) -> list[Booking]:
        """Bookings on a group; an unknown group has none."""
        return list(self._ledgers.get(group_id, ()))

    def campaign_ids(self) -> set[str]:
        return {b.campaign_id for bookings in self._ledgers.values() for b in bookings}

    def add_booking(self, group_id: str, booking: Booking) -> None:
        """Append a booking, creating the group's ledger if needed."""
        self._ledgers.setdefault(group_id, []).append(booking)

    def prune_expired(self, today: date) -> bool:
        """
        Drop bookings that ended on or before ``today``.

        Args:
            today: Current calendar day

        Returns:
            True if any booking was removed
        """
        removed = self._remove(lambda b: b.end_date <= today)
        if removed:
            logger.info("schedule_store.pruned", today=today.isoformat(), removed=removed)
        return removed > 0

    def remove_by_campaign(self, campaign_id: str) -> bool:
        """
        Drop every booking held by a campaign, on every group.

        Returns:
            True if any booking was removed
        """
        removed = self._remove(lambda b: b.campaign_id == campaign_id)
        if removed:
            logger.info(
                "schedule_store.campaign_removed",
                campaign_id=campaign_id,
                removed=removed,
            )
        return removed > 0

    def _remove(self, predicate) -> int:
        removed = 0
        for gid, bookings in self._ledgers.items():
            kept = [b for b in bookings if not predicate(b)]
            removed += len(bookings) - len(kept)
            self._ledgers[gid] = kept
        return removed

    def copy(self) -> "ScheduleStore":
        return ScheduleStore(self._ledgers)

    def to_list(self) -> list[dict[str, Any]]:
        """Serialize as a list of {groupId, bookings} records."""
        return [
            {"groupId": gid, "bookings": [b.to_dict() for b in bookings]}
            for gid, bookings in self._ledgers.items()
        ]

    @classmethod
    def from_list(cls, records: Iterable[dict[str, Any]]) -> "ScheduleStore":
        store = cls()
        for record in records:
            gid = record["groupId"]
            store._ledgers.setdefault(gid, [])
            for raw in record.get("bookings") or []:
                store.add_booking(gid, Booking.from_dict(raw))
        return store
