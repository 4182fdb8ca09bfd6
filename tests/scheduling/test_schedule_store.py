"""Tests for the in-memory schedule store."""

from datetime import date

import pytest

from adslots.scheduling.models import Booking
from adslots.scheduling.store import ScheduleStore


class TestScheduleStore:
    """Tests for ScheduleStore mutations."""

    def test_add_booking_creates_ledger(self, store, make_booking):
        b = make_booking("AD-1", "2024-01-01", "2024-01-08", 5)
        store.add_booking("G1", b)
        assert store.group_ids == ["G1"]
        assert store.bookings_for("G1") == [b]

    def test_unknown_group_has_no_bookings(self, store):
        assert store.bookings_for("G404") == []

    def test_bookings_for_returns_copy(self, store, make_booking):
        store.add_booking("G1", make_booking("AD-1", "2024-01-01", "2024-01-08", 5))
        store.bookings_for("G1").clear()
        assert len(store.bookings_for("G1")) == 1

    def test_prune_removes_ended_bookings(self, store, make_booking):
        store.add_booking("G1", make_booking("AD-1", "2024-01-01", "2024-01-08", 5))
        store.add_booking("G1", make_booking("AD-2", "2024-01-05", "2024-01-12", 5))
        store.add_booking("G2", make_booking("AD-3", "2023-12-01", "2023-12-08", 5))

        assert store.prune_expired(date(2024, 1, 8)) is True

        assert [b.campaign_id for b in store.bookings_for("G1")] == ["AD-2"]
        assert store.bookings_for("G2") == []

    def test_prune_keeps_booking_ending_tomorrow(self, store, make_booking):
        store.add_booking("G1", make_booking("AD-1", "2024-01-01", "2024-01-08", 5))
        assert store.prune_expired(date(2024, 1, 7)) is False
        assert len(store.bookings_for("G1")) == 1

    def test_prune_is_idempotent(self, store, make_booking):
        store.add_booking("G1", make_booking("AD-1", "2024-01-01", "2024-01-08", 5))
        store.add_booking("G1", make_booking("AD-2", "2024-02-01", "2024-02-08", 5))
        today = date(2024, 1, 20)

        assert store.prune_expired(today) is True
        snapshot = store.copy()
        assert store.prune_expired(today) is False
        assert store == snapshot

    def test_remove_by_campaign_across_groups(self, store, make_booking):
        b = make_booking("AD-1", "2024-01-01", "2024-01-08", 5)
        store.add_booking("G1", b)
        store.add_booking("G2", b)
        store.add_booking("G2", make_booking("AD-2", "2024-01-01", "2024-01-08", 10))

        assert store.remove_by_campaign("AD-1") is True

        assert store.bookings_for("G1") == []
        assert [x.campaign_id for x in store.bookings_for("G2")] == ["AD-2"]
        assert store.remove_by_campaign("AD-1") is False

    def test_campaign_ids(self, store, make_booking):
        store.add_booking("G1", make_booking("AD-1", "2024-01-01", "2024-01-08", 5))
        store.add_booking("G2", make_booking("AD-2", "2024-01-01", "2024-01-08", 5))
        assert store.campaign_ids() == {"AD-1", "AD-2"}

    def test_copy_is_independent(self, store, make_booking):
        store.add_booking("G1", make_booking("AD-1", "2024-01-01", "2024-01-08", 5))
        clone = store.copy()
        clone.add_booking("G1", make_booking("AD-2", "2024-01-01", "2024-01-08", 5))
        assert len(store.bookings_for("G1")) == 1


class TestScheduleStoreSerialization:
    """Tests for the stored {groupId, bookings} shape."""

    def test_to_list_shape(self, store, make_booking):
        store.add_booking("G1", make_booking("AD-1", "2024-01-01", "2024-01-08", 5))
        assert store.to_list() == [{
            "groupId": "G1",
            "bookings": [{
                "campaignId": "AD-1",
                "startDate": "2024-01-01",
                "endDate": "2024-01-08",
                "durationSeconds": 5,
            }],
        }]

    def test_from_list_accepts_legacy_ad_id(self):
        store = ScheduleStore.from_list([{
            "groupId": "G1",
            "bookings": [{
                "adId": "AD-1",
                "startDate": "2024-01-01",
                "endDate": "2024-01-08",
                "durationSeconds": 10,
            }],
        }])
        assert store.bookings_for("G1") == [
            Booking("AD-1", date(2024, 1, 1), date(2024, 1, 8), 10)
        ]

    def test_from_list_keeps_empty_ledgers(self):
        store = ScheduleStore.from_list([{"groupId": "G1", "bookings": []}])
        assert store.group_ids == ["G1"]

    def test_from_list_rejects_booking_without_campaign(self):
        with pytest.raises(ValueError, match="campaignId"):
            ScheduleStore.from_list([{
                "groupId": "G1",
                "bookings": [{"startDate": "2024-01-01", "endDate": "2024-01-08", "durationSeconds": 5}],
            }])

    def test_booking_dates_with_time_component(self):
        b = Booking.from_dict({
            "campaignId": "AD-1",
            "startDate": "2024-01-01T00:00:00.000Z",
            "endDate": "2024-01-08T00:00:00.000Z",
            "durationSeconds": 5,
        })
        assert b.start_date == date(2024, 1, 1)
        assert b.end_date == date(2024, 1, 8)
