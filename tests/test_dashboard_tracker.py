from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

from app.domain.dashboard.aggregation import LatestMessageTracker, partition_reservations

T0 = datetime(2025, 6, 1, 3, 0, tzinfo=timezone.utc)


def message(message_id, sender_id, minutes, reservation_id="r1", sender_type="salon"):
    return {
        "id": message_id,
        "reservation_id": reservation_id,
        "sender_id": sender_id,
        "sender_type": sender_type,
        "message": f"message {message_id}",
        "created_at": (T0 + timedelta(minutes=minutes)).isoformat(),
    }


def test_partition_is_disjoint_and_keeps_order():
    reservations = [
        SimpleNamespace(id="a", status="confirmed"),
        SimpleNamespace(id="b", status="pending"),
        SimpleNamespace(id="c", status="cancelled_by_student"),
        SimpleNamespace(id="d", status="confirmed"),
        SimpleNamespace(id="e", status="cancelled_by_salon"),
    ]
    buckets = partition_reservations(reservations)
    assert [r.id for r in buckets["pending"]] == ["b"]
    assert [r.id for r in buckets["confirmed"]] == ["a", "d"]
    assert [r.id for r in buckets["other"]] == ["c", "e"]


def test_two_salon_messages_keep_the_later_one():
    tracker = LatestMessageTracker()
    tracker.apply(message("m1", "salon-1", 0))
    tracker.apply(message("m2", "salon-1", 1))

    assert tracker.latest("r1").id == "m2"
    assert tracker.has_unread("r1", "student-1")
    assert not tracker.has_unread("r1", "salon-1")


def test_reapplying_the_same_message_is_a_no_op():
    tracker = LatestMessageTracker()
    assert tracker.apply(message("m1", "salon-1", 0))
    assert not tracker.apply(message("m1", "salon-1", 0))
    assert len(tracker) == 1


def test_late_delivery_of_older_message_does_not_replace():
    tracker = LatestMessageTracker()
    tracker.apply(message("m2", "student-1", 5))
    assert not tracker.apply(message("m1", "salon-1", 1))
    assert tracker.latest("r1").id == "m2"
    assert not tracker.has_unread("r1", "student-1")


def test_no_message_means_nothing_unread():
    tracker = LatestMessageTracker()
    tracker.load_snapshot([message("m1", "salon-1", 0, reservation_id="r2")])
    assert tracker.latest("r1") is None
    assert not tracker.has_unread("r1", "student-1")
    assert tracker.has_unread("r2", "student-1")
