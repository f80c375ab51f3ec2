"""Reservation bucketing and latest-message tracking for the dashboard"""

from typing import Any, Iterable, Optional

from ..messages.schemas import MessageResponse

PENDING = "pending"
CONFIRMED = "confirmed"
OTHER = "other"


def bucket_for(status: str) -> str:
    if status == PENDING:
        return PENDING
    if status == CONFIRMED:
        return CONFIRMED
    return OTHER


def partition_reservations(reservations: Iterable[Any]) -> dict[str, list]:
    """Split reservations into disjoint pending / confirmed / other buckets, keeping order"""
    buckets: dict[str, list] = {PENDING: [], CONFIRMED: [], OTHER: []}
    for reservation in reservations:
        buckets[bucket_for(reservation.status)].append(reservation)
    return buckets


class LatestMessageTracker:
    """
    Latest chat message per reservation.

    Unread is a heuristic: the latest message exists and was sent by someone
    other than the viewer. No per-message read state is kept.
    """

    def __init__(self):
        self._latest: dict[str, MessageResponse] = {}

    @staticmethod
    def _coerce(message: Any) -> MessageResponse:
        if isinstance(message, MessageResponse):
            return message
        return MessageResponse.model_validate(message)

    def load_snapshot(self, messages: Iterable[Any]) -> None:
        for message in messages:
            self.apply(message)

    def apply(self, message: Any) -> bool:
        """
        Record a message. Re-applying the cached message is a no-op, and a
        message older than the cached one never replaces it.

        Returns True when the cached entry changed.
        """
        message = self._coerce(message)
        current = self._latest.get(message.reservation_id)
        if current is not None:
            if current.id == message.id or message.created_at < current.created_at:
                return False
        self._latest[message.reservation_id] = message
        return True

    def latest(self, reservation_id: str) -> Optional[MessageResponse]:
        return self._latest.get(reservation_id)

    def has_unread(self, reservation_id: str, viewer_id: str) -> bool:
        latest = self._latest.get(reservation_id)
        return latest is not None and latest.sender_id != viewer_id

    def __len__(self) -> int:
        return len(self._latest)
