"""Dashboard service - Combines profile, listings, reservations and chat state"""

import logging

from sqlalchemy.orm import Session

from ...auth import Account
from ...shared.time_window import Clock, utcnow
from ..accounts.service import profile_schema
from ..listings.service import ListingService
from ..messages.repository import MessageRepository
from ..reservations.repository import ReservationRepository
from .aggregation import CONFIRMED, LatestMessageTracker, partition_reservations
from .schemas import DashboardReservation, DashboardResponse, LatestMessageUpdate, ReservationBuckets

logger = logging.getLogger(__name__)


class DashboardService:
    """Service layer for the dashboard view"""

    def __init__(self, db: Session, clock: Clock = utcnow):
        self.db = db
        self.clock = clock

    def get_reservations(self, account: Account) -> list:
        if account.is_student:
            return ReservationRepository.get_by_student(self.db, account.id)
        return ReservationRepository.get_by_salon(self.db, account.id)

    def load_tracker(self, reservation_ids: list[str]) -> LatestMessageTracker:
        tracker = LatestMessageTracker()
        tracker.load_snapshot(MessageRepository.get_messages_for(self.db, reservation_ids))
        return tracker

    def get_dashboard(self, account: Account) -> DashboardResponse:
        """
        Build the dashboard for a student or salon.

        Reservations are bucketed by status; only confirmed ones carry chat
        state (latest message and unread flag for this viewer).
        """
        listings = ListingService(self.db, self.clock).list_for_salon(account) if account.is_salon else []
        buckets = partition_reservations(self.get_reservations(account))
        tracker = self.load_tracker([r.id for r in buckets[CONFIRMED]])

        def present(reservation, with_chat: bool) -> DashboardReservation:
            item = DashboardReservation.model_validate(reservation)
            if with_chat:
                item.latest_message = tracker.latest(reservation.id)
                item.has_unread = tracker.has_unread(reservation.id, account.id)
            return item

        logger.debug(
            f"📊 Dashboard for {account.email}: "
            f"{len(buckets['pending'])} pending, {len(buckets['confirmed'])} confirmed, {len(buckets['other'])} other"
        )
        return DashboardResponse(
            user_type=account.user_type,
            profile=profile_schema(account),
            listings=listings,
            reservations=ReservationBuckets(
                pending=[present(r, False) for r in buckets["pending"]],
                confirmed=[present(r, True) for r in buckets["confirmed"]],
                other=[present(r, False) for r in buckets["other"]],
            ),
        )

    def confirmed_reservation_ids(self, account: Account) -> list[str]:
        return [r.id for r in self.get_reservations(account) if r.status == CONFIRMED]

    @staticmethod
    def latest_update(tracker: LatestMessageTracker, reservation_id: str, viewer_id: str) -> LatestMessageUpdate:
        return LatestMessageUpdate(
            reservation_id=reservation_id,
            latest_message=tracker.latest(reservation_id),
            has_unread=tracker.has_unread(reservation_id, viewer_id),
        )
