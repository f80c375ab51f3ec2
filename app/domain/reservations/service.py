"""Reservation service - Business logic for the reservation lifecycle"""

import logging

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...auth import Account
from ...config import BOOKING_WINDOW_HOURS
from ...models import Reservation
from ...realtime import RESERVATIONS_CHANGED, MessageBroker, account_channel, broker
from ...services.notification_service import ReservationNotifier
from ...shared.errors import friendly_error_message
from ...shared.outcomes import ActionOutcome, SideEffectResult
from ...shared.time_window import (
    Clock,
    is_before_hours_before,
    is_future_date,
    utcnow,
)
from ...utils.sanitization import sanitize_request_text
from .repository import (
    INVALID_REQUESTED_INSTANT,
    ReservationProcedureError,
    ReservationRepository,
)
from .schemas import ReservationCreate, ReservationResponse, ReservationStatusUpdate
from .state_machine import (
    NOTIFICATION_EVENTS,
    ReservationStatus,
    TransitionError,
    check_transition,
    is_terminal,
)

logger = logging.getLogger(__name__)

RELEASE_SLOT = "release_slot"
RELEASE_SLOT_FAILED = "Slot could not be released"


class ReservationService:
    """Service layer for reservation business logic"""

    def __init__(
        self,
        db: Session,
        notifier: ReservationNotifier,
        clock: Clock = utcnow,
        message_broker: MessageBroker = broker,
    ):
        self.db = db
        self.notifier = notifier
        self.clock = clock
        self.broker = message_broker
        self.repo = ReservationRepository()

    def get_reservations(self, account: Account) -> list[Reservation]:
        """All reservations of the current student or salon, newest first"""
        if account.is_student:
            return self.repo.get_by_student(self.db, account.id)
        return self.repo.get_by_salon(self.db, account.id)

    def get_reservation(self, reservation_id: str, account: Account) -> Reservation:
        """Get a reservation visible to one of its two parties"""
        reservation = self.repo.get_reservation(self.db, reservation_id)
        if not reservation or account.id not in (reservation.student_id, reservation.salon_id):
            raise HTTPException(status_code=404, detail="Reservation not found")
        return reservation

    async def create_reservation(self, data: ReservationCreate, account: Account) -> ActionOutcome:
        """
        Request a reservation for a slot (or a negotiated instant on a flexible
        listing). Direct booking closes BOOKING_WINDOW_HOURS before the instant;
        after that the student is sent to the chat instead.
        """
        now = self.clock()
        requested_at = data.reservation_datetime

        if not is_future_date(requested_at, now):
            raise HTTPException(status_code=400, detail=friendly_error_message("invalid requested instant"))
        if not is_before_hours_before(requested_at, BOOKING_WINDOW_HOURS, now):
            raise HTTPException(
                status_code=400,
                detail=(
                    f"Direct booking closes {BOOKING_WINDOW_HOURS} hours before the appointment. "
                    "Please consult the salon via chat."
                ),
            )

        logger.info(f"📝 Student {account.id} requesting listing {data.listing_id} at {requested_at.isoformat()}")
        try:
            reservation = self.repo.create_reservation_and_book_slot(
                self.db,
                listing_id=data.listing_id,
                student_id=account.id,
                requested_at=requested_at,
                message=sanitize_request_text(data.message),
                now=now,
            )
        except ReservationProcedureError as e:
            logger.warning(f"⚠️ Reservation rejected ({e.code}) for listing {data.listing_id}")
            raise HTTPException(
                status_code=400 if e.code == INVALID_REQUESTED_INSTANT else 409,
                detail=friendly_error_message(str(e)),
                headers={"X-Error-Code": e.code},
            ) from e
        except SQLAlchemyError as e:
            logger.error(f"❌ Reservation procedure failed: {str(e)}")
            raise HTTPException(status_code=500, detail=friendly_error_message(str(e))) from e

        logger.info(f"✅ Reservation {reservation.id} created (pending)")
        outcome = ActionOutcome(result=reservation)
        outcome.add(await self.notifier.notify(reservation.id, NOTIFICATION_EVENTS[ReservationStatus.PENDING]))
        self._publish_change(reservation)
        return outcome

    async def update_status(
        self, reservation_id: str, data: ReservationStatusUpdate, account: Account
    ) -> ActionOutcome:
        """
        Apply a status transition. A committed transition is never rolled back:
        slot release and notification run afterwards and only report failures.
        """
        reservation = self.get_reservation(reservation_id, account)

        if account.is_salon and not data.confirm:
            raise HTTPException(status_code=400, detail="Status change must be confirmed")

        try:
            target = check_transition(
                reservation.status,
                data.status,
                account.user_type,
                reservation_at=reservation.reservation_datetime,
                now=self.clock(),
                cancellation_reason=data.cancellation_reason,
            )
        except TransitionError as e:
            logger.warning(f"⚠️ Rejected transition of reservation {reservation.id}: {e}")
            raise HTTPException(status_code=e.status_code, detail=str(e)) from e

        reason = sanitize_request_text(data.cancellation_reason) if is_terminal(target) else None
        reservation = self.repo.update_status(self.db, reservation, target.value, reason)
        logger.info(f"✅ Reservation {reservation.id} is now {target.value}")

        outcome = ActionOutcome(result=reservation)
        if is_terminal(target):
            outcome.add(self._release_slot(reservation))
        outcome.add(await self.notifier.notify(reservation.id, NOTIFICATION_EVENTS[target]))

        if outcome.partial_failure:
            logger.warning(f"⚠️ Reservation {reservation.id} updated with failed follow-ups")
        self._publish_change(reservation)
        return outcome

    def _release_slot(self, reservation: Reservation) -> SideEffectResult:
        try:
            if not self.repo.release_slot(self.db, reservation):
                return SideEffectResult.skip(RELEASE_SLOT, "Reservation has no slot")
        except SQLAlchemyError as e:
            logger.error(f"❌ Failed to release slot for reservation {reservation.id}: {str(e)}")
            return SideEffectResult.failed(RELEASE_SLOT, RELEASE_SLOT_FAILED)
        logger.info(f"🔓 Slot {reservation.slot_id} released")
        return SideEffectResult.succeeded(RELEASE_SLOT)

    def _publish_change(self, reservation: Reservation) -> None:
        """Tell both parties' live dashboards that one of their reservations changed"""
        payload = {
            "event": RESERVATIONS_CHANGED,
            "reservation": ReservationResponse.model_validate(reservation).model_dump(mode="json"),
        }
        for account_id in (reservation.student_id, reservation.salon_id):
            self.broker.publish(account_channel(account_id), payload)
