"""Reservation repository - Database operations for reservations"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from ...models import AvailabilitySlot, Listing, Reservation
from ...shared.time_window import ensure_aware, utcnow

logger = logging.getLogger(__name__)

SLOT_ALREADY_BOOKED = "slot_already_booked"
LISTING_UNAVAILABLE = "listing_unavailable"
INVALID_REQUESTED_INSTANT = "invalid_requested_instant"


class ReservationProcedureError(Exception):
    """Classified failure of the create-and-book procedure"""

    MESSAGES = {
        SLOT_ALREADY_BOOKED: "Slot already booked",
        LISTING_UNAVAILABLE: "Listing not found or closed",
        INVALID_REQUESTED_INSTANT: "Invalid requested instant",
    }

    def __init__(self, code: str):
        self.code = code
        super().__init__(self.MESSAGES[code])


class ReservationRepository:
    """Repository for reservation database operations"""

    @staticmethod
    def _with_details(db: Session):
        return db.query(Reservation).options(
            joinedload(Reservation.listing),
            joinedload(Reservation.student),
            joinedload(Reservation.salon),
            joinedload(Reservation.slot),
        )

    @staticmethod
    def get_reservation(db: Session, reservation_id: str) -> Optional[Reservation]:
        return (
            ReservationRepository._with_details(db)
            .filter(Reservation.id == reservation_id)
            .first()
        )

    @staticmethod
    def get_by_student(db: Session, student_id: str) -> list[Reservation]:
        return (
            ReservationRepository._with_details(db)
            .filter(Reservation.student_id == student_id)
            .order_by(Reservation.created_at.desc())
            .all()
        )

    @staticmethod
    def get_by_salon(db: Session, salon_id: str) -> list[Reservation]:
        return (
            ReservationRepository._with_details(db)
            .filter(Reservation.salon_id == salon_id)
            .order_by(Reservation.created_at.desc())
            .all()
        )

    @staticmethod
    def create_reservation_and_book_slot(
        db: Session,
        listing_id: str,
        student_id: str,
        requested_at: datetime,
        message: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Reservation:
        """
        Create a reservation and mark its slot booked in one transaction.

        The slot is claimed with a conditional UPDATE so that of two
        concurrent requests for the same slot exactly one succeeds. Listings
        with flexible schedule text accept instants that match no slot.

        Raises:
            ReservationProcedureError: with code slot_already_booked,
                listing_unavailable or invalid_requested_instant
        """
        requested_at = ensure_aware(requested_at)
        now = ensure_aware(now) if now else utcnow()

        try:
            listing = db.query(Listing).filter(Listing.id == listing_id).first()
            if not listing or listing.status != "active":
                raise ReservationProcedureError(LISTING_UNAVAILABLE)
            if requested_at <= now:
                raise ReservationProcedureError(INVALID_REQUESTED_INSTANT)

            slot = (
                db.query(AvailabilitySlot)
                .filter(
                    AvailabilitySlot.listing_id == listing.id,
                    AvailabilitySlot.slot_time == requested_at,
                )
                .first()
            )
            if slot:
                claimed = (
                    db.query(AvailabilitySlot)
                    .filter(AvailabilitySlot.id == slot.id, AvailabilitySlot.is_booked.is_(False))
                    .update({AvailabilitySlot.is_booked: True}, synchronize_session=False)
                )
                if claimed != 1:
                    raise ReservationProcedureError(SLOT_ALREADY_BOOKED)
            elif not (listing.flexible_schedule_text or "").strip():
                raise ReservationProcedureError(INVALID_REQUESTED_INSTANT)

            reservation = Reservation(
                listing_id=listing.id,
                slot_id=slot.id if slot else None,
                student_id=student_id,
                salon_id=listing.salon_id,
                reservation_datetime=requested_at,
                message=message,
                status="pending",
            )
            db.add(reservation)
            db.commit()
        except (ReservationProcedureError, SQLAlchemyError):
            db.rollback()
            raise

        if slot:
            db.refresh(slot)
        db.refresh(reservation)
        return reservation

    @staticmethod
    def update_status(
        db: Session, reservation: Reservation, status: str, cancellation_reason: Optional[str] = None
    ) -> Reservation:
        reservation.status = status
        if cancellation_reason is not None:
            reservation.cancellation_reason = cancellation_reason
        db.commit()
        db.refresh(reservation)
        return reservation

    @staticmethod
    def release_slot(db: Session, reservation: Reservation) -> bool:
        """
        Mark the reservation's slot unbooked again. Runs as its own commit
        after the status change; returns False when there is no slot to release.
        """
        if not reservation.slot_id:
            return False
        try:
            db.query(AvailabilitySlot).filter(AvailabilitySlot.id == reservation.slot_id).update(
                {AvailabilitySlot.is_booked: False}, synchronize_session=False
            )
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        db.expire_all()
        return True
