"""Message repository - Database operations for reservation chat messages"""

from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from ...models import ReservationMessage


class MessageRepository:
    """Repository for reservation message database operations"""

    @staticmethod
    def get_messages(db: Session, reservation_id: str) -> list[ReservationMessage]:
        """All messages of a reservation, oldest first"""
        return (
            db.query(ReservationMessage)
            .filter(ReservationMessage.reservation_id == reservation_id)
            .order_by(ReservationMessage.created_at.asc(), ReservationMessage.id.asc())
            .all()
        )

    @staticmethod
    def get_messages_for(db: Session, reservation_ids: Iterable[str]) -> list[ReservationMessage]:
        """Messages of several reservations in one query, oldest first"""
        reservation_ids = list(reservation_ids)
        if not reservation_ids:
            return []
        return (
            db.query(ReservationMessage)
            .filter(ReservationMessage.reservation_id.in_(reservation_ids))
            .order_by(ReservationMessage.created_at.asc(), ReservationMessage.id.asc())
            .all()
        )

    @staticmethod
    def create_message(
        db: Session,
        reservation_id: str,
        sender_id: str,
        sender_type: str,
        message: str,
        created_at: Optional[datetime] = None,
    ) -> ReservationMessage:
        row = ReservationMessage(
            reservation_id=reservation_id,
            sender_id=sender_id,
            sender_type=sender_type,
            message=message,
        )
        if created_at is not None:
            row.created_at = created_at
        db.add(row)
        db.commit()
        db.refresh(row)
        return row
