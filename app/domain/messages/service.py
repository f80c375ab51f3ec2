"""Message service - Business logic for reservation chat"""

import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...auth import Account
from ...models import Reservation
from ...realtime import MessageBroker, broker
from ...shared.time_window import Clock, utcnow
from ...utils.sanitization import sanitize_request_text
from ..reservations.repository import ReservationRepository
from .repository import MessageRepository
from .schemas import MessageResponse

logger = logging.getLogger(__name__)


class MessageService:
    """Service layer for reservation chat messages"""

    def __init__(self, db: Session, clock: Clock = utcnow, message_broker: MessageBroker = broker):
        self.db = db
        self.clock = clock
        self.broker = message_broker
        self.repo = MessageRepository()

    def get_reservation_for_party(self, reservation_id: str, account: Account) -> Reservation:
        """Only the student and the salon of a reservation may read or write its chat"""
        reservation = ReservationRepository.get_reservation(self.db, reservation_id)
        if not reservation or account.id not in (reservation.student_id, reservation.salon_id):
            raise HTTPException(status_code=404, detail="Reservation not found")
        return reservation

    def get_messages(self, reservation_id: str, account: Account) -> list[MessageResponse]:
        reservation = self.get_reservation_for_party(reservation_id, account)
        return [
            MessageResponse.model_validate(row)
            for row in self.repo.get_messages(self.db, reservation.id)
        ]

    def send_message(self, reservation_id: str, body: str, account: Account) -> MessageResponse:
        """Append a message and publish it to live subscribers of the reservation"""
        reservation = self.get_reservation_for_party(reservation_id, account)
        text = sanitize_request_text(body)
        if not text:
            raise HTTPException(status_code=400, detail="Message cannot be empty")

        row = self.repo.create_message(
            self.db,
            reservation_id=reservation.id,
            sender_id=account.id,
            sender_type=account.user_type,
            message=text,
            created_at=self.clock(),
        )
        message = MessageResponse.model_validate(row)
        delivered = self.broker.publish(reservation.id, message.model_dump(mode="json"))
        logger.info(f"💬 Message {message.id} on reservation {reservation.id} delivered live to {delivered}")
        return message
