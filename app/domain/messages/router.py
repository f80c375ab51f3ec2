"""Message router - REST and WebSocket endpoints for reservation chat"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket
from sqlalchemy.orm import Session

from ...auth import Account, authenticate_token, get_current_account
from ...database import SessionLocal, get_db
from ...realtime import broker, close_code_for, relay
from ...shared.time_window import Clock, get_clock
from .schemas import MessageCreate, MessageResponse
from .service import MessageService
from .stream import ChatStream

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reservations", tags=["Messages"])


def get_message_service(
    db: Session = Depends(get_db), clock: Clock = Depends(get_clock)
) -> MessageService:
    """Dependency injection for MessageService"""
    return MessageService(db, clock)


@router.get("/{reservation_id}/messages", response_model=list[MessageResponse])
async def get_messages(
    reservation_id: str,
    account: Account = Depends(get_current_account),
    service: MessageService = Depends(get_message_service),
):
    """Chat history of a reservation, oldest first"""
    return service.get_messages(reservation_id, account)


@router.post("/{reservation_id}/messages", response_model=MessageResponse, status_code=201)
async def send_message(
    reservation_id: str,
    data: MessageCreate,
    account: Account = Depends(get_current_account),
    service: MessageService = Depends(get_message_service),
):
    return service.send_message(reservation_id, data.message, account)


@router.websocket("/{reservation_id}/messages/stream")
async def stream_messages(websocket: WebSocket, reservation_id: str, token: Optional[str] = Query(None)):
    """
    Live chat for one reservation.

    Sends ``{"type": "snapshot", "messages": [...]}`` once, then
    ``{"type": "message", "message": {...}}`` for every new message.
    """
    db = SessionLocal()
    try:
        try:
            account = authenticate_token(token, db)
            service = MessageService(db)
            reservation = service.get_reservation_for_party(reservation_id, account)
        except HTTPException as e:
            logger.warning(f"⚠️ Chat stream refused for reservation {reservation_id}: {e.detail}")
            await websocket.close(code=close_code_for(e.status_code))
            return

        await websocket.accept()
        # Subscribe before reading the snapshot so nothing falls in between
        subscription = broker.subscribe([reservation.id])
        logger.info(
            f"🔌 Chat stream opened for reservation {reservation.id} "
            f"({broker.subscriber_count(reservation.id)} live viewer(s))"
        )
        try:
            stream = ChatStream()
            snapshot = stream.load_snapshot(
                message.model_dump(mode="json") for message in service.get_messages(reservation.id, account)
            )
            db.close()
            await websocket.send_json({"type": "snapshot", "messages": snapshot})

            def render(payload: dict) -> Optional[dict]:
                message = stream.accept(payload)
                return {"type": "message", "message": message} if message else None

            await relay(websocket, subscription, render)
        finally:
            broker.unsubscribe(subscription)
    finally:
        db.close()
