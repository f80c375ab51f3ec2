"""Dashboard router - aggregated view and live latest-message updates"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket
from sqlalchemy.orm import Session

from ...auth import Account, authenticate_token, get_current_account
from ...database import SessionLocal, get_db
from ...realtime import RESERVATIONS_CHANGED, account_channel, broker, close_code_for, relay
from ...shared.time_window import Clock, get_clock
from .aggregation import LatestMessageTracker
from .schemas import DashboardResponse
from .service import DashboardService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


def get_dashboard_service(
    db: Session = Depends(get_db), clock: Clock = Depends(get_clock)
) -> DashboardService:
    """Dependency injection for DashboardService"""
    return DashboardService(db, clock)


@router.get("", response_model=DashboardResponse)
async def get_dashboard(
    account: Account = Depends(get_current_account),
    service: DashboardService = Depends(get_dashboard_service),
):
    return service.get_dashboard(account)


@router.websocket("/stream")
async def stream_dashboard(websocket: WebSocket, token: Optional[str] = Query(None)):
    """
    Live latest-message state for the viewer's confirmed reservations.

    Sends ``{"type": "snapshot", "updates": [...]}`` on connect and again
    whenever one of the viewer's reservations changes status, then
    ``{"type": "latest_message", ...}`` whenever a reservation's latest
    message changes.
    """
    db = SessionLocal()
    try:
        try:
            account = authenticate_token(token, db)
        except HTTPException as e:
            await websocket.close(code=close_code_for(e.status_code))
            return
    finally:
        db.close()

    await websocket.accept()
    subscription = broker.subscribe([account_channel(account.id)])
    tracker = LatestMessageTracker()

    def snapshot() -> dict:
        """Re-read the confirmed set, move the subscription onto it, then load chat state"""
        nonlocal tracker
        session = SessionLocal()
        try:
            service = DashboardService(session)
            reservation_ids = service.confirmed_reservation_ids(account)
            # Subscribe before reading so no message falls in between
            broker.set_channels(subscription, [account_channel(account.id), *reservation_ids])
            tracker = service.load_tracker(reservation_ids)
        finally:
            session.close()
        logger.debug(f"📊 Dashboard stream for {account.email} follows {len(reservation_ids)} reservation(s)")
        return {
            "type": "snapshot",
            "updates": [
                DashboardService.latest_update(tracker, rid, account.id).model_dump(mode="json")
                for rid in reservation_ids
            ],
        }

    def render(payload: dict) -> Optional[dict]:
        if payload.get("event") == RESERVATIONS_CHANGED:
            return snapshot()
        if not tracker.apply(payload):
            return None
        update = DashboardService.latest_update(tracker, payload["reservation_id"], account.id)
        return {"type": "latest_message", **update.model_dump(mode="json")}

    try:
        await websocket.send_json(snapshot())
        await relay(websocket, subscription, render)
    finally:
        broker.unsubscribe(subscription)
