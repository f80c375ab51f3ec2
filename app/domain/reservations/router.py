"""Reservation router - FastAPI endpoints for reservation operations"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import Account, get_current_account, require_student
from ...database import get_db
from ...services.notification_service import ReservationNotifier, get_notifier
from ...shared.outcomes import ActionOutcome
from ...shared.time_window import Clock, get_clock
from .schemas import (
    ReservationActionResponse,
    ReservationCreate,
    ReservationResponse,
    ReservationStatusUpdate,
    SideEffectResponse,
)
from .service import ReservationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reservations", tags=["Reservations"])


def get_reservation_service(
    db: Session = Depends(get_db),
    notifier: ReservationNotifier = Depends(get_notifier),
    clock: Clock = Depends(get_clock),
) -> ReservationService:
    """Dependency injection for ReservationService"""
    return ReservationService(db, notifier, clock)


def to_action_response(outcome: ActionOutcome) -> ReservationActionResponse:
    return ReservationActionResponse(
        reservation=ReservationResponse.model_validate(outcome.result),
        side_effects=[SideEffectResponse.model_validate(effect) for effect in outcome.side_effects],
        partial_failure=outcome.partial_failure,
    )


@router.post("", response_model=ReservationActionResponse, status_code=201)
async def create_reservation(
    data: ReservationCreate,
    account: Account = Depends(require_student),
    service: ReservationService = Depends(get_reservation_service),
):
    """Request a reservation; the slot is booked atomically"""
    return to_action_response(await service.create_reservation(data, account))


@router.get("", response_model=list[ReservationResponse])
async def get_reservations(
    account: Account = Depends(get_current_account),
    service: ReservationService = Depends(get_reservation_service),
):
    return service.get_reservations(account)


@router.get("/{reservation_id}", response_model=ReservationResponse)
async def get_reservation(
    reservation_id: str,
    account: Account = Depends(get_current_account),
    service: ReservationService = Depends(get_reservation_service),
):
    return service.get_reservation(reservation_id, account)


@router.patch("/{reservation_id}/status", response_model=ReservationActionResponse)
async def update_reservation_status(
    reservation_id: str,
    data: ReservationStatusUpdate,
    account: Account = Depends(get_current_account),
    service: ReservationService = Depends(get_reservation_service),
):
    """
    Confirm or cancel a reservation. Salon actions need confirm=true; student
    cancellations need a reason and must be made before the cancellation cutoff.
    """
    return to_action_response(await service.update_status(reservation_id, data, account))
