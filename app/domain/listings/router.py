"""Listing router - FastAPI endpoints for listing and slot operations"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import Account, get_optional_account, require_salon
from ...database import get_db
from ...shared.time_window import Clock, get_clock
from .filters import ListingFilter
from .schemas import (
    GENDER_OPTIONS,
    MENU_OPTIONS,
    ListingCreate,
    ListingDetailResponse,
    ListingResponse,
    ListingStatusUpdate,
    ListingUpdate,
    SlotAddRequest,
    StepValidationRequest,
    StepValidationResponse,
)
from .service import ListingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/listings", tags=["Listings"])


def get_listing_service(
    db: Session = Depends(get_db), clock: Clock = Depends(get_clock)
) -> ListingService:
    """Dependency injection for ListingService"""
    return ListingService(db, clock)


def parse_listing_filter(
    menus: Optional[str] = Query(None, description="Comma-separated menus; empty means all"),
    gender: str = Query("all"),
    available_only: bool = Query(False),
) -> ListingFilter:
    selected = {m.strip() for m in (menus or "").split(",") if m.strip() in MENU_OPTIONS}
    if gender not in GENDER_OPTIONS:
        gender = "all"
    return ListingFilter(menus=selected or None, gender=gender, available_only=available_only)


# ============================================================================
# BROWSING
# ============================================================================


@router.get("", response_model=list[ListingResponse])
async def get_listings(
    listing_filter: ListingFilter = Depends(parse_listing_filter),
    sort: str = Query("newest", pattern="^(newest|deadline)$"),
    service: ListingService = Depends(get_listing_service),
):
    """Active listings, filtered by menu, gender and availability"""
    return service.list_public(listing_filter, sort)


@router.get("/mine", response_model=list[ListingResponse])
async def get_my_listings(
    account: Account = Depends(require_salon),
    service: ListingService = Depends(get_listing_service),
):
    return service.list_for_salon(account)


@router.post("/validate-step", response_model=StepValidationResponse)
async def validate_step(
    data: StepValidationRequest,
    service: ListingService = Depends(get_listing_service),
):
    """Validate one step of the listing form before moving on"""
    return service.validate_step(data.step, data.data)


@router.get("/{listing_id}", response_model=ListingDetailResponse)
async def get_listing(
    listing_id: str,
    account: Optional[Account] = Depends(get_optional_account),
    service: ListingService = Depends(get_listing_service),
):
    return service.get_detail(listing_id, account)


# ============================================================================
# SALON OPERATIONS
# ============================================================================


@router.post("", response_model=ListingDetailResponse, status_code=201)
async def create_listing(
    data: ListingCreate,
    account: Account = Depends(require_salon),
    service: ListingService = Depends(get_listing_service),
):
    return service.create_listing(data, account)


@router.patch("/{listing_id}", response_model=ListingDetailResponse)
async def update_listing(
    listing_id: str,
    data: ListingUpdate,
    account: Account = Depends(require_salon),
    service: ListingService = Depends(get_listing_service),
):
    """Update a listing; booked slots cannot be dropped by the edit"""
    return service.update_listing(listing_id, data, account)


@router.patch("/{listing_id}/status", response_model=ListingResponse)
async def update_listing_status(
    listing_id: str,
    data: ListingStatusUpdate,
    account: Account = Depends(require_salon),
    service: ListingService = Depends(get_listing_service),
):
    return service.set_status(listing_id, data.status, data.confirm, account)


@router.delete("/{listing_id}")
async def delete_listing(
    listing_id: str,
    confirm: bool = Query(False),
    account: Account = Depends(require_salon),
    service: ListingService = Depends(get_listing_service),
):
    """Delete a listing together with its slots and reservations"""
    return service.delete_listing(listing_id, confirm, account)


@router.post("/{listing_id}/slots", response_model=ListingDetailResponse, status_code=201)
async def add_slot(
    listing_id: str,
    data: SlotAddRequest,
    account: Account = Depends(require_salon),
    service: ListingService = Depends(get_listing_service),
):
    return service.add_slot(listing_id, data, account)


@router.delete("/{listing_id}/slots/{slot_id}", response_model=ListingDetailResponse)
async def remove_slot(
    listing_id: str,
    slot_id: str,
    account: Account = Depends(require_salon),
    service: ListingService = Depends(get_listing_service),
):
    return service.remove_slot(listing_id, slot_id, account)
