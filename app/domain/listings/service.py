"""Listing service - Business logic for listing operations"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...auth import Account
from ...config import BOOKING_WINDOW_HOURS
from ...models import Listing
from ...shared.errors import friendly_error_message
from ...shared.time_window import Clock, days_until_deadline, is_deadline_passed, utcnow
from ...utils.sanitization import sanitize_request_text, validate_and_sanitize_input
from .filters import (
    ListingFilter,
    accepts_flexible_schedule,
    apply_filters,
    bookable_slots,
    consult_slots,
    is_available,
)
from .repository import ListingRepository
from .schemas import (
    ListingCreate,
    ListingDetailResponse,
    ListingResponse,
    ListingUpdate,
    SalonSummary,
    SlotAddRequest,
    SlotResponse,
    StepValidationResponse,
)
from .slots import SlotEditError, SlotEditor, verify_booked_slots_preserved

logger = logging.getLogger(__name__)

TEXT_FIELDS = ("description", "treatment_duration", "reward_details", "flexible_schedule_text")


def validate_form_step(step: str, data: dict) -> list[str]:
    """Errors blocking the given step of the listing form"""
    errors = []
    if step == "info":
        if not (data.get("title") or "").strip():
            errors.append("Title is required")
        if not data.get("menus"):
            errors.append("Select at least one menu")
    elif step == "compensation":
        if data.get("payment_type") == "paid":
            amount = data.get("payment_amount")
            if not isinstance(amount, (int, float)) or amount <= 0:
                errors.append("Paid listings need a payment amount greater than 0")
    elif step == "schedule":
        if not data.get("available_dates") and not (data.get("flexible_schedule_text") or "").strip():
            errors.append("Add at least one available date or describe the schedule in text")
    return errors


class ListingService:
    """Service layer for listing business logic"""

    def __init__(self, db: Session, clock: Clock = utcnow):
        self.db = db
        self.clock = clock
        self.repo = ListingRepository()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_public(self, listing_filter: ListingFilter, sort: str = "newest") -> list[ListingResponse]:
        """Active listings narrowed by the in-memory filters"""
        now = self.clock()
        listings = apply_filters(self.repo.get_active_listings(self.db, sort), listing_filter, now)
        return [self.to_response(listing) for listing in listings]

    def get_listing(self, listing_id: str) -> Listing:
        listing = self.repo.get_listing(self.db, listing_id)
        if not listing:
            raise HTTPException(status_code=404, detail="Listing not found")
        return listing

    def get_detail(self, listing_id: str, account: Optional[Account] = None) -> ListingDetailResponse:
        listing = self.get_listing(listing_id)
        if listing.status != "active" and (account is None or account.id != listing.salon_id):
            raise HTTPException(status_code=404, detail="Listing not found")
        return self.to_detail(listing)

    def list_for_salon(self, account: Account) -> list[ListingResponse]:
        return [self.to_response(listing) for listing in self.repo.get_listings_by_salon(self.db, account.id)]

    # ------------------------------------------------------------------
    # Writes (owner only)
    # ------------------------------------------------------------------

    def create_listing(self, data: ListingCreate, account: Account) -> ListingDetailResponse:
        logger.info(f"📝 Creating listing for salon {account.id}")

        editor = SlotEditor()
        try:
            for entry in data.available_dates:
                editor.add_instant(entry.slot_time)
        except SlotEditError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

        listing_data = data.model_dump(exclude={"available_dates"})
        listing_data["title"] = self._sanitize_title(listing_data["title"])
        for key in TEXT_FIELDS:
            listing_data[key] = sanitize_request_text(listing_data.get(key))

        listing = self.repo.create_listing(
            self.db, account.id, [slot.slot_time for slot in editor.slots], **listing_data
        )
        logger.info(f"✅ Listing {listing.id} created with {len(editor)} slot(s)")
        return self.to_detail(listing)

    def update_listing(self, listing_id: str, data: ListingUpdate, account: Account) -> ListingDetailResponse:
        """
        Update a listing. When available_dates is present it replaces the slot
        collection; the whole edit is rejected if it would drop a booked slot.
        """
        listing = self._get_owned(listing_id, account)
        updates = data.model_dump(exclude_unset=True, exclude={"available_dates"})

        if "title" in updates:
            updates["title"] = self._sanitize_title(updates["title"])
        for key in TEXT_FIELDS:
            if key in updates:
                updates[key] = sanitize_request_text(updates[key])
        if "menus" in updates and not updates["menus"]:
            raise HTTPException(status_code=400, detail="Select at least one menu")
        if updates.get("menus"):
            updates["menus"] = list(dict.fromkeys(updates["menus"]))

        slot_drafts = None
        if data.available_dates is not None:
            editor = SlotEditor()
            try:
                for entry in data.available_dates:
                    original = next(
                        (s for s in listing.slots if s.slot_time == entry.slot_time), None
                    )
                    editor.add_instant(entry.slot_time, is_booked=bool(original and original.is_booked))
                verify_booked_slots_preserved(listing.slots, editor.slots)
            except SlotEditError as e:
                logger.warning(f"⚠️ Rejected edit of listing {listing.id}: {e}")
                raise HTTPException(status_code=409, detail=str(e)) from e
            slot_drafts = editor.slots

        self._validate_merged(listing, updates, slot_drafts)

        listing = self.repo.update_listing(self.db, listing, updates, slot_drafts)
        logger.info(f"✅ Listing {listing.id} updated")
        return self.to_detail(listing)

    def set_status(self, listing_id: str, status: str, confirm: bool, account: Account) -> ListingResponse:
        if not confirm:
            raise HTTPException(status_code=400, detail="Status change must be confirmed")
        listing = self._get_owned(listing_id, account)
        listing = self.repo.update_listing(self.db, listing, {"status": status})
        logger.info(f"✅ Listing {listing.id} is now {status}")
        return self.to_response(listing)

    def delete_listing(self, listing_id: str, confirm: bool, account: Account) -> dict:
        if not confirm:
            raise HTTPException(status_code=400, detail="Listing deletion must be confirmed")
        listing = self._get_owned(listing_id, account)
        reservation_count = len(listing.reservations)
        self.repo.delete_listing(self.db, listing)
        logger.info(f"🗑️ Listing {listing_id} deleted with {reservation_count} reservation(s)")
        return {"message": "Listing deleted", "deletedReservations": reservation_count}

    def add_slot(self, listing_id: str, data: SlotAddRequest, account: Account) -> ListingDetailResponse:
        listing = self._get_owned(listing_id, account)
        editor = SlotEditor(listing.slots)
        try:
            slot = editor.add(data.slot_date, data.slot_clock_time)
        except SlotEditError as e:
            raise HTTPException(status_code=409, detail=str(e)) from e

        try:
            self.repo.add_slot(self.db, listing, slot.slot_time)
        except IntegrityError as e:
            self.db.rollback()
            raise HTTPException(status_code=409, detail=friendly_error_message(str(e))) from e
        return self.to_detail(listing)

    def remove_slot(self, listing_id: str, slot_id: str, account: Account) -> ListingDetailResponse:
        listing = self._get_owned(listing_id, account)
        slot = self.repo.get_slot(self.db, listing.id, slot_id)
        if not slot:
            raise HTTPException(status_code=404, detail="Slot not found")

        editor = SlotEditor(listing.slots)
        try:
            editor.remove(slot.slot_time)
        except SlotEditError as e:
            raise HTTPException(status_code=409, detail=str(e)) from e
        if not len(editor) and not accepts_flexible_schedule(listing):
            raise HTTPException(
                status_code=400,
                detail="Add at least one available date or describe the schedule in text",
            )

        self.repo.delete_slot(self.db, listing, slot)
        return self.to_detail(listing)

    def validate_step(self, step: str, data: dict) -> StepValidationResponse:
        errors = validate_form_step(step, data)
        return StepValidationResponse(step=step, valid=not errors, errors=errors)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_owned(self, listing_id: str, account: Account) -> Listing:
        listing = self.get_listing(listing_id)
        if listing.salon_id != account.id:
            raise HTTPException(status_code=403, detail="You can only modify your own listings")
        return listing

    @staticmethod
    def _sanitize_title(title: Optional[str]) -> str:
        if not title or not title.strip():
            raise HTTPException(status_code=400, detail="Title is required")
        try:
            return validate_and_sanitize_input(title, max_length=255)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

    @staticmethod
    def _validate_merged(listing: Listing, updates: dict, slot_drafts) -> None:
        """Invariants that depend on stored values as well as the update"""
        payment_type = updates.get("payment_type", listing.payment_type)
        if payment_type == "paid":
            amount = updates.get("payment_amount", listing.payment_amount)
            if not amount or amount <= 0:
                raise HTTPException(
                    status_code=400, detail="Paid listings need a payment amount greater than 0"
                )
        elif "payment_type" in updates:
            updates["payment_amount"] = None

        if updates.get("has_reward") is False:
            updates["reward_details"] = None

        slot_count = len(slot_drafts) if slot_drafts is not None else len(listing.slots)
        flexible = updates.get("flexible_schedule_text", listing.flexible_schedule_text)
        if not slot_count and not (flexible or "").strip():
            raise HTTPException(
                status_code=400,
                detail="Add at least one available date or describe the schedule in text",
            )

    def to_response(self, listing: Listing) -> ListingResponse:
        now = self.clock()
        return ListingResponse(
            **self._fields(listing),
            available_slot_count=len(bookable_slots(listing, now, BOOKING_WINDOW_HOURS)),
            is_available=is_available(listing, now, BOOKING_WINDOW_HOURS),
        )

    def to_detail(self, listing: Listing) -> ListingDetailResponse:
        now = self.clock()
        bookable = bookable_slots(listing, now, BOOKING_WINDOW_HOURS)
        return ListingDetailResponse(
            **self._fields(listing),
            available_slot_count=len(bookable),
            is_available=is_available(listing, now, BOOKING_WINDOW_HOURS),
            bookable_slots=[SlotResponse.model_validate(slot) for slot in bookable],
            consult_slots=[
                SlotResponse.model_validate(slot)
                for slot in consult_slots(listing, now, BOOKING_WINDOW_HOURS)
            ],
            accepts_flexible_schedule=accepts_flexible_schedule(listing),
            is_deadline_passed=bool(listing.deadline and is_deadline_passed(listing.deadline, now)),
            days_until_deadline=days_until_deadline(listing.deadline, now) if listing.deadline else None,
        )

    @staticmethod
    def _fields(listing: Listing) -> dict:
        return {
            "id": listing.id,
            "salon_id": listing.salon_id,
            "title": listing.title,
            "description": listing.description,
            "menus": list(listing.menus or []),
            "gender_requirement": listing.gender_requirement,
            "hair_length_requirement": listing.hair_length_requirement,
            "treatment_duration": listing.treatment_duration,
            "photo_shoot_requirement": listing.photo_shoot_requirement,
            "model_experience_requirement": listing.model_experience_requirement,
            "payment_type": listing.payment_type,
            "payment_amount": listing.payment_amount,
            "has_reward": listing.has_reward,
            "reward_details": listing.reward_details,
            "flexible_schedule_text": listing.flexible_schedule_text,
            "deadline": listing.deadline,
            "status": listing.status,
            "slots": [SlotResponse.model_validate(slot) for slot in listing.slots],
            "salon": SalonSummary.model_validate(listing.salon) if listing.salon else None,
            "created_at": listing.created_at,
            "updated_at": listing.updated_at,
        }
