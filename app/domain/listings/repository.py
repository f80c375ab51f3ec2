"""Listing repository - Database operations for listings and their slots"""

from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy.orm import Session, joinedload, selectinload

from ...models import AvailabilitySlot, Listing
from .slots import SlotDraft


class ListingRepository:
    """Repository for listing database operations"""

    @staticmethod
    def get_active_listings(db: Session, sort: str = "newest") -> list[Listing]:
        """Get all active listings with salon and slots loaded"""
        query = (
            db.query(Listing)
            .options(joinedload(Listing.salon), selectinload(Listing.slots))
            .filter(Listing.status == "active")
        )
        if sort == "deadline":
            # Listings without a deadline go last
            query = query.order_by(
                Listing.deadline.is_(None), Listing.deadline.asc(), Listing.created_at.desc()
            )
        else:
            query = query.order_by(Listing.created_at.desc())
        return query.all()

    @staticmethod
    def get_listing(db: Session, listing_id: str) -> Optional[Listing]:
        return (
            db.query(Listing)
            .options(joinedload(Listing.salon), selectinload(Listing.slots))
            .filter(Listing.id == listing_id)
            .first()
        )

    @staticmethod
    def get_listings_by_salon(db: Session, salon_id: str) -> list[Listing]:
        return (
            db.query(Listing)
            .options(selectinload(Listing.slots))
            .filter(Listing.salon_id == salon_id)
            .order_by(Listing.created_at.desc())
            .all()
        )

    @staticmethod
    def create_listing(
        db: Session, salon_id: str, slot_times: Iterable[datetime], **listing_data
    ) -> Listing:
        """Create a listing together with its slots"""
        listing = Listing(salon_id=salon_id, **listing_data)
        listing.slots = [AvailabilitySlot(slot_time=instant, is_booked=False) for instant in slot_times]
        db.add(listing)
        db.commit()
        db.refresh(listing)
        return listing

    @staticmethod
    def update_listing(
        db: Session,
        listing: Listing,
        updates: dict,
        slot_drafts: Optional[list[SlotDraft]] = None,
    ) -> Listing:
        """
        Apply field updates and, when given, reconcile the slot collection in
        the same commit. Existing rows are kept for instants that survive the
        edit so booked flags and reservation references stay intact.
        """
        for key, value in updates.items():
            if hasattr(listing, key):
                setattr(listing, key, value)

        if slot_drafts is not None:
            existing = {slot.slot_time: slot for slot in listing.slots}
            wanted = {draft.slot_time for draft in slot_drafts}
            for instant, slot in existing.items():
                if instant not in wanted:
                    listing.slots.remove(slot)
            for draft in slot_drafts:
                if draft.slot_time not in existing:
                    listing.slots.append(AvailabilitySlot(slot_time=draft.slot_time, is_booked=False))

        db.commit()
        db.refresh(listing)
        return listing

    @staticmethod
    def add_slot(db: Session, listing: Listing, instant: datetime) -> AvailabilitySlot:
        slot = AvailabilitySlot(listing_id=listing.id, slot_time=instant, is_booked=False)
        db.add(slot)
        db.commit()
        db.refresh(slot)
        db.refresh(listing)
        return slot

    @staticmethod
    def get_slot(db: Session, listing_id: str, slot_id: str) -> Optional[AvailabilitySlot]:
        return (
            db.query(AvailabilitySlot)
            .filter(AvailabilitySlot.id == slot_id, AvailabilitySlot.listing_id == listing_id)
            .first()
        )

    @staticmethod
    def delete_slot(db: Session, listing: Listing, slot: AvailabilitySlot) -> None:
        listing.slots.remove(slot)
        db.commit()
        db.refresh(listing)

    @staticmethod
    def delete_listing(db: Session, listing: Listing) -> None:
        """Delete a listing; slots, reservations and messages cascade"""
        db.delete(listing)
        db.commit()
