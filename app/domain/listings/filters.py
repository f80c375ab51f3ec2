"""In-memory listing filters and derived slot sets"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from ...config import BOOKING_WINDOW_HOURS
from ...shared.time_window import (
    is_before_hours_before,
    is_future_date,
    is_past_cutoff_but_before_event,
)


@dataclass
class ListingFilter:
    menus: Optional[set[str]] = None  # None means "all"
    gender: str = "all"
    available_only: bool = False


def bookable_slots(listing, now: datetime, window_hours: float = BOOKING_WINDOW_HOURS) -> list:
    """Unbooked future slots that can still be booked directly"""
    return [
        slot
        for slot in listing.slots
        if not slot.is_booked
        and is_future_date(slot.slot_time, now)
        and is_before_hours_before(slot.slot_time, window_hours, now)
    ]


def consult_slots(listing, now: datetime, window_hours: float = BOOKING_WINDOW_HOURS) -> list:
    """Unbooked slots past the booking cutoff that have not started yet (chat only)"""
    return [
        slot
        for slot in listing.slots
        if not slot.is_booked and is_past_cutoff_but_before_event(slot.slot_time, window_hours, now)
    ]


def accepts_flexible_schedule(listing) -> bool:
    return bool((listing.flexible_schedule_text or "").strip())


def is_available(listing, now: datetime, window_hours: float = BOOKING_WINDOW_HOURS) -> bool:
    return (
        bool(bookable_slots(listing, now, window_hours))
        or bool(consult_slots(listing, now, window_hours))
        or accepts_flexible_schedule(listing)
    )


def matches(
    listing, listing_filter: ListingFilter, now: datetime, window_hours: float = BOOKING_WINDOW_HOURS
) -> bool:
    """Filter categories are AND-combined"""
    if listing_filter.menus and not listing_filter.menus.intersection(listing.menus or []):
        return False
    if listing_filter.gender != "all" and listing.gender_requirement != listing_filter.gender:
        return False
    if listing_filter.available_only and not is_available(listing, now, window_hours):
        return False
    return True


def apply_filters(
    listings: Iterable, listing_filter: ListingFilter, now: datetime, window_hours: float = BOOKING_WINDOW_HOURS
) -> list:
    return [listing for listing in listings if matches(listing, listing_filter, now, window_hours)]
