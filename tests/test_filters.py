from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

from app.domain.listings.filters import (
    ListingFilter,
    apply_filters,
    bookable_slots,
    consult_slots,
    is_available,
)

NOW = datetime(2025, 6, 1, 3, 0, tzinfo=timezone.utc)


def slot(hours, booked=False):
    return SimpleNamespace(slot_time=NOW + timedelta(hours=hours), is_booked=booked)


def listing(menus=("cut",), gender="any", slots=(), flexible=None):
    return SimpleNamespace(
        menus=list(menus),
        gender_requirement=gender,
        slots=list(slots),
        flexible_schedule_text=flexible,
    )


def test_bookable_and_consult_slots_are_disjoint():
    item = listing(slots=[slot(-2), slot(10), slot(47), slot(49), slot(72, booked=True), slot(96)])
    bookable = bookable_slots(item, NOW)
    consult = consult_slots(item, NOW)
    assert [s.slot_time for s in bookable] == [NOW + timedelta(hours=49), NOW + timedelta(hours=96)]
    assert [s.slot_time for s in consult] == [NOW + timedelta(hours=10), NOW + timedelta(hours=47)]
    assert not set(map(id, bookable)) & set(map(id, consult))


def test_flexible_text_keeps_listing_available():
    assert is_available(listing(flexible="Weekday evenings, ask in chat"), NOW)
    assert not is_available(listing(flexible="   "), NOW)
    assert not is_available(listing(slots=[slot(-5), slot(60, booked=True)]), NOW)


def test_menu_filter_matches_any_selected_menu():
    cut = listing(menus=["cut"])
    color = listing(menus=["color", "treatment"])
    perm = listing(menus=["perm"])
    result = apply_filters([cut, color, perm], ListingFilter(menus={"cut", "treatment"}), NOW)
    assert result == [cut, color]


def test_gender_filter_is_exact():
    female = listing(gender="female")
    anyone = listing(gender="any")
    assert apply_filters([female, anyone], ListingFilter(gender="female"), NOW) == [female]
    assert apply_filters([female, anyone], ListingFilter(), NOW) == [female, anyone]


def test_filters_are_combined():
    match = listing(menus=["cut"], gender="male", slots=[slot(72)])
    unavailable = listing(menus=["cut"], gender="male")
    wrong_gender = listing(menus=["cut"], gender="female", slots=[slot(72)])
    listing_filter = ListingFilter(menus={"cut"}, gender="male", available_only=True)
    assert apply_filters([match, unavailable, wrong_gender], listing_filter, NOW) == [match]
