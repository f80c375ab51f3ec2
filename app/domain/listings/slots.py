"""
Availability slot editing.

A listing owns an ordered collection of slot instants, each flagged booked or
not. The editor keeps that collection sorted ascending after every change,
treats instants as a set, and refuses to drop a booked slot.
"""

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Iterable, Optional, Union

from ...shared.time_window import combine_salon_datetime, ensure_aware


class SlotEditError(ValueError):
    """An edit that must not be applied"""


class BookedSlotRemovedError(SlotEditError):
    def __init__(self, missing: list[datetime]):
        self.missing = missing
        listed = ", ".join(instant.isoformat() for instant in missing)
        super().__init__(f"Booked slots cannot be removed: {listed}")


@dataclass(frozen=True)
class SlotDraft:
    slot_time: datetime
    is_booked: bool = False
    id: Optional[str] = None

    @classmethod
    def of(cls, slot) -> "SlotDraft":
        """Build from anything exposing slot_time / is_booked (ORM rows included)"""
        if isinstance(slot, SlotDraft):
            return slot
        return cls(
            slot_time=ensure_aware(slot.slot_time),
            is_booked=bool(getattr(slot, "is_booked", False)),
            id=getattr(slot, "id", None),
        )


class SlotEditor:
    def __init__(self, slots: Iterable = ()):
        self._slots: list[SlotDraft] = []
        for slot in slots:
            self._insert(SlotDraft.of(slot))

    @property
    def slots(self) -> list[SlotDraft]:
        return list(self._slots)

    def __len__(self) -> int:
        return len(self._slots)

    def find(self, instant: datetime) -> Optional[SlotDraft]:
        instant = ensure_aware(instant)
        for slot in self._slots:
            if slot.slot_time == instant:
                return slot
        return None

    def booked_instants(self) -> set[datetime]:
        return {slot.slot_time for slot in self._slots if slot.is_booked}

    def add(self, day: Union[date, str], clock_time: Union[time, str]) -> SlotDraft:
        """Add a slot from a salon-local calendar date and wall-clock time"""
        return self.add_instant(combine_salon_datetime(day, clock_time))

    def add_instant(self, instant: datetime, is_booked: bool = False) -> SlotDraft:
        instant = ensure_aware(instant)
        if self.find(instant) is not None:
            raise SlotEditError("The same date and time has already been added")
        slot = SlotDraft(slot_time=instant, is_booked=is_booked)
        self._insert(slot)
        return slot

    def remove(self, instant: datetime) -> Optional[SlotDraft]:
        """Remove the slot at instant; booked slots are refused, unknown ones ignored"""
        slot = self.find(instant)
        if slot is None:
            return None
        if slot.is_booked:
            raise SlotEditError("Booked slots cannot be removed")
        self._slots.remove(slot)
        return slot

    def _insert(self, slot: SlotDraft) -> None:
        self._slots.append(slot)
        self._slots.sort(key=lambda s: s.slot_time)


def verify_booked_slots_preserved(original: Iterable, edited: Iterable) -> None:
    """
    Reject an edit that drops any slot that was booked before the edit.

    Raises:
        BookedSlotRemovedError: listing every booked instant missing from the edit
    """
    kept = {SlotDraft.of(slot).slot_time for slot in edited}
    missing = sorted(SlotEditor(original).booked_instants() - kept)
    if missing:
        raise BookedSlotRemovedError(missing)
