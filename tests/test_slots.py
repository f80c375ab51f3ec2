from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from app.domain.listings.slots import (
    BookedSlotRemovedError,
    SlotDraft,
    SlotEditError,
    SlotEditor,
    verify_booked_slots_preserved,
)


def at(day, hour):
    return datetime(2025, 6, day, hour, 0, tzinfo=timezone.utc)


def test_slots_stay_sorted_after_every_add():
    editor = SlotEditor()
    editor.add_instant(at(5, 1))
    editor.add_instant(at(3, 1))
    editor.add("2025-06-04", "10:00")
    times = [slot.slot_time for slot in editor.slots]
    assert times == sorted(times)
    assert len(editor) == 3


def test_add_uses_salon_local_date_and_time():
    editor = SlotEditor()
    slot = editor.add("2025-06-05", "10:00")
    assert slot.slot_time == at(5, 1)
    assert not slot.is_booked


def test_duplicate_instant_is_rejected():
    editor = SlotEditor([SlotDraft(at(5, 1))])
    with pytest.raises(SlotEditError, match="already been added"):
        editor.add("2025-06-05", "10:00")
    assert len(editor) == 1


def test_booked_slot_cannot_be_removed():
    editor = SlotEditor([SlotDraft(at(5, 1), is_booked=True), SlotDraft(at(6, 1))])
    with pytest.raises(SlotEditError, match="Booked slots cannot be removed"):
        editor.remove(at(5, 1))
    assert editor.remove(at(6, 1)).slot_time == at(6, 1)
    assert [slot.slot_time for slot in editor.slots] == [at(5, 1)]


def test_removing_unknown_instant_is_ignored():
    editor = SlotEditor([SlotDraft(at(5, 1))])
    assert editor.remove(at(9, 1)) is None
    assert len(editor) == 1


def test_editor_accepts_orm_like_rows():
    rows = [SimpleNamespace(id="b", slot_time=at(6, 1), is_booked=True), SimpleNamespace(id="a", slot_time=at(5, 1), is_booked=False)]
    editor = SlotEditor(rows)
    assert [slot.id for slot in editor.slots] == ["a", "b"]
    assert editor.booked_instants() == {at(6, 1)}


def test_edit_dropping_booked_slot_is_rejected():
    original = [SlotDraft(at(5, 1), is_booked=True), SlotDraft(at(6, 1))]
    with pytest.raises(BookedSlotRemovedError) as excinfo:
        verify_booked_slots_preserved(original, [SlotDraft(at(6, 1))])
    assert excinfo.value.missing == [at(5, 1)]


def test_edit_keeping_booked_slots_passes():
    original = [SlotDraft(at(5, 1), is_booked=True), SlotDraft(at(6, 1))]
    verify_booked_slots_preserved(original, [SlotDraft(at(5, 1)), SlotDraft(at(7, 1))])
