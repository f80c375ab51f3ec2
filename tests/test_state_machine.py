from datetime import datetime, timedelta, timezone

import pytest

from app.domain.reservations.state_machine import (
    CancellationWindowClosedError,
    MissingCancellationReasonError,
    ReservationStatus,
    RoleNotAllowedError,
    TerminalStateError,
    TransitionNotAllowedError,
    check_transition,
    is_terminal,
)

NOW = datetime(2025, 6, 1, 3, 0, tzinfo=timezone.utc)
FAR = NOW + timedelta(days=7)


def transition(current, target, role, reservation_at=FAR, reason=None):
    return check_transition(
        current, target, role, reservation_at=reservation_at, now=NOW, cancellation_reason=reason
    )


@pytest.mark.parametrize(
    "current,target",
    [
        ("pending", "confirmed"),
        ("pending", "cancelled_by_salon"),
        ("confirmed", "cancelled_by_salon"),
    ],
)
def test_salon_transitions(current, target):
    assert transition(current, target, "salon") == ReservationStatus(target)


def test_student_can_cancel_confirmed_with_reason():
    result = transition("confirmed", "cancelled_by_student", "student", reason="I caught a cold")
    assert result == ReservationStatus.CANCELLED_BY_STUDENT


@pytest.mark.parametrize("terminal", ["cancelled_by_salon", "cancelled_by_student"])
@pytest.mark.parametrize("target", ["pending", "confirmed", "cancelled_by_salon", "cancelled_by_student"])
def test_terminal_states_accept_nothing(terminal, target):
    assert is_terminal(terminal)
    with pytest.raises(TerminalStateError):
        transition(terminal, target, "salon", reason="x")


def test_student_cannot_confirm():
    with pytest.raises(RoleNotAllowedError):
        transition("pending", "confirmed", "student")


def test_salon_cannot_cancel_as_student():
    with pytest.raises(RoleNotAllowedError):
        transition("confirmed", "cancelled_by_student", "salon", reason="x")


def test_pending_cannot_be_cancelled_by_student():
    with pytest.raises(TransitionNotAllowedError):
        transition("pending", "cancelled_by_student", "student", reason="x")


def test_confirmed_cannot_go_back_to_pending():
    with pytest.raises(TransitionNotAllowedError):
        transition("confirmed", "pending", "salon")


def test_student_cancellation_requires_reason():
    with pytest.raises(MissingCancellationReasonError):
        transition("confirmed", "cancelled_by_student", "student", reason="   ")


def test_student_cancellation_just_outside_window_succeeds():
    reservation_at = NOW + timedelta(hours=48, seconds=1)
    result = transition("confirmed", "cancelled_by_student", "student", reservation_at, reason="Exams")
    assert result == ReservationStatus.CANCELLED_BY_STUDENT


def test_student_cancellation_inside_window_is_refused():
    reservation_at = NOW + timedelta(hours=47, minutes=59)
    with pytest.raises(CancellationWindowClosedError, match="contact the salon"):
        transition("confirmed", "cancelled_by_student", "student", reservation_at, reason="Exams")


def test_salon_cancellation_ignores_window():
    reservation_at = NOW + timedelta(hours=1)
    assert transition("confirmed", "cancelled_by_salon", "salon", reservation_at) == ReservationStatus.CANCELLED_BY_SALON
