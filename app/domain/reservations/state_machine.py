"""
Reservation lifecycle.

    pending   -> confirmed            (salon)
    pending   -> cancelled_by_salon   (salon)
    confirmed -> cancelled_by_salon   (salon)
    confirmed -> cancelled_by_student (student, reason required, window open)

Both cancellation states are terminal.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from ...config import BOOKING_WINDOW_HOURS
from ...shared.time_window import is_before_hours_before


class ReservationStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED_BY_SALON = "cancelled_by_salon"
    CANCELLED_BY_STUDENT = "cancelled_by_student"


TERMINAL_STATES = frozenset(
    {ReservationStatus.CANCELLED_BY_SALON, ReservationStatus.CANCELLED_BY_STUDENT}
)

# (current, target) -> role allowed to fire it
TRANSITIONS: dict[tuple[ReservationStatus, ReservationStatus], str] = {
    (ReservationStatus.PENDING, ReservationStatus.CONFIRMED): "salon",
    (ReservationStatus.PENDING, ReservationStatus.CANCELLED_BY_SALON): "salon",
    (ReservationStatus.CONFIRMED, ReservationStatus.CANCELLED_BY_SALON): "salon",
    (ReservationStatus.CONFIRMED, ReservationStatus.CANCELLED_BY_STUDENT): "student",
}

NOTIFICATION_EVENTS = {
    ReservationStatus.PENDING: "reservation_pending",
    ReservationStatus.CONFIRMED: "reservation_confirmed",
    ReservationStatus.CANCELLED_BY_SALON: "reservation_cancelled_by_salon",
    ReservationStatus.CANCELLED_BY_STUDENT: "reservation_cancelled_by_student",
}


class TransitionError(Exception):
    status_code = 409


class TerminalStateError(TransitionError):
    def __init__(self, current: ReservationStatus):
        super().__init__(f"Reservation is already {current.value}; no further changes are possible")


class TransitionNotAllowedError(TransitionError):
    def __init__(self, current: ReservationStatus, target: ReservationStatus, role: Optional[str] = None):
        if role:
            message = f"A {role} cannot change a {current.value} reservation to {target.value}"
        else:
            message = f"Cannot change a {current.value} reservation to {target.value}"
        super().__init__(message)


class RoleNotAllowedError(TransitionNotAllowedError):
    status_code = 403


class MissingCancellationReasonError(TransitionError):
    status_code = 400

    def __init__(self):
        super().__init__("Please enter a cancellation reason")


class CancellationWindowClosedError(TransitionError):
    status_code = 400

    def __init__(self, window_hours: float):
        super().__init__(
            f"Cancellations within {window_hours:g} hours of the appointment are not accepted here. "
            "Please contact the salon directly."
        )


def is_terminal(status) -> bool:
    """Terminal states are exactly the two cancellations"""
    return ReservationStatus(status) in TERMINAL_STATES


def check_transition(
    current,
    target,
    actor_role: str,
    *,
    reservation_at: datetime,
    now: Optional[datetime] = None,
    cancellation_reason: Optional[str] = None,
    window_hours: float = BOOKING_WINDOW_HOURS,
) -> ReservationStatus:
    """
    Validate a status change and return the target status.

    Raises:
        TerminalStateError: current status is a cancellation
        TransitionNotAllowedError: no such edge in the lifecycle
        RoleNotAllowedError: the edge exists but belongs to the other party
        MissingCancellationReasonError: student cancellation without a reason
        CancellationWindowClosedError: student cancellation at or after the cutoff
    """
    current = ReservationStatus(current)
    target = ReservationStatus(target)

    if current in TERMINAL_STATES:
        raise TerminalStateError(current)

    allowed_role = TRANSITIONS.get((current, target))
    if allowed_role is None:
        raise TransitionNotAllowedError(current, target)
    if allowed_role != actor_role:
        raise RoleNotAllowedError(current, target, actor_role)

    if target == ReservationStatus.CANCELLED_BY_STUDENT:
        if not (cancellation_reason or "").strip():
            raise MissingCancellationReasonError()
        if not is_before_hours_before(reservation_at, window_hours, now):
            raise CancellationWindowClosedError(window_hours)

    return target
