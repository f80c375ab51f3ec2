"""Time-window rules for booking, cancellation and listing deadlines.

Every predicate takes an optional ``now`` so callers (and tests) control the
clock; when omitted the current UTC time is used. Inputs may be naive, in
which case they are treated as UTC.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Callable, Optional, Union

from ..config import SALON_UTC_OFFSET_HOURS

SALON_TZ = timezone(timedelta(hours=SALON_UTC_OFFSET_HOURS))

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def get_clock() -> Clock:
    """FastAPI dependency returning the clock used by time-window checks"""
    return utcnow


def ensure_aware(value: datetime) -> datetime:
    """Attach UTC to naive datetimes, leave aware ones untouched."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _now(now: Optional[datetime]) -> datetime:
    return ensure_aware(now) if now is not None else utcnow()


def combine_salon_datetime(day: Union[date, str], clock_time: Union[time, str]) -> datetime:
    """
    Combine a calendar date and a wall-clock time into an instant in the salon
    timezone, regardless of where the request came from.

    Accepts ``date``/``time`` objects or ``YYYY-MM-DD`` / ``HH:MM`` strings.
    """
    if isinstance(day, str):
        day = date.fromisoformat(day)
    if isinstance(clock_time, str):
        clock_time = time.fromisoformat(clock_time)
    return datetime.combine(day, clock_time.replace(tzinfo=None), tzinfo=SALON_TZ)


def to_salon_time(value: datetime) -> datetime:
    return ensure_aware(value).astimezone(SALON_TZ)


def is_future_date(target: datetime, now: Optional[datetime] = None) -> bool:
    """True iff target is strictly later than now."""
    return ensure_aware(target) > _now(now)


def is_before_hours_before(target: datetime, hours: float, now: Optional[datetime] = None) -> bool:
    """True iff now is strictly before (target - hours): the window is still open."""
    cutoff = ensure_aware(target) - timedelta(hours=hours)
    return _now(now) < cutoff


def is_past_cutoff_but_before_event(
    target: datetime, hours: float, now: Optional[datetime] = None
) -> bool:
    """True iff (target - hours) <= now < target: too late to book, event not started."""
    target = ensure_aware(target)
    current = _now(now)
    cutoff = target - timedelta(hours=hours)
    return cutoff <= current < target


def end_of_salon_day(deadline: Union[date, datetime]) -> datetime:
    if isinstance(deadline, datetime):
        deadline = to_salon_time(deadline).date()
    return datetime.combine(deadline, time.max, tzinfo=SALON_TZ)


def is_deadline_passed(deadline: Union[date, datetime], now: Optional[datetime] = None) -> bool:
    """
    Deadlines are day-granular: a deadline only passes once the whole calendar
    day (salon timezone) is over, not at the instant itself.
    """
    return _now(now) > end_of_salon_day(deadline)


def days_until_deadline(deadline: Union[date, datetime], now: Optional[datetime] = None) -> int:
    """Whole salon-calendar days left until the deadline day (0 on the day itself)."""
    if isinstance(deadline, datetime):
        deadline = to_salon_time(deadline).date()
    today = to_salon_time(_now(now)).date()
    return (deadline - today).days
