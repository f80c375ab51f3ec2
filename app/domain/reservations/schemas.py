"""Reservation domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, field_validator

from ...shared.time_window import SALON_TZ
from ..listings.schemas import SalonSummary

ReservationStatusValue = Literal["pending", "confirmed", "cancelled_by_salon", "cancelled_by_student"]


class ReservationCreate(BaseModel):
    listing_id: str
    reservation_datetime: datetime
    message: Optional[str] = None

    @field_validator("reservation_datetime")
    @classmethod
    def attach_salon_timezone(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=SALON_TZ)
        return v


class ReservationStatusUpdate(BaseModel):
    status: ReservationStatusValue
    confirm: bool = False
    cancellation_reason: Optional[str] = None


class StudentSummary(BaseModel):
    id: str
    name: str
    school_name: Optional[str] = None
    instagram_url: Optional[str] = None
    avatar_url: Optional[str] = None

    class Config:
        from_attributes = True


class ListingSummary(BaseModel):
    id: str
    title: str
    status: str

    class Config:
        from_attributes = True


class ReservationResponse(BaseModel):
    """Schema for reservation response"""

    id: str
    listing_id: str
    slot_id: Optional[str] = None
    student_id: str
    salon_id: str
    reservation_datetime: datetime
    message: Optional[str] = None
    status: ReservationStatusValue
    cancellation_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    listing: Optional[ListingSummary] = None
    student: Optional[StudentSummary] = None
    salon: Optional[SalonSummary] = None

    class Config:
        from_attributes = True


class SideEffectResponse(BaseModel):
    name: str
    ok: bool
    skipped: bool = False
    error: Optional[str] = None

    class Config:
        from_attributes = True


class ReservationActionResponse(BaseModel):
    """A completed reservation action and its best-effort follow-ups"""

    reservation: ReservationResponse
    side_effects: list[SideEffectResponse]
    partial_failure: bool
