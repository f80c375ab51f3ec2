"""Listing domain schemas - Pydantic models for validation"""

from datetime import date, datetime, time
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ...shared.time_window import SALON_TZ

MenuType = Literal[
    "cut",
    "color",
    "perm",
    "treatment",
    "straight",
    "hair_set",
    "head_spa",
    "hair_straightening",
    "extensions",
    "other",
]
GenderRequirement = Literal["male", "female", "any"]
HairLengthRequirement = Literal["short", "bob", "medium", "long", "any"]
PhotoShootRequirement = Literal["required", "optional", "none"]
ExperienceRequirement = Literal["any", "experienced", "beginner"]
PaymentType = Literal["free", "paid"]
ListingStatus = Literal["active", "closed"]
FormStep = Literal["info", "compensation", "schedule"]

MENU_OPTIONS = MenuType.__args__
GENDER_OPTIONS = GenderRequirement.__args__


class AvailableDateIn(BaseModel):
    """A slot instant; naive values are read as salon-local time"""

    slot_time: datetime = Field(alias="datetime")
    is_booked: bool = False  # informational, the stored flag always wins

    @field_validator("slot_time")
    @classmethod
    def attach_salon_timezone(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=SALON_TZ)
        return v

    class Config:
        populate_by_name = True


class ListingCreate(BaseModel):
    """Schema for creating a new listing"""

    title: str
    description: Optional[str] = None
    menus: list[MenuType]
    gender_requirement: GenderRequirement = "any"
    hair_length_requirement: HairLengthRequirement = "any"
    treatment_duration: Optional[str] = None
    photo_shoot_requirement: PhotoShootRequirement = "none"
    model_experience_requirement: ExperienceRequirement = "any"
    payment_type: PaymentType = "free"
    payment_amount: Optional[int] = None
    has_reward: bool = False
    reward_details: Optional[str] = None
    available_dates: list[AvailableDateIn] = []
    flexible_schedule_text: Optional[str] = None
    deadline: Optional[date] = None
    status: ListingStatus = "active"

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Title is required")
        return v.strip()

    @field_validator("menus")
    @classmethod
    def validate_menus(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("Select at least one menu")
        return list(dict.fromkeys(v))

    @model_validator(mode="after")
    def validate_listing(self):
        if self.payment_type == "paid":
            if not self.payment_amount or self.payment_amount <= 0:
                raise ValueError("Paid listings need a payment amount greater than 0")
        else:
            self.payment_amount = None
        if not self.has_reward:
            self.reward_details = None
        if not self.available_dates and not (self.flexible_schedule_text or "").strip():
            raise ValueError("Add at least one available date or describe the schedule in text")
        return self


class ListingUpdate(BaseModel):
    """Schema for updating a listing; available_dates replaces the whole slot collection"""

    title: Optional[str] = None
    description: Optional[str] = None
    menus: Optional[list[MenuType]] = None
    gender_requirement: Optional[GenderRequirement] = None
    hair_length_requirement: Optional[HairLengthRequirement] = None
    treatment_duration: Optional[str] = None
    photo_shoot_requirement: Optional[PhotoShootRequirement] = None
    model_experience_requirement: Optional[ExperienceRequirement] = None
    payment_type: Optional[PaymentType] = None
    payment_amount: Optional[int] = None
    has_reward: Optional[bool] = None
    reward_details: Optional[str] = None
    available_dates: Optional[list[AvailableDateIn]] = None
    flexible_schedule_text: Optional[str] = None
    deadline: Optional[date] = None


class ListingStatusUpdate(BaseModel):
    status: ListingStatus
    confirm: bool = False


class SlotAddRequest(BaseModel):
    """A salon-local calendar date plus wall-clock time"""

    slot_date: date = Field(alias="date")
    slot_clock_time: time = Field(alias="time")

    class Config:
        populate_by_name = True


class StepValidationRequest(BaseModel):
    step: FormStep
    data: dict


class StepValidationResponse(BaseModel):
    step: FormStep
    valid: bool
    errors: list[str]


class SlotResponse(BaseModel):
    id: str
    slot_time: datetime
    is_booked: bool

    class Config:
        from_attributes = True


class SalonSummary(BaseModel):
    id: str
    salon_name: str
    address: Optional[str] = None
    photo_url: Optional[str] = None

    class Config:
        from_attributes = True


class ListingResponse(BaseModel):
    """Schema for listing response"""

    id: str
    salon_id: str
    title: str
    description: Optional[str]
    menus: list[str]
    gender_requirement: str
    hair_length_requirement: str
    treatment_duration: Optional[str]
    photo_shoot_requirement: str
    model_experience_requirement: str
    payment_type: str
    payment_amount: Optional[int]
    has_reward: bool
    reward_details: Optional[str]
    flexible_schedule_text: Optional[str]
    deadline: Optional[date]
    status: str
    slots: list[SlotResponse]
    salon: Optional[SalonSummary] = None
    available_slot_count: int = 0
    is_available: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ListingDetailResponse(ListingResponse):
    bookable_slots: list[SlotResponse]
    consult_slots: list[SlotResponse]
    accepts_flexible_schedule: bool
    is_deadline_passed: bool
    days_until_deadline: Optional[int] = None
