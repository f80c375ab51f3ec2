"""Account domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_instagram_url, validate_jp_phone, validate_url


class StudentProfile(BaseModel):
    id: str
    email: str
    name: str
    school_name: Optional[str] = None
    instagram_url: Optional[str] = None
    avatar_url: Optional[str] = None
    is_verified: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SalonProfile(BaseModel):
    id: str
    email: str
    salon_name: str
    description: Optional[str] = None
    address: Optional[str] = None
    phone_number: Optional[str] = None
    photo_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SessionResponse(BaseModel):
    id: str
    email: str
    user_type: str
    is_admin: bool
    profile: Union[StudentProfile, SalonProfile]


class StudentUpdate(BaseModel):
    """Schema for updating a student profile"""

    name: Optional[str] = None
    school_name: Optional[str] = None
    instagram_url: Optional[str] = None
    avatar_url: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if v is None or not v.strip():
            raise ValueError("Name cannot be empty")
        return v.strip()

    @field_validator("instagram_url")
    @classmethod
    def validate_instagram(cls, v):
        return validate_instagram_url(v)

    @field_validator("avatar_url")
    @classmethod
    def validate_avatar(cls, v):
        return validate_url(v)


class SalonUpdate(BaseModel):
    """Schema for updating a salon profile"""

    salon_name: Optional[str] = None
    description: Optional[str] = None
    address: Optional[str] = None
    phone_number: Optional[str] = None
    photo_url: Optional[str] = None

    @field_validator("salon_name")
    @classmethod
    def validate_salon_name(cls, v):
        if v is None or not v.strip():
            raise ValueError("Salon name cannot be empty")
        return v.strip()

    @field_validator("phone_number")
    @classmethod
    def validate_phone(cls, v):
        return validate_jp_phone(v)

    @field_validator("photo_url")
    @classmethod
    def validate_photo(cls, v):
        return validate_url(v)
