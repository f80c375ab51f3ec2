"""Reservation message schemas"""

from datetime import datetime

from pydantic import BaseModel, field_validator


class MessageCreate(BaseModel):
    message: str

    @field_validator("message")
    @classmethod
    def validate_message(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Message cannot be empty")
        return v


class MessageResponse(BaseModel):
    id: str
    reservation_id: str
    sender_id: str
    sender_type: str
    message: str
    created_at: datetime

    class Config:
        from_attributes = True
