"""Dashboard schemas"""

from typing import Optional, Union

from pydantic import BaseModel

from ..accounts.schemas import SalonProfile, StudentProfile
from ..listings.schemas import ListingResponse
from ..messages.schemas import MessageResponse
from ..reservations.schemas import ReservationResponse


class DashboardReservation(ReservationResponse):
    latest_message: Optional[MessageResponse] = None
    has_unread: bool = False


class ReservationBuckets(BaseModel):
    pending: list[DashboardReservation]
    confirmed: list[DashboardReservation]
    other: list[DashboardReservation]


class DashboardResponse(BaseModel):
    user_type: str
    profile: Union[StudentProfile, SalonProfile]
    listings: list[ListingResponse] = []
    reservations: ReservationBuckets


class LatestMessageUpdate(BaseModel):
    reservation_id: str
    latest_message: Optional[MessageResponse] = None
    has_unread: bool
