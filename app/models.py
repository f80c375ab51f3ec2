import uuid
from datetime import timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.types import TypeDecorator

from .database import Base
from .shared.time_window import ensure_aware, utcnow


def generate_id():
    """Generate a unique string ID"""
    return str(uuid.uuid4())


class UTCDateTime(TypeDecorator):
    """Stores instants as UTC and always returns timezone-aware datetimes."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return ensure_aware(value).astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return ensure_aware(value)


class Student(Base):
    __tablename__ = "students"

    # Same identity as the auth principal
    id = Column(String(36), primary_key=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=False)
    school_name = Column(String(255), nullable=True)
    instagram_url = Column(String(500), nullable=True)
    avatar_url = Column(String(500), nullable=True)
    is_verified = Column(Boolean, default=False, nullable=False)  # school email domain matched
    created_at = Column(UTCDateTime, default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow, nullable=False)

    reservations = relationship(
        "Reservation", back_populates="student", cascade="all, delete-orphan"
    )


class Salon(Base):
    __tablename__ = "salons"

    id = Column(String(36), primary_key=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    salon_name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    address = Column(String(500), nullable=True)
    phone_number = Column(String(50), nullable=True)
    photo_url = Column(String(500), nullable=True)
    created_at = Column(UTCDateTime, default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow, nullable=False)

    listings = relationship("Listing", back_populates="salon", cascade="all, delete-orphan")
    reservations = relationship(
        "Reservation", back_populates="salon", cascade="all, delete-orphan"
    )


class Listing(Base):
    """A salon's open call for student models"""

    __tablename__ = "listings"

    id = Column(String(36), primary_key=True, default=generate_id)
    salon_id = Column(String(36), ForeignKey("salons.id", ondelete="CASCADE"), index=True, nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    menus = Column(JSON, default=list, nullable=False)  # e.g. ["cut", "color"]
    gender_requirement = Column(String(20), default="any", nullable=False)
    hair_length_requirement = Column(String(20), default="any", nullable=False)
    treatment_duration = Column(String(100), nullable=True)  # free text, e.g. "about 2 hours"
    photo_shoot_requirement = Column(String(20), default="none", nullable=False)
    model_experience_requirement = Column(String(20), default="any", nullable=False)
    payment_type = Column(String(10), default="free", nullable=False)  # free, paid
    payment_amount = Column(Integer, nullable=True)  # yen, only when paid
    has_reward = Column(Boolean, default=False, nullable=False)
    reward_details = Column(Text, nullable=True)
    flexible_schedule_text = Column(Text, nullable=True)  # negotiated via chat
    deadline = Column(Date, nullable=True)  # day-granular application deadline
    status = Column(String(20), default="active", index=True, nullable=False)  # active, closed
    created_at = Column(UTCDateTime, default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow, nullable=False)

    salon = relationship("Salon", back_populates="listings")
    slots = relationship(
        "AvailabilitySlot",
        back_populates="listing",
        cascade="all, delete-orphan",
        order_by="AvailabilitySlot.slot_time",
    )
    reservations = relationship(
        "Reservation", back_populates="listing", cascade="all, delete-orphan"
    )


class AvailabilitySlot(Base):
    __tablename__ = "available_slots"
    __table_args__ = (UniqueConstraint("listing_id", "slot_time", name="uq_slot_listing_time"),)

    id = Column(String(36), primary_key=True, default=generate_id)
    listing_id = Column(
        String(36), ForeignKey("listings.id", ondelete="CASCADE"), index=True, nullable=False
    )
    slot_time = Column(UTCDateTime, nullable=False)
    is_booked = Column(Boolean, default=False, nullable=False)

    listing = relationship("Listing", back_populates="slots")


class Reservation(Base):
    __tablename__ = "reservations"

    id = Column(String(36), primary_key=True, default=generate_id)
    listing_id = Column(
        String(36), ForeignKey("listings.id", ondelete="CASCADE"), index=True, nullable=False
    )
    # Null for flexible-schedule reservations and once the slot row is gone
    slot_id = Column(String(36), ForeignKey("available_slots.id", ondelete="SET NULL"), nullable=True)
    student_id = Column(
        String(36), ForeignKey("students.id", ondelete="CASCADE"), index=True, nullable=False
    )
    salon_id = Column(
        String(36), ForeignKey("salons.id", ondelete="CASCADE"), index=True, nullable=False
    )
    reservation_datetime = Column(UTCDateTime, nullable=False)
    message = Column(Text, nullable=True)
    # pending, confirmed, cancelled_by_salon, cancelled_by_student
    status = Column(String(30), default="pending", index=True, nullable=False)
    cancellation_reason = Column(Text, nullable=True)
    created_at = Column(UTCDateTime, default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow, nullable=False)

    listing = relationship("Listing", back_populates="reservations")
    slot = relationship("AvailabilitySlot")
    student = relationship("Student", back_populates="reservations")
    salon = relationship("Salon", back_populates="reservations")
    messages = relationship(
        "ReservationMessage",
        back_populates="reservation",
        cascade="all, delete-orphan",
        order_by="ReservationMessage.created_at",
    )


class ReservationMessage(Base):
    """Append-only chat message between the two parties of a reservation"""

    __tablename__ = "reservation_messages"

    id = Column(String(36), primary_key=True, default=generate_id)
    reservation_id = Column(
        String(36), ForeignKey("reservations.id", ondelete="CASCADE"), index=True, nullable=False
    )
    sender_id = Column(String(36), nullable=False)
    sender_type = Column(String(10), nullable=False)  # student, salon
    message = Column(Text, nullable=False)
    created_at = Column(UTCDateTime, default=utcnow, index=True, nullable=False)

    reservation = relationship("Reservation", back_populates="messages")
