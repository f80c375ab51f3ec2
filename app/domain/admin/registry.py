"""Tables exposed in the admin browser"""

from dataclasses import dataclass

from ...models import AvailabilitySlot, Listing, Reservation, ReservationMessage, Salon, Student

ROW_LIMIT = 500


@dataclass(frozen=True)
class AdminTable:
    key: str
    label: str
    model: type
    default_sort: str = "created_at"
    default_direction: str = "desc"

    @property
    def columns(self) -> list[str]:
        return [column.name for column in self.model.__table__.columns]


ADMIN_TABLES = [
    AdminTable("students", "Students", Student),
    AdminTable("salons", "Salons", Salon),
    AdminTable("listings", "Listings", Listing),
    AdminTable("available_slots", "Availability slots", AvailabilitySlot, default_sort="slot_time"),
    AdminTable("reservations", "Reservations", Reservation),
    AdminTable("reservation_messages", "Messages", ReservationMessage),
]

TABLES_BY_KEY = {table.key: table for table in ADMIN_TABLES}
