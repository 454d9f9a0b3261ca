"""Domain Entities - Aggregates"""
from pydantic import BaseModel, Field
from uuid import UUID, uuid4
from datetime import datetime
from typing import Optional, List
from decimal import Decimal

from domain.enums import ReservationStatus, UserRole, RoomType, ACTIVE_STATUSES, STATUS_TRANSITIONS
from domain.value_objects import StayPeriod, Principal, utc_now


class User(BaseModel):
    """User Entity"""
    user_id: UUID = Field(default_factory=uuid4)
    email: str
    first_name: str
    last_name: str
    role: UserRole = UserRole.CLIENT
    hashed_password: str
    created_at: datetime = Field(default_factory=utc_now)

    class Config:
        from_attributes = True

    def to_principal(self) -> Principal:
        return Principal(user_id=self.user_id, email=self.email, role=self.role)

    def rename(self, first_name: Optional[str] = None, last_name: Optional[str] = None) -> None:
        if first_name:
            self.first_name = first_name
        if last_name:
            self.last_name = last_name


class Hotel(BaseModel):
    """Hotel Entity"""
    hotel_id: UUID = Field(default_factory=uuid4)
    owner_id: UUID
    name: str
    description: str = ""
    address: str = ""
    city: str
    country: str
    rating: Optional[Decimal] = None
    amenities: List[str] = []
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    class Config:
        from_attributes = True

    def is_owned_by(self, user_id: UUID) -> bool:
        return self.owner_id == user_id

    def touch(self) -> None:
        self.updated_at = utc_now()


class Room(BaseModel):
    """Room Entity"""
    room_id: UUID = Field(default_factory=uuid4)
    hotel_id: UUID
    name: str
    description: str = ""
    room_type: RoomType = RoomType.DOUBLE
    price_per_night: Decimal = Field(gt=0)
    capacity: int = Field(gt=0)
    amenities: List[str] = []
    # Room-level switch, independent of date-specific bookings
    is_available: bool = True
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    class Config:
        from_attributes = True

    def can_host(self, guest_count: int) -> bool:
        return guest_count <= self.capacity

    def touch(self) -> None:
        self.updated_at = utc_now()


class Reservation(BaseModel):
    """Reservation Aggregate Root Entity"""

    # Identity
    reservation_id: UUID = Field(default_factory=uuid4)

    # References to other aggregates
    room_id: UUID
    user_id: UUID

    stay: StayPeriod
    guest_count: int = Field(gt=0)
    total_price: Decimal
    status: ReservationStatus = ReservationStatus.PENDING
    special_requests: Optional[str] = None

    # Metadata
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    class Config:
        from_attributes = True

    # ==================== FACTORY METHOD ====================
    @staticmethod
    def create(
        room_id: UUID,
        user_id: UUID,
        stay: StayPeriod,
        guest_count: int,
        price_per_night: Decimal,
        special_requests: Optional[str] = None
    ) -> "Reservation":
        """Create a pending reservation priced from the room's nightly rate"""
        return Reservation(
            room_id=room_id,
            user_id=user_id,
            stay=stay,
            guest_count=guest_count,
            total_price=stay.price_for(price_per_night),
            status=ReservationStatus.PENDING,
            special_requests=special_requests
        )

    # ==================== MODIFICATION METHODS ====================
    def reschedule(self, stay: StayPeriod, price_per_night: Decimal) -> None:
        """Move the stay and reprice it"""
        self.stay = stay
        self.total_price = stay.price_for(price_per_night)
        self._touch()

    def change_guest_count(self, guest_count: int) -> None:
        # Capacity is only enforced when the reservation is created
        if guest_count <= 0:
            raise ValueError("Guest count must be positive")
        self.guest_count = guest_count
        self._touch()

    def change_special_requests(self, special_requests: Optional[str]) -> None:
        self.special_requests = special_requests
        self._touch()

    def change_status(self, status: ReservationStatus) -> None:
        if not self.can_transition_to(status):
            raise ValueError(f"Cannot change status from {self.status.value} to {status.value}")
        self.status = status
        self._touch()

    def cancel(self) -> None:
        """Soft delete from any status; cancelling twice is allowed"""
        self.status = ReservationStatus.CANCELLED
        self._touch()

    # ==================== QUERY METHODS ====================
    def can_transition_to(self, status: ReservationStatus) -> bool:
        """Keeping the current status is not a transition and always allowed"""
        return status == self.status or status in STATUS_TRANSITIONS[self.status]

    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    def blocks(self, room_id: UUID, stay: StayPeriod) -> bool:
        """Check if this reservation prevents booking room_id for stay"""
        return self.room_id == room_id and self.is_active() and self.stay.overlaps(stay)

    def get_nights(self) -> int:
        return self.stay.nights()

    def _touch(self) -> None:
        self.updated_at = utc_now()
