"""Domain Enums"""
from enum import Enum


class ReservationStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


# Statuses that block new bookings on the same room
ACTIVE_STATUSES = frozenset({ReservationStatus.PENDING, ReservationStatus.CONFIRMED})

# Statuses only a hotel owner or an administrator may set
MANAGED_STATUSES = frozenset({ReservationStatus.CONFIRMED, ReservationStatus.COMPLETED})

# Status changes allowed through an update; CANCELLED and COMPLETED are final
STATUS_TRANSITIONS = {
    ReservationStatus.PENDING: frozenset({ReservationStatus.CONFIRMED, ReservationStatus.CANCELLED}),
    ReservationStatus.CONFIRMED: frozenset({ReservationStatus.COMPLETED, ReservationStatus.CANCELLED}),
    ReservationStatus.CANCELLED: frozenset(),
    ReservationStatus.COMPLETED: frozenset(),
}


class UserRole(str, Enum):
    CLIENT = "CLIENT"
    HOTEL_OWNER = "HOTEL_OWNER"
    ADMIN = "ADMIN"


class RoomType(str, Enum):
    SINGLE = "SINGLE"
    DOUBLE = "DOUBLE"
    TWIN = "TWIN"
    SUITE = "SUITE"
    DELUXE = "DELUXE"
    PENTHOUSE = "PENTHOUSE"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class ReservationSortField(str, Enum):
    CHECK_IN_DATE = "checkInDate"
    CHECK_OUT_DATE = "checkOutDate"
    TOTAL_PRICE = "totalPrice"
    CREATED_AT = "createdAt"
    STATUS = "status"


class HotelSortField(str, Enum):
    NAME = "name"
    RATING = "rating"
    CREATED_AT = "createdAt"
    CITY = "city"


class RoomSortField(str, Enum):
    NAME = "name"
    PRICE_PER_NIGHT = "pricePerNight"
    CAPACITY = "capacity"
    CREATED_AT = "createdAt"
    ROOM_TYPE = "roomType"
