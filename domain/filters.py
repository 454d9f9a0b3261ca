"""Composable search predicates.

Each function builds one filter dimension; ``all_of`` combines them with a
logical AND and ``any_of`` with a logical OR. Repositories accept the
combined predicate.
"""
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Iterable, Optional
from uuid import UUID

from domain.entities import Hotel, Room, Reservation
from domain.enums import ReservationStatus, RoomType
from domain.value_objects import StayPeriod

ReservationPredicate = Callable[[Reservation], bool]
HotelPredicate = Callable[[Hotel], bool]
RoomPredicate = Callable[[Room], bool]


def _contains(haystack: Optional[str], needle: str) -> bool:
    return needle.lower() in (haystack or "").lower()


def all_of(*predicates: Callable[[Any], bool]) -> Callable[[Any], bool]:
    return lambda item: all(p(item) for p in predicates)


def any_of(*predicates: Callable[[Any], bool]) -> Callable[[Any], bool]:
    return lambda item: any(p(item) for p in predicates)


# ==================== RESERVATIONS ====================

def booked_by(user_id: UUID) -> ReservationPredicate:
    return lambda r: r.user_id == user_id


def for_room(room_id: UUID) -> ReservationPredicate:
    return lambda r: r.room_id == room_id


def for_rooms(room_ids: Iterable[UUID]) -> ReservationPredicate:
    ids = frozenset(room_ids)
    return lambda r: r.room_id in ids


def with_status(status: ReservationStatus) -> ReservationPredicate:
    return lambda r: r.status == status


def active() -> ReservationPredicate:
    return lambda r: r.is_active()


def checking_in_from(instant: datetime) -> ReservationPredicate:
    return lambda r: r.stay.check_in >= instant


def checking_out_by(instant: datetime) -> ReservationPredicate:
    return lambda r: r.stay.check_out <= instant


def overlapping(stay: StayPeriod) -> ReservationPredicate:
    return lambda r: r.stay.overlaps(stay)


def intersecting(start: datetime, end: datetime) -> ReservationPredicate:
    """Like overlapping, for a raw [start, end) range that may be empty"""
    return lambda r: r.stay.check_in < end and start < r.stay.check_out


def blocking(room_id: UUID, stay: StayPeriod) -> ReservationPredicate:
    """Active reservations on room_id whose stay intersects stay"""
    return lambda r: r.blocks(room_id, stay)


# ==================== HOTELS ====================

def owned_by(owner_id: UUID) -> HotelPredicate:
    return lambda h: h.owner_id == owner_id


def hotel_text(search: str, fields=("name", "description", "city")) -> HotelPredicate:
    """Case-insensitive substring match on any of the given fields"""
    return lambda h: any(_contains(getattr(h, f), search) for f in fields)


def in_city(city: str) -> HotelPredicate:
    return lambda h: _contains(h.city, city)


def in_country(country: str) -> HotelPredicate:
    return lambda h: _contains(h.country, country)


def rated_at_least(rating: Decimal) -> HotelPredicate:
    return lambda h: h.rating is not None and h.rating >= rating


# ==================== ROOMS ====================

def in_hotel(hotel_id: UUID) -> RoomPredicate:
    return lambda r: r.hotel_id == hotel_id


def in_hotels(hotel_ids: Iterable[UUID]) -> RoomPredicate:
    ids = frozenset(hotel_ids)
    return lambda r: r.hotel_id in ids


def room_text(search: str) -> RoomPredicate:
    return lambda r: _contains(r.name, search) or _contains(r.description, search)


def of_type(room_type: RoomType) -> RoomPredicate:
    return lambda r: r.room_type == room_type


def priced_from(min_price: Decimal) -> RoomPredicate:
    return lambda r: r.price_per_night >= min_price


def priced_up_to(max_price: Decimal) -> RoomPredicate:
    return lambda r: r.price_per_night <= max_price


def hosting_at_least(guests: int) -> RoomPredicate:
    return lambda r: r.capacity >= guests


def availability_flag(is_available: bool) -> RoomPredicate:
    return lambda r: r.is_available == is_available
