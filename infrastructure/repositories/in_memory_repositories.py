"""In-Memory Repository Implementations"""
from decimal import Decimal
from typing import Optional, List, Dict, Iterable
from uuid import UUID

from domain.repositories import UserRepository, HotelRepository, RoomRepository, ReservationRepository
from domain.entities import User, Hotel, Room, Reservation
from domain.enums import ReservationSortField, HotelSortField, RoomSortField
from domain.filters import ReservationPredicate, HotelPredicate, RoomPredicate

_RESERVATION_SORT_KEYS = {
    ReservationSortField.CHECK_IN_DATE: lambda r: r.stay.check_in,
    ReservationSortField.CHECK_OUT_DATE: lambda r: r.stay.check_out,
    ReservationSortField.TOTAL_PRICE: lambda r: r.total_price,
    ReservationSortField.CREATED_AT: lambda r: r.created_at,
    ReservationSortField.STATUS: lambda r: r.status.value,
}

_HOTEL_SORT_KEYS = {
    HotelSortField.NAME: lambda h: h.name.lower(),
    # Unrated hotels sort as the lowest rating
    HotelSortField.RATING: lambda h: h.rating if h.rating is not None else Decimal("-1"),
    HotelSortField.CREATED_AT: lambda h: h.created_at,
    HotelSortField.CITY: lambda h: h.city.lower(),
}

_ROOM_SORT_KEYS = {
    RoomSortField.NAME: lambda r: r.name.lower(),
    RoomSortField.PRICE_PER_NIGHT: lambda r: r.price_per_night,
    RoomSortField.CAPACITY: lambda r: r.capacity,
    RoomSortField.CREATED_AT: lambda r: r.created_at,
    RoomSortField.ROOM_TYPE: lambda r: r.room_type.value,
}


def _select(items, predicate, sort_key, descending, offset, limit):
    matches = [item for item in items if predicate(item)]
    matches.sort(key=sort_key, reverse=descending)
    end = None if limit is None else offset + limit
    return matches[offset:end]


class InMemoryUserRepository(UserRepository):
    """In-memory implementation of UserRepository"""

    def __init__(self):
        self._storage: Dict[UUID, User] = {}

    async def save(self, user: User) -> User:
        """Save user to memory"""
        self._storage[user.user_id] = user
        return user

    async def find_by_id(self, user_id: UUID) -> Optional[User]:
        return self._storage.get(user_id)

    async def find_by_email(self, email: str) -> Optional[User]:
        wanted = email.lower()
        for user in self._storage.values():
            if user.email.lower() == wanted:
                return user
        return None

    async def update(self, user: User) -> User:
        if user.user_id in self._storage:
            self._storage[user.user_id] = user
            return user
        raise ValueError("User not found")


class InMemoryHotelRepository(HotelRepository):
    """In-memory implementation of HotelRepository"""

    def __init__(self):
        self._storage: Dict[UUID, Hotel] = {}

    async def save(self, hotel: Hotel) -> Hotel:
        self._storage[hotel.hotel_id] = hotel
        return hotel

    async def find_by_id(self, hotel_id: UUID) -> Optional[Hotel]:
        return self._storage.get(hotel_id)

    async def find_by_owner(self, owner_id: UUID) -> List[Hotel]:
        return [h for h in self._storage.values() if h.owner_id == owner_id]

    async def find_matching(
        self,
        predicate: HotelPredicate,
        sort_by: str = "createdAt",
        descending: bool = False,
        offset: int = 0,
        limit: Optional[int] = None
    ) -> List[Hotel]:
        sort_key = _HOTEL_SORT_KEYS[HotelSortField(sort_by)]
        return _select(self._storage.values(), predicate, sort_key, descending, offset, limit)

    async def count_matching(self, predicate: HotelPredicate) -> int:
        return sum(1 for h in self._storage.values() if predicate(h))

    async def update(self, hotel: Hotel) -> Hotel:
        if hotel.hotel_id in self._storage:
            self._storage[hotel.hotel_id] = hotel
            return hotel
        raise ValueError("Hotel not found")

    async def delete(self, hotel_id: UUID) -> bool:
        return self._storage.pop(hotel_id, None) is not None


class InMemoryRoomRepository(RoomRepository):
    """In-memory implementation of RoomRepository"""

    def __init__(self):
        self._storage: Dict[UUID, Room] = {}

    async def save(self, room: Room) -> Room:
        self._storage[room.room_id] = room
        return room

    async def find_by_id(self, room_id: UUID) -> Optional[Room]:
        return self._storage.get(room_id)

    async def find_by_hotels(self, hotel_ids: Iterable[UUID]) -> List[Room]:
        ids = set(hotel_ids)
        return [r for r in self._storage.values() if r.hotel_id in ids]

    async def find_matching(
        self,
        predicate: RoomPredicate,
        sort_by: str = "createdAt",
        descending: bool = False,
        offset: int = 0,
        limit: Optional[int] = None
    ) -> List[Room]:
        sort_key = _ROOM_SORT_KEYS[RoomSortField(sort_by)]
        return _select(self._storage.values(), predicate, sort_key, descending, offset, limit)

    async def count_matching(self, predicate: RoomPredicate) -> int:
        return sum(1 for r in self._storage.values() if predicate(r))

    async def update(self, room: Room) -> Room:
        if room.room_id in self._storage:
            self._storage[room.room_id] = room
            return room
        raise ValueError("Room not found")

    async def delete(self, room_id: UUID) -> bool:
        return self._storage.pop(room_id, None) is not None


class InMemoryReservationRepository(ReservationRepository):
    """In-memory implementation of ReservationRepository"""

    def __init__(self):
        self._storage: Dict[UUID, Reservation] = {}

    async def save(self, reservation: Reservation) -> Reservation:
        """Save reservation to memory"""
        self._storage[reservation.reservation_id] = reservation
        return reservation

    async def find_by_id(self, reservation_id: UUID) -> Optional[Reservation]:
        """Find reservation by ID"""
        return self._storage.get(reservation_id)

    async def find_matching(
        self,
        predicate: ReservationPredicate,
        sort_by: str = "createdAt",
        descending: bool = False,
        offset: int = 0,
        limit: Optional[int] = None
    ) -> List[Reservation]:
        sort_key = _RESERVATION_SORT_KEYS[ReservationSortField(sort_by)]
        return _select(self._storage.values(), predicate, sort_key, descending, offset, limit)

    async def count_matching(self, predicate: ReservationPredicate) -> int:
        return sum(1 for r in self._storage.values() if predicate(r))

    async def update(self, reservation: Reservation) -> Reservation:
        """Update reservation"""
        if reservation.reservation_id in self._storage:
            self._storage[reservation.reservation_id] = reservation
            return reservation
        raise ValueError("Reservation not found")

    async def delete_matching(self, predicate: ReservationPredicate) -> int:
        doomed = [rid for rid, r in self._storage.items() if predicate(r)]
        for rid in doomed:
            del self._storage[rid]
        return len(doomed)
