"""Domain Repository Interfaces"""
from abc import ABC, abstractmethod
from typing import Optional, List, Iterable
from uuid import UUID

from domain.entities import User, Hotel, Room, Reservation
from domain.filters import ReservationPredicate, HotelPredicate, RoomPredicate


class UserRepository(ABC):
    """Repository interface for User"""

    @abstractmethod
    async def save(self, user: User) -> User:
        """Save user"""
        pass

    @abstractmethod
    async def find_by_id(self, user_id: UUID) -> Optional[User]:
        """Find user by ID"""
        pass

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[User]:
        """Find user by email, case-insensitive"""
        pass

    @abstractmethod
    async def update(self, user: User) -> User:
        """Update user"""
        pass


class HotelRepository(ABC):
    """Repository interface for Hotel"""

    @abstractmethod
    async def save(self, hotel: Hotel) -> Hotel:
        """Save hotel"""
        pass

    @abstractmethod
    async def find_by_id(self, hotel_id: UUID) -> Optional[Hotel]:
        """Find hotel by ID"""
        pass

    @abstractmethod
    async def find_by_owner(self, owner_id: UUID) -> List[Hotel]:
        """Find hotels owned by a user"""
        pass

    @abstractmethod
    async def find_matching(
        self,
        predicate: HotelPredicate,
        sort_by: str = "createdAt",
        descending: bool = False,
        offset: int = 0,
        limit: Optional[int] = None
    ) -> List[Hotel]:
        """Find hotels matching predicate, sorted and sliced"""
        pass

    @abstractmethod
    async def count_matching(self, predicate: HotelPredicate) -> int:
        pass

    @abstractmethod
    async def update(self, hotel: Hotel) -> Hotel:
        """Update hotel"""
        pass

    @abstractmethod
    async def delete(self, hotel_id: UUID) -> bool:
        """Delete hotel"""
        pass


class RoomRepository(ABC):
    """Repository interface for Room"""

    @abstractmethod
    async def save(self, room: Room) -> Room:
        """Save room"""
        pass

    @abstractmethod
    async def find_by_id(self, room_id: UUID) -> Optional[Room]:
        """Find room by ID"""
        pass

    @abstractmethod
    async def find_by_hotels(self, hotel_ids: Iterable[UUID]) -> List[Room]:
        """Find rooms belonging to any of the hotels"""
        pass

    @abstractmethod
    async def find_matching(
        self,
        predicate: RoomPredicate,
        sort_by: str = "createdAt",
        descending: bool = False,
        offset: int = 0,
        limit: Optional[int] = None
    ) -> List[Room]:
        """Find rooms matching predicate, sorted and sliced"""
        pass

    @abstractmethod
    async def count_matching(self, predicate: RoomPredicate) -> int:
        pass

    @abstractmethod
    async def update(self, room: Room) -> Room:
        """Update room"""
        pass

    @abstractmethod
    async def delete(self, room_id: UUID) -> bool:
        """Delete room"""
        pass


class ReservationRepository(ABC):
    """Repository interface for Reservation Aggregate"""

    @abstractmethod
    async def save(self, reservation: Reservation) -> Reservation:
        """Save reservation"""
        pass

    @abstractmethod
    async def find_by_id(self, reservation_id: UUID) -> Optional[Reservation]:
        """Find reservation by ID"""
        pass

    @abstractmethod
    async def find_matching(
        self,
        predicate: ReservationPredicate,
        sort_by: str = "createdAt",
        descending: bool = False,
        offset: int = 0,
        limit: Optional[int] = None
    ) -> List[Reservation]:
        """Find reservations matching predicate, sorted and sliced"""
        pass

    @abstractmethod
    async def count_matching(self, predicate: ReservationPredicate) -> int:
        """Count reservations matching predicate"""
        pass

    @abstractmethod
    async def update(self, reservation: Reservation) -> Reservation:
        """Update reservation"""
        pass

    @abstractmethod
    async def delete_matching(self, predicate: ReservationPredicate) -> int:
        """Delete reservations matching predicate; returns how many"""
        pass
