"""API Dependencies - Repositories, services and authentication"""
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from typing import Optional
from uuid import UUID

from domain.enums import UserRole
from domain.repositories import UserRepository, HotelRepository, RoomRepository, ReservationRepository
from domain.value_objects import Principal
from application.services import ReservationService, CatalogService, AccountService
from infrastructure.repositories.in_memory_repositories import (
    InMemoryUserRepository, InMemoryHotelRepository, InMemoryRoomRepository, InMemoryReservationRepository
)
from infrastructure.security import decode_access_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token", auto_error=False)

# Initialize repositories
user_repo = InMemoryUserRepository()
hotel_repo = InMemoryHotelRepository()
room_repo = InMemoryRoomRepository()
reservation_repo = InMemoryReservationRepository()


def get_user_repository() -> UserRepository:
    return user_repo

def get_hotel_repository() -> HotelRepository:
    return hotel_repo

def get_room_repository() -> RoomRepository:
    return room_repo

def get_reservation_repository() -> ReservationRepository:
    return reservation_repo


def get_reservation_service(
    reservations: ReservationRepository = Depends(get_reservation_repository),
    rooms: RoomRepository = Depends(get_room_repository),
    hotels: HotelRepository = Depends(get_hotel_repository),
    users: UserRepository = Depends(get_user_repository)
) -> ReservationService:
    return ReservationService(reservations, rooms, hotels, users)

def get_catalog_service(
    hotels: HotelRepository = Depends(get_hotel_repository),
    rooms: RoomRepository = Depends(get_room_repository),
    reservations: ReservationRepository = Depends(get_reservation_repository)
) -> CatalogService:
    return CatalogService(hotels, rooms, reservations)

def get_account_service(users: UserRepository = Depends(get_user_repository)) -> AccountService:
    return AccountService(users)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )

async def get_current_principal(
    token: Optional[str] = Depends(oauth2_scheme),
    users: UserRepository = Depends(get_user_repository)
) -> Principal:
    """Resolve the bearer token into the caller's identity"""
    if not token:
        raise _unauthorized("No token provided")
    try:
        payload = decode_access_token(token)
        user_id = UUID(payload.get("userId") or payload.get("sub"))
    except (JWTError, TypeError, ValueError):
        raise _unauthorized("Invalid token")

    user = await users.find_by_id(user_id)
    if user is None:
        raise _unauthorized("User not found")
    return user.to_principal()

def require_role(*roles: UserRole):
    """Dependency factory restricting a route to the given roles"""
    async def check_role(principal: Principal = Depends(get_current_principal)) -> Principal:
        if principal.role not in roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        return principal
    return check_role
