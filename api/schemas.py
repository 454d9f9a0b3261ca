"""API Schemas - Request and Response DTOs"""
from pydantic import BaseModel, Field, validator
from pydantic.alias_generators import to_camel
from datetime import datetime
from decimal import Decimal
from uuid import UUID
from typing import List, Optional

from domain.enums import ReservationStatus, RoomType, UserRole
from domain.value_objects import parse_instant

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class CamelModel(BaseModel):
    """Base DTO exchanged as camelCase JSON"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True


# ============================================================================
# AUTH SCHEMAS
# ============================================================================

class RegisterRequest(CamelModel):
    """Register request DTO"""
    email: str = Field(pattern=EMAIL_PATTERN)
    password: str = Field(min_length=8)
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    role: UserRole = UserRole.CLIENT

    @validator('role')
    def role_is_self_service(cls, v):
        if v == UserRole.ADMIN:
            raise ValueError('Role must be CLIENT or HOTEL_OWNER')
        return v


class LoginRequest(CamelModel):
    """Login request DTO"""
    email: str = Field(pattern=EMAIL_PATTERN)
    password: str = Field(min_length=1)


class Token(BaseModel):
    """Token response DTO"""
    access_token: str
    token_type: str


class UserResponse(CamelModel):
    """User response DTO"""
    id: UUID
    email: str
    first_name: str
    last_name: str
    role: UserRole
    created_at: datetime


class AuthResponse(CamelModel):
    """Register/login response DTO"""
    message: str
    user: UserResponse
    token: str


class UpdateProfileRequest(CamelModel):
    first_name: Optional[str] = Field(None, min_length=1)
    last_name: Optional[str] = Field(None, min_length=1)


# ============================================================================
# HOTEL & ROOM SCHEMAS
# ============================================================================

class CreateHotelRequest(CamelModel):
    """Create hotel request DTO"""
    name: str = Field(min_length=1)
    description: str = ""
    address: str = ""
    city: str = Field(min_length=1)
    country: str = Field(min_length=1)
    rating: Optional[Decimal] = Field(None, ge=0, le=5)
    amenities: List[str] = []


class UpdateHotelRequest(CamelModel):
    """Update hotel request DTO"""
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = Field(None, min_length=1)
    country: Optional[str] = Field(None, min_length=1)
    rating: Optional[Decimal] = Field(None, ge=0, le=5)
    amenities: Optional[List[str]] = None


class HotelSummaryResponse(CamelModel):
    id: UUID
    name: str
    city: str
    country: str


class HotelResponse(HotelSummaryResponse):
    """Hotel response DTO"""
    owner_id: UUID
    description: str
    address: str
    rating: Optional[Decimal] = None
    amenities: List[str]
    created_at: datetime
    updated_at: datetime


class CreateRoomRequest(CamelModel):
    """Create room request DTO"""
    hotel_id: UUID
    name: str = Field(min_length=1)
    description: str = ""
    room_type: RoomType = RoomType.DOUBLE
    price_per_night: Decimal = Field(gt=0)
    capacity: int = Field(gt=0)
    amenities: List[str] = []
    is_available: bool = True


class UpdateRoomRequest(CamelModel):
    """Update room request DTO"""
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    room_type: Optional[RoomType] = None
    price_per_night: Optional[Decimal] = Field(None, gt=0)
    capacity: Optional[int] = Field(None, gt=0)
    amenities: Optional[List[str]] = None
    is_available: Optional[bool] = None


class RoomSummaryResponse(CamelModel):
    id: UUID
    name: str
    room_type: RoomType
    price_per_night: Decimal
    hotel: HotelSummaryResponse


class RoomResponse(RoomSummaryResponse):
    """Room response DTO"""
    description: str
    capacity: int
    amenities: List[str]
    is_available: bool
    created_at: datetime
    updated_at: datetime


class AvailabilityResponse(CamelModel):
    """Availability response DTO"""
    available: bool
    reason: Optional[str] = None
    conflicting_reservations: Optional[int] = None


# ============================================================================
# RESERVATION SCHEMAS
# ============================================================================

class CreateReservationRequest(CamelModel):
    """Create reservation request DTO"""
    room_id: UUID
    check_in_date: datetime
    check_out_date: datetime
    guest_count: int = Field(gt=0)
    special_requests: Optional[str] = None

    @validator('check_in_date', 'check_out_date', pre=True)
    def normalize_instant(cls, v):
        return parse_instant(v)


class UpdateReservationRequest(CamelModel):
    """Update reservation request DTO"""
    status: Optional[ReservationStatus] = None
    check_in_date: Optional[datetime] = None
    check_out_date: Optional[datetime] = None
    guest_count: Optional[int] = Field(None, gt=0)
    special_requests: Optional[str] = None

    @validator('check_in_date', 'check_out_date', pre=True)
    def normalize_instant(cls, v):
        return parse_instant(v)


class GuestResponse(CamelModel):
    """Who booked; shown to hotel owners"""
    id: UUID
    first_name: str
    last_name: str
    email: str


class ReservationResponse(CamelModel):
    """Reservation response DTO"""
    id: UUID
    room_id: UUID
    user_id: UUID
    check_in_date: datetime
    check_out_date: datetime
    guest_count: int
    total_price: Decimal
    status: ReservationStatus
    special_requests: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    room: RoomSummaryResponse
    guest: Optional[GuestResponse] = None


class PaginationResponse(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


class PaginatedReservationResponse(CamelModel):
    """Paginated reservation list DTO"""
    data: List[ReservationResponse]
    pagination: PaginationResponse


class PaginatedHotelResponse(CamelModel):
    data: List[HotelResponse]
    pagination: PaginationResponse


class PaginatedRoomResponse(CamelModel):
    data: List[RoomResponse]
    pagination: PaginationResponse


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str
