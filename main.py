from fastapi import FastAPI, HTTPException, Depends, Query, Request
from starlette.exceptions import HTTPException as StarletteHTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import OAuth2PasswordRequestForm
from uuid import UUID
from decimal import Decimal
from typing import List, Optional

from api.schemas import (
    # Auth
    RegisterRequest, LoginRequest, Token, UserResponse, AuthResponse, UpdateProfileRequest,
    # Hotels & rooms
    CreateHotelRequest, UpdateHotelRequest, HotelResponse, HotelSummaryResponse, PaginatedHotelResponse,
    CreateRoomRequest, UpdateRoomRequest, RoomResponse, RoomSummaryResponse, PaginatedRoomResponse,
    AvailabilityResponse,
    # Reservations
    CreateReservationRequest, UpdateReservationRequest, ReservationResponse, GuestResponse,
    PaginatedReservationResponse, PaginationResponse, MessageResponse, ErrorResponse
)
from api.dependencies import (
    get_reservation_service, get_catalog_service, get_account_service,
    get_current_principal, require_role,
    user_repo, hotel_repo, room_repo
)
from application.services import ReservationService, CatalogService, AccountService, ReservationPatch
from application.pagination import PageRequest
from domain.entities import User, Hotel, Room
from domain.enums import (
    ReservationStatus, ReservationSortField, HotelSortField, RoomSortField, RoomType, SortOrder, UserRole
)
from domain.exceptions import DomainError
from domain.value_objects import Principal, parse_instant, utc_now
from infrastructure.config import get_settings
from infrastructure.logger import get_logger
from infrastructure.seed import seed_demo_data

settings = get_settings()
logger = get_logger("api")

app = FastAPI(
    title=settings.APP_NAME,
    description="Hotel booking marketplace API: accounts, hotels, rooms and reservations",
    version="1.0.0",
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    }
)

if settings.FRONTEND_URL:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.FRONTEND_URL],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.on_event("startup")
async def on_startup():
    if settings.SEED_DEMO_DATA:
        await seed_demo_data(user_repo, hotel_repo, room_repo)

# ============================================================================
# ERROR HANDLERS
# ============================================================================

@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None)
    )

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
        message = f"{field}: {first.get('msg')}" if field else first.get("msg")
    else:
        message = "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})

@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})

# ============================================================================
# HEALTH & ENUM REFERENCE ENDPOINTS
# ============================================================================

@app.get("/api/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return {"status": "ok", "timestamp": utc_now().isoformat()}

@app.get("/api/enums/reservation-status", tags=["Enum Reference"])
async def get_reservation_statuses():
    """Get all ReservationStatus enum values"""
    return {
        "values": [item.name for item in ReservationStatus],
        "description": "Reservation status values: PENDING, CONFIRMED, CANCELLED, COMPLETED"
    }

# ============================================================================
# AUTH ENDPOINTS
# ============================================================================

@app.post("/api/auth/register", response_model=AuthResponse, status_code=201, tags=["Auth"])
async def register(
    request: RegisterRequest,
    service: AccountService = Depends(get_account_service)
):
    """Register a new user"""
    user, token = await service.register(
        email=request.email,
        password=request.password,
        first_name=request.first_name,
        last_name=request.last_name,
        role=request.role
    )
    return AuthResponse(message="User registered successfully", user=_user_to_response(user), token=token)

@app.post("/api/auth/login", response_model=AuthResponse, tags=["Auth"])
async def login(
    request: LoginRequest,
    service: AccountService = Depends(get_account_service)
):
    """Log in with email and password"""
    user, token = await service.login(request.email, request.password)
    return AuthResponse(message="Login successful", user=_user_to_response(user), token=token)

@app.post("/api/auth/token", response_model=Token, tags=["Auth"])
async def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    service: AccountService = Depends(get_account_service)
):
    """OAuth2 password flow; the username is the email"""
    _, token = await service.login(form_data.username, form_data.password)
    return {"access_token": token, "token_type": "bearer"}

@app.get("/api/auth/me", response_model=UserResponse, tags=["Auth"])
async def read_users_me(
    principal: Principal = Depends(get_current_principal),
    service: AccountService = Depends(get_account_service)
):
    user = await service.get_user(principal.user_id)
    return _user_to_response(user)

@app.patch("/api/auth/me", response_model=UserResponse, tags=["Auth"])
async def update_users_me(
    request: UpdateProfileRequest,
    principal: Principal = Depends(get_current_principal),
    service: AccountService = Depends(get_account_service)
):
    """Update the caller's first and last name"""
    user = await service.update_profile(principal, request.first_name, request.last_name)
    return _user_to_response(user)

# ============================================================================
# HOTEL ENDPOINTS
# ============================================================================

@app.get("/api/hotels", response_model=PaginatedHotelResponse, tags=["Hotels"])
async def list_hotels(
    page: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    sort_by: Optional[HotelSortField] = Query(None, alias="sortBy"),
    sort_order: Optional[SortOrder] = Query(None, alias="sortOrder"),
    search: Optional[str] = Query(None),
    city: Optional[str] = Query(None),
    country: Optional[str] = Query(None),
    min_rating: Optional[Decimal] = Query(None, alias="minRating"),
    service: CatalogService = Depends(get_catalog_service)
):
    """Search hotels"""
    result = await service.list_hotels(
        PageRequest.from_query(page, limit, sort_by, sort_order),
        search=search,
        city=city,
        country=country,
        min_rating=min_rating
    )
    return PaginatedHotelResponse(
        data=[_hotel_to_response(h) for h in result.data],
        pagination=_pagination(result.pagination)
    )

@app.get("/api/hotels/owner/my-hotels", response_model=PaginatedHotelResponse, tags=["Hotels"])
async def list_my_hotels(
    page: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    sort_by: Optional[HotelSortField] = Query(None, alias="sortBy"),
    sort_order: Optional[SortOrder] = Query(None, alias="sortOrder"),
    search: Optional[str] = Query(None),
    service: CatalogService = Depends(get_catalog_service),
    principal: Principal = Depends(require_role(UserRole.HOTEL_OWNER, UserRole.ADMIN))
):
    """List the hotels the caller owns"""
    result = await service.list_owner_hotels(
        principal, PageRequest.from_query(page, limit, sort_by, sort_order), search=search
    )
    return PaginatedHotelResponse(
        data=[_hotel_to_response(h) for h in result.data],
        pagination=_pagination(result.pagination)
    )

@app.post("/api/hotels", response_model=HotelResponse, status_code=201, tags=["Hotels"])
async def create_hotel(
    request: CreateHotelRequest,
    service: CatalogService = Depends(get_catalog_service),
    principal: Principal = Depends(require_role(UserRole.HOTEL_OWNER, UserRole.ADMIN))
):
    """Create a hotel owned by the caller"""
    hotel = await service.create_hotel(
        principal,
        name=request.name,
        city=request.city,
        country=request.country,
        description=request.description,
        address=request.address,
        rating=request.rating,
        amenities=request.amenities
    )
    return _hotel_to_response(hotel)

@app.get("/api/hotels/{hotel_id}", response_model=HotelResponse, tags=["Hotels"])
async def get_hotel(
    hotel_id: UUID,
    service: CatalogService = Depends(get_catalog_service)
):
    """Get hotel by ID"""
    return _hotel_to_response(await service.get_hotel(hotel_id))

@app.patch("/api/hotels/{hotel_id}", response_model=HotelResponse, tags=["Hotels"])
async def update_hotel(
    hotel_id: UUID,
    request: UpdateHotelRequest,
    service: CatalogService = Depends(get_catalog_service),
    principal: Principal = Depends(require_role(UserRole.HOTEL_OWNER, UserRole.ADMIN))
):
    """Update hotel details"""
    hotel = await service.update_hotel(principal, hotel_id, request.model_dump(exclude_unset=True))
    return _hotel_to_response(hotel)

@app.delete("/api/hotels/{hotel_id}", response_model=MessageResponse, tags=["Hotels"])
async def delete_hotel(
    hotel_id: UUID,
    service: CatalogService = Depends(get_catalog_service),
    principal: Principal = Depends(require_role(UserRole.HOTEL_OWNER, UserRole.ADMIN))
):
    """Delete a hotel with its rooms and their reservations"""
    await service.delete_hotel(principal, hotel_id)
    return MessageResponse(message="Hotel deleted successfully")

@app.get("/api/hotels/{hotel_id}/rooms", response_model=List[RoomResponse], tags=["Hotels"])
async def get_hotel_rooms(
    hotel_id: UUID,
    service: CatalogService = Depends(get_catalog_service)
):
    """Get all rooms of a hotel"""
    hotel = await service.get_hotel(hotel_id)
    rooms = await service.get_hotel_rooms(hotel_id)
    return [_room_to_response(room, hotel) for room in rooms]

# ============================================================================
# ROOM ENDPOINTS
# ============================================================================

@app.get("/api/rooms", response_model=PaginatedRoomResponse, tags=["Rooms"])
async def list_rooms(
    page: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    sort_by: Optional[RoomSortField] = Query(None, alias="sortBy"),
    sort_order: Optional[SortOrder] = Query(None, alias="sortOrder"),
    search: Optional[str] = Query(None),
    hotel_id: Optional[UUID] = Query(None, alias="hotelId"),
    room_type: Optional[RoomType] = Query(None, alias="roomType"),
    min_price: Optional[Decimal] = Query(None, alias="minPrice"),
    max_price: Optional[Decimal] = Query(None, alias="maxPrice"),
    min_capacity: Optional[int] = Query(None, alias="minCapacity"),
    is_available: Optional[bool] = Query(None, alias="isAvailable"),
    service: CatalogService = Depends(get_catalog_service)
):
    """Search rooms across all hotels"""
    result = await service.list_rooms(
        PageRequest.from_query(page, limit, sort_by, sort_order),
        search=search,
        hotel_id=hotel_id,
        room_type=room_type,
        min_price=min_price,
        max_price=max_price,
        min_capacity=min_capacity,
        is_available=is_available
    )
    return _room_page_to_response(result)

@app.get("/api/rooms/hotel/{hotel_id}", response_model=PaginatedRoomResponse, tags=["Rooms"])
async def list_rooms_of_hotel(
    hotel_id: UUID,
    page: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    sort_by: Optional[RoomSortField] = Query(None, alias="sortBy"),
    sort_order: Optional[SortOrder] = Query(None, alias="sortOrder"),
    search: Optional[str] = Query(None),
    room_type: Optional[RoomType] = Query(None, alias="roomType"),
    is_available: Optional[bool] = Query(None, alias="isAvailable"),
    service: CatalogService = Depends(get_catalog_service)
):
    """Paginated rooms of one hotel"""
    result = await service.list_rooms_of_hotel(
        hotel_id,
        PageRequest.from_query(page, limit, sort_by, sort_order),
        search=search,
        room_type=room_type,
        is_available=is_available
    )
    return _room_page_to_response(result)

@app.post("/api/rooms", response_model=RoomResponse, status_code=201, tags=["Rooms"])
async def create_room(
    request: CreateRoomRequest,
    service: CatalogService = Depends(get_catalog_service),
    principal: Principal = Depends(require_role(UserRole.HOTEL_OWNER, UserRole.ADMIN))
):
    """Add a room to one of the caller's hotels"""
    room, hotel = await service.create_room(
        principal,
        hotel_id=request.hotel_id,
        name=request.name,
        price_per_night=request.price_per_night,
        capacity=request.capacity,
        room_type=request.room_type,
        description=request.description,
        amenities=request.amenities,
        is_available=request.is_available
    )
    return _room_to_response(room, hotel)

@app.get("/api/rooms/{room_id}", response_model=RoomResponse, tags=["Rooms"])
async def get_room(
    room_id: UUID,
    service: CatalogService = Depends(get_catalog_service)
):
    """Get room by ID"""
    room, hotel = await service.get_room(room_id)
    return _room_to_response(room, hotel)

@app.patch("/api/rooms/{room_id}", response_model=RoomResponse, tags=["Rooms"])
async def update_room(
    room_id: UUID,
    request: UpdateRoomRequest,
    service: CatalogService = Depends(get_catalog_service),
    principal: Principal = Depends(require_role(UserRole.HOTEL_OWNER, UserRole.ADMIN))
):
    """Update room details or toggle its availability"""
    room, hotel = await service.update_room(principal, room_id, request.model_dump(exclude_unset=True))
    return _room_to_response(room, hotel)

@app.delete("/api/rooms/{room_id}", response_model=MessageResponse, tags=["Rooms"])
async def delete_room(
    room_id: UUID,
    service: CatalogService = Depends(get_catalog_service),
    principal: Principal = Depends(require_role(UserRole.HOTEL_OWNER, UserRole.ADMIN))
):
    """Delete a room with its reservations"""
    await service.delete_room(principal, room_id)
    return MessageResponse(message="Room deleted successfully")

@app.get(
    "/api/rooms/{room_id}/availability",
    response_model=AvailabilityResponse,
    response_model_exclude_none=True,
    tags=["Rooms"]
)
async def check_room_availability(
    room_id: UUID,
    check_in: Optional[str] = Query(None, alias="checkIn"),
    check_out: Optional[str] = Query(None, alias="checkOut"),
    service: ReservationService = Depends(get_reservation_service)
):
    """Check whether a room can be booked for a date range"""
    if check_in is None or check_out is None:
        raise HTTPException(status_code=400, detail="checkIn and checkOut dates are required")

    result = await service.check_availability(
        room_id, _query_instant(check_in, "checkIn"), _query_instant(check_out, "checkOut")
    )
    return AvailabilityResponse(
        available=result.available,
        reason=result.reason,
        conflicting_reservations=result.conflicting_reservations
    )

# ============================================================================
# RESERVATION ENDPOINTS
# ============================================================================

@app.post("/api/reservations", response_model=ReservationResponse, status_code=201, tags=["Reservations"])
async def create_reservation(
    request: CreateReservationRequest,
    service: ReservationService = Depends(get_reservation_service),
    principal: Principal = Depends(get_current_principal)
):
    """Create new reservation"""
    view = await service.create_reservation(
        principal,
        room_id=request.room_id,
        check_in=request.check_in_date,
        check_out=request.check_out_date,
        guest_count=request.guest_count,
        special_requests=request.special_requests
    )
    return _reservation_to_response(view)

@app.get("/api/reservations", response_model=PaginatedReservationResponse, tags=["Reservations"])
async def get_my_reservations(
    page: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    sort_by: Optional[ReservationSortField] = Query(None, alias="sortBy"),
    sort_order: Optional[SortOrder] = Query(None, alias="sortOrder"),
    status: Optional[ReservationStatus] = Query(None),
    from_date: Optional[str] = Query(None, alias="fromDate"),
    to_date: Optional[str] = Query(None, alias="toDate"),
    service: ReservationService = Depends(get_reservation_service),
    principal: Principal = Depends(get_current_principal)
):
    """List the caller's own reservations"""
    result = await service.list_reservations(
        principal,
        PageRequest.from_query(page, limit, sort_by, sort_order),
        status=status,
        from_date=_query_instant(from_date, "fromDate"),
        to_date=_query_instant(to_date, "toDate")
    )
    return _page_to_response(result)

@app.get("/api/reservations/hotel-owner", response_model=PaginatedReservationResponse, tags=["Reservations"])
async def get_hotel_owner_reservations(
    page: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    sort_by: Optional[ReservationSortField] = Query(None, alias="sortBy"),
    sort_order: Optional[SortOrder] = Query(None, alias="sortOrder"),
    status: Optional[ReservationStatus] = Query(None),
    hotel_id: Optional[UUID] = Query(None, alias="hotelId"),
    room_id: Optional[UUID] = Query(None, alias="roomId"),
    from_date: Optional[str] = Query(None, alias="fromDate"),
    to_date: Optional[str] = Query(None, alias="toDate"),
    service: ReservationService = Depends(get_reservation_service),
    principal: Principal = Depends(require_role(UserRole.HOTEL_OWNER, UserRole.ADMIN))
):
    """List reservations across the hotels the caller owns"""
    result = await service.list_hotel_reservations(
        principal,
        PageRequest.from_query(page, limit, sort_by, sort_order),
        hotel_id=hotel_id,
        room_id=room_id,
        status=status,
        from_date=_query_instant(from_date, "fromDate"),
        to_date=_query_instant(to_date, "toDate")
    )
    return _page_to_response(result)

@app.get("/api/reservations/{reservation_id}", response_model=ReservationResponse, tags=["Reservations"])
async def get_reservation(
    reservation_id: UUID,
    service: ReservationService = Depends(get_reservation_service),
    principal: Principal = Depends(get_current_principal)
):
    """Get reservation by ID"""
    return _reservation_to_response(await service.get_reservation(principal, reservation_id))

@app.patch("/api/reservations/{reservation_id}", response_model=ReservationResponse, tags=["Reservations"])
async def update_reservation(
    reservation_id: UUID,
    request: UpdateReservationRequest,
    service: ReservationService = Depends(get_reservation_service),
    principal: Principal = Depends(get_current_principal)
):
    """Update reservation dates, guests, requests or status"""
    patch = ReservationPatch(**request.model_dump(exclude_unset=True))
    view = await service.update_reservation(principal, reservation_id, patch)
    return _reservation_to_response(view)

@app.delete("/api/reservations/{reservation_id}", response_model=ReservationResponse, tags=["Reservations"])
async def cancel_reservation(
    reservation_id: UUID,
    service: ReservationService = Depends(get_reservation_service),
    principal: Principal = Depends(get_current_principal)
):
    """Cancel reservation (the row is kept with status CANCELLED)"""
    view = await service.cancel_reservation(principal, reservation_id)
    return _reservation_to_response(view)

# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def _query_instant(value: Optional[str], name: str):
    """Parse a date or date-time query parameter"""
    if value is None:
        return None
    try:
        return parse_instant(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"{name}: invalid date")

def _user_to_response(user: User) -> UserResponse:
    """Convert User entity to UserResponse"""
    return UserResponse(
        id=user.user_id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        role=user.role,
        created_at=user.created_at
    )

def _hotel_summary(hotel: Hotel) -> HotelSummaryResponse:
    return HotelSummaryResponse(id=hotel.hotel_id, name=hotel.name, city=hotel.city, country=hotel.country)

def _hotel_to_response(hotel: Hotel) -> HotelResponse:
    """Convert Hotel entity to HotelResponse"""
    return HotelResponse(
        id=hotel.hotel_id,
        owner_id=hotel.owner_id,
        name=hotel.name,
        description=hotel.description,
        address=hotel.address,
        city=hotel.city,
        country=hotel.country,
        rating=hotel.rating,
        amenities=hotel.amenities,
        created_at=hotel.created_at,
        updated_at=hotel.updated_at
    )

def _room_summary(room: Room, hotel: Hotel) -> RoomSummaryResponse:
    return RoomSummaryResponse(
        id=room.room_id,
        name=room.name,
        room_type=room.room_type,
        price_per_night=room.price_per_night,
        hotel=_hotel_summary(hotel)
    )

def _room_to_response(room: Room, hotel: Hotel) -> RoomResponse:
    """Convert Room entity to RoomResponse"""
    return RoomResponse(
        id=room.room_id,
        name=room.name,
        description=room.description,
        room_type=room.room_type,
        price_per_night=room.price_per_night,
        capacity=room.capacity,
        amenities=room.amenities,
        is_available=room.is_available,
        created_at=room.created_at,
        updated_at=room.updated_at,
        hotel=_hotel_summary(hotel)
    )

def _reservation_to_response(view) -> ReservationResponse:
    """Convert ReservationView to ReservationResponse"""
    reservation = view.reservation
    return ReservationResponse(
        id=reservation.reservation_id,
        room_id=reservation.room_id,
        user_id=reservation.user_id,
        check_in_date=reservation.stay.check_in,
        check_out_date=reservation.stay.check_out,
        guest_count=reservation.guest_count,
        total_price=reservation.total_price,
        status=reservation.status,
        special_requests=reservation.special_requests,
        created_at=reservation.created_at,
        updated_at=reservation.updated_at,
        room=_room_summary(view.room, view.hotel),
        guest=_guest_to_response(view.guest) if view.guest else None
    )

def _guest_to_response(user: User) -> GuestResponse:
    return GuestResponse(id=user.user_id, first_name=user.first_name, last_name=user.last_name, email=user.email)

def _pagination(info) -> PaginationResponse:
    return PaginationResponse(
        page=info.page,
        limit=info.limit,
        total=info.total,
        total_pages=info.total_pages,
        has_next=info.has_next,
        has_prev=info.has_prev
    )

def _page_to_response(page) -> PaginatedReservationResponse:
    return PaginatedReservationResponse(
        data=[_reservation_to_response(v) for v in page.data],
        pagination=_pagination(page.pagination)
    )

def _room_page_to_response(page) -> PaginatedRoomResponse:
    return PaginatedRoomResponse(
        data=[_room_to_response(listing.room, listing.hotel) for listing in page.data],
        pagination=_pagination(page.pagination)
    )

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
