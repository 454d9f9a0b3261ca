"""Application Services - Business use cases"""
from uuid import UUID
from datetime import datetime
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, validator

from domain.repositories import UserRepository, HotelRepository, RoomRepository, ReservationRepository
from domain.entities import User, Hotel, Room, Reservation
from domain.enums import ReservationStatus, UserRole, RoomType
from domain.exceptions import AuthenticationError, ForbiddenError, InvalidRequestError, NotFoundError
from domain.policies import ReservationAccess
from domain.value_objects import Principal, StayPeriod, parse_instant, utc_now
from domain import filters
from application.pagination import PageRequest, PageInfo
from infrastructure.logger import get_logger
from infrastructure.security import create_user_token, get_password_hash, verify_password

logger = get_logger(__name__)


class ReservationView(BaseModel):
    """Reservation with the room and hotel it belongs to"""
    reservation: Reservation
    room: Room
    hotel: Hotel
    # Only filled in for hotel owner listings
    guest: Optional[User] = None


class ReservationPage(BaseModel):
    data: List[ReservationView]
    pagination: PageInfo


class HotelPage(BaseModel):
    data: List[Hotel]
    pagination: PageInfo


class RoomListing(BaseModel):
    room: Room
    hotel: Hotel


class RoomPage(BaseModel):
    data: List[RoomListing]
    pagination: PageInfo


class AvailabilityResult(BaseModel):
    room_id: UUID
    available: bool
    reason: Optional[str] = None
    conflicting_reservations: Optional[int] = None


class ReservationPatch(BaseModel):
    """Partial update of a reservation; unset fields are left untouched"""
    status: Optional[ReservationStatus] = None
    check_in_date: Optional[datetime] = None
    check_out_date: Optional[datetime] = None
    guest_count: Optional[int] = Field(None, gt=0)
    special_requests: Optional[str] = None

    @validator('check_in_date', 'check_out_date', pre=True)
    def normalize_instant(cls, v):
        return parse_instant(v)


class ReservationService:
    """Service for Reservation business use cases"""

    def __init__(self,
                 repository: ReservationRepository,
                 room_repo: RoomRepository,
                 hotel_repo: HotelRepository,
                 user_repo: Optional[UserRepository] = None,
                 clock: Callable[[], datetime] = utc_now):
        self.repository = repository
        self.room_repo = room_repo
        self.hotel_repo = hotel_repo
        self.user_repo = user_repo
        self.clock = clock

    async def create_reservation(
        self,
        principal: Principal,
        room_id: UUID,
        check_in: datetime,
        check_out: datetime,
        guest_count: int,
        special_requests: Optional[str] = None
    ) -> ReservationView:
        """Validate a booking request, price it and store it as PENDING.

        Every rule is checked before anything is written. The overlap check
        and the insert are not atomic: two concurrent requests for the same
        room and dates can both pass the check.
        """
        room = await self._get_room(room_id)

        if not room.is_available:
            raise self._rejected("Room is not available", room_id)

        if not room.can_host(guest_count):
            raise self._rejected(
                f"Guest count exceeds room capacity of {room.capacity}", room_id
            )

        check_in, check_out = parse_instant(check_in), parse_instant(check_out)
        if check_in >= check_out:
            raise self._rejected("Check-out date must be after check-in date", room_id)

        stay = StayPeriod(check_in=check_in, check_out=check_out)
        if stay.starts_before(self.clock().date()):
            raise self._rejected("Check-in date cannot be in the past", room_id)

        conflicts = await self.repository.count_matching(filters.blocking(room.room_id, stay))
        if conflicts > 0:
            raise self._rejected("Room is already booked for the selected dates", room_id)

        hotel = await self._get_hotel(room.hotel_id)

        reservation = Reservation.create(
            room_id=room.room_id,
            user_id=principal.user_id,
            stay=stay,
            guest_count=guest_count,
            price_per_night=room.price_per_night,
            special_requests=special_requests
        )
        reservation = await self.repository.save(reservation)
        logger.info(
            "Reservation %s created for room %s by user %s (%s nights, total %s)",
            reservation.reservation_id, room.room_id, principal.user_id,
            reservation.get_nights(), reservation.total_price
        )
        return ReservationView(reservation=reservation, room=room, hotel=hotel)

    async def check_availability(
        self,
        room_id: UUID,
        check_in: datetime,
        check_out: datetime
    ) -> AvailabilityResult:
        """Read-only availability check; nothing is reserved"""
        room = await self._get_room(room_id)
        if not room.is_available:
            return AvailabilityResult(room_id=room_id, available=False, reason="Room is not available")

        conflicts = await self.repository.count_matching(filters.all_of(
            filters.for_room(room_id),
            filters.active(),
            filters.intersecting(parse_instant(check_in), parse_instant(check_out))
        ))
        return AvailabilityResult(
            room_id=room_id,
            available=conflicts == 0,
            conflicting_reservations=conflicts
        )

    async def get_reservation(self, principal: Principal, reservation_id: UUID) -> ReservationView:
        """Get reservation by ID if the principal may see it"""
        view = await self._load_view(reservation_id)
        self._access(principal, view).ensure_can_access("view")
        return view

    async def list_reservations(
        self,
        principal: Principal,
        page_request: PageRequest,
        status: Optional[ReservationStatus] = None,
        from_date: Optional[datetime] = None,
        to_date: Optional[datetime] = None
    ) -> ReservationPage:
        """List the principal's own reservations"""
        predicate = filters.all_of(
            filters.booked_by(principal.user_id),
            *self._common_filters(status, from_date, to_date)
        )
        return await self._page(predicate, page_request)

    async def list_hotel_reservations(
        self,
        principal: Principal,
        page_request: PageRequest,
        hotel_id: Optional[UUID] = None,
        room_id: Optional[UUID] = None,
        status: Optional[ReservationStatus] = None,
        from_date: Optional[datetime] = None,
        to_date: Optional[datetime] = None
    ) -> ReservationPage:
        """List reservations across the hotels the principal owns, with guest details"""
        hotel_ids = [h.hotel_id for h in await self.hotel_repo.find_by_owner(principal.user_id)]
        # A hotel the principal does not own is ignored, not rejected
        if hotel_id is not None and hotel_id in hotel_ids:
            hotel_ids = [hotel_id]

        rooms = await self.room_repo.find_by_hotels(hotel_ids)
        predicates = [filters.for_rooms(r.room_id for r in rooms)]
        if room_id is not None:
            predicates.append(filters.for_room(room_id))
        predicates.extend(self._common_filters(status, from_date, to_date))

        page = await self._page(filters.all_of(*predicates), page_request)
        if self.user_repo is not None:
            for view in page.data:
                view.guest = await self.user_repo.find_by_id(view.reservation.user_id)
        return page

    async def update_reservation(
        self,
        principal: Principal,
        reservation_id: UUID,
        patch: ReservationPatch
    ) -> ReservationView:
        """Apply a partial update.

        Every change is validated before anything is applied, so a rejected
        patch leaves the stored reservation as it was. Date changes reprice
        the stay at the room's current rate. Neither the overlap check nor
        the capacity check is re-run here.
        """
        view = await self._load_view(reservation_id)
        access = self._access(principal, view)
        access.ensure_can_access("update")

        current = view.reservation
        changes = patch.model_dump(exclude_unset=True)

        status = changes.get("status")
        if status is not None:
            access.ensure_can_set_status(status)
            if not current.can_transition_to(status):
                raise self._rejected(
                    f"Cannot change status from {current.status.value} to {status.value}",
                    view.room.room_id
                )

        stay = None
        if changes.get("check_in_date") or changes.get("check_out_date"):
            check_in = changes.get("check_in_date") or current.stay.check_in
            check_out = changes.get("check_out_date") or current.stay.check_out
            if check_in >= check_out:
                raise self._rejected("Check-out date must be after check-in date", view.room.room_id)
            stay = StayPeriod(check_in=check_in, check_out=check_out)

        # Changes go on a copy; the stored reservation only moves on update()
        reservation = current.model_copy(deep=True)
        if stay is not None:
            reservation.reschedule(stay, view.room.price_per_night)
        if changes.get("guest_count") is not None:
            reservation.change_guest_count(changes["guest_count"])
        if "special_requests" in changes:
            reservation.change_special_requests(changes["special_requests"])
        if status is not None:
            reservation.change_status(status)

        reservation = await self.repository.update(reservation)
        logger.info(
            "Reservation %s updated by user %s (fields: %s)",
            reservation_id, principal.user_id, ", ".join(sorted(changes)) or "none"
        )
        return ReservationView(reservation=reservation, room=view.room, hotel=view.hotel)

    async def cancel_reservation(self, principal: Principal, reservation_id: UUID) -> ReservationView:
        """Soft-cancel; the current status is not checked"""
        view = await self._load_view(reservation_id)
        self._access(principal, view).ensure_can_access("cancel")

        reservation = view.reservation.model_copy(deep=True)
        reservation.cancel()
        reservation = await self.repository.update(reservation)
        logger.info("Reservation %s cancelled by user %s", reservation_id, principal.user_id)
        return ReservationView(reservation=reservation, room=view.room, hotel=view.hotel)

    # ==================== HELPERS ====================
    def _access(self, principal: Principal, view: ReservationView) -> ReservationAccess:
        access = ReservationAccess(principal, view.reservation, view.hotel)
        if not access.can_access():
            logger.warning(
                "User %s denied access to reservation %s",
                principal.user_id, view.reservation.reservation_id
            )
        return access

    @staticmethod
    def _rejected(message: str, room_id: UUID) -> InvalidRequestError:
        logger.warning("Booking rejected for room %s: %s", room_id, message)
        return InvalidRequestError(message)

    @staticmethod
    def _common_filters(
        status: Optional[ReservationStatus],
        from_date: Optional[datetime],
        to_date: Optional[datetime]
    ) -> List[filters.ReservationPredicate]:
        predicates = []
        if status is not None:
            predicates.append(filters.with_status(status))
        if from_date is not None:
            predicates.append(filters.checking_in_from(parse_instant(from_date)))
        if to_date is not None:
            predicates.append(filters.checking_out_by(parse_instant(to_date)))
        return predicates

    async def _page(self, predicate: filters.ReservationPredicate, page_request: PageRequest) -> ReservationPage:
        reservations = await self.repository.find_matching(
            predicate,
            sort_by=page_request.sort_by,
            descending=page_request.descending,
            offset=page_request.offset,
            limit=page_request.limit
        )
        total = await self.repository.count_matching(predicate)
        views = [await self._view_of(r) for r in reservations]
        return ReservationPage(data=views, pagination=PageInfo.build(total, page_request))

    async def _load_view(self, reservation_id: UUID) -> ReservationView:
        reservation = await self.repository.find_by_id(reservation_id)
        if not reservation:
            raise NotFoundError("Reservation not found")
        return await self._view_of(reservation)

    async def _view_of(self, reservation: Reservation) -> ReservationView:
        room = await self._get_room(reservation.room_id)
        hotel = await self._get_hotel(room.hotel_id)
        return ReservationView(reservation=reservation, room=room, hotel=hotel)

    async def _get_room(self, room_id: UUID) -> Room:
        room = await self.room_repo.find_by_id(room_id)
        if not room:
            raise NotFoundError("Room not found")
        return room

    async def _get_hotel(self, hotel_id: UUID) -> Hotel:
        hotel = await self.hotel_repo.find_by_id(hotel_id)
        if not hotel:
            raise NotFoundError("Hotel not found")
        return hotel


class CatalogService:
    """Service for hotels and rooms"""

    def __init__(self,
                 hotel_repo: HotelRepository,
                 room_repo: RoomRepository,
                 reservation_repo: ReservationRepository):
        self.hotel_repo = hotel_repo
        self.room_repo = room_repo
        self.reservation_repo = reservation_repo

    # ==================== HOTELS ====================
    async def create_hotel(
        self,
        principal: Principal,
        name: str,
        city: str,
        country: str,
        description: str = "",
        address: str = "",
        rating: Optional[Decimal] = None,
        amenities: Optional[List[str]] = None
    ) -> Hotel:
        """Create a hotel owned by the principal"""
        hotel = Hotel(
            owner_id=principal.user_id,
            name=name,
            city=city,
            country=country,
            description=description,
            address=address,
            rating=rating,
            amenities=amenities or []
        )
        hotel = await self.hotel_repo.save(hotel)
        logger.info("Hotel %s created by user %s", hotel.hotel_id, principal.user_id)
        return hotel

    async def get_hotel(self, hotel_id: UUID) -> Hotel:
        hotel = await self.hotel_repo.find_by_id(hotel_id)
        if not hotel:
            raise NotFoundError("Hotel not found")
        return hotel

    async def list_hotels(
        self,
        page_request: PageRequest,
        search: Optional[str] = None,
        city: Optional[str] = None,
        country: Optional[str] = None,
        min_rating: Optional[Decimal] = None
    ) -> HotelPage:
        """Public hotel search"""
        predicates = []
        if search:
            predicates.append(filters.hotel_text(search))
        if city:
            predicates.append(filters.in_city(city))
        if country:
            predicates.append(filters.in_country(country))
        if min_rating is not None:
            predicates.append(filters.rated_at_least(min_rating))
        return await self._hotel_page(filters.all_of(*predicates), page_request)

    async def list_owner_hotels(
        self,
        principal: Principal,
        page_request: PageRequest,
        search: Optional[str] = None
    ) -> HotelPage:
        predicates = [filters.owned_by(principal.user_id)]
        if search:
            predicates.append(filters.hotel_text(search, ("name", "city")))
        return await self._hotel_page(filters.all_of(*predicates), page_request)

    async def update_hotel(self, principal: Principal, hotel_id: UUID, changes: dict) -> Hotel:
        hotel = await self.get_hotel(hotel_id)
        self._ensure_manages(principal, hotel, "update this hotel")

        try:
            updated = Hotel(**{**hotel.model_dump(), **changes})
        except ValueError as e:
            raise InvalidRequestError(str(e))
        updated.touch()

        hotel = await self.hotel_repo.update(updated)
        logger.info("Hotel %s updated (fields: %s)", hotel_id, ", ".join(sorted(changes)))
        return hotel

    async def delete_hotel(self, principal: Principal, hotel_id: UUID) -> None:
        """Delete a hotel together with its rooms and their reservations"""
        hotel = await self.get_hotel(hotel_id)
        self._ensure_manages(principal, hotel, "delete this hotel")

        rooms = await self.room_repo.find_by_hotels([hotel_id])
        removed = await self.reservation_repo.delete_matching(filters.for_rooms(r.room_id for r in rooms))
        for room in rooms:
            await self.room_repo.delete(room.room_id)
        await self.hotel_repo.delete(hotel_id)
        logger.info(
            "Hotel %s deleted by user %s (%d rooms, %d reservations)",
            hotel_id, principal.user_id, len(rooms), removed
        )

    # ==================== ROOMS ====================
    async def get_hotel_rooms(self, hotel_id: UUID) -> List[Room]:
        hotel = await self.get_hotel(hotel_id)
        return await self.room_repo.find_by_hotels([hotel.hotel_id])

    async def list_rooms(
        self,
        page_request: PageRequest,
        search: Optional[str] = None,
        hotel_id: Optional[UUID] = None,
        room_type: Optional[RoomType] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        min_capacity: Optional[int] = None,
        is_available: Optional[bool] = None
    ) -> RoomPage:
        """Public room search; the text search also matches hotel name, city and country"""
        predicates = []
        if search:
            hotels = await self.hotel_repo.find_matching(
                filters.hotel_text(search, ("name", "city", "country"))
            )
            predicates.append(filters.any_of(
                filters.room_text(search),
                filters.in_hotels(h.hotel_id for h in hotels)
            ))
        if hotel_id is not None:
            predicates.append(filters.in_hotel(hotel_id))
        if room_type is not None:
            predicates.append(filters.of_type(room_type))
        if min_price is not None:
            predicates.append(filters.priced_from(min_price))
        if max_price is not None:
            predicates.append(filters.priced_up_to(max_price))
        if min_capacity is not None:
            predicates.append(filters.hosting_at_least(min_capacity))
        if is_available is not None:
            predicates.append(filters.availability_flag(is_available))
        return await self._room_page(filters.all_of(*predicates), page_request)

    async def list_rooms_of_hotel(
        self,
        hotel_id: UUID,
        page_request: PageRequest,
        search: Optional[str] = None,
        room_type: Optional[RoomType] = None,
        is_available: Optional[bool] = None
    ) -> RoomPage:
        """Paginated rooms of one hotel, for the owner's management screens"""
        await self.get_hotel(hotel_id)
        predicates = [filters.in_hotel(hotel_id)]
        if search:
            predicates.append(filters.room_text(search))
        if room_type is not None:
            predicates.append(filters.of_type(room_type))
        if is_available is not None:
            predicates.append(filters.availability_flag(is_available))
        return await self._room_page(filters.all_of(*predicates), page_request)

    async def create_room(
        self,
        principal: Principal,
        hotel_id: UUID,
        name: str,
        price_per_night: Decimal,
        capacity: int,
        room_type: RoomType = RoomType.DOUBLE,
        description: str = "",
        amenities: Optional[List[str]] = None,
        is_available: bool = True
    ) -> Tuple[Room, Hotel]:
        """Add a room to a hotel the principal owns"""
        hotel = await self.get_hotel(hotel_id)
        self._ensure_manages(principal, hotel, "add rooms to this hotel")

        room = Room(
            hotel_id=hotel.hotel_id,
            name=name,
            price_per_night=price_per_night,
            capacity=capacity,
            room_type=room_type,
            description=description,
            amenities=amenities or [],
            is_available=is_available
        )
        room = await self.room_repo.save(room)
        logger.info("Room %s created in hotel %s", room.room_id, hotel.hotel_id)
        return room, hotel

    async def get_room(self, room_id: UUID) -> Tuple[Room, Hotel]:
        room = await self.room_repo.find_by_id(room_id)
        if not room:
            raise NotFoundError("Room not found")
        return room, await self.get_hotel(room.hotel_id)

    async def update_room(self, principal: Principal, room_id: UUID, changes: dict) -> Tuple[Room, Hotel]:
        """Apply field changes to a room of a hotel the principal owns"""
        room, hotel = await self.get_room(room_id)
        self._ensure_manages(principal, hotel, "update this room")

        # Re-validate through the model so price and capacity stay positive
        try:
            updated = Room(**{**room.model_dump(), **changes})
        except ValueError as e:
            raise InvalidRequestError(str(e))
        updated.touch()

        room = await self.room_repo.update(updated)
        logger.info("Room %s updated (fields: %s)", room_id, ", ".join(sorted(changes)))
        return room, hotel

    async def delete_room(self, principal: Principal, room_id: UUID) -> None:
        """Delete a room together with its reservations"""
        room, hotel = await self.get_room(room_id)
        self._ensure_manages(principal, hotel, "delete this room")

        removed = await self.reservation_repo.delete_matching(filters.for_room(room_id))
        await self.room_repo.delete(room_id)
        logger.info("Room %s deleted by user %s (%d reservations)", room_id, principal.user_id, removed)

    # ==================== HELPERS ====================
    @staticmethod
    def _ensure_manages(principal: Principal, hotel: Hotel, action: str) -> None:
        if not hotel.is_owned_by(principal.user_id) and not principal.is_admin:
            logger.warning("User %s denied: %s (hotel %s)", principal.user_id, action, hotel.hotel_id)
            raise ForbiddenError(f"Not authorized to {action}")

    async def _hotel_page(self, predicate: filters.HotelPredicate, page_request: PageRequest) -> HotelPage:
        hotels = await self.hotel_repo.find_matching(
            predicate,
            sort_by=page_request.sort_by,
            descending=page_request.descending,
            offset=page_request.offset,
            limit=page_request.limit
        )
        total = await self.hotel_repo.count_matching(predicate)
        return HotelPage(data=hotels, pagination=PageInfo.build(total, page_request))

    async def _room_page(self, predicate: filters.RoomPredicate, page_request: PageRequest) -> RoomPage:
        rooms = await self.room_repo.find_matching(
            predicate,
            sort_by=page_request.sort_by,
            descending=page_request.descending,
            offset=page_request.offset,
            limit=page_request.limit
        )
        total = await self.room_repo.count_matching(predicate)

        hotels: Dict[UUID, Hotel] = {}
        listings = []
        for room in rooms:
            if room.hotel_id not in hotels:
                hotels[room.hotel_id] = await self.get_hotel(room.hotel_id)
            listings.append(RoomListing(room=room, hotel=hotels[room.hotel_id]))
        return RoomPage(data=listings, pagination=PageInfo.build(total, page_request))


class AccountService:
    """Service for registration, login and profile"""

    def __init__(self, repository: UserRepository):
        self.repository = repository

    async def register(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        role: UserRole = UserRole.CLIENT
    ) -> Tuple[User, str]:
        """Create a user and issue a token"""
        if await self.repository.find_by_email(email):
            raise InvalidRequestError("User with this email already exists")

        user = User(
            email=email,
            first_name=first_name,
            last_name=last_name,
            role=role,
            hashed_password=get_password_hash(password)
        )
        user = await self.repository.save(user)
        logger.info("User %s registered with role %s", user.user_id, user.role.value)
        return user, create_user_token(user)

    async def login(self, email: str, password: str) -> Tuple[User, str]:
        user = await self.repository.find_by_email(email)
        if not user or not verify_password(password, user.hashed_password):
            logger.warning("Failed login for %s", email)
            raise AuthenticationError("Invalid credentials")
        return user, create_user_token(user)

    async def get_user(self, user_id: UUID) -> User:
        user = await self.repository.find_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    async def update_profile(
        self,
        principal: Principal,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None
    ) -> User:
        """Change the caller's name; empty values are ignored"""
        user = (await self.get_user(principal.user_id)).model_copy()
        user.rename(first_name, last_name)
        user = await self.repository.update(user)
        logger.info("User %s updated their profile", user.user_id)
        return user
