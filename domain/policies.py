"""Reservation authorization rules"""
from domain.entities import Reservation, Hotel
from domain.enums import ReservationStatus, MANAGED_STATUSES
from domain.exceptions import ForbiddenError
from domain.value_objects import Principal


class ReservationAccess:
    """What a principal may do with one reservation.

    The guest who booked, the owner of the room's hotel and administrators
    may view, update and cancel. Only the hotel owner and administrators may
    confirm or complete.
    """

    def __init__(self, principal: Principal, reservation: Reservation, hotel: Hotel):
        self.principal = principal
        self.reservation = reservation
        self.hotel = hotel

    @property
    def is_guest(self) -> bool:
        return self.reservation.user_id == self.principal.user_id

    @property
    def is_hotel_owner(self) -> bool:
        return self.hotel.is_owned_by(self.principal.user_id)

    @property
    def is_admin(self) -> bool:
        return self.principal.is_admin

    def can_access(self) -> bool:
        return self.is_guest or self.is_hotel_owner or self.is_admin

    def can_set_status(self, status: ReservationStatus) -> bool:
        if status in MANAGED_STATUSES:
            return self.is_hotel_owner or self.is_admin
        return self.can_access()

    def ensure_can_access(self, action: str) -> None:
        if not self.can_access():
            raise ForbiddenError(f"Not authorized to {action} this reservation")

    def ensure_can_set_status(self, status: ReservationStatus) -> None:
        if not self.can_set_status(status):
            raise ForbiddenError("Only hotel owners can confirm or complete reservations")
