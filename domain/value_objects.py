"""Domain Value Objects"""
import math
from pydantic import BaseModel, validator
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from uuid import UUID

from domain.enums import UserRole

ONE_DAY = timedelta(days=1)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_instant(value):
    """Normalize a date, date-time or ISO string to an aware UTC datetime.

    A bare date (``2024-01-01``) means midnight UTC of that day and naive
    date-times are read as UTC.
    """
    if isinstance(value, str):
        text = value.strip()
        if len(text) == 10:
            value = date.fromisoformat(text)
        else:
            value = datetime.fromisoformat(text.replace("Z", "+00:00"))

    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)

    return value


class StayPeriod(BaseModel):
    """Half-open interval [check_in, check_out) of a stay"""
    check_in: datetime
    check_out: datetime

    @validator('check_in', 'check_out', pre=True)
    def normalize_instant(cls, v):
        return parse_instant(v)

    @validator('check_out')
    def check_out_after_check_in(cls, v, values):
        if 'check_in' in values and v <= values['check_in']:
            raise ValueError('Check-out date must be after check-in date')
        return v

    def nights(self) -> int:
        """Number of nights, partial days rounded up"""
        return math.ceil((self.check_out - self.check_in) / ONE_DAY)

    def price_for(self, price_per_night: Decimal) -> Decimal:
        return Decimal(self.nights()) * Decimal(price_per_night)

    def overlaps(self, other: "StayPeriod") -> bool:
        """True when both intervals share at least one instant.

        Covers every overlap shape: one range swallowing the other and a
        partial overlap on either edge. Touching ranges (one checks out the
        moment the other checks in) do not overlap.
        """
        return self.check_in < other.check_out and other.check_in < self.check_out

    def starts_before(self, day: date) -> bool:
        return self.check_in.date() < day

    class Config:
        frozen = True


class Principal(BaseModel):
    """Authenticated identity passed into every use case"""
    user_id: UUID
    email: str
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    class Config:
        frozen = True
