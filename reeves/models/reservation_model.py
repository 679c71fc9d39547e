import re
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from .gallery_model import utcnow

PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{9,15}$")

# Dinner service: 17:00 to 22:00 every half hour
FIRST_SEATING = time(17, 0)
LAST_SEATING = time(22, 0)
SEATING_STEP = timedelta(minutes=30)


def seating_times() -> List[str]:
    slots = []
    current = datetime.combine(date.today(), FIRST_SEATING)
    last = datetime.combine(date.today(), LAST_SEATING)
    while current <= last:
        slots.append(current.strftime("%H:%M"))
        current += SEATING_STEP
    return slots


SEATING_TIMES = seating_times()


class ReservationStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class SeatingPreference(str, Enum):
    WINDOW = "window"
    PRIVATE = "private"
    BAR = "bar"
    OUTDOOR = "outdoor"


Occasion = Literal["Birthday", "Anniversary", "Date Night", "Business Dinner", "Special Celebration", "None"]


class ReservationIn(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    phone: str
    date: date
    time: str
    guests: int = Field(ge=1)
    special_requests: str = ""
    seating_preference: Optional[SeatingPreference] = None
    occasion: Occasion = "None"

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v

    @field_validator("phone")
    @classmethod
    def valid_phone(cls, v: str) -> str:
        v = re.sub(r"\s+", "", v)
        if not PHONE_PATTERN.match(v):
            raise ValueError("Please enter a valid phone number")
        return v

    @field_validator("time")
    @classmethod
    def valid_seating(cls, v: str) -> str:
        if v not in SEATING_TIMES:
            raise ValueError(f"time must be one of {', '.join(SEATING_TIMES)}")
        return v


class Reservation(ReservationIn):
    id: str
    status: ReservationStatus = ReservationStatus.PENDING
    created_at: datetime = Field(default_factory=utcnow)


class ReservationStatusUpdate(BaseModel):
    status: ReservationStatus


def outside_booking_window(day: date, window_days: int, today: Optional[date] = None) -> bool:
    """Bookings open from today through the next `window_days` days."""
    today = today or date.today()
    return not today <= day <= today + timedelta(days=window_days)
