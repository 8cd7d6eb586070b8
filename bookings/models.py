from datetime import date as date_type, datetime, time as time_type, timedelta
from enum import Enum
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, Field, ConfigDict


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


ALLOWED_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.CANCELLED, BookingStatus.COMPLETED}),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.COMPLETED: frozenset(),
}


class CreateBookingRequest(BaseModel):
    provider_id: str = Field(..., description="User who teaches the session")
    skill_id: Optional[str] = None
    date: date_type
    time: time_type
    duration: Optional[int] = Field(default=None, description="Minutes, defaults to 60")
    message: Optional[str] = None

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "provider_id": "provider-1",
            "skill_id": "guitar-basics",
            "date": "2025-06-01",
            "time": "10:00",
            "duration": 60,
            "message": "Looking forward to it!"
        }
    })


class UpdateBookingStatusRequest(BaseModel):
    status: str


class Booking(BaseModel):
    id: UUID
    provider_id: str
    seeker_id: str
    skill_id: Optional[str] = None
    date: date_type
    time: time_type
    duration: int = 60
    status: BookingStatus = BookingStatus.PENDING
    message: str = ""
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @property
    def start(self) -> datetime:
        return datetime.combine(self.date, self.time)

    @property
    def end(self) -> datetime:
        return self.start + timedelta(minutes=self.duration)

    def is_active(self) -> bool:
        return self.status != BookingStatus.CANCELLED

    def involves(self, user_id: str) -> bool:
        return user_id in (self.provider_id, self.seeker_id)

    def overlaps(self, start: datetime, end: datetime) -> bool:
        # half-open: touching endpoints do not overlap
        return start < self.end and end > self.start

    def can_transition_to(self, status: BookingStatus) -> bool:
        return status in ALLOWED_TRANSITIONS[self.status]


class BookingView(Booking):
    provider_name: str
    seeker_name: str
    is_provider: Optional[bool] = None


class BookingResponse(BaseModel):
    message: str
    booking: BookingView
