"""Booking request and availability response models exchanged with callers."""

from datetime import date as date_type
from typing import Optional

from pydantic import BaseModel, Field

from availability_engine.utils import parse_time


class BookingRequest(BaseModel):
    """A request to book ``service_id`` with ``resource_id`` at ``start_time`` on ``date``."""
    resource_id: str
    date: date_type
    start_time: str
    service_id: str
    applied_campaign_id: Optional[str] = None
    client_name: str = ""
    client_phone: Optional[str] = None

    @property
    def start_minute(self) -> int:
        """Start as minutes since midnight; raises InvalidInterval when malformed."""
        return parse_time(self.start_time)


class AvailabilitySlot(BaseModel):
    """Single bookable start time."""
    date: date_type
    time: str
    resource_id: str
    duration_minutes: int


class AvailabilityResponse(BaseModel):
    """Availability check result with a next-available fallback."""
    available: bool
    slots: list[AvailabilitySlot] = Field(default_factory=list)
    next_available: Optional[str] = None
    message: str = ""


class AvailableDate(BaseModel):
    """Summary of availability for a single date."""
    date: date_type
    day_name: str
    slot_count: int


class BookingLayout(BaseModel):
    """Where a booking card sits in the day view."""
    booking_id: str
    lane_index: int
    lane_count: int
    top_offset_minutes: int
    height_minutes: int


class BookingResponse(BaseModel):
    """Outcome of a commit, cancel or reschedule, ready for display."""
    success: bool
    message: str
    booking_id: Optional[str] = None
    date: Optional[date_type] = None
    time: str = ""
    end_time: str = ""
    rejection_kind: Optional[str] = None
    constraint: Optional[str] = None
    entity_id: Optional[str] = None
