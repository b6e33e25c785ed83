"""Schedule, block, booking and catalog records consumed by the engine.

These are read-only inputs authored elsewhere (staff screens, the booking
flow). The engine never mutates them; the store replaces whole records.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Iterable, Optional

from availability_engine.config import settings
from availability_engine.errors import InvalidDuration, InvalidInterval
from availability_engine.intervals import Interval, contains, overlaps


@dataclass(frozen=True)
class Resource:
    """A bookable professional."""
    id: str
    name: str
    active: bool = True


@dataclass(frozen=True)
class DaySchedule:
    """
    Weekly recurring availability for one weekday (0=Monday .. 6=Sunday).

    An open day has exactly one window; breaks must sit inside it and
    must not overlap each other.
    """
    weekday: int
    is_open: bool
    window: Optional[Interval] = None
    breaks: tuple[Interval, ...] = ()

    def __post_init__(self) -> None:
        if not 0 <= self.weekday <= 6:
            raise InvalidInterval(f"Weekday must be 0-6, got {self.weekday}")
        object.__setattr__(self, "breaks", tuple(sorted(self.breaks)))
        if not self.is_open:
            return
        if self.window is None:
            raise InvalidInterval(f"Open weekday {self.weekday} has no working window")
        for brk in self.breaks:
            if not contains(self.window, brk):
                raise InvalidInterval(f"Break {brk} is outside the working window {self.window}")
        for earlier, later in zip(self.breaks, self.breaks[1:]):
            if overlaps(earlier, later):
                raise InvalidInterval(f"Breaks {earlier} and {later} overlap")

    @classmethod
    def open_day(
        cls,
        weekday: int,
        start: str,
        end: str,
        breaks: Iterable[tuple[str, str]] = (),
    ) -> "DaySchedule":
        return cls(
            weekday=weekday,
            is_open=True,
            window=Interval.from_strings(start, end),
            breaks=tuple(Interval.from_strings(s, e) for s, e in breaks),
        )

    @classmethod
    def closed_day(cls, weekday: int) -> "DaySchedule":
        return cls(weekday=weekday, is_open=False)


@dataclass(frozen=True)
class DayBlock:
    """Full-day unavailability over an inclusive date range (vacation, leave)."""
    id: str
    resource_id: str
    start_date: date
    end_date: date
    reason: str

    def __post_init__(self) -> None:
        if self.start_date > self.end_date:
            raise ValueError(
                f"Block {self.id} starts after it ends: {self.start_date} > {self.end_date}"
            )

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


@dataclass(frozen=True)
class TimeBlock:
    """Partial-day unavailability on one date."""
    id: str
    resource_id: str
    date: date
    interval: Interval
    reason: str


@dataclass(frozen=True)
class Service:
    id: str
    name: str
    duration_minutes: Optional[int] = None
    active: bool = True

    @property
    def base_duration(self) -> int:
        """Catalog duration, or the configured default when the service has none."""
        if self.duration_minutes is None:
            return settings.schedule.default_service_duration
        if self.duration_minutes <= 0:
            raise InvalidDuration(
                f"Service {self.id} has non-positive duration {self.duration_minutes}"
            )
        return self.duration_minutes


class CampaignType(str, Enum):
    UPSELL = "upsell"
    DOWNSELL = "downsell"


@dataclass(frozen=True)
class Campaign:
    """
    Promotional offer shown after a service is chosen.

    An upsell adds ``linked_service_id`` to the main service; a downsell
    offers it instead. ``custom_duration_minutes`` is the total time of the
    resulting booking and replaces the base duration when present.
    """
    id: str
    type: CampaignType
    main_service_id: str
    linked_service_id: str
    custom_duration_minutes: Optional[int] = None
    active: bool = True
    message: str = ""

    def applies_to(self, service_id: str) -> bool:
        return service_id in (self.main_service_id, self.linked_service_id)


@dataclass(frozen=True)
class BookingRecord:
    """A committed booking; ``interval`` already carries the effective duration."""
    id: str
    resource_id: str
    date: date
    interval: Interval
    source_service_id: str
    applied_campaign_id: Optional[str] = None
    status: str = "scheduled"
    client_name: str = ""

    @property
    def duration(self) -> int:
        return self.interval.duration

    def is_active(self) -> bool:
        return self.status.lower() in settings.schedule.active_booking_statuses


@dataclass(frozen=True)
class AvailabilitySnapshot:
    """Everything the engine needs about one resource on one date, read at ``version``."""
    resource: Resource
    day: date
    schedules: tuple[DaySchedule, ...] = ()
    day_blocks: tuple[DayBlock, ...] = ()
    time_blocks: tuple[TimeBlock, ...] = ()
    bookings: tuple[BookingRecord, ...] = field(default_factory=tuple)
    version: int = 0

    def active_bookings(self, exclude_booking_id: Optional[str] = None) -> list[BookingRecord]:
        """Bookings that occupy time, optionally ignoring the one being rescheduled."""
        return [
            b for b in self.bookings
            if b.is_active() and b.id != exclude_booking_id
        ]
