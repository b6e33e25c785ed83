"""
Data-access interfaces the engine consumes.

Persistence of schedules, blocks, bookings and the service catalog lives
outside the engine. Any backend that implements ``AvailabilityStore`` can
feed the read path; the write path additionally relies on ``locked`` and
``insert_booking`` behaving as one atomic check-and-insert.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import date

from availability_engine.schemas.schedule_schema import (
    AvailabilitySnapshot,
    BookingRecord,
    Campaign,
    CampaignType,
    DayBlock,
    DaySchedule,
    Resource,
    Service,
    TimeBlock,
)


class ScheduleSource(ABC):
    @abstractmethod
    def get_resource(self, resource_id: str) -> Resource:
        """Return the resource or raise UnknownEntity."""
        raise NotImplementedError

    @abstractmethod
    def get_day_schedules(self, resource_id: str) -> list[DaySchedule]:
        """Weekly schedule rows; empty when the resource has none configured."""
        raise NotImplementedError

    @abstractmethod
    def get_day_blocks(self, resource_id: str, day: date) -> list[DayBlock]:
        """Full-day blocks whose inclusive range covers ``day``."""
        raise NotImplementedError

    @abstractmethod
    def get_time_blocks(self, resource_id: str, day: date) -> list[TimeBlock]:
        raise NotImplementedError


class CatalogSource(ABC):
    @abstractmethod
    def get_service(self, service_id: str) -> Service:
        raise NotImplementedError

    @abstractmethod
    def get_campaign(self, campaign_id: str) -> Campaign:
        raise NotImplementedError

    @abstractmethod
    def find_campaigns(self, service_id: str, campaign_type: CampaignType) -> list[Campaign]:
        """Active campaigns of ``campaign_type`` whose main service is ``service_id``."""
        raise NotImplementedError


class BookingRepository(ABC):
    @abstractmethod
    def get_bookings(self, resource_id: str, day: date) -> list[BookingRecord]:
        """All bookings for the resource and date, whatever their status."""
        raise NotImplementedError

    @abstractmethod
    def get_booking(self, booking_id: str) -> BookingRecord:
        raise NotImplementedError

    @abstractmethod
    def version(self, resource_id: str, day: date) -> int:
        """Monotonic counter bumped by every write touching (resource, date)."""
        raise NotImplementedError

    @abstractmethod
    def locked(self, resource_id: str, day: date) -> AbstractContextManager:
        """Serialize writers for (resource, date) for the duration of the block."""
        raise NotImplementedError

    @abstractmethod
    def insert_booking(self, record: BookingRecord) -> BookingRecord:
        """Persist a booking; raise OverlapConstraintError if it overlaps an active one."""
        raise NotImplementedError

    @abstractmethod
    def replace_booking(self, record: BookingRecord) -> BookingRecord:
        """Overwrite an existing booking (status change or move) under the same constraint."""
        raise NotImplementedError


class AvailabilityStore(ScheduleSource, CatalogSource, BookingRepository):
    """Everything the engine reads, plus the atomic booking writes."""

    def load_snapshot(self, resource_id: str, day: date) -> AvailabilitySnapshot:
        """Read one immutable view of (resource, date) for a single engine call."""
        # version first: a write landing mid-read makes the snapshot look older, never newer
        version = self.version(resource_id, day)
        return AvailabilitySnapshot(
            resource=self.get_resource(resource_id),
            day=day,
            schedules=tuple(self.get_day_schedules(resource_id)),
            day_blocks=tuple(self.get_day_blocks(resource_id, day)),
            time_blocks=tuple(self.get_time_blocks(resource_id, day)),
            bookings=tuple(self.get_bookings(resource_id, day)),
            version=version,
        )
