"""
In-memory availability store.

Reference backend for tests, the console demo, and single-process use.
A production deployment would back ``AvailabilityStore`` with a database
where the same guarantee comes from an exclusion constraint on
(resource_id, date, interval) or a serializable transaction.
"""

import logging
import threading
from contextlib import contextmanager
from datetime import date
from typing import Iterator

from availability_engine.errors import OverlapConstraintError, UnknownEntity
from availability_engine.intervals import overlaps
from availability_engine.scheduling.schedule_resolver import validate_week_schedule
from availability_engine.schemas.schedule_schema import (
    BookingRecord,
    Campaign,
    CampaignType,
    DayBlock,
    DaySchedule,
    Resource,
    Service,
    TimeBlock,
)
from availability_engine.store.ports import AvailabilityStore

logger = logging.getLogger(__name__)

_Key = tuple[str, date]


class InMemoryStore(AvailabilityStore):
    """Thread-safe store; writers for one (resource, date) are serialized by an RLock."""

    def __init__(self) -> None:
        self._resources: dict[str, Resource] = {}
        self._schedules: dict[str, list[DaySchedule]] = {}
        self._day_blocks: dict[str, DayBlock] = {}
        self._time_blocks: dict[str, TimeBlock] = {}
        self._services: dict[str, Service] = {}
        self._campaigns: dict[str, Campaign] = {}
        self._bookings: dict[str, BookingRecord] = {}
        self._versions: dict[_Key, int] = {}
        # bumped by edits that reach every date of a resource (schedule, day blocks)
        self._generations: dict[str, int] = {}
        self._locks: dict[_Key, threading.RLock] = {}
        self._registry_lock = threading.Lock()

    # ------------------------------------------------------------------ #
    # Authoring (staff-side writes)
    # ------------------------------------------------------------------ #

    def add_resource(self, resource: Resource) -> None:
        self._resources[resource.id] = resource
        self._bump_resource(resource.id)

    def set_week_schedule(self, resource_id: str, schedules: list[DaySchedule]) -> None:
        self.get_resource(resource_id)
        validate_week_schedule(schedules)
        self._schedules[resource_id] = list(schedules)
        self._bump_resource(resource_id)

    def add_day_block(self, block: DayBlock) -> None:
        self._day_blocks[block.id] = block
        self._bump_resource(block.resource_id)

    def add_time_block(self, block: TimeBlock) -> None:
        with self.locked(block.resource_id, block.date):
            self._time_blocks[block.id] = block
            self._bump((block.resource_id, block.date))

    def remove_block(self, block_id: str) -> None:
        """Unblock: blocks are immutable, so removal is the only edit."""
        day_block = self._day_blocks.pop(block_id, None)
        if day_block is not None:
            self._bump_resource(day_block.resource_id)
            return
        time_block = self._time_blocks.pop(block_id, None)
        if time_block is None:
            raise UnknownEntity(f"Block {block_id} not found.")
        with self.locked(time_block.resource_id, time_block.date):
            self._bump((time_block.resource_id, time_block.date))

    def add_service(self, service: Service) -> None:
        self._services[service.id] = service

    def add_campaign(self, campaign: Campaign) -> None:
        self._campaigns[campaign.id] = campaign

    # ------------------------------------------------------------------ #
    # ScheduleSource
    # ------------------------------------------------------------------ #

    def get_resource(self, resource_id: str) -> Resource:
        try:
            return self._resources[resource_id]
        except KeyError:
            raise UnknownEntity(f"Resource {resource_id} not found.") from None

    def get_day_schedules(self, resource_id: str) -> list[DaySchedule]:
        return list(self._schedules.get(resource_id, []))

    def get_day_blocks(self, resource_id: str, day: date) -> list[DayBlock]:
        return [
            b for b in self._day_blocks.values()
            if b.resource_id == resource_id and b.covers(day)
        ]

    def get_time_blocks(self, resource_id: str, day: date) -> list[TimeBlock]:
        blocks = [
            b for b in self._time_blocks.values()
            if b.resource_id == resource_id and b.date == day
        ]
        return sorted(blocks, key=lambda b: b.interval)

    # ------------------------------------------------------------------ #
    # CatalogSource
    # ------------------------------------------------------------------ #

    def get_service(self, service_id: str) -> Service:
        try:
            return self._services[service_id]
        except KeyError:
            raise UnknownEntity(f"Service {service_id} not found.") from None

    def get_campaign(self, campaign_id: str) -> Campaign:
        try:
            return self._campaigns[campaign_id]
        except KeyError:
            raise UnknownEntity(f"Campaign {campaign_id} not found.") from None

    def find_campaigns(self, service_id: str, campaign_type: CampaignType) -> list[Campaign]:
        return [
            c for c in self._campaigns.values()
            if c.active and c.type == campaign_type and c.main_service_id == service_id
        ]

    # ------------------------------------------------------------------ #
    # BookingRepository
    # ------------------------------------------------------------------ #

    def get_bookings(self, resource_id: str, day: date) -> list[BookingRecord]:
        return [
            b for b in list(self._bookings.values())
            if b.resource_id == resource_id and b.date == day
        ]

    def get_booking(self, booking_id: str) -> BookingRecord:
        try:
            return self._bookings[booking_id]
        except KeyError:
            raise UnknownEntity(f"Booking {booking_id} not found.") from None

    def version(self, resource_id: str, day: date) -> int:
        return self._versions.get((resource_id, day), 0) + self._generations.get(resource_id, 0)

    def _lock_for(self, key: _Key) -> threading.RLock:
        with self._registry_lock:
            return self._locks.setdefault(key, threading.RLock())

    @contextmanager
    def locked(self, resource_id: str, day: date) -> Iterator[None]:
        lock = self._lock_for((resource_id, day))
        with lock:
            yield

    def _check_exclusion(self, record: BookingRecord) -> None:
        if not record.is_active():
            return
        for existing in self.get_bookings(record.resource_id, record.date):
            if existing.id == record.id or not existing.is_active():
                continue
            if overlaps(existing.interval, record.interval):
                raise OverlapConstraintError(
                    f"Booking {record.id} ({record.interval}) overlaps booking "
                    f"{existing.id} ({existing.interval}) for {record.resource_id} on {record.date}"
                )

    def _bump(self, key: _Key) -> None:
        self._versions[key] = self._versions.get(key, 0) + 1

    def _bump_resource(self, resource_id: str) -> None:
        with self._registry_lock:
            self._generations[resource_id] = self._generations.get(resource_id, 0) + 1

    def insert_booking(self, record: BookingRecord) -> BookingRecord:
        with self.locked(record.resource_id, record.date):
            if record.id in self._bookings:
                raise OverlapConstraintError(f"Booking {record.id} already exists.")
            self._check_exclusion(record)
            self._bookings[record.id] = record
            self._bump((record.resource_id, record.date))
        logger.debug("Stored booking %s (%s %s)", record.id, record.date, record.interval)
        return record

    def seed_booking(self, record: BookingRecord) -> BookingRecord:
        """Import an existing booking as-is. Imported history may already overlap."""
        with self.locked(record.resource_id, record.date):
            self._bookings[record.id] = record
            self._bump((record.resource_id, record.date))
        return record

    def replace_booking(self, record: BookingRecord) -> BookingRecord:
        previous = self.get_booking(record.id)
        keys = sorted({(previous.resource_id, previous.date), (record.resource_id, record.date)})
        locks = [self._lock_for(key) for key in keys]
        for lock in locks:
            lock.acquire()
        try:
            self._check_exclusion(record)
            self._bookings[record.id] = record
            for key in keys:
                self._bump(key)
        finally:
            for lock in reversed(locks):
                lock.release()
        return record

    def reset(self) -> None:
        """Clear all data. Used by test fixtures for isolation."""
        self._resources.clear()
        self._schedules.clear()
        self._day_blocks.clear()
        self._time_blocks.clear()
        self._services.clear()
        self._campaigns.clear()
        self._bookings.clear()
        self._versions.clear()
        self._generations.clear()
