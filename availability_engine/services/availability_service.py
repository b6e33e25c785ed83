"""
Read path: slot listing, availability checks and calendar layout.

Results are advisory. They are computed from a snapshot that may be stale
by the time the user acts; the booking service re-validates at commit.
"No availability" is an empty answer here, never an exception.
"""

import logging
from datetime import date, timedelta
from typing import Optional

from availability_engine.config import settings
from availability_engine.scheduling.duration_resolver import DurationResolver
from availability_engine.scheduling.lane_packer import layout_day
from availability_engine.scheduling.slot_generator import SlotGenerator, SlotSequence
from availability_engine.schemas.booking_schema import (
    AvailabilityResponse,
    AvailabilitySlot,
    AvailableDate,
    BookingLayout,
)
from availability_engine.store.ports import AvailabilityStore
from availability_engine.utils import format_date, format_time, parse_time

logger = logging.getLogger(__name__)


class AvailabilityService:
    """Slot picker and calendar queries for one store."""

    def __init__(self, store: AvailabilityStore) -> None:
        self._store = store
        self._durations = DurationResolver(store)
        self._slots = SlotGenerator(store)

    def slots_for_duration(
        self,
        resource_id: str,
        day: date,
        duration_minutes: int,
        granularity_minutes: Optional[int] = None,
        exclude_booking_id: Optional[str] = None,
    ) -> SlotSequence:
        return self._slots.generate_slots(
            resource_id, day, duration_minutes, granularity_minutes, exclude_booking_id
        )

    def list_available_times(
        self,
        resource_id: str,
        day: date,
        service_id: str,
        campaign_id: Optional[str] = None,
        granularity_minutes: Optional[int] = None,
    ) -> list[str]:
        """Bookable ``HH:MM`` start times for a service, honouring an accepted campaign."""
        duration = self._durations.for_service(service_id, campaign_id)
        return self.slots_for_duration(
            resource_id, day, duration, granularity_minutes
        ).as_times()

    def check_availability(
        self,
        resource_id: str,
        day: date,
        duration_minutes: int,
        preferred_time: Optional[str] = None,
        max_slots: Optional[int] = None,
    ) -> AvailabilityResponse:
        """
        Check one date, optionally for a preferred time.

        Returns the free slots on ``day`` and, when the day (or preferred
        time) is not free, the next available ``YYYY-MM-DD HH:MM``.
        """
        starts = list(self.slots_for_duration(resource_id, day, duration_minutes))

        def as_slot(start: int) -> AvailabilitySlot:
            return AvailabilitySlot(
                date=day,
                time=format_time(start),
                resource_id=resource_id,
                duration_minutes=duration_minutes,
            )

        if preferred_time is not None:
            preferred = parse_time(preferred_time)
            if preferred in starts:
                return AvailabilityResponse(
                    available=True,
                    slots=[as_slot(preferred)],
                    message=f"Available on {format_date(day)} at {format_time(preferred)}.",
                )

        shown = starts if max_slots is None else starts[:max_slots]
        if starts:
            prefix = (
                f"{preferred_time} is taken. " if preferred_time is not None else ""
            )
            return AvailabilityResponse(
                available=preferred_time is None,
                slots=[as_slot(s) for s in shown],
                next_available=None,
                message=f"{prefix}{len(starts)} time slots available on {format_date(day)}.",
            )

        return AvailabilityResponse(
            available=False,
            slots=[],
            next_available=self.next_available(resource_id, day + timedelta(days=1), duration_minutes),
            message=f"No availability on {format_date(day)}.",
        )

    def next_available(
        self,
        resource_id: str,
        from_day: date,
        duration_minutes: int,
        horizon_days: Optional[int] = None,
    ) -> Optional[str]:
        """First free ``YYYY-MM-DD HH:MM`` on or after ``from_day`` within the horizon."""
        horizon = horizon_days or settings.schedule.next_available_horizon_days
        for offset in range(horizon):
            day = from_day + timedelta(days=offset)
            first = next(iter(self.slots_for_duration(resource_id, day, duration_minutes)), None)
            if first is not None:
                return f"{day.isoformat()} {format_time(first)}"
        return None

    def get_available_dates(
        self,
        resource_id: str,
        from_day: date,
        duration_minutes: int,
        limit: int = 5,
        horizon_days: Optional[int] = None,
    ) -> list[AvailableDate]:
        """The next ``limit`` dates with at least one slot."""
        horizon = horizon_days or settings.schedule.next_available_horizon_days
        results: list[AvailableDate] = []
        for offset in range(horizon):
            day = from_day + timedelta(days=offset)
            count = sum(1 for _ in self.slots_for_duration(resource_id, day, duration_minutes))
            if count:
                results.append(
                    AvailableDate(date=day, day_name=day.strftime("%A"), slot_count=count)
                )
            if len(results) >= limit:
                break
        return results

    def layout_day(self, resource_id: str, day: date) -> list[BookingLayout]:
        """Calendar cards for the resource's active bookings on ``day``."""
        return layout_day(self._store.get_bookings(resource_id, day))
