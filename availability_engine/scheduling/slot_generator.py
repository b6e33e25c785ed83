"""
Candidate start times for one resource, date and duration.

Walks each open interval at ``granularity`` steps from its start, keeping a
candidate only when ``[start, start + duration)`` fits inside that same open
interval and overlaps no active booking. Open intervals are never
concatenated across breaks or blocks, so a duration longer than every single
interval yields nothing.

Usage:
    slots = SlotGenerator(store).generate_slots("res-1", day, 90, 30)
    list(slots)       # [540, 570, ...]
    slots.as_times()  # ["09:00", "09:30", ...]  (iterating again restarts)
"""

import logging
from datetime import date
from typing import Iterable, Iterator, Optional, TYPE_CHECKING

from availability_engine.config import settings
from availability_engine.errors import InvalidDuration
from availability_engine.intervals import Interval, contains, overlaps
from availability_engine.scheduling.schedule_resolver import open_intervals_for
from availability_engine.schemas.schedule_schema import AvailabilitySnapshot
from availability_engine.utils import format_time

if TYPE_CHECKING:
    from availability_engine.store.ports import AvailabilityStore

logger = logging.getLogger(__name__)


def require_positive_minutes(name: str, value: Optional[int]) -> int:
    """Return ``value`` if it is a positive int of minutes, else raise InvalidDuration."""
    if value is None or isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidDuration(f"{name} must be a positive number of minutes, got {value!r}")
    return value


class SlotSequence:
    """Lazy, finite, restartable sequence of free start minutes in ascending order."""

    def __init__(
        self,
        open_intervals: Iterable[Interval],
        busy: Iterable[Interval],
        duration_minutes: int,
        granularity_minutes: int,
    ) -> None:
        self._open = tuple(sorted(open_intervals))
        self._busy = tuple(busy)
        self._duration = require_positive_minutes("Duration", duration_minutes)
        self._granularity = require_positive_minutes("Granularity", granularity_minutes)

    @property
    def duration_minutes(self) -> int:
        return self._duration

    def __iter__(self) -> Iterator[int]:
        for window in self._open:
            start = window.start
            while start + self._duration <= window.end:
                proposed = Interval.starting_at(start, self._duration)
                if contains(window, proposed) and not any(
                    overlaps(proposed, taken) for taken in self._busy
                ):
                    yield start
                start += self._granularity

    def as_times(self) -> list[str]:
        """Start times as ``HH:MM`` strings for slot pickers."""
        return [format_time(start) for start in self]

    def __repr__(self) -> str:
        return (
            f"SlotSequence(open={[str(i) for i in self._open]}, "
            f"duration={self._duration}, granularity={self._granularity})"
        )


def slots_for_snapshot(
    snapshot: AvailabilitySnapshot,
    duration_minutes: int,
    granularity_minutes: Optional[int] = None,
    exclude_booking_id: Optional[str] = None,
) -> SlotSequence:
    """Build the slot sequence for one snapshot."""
    granularity = (
        settings.schedule.slot_granularity_minutes
        if granularity_minutes is None
        else granularity_minutes
    )
    busy = [b.interval for b in snapshot.active_bookings(exclude_booking_id)]
    return SlotSequence(open_intervals_for(snapshot), busy, duration_minutes, granularity)


class SlotGenerator:
    """Generates slots from the latest store data."""

    def __init__(self, store: "AvailabilityStore") -> None:
        self._store = store

    def generate_slots(
        self,
        resource_id: str,
        day: date,
        requested_duration_minutes: int,
        granularity_minutes: Optional[int] = None,
        exclude_booking_id: Optional[str] = None,
    ) -> SlotSequence:
        require_positive_minutes("Duration", requested_duration_minutes)
        if granularity_minutes is not None:
            require_positive_minutes("Granularity", granularity_minutes)
        snapshot = self._store.load_snapshot(resource_id, day)
        slots = slots_for_snapshot(
            snapshot, requested_duration_minutes, granularity_minutes, exclude_booking_id
        )
        logger.debug("Slots for %s on %s: %r", resource_id, day, slots)
        return slots
