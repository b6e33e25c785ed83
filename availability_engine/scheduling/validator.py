"""
Booking request validation against every exclusion source.

Checks run from the coarsest constraint to the finest so the reason shown
to the user names the most meaningful obstacle:

1. resource inactive / weekday closed     -> closed
2. full-day block covering the date       -> closed (day_block)
3. time blocks leaving no open time       -> closed (time_block)
4. outside the working window             -> conflict (working_hours)
5. overlapping break                      -> conflict (break)
6. overlapping partial-day time block     -> conflict (time_block)
7. overlapping active booking             -> conflict (booking)

Rejection is an expected outcome, so it is returned rather than raised.
Malformed input (bad time, non-positive duration) still raises.
"""

import logging
from dataclasses import dataclass, replace
from typing import Optional

from availability_engine.errors import ConstraintSource, RejectionKind
from availability_engine.intervals import Interval, contains, overlaps
from availability_engine.scheduling.schedule_resolver import (
    day_schedule_for,
    open_intervals_for,
)
from availability_engine.scheduling.slot_generator import require_positive_minutes
from availability_engine.schemas.schedule_schema import AvailabilitySnapshot
from availability_engine.utils import MINUTES_PER_DAY, format_date, format_time

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationResult:
    """Accepted with the interval to book, or rejected with display-ready detail."""
    accepted: bool
    interval: Optional[Interval] = None
    kind: Optional[RejectionKind] = None
    source: Optional[ConstraintSource] = None
    reason: str = ""
    entity_id: Optional[str] = None
    conflicting: Optional[Interval] = None

    @classmethod
    def accept(cls, interval: Interval) -> "ValidationResult":
        return cls(accepted=True, interval=interval)

    @classmethod
    def reject(
        cls,
        kind: RejectionKind,
        source: ConstraintSource,
        reason: str,
        entity_id: Optional[str] = None,
        conflicting: Optional[Interval] = None,
        interval: Optional[Interval] = None,
    ) -> "ValidationResult":
        return cls(
            accepted=False,
            interval=interval,
            kind=kind,
            source=source,
            reason=reason,
            entity_id=entity_id,
            conflicting=conflicting,
        )

    def as_stale(self) -> "ValidationResult":
        """Re-label a rejection found at commit time after the read-path check passed."""
        return replace(
            self,
            kind=RejectionKind.STALE_DATA,
            reason=f"This time is no longer available. {self.reason}",
        )


def validate_booking(
    snapshot: AvailabilitySnapshot,
    start_minute: int,
    duration_minutes: int,
    exclude_booking_id: Optional[str] = None,
) -> ValidationResult:
    """Validate booking ``duration_minutes`` from ``start_minute`` against one snapshot."""
    require_positive_minutes("Duration", duration_minutes)
    resource = snapshot.resource
    day_label = format_date(snapshot.day)

    if not resource.active:
        return ValidationResult.reject(
            RejectionKind.CLOSED, ConstraintSource.SCHEDULE,
            f"{resource.name} is inactive and cannot take bookings.",
            entity_id=resource.id,
        )

    schedule = day_schedule_for(snapshot.schedules, snapshot.day)
    if schedule is None or not schedule.is_open:
        return ValidationResult.reject(
            RejectionKind.CLOSED, ConstraintSource.SCHEDULE,
            f"{resource.name} does not work on {day_label}.",
            entity_id=resource.id,
        )

    for block in snapshot.day_blocks:
        if block.covers(snapshot.day):
            return ValidationResult.reject(
                RejectionKind.CLOSED, ConstraintSource.DAY_BLOCK,
                f"{resource.name} is away from {format_date(block.start_date)} "
                f"to {format_date(block.end_date)} ({block.reason}).",
                entity_id=block.id,
            )

    open_intervals = open_intervals_for(snapshot)
    if not open_intervals:
        blocks = [b for b in snapshot.time_blocks if b.date == snapshot.day]
        if not blocks:
            return ValidationResult.reject(
                RejectionKind.CLOSED, ConstraintSource.SCHEDULE,
                f"{resource.name} has no working time on {day_label}.",
                entity_id=resource.id,
            )
        return ValidationResult.reject(
            RejectionKind.CLOSED, ConstraintSource.TIME_BLOCK,
            f"{resource.name} has no free time left on {day_label} "
            f"({', '.join(b.reason for b in blocks)}).",
            entity_id=blocks[0].id,
        )

    window = schedule.window
    end_minute = start_minute + duration_minutes
    if end_minute > MINUTES_PER_DAY:
        return ValidationResult.reject(
            RejectionKind.CONFLICT, ConstraintSource.WORKING_HOURS,
            f"A {duration_minutes}-minute booking at {format_time(start_minute)} "
            f"would run past midnight.",
            conflicting=window,
        )

    proposed = Interval(start_minute, end_minute)
    if not contains(window, proposed):
        return ValidationResult.reject(
            RejectionKind.CONFLICT, ConstraintSource.WORKING_HOURS,
            f"{resource.name} works from {format_time(window.start)} "
            f"to {format_time(window.end)} on {day_label}.",
            conflicting=window, interval=proposed,
        )

    for brk in schedule.breaks:
        if overlaps(proposed, brk):
            return ValidationResult.reject(
                RejectionKind.CONFLICT, ConstraintSource.BREAK,
                f"{proposed} overlaps {resource.name}'s break "
                f"from {format_time(brk.start)} to {format_time(brk.end)}.",
                conflicting=brk, interval=proposed,
            )

    for block in snapshot.time_blocks:
        if block.date == snapshot.day and overlaps(proposed, block.interval):
            return ValidationResult.reject(
                RejectionKind.CONFLICT, ConstraintSource.TIME_BLOCK,
                f"{resource.name} is unavailable from {format_time(block.interval.start)} "
                f"to {format_time(block.interval.end)} ({block.reason}).",
                entity_id=block.id, conflicting=block.interval, interval=proposed,
            )

    for booking in snapshot.active_bookings(exclude_booking_id):
        if overlaps(proposed, booking.interval):
            return ValidationResult.reject(
                RejectionKind.CONFLICT, ConstraintSource.BOOKING,
                f"{resource.name} already has a booking on {day_label} from "
                f"{format_time(booking.interval.start)} to {format_time(booking.interval.end)}. "
                "Please choose another time.",
                entity_id=booking.id, conflicting=booking.interval, interval=proposed,
            )

    if not any(contains(free, proposed) for free in open_intervals):
        return ValidationResult.reject(
            RejectionKind.CONFLICT, ConstraintSource.SCHEDULE,
            f"{resource.name} is not available at {proposed} on {day_label}.",
            interval=proposed,
        )

    logger.debug("Accepted %s for %s on %s", proposed, resource.id, snapshot.day)
    return ValidationResult.accept(proposed)
