"""
Write path: validate, then atomically re-validate and commit.

The slot a user picked was computed from a snapshot that may be minutes
old. ``commit_booking`` therefore:

1. validates against a fresh snapshot (a failure here is a plain conflict,
   unless the caller's observed version shows the data moved underneath it);
2. takes the store's (resource, date) lock, reloads, re-validates and
   inserts as one step. A failure inside the lock means a concurrent
   request won the race and is reported as ``stale_data``.

Nothing is written before step 2 succeeds, so abandoning an attempt
leaves no partial state.
"""

import uuid
from contextlib import ExitStack, contextmanager
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, Iterator, Optional
from zoneinfo import ZoneInfo

from availability_engine.config import settings
from availability_engine.errors import (
    ConstraintSource,
    OverlapConstraintError,
    RejectionKind,
)
from availability_engine.logging_context import get_request_logger, new_request_id
from availability_engine.scheduling.duration_resolver import DurationResolver
from availability_engine.scheduling.validator import ValidationResult, validate_booking
from availability_engine.schemas.booking_schema import BookingRequest, BookingResponse
from availability_engine.schemas.schedule_schema import BookingRecord
from availability_engine.store.ports import AvailabilityStore
from availability_engine.utils import format_date, format_time, parse_time

logger = get_request_logger(__name__)

CANCELLED = "cancelled"

# Exclusions that can appear after a slot picker was rendered.
_MOVABLE_SOURCES = (
    ConstraintSource.BOOKING,
    ConstraintSource.TIME_BLOCK,
    ConstraintSource.DAY_BLOCK,
)


def business_today() -> date:
    """Today's date in the configured business timezone."""
    return datetime.now(ZoneInfo(settings.schedule.business_timezone)).date()


def _rejection(result: ValidationResult, day: date) -> BookingResponse:
    return BookingResponse(
        success=False,
        message=result.reason,
        date=day,
        time=format_time(result.interval.start) if result.interval else "",
        end_time=format_time(result.interval.end) if result.interval else "",
        rejection_kind=result.kind.value if result.kind else None,
        constraint=result.source.value if result.source else None,
        entity_id=result.entity_id,
    )


def _constraint_violation() -> ValidationResult:
    return ValidationResult.reject(
        RejectionKind.STALE_DATA,
        ConstraintSource.BOOKING,
        "This time was just booked by someone else. Please pick another slot.",
    )


class BookingService:
    """Validates and commits bookings against one store."""

    def __init__(
        self,
        store: AvailabilityStore,
        today: Optional[Callable[[], date]] = None,
    ) -> None:
        self._store = store
        self._durations = DurationResolver(store)
        self._today = today or business_today

    def _past_date(self, day: date) -> Optional[ValidationResult]:
        if day < self._today():
            return ValidationResult.reject(
                RejectionKind.PAST_DATE,
                ConstraintSource.SCHEDULE,
                f"{format_date(day)} is in the past.",
            )
        return None

    def validate_request(
        self,
        request: BookingRequest,
        exclude_booking_id: Optional[str] = None,
    ) -> ValidationResult:
        """Check a request against the latest data without writing anything."""
        duration = self._durations.effective_duration(request)
        start = request.start_minute
        past = self._past_date(request.date)
        if past is not None:
            return past
        snapshot = self._store.load_snapshot(request.resource_id, request.date)
        return validate_booking(snapshot, start, duration, exclude_booking_id)

    def commit_booking(
        self,
        request: BookingRequest,
        observed_version: Optional[int] = None,
    ) -> BookingResponse:
        """
        Re-validate and persist ``request`` as one atomic step.

        Args:
            request: The booking the user confirmed.
            observed_version: Store version of the snapshot the slot picker
                showed, if known. A booking or block rejection found against
                newer data is then reported as ``stale_data``.
        """
        request_id = new_request_id()
        duration = self._durations.effective_duration(request)
        start = request.start_minute
        logger.info(
            "Commit %s: %s on %s at %s for %d min",
            request_id, request.resource_id, request.date, request.start_time, duration,
        )

        past = self._past_date(request.date)
        if past is not None:
            return _rejection(past, request.date)

        snapshot = self._store.load_snapshot(request.resource_id, request.date)
        result = validate_booking(snapshot, start, duration)
        if not result.accepted:
            if (
                observed_version is not None
                and observed_version != snapshot.version
                and result.source in _MOVABLE_SOURCES
            ):
                result = result.as_stale()
            logger.warning("Commit %s rejected (%s): %s", request_id, result.kind.value, result.reason)
            return _rejection(result, request.date)

        with self._store.locked(request.resource_id, request.date):
            latest = self._store.load_snapshot(request.resource_id, request.date)
            recheck = validate_booking(latest, start, duration)
            if not recheck.accepted:
                stale = recheck.as_stale()
                logger.warning("Commit %s lost a race: %s", request_id, stale.reason)
                return _rejection(stale, request.date)

            record = BookingRecord(
                id=f"BK-{uuid.uuid4().hex[:8].upper()}",
                resource_id=request.resource_id,
                date=request.date,
                interval=recheck.interval,
                source_service_id=request.service_id,
                applied_campaign_id=request.applied_campaign_id,
                status="scheduled",
                client_name=request.client_name,
            )
            try:
                self._store.insert_booking(record)
            except OverlapConstraintError as exc:
                logger.warning("Commit %s refused by store constraint: %s", request_id, exc)
                return _rejection(_constraint_violation(), request.date)

        logger.info("Booking %s committed (%s %s)", record.id, record.date, record.interval)
        return BookingResponse(
            success=True,
            message=(
                f"Booking confirmed. Reference: {record.id}. "
                f"{format_date(record.date)} from {format_time(record.interval.start)} "
                f"to {format_time(record.interval.end)}."
            ),
            booking_id=record.id,
            date=record.date,
            time=format_time(record.interval.start),
            end_time=format_time(record.interval.end),
        )

    @contextmanager
    def _holding(self, booking_id: str, extra_day: Optional[date] = None) -> Iterator[BookingRecord]:
        """
        Lock the booking's (resource, date), plus ``extra_day``, and yield the
        record as read under those locks. If the booking moved to another date
        between the unlocked read and taking the locks, release and try again.
        """
        while True:
            seen = self._store.get_booking(booking_id)
            days = {seen.date} if extra_day is None else {seen.date, extra_day}
            with ExitStack() as stack:
                for day in sorted(days):
                    stack.enter_context(self._store.locked(seen.resource_id, day))
                current = self._store.get_booking(booking_id)
                if (current.resource_id, current.date) == (seen.resource_id, seen.date):
                    yield current
                    return
            logger.debug("Booking %s moved while locking; retrying", booking_id)

    def cancel_booking(self, booking_id: str) -> BookingResponse:
        """Cancel a booking; its time becomes free immediately."""
        with self._holding(booking_id) as record:
            if record.status == CANCELLED:
                return BookingResponse(
                    success=False,
                    message=f"Booking {booking_id} is already cancelled.",
                    booking_id=booking_id,
                )
            self._store.replace_booking(replace(record, status=CANCELLED))
        logger.info("Booking cancelled: %s", booking_id)
        return BookingResponse(
            success=True,
            message=f"Booking {booking_id} has been cancelled.",
            booking_id=booking_id,
            date=record.date,
        )

    def reschedule_booking(
        self,
        booking_id: str,
        new_date: date,
        new_time: str,
    ) -> BookingResponse:
        """Move a booking, keeping its stored effective duration."""
        new_request_id()
        start = parse_time(new_time)
        past = self._past_date(new_date)
        if past is not None:
            return _rejection(past, new_date)

        with self._holding(booking_id, extra_day=new_date) as record:
            if record.status == CANCELLED:
                return BookingResponse(
                    success=False,
                    message=f"Booking {booking_id} is cancelled and cannot be rescheduled.",
                    booking_id=booking_id,
                )
            duration = self._durations.effective_duration(record)
            snapshot = self._store.load_snapshot(record.resource_id, new_date)
            result = validate_booking(snapshot, start, duration, exclude_booking_id=booking_id)
            if not result.accepted:
                logger.warning("Reschedule of %s rejected: %s", booking_id, result.reason)
                return _rejection(result, new_date)
            moved = replace(record, date=new_date, interval=result.interval)
            try:
                self._store.replace_booking(moved)
            except OverlapConstraintError as exc:
                logger.warning("Reschedule of %s refused by store constraint: %s", booking_id, exc)
                return _rejection(_constraint_violation(), new_date)

        logger.info("Booking rescheduled: %s to %s %s", booking_id, new_date, moved.interval)
        return BookingResponse(
            success=True,
            message=f"Booking {booking_id} rescheduled to {format_date(new_date)} at {format_time(start)}.",
            booking_id=booking_id,
            date=new_date,
            time=format_time(moved.interval.start),
            end_time=format_time(moved.interval.end),
        )
