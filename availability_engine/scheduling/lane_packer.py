"""
Lane assignment for the calendar day view.

Greedy interval-graph colouring: bookings sorted by start (ties keep input
order) go into the first lane whose last booking they do not overlap, or
into a new lane. This uses exactly as many lanes as the deepest moment of
simultaneous overlap. Layout only; it has no effect on availability.
"""

import logging
from typing import Iterable, Optional

from availability_engine.config import settings
from availability_engine.intervals import overlaps
from availability_engine.schemas.booking_schema import BookingLayout
from availability_engine.schemas.schedule_schema import BookingRecord
from availability_engine.utils import parse_time

logger = logging.getLogger(__name__)


def pack_lanes(bookings: Iterable[BookingRecord]) -> dict[str, int]:
    """Map each booking id to its lane index."""
    ordered = sorted(bookings, key=lambda b: b.interval.start)
    lanes: list[BookingRecord] = []
    assignment: dict[str, int] = {}

    for booking in ordered:
        for index, last in enumerate(lanes):
            if not overlaps(last.interval, booking.interval):
                lanes[index] = booking
                assignment[booking.id] = index
                break
        else:
            lanes.append(booking)
            assignment[booking.id] = len(lanes) - 1

    logger.debug("Packed %d booking(s) into %d lane(s)", len(assignment), len(lanes))
    return assignment


def max_overlap_depth(bookings: Iterable[BookingRecord]) -> int:
    """Largest number of bookings running at the same minute."""
    events: list[tuple[int, int]] = []
    for booking in bookings:
        events.append((booking.interval.start, 1))
        events.append((booking.interval.end, -1))
    # ends sort before starts at the same minute: touching bookings do not stack
    events.sort(key=lambda e: (e[0], e[1]))
    depth = deepest = 0
    for _, delta in events:
        depth += delta
        deepest = max(deepest, depth)
    return deepest


def layout_day(
    bookings: Iterable[BookingRecord],
    view_start: Optional[str] = None,
    min_card_minutes: Optional[int] = None,
) -> list[BookingLayout]:
    """Lane, offset and height for every active booking, in start order."""
    active = [b for b in bookings if b.is_active()]
    origin = parse_time(view_start or settings.calendar.view_start)
    min_height = (
        settings.calendar.min_card_minutes if min_card_minutes is None else min_card_minutes
    )
    lanes = pack_lanes(active)
    lane_count = max(lanes.values(), default=-1) + 1

    return [
        BookingLayout(
            booking_id=b.id,
            lane_index=lanes[b.id],
            lane_count=lane_count,
            top_offset_minutes=b.interval.start - origin,
            height_minutes=max(b.interval.duration, min_height),
        )
        for b in sorted(active, key=lambda b: b.interval.start)
    ]
