"""
Open-interval resolution for one resource on one concrete date.

Merges the weekly recurring schedule (open flag, one window, breaks) with
date-scoped exclusions (full-day blocks, partial-day time blocks):

    window - breaks - time blocks   (nothing at all if a full-day block covers the date)

A resource with no weekly schedule rows at all falls back to the
configured default window on every weekday. A resource that has rows but
none for the requested weekday is closed that day.
"""

import logging
from datetime import date
from typing import Iterable, Optional, TYPE_CHECKING

from availability_engine.config import settings
from availability_engine.errors import InvalidInterval
from availability_engine.intervals import Interval, subtract
from availability_engine.schemas.schedule_schema import (
    AvailabilitySnapshot,
    DayBlock,
    DaySchedule,
    TimeBlock,
)
from availability_engine.utils import WEEKDAY_ABBREVIATIONS

if TYPE_CHECKING:
    from availability_engine.store.ports import AvailabilityStore

logger = logging.getLogger(__name__)


def default_day_schedule(weekday: int) -> DaySchedule:
    """The system-default schedule used when a resource has none configured."""
    return DaySchedule.open_day(
        weekday,
        settings.schedule.default_window_start,
        settings.schedule.default_window_end,
    )


def day_schedule_for(schedules: Iterable[DaySchedule], day: date) -> Optional[DaySchedule]:
    """Pick the schedule row for ``day``'s weekday, applying the default-window fallback."""
    schedules = list(schedules)
    if not schedules:
        logger.debug("No weekly schedule configured; using default window for %s", day)
        return default_day_schedule(day.weekday())
    for schedule in schedules:
        if schedule.weekday == day.weekday():
            return schedule
    return None


def resolve_open_intervals(
    schedules: Iterable[DaySchedule],
    day_blocks: Iterable[DayBlock],
    time_blocks: Iterable[TimeBlock],
    day: date,
) -> list[Interval]:
    """Disjoint, time-ordered open intervals for ``day``."""
    schedule = day_schedule_for(schedules, day)
    if schedule is None or not schedule.is_open:
        return []

    if any(block.covers(day) for block in day_blocks):
        logger.debug("Full-day block covers %s", day)
        return []

    open_after_breaks = subtract(schedule.window, schedule.breaks)
    cuts = [block.interval for block in time_blocks if block.date == day]
    intervals: list[Interval] = []
    for piece in open_after_breaks:
        intervals.extend(subtract(piece, cuts))
    return intervals


def open_intervals_for(snapshot: AvailabilitySnapshot) -> list[Interval]:
    """Open intervals of a snapshot; an inactive resource has none."""
    if not snapshot.resource.active:
        return []
    return resolve_open_intervals(
        snapshot.schedules, snapshot.day_blocks, snapshot.time_blocks, snapshot.day
    )


class ScheduleResolver:
    """Resolves open intervals by reading the latest data from a store."""

    def __init__(self, store: "AvailabilityStore") -> None:
        self._store = store

    def open_intervals(self, resource_id: str, day: date) -> list[Interval]:
        snapshot = self._store.load_snapshot(resource_id, day)
        intervals = open_intervals_for(snapshot)
        logger.debug(
            "Open intervals for %s on %s: %s",
            resource_id, day, [str(i) for i in intervals],
        )
        return intervals


def validate_week_schedule(schedules: Iterable[DaySchedule]) -> None:
    """Reject a weekly schedule with duplicate weekdays or no open day."""
    schedules = list(schedules)
    seen: set[int] = set()
    for schedule in schedules:
        if schedule.weekday in seen:
            raise InvalidInterval(
                f"Weekday {WEEKDAY_ABBREVIATIONS[schedule.weekday]} is configured twice"
            )
        seen.add(schedule.weekday)
    if not any(s.is_open for s in schedules):
        raise InvalidInterval("Configure at least one open weekday")


def describe_week(schedules: Iterable[DaySchedule]) -> str:
    """Readable summary, e.g. ``Mon: 09:00-17:00 | Tue: 09:00-17:00``."""
    parts = [
        f"{WEEKDAY_ABBREVIATIONS[s.weekday]}: {s.window}"
        for s in sorted(schedules, key=lambda s: s.weekday)
        if s.is_open and s.window is not None
    ]
    if not parts:
        return "No working hours configured"
    return " | ".join(parts)
