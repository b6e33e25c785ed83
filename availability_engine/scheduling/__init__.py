from availability_engine.scheduling.duration_resolver import DurationResolver, resolve_duration
from availability_engine.scheduling.lane_packer import layout_day, pack_lanes
from availability_engine.scheduling.schedule_resolver import (
    ScheduleResolver,
    describe_week,
    resolve_open_intervals,
)
from availability_engine.scheduling.slot_generator import SlotGenerator, SlotSequence
from availability_engine.scheduling.validator import ValidationResult, validate_booking

__all__ = [
    "ScheduleResolver",
    "DurationResolver",
    "SlotGenerator",
    "SlotSequence",
    "ValidationResult",
    "validate_booking",
    "pack_lanes",
    "layout_day",
    "resolve_duration",
    "resolve_open_intervals",
    "describe_week",
]
