"""Error taxonomy for availability computation and booking validation.

Malformed input raises one of the exceptions below. Expected outcomes of
the write path (closed day, conflict, lost race) are not exceptions; they
are reported through ``ValidationResult`` using ``RejectionKind``.
"""

from enum import Enum


class AvailabilityError(Exception):
    """Base class for all engine errors."""


class InvalidInterval(AvailabilityError, ValueError):
    """Malformed or inverted time values (start >= end, outside the day)."""


class InvalidDuration(AvailabilityError, ValueError):
    """Non-positive or missing duration or granularity."""


class UnknownEntity(AvailabilityError, LookupError):
    """A resource, service, campaign or booking id does not exist."""


class InvalidCampaign(AvailabilityError, ValueError):
    """A campaign is inactive or not linked to the requested service."""


class InactiveService(AvailabilityError, ValueError):
    """A service that is no longer offered was requested for a new booking."""


class OverlapConstraintError(AvailabilityError):
    """The store refused an insert that would overlap an active booking."""


class RejectionKind(str, Enum):
    """Why the write path refused a booking request."""

    CLOSED = "closed"
    CONFLICT = "conflict"
    STALE_DATA = "stale_data"
    PAST_DATE = "past_date"


class ConstraintSource(str, Enum):
    """Which exclusion source produced a rejection."""

    SCHEDULE = "schedule"
    WORKING_HOURS = "working_hours"
    BREAK = "break"
    DAY_BLOCK = "day_block"
    TIME_BLOCK = "time_block"
    BOOKING = "booking"
