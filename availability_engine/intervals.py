"""
Half-open time intervals and the single overlap primitive.

Every overlap test in the engine (slot filtering, booking validation,
calendar lanes) goes through ``overlaps``. An interval ending exactly when
another starts does not overlap it.

Usage:
    morning = Interval.from_strings("09:00", "12:00")
    overlaps(morning, Interval.from_strings("11:30", "12:30"))  # True
    subtract(Interval.from_strings("09:00", "17:00"), [lunch])   # [09:00-12:00, 13:00-17:00]
"""

from dataclasses import dataclass
from typing import Iterable

from availability_engine.errors import InvalidInterval
from availability_engine.utils import MINUTES_PER_DAY, format_time, parse_time


@dataclass(frozen=True, order=True)
class Interval:
    """A [start, end) range in minutes since midnight that never spans midnight."""

    start: int
    end: int

    def __post_init__(self) -> None:
        for name, value in (("start", self.start), ("end", self.end)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidInterval(f"Interval {name} must be an int, got {value!r}")
        if not 0 <= self.start < MINUTES_PER_DAY:
            raise InvalidInterval(f"Interval start {self.start} is outside 0-1439")
        if not 0 < self.end <= MINUTES_PER_DAY:
            raise InvalidInterval(f"Interval end {self.end} is outside 1-1440")
        if self.start >= self.end:
            raise InvalidInterval(
                f"Interval start must be before end, got {format_time(self.start)}"
                f"-{format_time(self.end)}"
            )

    @classmethod
    def from_strings(cls, start: str, end: str) -> "Interval":
        return cls(parse_time(start), parse_time(end, allow_end_of_day=True))

    @classmethod
    def starting_at(cls, start: int, duration_minutes: int) -> "Interval":
        """Build the interval a booking of ``duration_minutes`` starting at ``start`` occupies."""
        return cls(start, start + duration_minutes)

    @property
    def duration(self) -> int:
        return self.end - self.start

    def __str__(self) -> str:
        return f"{format_time(self.start)}-{format_time(self.end)}"


def overlaps(a: Interval, b: Interval) -> bool:
    """True iff the two half-open intervals share at least one minute."""
    return a.start < b.end and a.end > b.start


def contains(outer: Interval, inner: Interval) -> bool:
    """True iff ``inner`` lies entirely within ``outer``."""
    return outer.start <= inner.start and inner.end <= outer.end


def subtract(window: Interval, cuts: Iterable[Interval]) -> list[Interval]:
    """
    Remove every cut from ``window`` and return the free pieces in time order.

    Cuts may be unsorted, may overlap each other, and may extend past the
    window or miss it entirely. A cut covering the whole window leaves nothing.
    """
    free = [window]
    for cut in sorted(cuts):
        remaining: list[Interval] = []
        for piece in free:
            if not overlaps(piece, cut):
                remaining.append(piece)
                continue
            if piece.start < cut.start:
                remaining.append(Interval(piece.start, cut.start))
            if cut.end < piece.end:
                remaining.append(Interval(cut.end, piece.end))
        free = remaining
        if not free:
            break
    return free
