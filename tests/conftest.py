"""Shared test fixtures and helpers."""

from datetime import date
from typing import Optional

import pytest

from availability_engine.flow.booking_wizard import BookingWizard
from availability_engine.intervals import Interval
from availability_engine.schemas.schedule_schema import (
    AvailabilitySnapshot,
    BookingRecord,
    Campaign,
    CampaignType,
    DaySchedule,
    Resource,
    Service,
)
from availability_engine.services.availability_service import AvailabilityService
from availability_engine.services.booking_service import BookingService
from availability_engine.store.memory_store import InMemoryStore

# 2026-03-01 is a Sunday; the working week under test starts the next day.
TODAY = date(2026, 3, 1)
MONDAY = date(2026, 3, 2)
TUESDAY = date(2026, 3, 3)
SATURDAY = date(2026, 3, 7)


def make_schedule(
    weekdays: range = range(5),
    start: str = "09:00",
    end: str = "17:00",
    breaks: Optional[list[tuple[str, str]]] = None,
) -> list[DaySchedule]:
    """Helper to create a weekly schedule; weekdays not listed are closed."""
    if breaks is None:
        breaks = [("12:00", "13:00")]
    return [
        DaySchedule.open_day(day, start, end, breaks=breaks)
        if day in weekdays else DaySchedule.closed_day(day)
        for day in range(7)
    ]


def make_booking(
    booking_id: str,
    start: str,
    end: str,
    resource_id: str = "res-ana",
    day: date = MONDAY,
    status: str = "scheduled",
    service_id: str = "svc-cut",
    campaign_id: Optional[str] = None,
) -> BookingRecord:
    """Helper to create a BookingRecord from HH:MM strings."""
    return BookingRecord(
        id=booking_id,
        resource_id=resource_id,
        date=day,
        interval=Interval.from_strings(start, end),
        source_service_id=service_id,
        applied_campaign_id=campaign_id,
        status=status,
    )


def make_snapshot(
    schedules: Optional[list[DaySchedule]] = None,
    bookings: Optional[list[BookingRecord]] = None,
    day: date = MONDAY,
    resource: Optional[Resource] = None,
    **kwargs,
) -> AvailabilitySnapshot:
    """Helper to build a snapshot without a store."""
    return AvailabilitySnapshot(
        resource=resource or Resource(id="res-ana", name="Ana Souza"),
        day=day,
        schedules=tuple(make_schedule() if schedules is None else schedules),
        bookings=tuple(bookings or []),
        **kwargs,
    )


@pytest.fixture
def store():
    s = InMemoryStore()
    s.add_resource(Resource(id="res-ana", name="Ana Souza"))
    s.add_resource(Resource(id="res-bruno", name="Bruno Lima"))
    s.add_resource(Resource(id="res-off", name="Carla Dias", active=False))
    s.set_week_schedule("res-ana", make_schedule())

    s.add_service(Service(id="svc-cut", name="Haircut", duration_minutes=30))
    s.add_service(Service(id="svc-hydration", name="Hydration", duration_minutes=30))
    s.add_service(Service(id="svc-colour", name="Colouring", duration_minutes=90))
    s.add_service(Service(id="svc-fringe", name="Fringe trim", duration_minutes=15))
    s.add_service(Service(id="svc-consult", name="Consultation"))

    s.add_campaign(Campaign(
        id="cmp-upsell", type=CampaignType.UPSELL,
        main_service_id="svc-cut", linked_service_id="svc-hydration",
        custom_duration_minutes=45, message="Add hydration?",
    ))
    s.add_campaign(Campaign(
        id="cmp-downsell", type=CampaignType.DOWNSELL,
        main_service_id="svc-colour", linked_service_id="svc-fringe",
        custom_duration_minutes=20, message="Just a fringe trim instead?",
    ))
    s.add_campaign(Campaign(
        id="cmp-expired", type=CampaignType.UPSELL,
        main_service_id="svc-fringe", linked_service_id="svc-hydration",
        custom_duration_minutes=60, active=False,
    ))
    return s


@pytest.fixture
def availability(store):
    return AvailabilityService(store)


@pytest.fixture
def booking_service(store):
    return BookingService(store, today=lambda: TODAY)


@pytest.fixture
def wizard(store, availability, booking_service):
    return BookingWizard(store, availability, booking_service)
