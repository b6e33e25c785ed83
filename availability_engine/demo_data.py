"""
Demo salon used by the command line and the console walkthrough.

Two professionals, a short service menu and one upsell/downsell pair.
Booked and blocked times are placed on the first few weekdays after the
given start date so the demo always has something to work around.
"""

import logging
from datetime import date, timedelta

from availability_engine.intervals import Interval
from availability_engine.schemas.schedule_schema import (
    BookingRecord,
    Campaign,
    CampaignType,
    DayBlock,
    DaySchedule,
    Resource,
    Service,
    TimeBlock,
)
from availability_engine.store.memory_store import InMemoryStore

logger = logging.getLogger(__name__)

RESOURCES: list[Resource] = [
    Resource(id="res-ana", name="Ana Souza"),
    Resource(id="res-bruno", name="Bruno Lima"),
]

SERVICES: list[Service] = [
    Service(id="svc-cut", name="Haircut", duration_minutes=45),
    Service(id="svc-hydration", name="Hydration", duration_minutes=30),
    Service(id="svc-colour", name="Colouring", duration_minutes=120),
    Service(id="svc-fringe", name="Fringe trim", duration_minutes=15),
    Service(id="svc-consult", name="Consultation"),
]

CAMPAIGNS: list[Campaign] = [
    Campaign(
        id="cmp-cut-hydration",
        type=CampaignType.UPSELL,
        main_service_id="svc-cut",
        linked_service_id="svc-hydration",
        custom_duration_minutes=75,
        message="Add a hydration treatment to your haircut?",
    ),
    Campaign(
        id="cmp-colour-fringe",
        type=CampaignType.DOWNSELL,
        main_service_id="svc-colour",
        linked_service_id="svc-fringe",
        custom_duration_minutes=20,
        message="Short on time? Try a quick fringe trim instead.",
    ),
]


def next_weekday(start: date, weekday: int) -> date:
    """First date on or after ``start`` falling on ``weekday`` (0=Monday)."""
    return start + timedelta(days=(weekday - start.weekday()) % 7)


def build_demo_store(start: date) -> InMemoryStore:
    """Populate a fresh store relative to ``start``."""
    store = InMemoryStore()
    for resource in RESOURCES:
        store.add_resource(resource)
    for service in SERVICES:
        store.add_service(service)
    for campaign in CAMPAIGNS:
        store.add_campaign(campaign)

    store.set_week_schedule("res-ana", [
        DaySchedule.open_day(weekday, "09:00", "18:00", breaks=[("12:00", "13:00")])
        for weekday in range(5)
    ] + [DaySchedule.open_day(5, "09:00", "13:00"), DaySchedule.closed_day(6)])
    # Bruno has no weekly schedule and works the default window

    monday = next_weekday(start, 0)
    tuesday = monday + timedelta(days=1)
    store.add_time_block(TimeBlock(
        id="blk-ana-doctor",
        resource_id="res-ana",
        date=tuesday,
        interval=Interval.from_strings("15:00", "16:30"),
        reason="Doctor appointment",
    ))
    store.add_day_block(DayBlock(
        id="blk-bruno-course",
        resource_id="res-bruno",
        start_date=monday + timedelta(days=3),
        end_date=monday + timedelta(days=4),
        reason="Training course",
    ))

    demo_bookings = [
        ("BK-DEMO0001", "res-ana", monday, "09:00", "10:15", "svc-cut", "cmp-cut-hydration", "Carla"),
        ("BK-DEMO0002", "res-ana", monday, "10:00", "11:00", "svc-consult", None, "Diego"),
        ("BK-DEMO0003", "res-ana", monday, "14:00", "16:00", "svc-colour", None, "Elisa"),
        ("BK-DEMO0004", "res-bruno", monday, "08:30", "09:15", "svc-cut", None, "Fabio"),
    ]
    for booking_id, resource_id, day, start_time, end_time, service_id, campaign_id, client in demo_bookings:
        record = BookingRecord(
            id=booking_id,
            resource_id=resource_id,
            date=day,
            interval=Interval.from_strings(start_time, end_time),
            source_service_id=service_id,
            applied_campaign_id=campaign_id,
            status="confirmed",
            client_name=client,
        )
        # seeded directly: demo data may overlap to exercise calendar lanes
        store.seed_booking(record)

    logger.debug("Demo store built for week of %s", monday)
    return store
