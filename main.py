"""
Command-line entry point for the availability engine.

Runs queries against the built-in demo salon, whose bookings and blocks
fall in the coming week. Dates are YYYY-MM-DD.

Usage:
    Bookable times:  python main.py slots res-ana 2026-03-02 svc-cut --campaign cmp-cut-hydration
    Calendar lanes:  python main.py layout res-ana 2026-03-02
    Week summary:    python main.py week res-ana
    Wizard demo:     python main.py console
"""

import argparse
import logging
import sys
from zoneinfo import ZoneInfoNotFoundError

from availability_engine.config import settings
from availability_engine.demo_data import build_demo_store
from availability_engine.errors import AvailabilityError
from availability_engine.scheduling.schedule_resolver import default_day_schedule, describe_week
from availability_engine.services.availability_service import AvailabilityService
from availability_engine.services.booking_service import business_today
from availability_engine.utils import format_date, parse_date

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=f"{settings.app_name}: query the demo salon's availability."
    )
    sub = parser.add_subparsers(dest="command", required=True)

    slots = sub.add_parser("slots", help="List bookable start times for a service.")
    slots.add_argument("resource", help="Resource id, e.g. res-ana.")
    slots.add_argument("date", help="Date as YYYY-MM-DD.")
    slots.add_argument("service", help="Service id, e.g. svc-cut.")
    slots.add_argument(
        "--campaign",
        default=None,
        help="Accepted upsell/downsell campaign id.",
    )

    layout = sub.add_parser("layout", help="Show calendar lanes for a day's bookings.")
    layout.add_argument("resource", help="Resource id, e.g. res-ana.")
    layout.add_argument("date", help="Date as YYYY-MM-DD.")

    week = sub.add_parser("week", help="Summarise a resource's weekly working hours.")
    week.add_argument("resource", help="Resource id, e.g. res-ana.")

    sub.add_parser("console", help="Walk through the booking wizard.")
    return parser


def _run_slots(service: AvailabilityService, args: argparse.Namespace) -> None:
    day = parse_date(args.date)
    times = service.list_available_times(args.resource, day, args.service, args.campaign)
    if not times:
        print(f"No available times on {format_date(day)}.")
        return
    print(f"{len(times)} available time(s) on {format_date(day)}:")
    print("  " + "  ".join(times))


def _run_layout(service: AvailabilityService, args: argparse.Namespace) -> None:
    day = parse_date(args.date)
    cards = service.layout_day(args.resource, day)
    if not cards:
        print(f"No bookings on {format_date(day)}.")
        return
    for card in cards:
        print(
            f"{card.booking_id}  lane {card.lane_index + 1}/{card.lane_count}  "
            f"top +{card.top_offset_minutes} min  height {card.height_minutes} min"
        )


def _run_console() -> None:
    from console_demo import ConsoleSession

    ConsoleSession().run()


def main() -> None:
    args = _build_parser().parse_args()

    if args.command == "console":
        _run_console()
        return

    try:
        store = build_demo_store(business_today())
        service = AvailabilityService(store)
        if args.command == "slots":
            _run_slots(service, args)
        elif args.command == "layout":
            _run_layout(service, args)
        else:
            store.get_resource(args.resource)
            schedules = store.get_day_schedules(args.resource) or [
                default_day_schedule(weekday) for weekday in range(7)
            ]
            print(describe_week(schedules))
    except (AvailabilityError, ValueError, ZoneInfoNotFoundError) as exc:
        logger.error("%s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
