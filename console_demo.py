"""
Offline console demo: walks the booking wizard against the demo salon.

Uses the real wizard, availability and booking services over the
in-memory demo store. Designed for live walkthroughs.

Usage:
    python console_demo.py
    python console_demo.py --scenario upsell
    python console_demo.py --scenario downsell
    python console_demo.py --scenario race
"""

import argparse
from datetime import date
from typing import Optional

from availability_engine.config import settings
from availability_engine.demo_data import SERVICES, build_demo_store, next_weekday
from availability_engine.errors import AvailabilityError
from availability_engine.flow.booking_wizard import BookingWizard, WizardState
from availability_engine.services.availability_service import AvailabilityService
from availability_engine.services.booking_service import BookingService, business_today
from availability_engine.utils import format_date

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"


class ConsoleSession:
    """One wizard session over a freshly built demo store."""

    def __init__(self, today: Optional[date] = None) -> None:
        self.today = today or business_today()
        self.store = build_demo_store(self.today)
        self.availability = AvailabilityService(self.store)
        self.bookings = BookingService(self.store, today=lambda: self.today)
        self.wizard = self._new_wizard()
        self.day = next_weekday(self.today, 0)
        self.resource_id = "res-ana"

    def _new_wizard(self) -> BookingWizard:
        return BookingWizard(self.store, self.availability, self.bookings)

    def say(self, text: str) -> None:
        print(f"{GREEN}{BOLD}[Wizard]{RESET} {GREEN}{text}{RESET}")

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    def _banner(self, title: str) -> None:
        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  {settings.app_name.upper()} - {title}{RESET}")
        print(f"{BOLD}  Date: {format_date(self.day)}  Professional: {self.resource_id}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")
        print()

    def _footer(self, wizard: BookingWizard) -> None:
        print(f"\n{BOLD}{'=' * 60}{RESET}")
        print(f"{DIM}  State trace: {' -> '.join(wizard.machine.get_state_trace())}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

    # ------------------------------------------------------------------ #
    # Scripted scenarios
    # ------------------------------------------------------------------ #

    def run_scenario(self, scenario: str) -> None:
        """Auto-play a pre-scripted scenario for demo purposes."""
        handlers = {
            "upsell": self._scenario_upsell,
            "downsell": self._scenario_downsell,
            "race": self._scenario_race,
        }
        handler = handlers.get(scenario)
        if handler is None:
            print(f"{RED}Unknown scenario: {scenario}{RESET}")
            return
        self._banner(f"Scenario: {scenario}")
        handler()

    def _scenario_upsell(self) -> None:
        wizard = self.wizard
        wizard.complete_intake("Marina Alves", "11988887777")
        self._offer_step(wizard, "svc-cut", accept=True)
        self._pick_and_commit(wizard)
        self._footer(wizard)

    def _scenario_downsell(self) -> None:
        wizard = self.wizard
        wizard.complete_intake("Paulo Reis")
        self._offer_step(wizard, "svc-colour", accept=True)
        self._pick_and_commit(wizard)
        self._footer(wizard)

    def _scenario_race(self) -> None:
        first, second = self.wizard, self._new_wizard()
        for wizard, name in ((first, "Rita"), (second, "Sergio")):
            wizard.complete_intake(name)
            wizard.select_service("svc-consult")
        times = first.available_times(self.resource_id, self.day)
        self.say(f"Both clients see {len(times)} times; both pick {times[0]}.")
        version = self.store.version(self.resource_id, self.day)
        for wizard in (first, second):
            wizard.select_time(self.resource_id, self.day, times[0])

        for label, wizard in (("Rita", first), ("Sergio", second)):
            response = wizard.commit(observed_version=version)
            colour = GREEN if response.success else YELLOW
            print(f"{colour}[{label}] {response.message}{RESET}")
            self.system_log(f"State: {wizard.state.value}")
        if second.state == WizardState.DATE_TIME_SELECTION:
            remaining = second.available_times(self.resource_id, self.day)
            self.say(f"Sergio can still choose from: {', '.join(remaining[:6])}")
        self._footer(second)

    def _offer_step(self, wizard: BookingWizard, service_id: str, accept: bool) -> None:
        print(f"\n{BLUE}[Client] {RESET}I'd like {service_id}")
        wizard.select_service(service_id)
        self.system_log(f"State: {wizard.state.value}")
        offer = wizard.current_offer()
        if offer is None:
            return
        self.say(offer.message or f"Special offer: {offer.id}")
        if accept:
            print(f"{BLUE}[Client] {RESET}yes please")
            wizard.accept_offer()
        else:
            print(f"{BLUE}[Client] {RESET}no thanks")
            wizard.decline_offer()
        self.system_log(f"State: {wizard.state.value}")

    def _pick_and_commit(self, wizard: BookingWizard) -> None:
        times = wizard.available_times(self.resource_id, self.day)
        if not times:
            self.say(f"No times left on {format_date(self.day)}.")
            return
        self.say(f"Available on {format_date(self.day)}: {', '.join(times[:8])}")
        print(f"{BLUE}[Client] {RESET}{times[0]}")
        wizard.select_time(self.resource_id, self.day, times[0])
        response = wizard.commit()
        self.say(response.message)
        self.system_log(f"State: {wizard.state.value}")

    # ------------------------------------------------------------------ #
    # Interactive
    # ------------------------------------------------------------------ #

    def run(self) -> None:
        self._banner("Console Demo")
        print(f"{BOLD}  Type 'quit' to exit{RESET}\n")
        wizard = self.wizard

        while not wizard.machine.is_terminal():
            self.system_log(f"State: {wizard.state.value}")
            user_input = input(f"{BLUE}{self._prompt(wizard)} {RESET}").strip()
            if not user_input:
                continue
            if user_input.lower() in ("quit", "exit", "q"):
                print(f"\n{DIM}Session ended.{RESET}")
                return
            try:
                self._process_input(wizard, user_input)
            except (AvailabilityError, ValueError) as exc:
                print(f"{RED}{exc}{RESET}")

        self._footer(wizard)

    def _prompt(self, wizard: BookingWizard) -> str:
        state = wizard.state
        if state == WizardState.INTAKE:
            return "Your name:"
        if state == WizardState.SERVICE_SELECTION:
            menu = ", ".join(s.id for s in SERVICES)
            return f"Service ({menu}):"
        if state in (WizardState.UPSELL_OFFER, WizardState.DOWNSELL_OFFER):
            offer = wizard.current_offer()
            return f"{offer.message} (yes/no):"
        times = wizard.available_times(self.resource_id, self.day)
        return f"Time on {format_date(self.day)} [{', '.join(times[:8])}] or 'back':"

    def _process_input(self, wizard: BookingWizard, text: str) -> None:
        state = wizard.state
        if state == WizardState.INTAKE:
            wizard.complete_intake(text)
        elif state == WizardState.SERVICE_SELECTION:
            wizard.select_service(text)
        elif state in (WizardState.UPSELL_OFFER, WizardState.DOWNSELL_OFFER):
            if text.lower().startswith("y"):
                wizard.accept_offer()
            else:
                wizard.decline_offer()
        elif state == WizardState.DATE_TIME_SELECTION:
            if text.lower() == "back":
                wizard.change_service()
                return
            wizard.select_time(self.resource_id, self.day, text)
            response = wizard.commit()
            colour = GREEN if response.success else YELLOW
            print(f"{colour}{response.message}{RESET}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Booking wizard console demo.")
    parser.add_argument(
        "--scenario",
        choices=["upsell", "downsell", "race"],
        default=None,
        help="Auto-play a scripted scenario instead of prompting.",
    )
    args = parser.parse_args()

    session = ConsoleSession()
    if args.scenario:
        session.run_scenario(args.scenario)
    else:
        session.run()


if __name__ == "__main__":
    main()
