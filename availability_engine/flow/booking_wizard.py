"""
Finite state machine for the multi-step booking wizard.

Six states and an explicit transition table replace ad-hoc "show offer" /
"declined offer" flags. Guards decide between alternative targets for the
same trigger (e.g. whether an upsell or downsell exists for the chosen
service); the first transition whose guard passes wins.

Usage:
    wizard = BookingWizard(store, availability, bookings)
    wizard.complete_intake("Ana Souza", "11988887777")
    wizard.select_service("svc-cut")          # -> UPSELL_OFFER if one exists
    wizard.decline_offer()                    # -> DOWNSELL_OFFER or DATE_TIME_SELECTION
    wizard.select_time("res-1", day, "10:00")
    wizard.commit()                           # -> CONFIRMATION on success
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Callable, Optional

from availability_engine.errors import InactiveService, RejectionKind
from availability_engine.schemas.booking_schema import BookingRequest, BookingResponse
from availability_engine.schemas.schedule_schema import Campaign, CampaignType
from availability_engine.services.availability_service import AvailabilityService
from availability_engine.services.booking_service import BookingService
from availability_engine.store.ports import CatalogSource

logger = logging.getLogger(__name__)


class WizardState(str, Enum):
    """All steps of the booking wizard."""
    INTAKE = "intake"
    SERVICE_SELECTION = "service_selection"
    UPSELL_OFFER = "upsell_offer"
    DOWNSELL_OFFER = "downsell_offer"
    DATE_TIME_SELECTION = "date_time_selection"
    CONFIRMATION = "confirmation"


class WizardTrigger(str, Enum):
    """Events that cause state transitions."""
    INTAKE_COMPLETED = "intake_completed"
    SERVICE_SELECTED = "service_selected"
    OFFER_ACCEPTED = "offer_accepted"
    OFFER_DECLINED = "offer_declined"
    CHANGE_SERVICE = "change_service"
    BOOKING_COMMITTED = "booking_committed"
    RESTART = "restart"


@dataclass
class BookingDraft:
    """Everything the wizard has collected so far."""
    client_name: Optional[str] = None
    client_phone: Optional[str] = None
    service_id: Optional[str] = None
    campaign_id: Optional[str] = None
    upsell: Optional[Campaign] = None
    downsell: Optional[Campaign] = None
    resource_id: Optional[str] = None
    day: Optional[date] = None
    start_time: Optional[str] = None
    booking_id: Optional[str] = None


def _has_upsell(draft: BookingDraft) -> bool:
    return draft.upsell is not None


def _has_downsell(draft: BookingDraft) -> bool:
    return draft.downsell is not None


@dataclass
class Transition:
    """A single valid state transition."""
    from_state: WizardState
    to_state: WizardState
    trigger: WizardTrigger
    guard: Optional[Callable[[BookingDraft], bool]] = None


@dataclass
class StateEntry:
    """Recorded history entry for a state visit."""
    state: WizardState
    entered_at: datetime
    trigger: Optional[WizardTrigger] = None


class InvalidTransitionError(Exception):
    """Raised when a transition is not valid from the current state."""


class WizardStateMachine:
    """
    Deterministic transition table for the wizard.

    Every transition must be explicitly defined; anything else is rejected
    with the list of triggers valid from the current state.
    """

    TRANSITIONS: list[Transition] = [
        Transition(WizardState.INTAKE, WizardState.SERVICE_SELECTION,
                   WizardTrigger.INTAKE_COMPLETED),

        # --- Offers, chosen by guard in order ---
        Transition(WizardState.SERVICE_SELECTION, WizardState.UPSELL_OFFER,
                   WizardTrigger.SERVICE_SELECTED, _has_upsell),
        Transition(WizardState.SERVICE_SELECTION, WizardState.DOWNSELL_OFFER,
                   WizardTrigger.SERVICE_SELECTED, _has_downsell),
        Transition(WizardState.SERVICE_SELECTION, WizardState.DATE_TIME_SELECTION,
                   WizardTrigger.SERVICE_SELECTED),

        Transition(WizardState.UPSELL_OFFER, WizardState.DATE_TIME_SELECTION,
                   WizardTrigger.OFFER_ACCEPTED),
        Transition(WizardState.UPSELL_OFFER, WizardState.DOWNSELL_OFFER,
                   WizardTrigger.OFFER_DECLINED, _has_downsell),
        Transition(WizardState.UPSELL_OFFER, WizardState.DATE_TIME_SELECTION,
                   WizardTrigger.OFFER_DECLINED),

        Transition(WizardState.DOWNSELL_OFFER, WizardState.DATE_TIME_SELECTION,
                   WizardTrigger.OFFER_ACCEPTED),
        Transition(WizardState.DOWNSELL_OFFER, WizardState.DATE_TIME_SELECTION,
                   WizardTrigger.OFFER_DECLINED),

        # --- Date/time ---
        Transition(WizardState.DATE_TIME_SELECTION, WizardState.SERVICE_SELECTION,
                   WizardTrigger.CHANGE_SERVICE),
        Transition(WizardState.DATE_TIME_SELECTION, WizardState.CONFIRMATION,
                   WizardTrigger.BOOKING_COMMITTED),

        # --- Terminal ---
        Transition(WizardState.CONFIRMATION, WizardState.INTAKE,
                   WizardTrigger.RESTART),
    ]

    def __init__(self) -> None:
        self._current_state = WizardState.INTAKE
        self._history: list[StateEntry] = [
            StateEntry(state=WizardState.INTAKE, entered_at=datetime.now(timezone.utc))
        ]

    @property
    def current_state(self) -> WizardState:
        return self._current_state

    def transition(self, trigger: WizardTrigger, draft: BookingDraft) -> WizardState:
        """
        Execute a state transition.

        Args:
            trigger: The event triggering the transition.
            draft: Wizard data the guards inspect.

        Returns:
            The new wizard state.

        Raises:
            InvalidTransitionError: If no valid transition exists.
        """
        for t in self.TRANSITIONS:
            if t.from_state == self._current_state and t.trigger == trigger:
                if t.guard is not None and not t.guard(draft):
                    continue

                old_state = self._current_state
                self._current_state = t.to_state
                self._history.append(StateEntry(
                    state=self._current_state,
                    entered_at=datetime.now(timezone.utc),
                    trigger=trigger,
                ))
                logger.debug(
                    "Wizard transition: %s -> %s (trigger: %s)",
                    old_state.value, self._current_state.value, trigger.value,
                )
                return self._current_state

        valid = [t.value for t in self.get_valid_triggers()]
        raise InvalidTransitionError(
            f"No valid transition from '{self._current_state.value}' "
            f"with trigger '{trigger.value}'. Valid triggers: {valid}"
        )

    def get_valid_triggers(self) -> list[WizardTrigger]:
        """Return all triggers valid from the current state, without duplicates."""
        triggers: list[WizardTrigger] = []
        for t in self.TRANSITIONS:
            if t.from_state == self._current_state and t.trigger not in triggers:
                triggers.append(t.trigger)
        return triggers

    def get_history(self) -> list[StateEntry]:
        return list(self._history)

    def get_state_trace(self) -> list[str]:
        """Return ordered list of state names visited."""
        return [entry.state.value for entry in self._history]

    def is_terminal(self) -> bool:
        return self._current_state == WizardState.CONFIRMATION


class BookingWizard:
    """Drives the state machine and the engine for one booking attempt."""

    def __init__(
        self,
        catalog: CatalogSource,
        availability: AvailabilityService,
        bookings: BookingService,
    ) -> None:
        self._catalog = catalog
        self._availability = availability
        self._bookings = bookings
        self.machine = WizardStateMachine()
        self.draft = BookingDraft()

    @property
    def state(self) -> WizardState:
        return self.machine.current_state

    def complete_intake(self, client_name: str, client_phone: Optional[str] = None) -> WizardState:
        if not client_name or not client_name.strip():
            raise ValueError("Client name is required")
        self.draft.client_name = client_name.strip()
        self.draft.client_phone = client_phone
        return self.machine.transition(WizardTrigger.INTAKE_COMPLETED, self.draft)

    def select_service(self, service_id: str) -> WizardState:
        service = self._catalog.get_service(service_id)
        if not service.active:
            raise InactiveService(f"Service {service_id} is not available for booking.")
        upsells = self._catalog.find_campaigns(service_id, CampaignType.UPSELL)
        downsells = self._catalog.find_campaigns(service_id, CampaignType.DOWNSELL)
        self.draft.service_id = service_id
        self.draft.campaign_id = None
        self.draft.upsell = upsells[0] if upsells else None
        self.draft.downsell = downsells[0] if downsells else None
        return self.machine.transition(WizardTrigger.SERVICE_SELECTED, self.draft)

    def current_offer(self) -> Optional[Campaign]:
        if self.state == WizardState.UPSELL_OFFER:
            return self.draft.upsell
        if self.state == WizardState.DOWNSELL_OFFER:
            return self.draft.downsell
        return None

    def accept_offer(self) -> WizardState:
        offer = self.current_offer()
        new_state = self.machine.transition(WizardTrigger.OFFER_ACCEPTED, self.draft)
        # transition() already rejected this unless we were on an offer step
        self.draft.campaign_id = offer.id
        if offer.type == CampaignType.DOWNSELL:
            self.draft.service_id = offer.linked_service_id
        logger.info("Campaign %s accepted for service %s", offer.id, offer.main_service_id)
        return new_state

    def decline_offer(self) -> WizardState:
        return self.machine.transition(WizardTrigger.OFFER_DECLINED, self.draft)

    def change_service(self) -> WizardState:
        new_state = self.machine.transition(WizardTrigger.CHANGE_SERVICE, self.draft)
        self.draft.service_id = None
        self.draft.campaign_id = None
        self.draft.start_time = None
        return new_state

    def available_times(self, resource_id: str, day: date) -> list[str]:
        """Slot picker contents for the draft's service and accepted campaign."""
        self._require_state(WizardState.DATE_TIME_SELECTION)
        return self._availability.list_available_times(
            resource_id, day, self.draft.service_id, self.draft.campaign_id
        )

    def select_time(self, resource_id: str, day: date, start_time: str) -> None:
        self._require_state(WizardState.DATE_TIME_SELECTION)
        self.draft.resource_id = resource_id
        self.draft.day = day
        self.draft.start_time = start_time

    def build_request(self) -> BookingRequest:
        if not (self.draft.resource_id and self.draft.day and self.draft.start_time):
            raise ValueError("Pick a professional, date and time before confirming")
        return BookingRequest(
            resource_id=self.draft.resource_id,
            date=self.draft.day,
            start_time=self.draft.start_time,
            service_id=self.draft.service_id,
            applied_campaign_id=self.draft.campaign_id,
            client_name=self.draft.client_name or "",
            client_phone=self.draft.client_phone,
        )

    def commit(self, observed_version: Optional[int] = None) -> BookingResponse:
        """
        Commit the draft. On success move to CONFIRMATION; when the slot was
        lost or conflicts, stay on DATE_TIME_SELECTION with the time cleared
        so the user re-picks.
        """
        self._require_state(WizardState.DATE_TIME_SELECTION)
        response = self._bookings.commit_booking(self.build_request(), observed_version)
        if response.success:
            self.draft.booking_id = response.booking_id
            self.machine.transition(WizardTrigger.BOOKING_COMMITTED, self.draft)
        elif response.rejection_kind in (RejectionKind.STALE_DATA.value, RejectionKind.CONFLICT.value):
            self.draft.start_time = None
        return response

    def restart(self) -> WizardState:
        new_state = self.machine.transition(WizardTrigger.RESTART, self.draft)
        self.draft = BookingDraft()
        return new_state

    def _require_state(self, expected: WizardState) -> None:
        if self.state != expected:
            raise InvalidTransitionError(
                f"Action requires state '{expected.value}', "
                f"current state is '{self.state.value}'"
            )
