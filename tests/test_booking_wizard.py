"""Tests for the booking wizard state machine and its engine calls."""

import pytest

from availability_engine.errors import InactiveService
from availability_engine.flow.booking_wizard import (
    BookingDraft,
    InvalidTransitionError,
    WizardState,
    WizardStateMachine,
    WizardTrigger,
)
from availability_engine.schemas.schedule_schema import Campaign, CampaignType, Service
from tests.conftest import MONDAY, make_booking


@pytest.fixture
def machine():
    return WizardStateMachine()


def at_date_time(wizard, service_id: str = "svc-consult"):
    wizard.complete_intake("Marina Alves", "11988887777")
    wizard.select_service(service_id)
    return wizard


class TestStateMachine:
    def test_starts_in_intake(self, machine):
        assert machine.current_state == WizardState.INTAKE
        assert len(machine.get_history()) == 1
        assert not machine.is_terminal()

    def test_invalid_trigger_lists_valid_ones(self, machine):
        with pytest.raises(InvalidTransitionError, match="intake_completed"):
            machine.transition(WizardTrigger.BOOKING_COMMITTED, BookingDraft())

    def test_valid_triggers_are_unique(self, machine):
        machine.transition(WizardTrigger.INTAKE_COMPLETED, BookingDraft())
        assert machine.get_valid_triggers() == [WizardTrigger.SERVICE_SELECTED]

    def test_guard_order_prefers_upsell(self, machine):
        upsell = Campaign(
            id="u", type=CampaignType.UPSELL, main_service_id="a", linked_service_id="b",
        )
        downsell = Campaign(
            id="d", type=CampaignType.DOWNSELL, main_service_id="a", linked_service_id="c",
        )
        draft = BookingDraft(upsell=upsell, downsell=downsell)
        machine.transition(WizardTrigger.INTAKE_COMPLETED, draft)
        assert machine.transition(WizardTrigger.SERVICE_SELECTED, draft) == WizardState.UPSELL_OFFER

    def test_no_offers_goes_straight_to_date_time(self, machine):
        machine.transition(WizardTrigger.INTAKE_COMPLETED, BookingDraft())
        new = machine.transition(WizardTrigger.SERVICE_SELECTED, BookingDraft())
        assert new == WizardState.DATE_TIME_SELECTION

    def test_history_records_triggers(self, machine):
        machine.transition(WizardTrigger.INTAKE_COMPLETED, BookingDraft())
        entry = machine.get_history()[-1]
        assert entry.state == WizardState.SERVICE_SELECTION
        assert entry.trigger == WizardTrigger.INTAKE_COMPLETED


class TestIntake:
    def test_name_required(self, wizard):
        with pytest.raises(ValueError, match="name"):
            wizard.complete_intake("   ")
        assert wizard.state == WizardState.INTAKE

    def test_intake_moves_to_service_selection(self, wizard):
        assert wizard.complete_intake(" Marina ") == WizardState.SERVICE_SELECTION
        assert wizard.draft.client_name == "Marina"

    def test_inactive_service_refused(self, store, wizard):
        store.add_service(Service(id="svc-perm", name="Perm", duration_minutes=60, active=False))
        wizard.complete_intake("Marina")
        with pytest.raises(InactiveService):
            wizard.select_service("svc-perm")
        assert wizard.state == WizardState.SERVICE_SELECTION


class TestOffers:
    def test_upsell_accepted(self, wizard):
        wizard.complete_intake("Marina")
        assert wizard.select_service("svc-cut") == WizardState.UPSELL_OFFER
        assert wizard.current_offer().id == "cmp-upsell"

        assert wizard.accept_offer() == WizardState.DATE_TIME_SELECTION
        assert wizard.draft.service_id == "svc-cut"
        assert wizard.draft.campaign_id == "cmp-upsell"
        times = wizard.available_times("res-ana", MONDAY)
        assert "11:00" in times
        assert "11:30" not in times

    def test_upsell_declined_without_downsell(self, wizard):
        wizard.complete_intake("Marina")
        wizard.select_service("svc-cut")
        assert wizard.decline_offer() == WizardState.DATE_TIME_SELECTION
        assert wizard.draft.campaign_id is None
        assert "11:30" in wizard.available_times("res-ana", MONDAY)

    def test_upsell_declined_then_downsell(self, store, wizard):
        store.add_campaign(Campaign(
            id="cmp-cut-down", type=CampaignType.DOWNSELL,
            main_service_id="svc-cut", linked_service_id="svc-fringe",
            custom_duration_minutes=20,
        ))
        wizard.complete_intake("Marina")
        wizard.select_service("svc-cut")
        assert wizard.decline_offer() == WizardState.DOWNSELL_OFFER
        assert wizard.current_offer().id == "cmp-cut-down"
        assert wizard.decline_offer() == WizardState.DATE_TIME_SELECTION
        assert wizard.draft.service_id == "svc-cut"

    def test_downsell_accepted_swaps_service(self, wizard):
        wizard.complete_intake("Marina")
        assert wizard.select_service("svc-colour") == WizardState.DOWNSELL_OFFER
        wizard.accept_offer()
        assert wizard.draft.service_id == "svc-fringe"
        assert wizard.draft.campaign_id == "cmp-downsell"

        wizard.select_time("res-ana", MONDAY, "10:00")
        response = wizard.commit()
        assert response.success
        assert response.end_time == "10:20"

    def test_inactive_campaign_not_offered(self, wizard):
        wizard.complete_intake("Marina")
        assert wizard.select_service("svc-fringe") == WizardState.DATE_TIME_SELECTION

    def test_accept_outside_offer_rejected(self, wizard):
        at_date_time(wizard)
        with pytest.raises(InvalidTransitionError):
            wizard.accept_offer()


class TestDateTimeSelection:
    def test_times_require_state(self, wizard):
        with pytest.raises(InvalidTransitionError, match="date_time_selection"):
            wizard.available_times("res-ana", MONDAY)

    def test_commit_needs_time(self, wizard):
        at_date_time(wizard)
        with pytest.raises(ValueError, match="time"):
            wizard.commit()

    def test_change_service_goes_back(self, wizard):
        at_date_time(wizard)
        wizard.select_time("res-ana", MONDAY, "10:00")
        assert wizard.change_service() == WizardState.SERVICE_SELECTION
        assert wizard.draft.service_id is None
        assert wizard.draft.start_time is None

    def test_successful_commit_confirms(self, store, wizard):
        at_date_time(wizard)
        wizard.select_time("res-ana", MONDAY, "10:00")
        response = wizard.commit()
        assert response.success
        assert wizard.state == WizardState.CONFIRMATION
        assert wizard.machine.is_terminal()
        assert wizard.draft.booking_id == response.booking_id
        assert store.get_booking(response.booking_id).client_name == "Marina Alves"

    def test_conflict_stays_and_clears_time(self, store, wizard):
        store.insert_booking(make_booking("BK-1", "10:00", "11:00"))
        at_date_time(wizard)
        wizard.select_time("res-ana", MONDAY, "10:30")
        response = wizard.commit()
        assert response.rejection_kind == "conflict"
        assert wizard.state == WizardState.DATE_TIME_SELECTION
        assert wizard.draft.start_time is None
        assert wizard.draft.resource_id == "res-ana"

    def test_stale_slot_stays_and_clears_time(self, store, wizard):
        at_date_time(wizard)
        observed = store.version("res-ana", MONDAY)
        wizard.select_time("res-ana", MONDAY, "10:00")
        store.insert_booking(make_booking("BK-1", "10:00", "11:00"))
        response = wizard.commit(observed_version=observed)
        assert response.rejection_kind == "stale_data"
        assert wizard.state == WizardState.DATE_TIME_SELECTION
        assert wizard.draft.start_time is None


class TestConfirmation:
    def test_restart_clears_draft(self, wizard):
        at_date_time(wizard)
        wizard.select_time("res-ana", MONDAY, "10:00")
        wizard.commit()
        assert wizard.restart() == WizardState.INTAKE
        assert wizard.draft == BookingDraft()

    def test_state_trace(self, wizard):
        wizard.complete_intake("Marina")
        wizard.select_service("svc-cut")
        wizard.accept_offer()
        wizard.select_time("res-ana", MONDAY, "14:00")
        wizard.commit()
        assert wizard.machine.get_state_trace() == [
            "intake", "service_selection", "upsell_offer",
            "date_time_selection", "confirmation",
        ]
