from availability_engine.flow.booking_wizard import (
    BookingDraft,
    BookingWizard,
    InvalidTransitionError,
    WizardState,
    WizardStateMachine,
    WizardTrigger,
)

__all__ = [
    "BookingWizard",
    "BookingDraft",
    "WizardStateMachine",
    "WizardState",
    "WizardTrigger",
    "InvalidTransitionError",
]
