"""
Effective booking duration.

The base duration comes from the service being booked. An accepted
campaign with ``custom_duration_minutes`` replaces it entirely (it is the
total time of the combo, not an add-on). Committed bookings are never
re-resolved: their stored interval is their duration, even if the service
definition changed afterwards or the service was withdrawn.
"""

import logging
from typing import Optional, Union, TYPE_CHECKING

from availability_engine.errors import InactiveService, InvalidCampaign, InvalidDuration
from availability_engine.schemas.booking_schema import BookingRequest
from availability_engine.schemas.schedule_schema import BookingRecord, Campaign, Service

if TYPE_CHECKING:
    from availability_engine.store.ports import CatalogSource

logger = logging.getLogger(__name__)


def resolve_duration(service: Service, campaign: Optional[Campaign] = None) -> int:
    """Duration in minutes of booking ``service`` with ``campaign`` accepted."""
    if not service.active:
        raise InactiveService(f"Service {service.id} is not available for booking.")
    if campaign is None:
        return service.base_duration
    if not campaign.active:
        raise InvalidCampaign(f"Campaign {campaign.id} is no longer active.")
    if not campaign.applies_to(service.id):
        raise InvalidCampaign(
            f"Campaign {campaign.id} does not apply to service {service.id}."
        )
    if campaign.custom_duration_minutes is None:
        return service.base_duration
    if campaign.custom_duration_minutes <= 0:
        raise InvalidDuration(
            f"Campaign {campaign.id} has non-positive duration {campaign.custom_duration_minutes}"
        )
    return campaign.custom_duration_minutes


class DurationResolver:
    """Looks up services and campaigns and applies ``resolve_duration``."""

    def __init__(self, catalog: "CatalogSource") -> None:
        self._catalog = catalog

    def for_service(self, service_id: str, campaign_id: Optional[str] = None) -> int:
        service = self._catalog.get_service(service_id)
        campaign = self._catalog.get_campaign(campaign_id) if campaign_id else None
        duration = resolve_duration(service, campaign)
        logger.debug(
            "Effective duration for %s (campaign %s): %d min",
            service_id, campaign_id, duration,
        )
        return duration

    def effective_duration(self, item: Union[BookingRequest, BookingRecord]) -> int:
        """Stored duration for a committed booking; resolved duration for a request."""
        if isinstance(item, BookingRecord):
            return item.duration
        return self.for_service(item.service_id, item.applied_campaign_id)
