import logging

from celery import shared_task

from blood import models
from donor import models as donor_models


logger = logging.getLogger(__name__)


def count_matching_donors(blood_type: str) -> int:
    """Donors of the requested type who are not blocked by a positive screening."""

    return (
        donor_models.Donor.objects.filter(blood_type__iexact=(blood_type or "").strip())
        .filter(safety_status=donor_models.SafetyStatus.NORMAL)
        .count()
    )


@shared_task(bind=True)
def broadcast_emergency_request(self, emergency_request_id: int) -> int:
    """Announce an emergency request to matching donors.

    Delivery is not wired to any SMS or push provider; the broadcast is logged
    and the audience size returned so callers can report it.
    """

    emergency = models.EmergencyRequest.objects.get(pk=emergency_request_id)
    audience = count_matching_donors(emergency.blood_type)
    logger.info(
        "Emergency broadcast for request %s: %s donors of type %s (%s units at %s, %s)",
        emergency.pk,
        audience,
        emergency.blood_type,
        emergency.units_requested,
        emergency.hospital,
        emergency.urgency,
    )
    return audience
