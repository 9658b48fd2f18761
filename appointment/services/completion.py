"""Turns a completed appointment into an untested inventory bag."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional

from django.conf import settings
from django.utils import timezone

from appointment.models import Appointment, AppointmentStatus
from blood.models import ActivityType, BagStatus, InventoryBag, TestStatus
from blood.services.activity import record_activity
from donor.models import Donor, UNKNOWN_BLOOD_TYPE

logger = logging.getLogger(__name__)


def _get_shelf_life_days() -> int:
    return int(getattr(settings, "BAG_SHELF_LIFE_DAYS", 35))


def _is_completed(status: Optional[str]) -> bool:
    return (status or "").lower() == AppointmentStatus.COMPLETED.lower()


def entered_completed(previous_status: Optional[str], new_status: Optional[str]) -> bool:
    return _is_completed(new_status) and not _is_completed(previous_status)


def handle_status_change(appointment: Appointment, previous_status: Optional[str]) -> Optional[InventoryBag]:
    if not entered_completed(previous_status, appointment.status):
        return None
    return record_completed_donation(appointment)


def record_completed_donation(appointment: Appointment) -> InventoryBag:
    """Create the pending lab bag (at most once) and stamp the donor's last donation."""

    donor = Donor.objects.filter(pk=appointment.donor_id).first()
    blood_type = donor.blood_type if donor is not None and donor.blood_type else UNKNOWN_BLOOD_TYPE

    if appointment.date and appointment.time:
        collected_at = timezone.make_aware(datetime.combine(appointment.date, appointment.time))
    else:
        collected_at = timezone.now()

    bag, created = InventoryBag.objects.get_or_create(
        source_appointment=appointment,
        defaults={
            "blood_type": blood_type,
            "quantity": 1,
            "expiry_date": appointment.date + timedelta(days=_get_shelf_life_days()) if appointment.date else None,
            "status": BagStatus.UNTESTED,
            "test_status": TestStatus.PENDING,
            "safety_flag": None,
            "donor_name": appointment.donor_name,
            "donor_user_id": appointment.donor_user_id,
            "collected_at": collected_at,
        },
    )
    if created:
        logger.info("Created pending lab bag %s for appointment %s", bag.pk, appointment.pk)
        record_activity(
            f"Donation completed by {appointment.donor_name or 'a donor'}; {blood_type} bag sent to lab",
            ActivityType.DONATION_COMPLETED,
        )
    else:
        logger.info("Appointment %s already has bag %s; not creating another", appointment.pk, bag.pk)

    if donor is not None and appointment.date:
        donor.last_donated_at = appointment.date
        donor.save(update_fields=["last_donated_at"])

    return bag
