"""Appointment booking.

Everything from donor resolution to the final insert runs as one critical
section per center-day: a process-local keyed lock plus a row lock on the
matching ``BookingLock`` inside a single transaction, so two bookings for the
same center and date can never both pass the slot check against a stale view.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import List, Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.utils import timezone

from appointment.locks import keyed_lock
from appointment.models import Appointment, AppointmentStatus, BookingLock, CenterType
from appointment.services.camps import get_camp_schedule
from blood import exceptions as errors
from blood.models import ActivityType
from blood.services.activity import record_activity
from donor.models import Donor, UNKNOWN_BLOOD_TYPE
from donor.services.eligibility import eligibility_for_date

logger = logging.getLogger(__name__)


def _get_slot_minutes() -> int:
    return int(getattr(settings, "APPOINTMENT_SLOT_MINUTES", 15))


def normalize_center_type(center_type: Optional[str]) -> str:
    value = (center_type or "").strip().upper()
    if not value:
        return CenterType.HOSPITAL
    if value not in CenterType.values:
        raise errors.ValidationError(f"Unsupported center type '{center_type}'.", code="INVALID_CENTER_TYPE")
    return value


def normalize_status(status: Optional[str]) -> str:
    value = (status or "").strip().lower()
    for choice in AppointmentStatus.values:
        if choice.lower() == value:
            return choice
    raise errors.ValidationError(f"Unsupported appointment status '{status}'.", code="INVALID_STATUS")


def _resolve_or_create_donor(donor_id: Optional[int], user_id: Optional[int]) -> Donor:
    """Lock and return the donor for a booking, creating it on a registered user's first booking.

    A supplied ``user_id`` must belong to an existing auth user; donor records
    are only created for registered accounts.
    """
    if user_id is not None:
        user = get_user_model().objects.select_for_update().filter(pk=user_id).first()
        if user is None:
            raise errors.NotFoundError(
                f"Booking requires a registered user account; user {user_id} was not found.",
                code="USER_NOT_FOUND",
            )

        donor = Donor.objects.locked_for_user(user_id)
        if donor is not None:
            return donor

        try:
            with transaction.atomic():
                donor = Donor.objects.create(user=user, blood_type=UNKNOWN_BLOOD_TYPE)
        except IntegrityError:
            # Another booking created the record first
            donor = Donor.objects.locked_for_user(user_id)
            if donor is None:
                raise
            return donor
        logger.info("Created donor %s for user %s on first booking", donor.pk, user_id)
        return donor

    if donor_id is not None:
        donor = Donor.objects.select_for_update().filter(pk=donor_id).first()
        if donor is not None:
            return donor

    raise errors.NotFoundError("Donor not found. Please register first.", code="DONOR_NOT_FOUND")


def _backfill_blood_type(donor: Donor, blood_type: Optional[str]) -> None:
    blood_type = (blood_type or "").strip()
    if not blood_type or blood_type.upper() == UNKNOWN_BLOOD_TYPE:
        return
    if donor.has_known_blood_type:
        return
    donor.blood_type = blood_type
    donor.save(update_fields=["blood_type"])


def _check_slot_free(center_type: str, center_id: int, requested: datetime) -> None:
    gap = timedelta(minutes=_get_slot_minutes())
    day = requested.date()
    same_center_day = Appointment.objects.active().at_center_on(center_type, center_id, day)
    for existing in same_center_day.order_by("time", "id"):
        existing_at = datetime.combine(existing.date, existing.time)
        if abs(existing_at - requested) < gap:
            raise errors.ConflictError(
                f"This slot is already booked by {existing.donor_name or 'another donor'}. "
                f"Please pick a time at least {_get_slot_minutes()} minutes apart.",
                code="SLOT_TAKEN",
            )


def book_appointment(
    *,
    center_id: Optional[int],
    time: Optional[datetime],
    donor_id: Optional[int] = None,
    user_id: Optional[int] = None,
    donor_name: str = "",
    center_type: Optional[str] = None,
    blood_type: Optional[str] = None,
    center_name: Optional[str] = None,
) -> Appointment:
    """Book a donation slot at a hospital or camp and return the Scheduled appointment."""

    if time is None:
        raise errors.ValidationError("Appointment time is required.", code="MISSING_TIME")
    if center_id is None:
        raise errors.ValidationError("A hospital or camp must be selected.", code="MISSING_CENTER")
    if timezone.is_naive(time):
        time = timezone.make_aware(time)
    if time <= timezone.now():
        raise errors.ValidationError("Booking time must be in the future.", code="PAST_BOOKING")

    normalized_type = normalize_center_type(center_type)
    local_time = timezone.localtime(time).replace(microsecond=0)
    requested = local_time.replace(tzinfo=None)
    day = requested.date()

    with keyed_lock((normalized_type, int(center_id), day)):
        with transaction.atomic():
            lock_row, _ = BookingLock.objects.get_or_create(
                center_type=normalized_type, center_id=center_id, date=day
            )
            BookingLock.objects.select_for_update().get(pk=lock_row.pk)

            donor = _resolve_or_create_donor(donor_id, user_id)
            _backfill_blood_type(donor, blood_type)

            verdict = eligibility_for_date(donor, day)
            if not verdict.eligible:
                logger.info("Donor %s ineligible for %s: %s", donor.pk, day, verdict.reason_code)
                raise errors.EligibilityError(verdict.reason, code=verdict.reason_code)

            resolved_name = (center_name or "").strip()
            if not resolved_name:
                label = "Camp" if normalized_type == CenterType.CAMP else "Hospital"
                resolved_name = f"{label} #{center_id}"

            if normalized_type == CenterType.CAMP:
                camp = get_camp_schedule(center_id)
                if camp is None:
                    raise errors.ConflictError("Selected camp was not found.", code="CAMP_NOT_FOUND")
                if local_time < camp.start_at or local_time > camp.end_at:
                    raise errors.ConflictError(
                        "Selected time is outside the camp schedule.", code="OUTSIDE_SCHEDULE"
                    )
                resolved_name = camp.name or resolved_name

            _check_slot_free(normalized_type, center_id, requested)

            appointment = Appointment.objects.create(
                donor=donor,
                donor_user_id=user_id if user_id is not None else donor.user_id,
                donor_name=(donor_name or "").strip(),
                center_type=normalized_type,
                center_id=center_id,
                center_name=resolved_name,
                date=day,
                time=requested.time(),
                status=AppointmentStatus.SCHEDULED,
            )
            record_activity(
                f"Appointment booked at {resolved_name} on {day} {requested.strftime('%H:%M')}",
                ActivityType.APPOINTMENT_BOOKED,
            )

    logger.info(
        "Booked appointment %s for donor %s at %s #%s on %s %s",
        appointment.pk,
        donor.pk,
        normalized_type,
        center_id,
        day,
        requested.time(),
    )
    return appointment


def update_appointment_status(appointment_id: int, status: str) -> Appointment:
    """Set an appointment's status; entering Completed fires the completion pipeline.

    Cancelled is terminal: a cancelled appointment gave up its slot and no
    longer counts toward the donation gap, so it cannot be revived.
    """

    new_status = normalize_status(status)
    with transaction.atomic():
        appointment = Appointment.objects.select_for_update().filter(pk=appointment_id).first()
        if appointment is None:
            raise errors.NotFoundError("Appointment not found", code="APPOINTMENT_NOT_FOUND")
        previous = appointment.status
        was_cancelled = (previous or "").lower() == AppointmentStatus.CANCELLED.lower()
        if was_cancelled and new_status != AppointmentStatus.CANCELLED:
            raise errors.ConflictError(
                "This appointment was cancelled. Please book a new appointment instead.",
                code="APPOINTMENT_CANCELLED",
            )
        appointment.status = new_status
        appointment.save(update_fields=["status"])

    logger.info("Appointment %s status %s -> %s", appointment.pk, previous, new_status)
    return appointment


def cancel_appointment(appointment_id: int) -> Appointment:
    return update_appointment_status(appointment_id, AppointmentStatus.CANCELLED)


def appointments_for_donor(identifier: int) -> List[Appointment]:
    by_user = list(Appointment.objects.filter(donor_user_id=identifier))
    if by_user:
        return by_user
    return list(Appointment.objects.filter(donor_id=identifier))
