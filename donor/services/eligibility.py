"""Donation eligibility decisions.

Two entry points share the same rule order but answer different questions:

* ``evaluate_eligibility`` backs the eligibility display. It looks backwards
  for recent donations and forwards for an existing booking, relative to today.
* ``is_eligible_for_date`` backs booking. It also refuses a target date that
  falls within the recovery window *before* an existing appointment.

Neither function writes anything.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import List, Optional

from django.conf import settings
from django.db.models import Q
from django.utils import timezone

from appointment.models import Appointment, AppointmentStatus
from donor.models import Donor

SAFETY = "SAFETY"
RECENT_DONATION = "RECENT_DONATION"
EXISTING_BOOKING = "EXISTING_BOOKING"

RECENT_DONATION_MESSAGE = "You cannot book an appointment because you have given blood less than {days} days ago."
BOOKING_GAP_MESSAGE = (
    "You are not eligible to donate on this date. "
    "Please ensure there is at least a {days}-day gap between donations."
)


@dataclass(frozen=True)
class EligibilityResult:
    eligible: bool
    reason_code: Optional[str] = None
    reason: Optional[str] = None
    days_remaining: Optional[int] = None
    next_eligible_date: Optional[date] = None
    appointment_date: Optional[date] = None

    def as_dict(self) -> dict:
        payload = {"eligible": self.eligible}
        if self.reason:
            payload["reason"] = self.reason
        if self.reason_code:
            payload["type"] = self.reason_code
        if self.days_remaining is not None:
            payload["daysRemaining"] = self.days_remaining
        if self.next_eligible_date is not None:
            payload["nextEligibleDate"] = self.next_eligible_date.isoformat()
        if self.appointment_date is not None:
            payload["appointmentDate"] = self.appointment_date.isoformat()
        return payload


ELIGIBLE = EligibilityResult(eligible=True)


def _get_recovery_days() -> int:
    return int(getattr(settings, "DONATION_RECOVERY_DAYS", 60))


def _is_cancelled(appointment: Appointment) -> bool:
    return (appointment.status or "").lower() == AppointmentStatus.CANCELLED.lower()


def _is_completed(appointment: Appointment) -> bool:
    return (appointment.status or "").lower() == AppointmentStatus.COMPLETED.lower()


def _safety_block(donor: Donor) -> EligibilityResult:
    return EligibilityResult(
        eligible=False,
        reason_code=SAFETY,
        reason=f"Account is blocked due to safety status: {donor.safety_status}",
    )


def donation_history(donor: Donor) -> List[Appointment]:
    """Appointments linked to the donor record or to the donor's user, without duplicates."""

    link = Q(donor_id=donor.pk)
    if donor.user_id is not None:
        link |= Q(donor_user_id=donor.user_id)
    return list(Appointment.objects.filter(link).distinct().order_by("date", "time", "id"))


def evaluate_eligibility(donor: Optional[Donor], today: Optional[date] = None) -> EligibilityResult:
    """Structured eligibility for display, relative to ``today``."""

    if donor is None:
        return ELIGIBLE

    today = today or timezone.localdate()
    recovery_days = _get_recovery_days()

    if donor.is_safety_blocked:
        return _safety_block(donor)

    if donor.last_donated_at:
        elapsed = (today - donor.last_donated_at).days
        if 0 <= elapsed < recovery_days:
            return EligibilityResult(
                eligible=False,
                reason_code=RECENT_DONATION,
                reason=RECENT_DONATION_MESSAGE.format(days=recovery_days),
                days_remaining=recovery_days - elapsed,
                next_eligible_date=donor.last_donated_at + timedelta(days=recovery_days),
            )

    for appointment in donation_history(donor):
        if _is_cancelled(appointment) or appointment.date is None:
            continue
        elapsed = (today - appointment.date).days

        # Completed in the past but last_donated_at was never updated
        if 0 <= elapsed < recovery_days and _is_completed(appointment):
            return EligibilityResult(
                eligible=False,
                reason_code=RECENT_DONATION,
                reason=RECENT_DONATION_MESSAGE.format(days=recovery_days),
                next_eligible_date=appointment.date + timedelta(days=recovery_days),
            )

        if elapsed < 0:
            return EligibilityResult(
                eligible=False,
                reason_code=EXISTING_BOOKING,
                reason=f"You already have a scheduled donation appointment on {appointment.date}.",
                appointment_date=appointment.date,
            )

    return ELIGIBLE


def eligibility_for_date(donor: Optional[Donor], target_date: date) -> EligibilityResult:
    """Booking-time check for ``target_date`` with the reason that refused it."""

    if donor is None:
        return ELIGIBLE

    recovery_days = _get_recovery_days()
    message = BOOKING_GAP_MESSAGE.format(days=recovery_days)

    if donor.is_safety_blocked:
        return _safety_block(donor)

    if donor.last_donated_at:
        elapsed = (target_date - donor.last_donated_at).days
        if 0 <= elapsed < recovery_days:
            return EligibilityResult(
                eligible=False,
                reason_code=RECENT_DONATION,
                reason=message,
                days_remaining=recovery_days - elapsed,
                next_eligible_date=donor.last_donated_at + timedelta(days=recovery_days),
            )

    for appointment in donation_history(donor):
        if _is_cancelled(appointment) or appointment.date is None:
            continue
        if abs((appointment.date - target_date).days) < recovery_days:
            code = RECENT_DONATION if appointment.date <= target_date and _is_completed(appointment) else EXISTING_BOOKING
            return EligibilityResult(
                eligible=False,
                reason_code=code,
                reason=message,
                appointment_date=appointment.date,
            )

    return ELIGIBLE


def is_eligible_for_date(donor: Optional[Donor], target_date: date) -> bool:
    return eligibility_for_date(donor, target_date).eligible


def resolve_donor(identifier: int) -> Optional[Donor]:
    """Find a donor by user id first, then by donor id."""

    donor = Donor.objects.select_related("user").filter(user_id=identifier).first()
    if donor is None:
        donor = Donor.objects.select_related("user").filter(pk=identifier).first()
    return donor


def describe_eligibility(identifier: int, today: Optional[date] = None) -> EligibilityResult:
    """Eligibility payload for a user id or donor id; unknown donors are eligible."""

    return evaluate_eligibility(resolve_donor(identifier), today=today)
