"""Emergency request fulfillment from safe stock, first-expiring-first-out.

The selection and draw steps are plain functions over bag-like objects (anything
with ``blood_type``, ``quantity``, ``expiry_date``, ``status`` and
``safety_flag``) so they can be exercised without a database.
``fulfill_emergency_request`` wraps them in one locked transaction.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, List, Optional, Sequence, Tuple

from celery.result import EagerResult
from django.db import transaction
from django.utils import timezone

from blood import exceptions as errors
from blood.models import (
    ActivityType,
    BagStatus,
    EmergencyRequest,
    InventoryBag,
    RequestStatus,
    SafetyFlag,
    Urgency,
)
from blood.services.activity import record_activity
from blood.tasks import broadcast_emergency_request

logger = logging.getLogger(__name__)


def _upper(value: Optional[str]) -> str:
    return (value or "").strip().upper()


def is_usable(bag, blood_type: str, today: date) -> bool:
    if _upper(bag.blood_type) != _upper(blood_type):
        return False
    if bag.quantity is None or bag.quantity <= 0:
        return False
    if bag.expiry_date is not None and bag.expiry_date < today:
        return False
    safety = _upper(bag.safety_flag)
    if safety == SafetyFlag.BIOHAZARD:
        return False
    return safety == SafetyFlag.SAFE or _upper(bag.status) == BagStatus.AVAILABLE


def _expiry_key(bag):
    # Bags without an expiry date go last
    return (bag.expiry_date is None, bag.expiry_date or date.max, getattr(bag, "pk", None) or 0)


def select_candidates(bags: Iterable, blood_type: str, today: date) -> List:
    return sorted((bag for bag in bags if is_usable(bag, blood_type, today)), key=_expiry_key)


def consume_fefo(candidates: Sequence, needed: int) -> Tuple[List, int]:
    """Draw up to ``needed`` units from ``candidates`` in order.

    Returns the bags that were drawn from (already decremented, USED at zero)
    and the number of units sourced.
    """

    remaining = max(0, int(needed))
    touched = []
    for bag in candidates:
        if remaining <= 0:
            break
        use = min(bag.quantity, remaining)
        if use <= 0:
            continue
        bag.quantity -= use
        if bag.quantity == 0:
            bag.status = BagStatus.USED
        touched.append(bag)
        remaining -= use
    return touched, max(0, int(needed)) - remaining


def fulfill_emergency_request(request_id: int, units_to_send: int) -> EmergencyRequest:
    """Send up to ``units_to_send`` units of safe stock to an emergency request."""

    with transaction.atomic():
        request = EmergencyRequest.objects.select_for_update().filter(pk=request_id).first()
        if request is None:
            raise errors.NotFoundError("Emergency request not found", code="REQUEST_NOT_FOUND")

        if units_to_send is None or units_to_send <= 0:
            raise errors.ValidationError("Units to send must be greater than zero.", code="INVALID_UNITS")

        remaining = request.units_requested - request.units_fulfilled
        if remaining <= 0:
            raise errors.ConflictError("Request already fulfilled.", code="ALREADY_FULFILLED")

        target = min(remaining, units_to_send)
        today = timezone.localdate()
        locked_bags = InventoryBag.objects.select_for_update().matching_type(request.blood_type).filter(quantity__gt=0)
        candidates = select_candidates(locked_bags, request.blood_type, today)
        touched, sourced = consume_fefo(candidates, target)

        if sourced <= 0:
            raise errors.ResourceError(
                f"No usable stock available for blood type {request.blood_type}",
                code="NO_USABLE_STOCK",
            )

        for bag in touched:
            bag.save(update_fields=["quantity", "status"])

        request.units_fulfilled += sourced
        if request.units_fulfilled >= request.units_requested:
            request.status = RequestStatus.FULFILLED
        else:
            request.status = RequestStatus.PARTIAL
        request.save(update_fields=["units_fulfilled", "status"])

        record_activity(
            f"Emergency supply dispatched: {sourced} units of {request.blood_type} to {request.hospital}",
            ActivityType.EMERGENCY_FULFILLMENT,
        )

    logger.info(
        "Emergency request %s: sent %s of %s requested units from %s bags (now %s/%s, %s)",
        request.pk,
        sourced,
        units_to_send,
        len(touched),
        request.units_fulfilled,
        request.units_requested,
        request.status,
    )
    return request


def normalize_urgency(urgency: Optional[str]) -> str:
    value = _upper(urgency)
    if not value:
        return Urgency.CRITICAL
    if value not in Urgency.values:
        raise errors.ValidationError(f"Unsupported urgency '{urgency}'.", code="INVALID_URGENCY")
    return value


def create_emergency_request(blood_type: str, units: int, hospital: str, urgency: Optional[str] = None) -> EmergencyRequest:
    """Open an emergency request and queue the donor broadcast for it.

    ``donors_notified`` is set on the returned request when the broadcast ran
    inline; a queued or failed broadcast leaves it ``None`` and the request stands.
    """

    blood_type = (blood_type or "").strip()
    if not blood_type:
        raise errors.ValidationError("Blood type is required.", code="MISSING_BLOOD_TYPE")
    if units is None or units <= 0:
        raise errors.ValidationError("Units requested must be greater than zero.", code="INVALID_UNITS")

    request = EmergencyRequest.objects.create(
        blood_type=blood_type,
        units_requested=units,
        units_fulfilled=0,
        hospital=(hospital or "").strip() or "Unknown Hospital",
        urgency=normalize_urgency(urgency),
        status=RequestStatus.OPEN,
    )
    record_activity(
        f"Emergency Alert: {units} units of {blood_type} needed at {request.hospital} ({request.urgency})",
        ActivityType.EMERGENCY_BROADCAST,
    )
    logger.info("Emergency request %s opened: %s x%s at %s", request.pk, blood_type, units, request.hospital)

    try:
        result = broadcast_emergency_request.delay(request.pk)
    except Exception as broadcast_error:
        logger.error("Failed to queue emergency broadcast for %s: %s", request.pk, broadcast_error)
        result = None
    # Only an inline (eager) run has the audience size available right away
    request.donors_notified = result.result if isinstance(result, EagerResult) else None
    return request


def active_requests() -> List[EmergencyRequest]:
    return list(EmergencyRequest.objects.exclude(status=RequestStatus.FULFILLED))


def all_requests() -> List[EmergencyRequest]:
    return list(EmergencyRequest.objects.all())
