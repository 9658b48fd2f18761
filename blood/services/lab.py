from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from blood import exceptions as errors
from blood.models import ActivityType, BagStatus, InventoryBag, SafetyFlag, TestStatus
from blood.services.activity import record_activity
from donor.models import Donor, SafetyStatus

logger = logging.getLogger(__name__)


def record_lab_results(
    bag_id: int,
    *,
    hiv: bool = False,
    hepatitis: bool = False,
    malaria: bool = False,
    reason: Optional[str] = None,
) -> InventoryBag:
    """Store a screening outcome: clean bags become AVAILABLE/SAFE, anything positive is discarded.

    A positive screening also flags the donor so future bookings are refused.
    Results are entered once; a bag already tested or taken out of stock is refused.
    """

    positive = bool(hiv or hepatitis or malaria)
    with transaction.atomic():
        bag = InventoryBag.objects.select_for_update().filter(pk=bag_id).first()
        if bag is None:
            raise errors.ResourceError("Inventory bag not found.", code="BAG_NOT_FOUND")
        if bag.test_status == TestStatus.TESTED or bag.status in (BagStatus.DISCARDED, BagStatus.USED):
            raise errors.ConflictError(
                f"Lab results for bag #{bag.pk} were already recorded.", code="ALREADY_TESTED"
            )

        bag.hiv_positive = bool(hiv)
        bag.hepatitis_positive = bool(hepatitis)
        bag.malaria_positive = bool(malaria)
        bag.test_status = TestStatus.TESTED
        bag.tested_at = timezone.now()
        bag.lab_notes = (reason or "").strip()[:255]
        if positive:
            bag.safety_flag = SafetyFlag.BIOHAZARD
            bag.status = BagStatus.DISCARDED
        else:
            bag.safety_flag = SafetyFlag.SAFE
            bag.status = BagStatus.AVAILABLE
        bag.save()

        if positive and bag.donor_user_id is not None:
            flagged = Donor.objects.filter(user_id=bag.donor_user_id).update(safety_status=SafetyStatus.POSITIVE)
            if flagged:
                logger.warning("Donor for user %s flagged POSITIVE after bag %s screening", bag.donor_user_id, bag.pk)

        record_activity(
            f"Lab result for bag #{bag.pk} ({bag.blood_type}): {bag.safety_flag}",
            ActivityType.LAB_RESULT,
        )

    logger.info("Bag %s tested: %s/%s", bag.pk, bag.safety_flag, bag.status)
    return bag


def add_screened_stock(blood_type: str, expiry_date: Optional[date], quantity: int = 1) -> InventoryBag:
    """Manual intake of stock that arrives already screened (e.g. transfers from another bank)."""

    blood_type = (blood_type or "").strip()
    if not blood_type:
        raise errors.ValidationError("Blood type is required.", code="MISSING_BLOOD_TYPE")
    if quantity is None or quantity <= 0:
        raise errors.ValidationError("Quantity must be greater than zero.", code="INVALID_QUANTITY")
    if expiry_date is None:
        shelf_life = int(getattr(settings, "BAG_SHELF_LIFE_DAYS", 35))
        expiry_date = timezone.localdate() + timedelta(days=shelf_life)

    bag = InventoryBag.objects.create(
        blood_type=blood_type,
        quantity=quantity,
        expiry_date=expiry_date,
        status=BagStatus.AVAILABLE,
        test_status=TestStatus.TESTED,
        safety_flag=SafetyFlag.SAFE,
        collected_at=timezone.now(),
        tested_at=timezone.now(),
    )
    record_activity(f"{quantity} unit(s) of {blood_type} added to stock", ActivityType.STOCK_ADDED)
    logger.info("Added screened stock bag %s: %s x%s expiring %s", bag.pk, blood_type, quantity, expiry_date)
    return bag
