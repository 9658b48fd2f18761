from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Sum
from django.db.models.functions import Upper

from appointment import models as amodels


class BagStatus(models.TextChoices):
    UNTESTED = "UNTESTED", "Untested"
    AVAILABLE = "AVAILABLE", "Available"
    USED = "USED", "Used"
    DISCARDED = "DISCARDED", "Discarded"


class TestStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    TESTED = "TESTED", "Tested"


class SafetyFlag(models.TextChoices):
    SAFE = "SAFE", "Safe"
    BIOHAZARD = "BIOHAZARD", "Biohazard"


class InventoryBagQuerySet(models.QuerySet):
    def matching_type(self, blood_type):
        return self.filter(blood_type__iexact=(blood_type or "").strip())

    def pending_lab(self):
        return self.filter(test_status=TestStatus.PENDING)

    def available_units_by_type(self):
        """AVAILABLE, non-biohazard units per upper-cased blood type."""
        rows = (
            self.filter(status__iexact=BagStatus.AVAILABLE, quantity__gt=0)
            .exclude(safety_flag__iexact=SafetyFlag.BIOHAZARD)
            .annotate(type_key=Upper("blood_type"))
            .values("type_key")
            .annotate(units=Sum("quantity"))
            .order_by("type_key")
        )
        return {row["type_key"]: row["units"] for row in rows}


class InventoryBag(models.Model):
    blood_type = models.CharField(max_length=10)
    quantity = models.PositiveIntegerField(default=1)
    expiry_date = models.DateField(null=True, blank=True)
    status = models.CharField(max_length=16, choices=BagStatus.choices, default=BagStatus.UNTESTED)
    test_status = models.CharField(max_length=16, choices=TestStatus.choices, default=TestStatus.PENDING)
    safety_flag = models.CharField(max_length=16, choices=SafetyFlag.choices, null=True, blank=True)
    source_appointment = models.OneToOneField(
        amodels.Appointment,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="inventory_bag",
    )
    donor_name = models.CharField(max_length=120, blank=True)
    donor_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="donated_bags",
    )
    collected_at = models.DateTimeField(null=True, blank=True)

    # Lab screening outcome
    hiv_positive = models.BooleanField(default=False)
    hepatitis_positive = models.BooleanField(default=False)
    malaria_positive = models.BooleanField(default=False)
    lab_notes = models.CharField(max_length=255, blank=True)
    tested_at = models.DateTimeField(null=True, blank=True)

    objects = InventoryBagQuerySet.as_manager()

    class Meta:
        ordering = ["expiry_date", "id"]
        verbose_name = "Inventory Bag"
        verbose_name_plural = "Inventory Bags"

    def __str__(self):
        return f"{self.blood_type} x{self.quantity} ({self.status})"

    def as_dict(self) -> dict:
        return {
            "id": self.pk,
            "bloodType": self.blood_type,
            "quantity": self.quantity,
            "expiryDate": self.expiry_date.isoformat() if self.expiry_date else None,
            "status": self.status,
            "testStatus": self.test_status,
            "safetyFlag": self.safety_flag,
            "sourceAppointmentId": self.source_appointment_id,
            "donorName": self.donor_name,
            "donorUserId": self.donor_user_id,
            "collectedAt": self.collected_at.isoformat() if self.collected_at else None,
            "labNotes": self.lab_notes,
        }


class RequestStatus(models.TextChoices):
    OPEN = "OPEN", "Open"
    PARTIAL = "PARTIAL", "Partially fulfilled"
    FULFILLED = "FULFILLED", "Fulfilled"


class Urgency(models.TextChoices):
    CRITICAL = "CRITICAL", "Critical"
    HIGH = "HIGH", "High"
    MODERATE = "MODERATE", "Moderate"


class EmergencyRequest(models.Model):
    blood_type = models.CharField(max_length=8)
    units_requested = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    units_fulfilled = models.PositiveIntegerField(default=0)
    hospital = models.CharField(max_length=160)
    urgency = models.CharField(max_length=32, choices=Urgency.choices, default=Urgency.CRITICAL)
    status = models.CharField(max_length=24, choices=RequestStatus.choices, default=RequestStatus.OPEN)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(units_fulfilled__lte=models.F("units_requested")),
                name="emergency_units_fulfilled_lte_requested",
            ),
        ]

    def __str__(self):
        return f"{self.blood_type} x{self.units_requested} for {self.hospital} ({self.status})"

    @property
    def units_remaining(self) -> int:
        return max(0, self.units_requested - self.units_fulfilled)

    def as_dict(self) -> dict:
        return {
            "id": self.pk,
            "bloodType": self.blood_type,
            "unitsRequested": self.units_requested,
            "unitsFulfilled": self.units_fulfilled,
            "hospital": self.hospital,
            "urgency": self.urgency,
            "status": self.status,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


class ActivityType(models.TextChoices):
    EMERGENCY_BROADCAST = "EMERGENCY_BROADCAST", "Emergency broadcast"
    EMERGENCY_FULFILLMENT = "EMERGENCY_FULFILLMENT", "Emergency fulfillment"
    APPOINTMENT_BOOKED = "APPOINTMENT_BOOKED", "Appointment booked"
    DONATION_COMPLETED = "DONATION_COMPLETED", "Donation completed"
    LAB_RESULT = "LAB_RESULT", "Lab result"
    STOCK_ADDED = "STOCK_ADDED", "Stock added"


class ActivityLog(models.Model):
    description = models.CharField(max_length=255)
    activity_type = models.CharField(max_length=32, choices=ActivityType.choices)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return self.description

    def as_dict(self) -> dict:
        return {
            "id": self.pk,
            "description": self.description,
            "type": self.activity_type,
            "timestamp": self.created_at.isoformat() if self.created_at else None,
        }
