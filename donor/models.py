from django.db import models
from django.conf import settings
from datetime import timedelta

UNKNOWN_BLOOD_TYPE = "UNKNOWN"


class SafetyStatus(models.TextChoices):
    NORMAL = "NORMAL", "Normal"
    POSITIVE = "POSITIVE", "Positive screening"
    BLOCKED = "BLOCKED", "Blocked"


class DonorQuerySet(models.QuerySet):
    def for_user(self, user_id):
        return self.filter(user_id=user_id)

    def locked_for_user(self, user_id):
        """Row-locked donor lookup; must run inside transaction.atomic()."""
        return self.select_for_update().filter(user_id=user_id).first()


class Donor(models.Model):
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="donor",
    )
    blood_type = models.CharField(max_length=10, null=True, blank=True, default=UNKNOWN_BLOOD_TYPE)
    safety_status = models.CharField(
        max_length=16,
        choices=SafetyStatus.choices,
        default=SafetyStatus.NORMAL,
    )

    # Donation recovery tracking
    last_donated_at = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = DonorQuerySet.as_manager()

    class Meta:
        ordering = ["id"]

    @property
    def get_name(self):
        if self.user is None:
            return f"Donor #{self.pk}"
        full_name = f"{self.user.first_name} {self.user.last_name}".strip()
        return full_name or self.user.get_username()

    def __str__(self):
        return self.get_name

    @property
    def has_known_blood_type(self) -> bool:
        return bool(self.blood_type) and self.blood_type.upper() != UNKNOWN_BLOOD_TYPE

    @property
    def is_safety_blocked(self) -> bool:
        return (self.safety_status or "").upper() in (SafetyStatus.POSITIVE, SafetyStatus.BLOCKED)

    @property
    def donation_recovery_days(self) -> int:
        return int(getattr(settings, "DONATION_RECOVERY_DAYS", 60))

    @property
    def next_eligible_donation_date(self):
        if not self.last_donated_at:
            return None
        return self.last_donated_at + timedelta(days=self.donation_recovery_days)

    def as_dict(self) -> dict:
        return {
            "id": self.pk,
            "userId": self.user_id,
            "name": self.get_name,
            "bloodType": self.blood_type,
            "safetyStatus": self.safety_status,
            "lastDonationDate": self.last_donated_at.isoformat() if self.last_donated_at else None,
            "nextEligibleDate": (
                self.next_eligible_donation_date.isoformat() if self.next_eligible_donation_date else None
            ),
        }
