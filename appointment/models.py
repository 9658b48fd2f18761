from datetime import datetime

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from donor import models as dmodels


class CenterType(models.TextChoices):
    HOSPITAL = "HOSPITAL", "Hospital"
    CAMP = "CAMP", "Camp"


class AppointmentStatus(models.TextChoices):
    SCHEDULED = "Scheduled", "Scheduled"
    APPROVED = "Approved", "Approved"
    RESCHEDULED = "Rescheduled", "Rescheduled"
    NO_SHOW = "No Show", "No Show"
    COMPLETED = "Completed", "Completed"
    CANCELLED = "Cancelled", "Cancelled"


class Camp(models.Model):
    name = models.CharField(max_length=120)
    location = models.CharField(max_length=160, blank=True)
    district = models.CharField(max_length=60, blank=True)
    province = models.CharField(max_length=60, blank=True)
    nearest_hospital = models.CharField(max_length=120, blank=True)
    latitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    longitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    date = models.DateField()
    start_time = models.TimeField()
    end_time = models.TimeField()

    class Meta:
        ordering = ["date", "start_time", "id"]

    def __str__(self):
        return f"{self.name} ({self.date})"

    def clean(self):
        if self.start_time and self.end_time and self.end_time <= self.start_time:
            raise ValidationError("Camp end time must be after start time.")

    @property
    def start_at(self) -> datetime:
        return timezone.make_aware(datetime.combine(self.date, self.start_time))

    @property
    def end_at(self) -> datetime:
        return timezone.make_aware(datetime.combine(self.date, self.end_time))

    @property
    def camp_status(self) -> str:
        now = timezone.now()
        if now < self.start_at:
            return "UPCOMING"
        if now > self.end_at:
            return "ENDED"
        return "ONGOING"

    def as_dict(self) -> dict:
        return {
            "id": self.pk,
            "name": self.name,
            "location": self.location,
            "district": self.district,
            "province": self.province,
            "nearestHospital": self.nearest_hospital,
            "lat": float(self.latitude) if self.latitude is not None else None,
            "lng": float(self.longitude) if self.longitude is not None else None,
            "date": self.date.isoformat(),
            "startTime": self.start_time.strftime("%H:%M"),
            "endTime": self.end_time.strftime("%H:%M"),
            "campStatus": self.camp_status,
        }


class AppointmentQuerySet(models.QuerySet):
    def active(self):
        return self.exclude(status__iexact=AppointmentStatus.CANCELLED)

    def at_center_on(self, center_type, center_id, day):
        return self.filter(center_type=center_type, center_id=center_id, date=day)


class Appointment(models.Model):
    donor = models.ForeignKey(dmodels.Donor, on_delete=models.CASCADE, related_name="appointments")
    donor_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="donation_appointments",
    )
    donor_name = models.CharField(max_length=120, blank=True)
    center_type = models.CharField(max_length=16, choices=CenterType.choices, default=CenterType.HOSPITAL)
    center_id = models.PositiveBigIntegerField()
    center_name = models.CharField(max_length=160, blank=True)
    date = models.DateField()
    time = models.TimeField()
    status = models.CharField(max_length=16, choices=AppointmentStatus.choices, default=AppointmentStatus.SCHEDULED)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = AppointmentQuerySet.as_manager()

    class Meta:
        ordering = ["-date", "-time", "-id"]
        indexes = [
            models.Index(fields=["center_type", "center_id", "date"], name="appointment_center_day_idx"),
        ]

    def __str__(self):
        return f"{self.donor_name or self.donor} - {self.center_name} {self.date} {self.time}"

    @property
    def scheduled_at(self) -> datetime:
        return timezone.make_aware(datetime.combine(self.date, self.time))

    def as_dict(self) -> dict:
        return {
            "id": self.pk,
            "donorId": self.donor_id,
            "donorUserId": self.donor_user_id,
            "donorName": self.donor_name,
            "centerType": self.center_type,
            "hospitalId": self.center_id,
            "centerName": self.center_name,
            "date": self.date.isoformat(),
            "time": self.time.strftime("%H:%M"),
            "status": self.status,
        }


class BookingLock(models.Model):
    """One row per center-day; locked while a booking for that center-day is validated and saved."""

    center_type = models.CharField(max_length=16, choices=CenterType.choices)
    center_id = models.PositiveBigIntegerField()
    date = models.DateField()

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["center_type", "center_id", "date"], name="unique_booking_lock_per_center_day"),
        ]

    def __str__(self):
        return f"{self.center_type} #{self.center_id} on {self.date}"
