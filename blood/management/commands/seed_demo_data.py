import random
from datetime import date, time, timedelta
from decimal import Decimal

from django.contrib.auth.models import User
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone
from faker import Faker

from appointment import models as appointment_models
from blood import models as blood_models
from donor import models as donor_models

BLOOD_GROUPS = ["A+", "A-", "B+", "B-", "AB+", "AB-", "O+", "O-"]
DEFAULT_PASSWORD = "DemoPass123!"

CAMPS = [
    {
        "name": "Colombo Camp",
        "province": "Western",
        "district": "Colombo",
        "location": "Colombo City Centre",
        "nearest_hospital": "Colombo National Hospital",
        "date": date(2026, 3, 10),
        "start_time": time(9, 0),
        "end_time": time(13, 0),
        "latitude": Decimal("6.927100"),
        "longitude": Decimal("79.861200"),
    },
    {
        "name": "Kandy Drive",
        "province": "Central",
        "district": "Kandy",
        "location": "Kandy City Center",
        "nearest_hospital": "Kandy General Hospital",
        "date": date(2026, 3, 15),
        "start_time": time(10, 30),
        "end_time": time(14, 30),
        "latitude": Decimal("7.290600"),
        "longitude": Decimal("80.633700"),
    },
    {
        "name": "Galle Donation Event",
        "province": "Southern",
        "district": "Galle",
        "location": "Galle Fort",
        "nearest_hospital": "Galle Teaching Hospital",
        "date": date(2026, 3, 20),
        "start_time": time(8, 30),
        "end_time": time(12, 30),
        "latitude": Decimal("6.053500"),
        "longitude": Decimal("80.221000"),
    },
]


class Command(BaseCommand):
    help = "Generate a demo dataset with donation camps, donors, screened stock and an open emergency request"

    def add_arguments(self, parser):
        parser.add_argument("--donors", type=int, help="Number of donors to create (default random between 30-50)")
        parser.add_argument("--seed", type=int, help="Random seed for deterministic runs")
        parser.add_argument("--purge", action="store_true", help="Delete existing donors, stock and requests before seeding")

    def handle(self, *args, **options):
        faker = Faker()
        if options.get("seed") is not None:
            Faker.seed(options["seed"])
            random.seed(options["seed"])

        donor_target = options.get("donors") or random.randint(30, 50)

        if options.get("purge"):
            self._purge_existing()

        with transaction.atomic():
            camp_count = self._ensure_camps()
            donors = self._create_donors(donor_target, faker)
            bag_count = self._create_stock(donors)
            emergency = self._create_emergency_request(faker)

        summary = (
            f"Seed complete: {camp_count} camps, {len(donors)} donors, "
            f"{bag_count} inventory bags, emergency request #{emergency.pk} ({emergency.blood_type})."
        )
        self.stdout.write(self.style.SUCCESS(summary))
        self.stdout.write(
            self.style.SUCCESS(
                "Default password for generated accounts: '" + DEFAULT_PASSWORD + "'"
            )
        )

    # ------------------------------------------------------------------
    def _purge_existing(self):
        self.stdout.write("Purging existing donor/stock/request data…")
        blood_models.EmergencyRequest.objects.all().delete()
        blood_models.InventoryBag.objects.all().delete()
        appointment_models.Appointment.objects.all().delete()

        donor_user_ids = list(
            donor_models.Donor.objects.exclude(user__isnull=True).values_list("user_id", flat=True)
        )
        donor_models.Donor.objects.all().delete()
        User.objects.filter(id__in=donor_user_ids, is_staff=False).delete()
        self.stdout.write(self.style.WARNING("Existing demo records removed."))

    def _ensure_camps(self):
        for camp in CAMPS:
            defaults = {k: v for k, v in camp.items() if k not in ("name", "date")}
            appointment_models.Camp.objects.update_or_create(name=camp["name"], date=camp["date"], defaults=defaults)
        return len(CAMPS)

    def _random_username(self, prefix):
        suffix = random.randint(1000, 999999)
        username = f"{prefix}{suffix}"
        while User.objects.filter(username=username).exists():
            suffix = random.randint(1000, 999999)
            username = f"{prefix}{suffix}"
        return username

    def _create_donors(self, target, faker):
        today = timezone.localdate()
        donors = []
        for _ in range(target):
            username = self._random_username("donor_")
            user = User.objects.create_user(
                username=username,
                first_name=faker.first_name(),
                last_name=faker.last_name(),
                email=f"{username}@demo.local",
                password=DEFAULT_PASSWORD,
            )
            last_donated_at = None
            if random.random() < 0.4:
                last_donated_at = today - timedelta(days=random.randint(5, 240))
            donor = donor_models.Donor.objects.create(
                user=user,
                blood_type=random.choice(BLOOD_GROUPS),
                last_donated_at=last_donated_at,
            )
            donors.append(donor)
        return donors

    def _create_stock(self, donors):
        """A few screened bags per blood type plus a handful still waiting on the lab."""

        today = timezone.localdate()
        bags = []
        for group in BLOOD_GROUPS:
            for _ in range(random.randint(1, 4)):
                bags.append(
                    blood_models.InventoryBag(
                        blood_type=group,
                        quantity=random.randint(1, 3),
                        expiry_date=today + timedelta(days=random.randint(3, 35)),
                        status=blood_models.BagStatus.AVAILABLE,
                        test_status=blood_models.TestStatus.TESTED,
                        safety_flag=blood_models.SafetyFlag.SAFE,
                        tested_at=timezone.now(),
                    )
                )

        for donor in random.sample(donors, k=min(len(donors), 5)):
            collected_on = today - timedelta(days=random.randint(0, 3))
            bags.append(
                blood_models.InventoryBag(
                    blood_type=donor.blood_type,
                    quantity=1,
                    expiry_date=collected_on + timedelta(days=35),
                    donor_name=donor.get_name,
                    donor_user=donor.user,
                    collected_at=timezone.now() - timedelta(days=(today - collected_on).days),
                )
            )

        blood_models.InventoryBag.objects.bulk_create(bags)
        return len(bags)

    def _create_emergency_request(self, faker):
        return blood_models.EmergencyRequest.objects.create(
            blood_type=random.choice(BLOOD_GROUPS),
            units_requested=random.randint(2, 6),
            hospital=f"{faker.city()} General Hospital",
            urgency=random.choice(blood_models.Urgency.values),
        )
