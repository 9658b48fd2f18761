from datetime import date
from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase

from appointment.models import Camp
from blood.models import BagStatus, EmergencyRequest, InventoryBag, RequestStatus, SafetyFlag
from donor.models import Donor


class DiscardExpiredStockTests(TestCase):
    def setUp(self):
        self.expired = InventoryBag.objects.create(
            blood_type="O+", quantity=2, expiry_date=date(2030, 1, 1), status=BagStatus.AVAILABLE, safety_flag=SafetyFlag.SAFE
        )
        self.used = InventoryBag.objects.create(
            blood_type="O+", quantity=0, expiry_date=date(2030, 1, 1), status=BagStatus.USED
        )
        self.fresh = InventoryBag.objects.create(
            blood_type="O+", quantity=1, expiry_date=date(2030, 3, 1), status=BagStatus.AVAILABLE
        )

    def _run(self, *args):
        out = StringIO()
        call_command("discard_expired_stock", "--as-of", "2030-02-01", *args, stdout=out)
        return out.getvalue()

    def test_dry_run_changes_nothing(self):
        output = self._run()

        self.assertIn("Found 1 expired bags (2 units)", output)
        self.assertIn("DRY-RUN", output)
        self.expired.refresh_from_db()
        self.assertEqual(self.expired.status, BagStatus.AVAILABLE)

    def test_apply_discards_only_expired_stock(self):
        self._run("--apply")

        self.expired.refresh_from_db()
        self.used.refresh_from_db()
        self.fresh.refresh_from_db()
        self.assertEqual(self.expired.status, BagStatus.DISCARDED)
        self.assertEqual(self.used.status, BagStatus.USED)
        self.assertEqual(self.fresh.status, BagStatus.AVAILABLE)

    def test_bad_date(self):
        with self.assertRaises(CommandError):
            call_command("discard_expired_stock", "--as-of", "yesterday", stdout=StringIO())


class SeedDemoDataTests(TestCase):
    def test_seed_creates_camps_donors_and_stock(self):
        out = StringIO()
        call_command("seed_demo_data", "--seed", "7", "--donors", "6", stdout=out)

        self.assertEqual(
            list(Camp.objects.values_list("name", flat=True)),
            ["Colombo Camp", "Kandy Drive", "Galle Donation Event"],
        )
        self.assertEqual(Donor.objects.count(), 6)
        self.assertTrue(InventoryBag.objects.filter(status=BagStatus.AVAILABLE).exists())
        self.assertEqual(InventoryBag.objects.pending_lab().count(), 5)
        self.assertEqual(EmergencyRequest.objects.get().status, RequestStatus.OPEN)
        self.assertIn("Seed complete", out.getvalue())

    def test_reseeding_keeps_one_row_per_camp(self):
        call_command("seed_demo_data", "--seed", "1", "--donors", "2", stdout=StringIO())
        call_command("seed_demo_data", "--seed", "2", "--donors", "2", "--purge", stdout=StringIO())

        self.assertEqual(Camp.objects.count(), 3)
        self.assertEqual(Donor.objects.count(), 2)
        self.assertEqual(EmergencyRequest.objects.count(), 1)
