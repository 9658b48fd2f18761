from datetime import date, time

from django.contrib.auth.models import User
from django.test import TestCase, override_settings

from appointment.models import Appointment, AppointmentStatus
from donor.models import Donor, SafetyStatus
from donor.services import eligibility


class EligibilityTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(username="kamal", password="DemoPass123!", first_name="Kamal")
        self.donor = Donor.objects.create(user=self.user, blood_type="O+")

    def _history(self, *entries):
        # bulk_create skips the completion signal, as with imported history
        Appointment.objects.bulk_create(
            [
                Appointment(
                    donor=self.donor,
                    donor_user=self.user,
                    donor_name="Kamal",
                    center_id=1,
                    center_name="Hospital #1",
                    date=day,
                    time=time(10, 0),
                    status=status,
                )
                for day, status in entries
            ]
        )

    def test_booking_inside_recovery_window_is_refused(self):
        self.donor.last_donated_at = date(2026, 1, 1)

        result = eligibility.eligibility_for_date(self.donor, date(2026, 2, 15))

        self.assertFalse(result.eligible)
        self.assertEqual(result.reason_code, eligibility.RECENT_DONATION)
        self.assertEqual(result.next_eligible_date, date(2026, 3, 2))
        self.assertEqual(result.days_remaining, 15)
        self.assertIn("60-day gap", result.reason)

    def test_booking_on_next_eligible_date_is_allowed(self):
        self.donor.last_donated_at = date(2026, 1, 1)
        self.assertTrue(eligibility.is_eligible_for_date(self.donor, date(2026, 3, 2)))
        self.assertFalse(eligibility.is_eligible_for_date(self.donor, date(2026, 3, 1)))

    def test_diagnostic_reports_days_remaining(self):
        self.donor.last_donated_at = date(2026, 1, 1)

        result = eligibility.evaluate_eligibility(self.donor, today=date(2026, 2, 15))

        self.assertFalse(result.eligible)
        self.assertEqual(result.reason_code, eligibility.RECENT_DONATION)
        self.assertEqual(result.days_remaining, 15)
        self.assertIn("less than 60 days ago", result.reason)

    def test_safety_block_comes_first(self):
        self.donor.safety_status = SafetyStatus.POSITIVE
        self.donor.last_donated_at = date(2026, 1, 1)

        result = eligibility.eligibility_for_date(self.donor, date(2026, 2, 15))

        self.assertEqual(result.reason_code, eligibility.SAFETY)
        self.assertIn("POSITIVE", result.reason)
        self.assertEqual(
            eligibility.evaluate_eligibility(self.donor, today=date(2026, 9, 1)).reason_code,
            eligibility.SAFETY,
        )

    def test_missing_donor_is_eligible(self):
        self.assertTrue(eligibility.evaluate_eligibility(None).eligible)
        self.assertTrue(eligibility.is_eligible_for_date(None, date(2026, 5, 1)))

    def test_future_booking_blocks_diagnostic_but_not_distant_booking(self):
        self._history((date(2027, 3, 15), AppointmentStatus.SCHEDULED))

        shown = eligibility.evaluate_eligibility(self.donor, today=date(2027, 1, 1))
        self.assertFalse(shown.eligible)
        self.assertEqual(shown.reason_code, eligibility.EXISTING_BOOKING)
        self.assertEqual(shown.appointment_date, date(2027, 3, 15))

        # 73 days before the existing appointment
        self.assertTrue(eligibility.is_eligible_for_date(self.donor, date(2027, 1, 1)))

    def test_booking_check_looks_both_ways(self):
        self._history((date(2027, 3, 15), AppointmentStatus.SCHEDULED))

        before = eligibility.eligibility_for_date(self.donor, date(2027, 2, 14))
        after = eligibility.eligibility_for_date(self.donor, date(2027, 4, 30))

        self.assertEqual(before.reason_code, eligibility.EXISTING_BOOKING)
        self.assertEqual(after.reason_code, eligibility.EXISTING_BOOKING)
        self.assertTrue(eligibility.is_eligible_for_date(self.donor, date(2027, 5, 14)))

    def test_cancelled_appointments_are_ignored(self):
        self._history((date(2027, 3, 15), AppointmentStatus.CANCELLED))

        self.assertTrue(eligibility.evaluate_eligibility(self.donor, today=date(2027, 3, 1)).eligible)
        self.assertTrue(eligibility.is_eligible_for_date(self.donor, date(2027, 3, 20)))

    def test_completed_history_counts_without_last_donation_date(self):
        self._history((date(2027, 3, 1), AppointmentStatus.COMPLETED))

        result = eligibility.evaluate_eligibility(self.donor, today=date(2027, 3, 20))

        self.assertFalse(result.eligible)
        self.assertEqual(result.reason_code, eligibility.RECENT_DONATION)
        self.assertEqual(result.next_eligible_date, date(2027, 4, 30))

    def test_history_includes_appointments_linked_by_user_only(self):
        placeholder = Donor.objects.create(blood_type="O+")
        Appointment.objects.bulk_create(
            [
                Appointment(
                    donor=placeholder,
                    donor_user=self.user,
                    center_id=4,
                    date=date(2027, 6, 1),
                    time=time(9, 0),
                )
            ]
        )

        history = eligibility.donation_history(self.donor)

        self.assertEqual(len(history), 1)
        self.assertFalse(eligibility.is_eligible_for_date(self.donor, date(2027, 6, 20)))

    @override_settings(DONATION_RECOVERY_DAYS=90)
    def test_recovery_days_come_from_settings(self):
        self.donor.last_donated_at = date(2026, 1, 1)
        self.assertFalse(eligibility.is_eligible_for_date(self.donor, date(2026, 3, 2)))
        self.assertTrue(eligibility.is_eligible_for_date(self.donor, date(2026, 4, 1)))


class DescribeEligibilityTests(TestCase):
    def test_resolves_by_user_id(self):
        user = User.objects.create_user(username="nimali", password="DemoPass123!")
        Donor.objects.create(user=user, blood_type="A+", safety_status=SafetyStatus.BLOCKED)

        result = eligibility.describe_eligibility(user.pk)

        self.assertEqual(result.as_dict()["type"], eligibility.SAFETY)

    def test_falls_back_to_donor_id(self):
        donor = Donor.objects.create(blood_type="B+", safety_status=SafetyStatus.POSITIVE)
        self.assertEqual(eligibility.resolve_donor(donor.pk), donor)

    def test_unknown_identifier_is_eligible(self):
        self.assertEqual(eligibility.describe_eligibility(987654).as_dict(), {"eligible": True})

    def test_payload_uses_camel_case(self):
        donor = Donor.objects.create(blood_type="B+", last_donated_at=date(2026, 1, 1))

        payload = eligibility.evaluate_eligibility(donor, today=date(2026, 1, 11)).as_dict()

        self.assertEqual(payload["eligible"], False)
        self.assertEqual(payload["type"], eligibility.RECENT_DONATION)
        self.assertEqual(payload["daysRemaining"], 50)
        self.assertEqual(payload["nextEligibleDate"], "2026-03-02")
