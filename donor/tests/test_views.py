from datetime import timedelta

from django.contrib.auth.models import User
from django.test import TestCase
from django.utils import timezone

from donor.models import Donor


class DonorViewTests(TestCase):
	def setUp(self):
		self.user = User.objects.create_user(
			username="ruwan",
			password="DemoPass123!",
			first_name="Ruwan",
			last_name="Perera",
		)
		self.donor = Donor.objects.create(user=self.user, blood_type="AB-")

	def test_eligibility_endpoint_reports_recent_donation(self):
		self.donor.last_donated_at = timezone.localdate() - timedelta(days=10)
		self.donor.save(update_fields=["last_donated_at"])

		response = self.client.get(f"/api/donors/{self.user.pk}/eligibility/")

		self.assertEqual(response.status_code, 200)
		body = response.json()
		self.assertFalse(body["eligible"])
		self.assertEqual(body["type"], "RECENT_DONATION")
		self.assertEqual(body["daysRemaining"], 50)

	def test_eligibility_endpoint_for_unknown_donor(self):
		response = self.client.get("/api/donors/424242/eligibility/")
		self.assertEqual(response.json(), {"eligible": True})

	def test_donor_by_user(self):
		response = self.client.get(f"/api/donors/user/{self.user.pk}/")

		self.assertEqual(response.status_code, 200)
		body = response.json()
		self.assertEqual(body["id"], self.donor.pk)
		self.assertEqual(body["name"], "Ruwan Perera")
		self.assertEqual(body["bloodType"], "AB-")

	def test_donor_by_user_not_found(self):
		response = self.client.get("/api/donors/user/424242/")

		self.assertEqual(response.status_code, 404)
		self.assertEqual(response.json()["error"], "DONOR_NOT_FOUND")
