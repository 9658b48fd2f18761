import json
from datetime import date
from unittest.mock import patch

from django.contrib.auth.models import User
from django.test import TestCase

from blood.models import ActivityLog, BagStatus, EmergencyRequest, InventoryBag, SafetyFlag, TestStatus
from blood.tasks import broadcast_emergency_request, count_matching_donors
from donor.models import Donor, SafetyStatus


class JsonClientMixin:
	def _post(self, url, payload):
		return self.client.post(url, data=json.dumps(payload), content_type="application/json")

	def _put(self, url, payload):
		return self.client.put(url, data=json.dumps(payload), content_type="application/json")


class InventoryViewTests(JsonClientMixin, TestCase):
	def test_add_and_list(self):
		response = self._post("/api/inventory/add/", {"bloodType": "A+", "expiryDate": "2099-01-01", "quantity": 3})

		self.assertEqual(response.status_code, 201)
		self.assertEqual(response.json()["status"], "AVAILABLE")

		bags = self.client.get("/api/inventory/").json()
		self.assertEqual(len(bags), 1)
		self.assertEqual(bags[0]["quantity"], 3)
		self.assertEqual(bags[0]["expiryDate"], "2099-01-01")

	def test_add_rejects_bad_date(self):
		response = self._post("/api/inventory/add/", {"bloodType": "A+", "expiryDate": "soon"})
		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.json()["error"], "INVALID_DATE")

	def test_pending_lab_and_result_entry(self):
		bag = InventoryBag.objects.create(blood_type="B+", expiry_date=date(2099, 2, 1))

		pending = self.client.get("/api/inventory/lab/pending/").json()
		self.assertEqual([b["id"] for b in pending], [bag.pk])

		response = self._put(f"/api/inventory/{bag.pk}/test/", {"hiv": False, "hep": "true", "malaria": False})

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.json()["safetyFlag"], "BIOHAZARD")
		self.assertEqual(self.client.get("/api/inventory/lab/pending/").json(), [])

		again = self._put(f"/api/inventory/{bag.pk}/test/", {"hiv": False, "hep": False, "malaria": False})
		self.assertEqual(again.status_code, 400)
		self.assertEqual(again.json()["error"], "ALREADY_TESTED")

	def test_summary(self):
		InventoryBag.objects.create(
			blood_type="o+",
			quantity=2,
			status=BagStatus.AVAILABLE,
			test_status=TestStatus.TESTED,
			safety_flag=SafetyFlag.SAFE,
		)
		InventoryBag.objects.create(blood_type="O+", quantity=1, status=BagStatus.AVAILABLE)

		body = self.client.get("/api/inventory/summary/").json()

		self.assertEqual(body["byType"], {"O+": 3})
		self.assertIn("O+: 3 units", body["text"])


class EmergencyViewTests(JsonClientMixin, TestCase):
	def setUp(self):
		for index, safety in enumerate([SafetyStatus.NORMAL, SafetyStatus.NORMAL, SafetyStatus.POSITIVE]):
			user = User.objects.create_user(username=f"opos{index}", password="DemoPass123!")
			Donor.objects.create(user=user, blood_type="O+", safety_status=safety)

	def test_create_broadcasts_to_matching_donors(self):
		response = self._post(
			"/api/emergency/request/",
			{"bloodType": "O+", "units": 4, "hospital": "Galle Teaching Hospital", "urgency": "HIGH"},
		)

		self.assertEqual(response.status_code, 200)
		body = response.json()
		self.assertTrue(body["success"])
		self.assertEqual(body["units"], 4)
		self.assertEqual(body["donorsNotified"], 2)
		self.assertEqual(EmergencyRequest.objects.get(pk=body["requestId"]).urgency, "HIGH")

	def test_create_rejects_missing_blood_type(self):
		response = self._post("/api/emergency/request/", {"units": 2})
		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.json()["error"], "MISSING_BLOOD_TYPE")

	def test_broadcast_failure_does_not_fail_request(self):
		with patch("blood.services.allocation.broadcast_emergency_request") as task:
			task.delay.side_effect = RuntimeError("broker down")
			response = self._post("/api/emergency/request/", {"bloodType": "O+", "units": 1})

		self.assertEqual(response.status_code, 200)
		self.assertIsNone(response.json()["donorsNotified"])
		self.assertEqual(EmergencyRequest.objects.count(), 1)

	def test_fulfill_flow(self):
		request_id = self._post("/api/emergency/request/", {"bloodType": "O+", "units": 2}).json()["requestId"]
		InventoryBag.objects.create(
			blood_type="O+",
			quantity=5,
			expiry_date=date(2099, 1, 1),
			status=BagStatus.AVAILABLE,
			safety_flag=SafetyFlag.SAFE,
		)

		response = self._put(f"/api/emergency/requests/{request_id}/fulfill/", {"units": 2})

		self.assertEqual(response.status_code, 200)
		body = response.json()
		self.assertTrue(body["success"])
		self.assertEqual(body["request"]["status"], "FULFILLED")
		self.assertEqual(self.client.get("/api/emergency/requests/").json(), [])
		self.assertEqual(len(self.client.get("/api/emergency/requests/all/").json()), 1)

		again = self._put(f"/api/emergency/requests/{request_id}/fulfill/", {"units": 1})
		self.assertEqual(again.status_code, 400)
		self.assertEqual(again.json()["error"], "ALREADY_FULFILLED")

	def test_fulfill_missing_request(self):
		response = self._put("/api/emergency/requests/424242/fulfill/", {})
		self.assertEqual(response.status_code, 404)
		self.assertEqual(response.json()["error"], "REQUEST_NOT_FOUND")

	def test_fulfill_without_stock(self):
		request_id = self._post("/api/emergency/request/", {"bloodType": "AB-", "units": 2}).json()["requestId"]
		response = self._put(f"/api/emergency/requests/{request_id}/fulfill/", {"units": 2})
		self.assertEqual(response.json()["error"], "NO_USABLE_STOCK")

	def test_recent_activity(self):
		self._post("/api/emergency/request/", {"bloodType": "O+", "units": 1})
		self._post("/api/emergency/request/", {"bloodType": "A+", "units": 1})

		entries = self.client.get("/api/activity/recent/?limit=1").json()

		self.assertEqual(len(entries), 1)
		self.assertEqual(entries[0]["type"], "EMERGENCY_BROADCAST")
		self.assertIn("A+", entries[0]["description"])
		self.assertEqual(ActivityLog.objects.count(), 2)


class BroadcastTaskTests(TestCase):
	def test_counts_normal_donors_of_type(self):
		Donor.objects.create(blood_type="b-")
		Donor.objects.create(blood_type="B-", safety_status=SafetyStatus.BLOCKED)
		Donor.objects.create(blood_type="B+")

		self.assertEqual(count_matching_donors("B-"), 1)

	def test_task_returns_audience(self):
		Donor.objects.create(blood_type="A-")
		emergency = EmergencyRequest.objects.create(blood_type="A-", units_requested=1, hospital="X")

		self.assertEqual(broadcast_emergency_request.apply(args=[emergency.pk]).get(), 1)
