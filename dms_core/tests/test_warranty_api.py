# dms_core/tests/test_warranty_api.py

from django.test import TestCase
from django.contrib.auth.models import User
from rest_framework import status
from rest_framework.test import APIClient

from dms_core.models import Dealer, WarrantyClaim, WorkflowTransition


class WarrantyClaimWorkflowTests(TestCase):
    """
    Warranty claims move draft -> submitted -> under_review and are then
    approved (fully or partially) or rejected. Approved claims are reimbursed.
    """

    def setUp(self):
        self.client = APIClient()

        self.dealer = Dealer.objects.create(
            name="Zforce Motors Nashik",
            code="DLR-NSK",
            location="Nashik",
            region=Dealer.Region.WEST,
        )

        self.user = User.objects.create_user(username="warranty", password="pass")
        self.client.force_authenticate(user=self.user)

        resp = self.client.post(
            "/dms/warranty-claims/",
            {
                "vin": "ZF2025E1ABCDEFGH",
                "vehicle_number": "MH15CD4321",
                "customer_name": "Kavita Patil",
                "claim_type": "motor",
                "description": "Motor overheats on gradients above 8 percent",
                "claim_amount": 18000,
                "dealer": self.dealer.id,
            },
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, resp.content)
        self.claim_id = resp.json()["id"]
        self.url = f"/dms/warranty-claims/{self.claim_id}/"

    def _to_review(self):
        for target in ("submitted", "under_review"):
            resp = self.client.post(f"{self.url}transition/", {"to_status": target}, format="json")
            self.assertEqual(resp.status_code, status.HTTP_200_OK, resp.content)

    def _claim(self) -> WarrantyClaim:
        return WarrantyClaim.objects.get(pk=self.claim_id)

    def test_created_as_draft_with_number(self):
        claim = self._claim()
        self.assertEqual(claim.status, "draft")
        self.assertTrue(claim.claim_number.startswith("WC-"))

    def test_approve_blocked_before_review(self):
        resp = self.client.post(f"{self.url}approve/", {"approved_amount": 1000}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.json()["code"], "APPROVAL_BLOCKED")

    def test_approve_needs_positive_amount(self):
        self._to_review()
        for amount in (0, -100, None):
            resp = self.client.post(f"{self.url}approve/", {"approved_amount": amount}, format="json")
            self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
            self.assertEqual(resp.json()["code"], "AMOUNT_REQUIRED")
        self.assertEqual(self._claim().status, "under_review")

    def test_partial_approval_then_reimburse(self):
        self._to_review()

        resp = self.client.post(
            f"{self.url}approve/",
            {"approved_amount": 9000, "is_partial": True},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK, resp.content)

        claim = self._claim()
        self.assertEqual(claim.status, "partially_approved")
        self.assertEqual(claim.approved_amount, 9000)
        self.assertIsNotNone(claim.approved_at)

        resp = self.client.post(f"{self.url}reimburse/", format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK, resp.content)
        claim = self._claim()
        self.assertEqual(claim.status, "reimbursed")
        self.assertIsNotNone(claim.reimbursed_at)

        # terminal
        resp = self.client.get(f"{self.url}allowed/")
        self.assertEqual(resp.json()["allowed"], [])

    def test_reject_requires_reason(self):
        self._to_review()

        resp = self.client.post(f"{self.url}reject/", {"rejection_reason": "  "}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.json()["code"], "REASON_REQUIRED")

        resp = self.client.post(
            f"{self.url}reject/",
            {"rejection_reason": "Damage caused by water ingress"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK, resp.content)

        claim = self._claim()
        self.assertEqual(claim.status, "rejected")
        self.assertEqual(claim.rejection_reason, "Damage caused by water ingress")
        self.assertIsNotNone(claim.rejected_at)

        t = WorkflowTransition.objects.get(kind="warranty_claim", object_id=claim.id, action="reject")
        self.assertEqual(t.comment, "Damage caused by water ingress")

    def test_reject_from_wrong_state(self):
        resp = self.client.post(f"{self.url}reject/", {"rejection_reason": "Not covered"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.json()["code"], "INVALID_STATUS_TRANSITION")

    def test_reimburse_before_approval_is_rejected(self):
        self._to_review()
        resp = self.client.post(f"{self.url}reimburse/", format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.json()["code"], "INVALID_STATUS_TRANSITION")

    def test_generic_change_to_approved_points_to_approve_action(self):
        self._to_review()
        for target in ("approved", "partially_approved"):
            resp = self.client.patch(self.url, {"status": target}, format="json")
            self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
            self.assertEqual(resp.json()["code"], "INVALID_STATUS_TRANSITION")
            self.assertIn("approve/", resp.json()["error"])

        resp = self.client.post(f"{self.url}transition/", {"to_status": "rejected"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("reject/", resp.json()["error"])
        self.assertEqual(self._claim().status, "under_review")

    def test_allowed_separates_action_only_targets(self):
        self._to_review()
        resp = self.client.get(f"{self.url}allowed/")
        self.assertEqual(resp.json()["allowed"], [])
        self.assertEqual(
            resp.json()["actions"],
            {"approved": "approve", "partially_approved": "approve", "rejected": "reject"},
        )

    def test_generic_change_to_reimbursed_stamps_reimbursement(self):
        self._to_review()
        resp = self.client.post(f"{self.url}approve/", {"approved_amount": 18000}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK, resp.content)

        resp = self.client.post(f"{self.url}transition/", {"to_status": "reimbursed"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK, resp.content)
        self.assertEqual(resp.json()["action"], "reimburse")
        self.assertIsNotNone(self._claim().reimbursed_at)

    def test_approval_fields_are_server_controlled(self):
        resp = self.client.patch(self.url, {"approved_amount": 500}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertIsNone(self._claim().approved_amount)
