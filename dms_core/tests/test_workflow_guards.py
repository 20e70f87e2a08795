# dms_core/tests/test_workflow_guards.py

import itertools
from types import SimpleNamespace

import pytest

from dms_core.workflows import (
    BookingStatus,
    BookingWorkflow,
    InventoryService,
    InventoryStatus,
    JobCardStatus,
    JobCardWorkflow,
    KycStatus,
    WarrantyClaimStatus,
    WarrantyWorkflow,
)


# ---------------------------------------------------------------------
# Booking
# ---------------------------------------------------------------------
@pytest.mark.parametrize(
    "status,kyc",
    list(itertools.product(BookingStatus.values(), KycStatus.values())),
)
def test_can_allocate_only_confirmed_with_approved_kyc(status, kyc):
    booking = {"status": status, "kyc_status": kyc}
    expected = status == "confirmed" and kyc == "approved"
    assert BookingWorkflow.can_allocate(booking) is expected


@pytest.mark.parametrize("status", BookingStatus.values())
@pytest.mark.parametrize("vin", [None, "", "   ", "ZF2025E1ABCDEFGH"])
def test_can_deliver_needs_ready_status_and_vin(status, vin):
    booking = {"status": status, "vin": vin}
    expected = status == "ready_for_delivery" and vin == "ZF2025E1ABCDEFGH"
    assert BookingWorkflow.can_deliver(booking) is expected


def test_booking_guards_accept_camel_case_records():
    assert BookingWorkflow.can_allocate({"status": "confirmed", "kycStatus": "approved"})
    assert BookingWorkflow.can_deliver({"status": "ready_for_delivery", "vin": "ZF1"})


def test_booking_guards_accept_objects():
    booking = SimpleNamespace(status="confirmed", kyc_status="approved", vin="")
    assert BookingWorkflow.can_allocate(booking)
    assert not BookingWorkflow.can_deliver(booking)


def test_booking_transition_helpers():
    assert BookingWorkflow.validate_transition("pending", "confirmed")
    assert not BookingWorkflow.validate_transition("pending", "allocated")
    assert BookingWorkflow.get_next_statuses("delivered") == []


# ---------------------------------------------------------------------
# Job card
# ---------------------------------------------------------------------
@pytest.mark.parametrize("status", JobCardStatus.values())
def test_can_assign_technician_states(status):
    expected = status in {"open", "pending_parts"}
    assert JobCardWorkflow.can_assign_technician({"status": status}) is expected


@pytest.mark.parametrize("status", JobCardStatus.values())
@pytest.mark.parametrize("technician_id", [None, "", "T-17"])
def test_can_complete_needs_in_progress_and_technician(status, technician_id):
    job_card = {"status": status, "technician_id": technician_id}
    expected = status == "in_progress" and technician_id == "T-17"
    assert JobCardWorkflow.can_complete(job_card) is expected


def test_calculate_total_cost_sums_labor_and_parts():
    cost = JobCardWorkflow.calculate_total_cost(600, 400)
    assert cost["base_amount"] == 1000
    assert cost["cgst"] == 90
    assert cost["sgst"] == 90
    assert cost["grand_total"] == 1180

    cost = JobCardWorkflow.calculate_total_cost(600, None, is_inter_state=True)
    assert cost["igst"] == 108
    assert cost["grand_total"] == 708


# ---------------------------------------------------------------------
# Warranty
# ---------------------------------------------------------------------
@pytest.mark.parametrize("status", WarrantyClaimStatus.values())
def test_approve_and_reject_only_under_review(status):
    claim = {"status": status}
    expected = status == "under_review"
    assert WarrantyWorkflow.can_approve(claim) is expected
    assert WarrantyWorkflow.can_reject(claim) is expected


@pytest.mark.parametrize("status", WarrantyClaimStatus.values())
@pytest.mark.parametrize(
    "amount,positive",
    [(None, False), (0, False), (-5, False), ("abc", False), (True, False), (1, True), ("2500", True)],
)
def test_can_reimburse_needs_approval_and_positive_amount(status, amount, positive):
    claim = {"status": status, "approved_amount": amount}
    expected = status in {"approved", "partially_approved"} and positive
    assert WarrantyWorkflow.can_reimburse(claim) is expected


# ---------------------------------------------------------------------
# Inventory
# ---------------------------------------------------------------------
@pytest.mark.parametrize("status", InventoryStatus.values() + ["sold", None])
def test_inventory_unit_allocatable_only_in_stock(status):
    assert InventoryService.can_allocate({"status": status}) is (status == "in_stock")


# ---------------------------------------------------------------------
# Purity
# ---------------------------------------------------------------------
def test_guards_are_idempotent_and_do_not_mutate():
    booking = {"status": "confirmed", "kyc_status": "approved", "vin": "ZF1"}
    job_card = {"status": "in_progress", "technician_id": "T-1"}
    claim = {"status": "approved", "approved_amount": 100}
    before = (dict(booking), dict(job_card), dict(claim))

    for _ in range(2):
        assert BookingWorkflow.can_allocate(booking) is True
        assert BookingWorkflow.can_deliver(booking) is False
        assert JobCardWorkflow.can_complete(job_card) is True
        assert WarrantyWorkflow.can_reimburse(claim) is True
        assert JobCardWorkflow.calculate_total_cost(500, 500) == JobCardWorkflow.calculate_total_cost(500, 500)

    assert (booking, job_card, claim) == before


def test_guards_fail_closed_on_unknown_status():
    assert not BookingWorkflow.can_allocate({"status": "reserved", "kyc_status": "approved"})
    assert not JobCardWorkflow.can_complete({"status": "done", "technician_id": "T-1"})
    assert not WarrantyWorkflow.can_reimburse({"status": "paid", "approved_amount": 10})
    assert not BookingWorkflow.can_allocate(None)


def test_unit_held_by_booking():
    unit = {"status": "allocated", "allocatedToId": 3}
    assert InventoryService.is_held_by(unit, {"id": 3})
    assert not InventoryService.is_held_by(unit, {"id": 4})
    assert not InventoryService.is_held_by(unit, {})
    assert not InventoryService.is_held_by({"status": "in_stock", "allocated_to_id": 3}, {"id": 3})
