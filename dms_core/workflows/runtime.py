# dms_core/workflows/runtime.py

"""
Workflow runtime enforcement layer.

Responsibilities:
- Check structural transition legality before anything else
- Check business preconditions for special actions
- Raise structured exceptions on hard blocks

This module MUST remain free of UI, serializers, or persistence logic.
"""

from __future__ import annotations

from typing import Any, Optional

from .guards import (
    BookingWorkflow,
    InventoryService,
    JobCardWorkflow,
    WarrantyWorkflow,
    is_positive_amount,
    has_value,
    record_value,
)
from .rules import can_transition_to, is_delete_blocked, normalize_kind, transitions_for
from .states import (
    BookingStatus,
    JobCardStatus,
    KycStatus,
    WarrantyClaimStatus,
    normalize_state,
)


class ErrorCode:
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"
    KYC_REQUIRED = "KYC_REQUIRED"
    VIN_REQUIRED = "VIN_REQUIRED"
    UNIT_NOT_AVAILABLE = "UNIT_NOT_AVAILABLE"
    TECHNICIAN_REQUIRED = "TECHNICIAN_REQUIRED"
    APPROVAL_BLOCKED = "APPROVAL_BLOCKED"
    REASON_REQUIRED = "REASON_REQUIRED"
    AMOUNT_REQUIRED = "AMOUNT_REQUIRED"
    DELETE_BLOCKED = "DELETE_BLOCKED"
    STATUS_CONFLICT = "STATUS_CONFLICT"


class WorkflowBlocked(Exception):
    """
    Raised when a workflow action is blocked by a transition or business rule.
    """

    def __init__(self, code: str, message: str, *, field: Optional[str] = None):
        self.code = code
        self.message = message
        self.field = field
        super().__init__(message)

    def as_dict(self) -> dict:
        out = {"error": self.message, "code": self.code}
        if self.field:
            out["field"] = self.field
        return out


def _require_edge(kind: str, record: Any, target: str) -> None:
    current = normalize_state(record_value(record, "status"))
    if not can_transition_to(current, target, transitions_for(kind)):
        label = normalize_kind(kind).replace("_", " ")
        raise WorkflowBlocked(
            ErrorCode.INVALID_STATUS_TRANSITION,
            f"Invalid {label} status transition: {current or '<none>'} -> {target}",
            field="status",
        )


# ===============================================================
# Entry preconditions per target state
# ===============================================================
def _booking_entry(record: Any, target: str) -> None:
    if target == BookingStatus.ALLOCATED and not BookingWorkflow.can_allocate(record):
        raise WorkflowBlocked(
            ErrorCode.KYC_REQUIRED,
            "KYC must be approved before a vehicle can be allocated.",
            field="kyc_status",
        )
    if target == BookingStatus.DELIVERED and not BookingWorkflow.can_deliver(record):
        raise WorkflowBlocked(
            ErrorCode.VIN_REQUIRED,
            "A VIN must be assigned before the booking can be delivered.",
            field="vin",
        )


def _job_card_entry(record: Any, target: str) -> None:
    if target == JobCardStatus.COMPLETED and not JobCardWorkflow.can_complete(record):
        raise WorkflowBlocked(
            ErrorCode.TECHNICIAN_REQUIRED,
            "A technician must be assigned before the job card can be completed.",
            field="technician_id",
        )


def _warranty_entry(record: Any, target: str) -> None:
    if target in {WarrantyClaimStatus.APPROVED, WarrantyClaimStatus.PARTIALLY_APPROVED}:
        if not is_positive_amount(record_value(record, "approved_amount")):
            raise WorkflowBlocked(
                ErrorCode.AMOUNT_REQUIRED,
                "Approved amount must be greater than zero.",
                field="approved_amount",
            )
    if target == WarrantyClaimStatus.REJECTED:
        if not has_value(record_value(record, "rejection_reason")):
            raise WorkflowBlocked(
                ErrorCode.REASON_REQUIRED,
                "A rejection reason is required.",
                field="rejection_reason",
            )
    if target == WarrantyClaimStatus.REIMBURSED and not WarrantyWorkflow.can_reimburse(record):
        raise WorkflowBlocked(
            ErrorCode.AMOUNT_REQUIRED,
            "Only claims with a positive approved amount can be reimbursed.",
            field="approved_amount",
        )


_ENTRY_CHECKS = {
    "booking": _booking_entry,
    "job_card": _job_card_entry,
    "warranty_claim": _warranty_entry,
}


def check_status_change(kind: str, record: Any, target) -> str:
    """
    Gate a plain status change of `record` to `target`.

    The transition table is consulted first; entry preconditions of the
    target state only run for structurally valid edges. Returns the
    normalized target.
    """
    k = normalize_kind(kind)
    tgt = normalize_state(target)
    _require_edge(k, record, tgt)
    _ENTRY_CHECKS[k](record, tgt)
    return tgt


def check_delete(kind: str, record: Any) -> None:
    status = normalize_state(record_value(record, "status"))
    if is_delete_blocked(kind, status):
        label = normalize_kind(kind).replace("_", " ")
        raise WorkflowBlocked(
            ErrorCode.DELETE_BLOCKED,
            f"A {label} in status '{status}' cannot be deleted.",
            field="status",
        )


# ===============================================================
# Booking actions
# ===============================================================
def check_allocate(booking: Any, unit: Any = None) -> None:
    """
    Confirmed -> Allocated. `unit` is the inventory unit being reserved, if any;
    it must be in stock or already reserved for this booking.
    """
    _require_edge("booking", booking, BookingStatus.ALLOCATED)

    if normalize_state(record_value(booking, "kyc_status")) != KycStatus.APPROVED:
        raise WorkflowBlocked(
            ErrorCode.KYC_REQUIRED,
            "KYC must be approved before a vehicle can be allocated.",
            field="kyc_status",
        )

    if unit is not None and not (
        InventoryService.can_allocate(unit) or InventoryService.is_held_by(unit, booking)
    ):
        vin = record_value(unit, "vin")
        raise WorkflowBlocked(
            ErrorCode.UNIT_NOT_AVAILABLE,
            f"Vehicle {vin} is not in stock and cannot be allocated.",
            field="vin",
        )


def check_deliver(booking: Any) -> None:
    _require_edge("booking", booking, BookingStatus.DELIVERED)

    if not has_value(record_value(booking, "vin")):
        raise WorkflowBlocked(
            ErrorCode.VIN_REQUIRED,
            "A VIN must be assigned before the booking can be delivered.",
            field="vin",
        )


# ===============================================================
# Job card actions
# ===============================================================
def check_assign_technician(job_card: Any, technician_id: Any) -> None:
    if not JobCardWorkflow.can_assign_technician(job_card):
        status = normalize_state(record_value(job_card, "status"))
        raise WorkflowBlocked(
            ErrorCode.INVALID_STATUS_TRANSITION,
            f"Technicians can only be assigned to open or pending-parts job cards (current: {status}).",
            field="status",
        )
    if not has_value(technician_id):
        raise WorkflowBlocked(
            ErrorCode.TECHNICIAN_REQUIRED,
            "technician_id is required.",
            field="technician_id",
        )


def check_complete(job_card: Any) -> None:
    _require_edge("job_card", job_card, JobCardStatus.COMPLETED)
    _job_card_entry(job_card, JobCardStatus.COMPLETED)


# ===============================================================
# Warranty actions
# ===============================================================
def check_approve(claim: Any, approved_amount: Any, is_partial: bool = False) -> str:
    """
    Returns the resulting status (approved or partially_approved).
    """
    if not WarrantyWorkflow.can_approve(claim):
        status = normalize_state(record_value(claim, "status"))
        raise WorkflowBlocked(
            ErrorCode.APPROVAL_BLOCKED,
            f"Only claims under review can be approved (current: {status}).",
            field="status",
        )
    if not is_positive_amount(approved_amount):
        raise WorkflowBlocked(
            ErrorCode.AMOUNT_REQUIRED,
            "Approved amount must be greater than zero.",
            field="approved_amount",
        )
    if is_partial:
        return WarrantyClaimStatus.PARTIALLY_APPROVED.value
    return WarrantyClaimStatus.APPROVED.value


def check_reject(claim: Any, rejection_reason: Any) -> None:
    if not WarrantyWorkflow.can_reject(claim):
        status = normalize_state(record_value(claim, "status"))
        raise WorkflowBlocked(
            ErrorCode.INVALID_STATUS_TRANSITION,
            f"Only claims under review can be rejected (current: {status}).",
            field="status",
        )
    if not has_value(rejection_reason):
        raise WorkflowBlocked(
            ErrorCode.REASON_REQUIRED,
            "A rejection reason is required.",
            field="rejection_reason",
        )


def check_reimburse(claim: Any) -> None:
    _require_edge("warranty_claim", claim, WarrantyClaimStatus.REIMBURSED)
    _warranty_entry(claim, WarrantyClaimStatus.REIMBURSED)


__all__ = [
    "ErrorCode",
    "WorkflowBlocked",
    "check_status_change",
    "check_delete",
    "check_allocate",
    "check_deliver",
    "check_assign_technician",
    "check_complete",
    "check_approve",
    "check_reject",
    "check_reimburse",
]
