"""
Workflow actions with business preconditions.

Each action:
  1) checks the transition table (INVALID_STATUS_TRANSITION first)
  2) checks the action's business preconditions
  3) applies status + field updates through the executor
  4) performs the action's side effects (inventory, delivery record)

Generic status changes (PATCH status, transition/) go through
change_status(), which hands targets with side effects to the matching
action. Actions raise WorkflowBlocked; views translate it into an API error.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from dms_core.models import Delivery, InventoryUnit
from dms_core.workflows import (
    BookingStatus,
    ErrorCode,
    InventoryStatus,
    JobCardStatus,
    JobCardWorkflow,
    WarrantyClaimStatus,
    WorkflowBlocked,
    allowed_next_states,
    can_transition_to,
    normalize_kind,
    normalize_state,
    transitions_for,
)
from dms_core.workflows.executor import apply_transition, execute_transition
from dms_core.workflows.runtime import (
    check_allocate,
    check_approve,
    check_assign_technician,
    check_complete,
    check_deliver,
    check_reimburse,
    check_reject,
)

logger = logging.getLogger(__name__)

# Booking states that give a reserved vehicle back to stock.
RELEASE_UNIT_STATES = frozenset({BookingStatus.CONFIRMED.value, BookingStatus.CANCELLED.value})


# ---------------------------------------------------------------------
# BOOKINGS
# ---------------------------------------------------------------------

def release_units(*, booking, now=None) -> List[int]:
    """
    Return every unit reserved for `booking` to stock. Returns the unit ids.
    """
    units = InventoryUnit.objects.select_for_update().filter(
        allocated_to=booking, status=InventoryStatus.ALLOCATED.value
    )
    unit_ids = list(units.values_list("pk", flat=True))
    if unit_ids:
        InventoryUnit.objects.filter(pk__in=unit_ids).update(
            status=InventoryStatus.IN_STOCK.value,
            allocated_to=None,
            updated_at=now or timezone.now(),
        )
        logger.info("Booking %s released units %s back to stock", booking.pk, unit_ids)
    return unit_ids


def allocate_booking(*, booking, user=None, vin: Optional[str] = None) -> Dict[str, Any]:
    """
    Confirmed -> Allocated, or back from ReadyForDelivery. A VIN that matches
    an inventory unit reserves it; a unit already held by this booking stays held.
    """
    vin = (vin or booking.vin or "").strip()
    now = timezone.now()

    with transaction.atomic():
        unit = None
        if vin:
            unit = InventoryUnit.objects.select_for_update().filter(vin=vin).first()

        check_allocate(booking, unit)

        result = apply_transition(
            instance=booking,
            kind="booking",
            target=BookingStatus.ALLOCATED,
            user=user,
            fields={"vin": vin} if vin else None,
            action="allocate",
            now=now,
        )

        if unit is not None:
            InventoryUnit.objects.filter(pk=unit.pk).update(
                status=InventoryStatus.ALLOCATED.value,
                allocated_to=booking,
                updated_at=now,
            )
            result["inventory_unit_id"] = unit.pk

    return result


def deliver_booking(*, booking, user=None, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    ReadyForDelivery -> Delivered, and record the hand-over.
    """
    details = details or {}
    now = timezone.now()

    with transaction.atomic():
        check_deliver(booking)

        result = apply_transition(
            instance=booking,
            kind="booking",
            target=BookingStatus.DELIVERED,
            user=user,
            action="deliver",
            now=now,
        )

        delivery = Delivery.objects.create(
            booking=booking,
            vin=booking.vin,
            dealer_id=booking.dealer_id,
            delivery_date=details.get("delivery_date") or now,
            battery_serial=details.get("battery_serial", ""),
            charger_serial=details.get("charger_serial", ""),
            registration_number=details.get("registration_number", ""),
        )
        result["delivery_id"] = delivery.pk

    return result


# ---------------------------------------------------------------------
# JOB CARDS
# ---------------------------------------------------------------------

def assign_technician(
    *,
    job_card,
    technician_id: Any,
    technician_name: str = "",
    user=None,
) -> Dict[str, Any]:
    """
    Open / PendingParts -> InProgress with the technician recorded.
    """
    check_assign_technician(job_card, technician_id)

    return apply_transition(
        instance=job_card,
        kind="job_card",
        target=JobCardStatus.IN_PROGRESS,
        user=user,
        fields={
            "technician_id": str(technician_id).strip(),
            "technician_name": (technician_name or "").strip(),
        },
        action="assign_technician",
    )


def complete_job_card(
    *,
    job_card,
    labor_cost: Any = 0,
    parts_cost: Any = 0,
    is_inter_state: bool = False,
    user=None,
) -> Dict[str, Any]:
    """
    InProgress -> Completed; stores costs and returns the GST breakdown.
    """
    check_complete(job_card)

    labor = int(Decimal(str(labor_cost or 0)))
    parts = int(Decimal(str(parts_cost or 0)))

    result = apply_transition(
        instance=job_card,
        kind="job_card",
        target=JobCardStatus.COMPLETED,
        user=user,
        fields={
            "labor_cost": labor,
            "parts_cost": parts,
            "is_inter_state": bool(is_inter_state),
            "completed_at": timezone.now(),
        },
        action="complete",
    )
    result["cost"] = JobCardWorkflow.calculate_total_cost(labor, parts, bool(is_inter_state))
    return result


# ---------------------------------------------------------------------
# WARRANTY CLAIMS
# ---------------------------------------------------------------------

def approve_claim(*, claim, approved_amount: Any, is_partial: bool = False, user=None) -> Dict[str, Any]:
    target = check_approve(claim, approved_amount, is_partial)

    return apply_transition(
        instance=claim,
        kind="warranty_claim",
        target=target,
        user=user,
        fields={
            "approved_amount": int(Decimal(str(approved_amount))),
            "approved_at": timezone.now(),
        },
        action="approve",
    )


def reject_claim(*, claim, rejection_reason: str, user=None) -> Dict[str, Any]:
    check_reject(claim, rejection_reason)

    return apply_transition(
        instance=claim,
        kind="warranty_claim",
        target=WarrantyClaimStatus.REJECTED,
        user=user,
        fields={
            "rejection_reason": str(rejection_reason).strip(),
            "rejected_at": timezone.now(),
        },
        action="reject",
        comment=str(rejection_reason).strip(),
    )


def reimburse_claim(*, claim, user=None) -> Dict[str, Any]:
    check_reimburse(claim)

    return apply_transition(
        instance=claim,
        kind="warranty_claim",
        target=WarrantyClaimStatus.REIMBURSED,
        user=user,
        fields={"reimbursed_at": timezone.now()},
        action="reimburse",
    )


# ---------------------------------------------------------------------
# GENERIC STATUS CHANGES
# ---------------------------------------------------------------------

# Targets that need a payload the generic endpoints do not carry.
DEDICATED_ACTIONS: Dict[tuple, str] = {
    ("warranty_claim", WarrantyClaimStatus.APPROVED.value): "approve",
    ("warranty_claim", WarrantyClaimStatus.PARTIALLY_APPROVED.value): "approve",
    ("warranty_claim", WarrantyClaimStatus.REJECTED.value): "reject",
}


def _complete_from_record(job_card, user):
    return complete_job_card(
        job_card=job_card,
        labor_cost=job_card.labor_cost or 0,
        parts_cost=job_card.parts_cost or 0,
        is_inter_state=settings.DMS_DEFAULT_INTER_STATE,
        user=user,
    )


# Targets whose side effects live in an action.
ROUTED_TARGETS: Dict[tuple, Callable[[Any, Any], Dict[str, Any]]] = {
    ("booking", BookingStatus.ALLOCATED.value): lambda b, user: allocate_booking(booking=b, user=user),
    ("booking", BookingStatus.DELIVERED.value): lambda b, user: deliver_booking(booking=b, user=user),
    ("job_card", JobCardStatus.COMPLETED.value): _complete_from_record,
    ("warranty_claim", WarrantyClaimStatus.REIMBURSED.value): lambda c, user: reimburse_claim(claim=c, user=user),
}


def generic_targets(kind: str, current: str) -> List[str]:
    """
    Next states reachable through change_status(); the rest need their action.
    """
    k = normalize_kind(kind)
    return [s for s in allowed_next_states(k, current) if (k, s) not in DEDICATED_ACTIONS]


def dedicated_targets(kind: str, current: str) -> Dict[str, str]:
    k = normalize_kind(kind)
    return {
        s: DEDICATED_ACTIONS[(k, s)]
        for s in allowed_next_states(k, current)
        if (k, s) in DEDICATED_ACTIONS
    }


def change_status(*, instance, kind: str, new_status: str, user=None, comment: str = "") -> Dict[str, Any]:
    """
    Status change requested without an action payload.

    Targets with side effects run their action; targets that need a payload
    are refused with a pointer to the action. A booking stepping back to
    confirmed, or cancelled, returns its reserved vehicle to stock.
    """
    kind = normalize_kind(kind)
    current = normalize_state(instance.status)
    target = normalize_state(new_status)

    if current != target and can_transition_to(current, target, transitions_for(kind)):
        endpoint = DEDICATED_ACTIONS.get((kind, target))
        if endpoint is not None:
            raise WorkflowBlocked(
                ErrorCode.INVALID_STATUS_TRANSITION,
                f"A {kind.replace('_', ' ')} moves to '{target}' through POST {endpoint}/.",
                field="status",
            )
        routed = ROUTED_TARGETS.get((kind, target))
        if routed is not None:
            return routed(instance, user)

    with transaction.atomic():
        result = execute_transition(
            instance=instance,
            kind=kind,
            new_status=target,
            user=user,
            comment=comment,
        )
        if kind == "booking" and result["changed"] and target in RELEASE_UNIT_STATES:
            released = release_units(booking=instance)
            if released:
                result["released_unit_ids"] = released

    return result
