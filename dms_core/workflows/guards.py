# dms_core/workflows/guards.py
"""
Per-entity workflow guards.

Every guard takes a snapshot of a record and answers a yes/no question.
A record may be a mapping (API payload, test dict) or any object with the
named attributes (a model instance). Guards never raise and never mutate.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, List

from .rules import (
    BOOKING_TRANSITIONS,
    JOB_CARD_TRANSITIONS,
    WARRANTY_TRANSITIONS,
    can_transition_to,
    next_states,
)
from .states import (
    BookingStatus,
    InventoryStatus,
    JobCardStatus,
    KycStatus,
    WarrantyClaimStatus,
    normalize_state,
)
from dms_core.business.tax import calculate_gst


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def record_value(record: Any, name: str, default: Any = None) -> Any:
    """
    Read `name` from a record; mappings may use snake_case or camelCase keys.
    """
    if record is None:
        return default
    if isinstance(record, dict) or hasattr(record, "keys"):
        if name in record:
            return record[name]
        return record.get(_camel(name), default)
    return getattr(record, name, default)


def _status(record: Any) -> str:
    return normalize_state(record_value(record, "status"))


def has_value(value: Any) -> bool:
    return bool(str(value).strip()) if value is not None else False


def is_positive_amount(value: Any) -> bool:
    if value is None or isinstance(value, bool):
        return False
    try:
        return Decimal(str(value)) > 0
    except (InvalidOperation, ValueError):
        return False


# ===============================================================
# Booking
# ===============================================================
class BookingWorkflow:
    transitions = BOOKING_TRANSITIONS

    @classmethod
    def validate_transition(cls, current, target) -> bool:
        return can_transition_to(current, target, cls.transitions)

    @classmethod
    def get_next_statuses(cls, current) -> List[str]:
        return next_states(current, cls.transitions)

    @staticmethod
    def can_allocate(booking) -> bool:
        return (
            _status(booking) == BookingStatus.CONFIRMED
            and normalize_state(record_value(booking, "kyc_status")) == KycStatus.APPROVED
        )

    @staticmethod
    def can_deliver(booking) -> bool:
        return (
            _status(booking) == BookingStatus.READY_FOR_DELIVERY
            and has_value(record_value(booking, "vin"))
        )


# ===============================================================
# Job card
# ===============================================================
class JobCardWorkflow:
    transitions = JOB_CARD_TRANSITIONS

    @classmethod
    def validate_transition(cls, current, target) -> bool:
        return can_transition_to(current, target, cls.transitions)

    @classmethod
    def get_next_statuses(cls, current) -> List[str]:
        return next_states(current, cls.transitions)

    @staticmethod
    def can_assign_technician(job_card) -> bool:
        return _status(job_card) in {JobCardStatus.OPEN, JobCardStatus.PENDING_PARTS}

    @staticmethod
    def can_complete(job_card) -> bool:
        return (
            _status(job_card) == JobCardStatus.IN_PROGRESS
            and has_value(record_value(job_card, "technician_id"))
        )

    @staticmethod
    def calculate_total_cost(labor_cost, parts_cost, is_inter_state: bool = False) -> dict:
        return calculate_gst(
            Decimal(str(labor_cost or 0)) + Decimal(str(parts_cost or 0)),
            is_inter_state,
        )


# ===============================================================
# Warranty claim
# ===============================================================
class WarrantyWorkflow:
    transitions = WARRANTY_TRANSITIONS

    @classmethod
    def validate_transition(cls, current, target) -> bool:
        return can_transition_to(current, target, cls.transitions)

    @classmethod
    def get_next_statuses(cls, current) -> List[str]:
        return next_states(current, cls.transitions)

    @staticmethod
    def can_approve(claim) -> bool:
        return _status(claim) == WarrantyClaimStatus.UNDER_REVIEW

    @staticmethod
    def can_reject(claim) -> bool:
        return _status(claim) == WarrantyClaimStatus.UNDER_REVIEW

    @staticmethod
    def can_reimburse(claim) -> bool:
        return (
            _status(claim) in {WarrantyClaimStatus.APPROVED, WarrantyClaimStatus.PARTIALLY_APPROVED}
            and is_positive_amount(record_value(claim, "approved_amount"))
        )


# ===============================================================
# Vehicle inventory
# ===============================================================
class InventoryService:
    @staticmethod
    def can_allocate(unit) -> bool:
        return _status(unit) == InventoryStatus.IN_STOCK

    @staticmethod
    def is_held_by(unit, booking) -> bool:
        """True when `unit` is already reserved for `booking`."""
        booking_id = record_value(booking, "id")
        return (
            booking_id is not None
            and _status(unit) == InventoryStatus.ALLOCATED
            and record_value(unit, "allocated_to_id") == booking_id
        )


__all__ = [
    "record_value",
    "has_value",
    "is_positive_amount",
    "BookingWorkflow",
    "JobCardWorkflow",
    "WarrantyWorkflow",
    "InventoryService",
]
