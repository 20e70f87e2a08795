# dms_core/workflows/states.py
"""
Closed status vocabularies for every workflow-controlled entity.

Values are the lower snake_case strings stored in the database and
exchanged over the API.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional, Tuple, Type, TypeVar

S = TypeVar("S", bound="StatusEnum")


def normalize_state(value) -> str:
    """
    Canonicalize a status string: strip, lowercase, spaces/hyphens to underscores.

    "Ready For Delivery" -> "ready_for_delivery"
    """
    if isinstance(value, Enum):
        value = value.value
    raw = str(value or "").strip().lower()
    return "_".join(raw.replace("-", " ").split())


class StatusEnum(str, Enum):
    @classmethod
    def choices(cls) -> List[Tuple[str, str]]:
        return [(m.value, m.value.replace("_", " ").title()) for m in cls]

    @classmethod
    def values(cls) -> List[str]:
        return [m.value for m in cls]

    @classmethod
    def coerce(cls: Type[S], value) -> Optional[S]:
        """Return the matching member, or None for anything unrecognized."""
        try:
            return cls(normalize_state(value))
        except ValueError:
            return None

    def __str__(self) -> str:
        return self.value


class BookingStatus(StatusEnum):
    DRAFT = "draft"
    PENDING = "pending"
    CONFIRMED = "confirmed"
    ALLOCATED = "allocated"
    READY_FOR_DELIVERY = "ready_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class KycStatus(StatusEnum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    APPROVED = "approved"
    REJECTED = "rejected"


class JobCardStatus(StatusEnum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    PENDING_PARTS = "pending_parts"
    COMPLETED = "completed"
    INVOICED = "invoiced"
    CLOSED = "closed"


class WarrantyClaimStatus(StatusEnum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    PARTIALLY_APPROVED = "partially_approved"
    REJECTED = "rejected"
    REIMBURSED = "reimbursed"


class InventoryStatus(StatusEnum):
    IN_TRANSIT = "in_transit"
    IN_STOCK = "in_stock"
    ALLOCATED = "allocated"


class DeliveryStatus(StatusEnum):
    PENDING = "pending"
    COMPLETED = "completed"


__all__ = [
    "normalize_state",
    "StatusEnum",
    "BookingStatus",
    "KycStatus",
    "JobCardStatus",
    "WarrantyClaimStatus",
    "InventoryStatus",
    "DeliveryStatus",
]
