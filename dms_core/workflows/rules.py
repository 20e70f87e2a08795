"""
Authoritative workflow rules for dealership entities.

Defines:
- Allowed transitions per entity lifecycle
- Terminal states and delete-blocked states
- Introspection helpers used by UI and API

Unknown states have no outgoing transitions. Lookups never raise for
an unrecognized state string; they answer "not allowed".
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, FrozenSet, List, Mapping

from .states import (
    BookingStatus,
    JobCardStatus,
    WarrantyClaimStatus,
    normalize_state,
)

TransitionTable = Mapping[str, FrozenSet[str]]


def _table(edges: Dict[str, set]) -> TransitionTable:
    return MappingProxyType(
        {str(src): frozenset(str(dst) for dst in dsts) for src, dsts in edges.items()}
    )


# ===============================================================
# BOOKING
# ===============================================================
BOOKING_TRANSITIONS: TransitionTable = _table({
    BookingStatus.DRAFT: {BookingStatus.PENDING, BookingStatus.CANCELLED},
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: {BookingStatus.ALLOCATED, BookingStatus.CANCELLED},
    BookingStatus.ALLOCATED: {BookingStatus.READY_FOR_DELIVERY, BookingStatus.CONFIRMED},
    BookingStatus.READY_FOR_DELIVERY: {BookingStatus.DELIVERED, BookingStatus.ALLOCATED},
    BookingStatus.DELIVERED: set(),  # terminal
    BookingStatus.CANCELLED: set(),  # terminal
})


# ===============================================================
# JOB CARD
# ===============================================================
JOB_CARD_TRANSITIONS: TransitionTable = _table({
    JobCardStatus.OPEN: {JobCardStatus.IN_PROGRESS, JobCardStatus.CLOSED},
    JobCardStatus.IN_PROGRESS: {
        JobCardStatus.PENDING_PARTS,
        JobCardStatus.COMPLETED,
        JobCardStatus.OPEN,
    },
    JobCardStatus.PENDING_PARTS: {JobCardStatus.IN_PROGRESS},
    JobCardStatus.COMPLETED: {JobCardStatus.INVOICED, JobCardStatus.IN_PROGRESS},
    JobCardStatus.INVOICED: {JobCardStatus.CLOSED},
    JobCardStatus.CLOSED: set(),  # terminal
})


# ===============================================================
# WARRANTY CLAIM
# ===============================================================
WARRANTY_TRANSITIONS: TransitionTable = _table({
    WarrantyClaimStatus.DRAFT: {WarrantyClaimStatus.SUBMITTED},
    WarrantyClaimStatus.SUBMITTED: {WarrantyClaimStatus.UNDER_REVIEW},
    WarrantyClaimStatus.UNDER_REVIEW: {
        WarrantyClaimStatus.APPROVED,
        WarrantyClaimStatus.PARTIALLY_APPROVED,
        WarrantyClaimStatus.REJECTED,
    },
    WarrantyClaimStatus.APPROVED: {WarrantyClaimStatus.REIMBURSED},
    WarrantyClaimStatus.PARTIALLY_APPROVED: {WarrantyClaimStatus.REIMBURSED},
    WarrantyClaimStatus.REJECTED: set(),  # terminal
    WarrantyClaimStatus.REIMBURSED: set(),  # terminal
})


# ===============================================================
# KIND REGISTRY
# ===============================================================
TRANSITIONS_BY_KIND: Mapping[str, TransitionTable] = MappingProxyType({
    "booking": BOOKING_TRANSITIONS,
    "job_card": JOB_CARD_TRANSITIONS,
    "warranty_claim": WARRANTY_TRANSITIONS,
})

# Records in these states may not be deleted.
DELETE_BLOCKED_STATES: Mapping[str, FrozenSet[str]] = MappingProxyType({
    "booking": frozenset({BookingStatus.DELIVERED.value}),
    "job_card": frozenset({JobCardStatus.INVOICED.value, JobCardStatus.CLOSED.value}),
    "warranty_claim": frozenset(),
})

KIND_ALIASES: Dict[str, str] = {
    "booking": "booking",
    "bookings": "booking",
    "job_card": "job_card",
    "job_cards": "job_card",
    "jobcard": "job_card",
    "warranty": "warranty_claim",
    "warranty_claim": "warranty_claim",
    "warranty_claims": "warranty_claim",
}


def normalize_kind(kind: str) -> str:
    """
    Map a workflow kind (as typed in URLs or payloads) to its canonical key.

    Raises ValueError for kinds that have no workflow.
    """
    k = normalize_state(kind)
    if k not in KIND_ALIASES:
        raise ValueError(f"Unknown workflow kind: {kind}")
    return KIND_ALIASES[k]


def transitions_for(kind: str) -> TransitionTable:
    return TRANSITIONS_BY_KIND[normalize_kind(kind)]


# ===============================================================
# VALIDATION
# ===============================================================
def can_transition_to(current, target, table: TransitionTable) -> bool:
    """
    True iff `target` is an edge out of `current` in `table`.

    States missing from the table are treated as terminal.
    """
    return normalize_state(target) in table.get(normalize_state(current), frozenset())


def next_states(current, table: TransitionTable) -> List[str]:
    return sorted(table.get(normalize_state(current), frozenset()))


def is_terminal(current, table: TransitionTable) -> bool:
    return not table.get(normalize_state(current))


def is_delete_blocked(kind: str, current) -> bool:
    return normalize_state(current) in DELETE_BLOCKED_STATES[normalize_kind(kind)]


# ===============================================================
# INTROSPECTION HELPERS
# ===============================================================
def workflow_definition(kind: str) -> Dict:
    k = normalize_kind(kind)
    table = TRANSITIONS_BY_KIND[k]

    return {
        "kind": k,
        "statuses": sorted(table.keys()),
        "transitions": {state: sorted(nexts) for state, nexts in table.items()},
        "terminal_states": sorted(state for state, nexts in table.items() if not nexts),
        "delete_blocked_states": sorted(DELETE_BLOCKED_STATES[k]),
    }


__all__ = [
    "BOOKING_TRANSITIONS",
    "JOB_CARD_TRANSITIONS",
    "WARRANTY_TRANSITIONS",
    "TRANSITIONS_BY_KIND",
    "DELETE_BLOCKED_STATES",
    "normalize_kind",
    "transitions_for",
    "can_transition_to",
    "next_states",
    "is_terminal",
    "is_delete_blocked",
    "workflow_definition",
]
