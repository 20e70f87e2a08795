# dms_core/workflows/__init__.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from .guards import (
    BookingWorkflow,
    InventoryService,
    JobCardWorkflow,
    WarrantyWorkflow,
    record_value,
)
from .rules import (
    BOOKING_TRANSITIONS,
    DELETE_BLOCKED_STATES,
    JOB_CARD_TRANSITIONS,
    TRANSITIONS_BY_KIND,
    WARRANTY_TRANSITIONS,
    can_transition_to,
    is_delete_blocked,
    is_terminal,
    next_states,
    normalize_kind,
    transitions_for,
    workflow_definition as _workflow_definition,
)
from .runtime import ErrorCode, WorkflowBlocked, check_delete, check_status_change
from .states import (
    BookingStatus,
    DeliveryStatus,
    InventoryStatus,
    JobCardStatus,
    KycStatus,
    WarrantyClaimStatus,
    normalize_state,
)


# ===============================================================
# Public workflow API
# ===============================================================

WORKFLOW_KINDS = tuple(TRANSITIONS_BY_KIND.keys())


def validate_transition(
    kind: str,
    current: Optional[str] = None,
    target: Optional[str] = None,
    old: Optional[str] = None,
    new: Optional[str] = None,
) -> None:
    """
    Raises ValueError if the transition is not an edge of the workflow.

    Supports both parameter styles:
      validate_transition(kind, current, target)
      validate_transition(kind=..., old=..., new=...)
    """
    k = normalize_kind(kind)

    cur = normalize_state(current if current is not None else old)
    tgt = normalize_state(target if target is not None else new)

    if not can_transition_to(cur, tgt, TRANSITIONS_BY_KIND[k]):
        raise ValueError(f"Invalid {k.replace('_', ' ')} status transition: {cur} -> {tgt}")


def allowed_next_states(kind: str, current: str) -> List[str]:
    """
    Next states reachable from `current`; empty for terminal or unknown states.
    """
    return next_states(current, transitions_for(kind))


def allowed_transitions(kind: str, current: Optional[str] = None) -> Any:
    """
    1) allowed_transitions("booking") -> Dict[str, List[str]]  (full map)
    2) allowed_transitions("booking", "confirmed") -> List[str]
    """
    table = transitions_for(kind)
    if current is None:
        return {state: sorted(nxt) for state, nxt in table.items()}
    return next_states(current, table)


def workflow_definition(kind: Optional[str] = None) -> Dict[str, Any]:
    """
    Stable JSON-serializable definition for UI.
    """
    if kind is None:
        return {k: _workflow_definition(k) for k in WORKFLOW_KINDS}
    return _workflow_definition(kind)


__all__ = [
    "BOOKING_TRANSITIONS",
    "JOB_CARD_TRANSITIONS",
    "WARRANTY_TRANSITIONS",
    "TRANSITIONS_BY_KIND",
    "DELETE_BLOCKED_STATES",
    "WORKFLOW_KINDS",
    "BookingStatus",
    "DeliveryStatus",
    "InventoryStatus",
    "JobCardStatus",
    "KycStatus",
    "WarrantyClaimStatus",
    "BookingWorkflow",
    "JobCardWorkflow",
    "WarrantyWorkflow",
    "InventoryService",
    "ErrorCode",
    "WorkflowBlocked",
    "check_status_change",
    "check_delete",
    "normalize_state",
    "normalize_kind",
    "record_value",
    "transitions_for",
    "can_transition_to",
    "is_terminal",
    "is_delete_blocked",
    "validate_transition",
    "allowed_next_states",
    "allowed_transitions",
    "workflow_definition",
]
