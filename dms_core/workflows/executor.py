# dms_core/workflows/executor.py
"""
Authoritative workflow execution.

All status writes MUST go through apply_transition(). The write is a
conditional UPDATE on the status that was read, so two requests racing on
the same record cannot both succeed: the loser gets STATUS_CONFLICT.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from django.db import transaction
from django.forms.models import model_to_dict
from django.utils import timezone

from dms_core.models import WorkflowTransition
from dms_core.workflows import ErrorCode, WorkflowBlocked, normalize_kind, normalize_state
from dms_core.workflows.runtime import check_status_change

logger = logging.getLogger(__name__)


def snapshot(instance, fields: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Plain-dict view of a record, with pending field updates overlaid.
    """
    data = model_to_dict(instance)
    data["status"] = getattr(instance, "status", None)
    data.update(fields or {})
    return data


def apply_transition(
    *,
    instance,
    kind: str,
    target: str,
    user=None,
    fields: Optional[Dict[str, Any]] = None,
    action: str = "",
    comment: str = "",
    now=None,
) -> Dict[str, Any]:
    """
    Atomically:
      1) Update status (+ fields) only if status is still what we read
      2) Write WorkflowTransition row

    The caller is responsible for having checked the transition.
    """
    now = now or timezone.now()
    kind = normalize_kind(kind)
    current = normalize_state(instance.status)
    target = normalize_state(target)
    model = instance.__class__

    with transaction.atomic():
        updated = model.objects.filter(pk=instance.pk, status=current).update(
            status=target, updated_at=now, **(fields or {})
        )
        if not updated:
            logger.warning(
                "Status conflict on %s %s: expected %s when moving to %s",
                kind, instance.pk, current, target,
            )
            raise WorkflowBlocked(
                ErrorCode.STATUS_CONFLICT,
                f"{kind.replace('_', ' ').capitalize()} {instance.pk} is no longer in "
                f"status '{current}'. Reload and try again.",
                field="status",
            )

        t = WorkflowTransition.objects.create(
            kind=kind,
            object_id=instance.pk,
            from_status=current,
            to_status=target,
            action=action,
            performed_by=user if user is not None and user.is_authenticated else None,
            comment=comment or "",
        )

    instance.refresh_from_db()

    logger.info("%s %s: %s -> %s (%s)", kind, instance.pk, current, target, action or "transition")

    return {
        "changed": True,
        "action": action or "transition",
        "kind": kind,
        "object_id": instance.pk,
        "from_status": current,
        "to_status": target,
        "transition_id": t.id,
    }


def execute_transition(
    *,
    instance,
    kind: str,
    new_status: str,
    user=None,
    fields: Optional[Dict[str, Any]] = None,
    comment: str = "",
) -> Dict[str, Any]:
    """
    Plain status change: transition table first, then the target state's
    entry preconditions, then the conditional write.

    Requesting the current status is a no-op.
    """
    kind = normalize_kind(kind)
    current = normalize_state(instance.status)
    target = normalize_state(new_status)

    if current == target:
        return {
            "changed": False,
            "action": "transition",
            "kind": kind,
            "object_id": instance.pk,
            "from_status": current,
            "to_status": target,
            "transition_id": None,
        }

    check_status_change(kind, snapshot(instance, fields), target)

    return apply_transition(
        instance=instance,
        kind=kind,
        target=target,
        user=user,
        fields=fields,
        action="transition",
        comment=comment,
    )
