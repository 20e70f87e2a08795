# dms_core/mixins.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.db import models

from dms_core.workflows import normalize_state

logger = logging.getLogger(__name__)


# ===============================================================
# Status write guard (model level)
# ===============================================================

class WorkflowWriteGuardMixin(models.Model):
    """
    Status of a booking, job card or warranty claim only moves through
    dms_core.workflows.executor, which writes it with a conditional UPDATE.

    Subclasses set `workflow_kind`. save() refuses a changed status unless
    `_workflow_bypass=True` is passed or set on the instance (fixtures,
    data repair).
    """

    workflow_kind: str = ""

    class Meta:
        abstract = True

    def stored_status(self) -> Optional[str]:
        if self._state.adding:
            return None
        return (
            type(self)._default_manager.filter(pk=self.pk)
            .values_list("status", flat=True)
            .first()
        )

    def save(self, *args, _workflow_bypass: bool = False, **kwargs):
        if not (_workflow_bypass or getattr(self, "_workflow_bypass", False)):
            stored = self.stored_status()
            if stored is not None and normalize_state(stored) != normalize_state(self.status):
                label = self.workflow_kind.replace("_", " ")
                raise DjangoPermissionDenied(
                    f"{label.capitalize()} {self.pk}: status '{stored}' -> '{self.status}' "
                    f"must go through the workflow executor (POST transition/ or the "
                    f"{label} actions)."
                )
        return super().save(*args, **kwargs)


# ===============================================================
# Audit logging (ViewSet level)
# ===============================================================

class AuditLogMixin:
    """
    One AuditLog row per create, update, delete and workflow action.

    Rows carry the record's dealer, document number and status, so a
    dealer's activity reads without joining back to the records.
    """

    # e.g. "booking_number"; included in every row for this ViewSet
    audit_number_field: str = ""

    def audit_details(self, instance, **extra: Any) -> Dict[str, Any]:
        details: Dict[str, Any] = {"id": instance.pk}
        if self.audit_number_field:
            details[self.audit_number_field] = getattr(instance, self.audit_number_field, None)
        status = getattr(instance, "status", None)
        if status is not None:
            details["status"] = str(status)
        details.update(extra)
        return details

    def audit(self, verb: str, instance, **extra: Any) -> None:
        from .models import AuditLog

        user = self.request.user
        action = f"{verb.upper()} {type(instance).__name__}"
        try:
            AuditLog.objects.create(
                user=user if user.is_authenticated else None,
                dealer_id=getattr(instance, "dealer_id", None),
                action=action,
                details=self.audit_details(instance, **extra),
            )
        except Exception:
            # never fails the request
            logger.exception("AuditLog write failed for %s %s", action, instance.pk)

    def perform_create(self, serializer):
        self.audit("create", serializer.save())

    def perform_update(self, serializer):
        self.audit("update", serializer.save())

    def perform_destroy(self, instance):
        details = self.audit_details(instance)
        super().perform_destroy(instance)
        # pk is cleared by delete(); keep the one captured above
        self.audit("delete", instance, **details)
