# dms_core/exceptions.py
from __future__ import annotations

import logging
from contextlib import contextmanager

from rest_framework import status
from rest_framework.exceptions import APIException

from dms_core.workflows import ErrorCode, WorkflowBlocked

logger = logging.getLogger(__name__)


class WorkflowRuleViolation(APIException):
    """
    HTTP face of WorkflowBlocked.

    Body: {"error": ..., "code": ..., "field": ...}
    """

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Workflow rule violated."
    default_code = "workflow_blocked"

    def __init__(self, blocked: WorkflowBlocked):
        super().__init__(detail=blocked.as_dict(), code=blocked.code)
        self.blocked = blocked


class WorkflowConflict(WorkflowRuleViolation):
    """The record's status changed between read and write."""

    status_code = status.HTTP_409_CONFLICT
    default_code = "status_conflict"


def to_api_exception(blocked: WorkflowBlocked) -> WorkflowRuleViolation:
    if blocked.code == ErrorCode.STATUS_CONFLICT:
        return WorkflowConflict(blocked)
    return WorkflowRuleViolation(blocked)


@contextmanager
def workflow_errors(kind: str, object_id=None):
    """
    Translate WorkflowBlocked raised inside the block into an API error.
    """
    try:
        yield
    except WorkflowBlocked as exc:
        logger.info(
            "Blocked %s %s: %s (%s)", kind, object_id, exc.code, exc.message
        )
        raise to_api_exception(exc) from exc
