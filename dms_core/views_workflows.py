# dms_core/views_workflows.py
from drf_spectacular.utils import extend_schema
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .workflows import allowed_next_states, normalize_kind, normalize_state, workflow_definition


class WorkflowDefinitionView(APIView):
    """
    Returns full workflow definition for a given kind.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["Workflow"])
    def get(self, request, kind: str):
        try:
            data = workflow_definition(kind)
        except ValueError as e:
            raise ValidationError(str(e))
        return Response(data)


class WorkflowNextStatesView(APIView):
    """
    Returns allowed next states given current state.

    Unknown states are reported as terminal.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["Workflow"])
    def get(self, request, kind: str):
        current = request.query_params.get("current")
        if not current:
            raise ValidationError("current query parameter is required.")

        try:
            kind = normalize_kind(kind)
            next_states = allowed_next_states(kind, current)
        except ValueError as e:
            raise ValidationError(str(e))

        return Response(
            {
                "kind": kind,
                "current": normalize_state(current),
                "allowed_next": next_states,
                "terminal": len(next_states) == 0,
            }
        )
