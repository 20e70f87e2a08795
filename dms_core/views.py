# dms_core/views.py
from __future__ import annotations

from django.db import transaction
from django.db.models import F, QuerySet

from drf_spectacular.utils import extend_schema
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .exceptions import workflow_errors
from .filters import (
    BookingFilter,
    InventoryUnitFilter,
    JobCardFilter,
    SpareFilter,
    WarrantyClaimFilter,
)
from .mixins import AuditLogMixin
from .models import (
    AuditLog,
    Booking,
    Dealer,
    Delivery,
    InventoryUnit,
    JobCard,
    Spare,
    StockAlert,
    WarrantyClaim,
    WorkflowTransition,
)
from .serializers import (
    AllocateSerializer,
    ApproveClaimSerializer,
    AssignTechnicianSerializer,
    AuditLogSerializer,
    BookingSerializer,
    CompleteJobCardSerializer,
    DealerSerializer,
    DeliverSerializer,
    DeliverySerializer,
    InventoryUnitSerializer,
    JobCardSerializer,
    RejectClaimSerializer,
    SpareSerializer,
    StatusTransitionSerializer,
    StockAlertSerializer,
    WarrantyClaimSerializer,
    WorkflowTransitionSerializer,
)
from .services import workflow_actions
from .workflows import (
    JobCardStatus,
    check_delete,
    is_terminal,
    transitions_for,
)


# ===============================================================
# Utilities
# ===============================================================
def _apply_default_ordering(qs: QuerySet) -> QuerySet:
    return qs.order_by("-created_at", "-id")


def _deny_if_payload_has(request, fields: list[str], message: str):
    incoming = getattr(request, "data", {}) or {}
    blocked = [f for f in fields if f in incoming]
    if blocked:
        raise ValidationError({f: message for f in blocked})


# ===============================================================
# Health
# ===============================================================
class HealthCheckView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(tags=["System"])
    def get(self, request):
        return Response({"status": "ok", "service": "EV-DMS"})


# ===============================================================
# Workflow-controlled records
# ===============================================================
class WorkflowRecordMixin:
    """
    Shared workflow surface for records with a status lifecycle.

    - PATCH/PUT carrying `status` runs the same path as `transition/`
    - DELETE is refused while the record sits in a delete-blocked state
    - `transition/`, `allowed/` and `history/` detail actions
    """

    workflow_kind: str = ""

    def _workflow_response(self, instance, result):
        instance.refresh_from_db()
        if result.get("changed"):
            self.audit(
                result["action"],
                instance,
                from_status=result["from_status"],
                to_status=result["to_status"],
            )
        data = dict(result)
        data["record"] = self.get_serializer(instance).data
        return Response(data)

    def perform_update(self, serializer):
        incoming = self.request.data or {}
        if "status" not in incoming:
            return super().perform_update(serializer)

        instance = serializer.instance
        with workflow_errors(self.workflow_kind, instance.pk), transaction.atomic():
            instance = serializer.save()
            result = workflow_actions.change_status(
                instance=instance,
                kind=self.workflow_kind,
                new_status=str(incoming["status"]),
                user=self.request.user,
                comment=incoming.get("comment", ""),
            )

        instance.refresh_from_db()
        self.audit("update", instance, from_status=result["from_status"])

    def perform_destroy(self, instance):
        with workflow_errors(self.workflow_kind, instance.pk):
            check_delete(self.workflow_kind, instance)
        super().perform_destroy(instance)

    @extend_schema(request=StatusTransitionSerializer, tags=["Workflow"])
    @action(detail=True, methods=["post"])
    def transition(self, request, pk=None):
        instance = self.get_object()
        payload = StatusTransitionSerializer(data=request.data)
        payload.is_valid(raise_exception=True)

        with workflow_errors(self.workflow_kind, instance.pk):
            result = workflow_actions.change_status(
                instance=instance,
                kind=self.workflow_kind,
                new_status=payload.validated_data["to_status"],
                user=request.user,
                comment=payload.validated_data["comment"],
            )
        return self._workflow_response(instance, result)

    @extend_schema(tags=["Workflow"])
    @action(detail=True, methods=["get"])
    def allowed(self, request, pk=None):
        """
        `allowed`: targets for transition/. `actions`: targets that need
        their own endpoint, mapped to it.
        """
        instance = self.get_object()
        return Response(
            {
                "kind": self.workflow_kind,
                "object_id": instance.pk,
                "current": instance.status,
                "allowed": workflow_actions.generic_targets(self.workflow_kind, instance.status),
                "actions": workflow_actions.dedicated_targets(self.workflow_kind, instance.status),
                "terminal": is_terminal(instance.status, transitions_for(self.workflow_kind)),
            }
        )

    @extend_schema(tags=["Workflow"])
    @action(detail=True, methods=["get"])
    def history(self, request, pk=None):
        instance = self.get_object()
        qs = WorkflowTransition.objects.select_related("performed_by").filter(
            kind=self.workflow_kind, object_id=instance.pk
        )
        return Response(WorkflowTransitionSerializer(qs, many=True).data)


# ===============================================================
# Dealers
# ===============================================================
class DealerViewSet(AuditLogMixin, viewsets.ModelViewSet):
    queryset = Dealer.objects.all().order_by("code", "id")
    serializer_class = DealerSerializer
    audit_number_field = "code"
    permission_classes = [IsAuthenticated]
    filterset_fields = ["region", "status"]
    search_fields = ["name", "code", "location"]


# ===============================================================
# Bookings
# ===============================================================
class BookingViewSet(WorkflowRecordMixin, AuditLogMixin, viewsets.ModelViewSet):
    workflow_kind = "booking"
    audit_number_field = "booking_number"
    queryset = Booking.objects.select_related("dealer").all()
    serializer_class = BookingSerializer
    permission_classes = [IsAuthenticated]
    filterset_class = BookingFilter
    search_fields = ["booking_number", "customer_name", "customer_phone", "vin"]

    def get_queryset(self):
        return _apply_default_ordering(super().get_queryset())

    def perform_create(self, serializer):
        self.audit("create", serializer.save(created_by=self.request.user))

    @extend_schema(request=AllocateSerializer, tags=["Workflow"])
    @action(detail=True, methods=["post"])
    def allocate(self, request, pk=None):
        booking = self.get_object()
        payload = AllocateSerializer(data=request.data)
        payload.is_valid(raise_exception=True)

        with workflow_errors(self.workflow_kind, booking.pk):
            result = workflow_actions.allocate_booking(
                booking=booking,
                user=request.user,
                vin=payload.validated_data["vin"],
            )
        return self._workflow_response(booking, result)

    @extend_schema(request=DeliverSerializer, tags=["Workflow"])
    @action(detail=True, methods=["post"])
    def deliver(self, request, pk=None):
        booking = self.get_object()
        payload = DeliverSerializer(data=request.data)
        payload.is_valid(raise_exception=True)

        with workflow_errors(self.workflow_kind, booking.pk):
            result = workflow_actions.deliver_booking(
                booking=booking,
                user=request.user,
                details=payload.validated_data,
            )
        return self._workflow_response(booking, result)


# ===============================================================
# Job cards
# ===============================================================
class JobCardViewSet(WorkflowRecordMixin, AuditLogMixin, viewsets.ModelViewSet):
    workflow_kind = "job_card"
    audit_number_field = "job_number"
    queryset = JobCard.objects.select_related("dealer").all()
    serializer_class = JobCardSerializer
    permission_classes = [IsAuthenticated]
    filterset_class = JobCardFilter
    search_fields = ["job_number", "vehicle_number", "vin", "customer_name"]

    def get_queryset(self):
        return _apply_default_ordering(super().get_queryset())

    @extend_schema(tags=["Workflow"])
    @action(detail=False, methods=["get"])
    def active(self, request):
        qs = self.filter_queryset(self.get_queryset()).filter(
            status__in=[JobCardStatus.OPEN.value, JobCardStatus.IN_PROGRESS.value]
        )
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(self.get_serializer(page, many=True).data)
        return Response(self.get_serializer(qs, many=True).data)

    @extend_schema(request=AssignTechnicianSerializer, tags=["Workflow"])
    @action(detail=True, methods=["post"], url_path="assign-technician")
    def assign_technician(self, request, pk=None):
        job_card = self.get_object()
        payload = AssignTechnicianSerializer(data=request.data)
        payload.is_valid(raise_exception=True)

        with workflow_errors(self.workflow_kind, job_card.pk):
            result = workflow_actions.assign_technician(
                job_card=job_card,
                technician_id=payload.validated_data["technician_id"],
                technician_name=payload.validated_data["technician_name"],
                user=request.user,
            )
        return self._workflow_response(job_card, result)

    @extend_schema(request=CompleteJobCardSerializer, tags=["Workflow"])
    @action(detail=True, methods=["post"])
    def complete(self, request, pk=None):
        job_card = self.get_object()
        payload = CompleteJobCardSerializer(data=request.data)
        payload.is_valid(raise_exception=True)

        with workflow_errors(self.workflow_kind, job_card.pk):
            result = workflow_actions.complete_job_card(
                job_card=job_card,
                user=request.user,
                **payload.validated_data,
            )
        return self._workflow_response(job_card, result)


# ===============================================================
# Warranty claims
# ===============================================================
class WarrantyClaimViewSet(WorkflowRecordMixin, AuditLogMixin, viewsets.ModelViewSet):
    workflow_kind = "warranty_claim"
    audit_number_field = "claim_number"
    queryset = WarrantyClaim.objects.select_related("dealer").all()
    serializer_class = WarrantyClaimSerializer
    permission_classes = [IsAuthenticated]
    filterset_class = WarrantyClaimFilter
    search_fields = ["claim_number", "vin", "vehicle_number", "customer_name"]

    def get_queryset(self):
        return _apply_default_ordering(super().get_queryset())

    @extend_schema(request=ApproveClaimSerializer, tags=["Workflow"])
    @action(detail=True, methods=["post"])
    def approve(self, request, pk=None):
        claim = self.get_object()
        payload = ApproveClaimSerializer(data=request.data)
        payload.is_valid(raise_exception=True)

        with workflow_errors(self.workflow_kind, claim.pk):
            result = workflow_actions.approve_claim(
                claim=claim,
                approved_amount=payload.validated_data["approved_amount"],
                is_partial=payload.validated_data["is_partial"],
                user=request.user,
            )
        return self._workflow_response(claim, result)

    @extend_schema(request=RejectClaimSerializer, tags=["Workflow"])
    @action(detail=True, methods=["post"])
    def reject(self, request, pk=None):
        claim = self.get_object()
        payload = RejectClaimSerializer(data=request.data)
        payload.is_valid(raise_exception=True)

        with workflow_errors(self.workflow_kind, claim.pk):
            result = workflow_actions.reject_claim(
                claim=claim,
                rejection_reason=payload.validated_data["rejection_reason"],
                user=request.user,
            )
        return self._workflow_response(claim, result)

    @extend_schema(request=None, tags=["Workflow"])
    @action(detail=True, methods=["post"])
    def reimburse(self, request, pk=None):
        claim = self.get_object()
        with workflow_errors(self.workflow_kind, claim.pk):
            result = workflow_actions.reimburse_claim(claim=claim, user=request.user)
        return self._workflow_response(claim, result)


# ===============================================================
# Spares
# ===============================================================
class SpareViewSet(AuditLogMixin, viewsets.ModelViewSet):
    queryset = Spare.objects.select_related("dealer").all()
    serializer_class = SpareSerializer
    audit_number_field = "part_number"
    permission_classes = [IsAuthenticated]
    filterset_class = SpareFilter
    search_fields = ["part_number", "part_name", "bin_location"]

    def get_queryset(self):
        return super().get_queryset().order_by("part_number", "id")

    @extend_schema(tags=["Inventory"])
    @action(detail=False, methods=["get"], url_path="low-stock")
    def low_stock(self, request):
        qs = self.filter_queryset(self.get_queryset()).filter(quantity__lte=F("min_stock"))
        return Response(self.get_serializer(qs, many=True).data)


# ===============================================================
# Stock alerts (READ-ONLY, written by the low-stock scan)
# ===============================================================
class StockAlertViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = StockAlert.objects.select_related("spare").all()
    serializer_class = StockAlertSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = {
        "spare": ["exact"],
        "spare__dealer": ["exact"],
        "resolved_at": ["isnull"],
    }


# ===============================================================
# Vehicle inventory
# ===============================================================
class InventoryUnitViewSet(AuditLogMixin, viewsets.ModelViewSet):
    queryset = InventoryUnit.objects.select_related("dealer", "allocated_to").all()
    serializer_class = InventoryUnitSerializer
    audit_number_field = "vin"
    permission_classes = [IsAuthenticated]
    filterset_class = InventoryUnitFilter
    search_fields = ["vin", "model", "variant"]

    def get_queryset(self):
        return _apply_default_ordering(super().get_queryset())

    def perform_update(self, serializer):
        _deny_if_payload_has(
            self.request, ["vin"], "VIN cannot be changed once created."
        )
        super().perform_update(serializer)


# ===============================================================
# Deliveries (READ-ONLY)
# ===============================================================
class DeliveryViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = Delivery.objects.select_related("booking", "dealer").all()
    serializer_class = DeliverySerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["dealer", "status"]


# ===============================================================
# Audit logs (READ-ONLY)
# ===============================================================
class AuditLogViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = AuditLog.objects.select_related("user", "dealer").all()
    serializer_class = AuditLogSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["action", "dealer"]

    def get_queryset(self):
        return _apply_default_ordering(super().get_queryset())
