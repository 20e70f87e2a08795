from __future__ import annotations

from typing import Any, Dict

from django.conf import settings
from rest_framework import serializers

from .business.codes import (
    generate_booking_number,
    generate_claim_number,
    generate_job_number,
)
from .business.phone import is_valid_indian_mobile, normalize_phone
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
from .workflows import (
    BookingWorkflow,
    JobCardWorkflow,
    WarrantyWorkflow,
    allowed_next_states,
)


PHONE_ERROR = "Invalid Indian mobile number. Must be 10 digits starting with 6-9."


# ===============================================================
# Helpers
# ===============================================================

def validate_indian_mobile(value: str) -> str:
    if not is_valid_indian_mobile(value):
        raise serializers.ValidationError(PHONE_ERROR)
    return normalize_phone(value)


class ImmutableFieldsMixin:
    """
    Blocks updates to selected fields if they appear in incoming validated data.
    """
    immutable_fields: tuple[str, ...] = ()

    def validate(self, attrs: Dict[str, Any]) -> Dict[str, Any]:
        if self.instance is not None and self.immutable_fields:
            for field in self.immutable_fields:
                if field in attrs:
                    raise serializers.ValidationError(
                        {field: "This field is immutable."}
                    )
        return super().validate(attrs)


class WorkflowStateMixin(serializers.Serializer):
    """
    Adds read-only `allowed_next` computed from the record's current status.
    """
    workflow_kind: str = ""

    allowed_next = serializers.SerializerMethodField()

    def get_allowed_next(self, obj):
        return allowed_next_states(self.workflow_kind, obj.status)


# ===============================================================
# Dealers
# ===============================================================

class DealerSerializer(serializers.ModelSerializer):
    class Meta:
        model = Dealer
        fields = (
            "id",
            "name",
            "code",
            "location",
            "region",
            "status",
            "contact_person",
            "phone",
            "email",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("id", "created_at", "updated_at")

    def validate_phone(self, value):
        if not value:
            return value
        return validate_indian_mobile(value)


# ===============================================================
# Bookings
# ===============================================================

class BookingSerializer(ImmutableFieldsMixin, WorkflowStateMixin, serializers.ModelSerializer):
    workflow_kind = "booking"
    immutable_fields = ("dealer",)

    can_allocate = serializers.SerializerMethodField()
    can_deliver = serializers.SerializerMethodField()

    class Meta:
        model = Booking
        fields = (
            "id",
            "booking_number",
            "customer_name",
            "customer_phone",
            "customer_email",
            "vehicle_model",
            "variant",
            "color",
            "booking_amount",
            "status",
            "kyc_status",
            "vin",
            "expected_delivery",
            "dealer",
            "created_by",
            "allowed_next",
            "can_allocate",
            "can_deliver",
            "created_at",
            "updated_at",
        )
        read_only_fields = (
            "id",
            "booking_number",
            "status",
            "created_by",
            "created_at",
            "updated_at",
        )

    def validate_customer_name(self, value):
        if len(value.strip()) < 2:
            raise serializers.ValidationError("Name must be at least 2 characters")
        return value.strip()

    def validate_customer_phone(self, value):
        return validate_indian_mobile(value)

    def get_can_allocate(self, obj) -> bool:
        return BookingWorkflow.can_allocate(obj)

    def get_can_deliver(self, obj) -> bool:
        return BookingWorkflow.can_deliver(obj)

    def create(self, validated_data):
        validated_data.setdefault("booking_number", generate_booking_number())
        return super().create(validated_data)


# ===============================================================
# Job cards
# ===============================================================

class JobCardSerializer(ImmutableFieldsMixin, WorkflowStateMixin, serializers.ModelSerializer):
    workflow_kind = "job_card"
    immutable_fields = ("dealer",)

    can_assign_technician = serializers.SerializerMethodField()
    can_complete = serializers.SerializerMethodField()
    cost_breakdown = serializers.SerializerMethodField()

    class Meta:
        model = JobCard
        fields = (
            "id",
            "job_number",
            "vehicle_number",
            "vin",
            "customer_name",
            "customer_phone",
            "service_type",
            "complaints",
            "status",
            "technician_id",
            "technician_name",
            "priority",
            "estimated_completion",
            "completed_at",
            "labor_cost",
            "parts_cost",
            "is_inter_state",
            "dealer",
            "allowed_next",
            "can_assign_technician",
            "can_complete",
            "cost_breakdown",
            "created_at",
            "updated_at",
        )
        read_only_fields = (
            "id",
            "job_number",
            "status",
            "technician_id",
            "technician_name",
            "completed_at",
            "created_at",
            "updated_at",
        )

    def validate_customer_phone(self, value):
        return validate_indian_mobile(value)

    def validate_complaints(self, value):
        if len(value.strip()) < 5:
            raise serializers.ValidationError("Complaints must be at least 5 characters")
        return value

    def get_can_assign_technician(self, obj) -> bool:
        return JobCardWorkflow.can_assign_technician(obj)

    def get_can_complete(self, obj) -> bool:
        return JobCardWorkflow.can_complete(obj)

    def get_cost_breakdown(self, obj):
        if obj.labor_cost is None and obj.parts_cost is None:
            return None
        return JobCardWorkflow.calculate_total_cost(obj.labor_cost, obj.parts_cost, obj.is_inter_state)

    def create(self, validated_data):
        validated_data.setdefault("job_number", generate_job_number())
        return super().create(validated_data)


# ===============================================================
# Warranty claims
# ===============================================================

class WarrantyClaimSerializer(ImmutableFieldsMixin, WorkflowStateMixin, serializers.ModelSerializer):
    workflow_kind = "warranty_claim"
    immutable_fields = ("dealer",)

    can_approve = serializers.SerializerMethodField()
    can_reimburse = serializers.SerializerMethodField()

    class Meta:
        model = WarrantyClaim
        fields = (
            "id",
            "claim_number",
            "vin",
            "vehicle_number",
            "customer_name",
            "claim_type",
            "description",
            "status",
            "claim_amount",
            "approved_amount",
            "approved_at",
            "rejected_at",
            "rejection_reason",
            "reimbursed_at",
            "dealer",
            "allowed_next",
            "can_approve",
            "can_reimburse",
            "created_at",
            "updated_at",
        )
        read_only_fields = (
            "id",
            "claim_number",
            "status",
            "approved_amount",
            "approved_at",
            "rejected_at",
            "rejection_reason",
            "reimbursed_at",
            "created_at",
            "updated_at",
        )

    def validate_description(self, value):
        if len(value.strip()) < 10:
            raise serializers.ValidationError("Description must be at least 10 characters")
        return value

    def get_can_approve(self, obj) -> bool:
        return WarrantyWorkflow.can_approve(obj)

    def get_can_reimburse(self, obj) -> bool:
        return WarrantyWorkflow.can_reimburse(obj)

    def create(self, validated_data):
        validated_data.setdefault("claim_number", generate_claim_number())
        return super().create(validated_data)


# ===============================================================
# Spares / inventory
# ===============================================================

class SpareSerializer(serializers.ModelSerializer):
    is_low_stock = serializers.BooleanField(read_only=True)
    reorder_quantity = serializers.SerializerMethodField()

    class Meta:
        model = Spare
        fields = (
            "id",
            "part_number",
            "part_name",
            "category",
            "quantity",
            "min_stock",
            "unit_price",
            "bin_location",
            "dealer",
            "is_low_stock",
            "reorder_quantity",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("id", "created_at", "updated_at")

    def get_reorder_quantity(self, obj) -> int:
        return obj.reorder_quantity(settings.DMS_REORDER_MULTIPLIER)


class StockAlertSerializer(serializers.ModelSerializer):
    part_number = serializers.CharField(source="spare.part_number", read_only=True)

    class Meta:
        model = StockAlert
        fields = (
            "id",
            "spare",
            "part_number",
            "quantity",
            "min_stock",
            "reorder_quantity",
            "triggered_at",
            "resolved_at",
        )
        read_only_fields = fields


class InventoryUnitSerializer(serializers.ModelSerializer):
    can_allocate = serializers.BooleanField(read_only=True)

    class Meta:
        model = InventoryUnit
        fields = (
            "id",
            "vin",
            "model",
            "variant",
            "color",
            "status",
            "arrival_date",
            "dealer",
            "allocated_to",
            "can_allocate",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("id", "allocated_to", "created_at", "updated_at")


class DeliverySerializer(serializers.ModelSerializer):
    booking_number = serializers.CharField(source="booking.booking_number", read_only=True)

    class Meta:
        model = Delivery
        fields = (
            "id",
            "booking",
            "booking_number",
            "vin",
            "battery_serial",
            "charger_serial",
            "registration_number",
            "delivery_date",
            "status",
            "dealer",
            "created_at",
        )
        read_only_fields = fields


# ===============================================================
# Audit
# ===============================================================

class WorkflowTransitionSerializer(serializers.ModelSerializer):
    performed_by = serializers.CharField(source="performed_by.username", read_only=True, default=None)

    class Meta:
        model = WorkflowTransition
        fields = (
            "id",
            "kind",
            "object_id",
            "from_status",
            "to_status",
            "action",
            "performed_by",
            "comment",
            "created_at",
        )
        read_only_fields = fields


class AuditLogSerializer(serializers.ModelSerializer):
    user = serializers.CharField(source="user.username", read_only=True, default=None)

    class Meta:
        model = AuditLog
        fields = ("id", "user", "dealer", "action", "details", "created_at")
        read_only_fields = fields


# ===============================================================
# Workflow action payloads
# ===============================================================

class StatusTransitionSerializer(serializers.Serializer):
    to_status = serializers.CharField()
    comment = serializers.CharField(required=False, allow_blank=True, default="")

    def to_internal_value(self, data):
        # Accept {"status": ...} as an alias of {"to_status": ...}
        if hasattr(data, "get") and "to_status" not in data and "status" in data:
            data = {**data, "to_status": data.get("status")}
        return super().to_internal_value(data)


class AllocateSerializer(serializers.Serializer):
    vin = serializers.CharField(required=False, allow_blank=True, default="")


class DeliverSerializer(serializers.Serializer):
    delivery_date = serializers.DateTimeField(required=False)
    battery_serial = serializers.CharField(required=False, allow_blank=True, default="")
    charger_serial = serializers.CharField(required=False, allow_blank=True, default="")
    registration_number = serializers.CharField(required=False, allow_blank=True, default="")


class AssignTechnicianSerializer(serializers.Serializer):
    # Blank ids are rejected by the workflow with TECHNICIAN_REQUIRED.
    technician_id = serializers.CharField(required=False, allow_blank=True, default="")
    technician_name = serializers.CharField(required=False, allow_blank=True, default="")


class CompleteJobCardSerializer(serializers.Serializer):
    labor_cost = serializers.IntegerField(min_value=0, required=False, default=0)
    parts_cost = serializers.IntegerField(min_value=0, required=False, default=0)
    is_inter_state = serializers.BooleanField(required=False, default=None, allow_null=True)

    def validate(self, attrs):
        if attrs.get("is_inter_state") is None:
            attrs["is_inter_state"] = settings.DMS_DEFAULT_INTER_STATE
        return attrs


class ApproveClaimSerializer(serializers.Serializer):
    # Non-positive amounts are rejected by the workflow with AMOUNT_REQUIRED.
    approved_amount = serializers.IntegerField(required=False, allow_null=True, default=None)
    is_partial = serializers.BooleanField(required=False, default=False)


class RejectClaimSerializer(serializers.Serializer):
    rejection_reason = serializers.CharField(required=False, allow_blank=True, default="")


__all__ = [
    "DealerSerializer",
    "BookingSerializer",
    "JobCardSerializer",
    "WarrantyClaimSerializer",
    "SpareSerializer",
    "StockAlertSerializer",
    "InventoryUnitSerializer",
    "DeliverySerializer",
    "WorkflowTransitionSerializer",
    "AuditLogSerializer",
    "StatusTransitionSerializer",
    "AllocateSerializer",
    "DeliverSerializer",
    "AssignTechnicianSerializer",
    "CompleteJobCardSerializer",
    "ApproveClaimSerializer",
    "RejectClaimSerializer",
]
