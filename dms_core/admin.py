# dms_core/admin.py

from django.contrib import admin
from django.utils.html import format_html

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


class ReadOnlyAdmin(admin.ModelAdmin):
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# =============================================================
# Workflow transitions (READ-ONLY AUDIT LOG)
# =============================================================

@admin.register(WorkflowTransition)
class WorkflowTransitionAdmin(ReadOnlyAdmin):
    list_display = (
        "kind",
        "object_id",
        "from_status",
        "to_status",
        "action",
        "performed_by",
        "created_at",
    )
    list_filter = ("kind", "action", "to_status")
    search_fields = ("object_id", "performed_by__username")
    ordering = ("-created_at",)

    readonly_fields = [f.name for f in WorkflowTransition._meta.fields]


@admin.register(AuditLog)
class AuditLogAdmin(ReadOnlyAdmin):
    list_display = ("created_at", "user", "dealer", "action")
    list_filter = ("action",)
    search_fields = ("action", "user__username")
    ordering = ("-created_at",)

    readonly_fields = [f.name for f in AuditLog._meta.fields]


# =============================================================
# Stock alerts (READ-ONLY)
# =============================================================

@admin.register(StockAlert)
class StockAlertAdmin(ReadOnlyAdmin):
    list_display = (
        "spare",
        "quantity",
        "min_stock",
        "reorder_quantity",
        "state_badge",
        "triggered_at",
        "resolved_at",
    )
    search_fields = ("spare__part_number", "spare__part_name")
    ordering = ("-triggered_at",)

    readonly_fields = [f.name for f in StockAlert._meta.fields]

    def state_badge(self, obj):
        if obj.resolved_at:
            return format_html('<span style="color:#2e7d32;font-weight:bold;">RESOLVED</span>')
        if obj.quantity == 0:
            return format_html('<span style="color:#c62828;font-weight:bold;">OUT OF STOCK</span>')
        return format_html('<span style="color:#ed6c02;font-weight:bold;">LOW</span>')

    state_badge.short_description = "State"


# =============================================================
# Dealers
# =============================================================

@admin.register(Dealer)
class DealerAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "region", "status")
    search_fields = ("code", "name", "location")
    list_filter = ("region", "status")


# =============================================================
# Workflow records
# =============================================================
# Status is read-only here: the admin form saves through the model write
# guard, so status changes go through the API actions.

@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ("booking_number", "customer_name", "vehicle_model", "status", "kyc_status", "dealer")
    list_filter = ("status", "kyc_status", "dealer")
    search_fields = ("booking_number", "customer_name", "customer_phone", "vin")
    readonly_fields = ("booking_number", "status", "created_at", "updated_at")


@admin.register(JobCard)
class JobCardAdmin(admin.ModelAdmin):
    list_display = ("job_number", "vehicle_number", "service_type", "status", "technician_name", "dealer")
    list_filter = ("status", "service_type", "priority", "dealer")
    search_fields = ("job_number", "vehicle_number", "vin", "customer_name")
    readonly_fields = ("job_number", "status", "completed_at", "created_at", "updated_at")


@admin.register(WarrantyClaim)
class WarrantyClaimAdmin(admin.ModelAdmin):
    list_display = ("claim_number", "claim_type", "status", "claim_amount", "approved_amount", "dealer")
    list_filter = ("status", "claim_type", "dealer")
    search_fields = ("claim_number", "vin", "vehicle_number")
    readonly_fields = (
        "claim_number",
        "status",
        "approved_at",
        "rejected_at",
        "reimbursed_at",
        "created_at",
        "updated_at",
    )


# =============================================================
# Inventory
# =============================================================

@admin.register(Spare)
class SpareAdmin(admin.ModelAdmin):
    list_display = ("part_number", "part_name", "category", "quantity", "min_stock", "low_stock", "dealer")
    list_filter = ("category", "dealer")
    search_fields = ("part_number", "part_name")

    @admin.display(boolean=True, description="Low stock")
    def low_stock(self, obj):
        return obj.is_low_stock


@admin.register(InventoryUnit)
class InventoryUnitAdmin(admin.ModelAdmin):
    list_display = ("vin", "model", "variant", "color", "status", "dealer", "allocated_to")
    list_filter = ("status", "model", "dealer")
    search_fields = ("vin",)


@admin.register(Delivery)
class DeliveryAdmin(admin.ModelAdmin):
    list_display = ("booking", "vin", "registration_number", "delivery_date", "dealer")
    search_fields = ("vin", "registration_number", "booking__booking_number")
    ordering = ("-delivery_date",)
