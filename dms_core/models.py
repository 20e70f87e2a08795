from django.conf import settings
from django.db import models
from django.db.models import Q

from dms_core.business import stock
from dms_core.mixins import WorkflowWriteGuardMixin
from dms_core.workflows import (
    BookingStatus,
    DeliveryStatus,
    InventoryService,
    InventoryStatus,
    JobCardStatus,
    KycStatus,
    WarrantyClaimStatus,
)


# ---------------------------------------------------------------------
# Base: adds created_at / updated_at to every model
# ---------------------------------------------------------------------
class TimeStampedModel(models.Model):
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


# ---------------------------------------------------------------------
# Dealer
# ---------------------------------------------------------------------
class Dealer(TimeStampedModel):
    """A dealership outlet in the network."""

    class Region(models.TextChoices):
        NORTH = "North", "North"
        SOUTH = "South", "South"
        EAST = "East", "East"
        WEST = "West", "West"
        CENTRAL = "Central", "Central"

    class DealerStatus(models.TextChoices):
        ACTIVE = "active", "Active"
        INACTIVE = "inactive", "Inactive"
        SUSPENDED = "suspended", "Suspended"

    name = models.CharField(max_length=255)
    code = models.CharField(max_length=30, unique=True)
    location = models.CharField(max_length=255)
    region = models.CharField(max_length=10, choices=Region.choices)
    status = models.CharField(max_length=20, choices=DealerStatus.choices, default=DealerStatus.ACTIVE)
    contact_person = models.CharField(max_length=255, blank=True)
    phone = models.CharField(max_length=20, blank=True)
    email = models.EmailField(blank=True)

    def __str__(self):
        return f"{self.code} - {self.name}"

    class Meta:
        ordering = ["code"]


# ---------------------------------------------------------------------
# Booking
# ---------------------------------------------------------------------
class Booking(WorkflowWriteGuardMixin, TimeStampedModel):
    """A customer's vehicle booking, from reservation to delivery."""

    workflow_kind = "booking"

    booking_number = models.CharField(max_length=40, unique=True, db_index=True)
    customer_name = models.CharField(max_length=255)
    customer_phone = models.CharField(max_length=20)
    customer_email = models.EmailField(blank=True, null=True)
    vehicle_model = models.CharField(max_length=100)
    variant = models.CharField(max_length=100)
    color = models.CharField(max_length=50)
    booking_amount = models.PositiveIntegerField(default=0)
    status = models.CharField(
        max_length=30, choices=BookingStatus.choices(), default=BookingStatus.PENDING.value, db_index=True
    )
    kyc_status = models.CharField(
        max_length=20, choices=KycStatus.choices(), default=KycStatus.PENDING.value
    )
    vin = models.CharField(max_length=40, blank=True, default="")
    expected_delivery = models.DateTimeField(null=True, blank=True)
    dealer = models.ForeignKey(Dealer, on_delete=models.PROTECT, related_name="bookings")
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="bookings_created"
    )

    def __str__(self):
        return f"{self.booking_number} ({self.customer_name})"

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["dealer", "status"], name="booking_dealer_status_idx"),
        ]


# ---------------------------------------------------------------------
# Job card
# ---------------------------------------------------------------------
class JobCard(WorkflowWriteGuardMixin, TimeStampedModel):
    """A service work order for a customer vehicle."""

    workflow_kind = "job_card"

    class ServiceType(models.TextChoices):
        REGULAR_SERVICE = "regular_service", "Regular service"
        BATTERY_CHECK = "battery_check", "Battery check"
        ELECTRICAL = "electrical", "Electrical"
        BODY_REPAIR = "body_repair", "Body repair"
        ACCIDENTAL = "accidental", "Accidental"
        WARRANTY_REPAIR = "warranty_repair", "Warranty repair"
        FREE_SERVICE = "free_service", "Free service"
        PAID_SERVICE = "paid_service", "Paid service"

    class Priority(models.TextChoices):
        LOW = "low", "Low"
        NORMAL = "normal", "Normal"
        HIGH = "high", "High"
        CRITICAL = "critical", "Critical"

    job_number = models.CharField(max_length=40, unique=True, db_index=True)
    vehicle_number = models.CharField(max_length=30)
    vin = models.CharField(max_length=40)
    customer_name = models.CharField(max_length=255)
    customer_phone = models.CharField(max_length=20)
    service_type = models.CharField(max_length=30, choices=ServiceType.choices)
    complaints = models.TextField()
    status = models.CharField(
        max_length=30, choices=JobCardStatus.choices(), default=JobCardStatus.OPEN.value, db_index=True
    )
    technician_id = models.CharField(max_length=64, blank=True, default="")
    technician_name = models.CharField(max_length=255, blank=True, default="")
    priority = models.CharField(max_length=10, choices=Priority.choices, default=Priority.NORMAL)
    estimated_completion = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    labor_cost = models.PositiveIntegerField(null=True, blank=True)
    parts_cost = models.PositiveIntegerField(null=True, blank=True)
    is_inter_state = models.BooleanField(default=False)
    dealer = models.ForeignKey(Dealer, on_delete=models.PROTECT, related_name="job_cards")

    def __str__(self):
        return f"{self.job_number} ({self.vehicle_number})"

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["dealer", "status"], name="jobcard_dealer_status_idx"),
        ]


# ---------------------------------------------------------------------
# Warranty claim
# ---------------------------------------------------------------------
class WarrantyClaim(WorkflowWriteGuardMixin, TimeStampedModel):
    """A warranty reimbursement claim raised by a dealer."""

    workflow_kind = "warranty_claim"

    class ClaimType(models.TextChoices):
        BATTERY = "battery", "Battery"
        MOTOR = "motor", "Motor"
        CONTROLLER = "controller", "Controller"
        CHARGER = "charger", "Charger"
        BODY = "body", "Body"
        ELECTRICAL = "electrical", "Electrical"
        OTHER = "other", "Other"

    claim_number = models.CharField(max_length=40, unique=True, db_index=True)
    vin = models.CharField(max_length=40)
    vehicle_number = models.CharField(max_length=30)
    customer_name = models.CharField(max_length=255)
    claim_type = models.CharField(max_length=20, choices=ClaimType.choices)
    description = models.TextField()
    status = models.CharField(
        max_length=30,
        choices=WarrantyClaimStatus.choices(),
        default=WarrantyClaimStatus.DRAFT.value,
        db_index=True,
    )
    claim_amount = models.PositiveIntegerField(default=0)
    approved_amount = models.PositiveIntegerField(null=True, blank=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    rejected_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.TextField(blank=True, default="")
    reimbursed_at = models.DateTimeField(null=True, blank=True)
    dealer = models.ForeignKey(Dealer, on_delete=models.PROTECT, related_name="warranty_claims")

    def __str__(self):
        return f"{self.claim_number} ({self.claim_type})"

    class Meta:
        ordering = ["-created_at"]


# ---------------------------------------------------------------------
# Spares
# ---------------------------------------------------------------------
class Spare(TimeStampedModel):
    """A spare-part inventory line at a dealer."""

    class Category(models.TextChoices):
        BATTERY = "battery", "Battery"
        MOTOR = "motor", "Motor"
        CONTROLLER = "controller", "Controller"
        CHARGER = "charger", "Charger"
        BODY = "body", "Body"
        ELECTRICAL = "electrical", "Electrical"
        ACCESSORIES = "accessories", "Accessories"
        CONSUMABLES = "consumables", "Consumables"

    part_number = models.CharField(max_length=60, unique=True, db_index=True)
    part_name = models.CharField(max_length=255)
    category = models.CharField(max_length=20, choices=Category.choices)
    quantity = models.PositiveIntegerField(default=0)
    min_stock = models.PositiveIntegerField(default=5)
    unit_price = models.PositiveIntegerField()
    bin_location = models.CharField(max_length=60, blank=True)
    dealer = models.ForeignKey(Dealer, on_delete=models.PROTECT, related_name="spares")

    @property
    def is_low_stock(self) -> bool:
        return stock.is_low_stock(self)

    def reorder_quantity(self, multiplier: int | None = None) -> int:
        if multiplier is None:
            multiplier = settings.DMS_REORDER_MULTIPLIER
        return stock.reorder_quantity(self, multiplier)

    def __str__(self):
        return f"{self.part_number} ({self.quantity})"

    class Meta:
        ordering = ["part_number"]


class StockAlert(models.Model):
    """Open while a spare sits at or below its minimum stock."""

    spare = models.ForeignKey(Spare, on_delete=models.CASCADE, related_name="stock_alerts")
    quantity = models.PositiveIntegerField()
    min_stock = models.PositiveIntegerField()
    reorder_quantity = models.PositiveIntegerField()
    triggered_at = models.DateTimeField(auto_now_add=True)
    resolved_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ("-triggered_at",)
        constraints = [
            models.UniqueConstraint(
                fields=["spare"],
                condition=Q(resolved_at__isnull=True),
                name="stockalert_one_open_per_spare",
            ),
        ]

    def __str__(self):
        return f"{self.spare.part_number} LOW STOCK ({self.quantity}/{self.min_stock})"


# ---------------------------------------------------------------------
# Vehicle inventory
# ---------------------------------------------------------------------
class InventoryUnit(TimeStampedModel):
    """A physical vehicle identified by VIN."""

    vin = models.CharField(max_length=40, unique=True, db_index=True)
    model = models.CharField(max_length=100)
    variant = models.CharField(max_length=100)
    color = models.CharField(max_length=50)
    status = models.CharField(
        max_length=20, choices=InventoryStatus.choices(), default=InventoryStatus.IN_TRANSIT.value, db_index=True
    )
    arrival_date = models.DateTimeField(null=True, blank=True)
    dealer = models.ForeignKey(Dealer, on_delete=models.PROTECT, null=True, blank=True, related_name="inventory")
    allocated_to = models.ForeignKey(
        Booking, on_delete=models.SET_NULL, null=True, blank=True, related_name="allocated_units"
    )

    @property
    def can_allocate(self) -> bool:
        return InventoryService.can_allocate(self)

    def __str__(self):
        return f"{self.vin} ({self.status})"

    class Meta:
        ordering = ["-created_at"]


# ---------------------------------------------------------------------
# Delivery
# ---------------------------------------------------------------------
class Delivery(TimeStampedModel):
    """Hand-over record created when a booking is delivered."""

    booking = models.OneToOneField(Booking, on_delete=models.PROTECT, related_name="delivery")
    vin = models.CharField(max_length=40)
    battery_serial = models.CharField(max_length=60, blank=True)
    charger_serial = models.CharField(max_length=60, blank=True)
    registration_number = models.CharField(max_length=30, blank=True)
    delivery_date = models.DateTimeField()
    status = models.CharField(
        max_length=20, choices=DeliveryStatus.choices(), default=DeliveryStatus.COMPLETED.value
    )
    dealer = models.ForeignKey(Dealer, on_delete=models.PROTECT, related_name="deliveries")

    def __str__(self):
        return f"Delivery {self.booking.booking_number} ({self.vin})"

    class Meta:
        ordering = ["-delivery_date"]


# ---------------------------------------------------------------------
# Workflow audit
# ---------------------------------------------------------------------
class WorkflowTransition(models.Model):
    """
    Immutable audit log for workflow transitions.
    """

    KIND_CHOICES = (
        ("booking", "Booking"),
        ("job_card", "Job card"),
        ("warranty_claim", "Warranty claim"),
    )

    kind = models.CharField(max_length=32, choices=KIND_CHOICES)
    object_id = models.PositiveIntegerField()
    from_status = models.CharField(max_length=32)
    to_status = models.CharField(max_length=32)
    action = models.CharField(max_length=32, blank=True)
    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="workflow_transitions",
    )
    comment = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["kind", "object_id"], name="workflow_kind_object_idx"),
        ]

    def __str__(self):
        return f"{self.kind.upper()} {self.object_id}: {self.from_status} → {self.to_status}"


class AuditLog(TimeStampedModel):
    """Track API actions for compliance and traceability."""
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, db_index=True)
    dealer = models.ForeignKey(Dealer, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=255, db_index=True)
    details = models.JSONField(default=dict, blank=True)

    def __str__(self):
        who = self.user.username if self.user else "system"
        return f"{self.created_at} - {who} - {self.action}"

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["action", "created_at"], name="audit_action_time_idx"),
        ]
