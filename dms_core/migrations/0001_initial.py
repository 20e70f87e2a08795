from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


BOOKING_STATUS = [
    ("draft", "Draft"),
    ("pending", "Pending"),
    ("confirmed", "Confirmed"),
    ("allocated", "Allocated"),
    ("ready_for_delivery", "Ready For Delivery"),
    ("delivered", "Delivered"),
    ("cancelled", "Cancelled"),
]
KYC_STATUS = [
    ("pending", "Pending"),
    ("in_progress", "In Progress"),
    ("approved", "Approved"),
    ("rejected", "Rejected"),
]
JOB_CARD_STATUS = [
    ("open", "Open"),
    ("in_progress", "In Progress"),
    ("pending_parts", "Pending Parts"),
    ("completed", "Completed"),
    ("invoiced", "Invoiced"),
    ("closed", "Closed"),
]
WARRANTY_STATUS = [
    ("draft", "Draft"),
    ("submitted", "Submitted"),
    ("under_review", "Under Review"),
    ("approved", "Approved"),
    ("partially_approved", "Partially Approved"),
    ("rejected", "Rejected"),
    ("reimbursed", "Reimbursed"),
]
INVENTORY_STATUS = [
    ("in_transit", "In Transit"),
    ("in_stock", "In Stock"),
    ("allocated", "Allocated"),
]
DELIVERY_STATUS = [
    ("pending", "Pending"),
    ("completed", "Completed"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Dealer",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=255)),
                ("code", models.CharField(max_length=30, unique=True)),
                ("location", models.CharField(max_length=255)),
                (
                    "region",
                    models.CharField(
                        choices=[
                            ("North", "North"),
                            ("South", "South"),
                            ("East", "East"),
                            ("West", "West"),
                            ("Central", "Central"),
                        ],
                        max_length=10,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("active", "Active"), ("inactive", "Inactive"), ("suspended", "Suspended")],
                        default="active",
                        max_length=20,
                    ),
                ),
                ("contact_person", models.CharField(blank=True, max_length=255)),
                ("phone", models.CharField(blank=True, max_length=20)),
                ("email", models.EmailField(blank=True, max_length=254)),
            ],
            options={"ordering": ["code"]},
        ),
        migrations.CreateModel(
            name="Booking",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("booking_number", models.CharField(db_index=True, max_length=40, unique=True)),
                ("customer_name", models.CharField(max_length=255)),
                ("customer_phone", models.CharField(max_length=20)),
                ("customer_email", models.EmailField(blank=True, max_length=254, null=True)),
                ("vehicle_model", models.CharField(max_length=100)),
                ("variant", models.CharField(max_length=100)),
                ("color", models.CharField(max_length=50)),
                ("booking_amount", models.PositiveIntegerField(default=0)),
                ("status", models.CharField(choices=BOOKING_STATUS, db_index=True, default="pending", max_length=30)),
                ("kyc_status", models.CharField(choices=KYC_STATUS, default="pending", max_length=20)),
                ("vin", models.CharField(blank=True, default="", max_length=40)),
                ("expected_delivery", models.DateTimeField(blank=True, null=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="bookings_created",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "dealer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="bookings",
                        to="dms_core.dealer",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["dealer", "status"], name="booking_dealer_status_idx")],
            },
        ),
        migrations.CreateModel(
            name="JobCard",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("job_number", models.CharField(db_index=True, max_length=40, unique=True)),
                ("vehicle_number", models.CharField(max_length=30)),
                ("vin", models.CharField(max_length=40)),
                ("customer_name", models.CharField(max_length=255)),
                ("customer_phone", models.CharField(max_length=20)),
                (
                    "service_type",
                    models.CharField(
                        choices=[
                            ("regular_service", "Regular service"),
                            ("battery_check", "Battery check"),
                            ("electrical", "Electrical"),
                            ("body_repair", "Body repair"),
                            ("accidental", "Accidental"),
                            ("warranty_repair", "Warranty repair"),
                            ("free_service", "Free service"),
                            ("paid_service", "Paid service"),
                        ],
                        max_length=30,
                    ),
                ),
                ("complaints", models.TextField()),
                ("status", models.CharField(choices=JOB_CARD_STATUS, db_index=True, default="open", max_length=30)),
                ("technician_id", models.CharField(blank=True, default="", max_length=64)),
                ("technician_name", models.CharField(blank=True, default="", max_length=255)),
                (
                    "priority",
                    models.CharField(
                        choices=[("low", "Low"), ("normal", "Normal"), ("high", "High"), ("critical", "Critical")],
                        default="normal",
                        max_length=10,
                    ),
                ),
                ("estimated_completion", models.DateTimeField(blank=True, null=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("labor_cost", models.PositiveIntegerField(blank=True, null=True)),
                ("parts_cost", models.PositiveIntegerField(blank=True, null=True)),
                ("is_inter_state", models.BooleanField(default=False)),
                (
                    "dealer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="job_cards",
                        to="dms_core.dealer",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["dealer", "status"], name="jobcard_dealer_status_idx")],
            },
        ),
        migrations.CreateModel(
            name="WarrantyClaim",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("claim_number", models.CharField(db_index=True, max_length=40, unique=True)),
                ("vin", models.CharField(max_length=40)),
                ("vehicle_number", models.CharField(max_length=30)),
                ("customer_name", models.CharField(max_length=255)),
                (
                    "claim_type",
                    models.CharField(
                        choices=[
                            ("battery", "Battery"),
                            ("motor", "Motor"),
                            ("controller", "Controller"),
                            ("charger", "Charger"),
                            ("body", "Body"),
                            ("electrical", "Electrical"),
                            ("other", "Other"),
                        ],
                        max_length=20,
                    ),
                ),
                ("description", models.TextField()),
                ("status", models.CharField(choices=WARRANTY_STATUS, db_index=True, default="draft", max_length=30)),
                ("claim_amount", models.PositiveIntegerField(default=0)),
                ("approved_amount", models.PositiveIntegerField(blank=True, null=True)),
                ("approved_at", models.DateTimeField(blank=True, null=True)),
                ("rejected_at", models.DateTimeField(blank=True, null=True)),
                ("rejection_reason", models.TextField(blank=True, default="")),
                ("reimbursed_at", models.DateTimeField(blank=True, null=True)),
                (
                    "dealer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="warranty_claims",
                        to="dms_core.dealer",
                    ),
                ),
            ],
            options={"ordering": ["-created_at"]},
        ),
        migrations.CreateModel(
            name="Spare",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("part_number", models.CharField(db_index=True, max_length=60, unique=True)),
                ("part_name", models.CharField(max_length=255)),
                (
                    "category",
                    models.CharField(
                        choices=[
                            ("battery", "Battery"),
                            ("motor", "Motor"),
                            ("controller", "Controller"),
                            ("charger", "Charger"),
                            ("body", "Body"),
                            ("electrical", "Electrical"),
                            ("accessories", "Accessories"),
                            ("consumables", "Consumables"),
                        ],
                        max_length=20,
                    ),
                ),
                ("quantity", models.PositiveIntegerField(default=0)),
                ("min_stock", models.PositiveIntegerField(default=5)),
                ("unit_price", models.PositiveIntegerField()),
                ("bin_location", models.CharField(blank=True, max_length=60)),
                (
                    "dealer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="spares",
                        to="dms_core.dealer",
                    ),
                ),
            ],
            options={"ordering": ["part_number"]},
        ),
        migrations.CreateModel(
            name="StockAlert",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("quantity", models.PositiveIntegerField()),
                ("min_stock", models.PositiveIntegerField()),
                ("reorder_quantity", models.PositiveIntegerField()),
                ("triggered_at", models.DateTimeField(auto_now_add=True)),
                ("resolved_at", models.DateTimeField(blank=True, null=True)),
                (
                    "spare",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="stock_alerts",
                        to="dms_core.spare",
                    ),
                ),
            ],
            options={
                "ordering": ("-triggered_at",),
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(resolved_at__isnull=True),
                        fields=("spare",),
                        name="stockalert_one_open_per_spare",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="InventoryUnit",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("vin", models.CharField(db_index=True, max_length=40, unique=True)),
                ("model", models.CharField(max_length=100)),
                ("variant", models.CharField(max_length=100)),
                ("color", models.CharField(max_length=50)),
                ("status", models.CharField(choices=INVENTORY_STATUS, db_index=True, default="in_transit", max_length=20)),
                ("arrival_date", models.DateTimeField(blank=True, null=True)),
                (
                    "allocated_to",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="allocated_units",
                        to="dms_core.booking",
                    ),
                ),
                (
                    "dealer",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="inventory",
                        to="dms_core.dealer",
                    ),
                ),
            ],
            options={"ordering": ["-created_at"]},
        ),
        migrations.CreateModel(
            name="Delivery",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("vin", models.CharField(max_length=40)),
                ("battery_serial", models.CharField(blank=True, max_length=60)),
                ("charger_serial", models.CharField(blank=True, max_length=60)),
                ("registration_number", models.CharField(blank=True, max_length=30)),
                ("delivery_date", models.DateTimeField()),
                ("status", models.CharField(choices=DELIVERY_STATUS, default="completed", max_length=20)),
                (
                    "booking",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="delivery",
                        to="dms_core.booking",
                    ),
                ),
                (
                    "dealer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="deliveries",
                        to="dms_core.dealer",
                    ),
                ),
            ],
            options={"ordering": ["-delivery_date"]},
        ),
        migrations.CreateModel(
            name="WorkflowTransition",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "kind",
                    models.CharField(
                        choices=[
                            ("booking", "Booking"),
                            ("job_card", "Job card"),
                            ("warranty_claim", "Warranty claim"),
                        ],
                        max_length=32,
                    ),
                ),
                ("object_id", models.PositiveIntegerField()),
                ("from_status", models.CharField(max_length=32)),
                ("to_status", models.CharField(max_length=32)),
                ("action", models.CharField(blank=True, max_length=32)),
                ("comment", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "performed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="workflow_transitions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [models.Index(fields=["kind", "object_id"], name="workflow_kind_object_idx")],
            },
        ),
        migrations.CreateModel(
            name="AuditLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("action", models.CharField(db_index=True, max_length=255)),
                ("details", models.JSONField(blank=True, default=dict)),
                (
                    "dealer",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        to="dms_core.dealer",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["action", "created_at"], name="audit_action_time_idx")],
            },
        ),
    ]
