# dms_core/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

# -------------------------------------------------
# Core API ViewSets
# -------------------------------------------------
from .views import (
    AuditLogViewSet,
    BookingViewSet,
    DealerViewSet,
    DeliveryViewSet,
    HealthCheckView,
    InventoryUnitViewSet,
    JobCardViewSet,
    SpareViewSet,
    StockAlertViewSet,
    WarrantyClaimViewSet,
)

# -------------------------------------------------
# Workflow definitions (static metadata)
# -------------------------------------------------
from .views_workflows import (
    WorkflowDefinitionView,
    WorkflowNextStatesView,
)

app_name = "dms_core"

router = DefaultRouter()
router.register(r"dealers", DealerViewSet, basename="dealer")
router.register(r"bookings", BookingViewSet, basename="booking")
router.register(r"job-cards", JobCardViewSet, basename="job-card")
router.register(r"warranty-claims", WarrantyClaimViewSet, basename="warranty-claim")
router.register(r"spares", SpareViewSet, basename="spare")
router.register(r"stock-alerts", StockAlertViewSet, basename="stock-alert")
router.register(r"inventory", InventoryUnitViewSet, basename="inventory-unit")
router.register(r"deliveries", DeliveryViewSet, basename="delivery")
router.register(r"audit-logs", AuditLogViewSet, basename="audit-log")

urlpatterns = [
    path("health/", HealthCheckView.as_view(), name="health"),
    path(
        "workflows/<str:kind>/",
        WorkflowDefinitionView.as_view(),
        name="workflow-definition",
    ),
    path(
        "workflows/<str:kind>/next/",
        WorkflowNextStatesView.as_view(),
        name="workflow-next-states",
    ),
    path("", include(router.urls)),
]
