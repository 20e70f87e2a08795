# dms_core/filters.py
import django_filters as df
from django.db.models import F

from .models import Booking, InventoryUnit, JobCard, Spare, WarrantyClaim


class BookingFilter(df.FilterSet):
    customer_name = df.CharFilter(field_name="customer_name", lookup_expr="icontains")
    vehicle_model = df.CharFilter(field_name="vehicle_model", lookup_expr="icontains")
    expected_delivery = df.DateFromToRangeFilter()

    class Meta:
        model = Booking
        fields = ["status", "kyc_status", "dealer", "customer_name", "vehicle_model", "expected_delivery"]


class JobCardFilter(df.FilterSet):
    vehicle_number = df.CharFilter(field_name="vehicle_number", lookup_expr="icontains")
    created_at = df.DateFromToRangeFilter()

    class Meta:
        model = JobCard
        fields = ["status", "service_type", "priority", "dealer", "technician_id", "vehicle_number", "created_at"]


class WarrantyClaimFilter(df.FilterSet):
    vin = df.CharFilter(field_name="vin", lookup_expr="iexact")
    created_at = df.DateFromToRangeFilter()

    class Meta:
        model = WarrantyClaim
        fields = ["status", "claim_type", "dealer", "vin", "created_at"]


class SpareFilter(df.FilterSet):
    part_name = df.CharFilter(field_name="part_name", lookup_expr="icontains")
    low_stock = df.BooleanFilter(method="filter_low_stock")

    class Meta:
        model = Spare
        fields = ["category", "dealer", "part_name", "low_stock"]

    def filter_low_stock(self, queryset, name, value):
        if value is None:
            return queryset
        if value:
            return queryset.filter(quantity__lte=F("min_stock"))
        return queryset.filter(quantity__gt=F("min_stock"))


class InventoryUnitFilter(df.FilterSet):
    vehicle_model = df.CharFilter(field_name="model", lookup_expr="icontains")
    arrival_date = df.DateFromToRangeFilter()

    class Meta:
        model = InventoryUnit
        fields = ["status", "dealer", "vehicle_model", "variant", "color", "arrival_date"]
