# dms_core/tests/conftest.py

from __future__ import annotations

import uuid
from typing import Any, Callable

import pytest
from django.contrib.auth import authenticate, get_user_model
from rest_framework.test import APIClient

from dms_core.models import Booking, Dealer, InventoryUnit, JobCard, Spare, WarrantyClaim


def _rand(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:10].upper()}"


class AuthAPIClient(APIClient):
    """
    Test client that uses force_authenticate for predictable DRF auth.
    """

    _user = None

    def login(self, username: str, password: str, **kwargs) -> bool:  # type: ignore[override]
        user = authenticate(username=username, password=password)
        if not user:
            return False
        self.force_authenticate(user=user)
        self._user = user
        return True

    def logout(self) -> None:  # type: ignore[override]
        # DO NOT call force_authenticate(user=None) here.
        # DRF's force_authenticate(user=None) calls self.logout() internally.
        super().logout()
        self.handler._force_user = None
        self.handler._force_token = None
        self._user = None


@pytest.fixture
def api_client() -> AuthAPIClient:
    return AuthAPIClient()


@pytest.fixture
def staff_user(db):
    User = get_user_model()
    user, _ = User.objects.get_or_create(username="manager", defaults={"is_staff": True})
    user.set_password("pass123")
    user.save(update_fields=["password"])
    return user


@pytest.fixture
def auth_client(api_client, staff_user) -> AuthAPIClient:
    assert api_client.login(username="manager", password="pass123") is True
    return api_client


@pytest.fixture
def dealer(db) -> Dealer:
    return Dealer.objects.create(
        name="Zforce Motors Pune",
        code=_rand("DLR"),
        location="Pune",
        region=Dealer.Region.WEST,
    )


# ---------------------------------------------------------------------
# Record factories
#
# Status is set with _workflow_bypass: direct status edits are guarded.
# ---------------------------------------------------------------------
@pytest.fixture
def booking_factory(db, dealer) -> Callable[..., Booking]:
    def _factory(*, status: str = "pending", kyc_status: str = "pending", vin: str = "", **extra: Any) -> Booking:
        kwargs = {
            "booking_number": _rand("BK"),
            "customer_name": "Asha Kulkarni",
            "customer_phone": "+919876543210",
            "vehicle_model": "Zforce E1",
            "variant": "Standard",
            "color": "White",
            "booking_amount": 5000,
            "dealer": dealer,
            "status": status,
            "kyc_status": kyc_status,
            "vin": vin,
        }
        kwargs.update(extra)
        booking = Booking(**kwargs)
        booking.save(_workflow_bypass=True)
        return booking

    return _factory


@pytest.fixture
def job_card_factory(db, dealer) -> Callable[..., JobCard]:
    def _factory(*, status: str = "open", technician_id: str = "", **extra: Any) -> JobCard:
        kwargs = {
            "job_number": _rand("JC"),
            "vehicle_number": "MH12AB1234",
            "vin": "ZF2025E1ABCDEFGH",
            "customer_name": "Ravi Deshmukh",
            "customer_phone": "+919812345678",
            "service_type": JobCard.ServiceType.REGULAR_SERVICE,
            "complaints": "Brake noise at low speed",
            "dealer": dealer,
            "status": status,
            "technician_id": technician_id,
        }
        kwargs.update(extra)
        job_card = JobCard(**kwargs)
        job_card.save(_workflow_bypass=True)
        return job_card

    return _factory


@pytest.fixture
def claim_factory(db, dealer) -> Callable[..., WarrantyClaim]:
    def _factory(*, status: str = "draft", **extra: Any) -> WarrantyClaim:
        kwargs = {
            "claim_number": _rand("WC"),
            "vin": "ZF2025E1ABCDEFGH",
            "vehicle_number": "MH12AB1234",
            "customer_name": "Ravi Deshmukh",
            "claim_type": WarrantyClaim.ClaimType.BATTERY,
            "description": "Battery pack not holding charge beyond 40 km",
            "claim_amount": 12000,
            "dealer": dealer,
            "status": status,
        }
        kwargs.update(extra)
        claim = WarrantyClaim(**kwargs)
        claim.save(_workflow_bypass=True)
        return claim

    return _factory


@pytest.fixture
def spare_factory(db, dealer) -> Callable[..., Spare]:
    def _factory(*, quantity: int = 10, min_stock: int = 5, **extra: Any) -> Spare:
        kwargs = {
            "part_number": _rand("SP"),
            "part_name": "Brake pad set",
            "category": Spare.Category.CONSUMABLES,
            "quantity": quantity,
            "min_stock": min_stock,
            "unit_price": 850,
            "dealer": dealer,
        }
        kwargs.update(extra)
        return Spare.objects.create(**kwargs)

    return _factory


@pytest.fixture
def unit_factory(db, dealer) -> Callable[..., InventoryUnit]:
    def _factory(*, status: str = "in_stock", **extra: Any) -> InventoryUnit:
        kwargs = {
            "vin": _rand("ZF2025E1"),
            "model": "Zforce E1",
            "variant": "Standard",
            "color": "White",
            "status": status,
            "dealer": dealer,
        }
        kwargs.update(extra)
        return InventoryUnit.objects.create(**kwargs)

    return _factory
