# dms_core/tests/test_workflow_definition_api.py

import pytest


@pytest.mark.django_db
def test_health_is_public(api_client):
    resp = api_client.get("/dms/health/")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


@pytest.mark.django_db
@pytest.mark.parametrize("kind", ["booking", "job_card", "warranty_claim", "warranty", "job-cards"])
def test_workflow_definition(auth_client, kind):
    resp = auth_client.get(f"/dms/workflows/{kind}/")
    assert resp.status_code == 200
    data = resp.json()
    assert data["kind"] in {"booking", "job_card", "warranty_claim"}
    assert data["terminal_states"]


@pytest.mark.django_db
def test_unknown_kind_is_400(auth_client):
    resp = auth_client.get("/dms/workflows/invoice/")
    assert resp.status_code == 400


@pytest.mark.django_db
def test_next_states(auth_client):
    resp = auth_client.get("/dms/workflows/booking/next/", {"current": "Ready For Delivery"})
    assert resp.status_code == 200
    assert resp.json() == {
        "kind": "booking",
        "current": "ready_for_delivery",
        "allowed_next": ["allocated", "delivered"],
        "terminal": False,
    }


@pytest.mark.django_db
def test_next_states_unknown_current_is_terminal(auth_client):
    resp = auth_client.get("/dms/workflows/job_card/next/", {"current": "archived"})
    assert resp.status_code == 200
    assert resp.json()["allowed_next"] == []
    assert resp.json()["terminal"] is True


@pytest.mark.django_db
def test_next_states_requires_current(auth_client):
    resp = auth_client.get("/dms/workflows/booking/next/")
    assert resp.status_code == 400
