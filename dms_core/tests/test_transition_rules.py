# dms_core/tests/test_transition_rules.py

import itertools

import pytest

from dms_core.workflows import (
    BOOKING_TRANSITIONS,
    JOB_CARD_TRANSITIONS,
    WARRANTY_TRANSITIONS,
    BookingStatus,
    JobCardStatus,
    WarrantyClaimStatus,
    allowed_next_states,
    allowed_transitions,
    can_transition_to,
    is_delete_blocked,
    is_terminal,
    validate_transition,
    workflow_definition,
)

EXPECTED_EDGES = {
    "booking": {
        ("draft", "pending"),
        ("draft", "cancelled"),
        ("pending", "confirmed"),
        ("pending", "cancelled"),
        ("confirmed", "allocated"),
        ("confirmed", "cancelled"),
        ("allocated", "ready_for_delivery"),
        ("allocated", "confirmed"),
        ("ready_for_delivery", "delivered"),
        ("ready_for_delivery", "allocated"),
    },
    "job_card": {
        ("open", "in_progress"),
        ("open", "closed"),
        ("in_progress", "pending_parts"),
        ("in_progress", "completed"),
        ("in_progress", "open"),
        ("pending_parts", "in_progress"),
        ("completed", "invoiced"),
        ("completed", "in_progress"),
        ("invoiced", "closed"),
    },
    "warranty_claim": {
        ("draft", "submitted"),
        ("submitted", "under_review"),
        ("under_review", "approved"),
        ("under_review", "partially_approved"),
        ("under_review", "rejected"),
        ("approved", "reimbursed"),
        ("partially_approved", "reimbursed"),
    },
}

TABLES = {
    "booking": (BOOKING_TRANSITIONS, BookingStatus),
    "job_card": (JOB_CARD_TRANSITIONS, JobCardStatus),
    "warranty_claim": (WARRANTY_TRANSITIONS, WarrantyClaimStatus),
}


@pytest.mark.parametrize("kind", sorted(TABLES))
def test_transition_table_is_exhaustively_as_defined(kind):
    table, enum = TABLES[kind]
    states = enum.values()

    for a, b in itertools.product(states, states):
        expected = (a, b) in EXPECTED_EDGES[kind]
        assert can_transition_to(a, b, table) is expected, f"{kind}: {a} -> {b}"


@pytest.mark.parametrize("kind", sorted(TABLES))
def test_every_status_is_a_table_key(kind):
    table, enum = TABLES[kind]
    assert set(table) == set(enum.values())


@pytest.mark.parametrize("kind", sorted(TABLES))
@pytest.mark.parametrize("unknown", ["", None, "shipped", "CONFIRMEDX", "archived"])
def test_unknown_current_state_allows_nothing(kind, unknown):
    table, enum = TABLES[kind]
    for target in enum.values() + ["shipped"]:
        assert can_transition_to(unknown, target, table) is False
    assert allowed_next_states(kind, unknown) == []
    assert is_terminal(unknown, table) is True


def test_unknown_target_is_rejected():
    assert can_transition_to("pending", "teleported", BOOKING_TRANSITIONS) is False


def test_state_strings_are_normalized():
    assert can_transition_to("Ready For Delivery", "DELIVERED", BOOKING_TRANSITIONS) is True
    assert can_transition_to("in-progress", "pending parts", JOB_CARD_TRANSITIONS) is True
    assert can_transition_to(BookingStatus.CONFIRMED, BookingStatus.ALLOCATED, BOOKING_TRANSITIONS) is True


def test_terminal_states():
    assert is_terminal("delivered", BOOKING_TRANSITIONS)
    assert is_terminal("cancelled", BOOKING_TRANSITIONS)
    assert is_terminal("closed", JOB_CARD_TRANSITIONS)
    assert is_terminal("rejected", WARRANTY_TRANSITIONS)
    assert is_terminal("reimbursed", WARRANTY_TRANSITIONS)
    assert not is_terminal("invoiced", JOB_CARD_TRANSITIONS)


def test_allowed_next_states_sorted():
    assert allowed_next_states("booking", "confirmed") == ["allocated", "cancelled"]
    assert allowed_next_states("job_card", "in_progress") == ["completed", "open", "pending_parts"]
    assert allowed_next_states("warranty", "under_review") == [
        "approved",
        "partially_approved",
        "rejected",
    ]


def test_allowed_transitions_full_map():
    full = allowed_transitions("job_card")
    assert full["invoiced"] == ["closed"]
    assert full["closed"] == []
    assert allowed_transitions("job_card", "invoiced") == ["closed"]


def test_validate_transition_raises_value_error():
    validate_transition("booking", "pending", "confirmed")
    validate_transition(kind="booking", old="pending", new="confirmed")

    with pytest.raises(ValueError):
        validate_transition("booking", "pending", "allocated")


def test_unknown_kind_is_a_structural_error():
    with pytest.raises(ValueError):
        allowed_next_states("invoice", "open")
    with pytest.raises(ValueError):
        workflow_definition("invoice")


def test_delete_blocked_states():
    assert is_delete_blocked("booking", "delivered")
    assert not is_delete_blocked("booking", "cancelled")
    assert is_delete_blocked("job_card", "invoiced")
    assert is_delete_blocked("job_card", "closed")
    assert not is_delete_blocked("job_card", "completed")
    assert not is_delete_blocked("warranty_claim", "reimbursed")


def test_workflow_definition_shape():
    data = workflow_definition("booking")
    assert data["kind"] == "booking"
    assert set(data["statuses"]) == set(BookingStatus.values())
    assert data["transitions"]["pending"] == ["cancelled", "confirmed"]
    assert data["terminal_states"] == ["cancelled", "delivered"]
    assert data["delete_blocked_states"] == ["delivered"]

    everything = workflow_definition()
    assert set(everything) == {"booking", "job_card", "warranty_claim"}


def test_tables_are_immutable():
    with pytest.raises(TypeError):
        BOOKING_TRANSITIONS["pending"] = frozenset({"delivered"})
    with pytest.raises(AttributeError):
        BOOKING_TRANSITIONS["pending"].add("delivered")
