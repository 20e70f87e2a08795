# dms_core/tests/test_business_helpers.py

import re
from decimal import Decimal
from types import SimpleNamespace

import pytest

from dms_core.business.codes import (
    generate_booking_number,
    generate_claim_number,
    generate_job_number,
    generate_unique_code,
    generate_vin,
    to_base36,
)
from dms_core.business.phone import is_valid_indian_mobile, normalize_phone
from dms_core.business.stock import is_low_stock, reorder_quantity
from dms_core.business.tax import (
    calculate_gst,
    from_minor_units,
    round_rupees,
    to_minor_units,
)


# ---------------------------------------------------------------------
# GST
# ---------------------------------------------------------------------
def test_gst_intra_state():
    assert calculate_gst(1000, is_inter_state=False) == {
        "base_amount": 1000,
        "cgst": 90,
        "sgst": 90,
        "igst": 0,
        "total_tax": 180,
        "grand_total": 1180,
    }


def test_gst_inter_state():
    assert calculate_gst(1000, is_inter_state=True) == {
        "base_amount": 1000,
        "cgst": 0,
        "sgst": 0,
        "igst": 180,
        "total_tax": 180,
        "grand_total": 1180,
    }


def test_gst_components_round_half_up_independently():
    # 50 * 9% = 4.5 -> 5 per component; a single 18% would give 9
    result = calculate_gst(50)
    assert (result["cgst"], result["sgst"], result["total_tax"]) == (5, 5, 10)
    assert calculate_gst(50, is_inter_state=True)["igst"] == 9

    # 1005 * 9% = 90.45 -> 90 per component; a single 18% would give 181
    result = calculate_gst(1005)
    assert result["total_tax"] == 180
    assert result["grand_total"] == 1185
    assert calculate_gst(1005, is_inter_state=True)["total_tax"] == 181


def test_gst_accepts_strings_and_decimals():
    assert calculate_gst("1000")["grand_total"] == 1180
    assert calculate_gst(Decimal("99.50"))["cgst"] == 9
    assert calculate_gst(0)["grand_total"] == 0


def test_round_rupees_is_half_up():
    assert round_rupees("2.5") == 3
    assert round_rupees("3.5") == 4
    assert round_rupees("2.49") == 2


def test_minor_units():
    assert to_minor_units("12.34") == 1234
    assert to_minor_units(0.1) == 10
    assert from_minor_units(1234) == Decimal("12.34")


# ---------------------------------------------------------------------
# Phone
# ---------------------------------------------------------------------
@pytest.mark.parametrize(
    "raw,expected",
    [
        ("9876543210", "+919876543210"),
        ("919876543210", "+919876543210"),
        ("+91 98765 43210", "+919876543210"),
        ("098765", "098765"),
        ("5876543210", "5876543210"),
        ("", ""),
    ],
)
def test_normalize_phone(raw, expected):
    assert normalize_phone(raw) == expected


@pytest.mark.parametrize(
    "raw,valid",
    [
        ("9876543210", True),
        ("6000000000", True),
        ("919876543210", True),
        ("+91-98765-43210", True),
        ("5876543210", False),
        ("987654321", False),
        ("98765432100", False),
        ("915876543210", False),
        ("", False),
    ],
)
def test_is_valid_indian_mobile(raw, valid):
    assert is_valid_indian_mobile(raw) is valid


# ---------------------------------------------------------------------
# Codes
# ---------------------------------------------------------------------
def test_unique_code_with_sequence_is_zero_padded():
    assert generate_unique_code("BK", 123) == "BK-000123"
    assert generate_job_number(7) == "JC-000007"
    assert generate_claim_number(1234567) == "WC-1234567"


def test_unique_code_without_sequence():
    code = generate_booking_number()
    assert re.fullmatch(r"BK-[0-9A-Z]{12,}", code)
    assert code != generate_booking_number()


def test_to_base36():
    assert to_base36(0) == "0"
    assert to_base36(35) == "Z"
    assert to_base36(36) == "10"
    with pytest.raises(ValueError):
        to_base36(-1)


def test_generate_vin():
    vin = generate_vin("e1", year=2025)
    assert re.fullmatch(r"ZF2025E1[0-9A-Z]{8}", vin)


# ---------------------------------------------------------------------
# Stock
# ---------------------------------------------------------------------
def test_reorder_quantity():
    assert reorder_quantity({"quantity": 2, "min_stock": 5}, 3) == 13
    assert reorder_quantity({"quantity": 10, "min_stock": 5}, 3) == 0
    assert reorder_quantity({"quantity": 5, "minStock": 5}) == 10
    assert reorder_quantity(SimpleNamespace(quantity=0, min_stock=4), 2) == 8


def test_is_low_stock():
    assert is_low_stock({"quantity": 5, "min_stock": 5})
    assert is_low_stock({"quantity": 0, "min_stock": 0})
    assert not is_low_stock({"quantity": 6, "min_stock": 5})
