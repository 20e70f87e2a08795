# dms_core/business/tax.py
"""
GST computation for Indian invoices.

Intra-state supplies carry CGST + SGST, inter-state supplies carry IGST.
Each component is rounded to the nearest rupee (half-up) on its own and
the total is the sum of the rounded components. CGST + SGST can therefore
differ by one rupee from a single 18% figure; displayed invoice totals
depend on this.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Union

Number = Union[int, float, Decimal, str]

GST_RATE = Decimal("0.18")
CGST_RATE = Decimal("0.09")
SGST_RATE = Decimal("0.09")
IGST_RATE = Decimal("0.18")

_RUPEE = Decimal("1")


def _dec(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value or 0))


def _plain(value: Decimal) -> Union[int, float]:
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def round_rupees(value: Number) -> int:
    return int(_dec(value).quantize(_RUPEE, rounding=ROUND_HALF_UP))


def calculate_gst(base_amount: Number, is_inter_state: bool = False) -> Dict[str, Union[int, float]]:
    """
    Return the tax breakdown for `base_amount`.

    Keys: base_amount, cgst, sgst, igst, total_tax, grand_total.
    """
    base = _dec(base_amount)

    if is_inter_state:
        igst = round_rupees(base * IGST_RATE)
        return {
            "base_amount": _plain(base),
            "cgst": 0,
            "sgst": 0,
            "igst": igst,
            "total_tax": igst,
            "grand_total": _plain(base + igst),
        }

    cgst = round_rupees(base * CGST_RATE)
    sgst = round_rupees(base * SGST_RATE)
    return {
        "base_amount": _plain(base),
        "cgst": cgst,
        "sgst": sgst,
        "igst": 0,
        "total_tax": cgst + sgst,
        "grand_total": _plain(base + cgst + sgst),
    }


def to_minor_units(amount: Number) -> int:
    """Rupees to paise."""
    return round_rupees(_dec(amount) * 100)


def from_minor_units(minor_units: int) -> Decimal:
    return Decimal(int(minor_units)) / 100
