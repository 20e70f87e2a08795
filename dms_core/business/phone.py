# dms_core/business/phone.py
from __future__ import annotations

import re

COUNTRY_CODE = "91"

INDIAN_MOBILE_RE = re.compile(r"^[6-9]\d{9}$")

_NON_DIGITS = re.compile(r"\D")


def _digits(phone: str) -> str:
    return _NON_DIGITS.sub("", str(phone or ""))


def normalize_phone(phone: str) -> str:
    """
    Format an Indian mobile number as E.164 (+91XXXXXXXXXX).

    Input that does not look like an Indian mobile is returned unchanged.
    """
    digits = _digits(phone)
    if digits.startswith(COUNTRY_CODE) and len(digits) == 12:
        return f"+{digits}"
    if len(digits) == 10 and digits[0] in "6789":
        return f"+{COUNTRY_CODE}{digits}"
    return phone


def is_valid_indian_mobile(phone: str) -> bool:
    """
    Ten digits starting with 6-9, optionally preceded by the 91 country code.
    """
    digits = _digits(phone)
    if digits.startswith(COUNTRY_CODE) and len(digits) == 12:
        digits = digits[2:]
    return bool(INDIAN_MOBILE_RE.match(digits))
