# dms_core/business/codes.py
"""
Human-readable document numbers (BK-..., JC-..., WC-...).

Without a sequence the code is a base36 millisecond timestamp plus four
random base36 characters. Two codes minted in the same millisecond collide
with probability 1 / 36**4, so the database column stays unique and callers
that mint at high throughput should pass a sequence.
"""

from __future__ import annotations

import secrets
import string
import time
from datetime import date
from typing import Optional

BASE36_ALPHABET = string.digits + string.ascii_uppercase

BOOKING_PREFIX = "BK"
JOB_CARD_PREFIX = "JC"
WARRANTY_CLAIM_PREFIX = "WC"


def to_base36(value: int) -> str:
    if value < 0:
        raise ValueError("base36 encoding requires a non-negative integer")
    if value == 0:
        return "0"
    out = []
    while value:
        value, rem = divmod(value, 36)
        out.append(BASE36_ALPHABET[rem])
    return "".join(reversed(out))


def _random_base36(length: int) -> str:
    return "".join(secrets.choice(BASE36_ALPHABET) for _ in range(length))


def generate_unique_code(prefix: str, sequence: Optional[int] = None) -> str:
    if sequence is not None:
        return f"{prefix}-{int(sequence):06d}"
    timestamp = to_base36(int(time.time() * 1000))
    return f"{prefix}-{timestamp}{_random_base36(4)}"


def generate_booking_number(sequence: Optional[int] = None) -> str:
    return generate_unique_code(BOOKING_PREFIX, sequence)


def generate_job_number(sequence: Optional[int] = None) -> str:
    return generate_unique_code(JOB_CARD_PREFIX, sequence)


def generate_claim_number(sequence: Optional[int] = None) -> str:
    return generate_unique_code(WARRANTY_CLAIM_PREFIX, sequence)


def generate_vin(model_code: str, year: Optional[int] = None) -> str:
    year = year or date.today().year
    return f"ZF{year}{str(model_code).upper()}{_random_base36(8)}"
