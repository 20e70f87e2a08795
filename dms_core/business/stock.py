# dms_core/business/stock.py
from __future__ import annotations

from dms_core.workflows.guards import record_value

DEFAULT_REORDER_MULTIPLIER = 3


def _level(spare, name: str) -> int:
    return int(record_value(spare, name, 0) or 0)


def is_low_stock(spare) -> bool:
    return _level(spare, "quantity") <= _level(spare, "min_stock")


def reorder_quantity(spare, multiplier: int = DEFAULT_REORDER_MULTIPLIER) -> int:
    """
    Units to order to bring a low spare back to `min_stock * multiplier`.

    Zero when the spare is not low.
    """
    if not is_low_stock(spare):
        return 0
    return max(0, _level(spare, "min_stock") * int(multiplier) - _level(spare, "quantity"))
