# dms_core/tasks.py
from __future__ import annotations

from celery import shared_task

from dms_core.stock_scanner import check_low_stock


@shared_task
def scan_low_stock(multiplier: int | None = None) -> dict:
    return check_low_stock(multiplier=multiplier)
