# dms_core/stock_scanner.py
from __future__ import annotations

import logging
from typing import Dict, Optional

from django.conf import settings
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from dms_core.models import Spare, StockAlert

logger = logging.getLogger(__name__)


def check_low_stock(*, now=None, multiplier: Optional[int] = None) -> Dict[str, int]:
    """
    Open a StockAlert for every spare at or below its minimum stock and
    resolve open alerts whose spare has recovered.

    Returns:
        dict: {"low": <spares low now>, "opened": <new alerts>, "resolved": <closed alerts>}
    """
    now = now or timezone.now()
    if multiplier is None:
        multiplier = settings.DMS_REORDER_MULTIPLIER

    opened = 0
    low = 0

    for spare in Spare.objects.filter(quantity__lte=F("min_stock")).iterator():
        low += 1
        # One open alert per spare; the partial unique constraint backs this up.
        with transaction.atomic():
            _, created = StockAlert.objects.get_or_create(
                spare=spare,
                resolved_at__isnull=True,
                defaults={
                    "quantity": spare.quantity,
                    "min_stock": spare.min_stock,
                    "reorder_quantity": spare.reorder_quantity(multiplier),
                },
            )
        if created:
            opened += 1
            logger.info(
                "Low stock: %s at %s (min %s)", spare.part_number, spare.quantity, spare.min_stock
            )

    resolved = StockAlert.objects.filter(
        resolved_at__isnull=True,
        spare__quantity__gt=F("spare__min_stock"),
    ).update(resolved_at=now)

    logger.info("Low-stock scan: %s low, %s opened, %s resolved", low, opened, resolved)

    return {"low": low, "opened": opened, "resolved": resolved}
