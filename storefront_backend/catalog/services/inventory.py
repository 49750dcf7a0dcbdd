# catalog/services/inventory.py

"""
INVENTORY ADJUSTMENTS

Stock is checked at checkout time with a plain read (no reservation), and
decremented only when payment is confirmed. Concurrent checkouts for the same
variant are not coordinated, so stock can go negative after confirmation;
that is surfaced to the merchant rather than blocking a paid order.
"""

from __future__ import annotations

import logging

from django.db.models import F

from catalog.models import ProductVariant

logger = logging.getLogger(__name__)


def decrement_stock(*, variant_id, quantity: int) -> bool:
    """
    Atomic decrement for stock-tracked variants. Returns False when the
    variant is missing or not tracked (nothing to adjust).
    """
    qty = int(quantity)
    if qty <= 0:
        raise ValueError("quantity must be >= 1")

    updated = ProductVariant.objects.filter(id=variant_id, track_quantity=True).update(
        stock=F("stock") - qty
    )

    if updated:
        remaining = (
            ProductVariant.objects.filter(id=variant_id)
            .values_list("stock", flat=True)
            .first()
        )
        if remaining is not None and remaining < 0:
            logger.warning(
                "Variant oversold",
                extra={"variant_id": str(variant_id), "stock": remaining},
            )
    return bool(updated)
