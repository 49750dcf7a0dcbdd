# promotions/services/discounts.py

"""
DISCOUNT RULES

Purpose:
- Resolve a store-scoped discount code and decide whether it applies.
- Compute the (unrounded) discount amount for a subtotal.
- Record a use of a discount once an order that carried it exists.

Hard rules:
- Exact code match, scoped to the store (tenant isolation).
- At most one discount per order; no stacking.
- Fixed discounts never exceed the subtotal (total can't go negative).
- Amounts are returned unrounded; callers round at the reporting edge.
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal

from django.db.models import F
from django.utils import timezone

from promotions.models import Discount

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")


class DiscountNotApplicable(Exception):
    """Raised when a supplied code exists nowhere or fails an applicability rule."""

    def __init__(self, code: str, reason: str):
        self.code = code
        self.reason = reason
        super().__init__(f"Discount code '{code}' cannot be applied: {reason}")


def find_discount(*, store, code: str) -> Discount | None:
    code = str(code or "").strip()
    if not code:
        return None
    return Discount.objects.filter(store=store, code=code).first()


def check_applicability(
    discount: Discount, *, subtotal: Decimal, now: datetime | None = None
) -> None:
    """
    Raise DiscountNotApplicable with a human-readable reason, or return None.
    Missing window bounds are treated as unbounded.
    """
    now = now or timezone.now()
    code = discount.code

    if not discount.is_active:
        raise DiscountNotApplicable(code, "discount is not active")

    if discount.starts_at and discount.starts_at > now:
        raise DiscountNotApplicable(code, "discount is not yet valid")

    if discount.ends_at and discount.ends_at < now:
        raise DiscountNotApplicable(code, "discount has expired")

    if discount.minimum_amount is not None and subtotal < Decimal(discount.minimum_amount):
        raise DiscountNotApplicable(
            code, f"minimum order amount of {discount.minimum_amount} required"
        )

    if discount.usage_limit is not None and discount.usage_count >= discount.usage_limit:
        raise DiscountNotApplicable(code, "discount usage limit reached")


def resolve_discount(
    *, store, code: str, subtotal: Decimal, now: datetime | None = None
) -> Discount:
    discount = find_discount(store=store, code=code)
    if discount is None:
        raise DiscountNotApplicable(str(code or "").strip(), "unknown discount code")

    check_applicability(discount, subtotal=subtotal, now=now)
    return discount


def calculate_discount_amount(discount: Discount, subtotal: Decimal) -> Decimal:
    subtotal = Decimal(subtotal)
    value = Decimal(discount.value)

    if discount.discount_type == Discount.DiscountType.PERCENTAGE:
        return subtotal * value / HUNDRED

    if discount.discount_type == Discount.DiscountType.FIXED:
        return min(value, subtotal)

    return Decimal("0")


def record_discount_usage(discount_id) -> None:
    """
    Atomic increment (no read-modify-write race on the counter itself).
    The cap is checked at checkout time, so concurrent checkouts can still
    overshoot usage_limit by the number of in-flight orders.
    """
    if not discount_id:
        return
    updated = Discount.objects.filter(id=discount_id).update(
        usage_count=F("usage_count") + 1
    )
    if not updated:
        logger.warning("Discount usage not recorded; discount missing", extra={"discount_id": str(discount_id)})
