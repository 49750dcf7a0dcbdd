# checkout/services/pricing.py

"""
PRICING CALCULATOR

    subtotal = sum(unit_price * quantity)
    discount = percentage: subtotal * value / 100 | fixed: min(value, subtotal)
    taxable  = subtotal - discount
    tax      = taxable * tax_rate
    shipping = flat amount
    total    = taxable + tax + shipping

Pure given its inputs (the only time dependency is the discount window).
Nothing is rounded here; CheckoutTotals.as_report() and the order writer
round to 2dp at the edge.
"""

from __future__ import annotations

from decimal import Decimal

from checkout.services.exceptions import DiscountNotApplicableError
from checkout.services.types import CheckoutTotals, PricedCart
from promotions.services.discounts import (
    DiscountNotApplicable,
    calculate_discount_amount,
    resolve_discount,
)

ZERO = Decimal("0")


def subtotal_of(lines) -> Decimal:
    return sum((line.line_total for line in lines), ZERO)


def calculate_totals(
    lines,
    *,
    discount=None,
    shipping_amount: Decimal,
    tax_rate: Decimal,
) -> CheckoutTotals:
    subtotal = subtotal_of(lines)
    discount_amount = calculate_discount_amount(discount, subtotal) if discount else ZERO
    taxable = subtotal - discount_amount
    return CheckoutTotals(
        subtotal=subtotal,
        discount=discount_amount,
        shipping=Decimal(shipping_amount),
        tax=taxable * Decimal(tax_rate),
    )


def resolve_cart_discount(store, code, subtotal: Decimal, *, now=None):
    """None when no code was supplied; raises when a supplied code can't apply."""
    code = str(code or "").strip()
    if not code:
        return None
    try:
        return resolve_discount(store=store, code=code, subtotal=subtotal, now=now)
    except DiscountNotApplicable as exc:
        raise DiscountNotApplicableError(
            f"Discount code '{exc.code}' cannot be applied: {exc.reason}",
            code=exc.code,
            reason=exc.reason,
        ) from exc


def price_cart(store, lines, *, discount_code, config, now=None) -> PricedCart:
    discount = resolve_cart_discount(store, discount_code, subtotal_of(lines), now=now)
    totals = calculate_totals(
        lines,
        discount=discount,
        shipping_amount=config.flat_shipping_amount,
        tax_rate=config.tax_rate,
    )
    return PricedCart(lines=tuple(lines), totals=totals, discount=discount)
