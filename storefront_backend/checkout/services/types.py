# checkout/services/types.py

"""
CHECKOUT VALUE TYPES

Request-scoped, immutable values passed between pipeline stages:
validated request -> resolved lines -> totals -> strategy -> result.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Optional

from backend.money import money


@dataclass(frozen=True)
class CartLine:
    variant_id: str
    quantity: int


@dataclass(frozen=True)
class Customer:
    email: str
    name: str
    phone: str = ""


@dataclass(frozen=True)
class Address:
    line1: str
    city: str
    state: str
    postal_code: str
    country: str
    line2: str = ""

    def to_dict(self) -> dict:
        return {
            "line1": self.line1,
            "line2": self.line2,
            "city": self.city,
            "state": self.state,
            "postalCode": self.postal_code,
            "country": self.country,
        }


@dataclass(frozen=True)
class CheckoutRequest:
    items: tuple
    customer: Customer
    shipping_address: Address
    billing_address: Optional[Address] = None
    discount_code: Optional[str] = None
    payment_method: str = "stripe"
    metadata: dict = field(default_factory=dict)

    @property
    def effective_billing_address(self) -> Address:
        return self.billing_address or self.shipping_address

    @property
    def distinct_variant_ids(self) -> list[str]:
        seen = []
        for line in self.items:
            if line.variant_id not in seen:
                seen.append(line.variant_id)
        return seen


@dataclass(frozen=True)
class ResolvedLine:
    """A cart line bound to its catalog variant (price read at checkout time)."""

    variant: Any
    quantity: int

    @property
    def product(self):
        return self.variant.product

    @property
    def unit_price(self) -> Decimal:
        return Decimal(self.variant.price)

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    @property
    def title(self) -> str:
        return self.product.name

    @property
    def variant_title(self) -> str:
        return self.variant.name


@dataclass(frozen=True)
class CheckoutTotals:
    subtotal: Decimal
    discount: Decimal
    shipping: Decimal
    tax: Decimal

    @property
    def taxable_amount(self) -> Decimal:
        return self.subtotal - self.discount

    @property
    def total(self) -> Decimal:
        return self.subtotal - self.discount + self.tax + self.shipping

    def as_report(self) -> dict:
        return {
            "subtotal": str(money(self.subtotal)),
            "discountAmount": str(money(self.discount)),
            "taxableAmount": str(money(self.taxable_amount)),
            "taxAmount": str(money(self.tax)),
            "shippingAmount": str(money(self.shipping)),
            "total": str(money(self.total)),
        }


@dataclass(frozen=True)
class PricedCart:
    lines: tuple
    totals: CheckoutTotals
    discount: Any = None

    @property
    def discount_applied(self) -> bool:
        return self.discount is not None


@dataclass(frozen=True)
class CheckoutContext:
    """Everything a payment strategy needs; strategies share no other state."""

    store: Any
    subdomain: str
    request: CheckoutRequest
    priced: PricedCart
    payment_settings: Any
    currency: str = "USD"


@dataclass(frozen=True)
class SessionResult:
    payment_method: str
    body: dict
    status_code: int = 200
