# orders/services/order_service.py

"""
ORDER PERSISTENCE (APPLICATION SERVICE)

Purpose:
- Persist an Order + its denormalised line items in one transaction.
- Own order-number uniqueness: bounded retry on (store, order_number) conflict.
- Record discount usage for the order's discount, if any.

Hard rules:
- Money is quantized to 2dp here (the reporting/persistence edge),
  never earlier in the pricing pipeline.
- Either the whole order (header + lines + usage) is written, or nothing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal

from django.db import IntegrityError, transaction

from backend.money import money
from orders.models import Order, OrderLineItem
from orders.services.order_numbers import generate_order_number
from promotions.services.discounts import record_discount_usage

logger = logging.getLogger(__name__)

MAX_ORDER_NUMBER_ATTEMPTS = 3


class OrderNumberExhaustedError(Exception):
    """Raised when no free order number was found within the retry budget."""


@dataclass(frozen=True)
class OrderLineDraft:
    product_id: object
    variant_id: object
    title: str
    variant_title: str
    price: Decimal
    quantity: int

    @property
    def line_total(self) -> Decimal:
        return Decimal(self.price) * int(self.quantity)


@dataclass
class OrderDraft:
    store: object
    payment_method: str
    customer_email: str
    customer_name: str
    currency: str
    subtotal: Decimal
    discount: Decimal
    tax: Decimal
    shipping: Decimal
    total: Decimal
    lines: list[OrderLineDraft] = field(default_factory=list)
    customer_phone: str = ""
    status: str = Order.STATUS_PENDING_PAYMENT
    payment_status: str = Order.PAYMENT_PENDING
    financial_status: str = Order.PAYMENT_PENDING
    shipping_address: dict = field(default_factory=dict)
    billing_address: dict = field(default_factory=dict)
    note: str = ""
    discount_code: str = ""
    discount_id: object = None
    provider_session_id: str | None = None


def _insert_header(draft: OrderDraft, order_number: str) -> Order:
    return Order.objects.create(
        store=draft.store,
        order_number=order_number,
        status=draft.status,
        financial_status=draft.financial_status,
        payment_status=draft.payment_status,
        payment_method=draft.payment_method,
        currency=draft.currency,
        customer_email=draft.customer_email,
        customer_name=draft.customer_name,
        customer_phone=draft.customer_phone or "",
        subtotal_price=money(draft.subtotal),
        total_discount=money(draft.discount),
        total_tax=money(draft.tax),
        total_shipping=money(draft.shipping),
        total_price=money(draft.total),
        discount_code=draft.discount_code or "",
        shipping_address=draft.shipping_address or {},
        billing_address=draft.billing_address or draft.shipping_address or {},
        note=draft.note or "",
        provider_session_id=draft.provider_session_id,
    )


def _number_taken(store, order_number: str) -> bool:
    return Order.objects.filter(store=store, order_number=order_number).exists()


@transaction.atomic
def create_order(draft: OrderDraft) -> Order:
    order = None
    for attempt in range(1, MAX_ORDER_NUMBER_ATTEMPTS + 1):
        order_number = generate_order_number()
        try:
            with transaction.atomic():
                order = _insert_header(draft, order_number)
            break
        except IntegrityError:
            # Only an order-number collision is retried; anything else
            # (e.g. duplicate provider session) propagates.
            if not _number_taken(draft.store, order_number):
                raise
            logger.warning(
                "Order number collision; retrying",
                extra={"order_number": order_number, "attempt": attempt},
            )

    if order is None:
        raise OrderNumberExhaustedError(
            f"Could not allocate a unique order number after {MAX_ORDER_NUMBER_ATTEMPTS} attempts"
        )

    for position, line in enumerate(draft.lines, start=1):
        OrderLineItem.objects.create(
            order=order,
            product_id=line.product_id,
            variant_id=line.variant_id,
            title=line.title,
            variant_title=line.variant_title or "",
            price=money(line.price),
            quantity=int(line.quantity),
            total_price=money(line.line_total),
            position=position,
        )

    if draft.discount_id:
        record_discount_usage(draft.discount_id)

    logger.info(
        "Order created",
        extra={
            "order_id": str(order.id),
            "order_number": order.order_number,
            "store_id": str(draft.store.id),
            "payment_method": draft.payment_method,
        },
    )
    return order
