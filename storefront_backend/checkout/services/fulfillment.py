# checkout/services/fulfillment.py

"""
HOSTED SESSION FULFILLMENT (WEBHOOK SIDE)

On checkout.session.completed:
- create a PAID order from the session metadata written at checkout time,
  with the amounts the provider reports as charged (the checkout quote goes
  in the order note when it differs)
- decrement stock for tracked variants
- record discount usage

Idempotent on the provider session id (unique on Order): a redelivered event,
or two deliveries racing each other, produce exactly one order.
Line items keep the price captured at checkout; titles come from the catalog
when the variant still exists.
"""

from __future__ import annotations

import json
import logging
import uuid
from decimal import Decimal, InvalidOperation

from django.db import IntegrityError, transaction

from backend.money import from_minor_units, money
from catalog.models import ProductVariant
from catalog.services.inventory import decrement_stock
from checkout.services.session_payload import join_metadata_value
from checkout.services.stripe_gateway import provider_field
from orders.models import Order
from orders.services.order_service import OrderDraft, OrderLineDraft, create_order
from stores.models import Store

logger = logging.getLogger(__name__)

UNAVAILABLE_TITLE = "Unavailable product"


class FulfillmentError(Exception):
    """Session metadata is unusable; the event can't be turned into an order."""


def _loads(raw, default):
    if raw in (None, ""):
        return default
    try:
        return json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise FulfillmentError(f"Malformed session metadata: {exc}") from exc


def _decimal(raw) -> Decimal:
    try:
        return Decimal(str(raw))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise FulfillmentError(f"Invalid amount in session metadata: {raw!r}") from exc


def _metadata_json(metadata, key, default):
    try:
        raw = join_metadata_value(metadata, key)
    except ValueError as exc:
        raise FulfillmentError(f"Malformed session metadata: {exc}") from exc
    return _loads(raw, default)


def _quoted_amounts(metadata) -> dict:
    return {
        "subtotal": _decimal(metadata.get("subtotal", "0")),
        "discount": _decimal(metadata.get("discountAmount", "0")),
        "tax": _decimal(metadata.get("taxAmount", "0")),
        "shipping": _decimal(metadata.get("shippingAmount", "0")),
        "total": _decimal(metadata.get("total", "0")),
    }


def _charged_amounts(session, quoted: dict) -> dict:
    """
    Amounts the provider actually collected. Sessions that don't report an
    amount_total fall back to the figures quoted at checkout.
    """
    amount_total = provider_field(session, "amount_total")
    if amount_total is None:
        return dict(quoted)

    details = provider_field(session, "total_details")
    amount_subtotal = provider_field(session, "amount_subtotal")
    try:
        return {
            "subtotal": (
                from_minor_units(amount_subtotal)
                if amount_subtotal is not None
                else quoted["subtotal"]
            ),
            "discount": from_minor_units(provider_field(details, "amount_discount", 0) or 0),
            "tax": from_minor_units(provider_field(details, "amount_tax", 0) or 0),
            "shipping": from_minor_units(provider_field(details, "amount_shipping", 0) or 0),
            "total": from_minor_units(amount_total),
        }
    except (TypeError, ValueError) as exc:
        raise FulfillmentError(f"Invalid session amounts: {exc}") from exc


def _quote_note(quoted: dict, charged: dict) -> str:
    if money(quoted["total"]) == money(charged["total"]):
        return ""
    return (
        "Checkout quote: subtotal {subtotal}, discount {discount}, tax {tax}, "
        "shipping {shipping}, total {total}".format(
            **{k: money(v) for k, v in quoted.items()}
        )
    )


def _line_drafts(store, cart_items) -> list[OrderLineDraft]:
    ids = []
    for item in cart_items:
        try:
            ids.append(uuid.UUID(str(item.get("variantId"))))
        except (ValueError, TypeError, AttributeError):
            continue
    variants = {
        str(v.id): v
        for v in ProductVariant.objects.filter(id__in=ids, product__store=store).select_related("product")
    }

    drafts = []
    for item in cart_items:
        variant = variants.get(str(item.get("variantId")))
        quantity = int(item.get("quantity") or 0)
        if quantity <= 0:
            raise FulfillmentError("Cart item with non-positive quantity")
        drafts.append(
            OrderLineDraft(
                product_id=variant.product_id if variant else None,
                variant_id=variant.id if variant else None,
                title=variant.product.name if variant else UNAVAILABLE_TITLE,
                variant_title=variant.name if variant else "",
                price=_decimal(item.get("price")),
                quantity=quantity,
            )
        )
    return drafts


def _store_from_metadata(metadata):
    try:
        store_id = uuid.UUID(str(metadata.get("storeId")))
    except (ValueError, TypeError, AttributeError):
        return None
    return Store.objects.filter(id=store_id).first()


def _customer_email(session) -> str:
    return provider_field(session, "customer_email") or provider_field(
        provider_field(session, "customer_details"), "email"
    ) or ""


def fulfill_completed_session(session, *, expected_store=None) -> Order | None:
    """
    Returns the new Order, or None when the event is a duplicate or not
    something this store should act on (unpaid, foreign store).
    """
    session_id = provider_field(session, "id")
    metadata = dict(provider_field(session, "metadata") or {})

    if not session_id:
        raise FulfillmentError("Session without id")

    if Order.objects.filter(provider_session_id=session_id).exists():
        logger.info("Duplicate session completion ignored", extra={"session_id": session_id})
        return None

    if provider_field(session, "payment_status") != "paid":
        logger.info(
            "Session completed without payment; no order created",
            extra={"session_id": session_id},
        )
        return None

    store = _store_from_metadata(metadata)
    if store is None:
        raise FulfillmentError("Session metadata does not reference a known store")
    if expected_store is not None and store.id != expected_store.id:
        logger.warning(
            "Session belongs to a different store; ignored",
            extra={"session_id": session_id, "store_id": str(expected_store.id)},
        )
        return None

    cart_items = _metadata_json(metadata, "cartItems", [])
    if not cart_items:
        raise FulfillmentError("Session metadata has no cart items")
    discount = _metadata_json(metadata, "discount", None) or {}
    shipping_address = _metadata_json(metadata, "shippingAddress", {})
    billing_address = _metadata_json(metadata, "billingAddress", None) or shipping_address
    quoted = _quoted_amounts(metadata)
    charged = _charged_amounts(session, quoted)

    draft = OrderDraft(
        store=store,
        payment_method=metadata.get("paymentMethod") or Order.METHOD_STRIPE,
        customer_email=_customer_email(session),
        customer_name=metadata.get("customerName") or "",
        customer_phone=metadata.get("customerPhone") or "",
        currency=(provider_field(session, "currency") or store.currency or "USD").upper(),
        subtotal=charged["subtotal"],
        discount=charged["discount"],
        tax=charged["tax"],
        shipping=charged["shipping"],
        total=charged["total"],
        lines=_line_drafts(store, cart_items),
        status=Order.STATUS_PAID,
        payment_status=Order.PAYMENT_PAID,
        financial_status=Order.PAYMENT_PAID,
        shipping_address=shipping_address,
        billing_address=billing_address,
        note=_quote_note(quoted, charged),
        discount_code=discount.get("code") or "",
        discount_id=discount.get("id"),
        provider_session_id=session_id,
    )

    try:
        with transaction.atomic():
            order = create_order(draft)
            for line in draft.lines:
                if line.variant_id:
                    decrement_stock(variant_id=line.variant_id, quantity=line.quantity)
    except IntegrityError:
        if Order.objects.filter(provider_session_id=session_id).exists():
            logger.info("Concurrent session completion ignored", extra={"session_id": session_id})
            return None
        raise

    logger.info(
        "Paid order created from hosted session",
        extra={
            "session_id": session_id,
            "order_id": str(order.id),
            "order_number": order.order_number,
            "store_id": str(store.id),
        },
    )
    return order
