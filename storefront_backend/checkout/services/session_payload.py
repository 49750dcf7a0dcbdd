# checkout/services/session_payload.py

"""
HOSTED SESSION PAYLOAD

Builds the Checkout Session parameters shared by the platform (nuvi) and
merchant (stripe) strategies: line items, the flat shipping option, redirect
URLs and string-only metadata.

Amounts go to the provider in minor units (cents). The hosted session charges
line items + shipping; tax and any store discount travel in metadata. The
webhook records what was actually charged.

Metadata values longer than the provider allows are split across numbered
keys (see split_metadata_value) and joined again on the webhook side.
"""

from __future__ import annotations

import json
from decimal import Decimal
from urllib.parse import urlparse

from backend.money import money, to_minor_units
from checkout.services.exceptions import CheckoutError
from checkout.services.types import CheckoutContext

HUNDRED = Decimal("100")
SESSION_ID_PLACEHOLDER = "{CHECKOUT_SESSION_ID}"

# Provider limits on Checkout Session metadata.
METADATA_VALUE_LIMIT = 500
METADATA_MAX_KEYS = 50

SPLIT_METADATA_KEYS = ("shippingAddress", "billingAddress", "cartItems", "discount")


def _is_absolute_http_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def product_images(product, config) -> list[str]:
    out = []
    for raw in product.images or []:
        url = raw.get("url") if isinstance(raw, dict) else raw
        url = str(url or "").strip()
        if not url:
            continue
        if url.startswith("/"):
            url = config.absolute_url(url)
        if not _is_absolute_http_url(url):
            continue
        out.append(url)
        if len(out) >= config.max_product_images:
            break
    return out


def build_line_items(lines, *, currency: str, config) -> list[dict]:
    items = []
    for line in lines:
        product_data = {
            "name": line.title,
            "metadata": {
                "productId": str(line.product.id),
                "variantId": str(line.variant.id),
            },
        }
        if line.variant_title and line.variant_title != line.title:
            product_data["description"] = line.variant_title

        images = product_images(line.product, config)
        if images:
            product_data["images"] = images

        items.append(
            {
                "price_data": {
                    "currency": currency.lower(),
                    "product_data": product_data,
                    "unit_amount": to_minor_units(line.unit_price),
                },
                "quantity": line.quantity,
            }
        )
    return items


def build_shipping_options(totals, *, currency: str, config) -> list[dict]:
    return [
        {
            "shipping_rate_data": {
                "type": "fixed_amount",
                "fixed_amount": {
                    "amount": to_minor_units(totals.shipping),
                    "currency": currency.lower(),
                },
                "display_name": config.shipping_display_name,
                "delivery_estimate": {
                    "minimum": {"unit": "business_day", "value": config.delivery_min_business_days},
                    "maximum": {"unit": "business_day", "value": config.delivery_max_business_days},
                },
            }
        }
    ]


def success_url(config, subdomain: str, *, payment_method: str | None = None) -> str:
    url = config.absolute_url(
        f"/s/{subdomain}/checkout/success?session_id={SESSION_ID_PLACEHOLDER}"
    )
    if payment_method:
        url += f"&payment={payment_method}"
    return url


def cancel_url(config, subdomain: str) -> str:
    return config.absolute_url(f"/s/{subdomain}/cart")


def platform_fee_cents(total: Decimal, nuvi_settings, config) -> int:
    commission = nuvi_settings.commission_percent
    if commission is None:
        commission = config.default_commission_percent
    fixed_fee = nuvi_settings.fixed_fee
    if fixed_fee is None:
        fixed_fee = config.default_fixed_fee

    fee = Decimal(total) * Decimal(commission) / HUNDRED + Decimal(fixed_fee)
    return to_minor_units(fee)


def merchant_payout(total: Decimal, fee_cents: int) -> Decimal:
    return Decimal(total) - Decimal(fee_cents) / HUNDRED


def _discount_snapshot(priced) -> dict | None:
    if not priced.discount_applied:
        return None
    d = priced.discount
    return {
        "id": str(d.id),
        "code": d.code,
        "type": d.discount_type,
        "value": str(money(d.value)),
        "amount": str(money(priced.totals.discount)),
    }


def _compact_json(value) -> str:
    return json.dumps(value, separators=(",", ":"))


def _is_split_key(key: str) -> bool:
    for base in SPLIT_METADATA_KEYS:
        if key in (base, f"{base}Parts"):
            return True
        suffix = key[len(base) + 1 :] if key.startswith(f"{base}_") else ""
        if suffix.isdigit():
            return True
    return False


def split_metadata_value(key: str, value: str, limit: int = METADATA_VALUE_LIMIT) -> dict:
    """
    Provider metadata values are capped at `limit` characters. Longer values are
    written as key_0..key_n with the part count under `{key}Parts`.
    """
    if len(value) <= limit:
        return {key: value}
    parts = [value[i : i + limit] for i in range(0, len(value), limit)]
    out = {f"{key}_{n}": part for n, part in enumerate(parts)}
    out[f"{key}Parts"] = str(len(parts))
    return out


def join_metadata_value(metadata: dict, key: str):
    """Inverse of split_metadata_value. Returns None when the key is absent."""
    count = metadata.get(f"{key}Parts")
    if count in (None, ""):
        return metadata.get(key)
    count = int(count)
    parts = [metadata.get(f"{key}_{n}") for n in range(count)]
    if any(part is None for part in parts):
        raise ValueError(f"Metadata value '{key}' is missing parts")
    return "".join(parts)


def build_metadata(ctx: CheckoutContext, *, payment_method: str, fee_cents: int = 0) -> dict:
    """
    Provider metadata must be flat string->string. Caller-supplied keys go in
    first so they can never overwrite the keys the webhook relies on; a caller
    key that would change how a split value is reassembled is dropped.
    """
    req = ctx.request
    totals = ctx.priced.totals
    metadata = {
        str(k): str(v)
        for k, v in (req.metadata or {}).items()
        if not _is_split_key(str(k))
    }
    metadata.update(
        {
            "storeId": str(ctx.store.id),
            "paymentMethod": payment_method,
            "platformFee": str(fee_cents),
            "merchantPayout": str(money(merchant_payout(totals.total, fee_cents))),
            "subtotal": str(money(totals.subtotal)),
            "discountAmount": str(money(totals.discount)),
            "taxAmount": str(money(totals.tax)),
            "shippingAmount": str(money(totals.shipping)),
            "total": str(money(totals.total)),
            "customerName": req.customer.name,
            "customerPhone": req.customer.phone or "",
        }
    )
    metadata.update(
        split_metadata_value("shippingAddress", _compact_json(req.shipping_address.to_dict()))
    )
    if req.billing_address is not None and req.billing_address != req.shipping_address:
        metadata.update(
            split_metadata_value("billingAddress", _compact_json(req.billing_address.to_dict()))
        )
    metadata.update(
        split_metadata_value(
            "cartItems",
            _compact_json(
                [
                    {
                        "variantId": str(line.variant.id),
                        "quantity": line.quantity,
                        "price": str(money(line.unit_price)),
                    }
                    for line in ctx.priced.lines
                ]
            ),
        )
    )
    discount = _discount_snapshot(ctx.priced)
    if discount is not None:
        metadata.update(split_metadata_value("discount", _compact_json(discount)))

    if len(metadata) > METADATA_MAX_KEYS:
        raise CheckoutError(
            "Cart is too large for hosted checkout",
            lines=len(ctx.priced.lines),
        )
    return metadata


def build_session_params(
    ctx: CheckoutContext,
    config,
    *,
    payment_method: str,
    success: str,
    metadata: dict,
) -> dict:
    return {
        "mode": "payment",
        "payment_method_types": ["card"],
        "line_items": build_line_items(ctx.priced.lines, currency=ctx.currency, config=config),
        "shipping_address_collection": {
            "allowed_countries": list(config.shipping_allowed_countries),
        },
        "shipping_options": build_shipping_options(
            ctx.priced.totals, currency=ctx.currency, config=config
        ),
        "customer_email": ctx.request.customer.email,
        "success_url": success,
        "cancel_url": cancel_url(config, ctx.subdomain),
        "metadata": metadata,
    }
