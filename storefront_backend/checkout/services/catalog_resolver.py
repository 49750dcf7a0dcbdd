# checkout/services/catalog_resolver.py

"""
CATALOG RESOLVER

Turns a validated checkout request into store-scoped catalog rows.

Hard rules:
- Tenant isolation: a variant only resolves if its product belongs to the
  store being checked out (and is active). Another store's variant id is
  indistinguishable from a missing one.
- Distinct ids are counted; duplicate cart lines for one variant are fine.
- Stock is checked here, before pricing and before any provider call.
  Quantities of duplicate lines are summed per variant.
"""

from __future__ import annotations

import logging
import uuid

from catalog.models import ProductVariant
from checkout.services.exceptions import (
    InsufficientStockError,
    PaymentMethodsNotConfiguredError,
    ProductsNotFoundError,
    StoreNotFoundError,
)
from checkout.services.types import CheckoutRequest, ResolvedLine
from stores.services.ownership import get_active_store

logger = logging.getLogger(__name__)


def _normalize_id(value) -> str | None:
    try:
        return str(uuid.UUID(str(value)))
    except (ValueError, TypeError, AttributeError):
        return None


def resolve_store(subdomain: str):
    store = get_active_store(subdomain)
    if store is None:
        raise StoreNotFoundError(subdomain=str(subdomain or ""))
    return store


def ensure_payment_methods_configured(store) -> None:
    if not store.payment_settings.any_enabled():
        logger.info(
            "Checkout rejected: no payment methods enabled",
            extra={"store_id": str(store.id)},
        )
        raise PaymentMethodsNotConfiguredError()


def resolve_lines(store, request: CheckoutRequest) -> tuple:
    requested = []
    for raw in request.distinct_variant_ids:
        key = _normalize_id(raw) or raw
        if key not in requested:
            requested.append(key)
    valid_ids = [key for key in requested if _normalize_id(key)]

    variants = (
        ProductVariant.objects.filter(
            id__in=valid_ids,
            product__store=store,
            product__is_active=True,
        )
        .select_related("product")
    )
    by_id = {str(v.id): v for v in variants}

    if len(by_id) != len(requested):
        logger.info(
            "Checkout rejected: products not found",
            extra={
                "store_id": str(store.id),
                "requested": len(requested),
                "found": len(by_id),
            },
        )
        raise ProductsNotFoundError(
            requested=list(requested),
            found=[key for key in requested if key in by_id],
            subdomain=store.subdomain,
            storeId=str(store.id),
        )

    lines = []
    wanted: dict[str, int] = {}
    for item in request.items:
        key = _normalize_id(item.variant_id)
        variant = by_id[key]
        wanted[key] = wanted.get(key, 0) + int(item.quantity)

        if variant.track_quantity and not variant.has_stock_for(wanted[key]):
            raise InsufficientStockError(
                f"Insufficient stock for {variant.product.name}",
                variantId=key,
                available=int(variant.stock or 0),
                requested=wanted[key],
            )

        lines.append(ResolvedLine(variant=variant, quantity=int(item.quantity)))

    return tuple(lines)
