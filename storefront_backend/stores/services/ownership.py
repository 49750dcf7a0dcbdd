# stores/services/ownership.py

"""
STORE LOOKUPS

- get_active_store(): public storefront lookup by subdomain (checkout, discounts)
- resolve_owned_store(): owner-facing lookup, called once per request.
  Accepts either a subdomain or a store UUID; anything the acting user does
  not own is indistinguishable from "does not exist".
"""

from __future__ import annotations

import uuid

from django.db.models import Q
from rest_framework.exceptions import NotFound

from stores.models import Store


class StoreNotFound(NotFound):
    default_detail = "Store not found"


def _as_uuid(value) -> uuid.UUID | None:
    try:
        return uuid.UUID(str(value))
    except (ValueError, TypeError, AttributeError):
        return None


def get_active_store(subdomain: str) -> Store | None:
    key = str(subdomain or "").strip().lower()
    if not key:
        return None
    return Store.objects.filter(subdomain=key, is_active=True).first()


def resolve_owned_store(subdomain_or_id, acting_user) -> Store:
    if acting_user is None or not getattr(acting_user, "is_authenticated", False):
        raise StoreNotFound()

    key = str(subdomain_or_id or "").strip()
    if not key:
        raise StoreNotFound()

    match = Q(subdomain=key.lower())
    store_uuid = _as_uuid(key)
    if store_uuid is not None:
        match |= Q(id=store_uuid)

    store = Store.objects.filter(match, owner=acting_user).first()
    if store is None:
        raise StoreNotFound()
    return store
