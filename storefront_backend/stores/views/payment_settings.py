# stores/views/payment_settings.py

"""
OWNER PAYMENT SETTINGS

GET /api/stores/<subdomain>/payment-settings/
PUT /api/stores/<subdomain>/payment-settings/

Rules:
- Authenticated store owner only (ownership resolved once per request)
- PUT replaces the whole settings document; omitted secrets keep stored values
- Secrets are never returned
"""

from __future__ import annotations

import logging

from django.db import transaction
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.parsers import JSONParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from stores.models import Store
from stores.serializers import PaymentSettingsSerializer
from stores.services.ownership import resolve_owned_store

logger = logging.getLogger(__name__)


class StorePaymentSettingsView(APIView):
    permission_classes = [IsAuthenticated]
    parser_classes = [JSONParser]

    @extend_schema(
        tags=["Stores"],
        responses={
            200: OpenApiResponse(description="Payment settings (secrets masked)"),
            404: OpenApiResponse(description="Store not found"),
        },
    )
    def get(self, request, subdomain):
        store = resolve_owned_store(subdomain, request.user)
        return Response(
            store.payment_settings.to_public_dict(), status=status.HTTP_200_OK
        )

    @extend_schema(
        tags=["Stores"],
        request=PaymentSettingsSerializer,
        responses={
            200: OpenApiResponse(description="Updated payment settings (secrets masked)"),
            400: OpenApiResponse(description="Validation error"),
            404: OpenApiResponse(description="Store not found"),
        },
    )
    @transaction.atomic
    def put(self, request, subdomain):
        store = resolve_owned_store(subdomain, request.user)

        s = PaymentSettingsSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        # Lock the row so two concurrent edits cannot interleave secret merges.
        store = Store.objects.select_for_update().get(id=store.id)
        updated = s.to_payment_settings().with_secrets_from(store.payment_settings)

        store.payment_methods = updated.to_dict()
        store.save(update_fields=["payment_methods", "updated_at"])

        logger.info(
            "Payment settings updated",
            extra={"store_id": str(store.id), "enabled": updated.enabled_methods()},
        )
        return Response(updated.to_public_dict(), status=status.HTTP_200_OK)
