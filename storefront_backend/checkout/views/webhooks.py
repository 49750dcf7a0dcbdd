# checkout/views/webhooks.py

"""
HOSTED SESSION WEBHOOKS

POST /api/webhooks/nuvi/                          (platform account, Connect events)
POST /api/stores/<subdomain>/webhooks/stripe/     (store's own Stripe account)

Rules:
- Signature verified against the raw body before anything else
- Only checkout.session.completed creates an order; other events are acked
- Duplicates are acked with 200 (order creation is idempotent on session id)
- Unusable metadata is logged and acked (a redelivery can't fix it);
  unexpected errors propagate so the provider retries
"""

from __future__ import annotations

import logging

from rest_framework import status
from rest_framework.parsers import JSONParser
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from backend.throttles import WebhookThrottle
from checkout.services.config import CheckoutConfig
from checkout.services.exceptions import WebhookSignatureError
from checkout.services.fulfillment import FulfillmentError, fulfill_completed_session
from checkout.services.stripe_gateway import construct_webhook_event, provider_field
from stores.services.ownership import StoreNotFound, get_active_store

logger = logging.getLogger(__name__)

SESSION_COMPLETED = "checkout.session.completed"


class _SessionWebhookView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    parser_classes = [JSONParser]
    throttle_classes = [WebhookThrottle]

    source = ""

    def handle_event(self, request, secret: str, *, store=None) -> Response:
        raw_body = getattr(request, "body", b"") or b""
        signature = request.headers.get("Stripe-Signature")

        try:
            event = construct_webhook_event(raw_body, signature, secret)
        except WebhookSignatureError as exc:
            logger.warning("Invalid webhook signature", extra={"source": self.source})
            return Response({"received": False, "detail": exc.detail}, status=status.HTTP_400_BAD_REQUEST)

        event_type = provider_field(event, "type")
        event_id = provider_field(event, "id")
        logger.info("Webhook received", extra={"source": self.source, "event_id": event_id, "type": event_type})

        if event_type != SESSION_COMPLETED:
            return Response({"received": True, "detail": "Ignored"}, status=status.HTTP_200_OK)

        session = provider_field(provider_field(event, "data"), "object")
        try:
            order = fulfill_completed_session(session, expected_store=store)
        except FulfillmentError as exc:
            logger.error(
                "Session completion could not be fulfilled",
                extra={"source": self.source, "event_id": event_id, "reason": str(exc)},
            )
            return Response({"received": True, "detail": "Unprocessable session"}, status=status.HTTP_200_OK)

        if order is None:
            return Response({"received": True, "detail": "Already processed"}, status=status.HTTP_200_OK)

        return Response(
            {"received": True, "orderId": str(order.id), "orderNumber": order.order_number},
            status=status.HTTP_200_OK,
        )


class NuviWebhookView(_SessionWebhookView):
    source = "nuvi"

    def post(self, request, *args, **kwargs):
        config = CheckoutConfig.from_settings()
        if not config.nuvi_webhook_secret:
            logger.error("Nuvi webhook received but NUVI_WEBHOOK_SECRET is not configured")
            return Response(
                {"received": False, "detail": "Webhook not configured"},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        return self.handle_event(request, config.nuvi_webhook_secret)


class StoreStripeWebhookView(_SessionWebhookView):
    source = "stripe"

    def post(self, request, subdomain):
        store = get_active_store(subdomain)
        if store is None:
            raise StoreNotFound()

        secret = store.payment_settings.stripe.webhook_secret
        if not secret:
            logger.error("Stripe webhook received but the store has no webhook secret", extra={"store_id": str(store.id)})
            return Response(
                {"received": False, "detail": "Webhook not configured"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        return self.handle_event(request, secret, store=store)
