# checkout/services/stripe_gateway.py

"""
STRIPE GATEWAY

Thin wrapper over stripe-python's Checkout Session API. Credentials are
passed per request (api_key / stripe_account) and never set globally, since
each store may bring its own account.

Hard rules:
- stripe.StripeError never leaves this module; it is logged with context and
  re-raised as PaymentProviderError carrying a generic message.
- No secret material is logged.
"""

from __future__ import annotations

import logging

import stripe

from checkout.services.exceptions import PaymentProviderError, WebhookSignatureError

logger = logging.getLogger(__name__)


class StripeGateway:
    def __init__(self, api_key: str, *, stripe_account: str | None = None):
        if not api_key:
            raise ValueError("api_key is required")
        self._api_key = api_key
        self._stripe_account = stripe_account or None

    def _request_options(self) -> dict:
        opts = {"api_key": self._api_key}
        if self._stripe_account:
            opts["stripe_account"] = self._stripe_account
        return opts

    def create_checkout_session(self, params: dict):
        try:
            return stripe.checkout.Session.create(**params, **self._request_options())
        except stripe.StripeError as exc:
            logger.exception(
                "Stripe checkout session creation failed",
                extra={
                    "error_type": type(exc).__name__,
                    "stripe_account": self._stripe_account,
                    "request_id": getattr(exc, "request_id", None),
                },
            )
            raise PaymentProviderError("Failed to create checkout session") from exc

    def retrieve_checkout_session(self, session_id: str):
        try:
            return stripe.checkout.Session.retrieve(session_id, **self._request_options())
        except stripe.StripeError as exc:
            logger.exception(
                "Stripe checkout session lookup failed",
                extra={
                    "error_type": type(exc).__name__,
                    "session_id": session_id,
                    "stripe_account": self._stripe_account,
                },
            )
            raise PaymentProviderError("Failed to retrieve checkout session") from exc


def construct_webhook_event(payload: bytes, signature: str | None, secret: str):
    if not signature or not secret:
        raise WebhookSignatureError()
    try:
        return stripe.Webhook.construct_event(payload, signature, secret)
    except ValueError as exc:
        raise WebhookSignatureError("Invalid webhook payload") from exc
    except stripe.SignatureVerificationError as exc:
        raise WebhookSignatureError() from exc


def provider_field(obj, name: str, default=None):
    """Read a field from a StripeObject or a plain dict (webhook payloads, fakes)."""
    if obj is None:
        return default
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)
