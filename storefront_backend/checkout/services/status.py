# checkout/services/status.py

"""
SESSION STATUS POLLER

GET /checkout?session_id=...&payment=... lands here after the customer is
redirected back from a hosted page.

Which account owns the session:
- hint "nuvi" / "stripe" -> that one
- no hint -> platform (nuvi) if nuvi is enabled and stripe is not, else the
  store's own stripe account
"""

from __future__ import annotations

import logging

from checkout.services.exceptions import CheckoutError, ProviderNotConfiguredError
from checkout.services.stripe_gateway import provider_field
from backend.money import from_minor_units
from stores.services.payment_settings import METHOD_NUVI, METHOD_STRIPE

logger = logging.getLogger(__name__)


class SessionStatusPoller:
    def __init__(self, *, config, gateway_factory):
        self.config = config
        self.gateway_factory = gateway_factory

    @staticmethod
    def session_owner(payment_settings, hint: str | None) -> str:
        hint = str(hint or "").strip().lower()
        if hint in (METHOD_NUVI, METHOD_STRIPE):
            return hint
        if hint:
            raise CheckoutError(
                f"Payment method '{hint}' has no hosted session", paymentMethod=hint
            )
        if payment_settings.nuvi.enabled and not payment_settings.stripe.enabled:
            return METHOD_NUVI
        return METHOD_STRIPE

    def _gateway(self, owner: str, store):
        if owner == METHOD_NUVI:
            if not self.config.platform_configured:
                logger.error(
                    "Session lookup on platform account but it is not configured",
                    extra={"store_id": str(store.id)},
                )
                raise ProviderNotConfiguredError("Nuvi payments not configured")
            return self.gateway_factory(
                self.config.platform_stripe_secret_key,
                stripe_account=self.config.nuvi_connected_account_id,
            )

        secret_key = store.payment_settings.stripe.secret_key
        if not secret_key:
            raise ProviderNotConfiguredError("Stripe not configured")
        return self.gateway_factory(secret_key)

    def poll(self, store, session_id: str, payment_hint: str | None = None) -> dict:
        session_id = str(session_id or "").strip()
        if not session_id:
            raise CheckoutError("session_id is required")

        owner = self.session_owner(store.payment_settings, payment_hint)
        session = self._gateway(owner, store).retrieve_checkout_session(session_id)

        amount_total = provider_field(session, "amount_total")
        email = provider_field(session, "customer_email") or provider_field(
            provider_field(session, "customer_details"), "email"
        )
        currency = provider_field(session, "currency") or ""

        return {
            "sessionId": session_id,
            "paymentMethod": owner,
            "status": provider_field(session, "payment_status"),
            "customerEmail": email,
            "amountTotal": (
                str(from_minor_units(amount_total)) if amount_total is not None else None
            ),
            "currency": currency.upper() or None,
        }
