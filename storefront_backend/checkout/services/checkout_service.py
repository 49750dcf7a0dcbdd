# checkout/services/checkout_service.py

"""
CHECKOUT ORCHESTRATION

Strict sequential pipeline, one request at a time:
    store -> payment methods configured -> catalog + stock -> pricing -> strategy

Every failure raises a CheckoutError subclass and ends the request; nothing
is retried. The only write on this path is the manual order.
"""

from __future__ import annotations

import logging

from checkout.services.catalog_resolver import (
    ensure_payment_methods_configured,
    resolve_lines,
    resolve_store,
)
from checkout.services.config import CheckoutConfig
from checkout.services.exceptions import CheckoutError
from checkout.services.pricing import price_cart
from checkout.services.status import SessionStatusPoller
from checkout.services.strategies import build_strategy
from checkout.services.stripe_gateway import StripeGateway
from checkout.services.types import CheckoutContext, CheckoutRequest, SessionResult

logger = logging.getLogger(__name__)


class CheckoutService:
    def __init__(self, *, config: CheckoutConfig, gateway_factory=StripeGateway):
        self.config = config
        self.gateway_factory = gateway_factory
        self.poller = SessionStatusPoller(config=config, gateway_factory=gateway_factory)

    @classmethod
    def from_settings(cls, **kwargs) -> "CheckoutService":
        return cls(config=CheckoutConfig.from_settings(), **kwargs)

    def checkout(self, subdomain: str, request: CheckoutRequest) -> SessionResult:
        store = resolve_store(subdomain)
        ensure_payment_methods_configured(store)

        lines = resolve_lines(store, request)
        priced = price_cart(
            store, lines, discount_code=request.discount_code, config=self.config
        )

        ctx = CheckoutContext(
            store=store,
            subdomain=store.subdomain,
            request=request,
            priced=priced,
            payment_settings=store.payment_settings,
            currency=(store.currency or self.config.currency_fallback).upper(),
        )
        strategy = build_strategy(
            request.payment_method,
            config=self.config,
            gateway_factory=self.gateway_factory,
        )
        result = strategy.create_session(ctx)

        logger.info(
            "Checkout completed",
            extra={
                "store_id": str(store.id),
                "payment_method": result.payment_method,
                "lines": len(lines),
                "discount_applied": priced.discount_applied,
            },
        )
        return result

    def session_status(self, subdomain: str, session_id: str, payment_hint: str | None = None) -> dict:
        if not str(session_id or "").strip():
            raise CheckoutError("session_id is required")
        store = resolve_store(subdomain)
        return self.poller.poll(store, session_id, payment_hint)
