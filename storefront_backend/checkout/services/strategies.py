# checkout/services/strategies.py

"""
PAYMENT STRATEGIES

One CheckoutStrategy per payment-method tag, looked up in STRATEGIES.
Each receives the fully priced CheckoutContext and returns a SessionResult;
adding a provider means adding one class + one registry entry.

- nuvi:   hosted session on the platform's connected account, platform fee in metadata
- stripe: hosted session on the store's own Stripe account
- paypal: not implemented (501)
- manual: pending bank-transfer order written locally, no provider call
"""

from __future__ import annotations

import logging

from checkout.services import session_payload
from checkout.services.exceptions import (
    OrderCreationError,
    PaymentConfigurationError,
    PaymentMethodNotImplementedError,
    PaymentMethodUnavailableError,
)
from checkout.services.stripe_gateway import provider_field
from backend.money import money
from checkout.services.types import CheckoutContext, SessionResult
from orders.models import Order
from orders.services.order_service import (
    OrderDraft,
    OrderLineDraft,
    OrderNumberExhaustedError,
    create_order,
)
from stores.services.payment_settings import (
    METHOD_MANUAL,
    METHOD_NUVI,
    METHOD_PAYPAL,
    METHOD_STRIPE,
)

logger = logging.getLogger(__name__)

MANUAL_ORDER_NOTE = "Payment pending - Bank transfer"
MANUAL_ORDER_MESSAGE = (
    "Order created. Please complete the bank transfer using the details provided."
)


class CheckoutStrategy:
    method = ""
    label = ""

    def __init__(self, *, config, gateway_factory):
        self.config = config
        self.gateway_factory = gateway_factory

    def ensure_enabled(self, ctx: CheckoutContext) -> None:
        if not ctx.payment_settings.for_method(self.method).enabled:
            logger.info(
                "Checkout rejected: payment method disabled",
                extra={"store_id": str(ctx.store.id), "payment_method": self.method},
            )
            raise PaymentMethodUnavailableError(
                f"{self.label} payments are not enabled for this store",
                paymentMethod=self.method,
            )

    def create_session(self, ctx: CheckoutContext) -> SessionResult:
        raise NotImplementedError


class HostedSessionStrategy(CheckoutStrategy):
    """Shared flow for strategies that redirect to a provider-hosted page."""

    def gateway_for(self, ctx: CheckoutContext):
        raise NotImplementedError

    def session_params(self, ctx: CheckoutContext) -> dict:
        raise NotImplementedError

    def create_session(self, ctx: CheckoutContext) -> SessionResult:
        self.ensure_enabled(ctx)
        gateway = self.gateway_for(ctx)
        session = gateway.create_checkout_session(self.session_params(ctx))

        session_id = provider_field(session, "id")
        logger.info(
            "Checkout session created",
            extra={
                "store_id": str(ctx.store.id),
                "payment_method": self.method,
                "session_id": session_id,
                "total": str(money(ctx.priced.totals.total)),
            },
        )
        return SessionResult(
            payment_method=self.method,
            body={
                "sessionId": session_id,
                "redirectUrl": provider_field(session, "url"),
                "paymentMethod": self.method,
                "currency": ctx.currency,
                "appliedDiscount": ctx.priced.discount.code if ctx.priced.discount_applied else None,
                "totals": ctx.priced.totals.as_report(),
            },
        )


class NuviStrategy(HostedSessionStrategy):
    method = METHOD_NUVI
    label = "Nuvi"

    def gateway_for(self, ctx: CheckoutContext):
        if not self.config.platform_configured:
            logger.error(
                "Nuvi checkout requested but the platform account is not configured",
                extra={"store_id": str(ctx.store.id)},
            )
            raise PaymentConfigurationError()
        return self.gateway_factory(
            self.config.platform_stripe_secret_key,
            stripe_account=self.config.nuvi_connected_account_id,
        )

    def session_params(self, ctx: CheckoutContext) -> dict:
        fee = session_payload.platform_fee_cents(
            ctx.priced.totals.total, ctx.payment_settings.nuvi, self.config
        )
        return session_payload.build_session_params(
            ctx,
            self.config,
            payment_method=self.method,
            success=session_payload.success_url(
                self.config, ctx.subdomain, payment_method=self.method
            ),
            metadata=session_payload.build_metadata(
                ctx, payment_method=self.method, fee_cents=fee
            ),
        )


class StripeStrategy(HostedSessionStrategy):
    method = METHOD_STRIPE
    label = "Stripe"

    def gateway_for(self, ctx: CheckoutContext):
        stripe_settings = ctx.payment_settings.stripe
        if not stripe_settings.is_configured:
            logger.error(
                "Stripe checkout requested but the store has no secret key",
                extra={"store_id": str(ctx.store.id)},
            )
            raise PaymentConfigurationError()
        return self.gateway_factory(stripe_settings.secret_key)

    def session_params(self, ctx: CheckoutContext) -> dict:
        params = session_payload.build_session_params(
            ctx,
            self.config,
            payment_method=self.method,
            success=session_payload.success_url(self.config, ctx.subdomain),
            metadata=session_payload.build_metadata(ctx, payment_method=self.method),
        )
        # A store discount and a provider promo code never combine.
        params["allow_promotion_codes"] = not ctx.priced.discount_applied
        params["invoice_creation"] = {"enabled": True}
        return params


class PayPalStrategy(CheckoutStrategy):
    method = METHOD_PAYPAL
    label = "PayPal"

    def create_session(self, ctx: CheckoutContext) -> SessionResult:
        # Not implemented for any store, whether or not it has PayPal switched on.
        raise PaymentMethodNotImplementedError(
            "PayPal integration coming soon", paymentMethod=self.method
        )


class ManualStrategy(CheckoutStrategy):
    method = METHOD_MANUAL
    label = "Manual"

    def _draft(self, ctx: CheckoutContext) -> OrderDraft:
        req = ctx.request
        totals = ctx.priced.totals
        discount = ctx.priced.discount
        return OrderDraft(
            store=ctx.store,
            payment_method=self.method,
            customer_email=req.customer.email,
            customer_name=req.customer.name,
            customer_phone=req.customer.phone,
            currency=ctx.currency,
            subtotal=totals.subtotal,
            discount=totals.discount,
            tax=totals.tax,
            shipping=totals.shipping,
            total=totals.total,
            status=Order.STATUS_PENDING_PAYMENT,
            payment_status=Order.PAYMENT_PENDING,
            financial_status=Order.PAYMENT_PENDING,
            shipping_address=req.shipping_address.to_dict(),
            billing_address=req.effective_billing_address.to_dict(),
            note=MANUAL_ORDER_NOTE,
            discount_code=discount.code if discount else "",
            discount_id=discount.id if discount else None,
            lines=[
                OrderLineDraft(
                    product_id=line.product.id,
                    variant_id=line.variant.id,
                    title=line.title,
                    variant_title=line.variant_title,
                    price=line.unit_price,
                    quantity=line.quantity,
                )
                for line in ctx.priced.lines
            ],
        )

    def create_session(self, ctx: CheckoutContext) -> SessionResult:
        self.ensure_enabled(ctx)

        try:
            order = create_order(self._draft(ctx))
        except OrderNumberExhaustedError as exc:
            logger.error(
                "Manual order not created: order numbers exhausted",
                extra={"store_id": str(ctx.store.id)},
            )
            raise OrderCreationError() from exc

        return SessionResult(
            payment_method=self.method,
            body={
                "orderId": str(order.id),
                "orderNumber": order.order_number,
                "paymentMethod": self.method,
                "bankDetails": dict(ctx.payment_settings.manual.bank_details),
                "total": str(order.total_price),
                "currency": order.currency,
                "message": MANUAL_ORDER_MESSAGE,
                "redirectUrl": f"/s/{ctx.subdomain}/orders/{order.order_number}/confirmation?payment=manual",
                "appliedDiscount": order.discount_code or None,
                "totals": ctx.priced.totals.as_report(),
            },
        )


STRATEGIES = {
    cls.method: cls
    for cls in (NuviStrategy, StripeStrategy, PayPalStrategy, ManualStrategy)
}


def build_strategy(method: str, *, config, gateway_factory) -> CheckoutStrategy:
    try:
        strategy_cls = STRATEGIES[method]
    except KeyError:
        raise PaymentMethodUnavailableError(
            "Unsupported payment method", paymentMethod=method
        ) from None
    return strategy_cls(config=config, gateway_factory=gateway_factory)
