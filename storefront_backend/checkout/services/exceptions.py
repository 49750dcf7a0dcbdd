# checkout/services/exceptions.py

"""
CHECKOUT SERVICE ERRORS

Every failure in the checkout pipeline is terminal for the request.
Each error carries the HTTP status the view responds with and a public
detail message; `context` holds extra, non-secret debugging fields that are
safe to return to the caller.
"""

from __future__ import annotations


class CheckoutError(Exception):
    """Base exception for all checkout failures (client-side by default)."""

    status_code = 400
    default_detail = "Checkout failed"

    def __init__(self, detail: str | None = None, **context):
        self.detail = detail or self.default_detail
        self.context = context
        super().__init__(self.detail)

    def as_payload(self) -> dict:
        payload = {"detail": self.detail}
        if self.context:
            payload["context"] = self.context
        return payload


class StoreNotFoundError(CheckoutError):
    status_code = 404
    default_detail = "Store not found"


class PaymentMethodsNotConfiguredError(CheckoutError):
    default_detail = "Payment methods not configured"


class ProductsNotFoundError(CheckoutError):
    default_detail = "Some products not found"


class InsufficientStockError(CheckoutError):
    default_detail = "Insufficient stock"


class DiscountNotApplicableError(CheckoutError):
    default_detail = "Discount code cannot be applied"


class PaymentMethodUnavailableError(CheckoutError):
    """The store has this payment method switched off."""

    default_detail = "Payment method not enabled"


class ProviderNotConfiguredError(CheckoutError):
    """Session lookup against a provider whose credentials are missing."""

    default_detail = "Payment provider not configured"


class PaymentConfigurationError(CheckoutError):
    """Operator misconfiguration (missing credentials / platform account)."""

    status_code = 500
    default_detail = "Payment processor not configured"


class PaymentMethodNotImplementedError(CheckoutError):
    status_code = 501
    default_detail = "Payment method not implemented yet"


class PaymentProviderError(CheckoutError):
    """Upstream provider failure; never carries provider internals."""

    status_code = 500
    default_detail = "Payment provider error"


class WebhookSignatureError(CheckoutError):
    default_detail = "Invalid webhook signature"


class OrderCreationError(CheckoutError):
    status_code = 500
    default_detail = "Failed to create order"
