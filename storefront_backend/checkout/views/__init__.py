# checkout/views/__init__.py

from .checkout import StoreCheckoutView
from .webhooks import NuviWebhookView, StoreStripeWebhookView

__all__ = ["StoreCheckoutView", "NuviWebhookView", "StoreStripeWebhookView"]
