# checkout/urls.py
"""
CHECKOUT URLS (mounted under /api/stores/<subdomain>/)

- POST/GET checkout/
- POST     webhooks/stripe/

The platform webhook (/api/webhooks/nuvi/) is not store-scoped and is
mounted in backend/urls.py.
"""

from django.urls import path

from checkout.views import StoreCheckoutView, StoreStripeWebhookView

urlpatterns = [
    path("checkout/", StoreCheckoutView.as_view(), name="store-checkout"),
    path("webhooks/stripe/", StoreStripeWebhookView.as_view(), name="store-stripe-webhook"),
]
