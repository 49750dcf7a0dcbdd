# checkout/apps.py

"""
CHECKOUT APP CONFIG

Public storefront checkout (AllowAny):
- request validation
- catalog resolution + pricing
- payment strategy dispatch (nuvi / stripe / paypal / manual)
- hosted-session status polling + confirmation webhooks
"""

from django.apps import AppConfig


class CheckoutAppConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "checkout"
    verbose_name = "Storefront Checkout"
