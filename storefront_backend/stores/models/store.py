# stores/models/store.py

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import RegexValidator
from django.db import models


class Store(models.Model):
    """
    A storefront tenant.

    Guarantees:
    - exactly one store per subdomain
    - currency is a 3-letter ISO code, fixed for the duration of a checkout
    - payment_methods is only written through the payment-settings boundary
      (stores.serializers.PaymentSettingsSerializer); readers consume the typed
      value from `payment_settings`.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="stores",
    )

    name = models.CharField(max_length=255)

    subdomain = models.CharField(
        max_length=63,
        unique=True,
        validators=[
            RegexValidator(
                r"^[a-z0-9](?:[a-z0-9-]*[a-z0-9])?$",
                "Subdomain may contain lowercase letters, digits and hyphens.",
            )
        ],
    )

    currency = models.CharField(max_length=3, default="USD")

    # Stored shape: {"stripe": {"enabled": bool, "settings": {...}}, "nuvi": ..., ...}
    payment_methods = models.JSONField(default=dict, blank=True)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def clean(self):
        code = (self.currency or "").strip()
        if len(code) != 3 or not code.isalpha():
            raise ValidationError({"currency": "currency must be a 3-letter ISO code"})
        self.currency = code.upper()

    @property
    def payment_settings(self):
        from stores.services.payment_settings import PaymentSettings

        return PaymentSettings.from_dict(self.payment_methods)

    def __str__(self):
        return f"{self.name} ({self.subdomain})"
