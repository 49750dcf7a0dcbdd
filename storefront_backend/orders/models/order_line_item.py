# orders/models/order_line_item.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models


class OrderLineItem(models.Model):
    """
    Denormalised line item.

    title / variant_title / price are captured at purchase time; later catalog
    edits (or deletion) never change them. product/variant links are kept for
    navigation only and survive as NULL if the catalog row is removed.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="line_items",
    )

    product = models.ForeignKey(
        "catalog.Product",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_line_items",
    )
    variant = models.ForeignKey(
        "catalog.ProductVariant",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_line_items",
    )

    title = models.CharField(max_length=255)
    variant_title = models.CharField(max_length=255, blank=True, default="")

    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    total_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text="quantity * price (server computed)",
    )

    position = models.PositiveIntegerField(default=1)

    class Meta:
        ordering = ["order", "position"]

    def clean(self):
        if self.quantity is None or int(self.quantity) <= 0:
            raise ValidationError("quantity must be >= 1")

        if self.price is None:
            raise ValidationError("price is required")

        expected = (Decimal(self.quantity) * Decimal(self.price)).quantize(
            Decimal("0.01")
        )
        self.total_price = expected

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.title} x{self.quantity}"
