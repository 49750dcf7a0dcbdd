# catalog/models/variant.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models


class ProductVariant(models.Model):
    """
    Purchasable SKU-level option of a Product.

    STOCK RULE:
    - if track_quantity is False the variant is never out of stock
    - if track_quantity is True, a checkout may not request more than `stock`
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product = models.ForeignKey(
        "catalog.Product",
        on_delete=models.CASCADE,
        related_name="variants",
    )

    name = models.CharField(max_length=255)
    sku = models.CharField(max_length=128, blank=True, default="")

    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )

    stock = models.IntegerField(default=0)
    track_quantity = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["created_at"]

    def clean(self):
        if self.price is None or Decimal(self.price) < Decimal("0.00"):
            raise ValidationError({"price": "price cannot be negative"})

    def has_stock_for(self, quantity: int) -> bool:
        if not self.track_quantity:
            return True
        return int(self.stock or 0) >= int(quantity)

    @property
    def store_id(self):
        return self.product.store_id

    def __str__(self):
        return f"{self.product.name} / {self.name}"
