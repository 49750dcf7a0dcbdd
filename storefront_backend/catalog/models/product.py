# catalog/models/product.py

import uuid

from django.core.exceptions import ValidationError
from django.db import models


class Product(models.Model):
    """
    A sellable product owned by exactly one store.

    Price and stock live on ProductVariant; a product with a single option
    still has one variant.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    store = models.ForeignKey(
        "stores.Store",
        on_delete=models.CASCADE,
        related_name="products",
    )

    name = models.CharField(max_length=255, db_index=True)
    description = models.TextField(blank=True, default="")

    # Ordered list of image URLs (absolute, or relative to the app base URL)
    images = models.JSONField(default=list, blank=True)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def clean(self):
        if not isinstance(self.images, list):
            raise ValidationError({"images": "images must be a list of URLs"})

    def __str__(self):
        return self.name
