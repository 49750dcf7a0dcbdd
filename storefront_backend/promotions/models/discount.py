# promotions/models/discount.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models


class Discount(models.Model):
    """
    Store-scoped promotional code.

    A discount applies only when it is active, inside its optional
    [starts_at, ends_at] window, the order meets minimum_amount (if set) and
    usage_count has not reached usage_limit (if set).
    Applicability rules live in promotions.services.discounts.
    """

    class DiscountType(models.TextChoices):
        PERCENTAGE = "percentage", "Percentage"
        FIXED = "fixed", "Fixed Amount"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    store = models.ForeignKey(
        "stores.Store",
        on_delete=models.CASCADE,
        related_name="discounts",
    )

    code = models.CharField(max_length=64)
    discount_type = models.CharField(
        max_length=16,
        choices=DiscountType.choices,
        default=DiscountType.PERCENTAGE,
    )
    value = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text="Percent (e.g. 10.00) if percentage; currency amount if fixed.",
    )

    is_active = models.BooleanField(default=True)
    starts_at = models.DateTimeField(null=True, blank=True)
    ends_at = models.DateTimeField(null=True, blank=True)

    minimum_amount = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True
    )
    usage_limit = models.PositiveIntegerField(null=True, blank=True)
    usage_count = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["store", "code"],
                name="uniq_discount_code_per_store",
            ),
        ]

    def clean(self):
        if self.value is None or Decimal(self.value) < Decimal("0.00"):
            raise ValidationError({"value": "value cannot be negative"})

        if (
            self.discount_type == self.DiscountType.PERCENTAGE
            and Decimal(self.value) > Decimal("100.00")
        ):
            raise ValidationError({"value": "percentage cannot exceed 100"})

        if self.starts_at and self.ends_at and self.starts_at > self.ends_at:
            raise ValidationError("starts_at must be before ends_at")

    def __str__(self):
        return f"{self.code} ({self.discount_type} {self.value})"
