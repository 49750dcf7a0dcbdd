# orders/models/order.py

"""
ORDER

Created in two places only:
- manual (bank transfer) checkout: status pending_payment, payment pending
- hosted-session confirmation webhook: status paid, payment paid

Monetary fields are snapshots of the checkout pricing at creation time and
are never recomputed from the catalog afterwards.
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.db import models


class Order(models.Model):
    STATUS_PENDING_PAYMENT = "pending_payment"
    STATUS_PAID = "paid"
    STATUS_FULFILLED = "fulfilled"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_PENDING_PAYMENT, "Pending Payment"),
        (STATUS_PAID, "Paid"),
        (STATUS_FULFILLED, "Fulfilled"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    PAYMENT_PENDING = "pending"
    PAYMENT_PAID = "paid"
    PAYMENT_FAILED = "failed"

    PAYMENT_STATUS_CHOICES = [
        (PAYMENT_PENDING, "Pending"),
        (PAYMENT_PAID, "Paid"),
        (PAYMENT_FAILED, "Failed"),
    ]

    METHOD_NUVI = "nuvi"
    METHOD_STRIPE = "stripe"
    METHOD_PAYPAL = "paypal"
    METHOD_MANUAL = "manual"

    PAYMENT_METHOD_CHOICES = [
        (METHOD_NUVI, "Nuvi"),
        (METHOD_STRIPE, "Stripe"),
        (METHOD_PAYPAL, "PayPal"),
        (METHOD_MANUAL, "Manual / Bank transfer"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    store = models.ForeignKey(
        "stores.Store",
        on_delete=models.PROTECT,
        related_name="orders",
    )

    order_number = models.CharField(max_length=64)

    status = models.CharField(
        max_length=32,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING_PAYMENT,
        db_index=True,
    )
    financial_status = models.CharField(
        max_length=32,
        choices=PAYMENT_STATUS_CHOICES,
        default=PAYMENT_PENDING,
    )
    payment_status = models.CharField(
        max_length=32,
        choices=PAYMENT_STATUS_CHOICES,
        default=PAYMENT_PENDING,
        db_index=True,
    )
    payment_method = models.CharField(
        max_length=16,
        choices=PAYMENT_METHOD_CHOICES,
        default=METHOD_MANUAL,
    )

    currency = models.CharField(max_length=3, default="USD")

    customer_email = models.EmailField()
    customer_name = models.CharField(max_length=255)
    customer_phone = models.CharField(max_length=64, blank=True, default="")

    subtotal_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total_discount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total_tax = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total_shipping = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    discount_code = models.CharField(max_length=64, blank=True, default="")

    shipping_address = models.JSONField(default=dict, blank=True)
    billing_address = models.JSONField(default=dict, blank=True)

    note = models.TextField(blank=True, default="")

    # Hosted checkout session id (webhook idempotency key); NULL for manual orders
    provider_session_id = models.CharField(
        max_length=255, null=True, blank=True, unique=True
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["store", "order_number"],
                name="uniq_order_number_per_store",
            ),
        ]

    def __str__(self):
        return f"{self.order_number} ({self.status})"
