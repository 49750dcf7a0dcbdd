# checkout/serializers.py

"""
CHECKOUT REQUEST VALIDATION

Field names match the storefront's JSON (camelCase). Validation is
all-or-nothing: DRF reports every field error at once and nothing downstream
runs on a partially valid body.
"""

from __future__ import annotations

from rest_framework import serializers

from checkout.services.types import Address, CartLine, CheckoutRequest, Customer
from stores.services.payment_settings import METHOD_STRIPE, PAYMENT_METHODS

MAX_CHECKOUT_LINES = 100
MAX_METADATA_KEYS = 10
MAX_METADATA_KEY_LENGTH = 40


class CheckoutItemSerializer(serializers.Serializer):
    variantId = serializers.CharField(max_length=64)
    quantity = serializers.IntegerField(min_value=1, max_value=10000)


class CheckoutCustomerSerializer(serializers.Serializer):
    email = serializers.EmailField()
    name = serializers.CharField(max_length=255)
    phone = serializers.CharField(
        max_length=40, required=False, allow_blank=True, default=""
    )


class CheckoutAddressSerializer(serializers.Serializer):
    line1 = serializers.CharField(max_length=255)
    line2 = serializers.CharField(
        max_length=255, required=False, allow_blank=True, default=""
    )
    city = serializers.CharField(max_length=120)
    state = serializers.CharField(max_length=120)
    postalCode = serializers.CharField(max_length=32)
    country = serializers.CharField(min_length=2, max_length=2)

    def validate_country(self, value):
        value = value.strip().upper()
        if len(value) != 2 or not value.isalpha():
            raise serializers.ValidationError("Use a 2-letter country code.")
        return value

    @staticmethod
    def to_address(data: dict) -> Address:
        return Address(
            line1=data["line1"],
            line2=data.get("line2") or "",
            city=data["city"],
            state=data["state"],
            postal_code=data["postalCode"],
            country=data["country"],
        )


class CheckoutInputSerializer(serializers.Serializer):
    items = CheckoutItemSerializer(many=True, allow_empty=False)
    customer = CheckoutCustomerSerializer()
    shippingAddress = CheckoutAddressSerializer()
    billingAddress = CheckoutAddressSerializer(required=False, allow_null=True)
    discountCode = serializers.CharField(
        max_length=64, required=False, allow_blank=True, allow_null=True
    )
    paymentMethod = serializers.ChoiceField(
        choices=list(PAYMENT_METHODS), required=False, default=METHOD_STRIPE
    )
    metadata = serializers.DictField(
        child=serializers.CharField(allow_blank=True, max_length=500),
        required=False,
        default=dict,
    )

    def validate_items(self, value):
        if len(value) > MAX_CHECKOUT_LINES:
            raise serializers.ValidationError(
                f"A checkout can have at most {MAX_CHECKOUT_LINES} lines."
            )
        return value

    def validate_metadata(self, value):
        if len(value) > MAX_METADATA_KEYS:
            raise serializers.ValidationError(
                f"At most {MAX_METADATA_KEYS} metadata keys are allowed."
            )
        too_long = [k for k in value if len(str(k)) > MAX_METADATA_KEY_LENGTH]
        if too_long:
            raise serializers.ValidationError(
                f"Metadata keys must be at most {MAX_METADATA_KEY_LENGTH} characters."
            )
        return value

    def to_checkout_request(self) -> CheckoutRequest:
        data = self.validated_data
        billing = data.get("billingAddress")
        customer = data["customer"]
        return CheckoutRequest(
            items=tuple(
                CartLine(variant_id=str(i["variantId"]).strip(), quantity=int(i["quantity"]))
                for i in data["items"]
            ),
            customer=Customer(
                email=customer["email"],
                name=customer["name"],
                phone=customer.get("phone") or "",
            ),
            shipping_address=CheckoutAddressSerializer.to_address(data["shippingAddress"]),
            billing_address=CheckoutAddressSerializer.to_address(billing) if billing else None,
            discount_code=(data.get("discountCode") or "").strip() or None,
            payment_method=data.get("paymentMethod") or METHOD_STRIPE,
            metadata=dict(data.get("metadata") or {}),
        )


class SessionStatusQuerySerializer(serializers.Serializer):
    session_id = serializers.CharField(max_length=255)
    payment = serializers.ChoiceField(
        choices=list(PAYMENT_METHODS), required=False, allow_blank=True
    )
