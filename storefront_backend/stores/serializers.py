# stores/serializers.py

"""
PAYMENT SETTINGS WRITE BOUNDARY

Every write to Store.payment_methods goes through PaymentSettingsSerializer.
Once validated, the payload is converted into the typed PaymentSettings value
and stored in its canonical JSON shape.

Secrets (Stripe secret key / webhook secret) are write-only and are never
echoed back by the owner endpoint.
"""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers

from stores.services.payment_settings import (
    ManualSettings,
    NuviSettings,
    PaymentSettings,
    PayPalSettings,
    StripeSettings,
)


class StripeOptionsSerializer(serializers.Serializer):
    secretKey = serializers.CharField(
        required=False, allow_blank=True, default="", write_only=True
    )
    publishableKey = serializers.CharField(required=False, allow_blank=True, default="")
    webhookSecret = serializers.CharField(
        required=False, allow_blank=True, default="", write_only=True
    )

    def validate_secretKey(self, value):
        value = (value or "").strip()
        if value and not value.startswith(("sk_", "rk_")):
            raise serializers.ValidationError("Expected a Stripe secret or restricted key.")
        return value

    def validate_publishableKey(self, value):
        value = (value or "").strip()
        if value and not value.startswith("pk_"):
            raise serializers.ValidationError("Expected a Stripe publishable key.")
        return value


class StripeMethodSerializer(serializers.Serializer):
    enabled = serializers.BooleanField(default=False)
    settings = StripeOptionsSerializer(required=False)


class NuviOptionsSerializer(serializers.Serializer):
    commission = serializers.DecimalField(
        max_digits=5,
        decimal_places=2,
        min_value=Decimal("0.00"),
        max_value=Decimal("100.00"),
        required=False,
        allow_null=True,
    )
    fixedFee = serializers.DecimalField(
        max_digits=8,
        decimal_places=2,
        min_value=Decimal("0.00"),
        required=False,
        allow_null=True,
    )


class NuviMethodSerializer(serializers.Serializer):
    enabled = serializers.BooleanField(default=False)
    settings = NuviOptionsSerializer(required=False)


class PayPalOptionsSerializer(serializers.Serializer):
    clientId = serializers.CharField(required=False, allow_blank=True, default="")


class PayPalMethodSerializer(serializers.Serializer):
    enabled = serializers.BooleanField(default=False)
    settings = PayPalOptionsSerializer(required=False)


class ManualMethodSerializer(serializers.Serializer):
    enabled = serializers.BooleanField(default=False)
    settings = serializers.DictField(
        child=serializers.CharField(allow_blank=True, max_length=255),
        required=False,
    )


class PaymentSettingsSerializer(serializers.Serializer):
    stripe = StripeMethodSerializer(required=False)
    nuvi = NuviMethodSerializer(required=False)
    paypal = PayPalMethodSerializer(required=False)
    manual = ManualMethodSerializer(required=False)

    def validate(self, attrs):
        manual = attrs.get("manual") or {}
        if manual.get("enabled") and not any(
            str(v).strip() for v in (manual.get("settings") or {}).values()
        ):
            raise serializers.ValidationError(
                {"manual": "Bank details are required when manual payments are enabled."}
            )
        return attrs

    def to_payment_settings(self) -> PaymentSettings:
        data = self.validated_data

        def _entry(key):
            raw = data.get(key) or {}
            return {"enabled": raw.get("enabled", False), "settings": raw.get("settings") or {}}

        return PaymentSettings(
            stripe=StripeSettings.from_dict(_entry("stripe")),
            nuvi=NuviSettings.from_dict(_entry("nuvi")),
            paypal=PayPalSettings.from_dict(_entry("paypal")),
            manual=ManualSettings.from_dict(_entry("manual")),
        )
