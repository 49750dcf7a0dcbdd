# checkout/services/config.py

"""
CHECKOUT CONFIGURATION

Built once from settings.CHECKOUT and injected into CheckoutService,
the strategies and the status poller. Business logic never reads
settings or the environment directly.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from django.conf import settings


@dataclass(frozen=True)
class CheckoutConfig:
    app_base_url: str = "http://localhost:3000"
    nuvi_connected_account_id: str = ""
    platform_stripe_secret_key: str = ""
    nuvi_webhook_secret: str = ""
    default_commission_percent: Decimal = Decimal("5.9")
    default_fixed_fee: Decimal = Decimal("0.50")
    flat_shipping_amount: Decimal = Decimal("10.00")
    tax_rate: Decimal = Decimal("0.08")
    shipping_allowed_countries: tuple = ("US", "CA", "GB", "AU", "TR")
    currency_fallback: str = "USD"
    max_product_images: int = 8
    shipping_display_name: str = "Standard Shipping"
    delivery_min_business_days: int = 5
    delivery_max_business_days: int = 7

    @classmethod
    def from_settings(cls, **overrides) -> "CheckoutConfig":
        raw = dict(getattr(settings, "CHECKOUT", {}) or {})

        def _dec(key, default):
            value = raw.get(key)
            return Decimal(str(value)) if value not in (None, "") else default

        values = dict(
            app_base_url=str(raw.get("APP_BASE_URL") or cls.app_base_url).strip(),
            nuvi_connected_account_id=str(raw.get("NUVI_CONNECTED_ACCOUNT_ID") or "").strip(),
            platform_stripe_secret_key=str(raw.get("PLATFORM_STRIPE_SECRET_KEY") or "").strip(),
            nuvi_webhook_secret=str(raw.get("NUVI_WEBHOOK_SECRET") or "").strip(),
            default_commission_percent=_dec("DEFAULT_COMMISSION_PERCENT", cls.default_commission_percent),
            default_fixed_fee=_dec("DEFAULT_FIXED_FEE", cls.default_fixed_fee),
            flat_shipping_amount=_dec("FLAT_SHIPPING_AMOUNT", cls.flat_shipping_amount),
            tax_rate=_dec("TAX_RATE", cls.tax_rate),
            shipping_allowed_countries=tuple(
                c.strip().upper()
                for c in (raw.get("SHIPPING_ALLOWED_COUNTRIES") or cls.shipping_allowed_countries)
                if c and c.strip()
            ),
            currency_fallback=str(raw.get("CURRENCY_FALLBACK") or cls.currency_fallback).upper(),
        )
        values.update(overrides)
        return cls(**values)

    @property
    def platform_configured(self) -> bool:
        return bool(self.nuvi_connected_account_id and self.platform_stripe_secret_key)

    def absolute_url(self, path: str) -> str:
        return f"{self.app_base_url.rstrip('/')}/{path.lstrip('/')}"
