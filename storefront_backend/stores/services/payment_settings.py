# stores/services/payment_settings.py

"""
TYPED PAYMENT SETTINGS

Purpose:
- One typed value per payment provider (a tagged union keyed by METHOD).
- Parsed from Store.payment_methods (JSON) which has already been validated
  at the write boundary, so checkout never re-checks JSON shape.

Stored JSON shape (kept stable for the storefront admin UI):
    {
      "stripe": {"enabled": true, "settings": {"secretKey": "...", "publishableKey": "...", "webhookSecret": "..."}},
      "nuvi":   {"enabled": true, "settings": {"commission": 5.9, "fixedFee": 0.5}},
      "paypal": {"enabled": false, "settings": {"clientId": "..."}},
      "manual": {"enabled": true, "settings": {"bankName": "...", "accountNumber": "...", ...}}
    }
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import ClassVar, Optional, Union

METHOD_NUVI = "nuvi"
METHOD_STRIPE = "stripe"
METHOD_PAYPAL = "paypal"
METHOD_MANUAL = "manual"

PAYMENT_METHODS = (METHOD_NUVI, METHOD_STRIPE, METHOD_PAYPAL, METHOD_MANUAL)


def _decimal_or_none(value) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return None


def _text(value) -> str:
    return str(value or "").strip()


@dataclass(frozen=True)
class StripeSettings:
    METHOD: ClassVar[str] = METHOD_STRIPE

    enabled: bool = False
    secret_key: str = ""
    publishable_key: str = ""
    webhook_secret: str = ""

    @property
    def is_configured(self) -> bool:
        return self.enabled and bool(self.secret_key)

    @classmethod
    def from_dict(cls, raw: dict) -> "StripeSettings":
        opts = raw.get("settings") or {}
        return cls(
            enabled=bool(raw.get("enabled")),
            secret_key=_text(opts.get("secretKey")),
            publishable_key=_text(opts.get("publishableKey")),
            webhook_secret=_text(opts.get("webhookSecret")),
        )

    def to_dict(self) -> dict:
        return {
            "enabled": self.enabled,
            "settings": {
                "secretKey": self.secret_key,
                "publishableKey": self.publishable_key,
                "webhookSecret": self.webhook_secret,
            },
        }

    def to_public_dict(self) -> dict:
        return {
            "enabled": self.enabled,
            "settings": {
                "publishableKey": self.publishable_key,
                "secretKeyConfigured": bool(self.secret_key),
                "webhookSecretConfigured": bool(self.webhook_secret),
            },
        }


@dataclass(frozen=True)
class NuviSettings:
    """Platform-connected payments. None means "use the platform default"."""

    METHOD: ClassVar[str] = METHOD_NUVI

    enabled: bool = False
    commission_percent: Optional[Decimal] = None
    fixed_fee: Optional[Decimal] = None

    @classmethod
    def from_dict(cls, raw: dict) -> "NuviSettings":
        opts = raw.get("settings") or {}
        return cls(
            enabled=bool(raw.get("enabled")),
            commission_percent=_decimal_or_none(opts.get("commission")),
            fixed_fee=_decimal_or_none(opts.get("fixedFee")),
        )

    def to_dict(self) -> dict:
        opts = {}
        if self.commission_percent is not None:
            opts["commission"] = str(self.commission_percent)
        if self.fixed_fee is not None:
            opts["fixedFee"] = str(self.fixed_fee)
        return {"enabled": self.enabled, "settings": opts}

    def to_public_dict(self) -> dict:
        return self.to_dict()


@dataclass(frozen=True)
class PayPalSettings:
    METHOD: ClassVar[str] = METHOD_PAYPAL

    enabled: bool = False
    client_id: str = ""

    @classmethod
    def from_dict(cls, raw: dict) -> "PayPalSettings":
        opts = raw.get("settings") or {}
        return cls(enabled=bool(raw.get("enabled")), client_id=_text(opts.get("clientId")))

    def to_dict(self) -> dict:
        return {"enabled": self.enabled, "settings": {"clientId": self.client_id}}

    def to_public_dict(self) -> dict:
        return self.to_dict()


@dataclass(frozen=True)
class ManualSettings:
    """Offline bank transfer. bank_details is shown to the customer verbatim."""

    METHOD: ClassVar[str] = METHOD_MANUAL

    enabled: bool = False
    bank_details: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: dict) -> "ManualSettings":
        opts = raw.get("settings") or {}
        details = {str(k): _text(v) for k, v in opts.items() if v not in (None, "")}
        return cls(enabled=bool(raw.get("enabled")), bank_details=details)

    def to_dict(self) -> dict:
        return {"enabled": self.enabled, "settings": dict(self.bank_details)}

    def to_public_dict(self) -> dict:
        return self.to_dict()


ProviderSettings = Union[StripeSettings, NuviSettings, PayPalSettings, ManualSettings]

_PROVIDER_TYPES = {
    cls.METHOD: cls
    for cls in (StripeSettings, NuviSettings, PayPalSettings, ManualSettings)
}


@dataclass(frozen=True)
class PaymentSettings:
    stripe: StripeSettings = field(default_factory=StripeSettings)
    nuvi: NuviSettings = field(default_factory=NuviSettings)
    paypal: PayPalSettings = field(default_factory=PayPalSettings)
    manual: ManualSettings = field(default_factory=ManualSettings)

    @classmethod
    def from_dict(cls, raw) -> "PaymentSettings":
        raw = raw if isinstance(raw, dict) else {}
        parsed = {}
        for method, provider_cls in _PROVIDER_TYPES.items():
            entry = raw.get(method)
            if isinstance(entry, dict):
                parsed[method] = provider_cls.from_dict(entry)
        return cls(**parsed)

    def for_method(self, method: str) -> ProviderSettings:
        if method not in _PROVIDER_TYPES:
            raise KeyError(method)
        return getattr(self, method)

    def enabled_methods(self) -> list[str]:
        return [m for m in PAYMENT_METHODS if self.for_method(m).enabled]

    def any_enabled(self) -> bool:
        return bool(self.enabled_methods())

    def to_dict(self) -> dict:
        return {m: self.for_method(m).to_dict() for m in PAYMENT_METHODS}

    def to_public_dict(self) -> dict:
        return {m: self.for_method(m).to_public_dict() for m in PAYMENT_METHODS}

    def with_secrets_from(self, previous: "PaymentSettings") -> "PaymentSettings":
        """
        Secrets are write-only: an update that omits them keeps the stored ones.
        """
        stripe = self.stripe
        if not stripe.secret_key and previous.stripe.secret_key:
            stripe = StripeSettings(
                enabled=stripe.enabled,
                secret_key=previous.stripe.secret_key,
                publishable_key=stripe.publishable_key,
                webhook_secret=stripe.webhook_secret or previous.stripe.webhook_secret,
            )
        elif not stripe.webhook_secret and previous.stripe.webhook_secret:
            stripe = StripeSettings(
                enabled=stripe.enabled,
                secret_key=stripe.secret_key,
                publishable_key=stripe.publishable_key,
                webhook_secret=previous.stripe.webhook_secret,
            )
        return PaymentSettings(
            stripe=stripe, nuvi=self.nuvi, paypal=self.paypal, manual=self.manual
        )
