# checkout/tests/fixtures.py

from decimal import Decimal

from catalog.models import Product, ProductVariant
from checkout.services.checkout_service import CheckoutService
from checkout.services.config import CheckoutConfig
from stores.models import Store

TEST_CONFIG = CheckoutConfig(
    app_base_url="https://shop.test",
    nuvi_connected_account_id="acct_platform",
    platform_stripe_secret_key="sk_test_platform",
    nuvi_webhook_secret="whsec_platform",
)

ADDRESS = {
    "line1": "1 Market St",
    "city": "San Francisco",
    "state": "CA",
    "postalCode": "94105",
    "country": "us",
}


def stripe_methods(**extra):
    methods = {
        "stripe": {
            "enabled": True,
            "settings": {
                "secretKey": "sk_test_store",
                "publishableKey": "pk_test_store",
                "webhookSecret": "whsec_store",
            },
        },
    }
    methods.update(extra)
    return methods


def make_store(subdomain="acme", *, payment_methods=None, **kwargs):
    return Store.objects.create(
        name=kwargs.pop("name", subdomain.title()),
        subdomain=subdomain,
        currency=kwargs.pop("currency", "USD"),
        payment_methods=stripe_methods() if payment_methods is None else payment_methods,
        **kwargs,
    )


def make_variant(store, *, price="50.00", stock=10, name="Default", product_name="Canvas Tote", **kwargs):
    product = Product.objects.create(
        store=store,
        name=product_name,
        images=kwargs.pop("images", []),
        is_active=kwargs.pop("product_active", True),
    )
    return ProductVariant.objects.create(
        product=product,
        name=name,
        price=Decimal(price),
        stock=stock,
        track_quantity=kwargs.pop("track_quantity", True),
        **kwargs,
    )


def checkout_body(*items, **overrides):
    body = {
        "items": [{"variantId": str(v.id), "quantity": q} for v, q in items],
        "customer": {"email": "buyer@example.com", "name": "Ada Buyer"},
        "shippingAddress": dict(ADDRESS),
    }
    body.update(overrides)
    return body


class RecordingGatewayFactory:
    """
    Stands in for StripeGateway. Records which credentials each gateway was
    built with and every call made through it.
    """

    def __init__(self, *, session=None, retrieved=None, error=None):
        self.session = session or {
            "id": "cs_test_123",
            "url": "https://checkout.stripe.test/c/pay/cs_test_123",
        }
        self.retrieved = retrieved
        self.error = error
        self.credentials = []
        self.created = []
        self.retrieved_ids = []

    def __call__(self, api_key, *, stripe_account=None):
        self.credentials.append((api_key, stripe_account))
        return _RecordingGateway(self)

    @property
    def last_params(self):
        return self.created[-1]


class _RecordingGateway:
    def __init__(self, factory):
        self.factory = factory

    def create_checkout_session(self, params):
        self.factory.created.append(params)
        if self.factory.error is not None:
            raise self.factory.error
        return self.factory.session

    def retrieve_checkout_session(self, session_id):
        self.factory.retrieved_ids.append(session_id)
        if self.factory.error is not None:
            raise self.factory.error
        return self.factory.retrieved


def service_with(factory, config=TEST_CONFIG):
    return CheckoutService(config=config, gateway_factory=factory)
