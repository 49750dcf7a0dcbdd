# checkout/tests/test_stripe_gateway.py

import hashlib
import hmac
import json
import time
from unittest.mock import patch

import stripe
from django.test import SimpleTestCase

from checkout.services.exceptions import PaymentProviderError, WebhookSignatureError
from checkout.services.stripe_gateway import (
    StripeGateway,
    construct_webhook_event,
    provider_field,
)

SECRET = "whsec_test_secret"


def _signature(payload: str, secret: str = SECRET, timestamp: int | None = None) -> str:
    timestamp = timestamp or int(time.time())
    signed = f"{timestamp}.{payload}".encode("utf-8")
    digest = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"


class StripeGatewayTests(SimpleTestCase):
    """
    GUARANTEES:
    - Credentials are passed per request (merchant key or platform key + account)
    - Stripe errors never escape; they become PaymentProviderError
    """

    def test_requires_api_key(self):
        with self.assertRaises(ValueError):
            StripeGateway("")

    @patch("stripe.checkout.Session.create")
    def test_merchant_session_uses_store_key(self, create):
        create.return_value = {"id": "cs_1"}

        session = StripeGateway("sk_test_store").create_checkout_session({"mode": "payment"})

        self.assertEqual(session["id"], "cs_1")
        create.assert_called_once_with(mode="payment", api_key="sk_test_store")

    @patch("stripe.checkout.Session.create")
    def test_platform_session_targets_connected_account(self, create):
        StripeGateway("sk_platform", stripe_account="acct_1").create_checkout_session({})

        create.assert_called_once_with(api_key="sk_platform", stripe_account="acct_1")

    @patch("stripe.checkout.Session.create")
    def test_stripe_error_is_translated(self, create):
        create.side_effect = stripe.APIConnectionError("network down")

        with self.assertLogs("checkout.services.stripe_gateway", level="ERROR"):
            with self.assertRaises(PaymentProviderError) as ctx:
                StripeGateway("sk_test_store").create_checkout_session({})

        self.assertNotIn("network down", ctx.exception.detail)

    @patch("stripe.checkout.Session.retrieve")
    def test_retrieve_passes_credentials(self, retrieve):
        StripeGateway("sk_platform", stripe_account="acct_1").retrieve_checkout_session("cs_1")

        retrieve.assert_called_once_with("cs_1", api_key="sk_platform", stripe_account="acct_1")

    def test_provider_field_reads_dicts_and_objects(self):
        class Obj:
            url = "https://x"

        self.assertEqual(provider_field({"id": "a"}, "id"), "a")
        self.assertEqual(provider_field(Obj(), "url"), "https://x")
        self.assertIsNone(provider_field(None, "id"))


class WebhookSignatureTests(SimpleTestCase):
    """
    GUARANTEES:
    - A correctly signed payload yields the event
    - Wrong secret / missing header are rejected as WebhookSignatureError
    """

    def setUp(self):
        self.payload = json.dumps(
            {"id": "evt_1", "object": "event", "type": "checkout.session.completed", "data": {"object": {}}}
        )

    def test_valid_signature(self):
        event = construct_webhook_event(self.payload.encode("utf-8"), _signature(self.payload), SECRET)
        self.assertEqual(provider_field(event, "type"), "checkout.session.completed")

    def test_wrong_secret(self):
        with self.assertRaises(WebhookSignatureError):
            construct_webhook_event(
                self.payload.encode("utf-8"), _signature(self.payload, "whsec_other"), SECRET
            )

    def test_missing_signature_header(self):
        with self.assertRaises(WebhookSignatureError):
            construct_webhook_event(self.payload.encode("utf-8"), None, SECRET)
