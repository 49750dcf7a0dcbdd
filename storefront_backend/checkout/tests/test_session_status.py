# checkout/tests/test_session_status.py

from unittest.mock import patch

from rest_framework.test import APITestCase

from checkout.tests.fixtures import (
    RecordingGatewayFactory,
    make_store,
    service_with,
    stripe_methods,
)

PAID_SESSION = {
    "id": "cs_test_123",
    "payment_status": "paid",
    "customer_email": None,
    "customer_details": {"email": "buyer@example.com"},
    "amount_total": 6400,
    "currency": "usd",
}


class SessionStatusApiTests(APITestCase):
    """
    GET /api/stores/<subdomain>/checkout/?session_id=...&payment=...

    GUARANTEES:
    - The session is looked up on the account that owns it
    - Provider status is normalized to {status, customerEmail, amountTotal, currency}
    - Missing session id / credentials are 400, unknown store 404
    """

    def setUp(self):
        self.store = make_store("acme")
        self.gateway = RecordingGatewayFactory(retrieved=PAID_SESSION)

    def _get(self, query, subdomain="acme"):
        with patch(
            "checkout.views.checkout.get_checkout_service",
            return_value=service_with(self.gateway),
        ):
            return self.client.get(f"/api/stores/{subdomain}/checkout/", query)

    def test_merchant_session_status_is_normalized(self):
        res = self._get({"session_id": "cs_test_123", "payment": "stripe"})

        self.assertEqual(res.status_code, 200, res.data)
        self.assertEqual(res.data["status"], "paid")
        self.assertEqual(res.data["customerEmail"], "buyer@example.com")
        self.assertEqual(res.data["amountTotal"], "64.00")
        self.assertEqual(res.data["currency"], "USD")
        self.assertEqual(self.gateway.credentials, [("sk_test_store", None)])
        self.assertEqual(self.gateway.retrieved_ids, ["cs_test_123"])

    def test_nuvi_hint_uses_platform_account(self):
        res = self._get({"session_id": "cs_test_123", "payment": "nuvi"})

        self.assertEqual(res.status_code, 200, res.data)
        self.assertEqual(res.data["paymentMethod"], "nuvi")
        self.assertEqual(self.gateway.credentials, [("sk_test_platform", "acct_platform")])

    def test_owner_is_inferred_from_enabled_methods(self):
        self.store.payment_methods = {"nuvi": {"enabled": True, "settings": {}}}
        self.store.save(update_fields=["payment_methods"])

        res = self._get({"session_id": "cs_test_123"})

        self.assertEqual(res.status_code, 200, res.data)
        self.assertEqual(self.gateway.credentials, [("sk_test_platform", "acct_platform")])

    def test_both_enabled_without_hint_defaults_to_merchant(self):
        self.store.payment_methods = stripe_methods(nuvi={"enabled": True, "settings": {}})
        self.store.save(update_fields=["payment_methods"])

        self._get({"session_id": "cs_test_123"})

        self.assertEqual(self.gateway.credentials, [("sk_test_store", None)])

    def test_missing_stripe_credentials_is_400(self):
        self.store.payment_methods = {"manual": {"enabled": True, "settings": {"iban": "X"}}}
        self.store.save(update_fields=["payment_methods"])

        res = self._get({"session_id": "cs_test_123", "payment": "stripe"})

        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["detail"], "Stripe not configured")
        self.assertEqual(self.gateway.retrieved_ids, [])

    def test_missing_session_id_is_400(self):
        res = self._get({})
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["detail"], "session_id is required")

    def test_unknown_store_is_404(self):
        res = self._get({"session_id": "cs_test_123"}, subdomain="nope")
        self.assertEqual(res.status_code, 404)
