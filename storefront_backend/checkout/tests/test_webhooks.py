# checkout/tests/test_webhooks.py

import json
from decimal import Decimal
from unittest.mock import patch

from django.test import override_settings
from rest_framework.test import APITestCase

from checkout.services.exceptions import WebhookSignatureError
from checkout.services.session_payload import split_metadata_value
from checkout.tests.fixtures import make_store, make_variant
from orders.models import Order
from promotions.models import Discount

NUVI_SETTINGS = {"NUVI_WEBHOOK_SECRET": "whsec_platform"}


def _completed_event(store, variant, *, quantity=2, discount=None, session_id="cs_test_paid"):
    metadata = {
        "storeId": str(store.id),
        "paymentMethod": "stripe",
        "subtotal": "50.00",
        "discountAmount": "0.00",
        "taxAmount": "4.00",
        "shippingAmount": "10.00",
        "total": "64.00",
        "customerName": "Ada Buyer",
        "shippingAddress": json.dumps({"line1": "1 Market St", "country": "US"}),
        "cartItems": json.dumps(
            [{"variantId": str(variant.id), "quantity": quantity, "price": "25.00"}]
        ),
    }
    if discount is not None:
        metadata["discount"] = json.dumps({"id": str(discount.id), "code": discount.code})
    return {
        "id": "evt_1",
        "type": "checkout.session.completed",
        "data": {
            "object": {
                "id": session_id,
                "payment_status": "paid",
                "customer_details": {"email": "buyer@example.com"},
                "currency": "usd",
                "metadata": metadata,
            }
        },
    }


class StoreStripeWebhookTests(APITestCase):
    """
    POST /api/stores/<subdomain>/webhooks/stripe/

    GUARANTEES:
    - Unsigned / badly signed payloads are rejected
    - A completed session creates exactly one PAID order (redelivery is a no-op)
    - Tracked stock is decremented and discount usage recorded on confirmation
    - Sessions belonging to another store are ignored
    - Order amounts are what the provider charged; split metadata is rejoined
    """

    def setUp(self):
        self.store = make_store("acme")
        self.variant = make_variant(self.store, price="25.00", stock=5)
        self.url = "/api/stores/acme/webhooks/stripe/"

    def _post(self, event):
        with patch("checkout.views.webhooks.construct_webhook_event", return_value=event) as construct:
            res = self.client.post(
                self.url,
                data=json.dumps(event),
                content_type="application/json",
                HTTP_STRIPE_SIGNATURE="t=1,v1=abc",
            )
        return res, construct

    def test_invalid_signature_is_rejected(self):
        with patch(
            "checkout.views.webhooks.construct_webhook_event",
            side_effect=WebhookSignatureError(),
        ):
            res = self.client.post(self.url, data="{}", content_type="application/json")

        self.assertEqual(res.status_code, 400)
        self.assertEqual(Order.objects.count(), 0)

    def test_signature_is_checked_with_store_secret(self):
        res, construct = self._post({"id": "evt_0", "type": "customer.created", "data": {}})

        self.assertEqual(res.status_code, 200)
        payload, signature, secret = construct.call_args.args
        self.assertEqual(signature, "t=1,v1=abc")
        self.assertEqual(secret, "whsec_store")

    def test_completed_session_creates_paid_order(self):
        discount = Discount.objects.create(
            store=self.store, code="WELCOME", value=Decimal("10")
        )

        res, _ = self._post(_completed_event(self.store, self.variant, discount=discount))

        self.assertEqual(res.status_code, 200, res.data)
        order = Order.objects.get(provider_session_id="cs_test_paid")
        self.assertEqual(res.data["orderNumber"], order.order_number)
        self.assertEqual(order.status, Order.STATUS_PAID)
        self.assertEqual(order.payment_status, Order.PAYMENT_PAID)
        self.assertEqual(order.customer_email, "buyer@example.com")
        self.assertEqual(order.currency, "USD")
        self.assertEqual(order.total_price, Decimal("64.00"))
        self.assertEqual(order.discount_code, "WELCOME")

        line = order.line_items.get()
        self.assertEqual(line.title, "Canvas Tote")
        self.assertEqual(line.price, Decimal("25.00"))
        self.assertEqual(line.quantity, 2)

        self.variant.refresh_from_db()
        self.assertEqual(self.variant.stock, 3)
        discount.refresh_from_db()
        self.assertEqual(discount.usage_count, 1)

    def test_order_records_amount_actually_charged(self):
        event = _completed_event(self.store, self.variant)
        event["data"]["object"].update(
            {
                "amount_subtotal": 5000,
                "amount_total": 6000,
                "total_details": {"amount_discount": 0, "amount_shipping": 1000, "amount_tax": 0},
            }
        )

        res, _ = self._post(event)

        self.assertEqual(res.status_code, 200, res.data)
        order = Order.objects.get()
        self.assertEqual(order.total_price, Decimal("60.00"))
        self.assertEqual(order.subtotal_price, Decimal("50.00"))
        self.assertEqual(order.total_shipping, Decimal("10.00"))
        self.assertEqual(order.total_tax, Decimal("0.00"))
        self.assertIn("tax 4.00", order.note)
        self.assertIn("total 64.00", order.note)

    def test_matching_charge_leaves_no_quote_note(self):
        event = _completed_event(self.store, self.variant)
        event["data"]["object"].update(
            {
                "amount_subtotal": 5000,
                "amount_total": 6400,
                "total_details": {"amount_discount": 0, "amount_shipping": 1000, "amount_tax": 400},
            }
        )

        self._post(event)

        order = Order.objects.get()
        self.assertEqual(order.total_price, Decimal("64.00"))
        self.assertEqual(order.total_tax, Decimal("4.00"))
        self.assertEqual(order.note, "")

    def test_billing_address_from_metadata(self):
        event = _completed_event(self.store, self.variant)
        billing = {"line1": "9 Billing Rd", "country": "CA"}
        event["data"]["object"]["metadata"]["billingAddress"] = json.dumps(billing)

        self._post(event)

        order = Order.objects.get()
        self.assertEqual(order.billing_address, billing)
        self.assertEqual(order.shipping_address["line1"], "1 Market St")

    def test_split_cart_items_are_reassembled(self):
        variants = [
            make_variant(self.store, price="5.00", stock=5, name=f"Size {n}") for n in range(8)
        ]
        cart = json.dumps(
            [{"variantId": str(v.id), "quantity": 1, "price": "5.00"} for v in variants],
            separators=(",", ":"),
        )
        event = _completed_event(self.store, self.variant)
        metadata = event["data"]["object"]["metadata"]
        del metadata["cartItems"]
        metadata.update(split_metadata_value("cartItems", cart))
        self.assertIn("cartItemsParts", metadata)

        res, _ = self._post(event)

        self.assertEqual(res.status_code, 200, res.data)
        order = Order.objects.get()
        self.assertEqual(order.line_items.count(), 8)
        variants[7].refresh_from_db()
        self.assertEqual(variants[7].stock, 4)

    def test_missing_split_part_is_acknowledged(self):
        event = _completed_event(self.store, self.variant)
        metadata = event["data"]["object"]["metadata"]
        metadata["cartItemsParts"] = "2"
        metadata["cartItems_0"] = metadata.pop("cartItems")

        res, _ = self._post(event)

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["detail"], "Unprocessable session")
        self.assertEqual(Order.objects.count(), 0)

    def test_redelivered_event_is_idempotent(self):
        event = _completed_event(self.store, self.variant)

        self._post(event)
        res, _ = self._post(event)

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["detail"], "Already processed")
        self.assertEqual(Order.objects.count(), 1)
        self.variant.refresh_from_db()
        self.assertEqual(self.variant.stock, 3)

    def test_unpaid_session_creates_nothing(self):
        event = _completed_event(self.store, self.variant)
        event["data"]["object"]["payment_status"] = "unpaid"

        res, _ = self._post(event)

        self.assertEqual(res.status_code, 200)
        self.assertEqual(Order.objects.count(), 0)

    def test_session_of_another_store_is_ignored(self):
        other = make_store("globex")
        foreign_variant = make_variant(other)

        res, _ = self._post(_completed_event(other, foreign_variant))

        self.assertEqual(res.status_code, 200)
        self.assertEqual(Order.objects.count(), 0)

    def test_deleted_variant_keeps_line_snapshot(self):
        event = _completed_event(self.store, self.variant)
        self.variant.product.delete()

        res, _ = self._post(event)

        self.assertEqual(res.status_code, 200, res.data)
        line = Order.objects.get().line_items.get()
        self.assertIsNone(line.variant_id)
        self.assertEqual(line.title, "Unavailable product")
        self.assertEqual(line.total_price, Decimal("50.00"))

    def test_malformed_metadata_is_acknowledged(self):
        event = _completed_event(self.store, self.variant)
        event["data"]["object"]["metadata"]["cartItems"] = "{not json"

        res, _ = self._post(event)

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["detail"], "Unprocessable session")
        self.assertEqual(Order.objects.count(), 0)

    def test_store_without_webhook_secret(self):
        self.store.payment_methods = {
            "stripe": {"enabled": True, "settings": {"secretKey": "sk_test_store"}}
        }
        self.store.save(update_fields=["payment_methods"])

        res = self.client.post(self.url, data="{}", content_type="application/json")

        self.assertEqual(res.status_code, 400)


class NuviWebhookTests(APITestCase):
    """
    POST /api/webhooks/nuvi/

    GUARANTEES:
    - Verified with the platform secret; refuses to run without one
    - Completed platform sessions become paid orders for the right store
    """

    def setUp(self):
        self.store = make_store("acme")
        self.variant = make_variant(self.store, price="25.00", stock=5)
        self.url = "/api/webhooks/nuvi/"

    @override_settings(CHECKOUT={})
    def test_missing_platform_secret_is_a_500(self):
        res = self.client.post(self.url, data="{}", content_type="application/json")
        self.assertEqual(res.status_code, 500)

    @override_settings(CHECKOUT=NUVI_SETTINGS)
    def test_completed_platform_session_creates_order(self):
        event = _completed_event(self.store, self.variant, session_id="cs_platform")
        event["data"]["object"]["metadata"]["paymentMethod"] = "nuvi"

        with patch("checkout.views.webhooks.construct_webhook_event", return_value=event) as construct:
            res = self.client.post(
                self.url,
                data=json.dumps(event),
                content_type="application/json",
                HTTP_STRIPE_SIGNATURE="t=1,v1=abc",
            )

        self.assertEqual(res.status_code, 200, res.data)
        self.assertEqual(construct.call_args.args[2], "whsec_platform")
        order = Order.objects.get(provider_session_id="cs_platform")
        self.assertEqual(order.store, self.store)
        self.assertEqual(order.payment_method, "nuvi")
