# promotions/tests/test_discounts.py

from datetime import timedelta
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APITestCase

from promotions.models import Discount
from promotions.services.discounts import (
    DiscountNotApplicable,
    calculate_discount_amount,
    record_discount_usage,
    resolve_discount,
)
from stores.models import Store


class DiscountRuleTests(TestCase):
    """
    GUARANTEES:
    - Codes are matched exactly and only within their store
    - Inactive, out-of-window, under-minimum and exhausted codes are rejected
      with a readable reason
    - Usage is incremented atomically
    """

    def setUp(self):
        self.store = Store.objects.create(name="Acme", subdomain="acme")
        self.other = Store.objects.create(name="Globex", subdomain="globex")
        self.discount = Discount.objects.create(
            store=self.store,
            code="SAVE10",
            discount_type=Discount.DiscountType.PERCENTAGE,
            value=Decimal("10"),
        )

    def _reason(self, **kwargs):
        with self.assertRaises(DiscountNotApplicable) as ctx:
            resolve_discount(**kwargs)
        return ctx.exception.reason

    def test_resolves_valid_code(self):
        found = resolve_discount(store=self.store, code="SAVE10", subtotal=Decimal("50"))
        self.assertEqual(found, self.discount)

    def test_code_is_store_scoped(self):
        reason = self._reason(store=self.other, code="SAVE10", subtotal=Decimal("50"))
        self.assertEqual(reason, "unknown discount code")

    def test_code_match_is_exact(self):
        reason = self._reason(store=self.store, code="save10", subtotal=Decimal("50"))
        self.assertEqual(reason, "unknown discount code")

    def test_inactive_code(self):
        self.discount.is_active = False
        self.discount.save()
        reason = self._reason(store=self.store, code="SAVE10", subtotal=Decimal("50"))
        self.assertEqual(reason, "discount is not active")

    def test_window_is_enforced(self):
        now = timezone.now()
        self.discount.starts_at = now + timedelta(days=1)
        self.discount.save()
        self.assertEqual(
            self._reason(store=self.store, code="SAVE10", subtotal=Decimal("50"), now=now),
            "discount is not yet valid",
        )

        self.discount.starts_at = None
        self.discount.ends_at = now - timedelta(seconds=1)
        self.discount.save()
        self.assertEqual(
            self._reason(store=self.store, code="SAVE10", subtotal=Decimal("50"), now=now),
            "discount has expired",
        )

    def test_minimum_amount(self):
        self.discount.minimum_amount = Decimal("100.00")
        self.discount.save()
        reason = self._reason(store=self.store, code="SAVE10", subtotal=Decimal("99.99"))
        self.assertIn("minimum order amount", reason)

    def test_usage_limit(self):
        self.discount.usage_limit = 2
        self.discount.usage_count = 2
        self.discount.save()
        reason = self._reason(store=self.store, code="SAVE10", subtotal=Decimal("50"))
        self.assertEqual(reason, "discount usage limit reached")

    def test_amounts(self):
        self.assertEqual(
            calculate_discount_amount(self.discount, Decimal("45.50")),
            Decimal("45.50") * Decimal("10") / Decimal("100"),
        )
        fixed = Discount(code="TEN", discount_type=Discount.DiscountType.FIXED, value=Decimal("10"))
        self.assertEqual(calculate_discount_amount(fixed, Decimal("7.00")), Decimal("7.00"))
        self.assertEqual(calculate_discount_amount(fixed, Decimal("70.00")), Decimal("10"))

    def test_record_usage(self):
        record_discount_usage(self.discount.id)
        record_discount_usage(self.discount.id)
        self.discount.refresh_from_db()
        self.assertEqual(self.discount.usage_count, 2)


class DiscountValidateApiTests(APITestCase):
    """
    POST /api/stores/<subdomain>/discounts/validate/

    GUARANTEES:
    - Same rules as checkout pricing
    - Public (no auth), unknown store is 404
    """

    def setUp(self):
        self.store = Store.objects.create(name="Acme", subdomain="acme")
        Discount.objects.create(
            store=self.store,
            code="FIVE",
            discount_type=Discount.DiscountType.FIXED,
            value=Decimal("5.00"),
            minimum_amount=Decimal("20.00"),
        )
        self.url = "/api/stores/acme/discounts/validate/"

    def test_valid_code(self):
        res = self.client.post(self.url, {"code": "FIVE", "subtotal": "40.00"}, format="json")

        self.assertEqual(res.status_code, 200, res.data)
        self.assertTrue(res.data["valid"])
        self.assertEqual(res.data["discount"]["type"], "fixed")
        self.assertEqual(res.data["discount"]["discountAmount"], "5.00")

    def test_rejected_code_explains_why(self):
        res = self.client.post(self.url, {"code": "FIVE", "subtotal": "10.00"}, format="json")

        self.assertEqual(res.status_code, 400)
        self.assertFalse(res.data["valid"])
        self.assertIn("minimum order amount", res.data["detail"])

    def test_unknown_store(self):
        res = self.client.post(
            "/api/stores/nope/discounts/validate/", {"code": "FIVE", "subtotal": "40"}, format="json"
        )
        self.assertEqual(res.status_code, 404)
