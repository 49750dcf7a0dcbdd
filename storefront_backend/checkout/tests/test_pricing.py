# checkout/tests/test_pricing.py

from decimal import Decimal
from types import SimpleNamespace

from django.test import SimpleTestCase

from checkout.services.pricing import calculate_totals
from checkout.services.types import ResolvedLine
from promotions.models import Discount

SHIPPING = Decimal("10.00")
TAX_RATE = Decimal("0.08")


def _line(price, quantity):
    product = SimpleNamespace(id="p1", name="Tote")
    variant = SimpleNamespace(id="v1", name="Default", price=Decimal(price), product=product)
    return ResolvedLine(variant=variant, quantity=quantity)


def _discount(kind, value):
    return Discount(code="X", discount_type=kind, value=Decimal(value))


class PricingCalculatorTests(SimpleTestCase):
    """
    GUARANTEES:
    - subtotal -> discount -> tax on (subtotal - discount) -> flat shipping
    - percentage discount is exact: S * p / 100
    - fixed discount never exceeds the subtotal
    - rounding happens only when reporting
    - same inputs, same totals
    """

    def _totals(self, lines, discount=None):
        return calculate_totals(
            lines, discount=discount, shipping_amount=SHIPPING, tax_rate=TAX_RATE
        )

    def test_standard_cart_without_discount(self):
        report = self._totals([_line("50.00", 1)]).as_report()

        self.assertEqual(report["subtotal"], "50.00")
        self.assertEqual(report["discountAmount"], "0.00")
        self.assertEqual(report["taxAmount"], "4.00")
        self.assertEqual(report["shippingAmount"], "10.00")
        self.assertEqual(report["total"], "64.00")

    def test_percentage_discount_reduces_taxable_amount(self):
        totals = self._totals(
            [_line("25.00", 2)], discount=_discount(Discount.DiscountType.PERCENTAGE, "10")
        )
        report = totals.as_report()

        self.assertEqual(report["subtotal"], "50.00")
        self.assertEqual(report["discountAmount"], "5.00")
        self.assertEqual(report["taxableAmount"], "45.00")
        self.assertEqual(report["taxAmount"], "3.60")
        self.assertEqual(report["total"], "58.60")

    def test_percentage_discount_is_exact(self):
        totals = self._totals(
            [_line("33.33", 1)], discount=_discount(Discount.DiscountType.PERCENTAGE, "15")
        )
        self.assertEqual(totals.discount, Decimal("33.33") * Decimal("15") / Decimal("100"))

    def test_fixed_discount_is_capped_at_subtotal(self):
        totals = self._totals(
            [_line("20.00", 1)], discount=_discount(Discount.DiscountType.FIXED, "30")
        )

        self.assertEqual(totals.discount, Decimal("20.00"))
        self.assertEqual(totals.taxable_amount, Decimal("0"))
        self.assertEqual(totals.as_report()["total"], "10.00")

    def test_intermediate_values_are_not_rounded(self):
        totals = self._totals([_line("10.05", 1)])

        self.assertEqual(totals.tax, Decimal("10.05") * TAX_RATE)
        self.assertEqual(totals.as_report()["taxAmount"], "0.80")

    def test_pricing_is_deterministic(self):
        lines = [_line("19.99", 3), _line("5.00", 2)]
        discount = _discount(Discount.DiscountType.PERCENTAGE, "12.5")

        self.assertEqual(
            self._totals(lines, discount).as_report(),
            self._totals(lines, discount).as_report(),
        )
