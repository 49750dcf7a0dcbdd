# checkout/tests/test_session_payload.py

from decimal import Decimal
from types import SimpleNamespace

from django.test import SimpleTestCase

from checkout.services.session_payload import (
    build_line_items,
    join_metadata_value,
    merchant_payout,
    platform_fee_cents,
    product_images,
    split_metadata_value,
)
from checkout.services.types import ResolvedLine
from checkout.tests.fixtures import TEST_CONFIG
from stores.services.payment_settings import NuviSettings


def _line(*, product_name="Tee", variant_name="Large", price="19.99", quantity=2, images=()):
    product = SimpleNamespace(id="p1", name=product_name, images=list(images))
    variant = SimpleNamespace(id="v1", name=variant_name, price=Decimal(price), product=product)
    return ResolvedLine(variant=variant, quantity=quantity)


class SessionPayloadTests(SimpleTestCase):
    """
    GUARANTEES:
    - Unit amounts are minor units
    - Variant name becomes the description only when it differs
    - Images: relative paths are made absolute, junk dropped, at most 8
    - Platform fee uses store overrides, falling back to defaults
    - Metadata values over the provider limit are split into numbered keys
    """

    def test_line_item_shape(self):
        item = build_line_items([_line()], currency="USD", config=TEST_CONFIG)[0]

        self.assertEqual(item["quantity"], 2)
        self.assertEqual(item["price_data"]["currency"], "usd")
        self.assertEqual(item["price_data"]["unit_amount"], 1999)
        self.assertEqual(item["price_data"]["product_data"]["name"], "Tee")
        self.assertEqual(item["price_data"]["product_data"]["description"], "Large")
        self.assertEqual(item["price_data"]["product_data"]["metadata"]["variantId"], "v1")
        self.assertNotIn("images", item["price_data"]["product_data"])

    def test_same_variant_name_has_no_description(self):
        item = build_line_items([_line(variant_name="Tee")], currency="USD", config=TEST_CONFIG)[0]
        self.assertNotIn("description", item["price_data"]["product_data"])

    def test_images_are_filtered(self):
        product = SimpleNamespace(
            images=[
                "/media/a.png",
                {"url": "https://cdn.test/b.png"},
                "ftp://cdn.test/c.png",
                "not a url",
                "",
            ]
            + [f"https://cdn.test/{i}.png" for i in range(10)]
        )

        images = product_images(product, TEST_CONFIG)

        self.assertEqual(len(images), 8)
        self.assertEqual(images[0], "https://shop.test/media/a.png")
        self.assertEqual(images[1], "https://cdn.test/b.png")
        self.assertTrue(all(url.startswith("https://") for url in images))

    def test_platform_fee_defaults(self):
        fee = platform_fee_cents(Decimal("64.00"), NuviSettings(enabled=True), TEST_CONFIG)

        self.assertEqual(fee, 428)
        self.assertEqual(merchant_payout(Decimal("64.00"), fee), Decimal("59.72"))

    def test_platform_fee_zero_overrides_are_respected(self):
        settings = NuviSettings(enabled=True, commission_percent=Decimal("0"), fixed_fee=Decimal("0"))
        self.assertEqual(platform_fee_cents(Decimal("64.00"), settings, TEST_CONFIG), 0)

    def test_short_metadata_value_is_not_split(self):
        self.assertEqual(split_metadata_value("cartItems", "[]"), {"cartItems": "[]"})

    def test_long_metadata_value_is_split_under_the_limit(self):
        value = "x" * 1201
        parts = split_metadata_value("cartItems", value)

        self.assertEqual(parts["cartItemsParts"], "3")
        self.assertTrue(all(len(v) <= 500 for v in parts.values()))
        self.assertEqual(join_metadata_value(parts, "cartItems"), value)

    def test_missing_part_is_an_error(self):
        parts = split_metadata_value("cartItems", "x" * 600)
        del parts["cartItems_1"]
        with self.assertRaises(ValueError):
            join_metadata_value(parts, "cartItems")
