"""
Tests for cart aggregation, best-platform choice and the cost summary.
"""

import pytest

from savvy_cart.models.platform import PlatformCostConfig, PlatformCostTable, PlatformId
from savvy_cart.models.product import SelectedProduct
from savvy_cart.services.cart_builder import build_cart, summarize_platform_costs
from savvy_cart.utils.constants import NO_COMPLETE_PLATFORM_MESSAGE

ZEPTO, BLINKIT, INSTAMART = PlatformId.ZEPTO, PlatformId.BLINKIT, PlatformId.SWIGGY_INSTAMART


def product(name, platform, price):
    return SelectedProduct(name=name, platform=platform, price=price, original_quantity="1")


@pytest.fixture
def products():
    return [
        product("Maida", ZEPTO, 40.0),
        product("Milk", ZEPTO, 30.0),
        product("Maida", BLINKIT, 45.0),
        product("Milk", BLINKIT, 28.0),
        product("Paneer", INSTAMART, 90.0),
    ]


class TestBuildCart:

    def test_groups_and_totals(self, products):
        cart = build_cart(products, [ZEPTO, BLINKIT, INSTAMART])

        for platform, bucket in cart.cart.items():
            assert all(p.platform == platform for p in bucket)
            assert cart.total_by_platform[platform] == sum(p.price for p in bucket)
        assert cart.total_by_platform[ZEPTO] == 70.0
        assert cart.total_by_platform[BLINKIT] == 73.0

    def test_fees_are_not_in_totals(self, products):
        cart = build_cart(products, [ZEPTO])

        assert cart.total_by_platform == {ZEPTO: 70.0}

    def test_lowest_total_wins(self, products):
        cart = build_cart(products, [ZEPTO, BLINKIT])

        assert cart.best_platform == ZEPTO
        assert cart.message == "Zepto offers the best overall price at ₹70.00."

    def test_tie_goes_to_more_items(self):
        items = [
            product("A1", ZEPTO, 50.0), product("A2", ZEPTO, 50.0),
            product("B1", BLINKIT, 30.0), product("B2", BLINKIT, 30.0), product("B3", BLINKIT, 40.0),
        ]

        cart = build_cart(items, [ZEPTO, BLINKIT])

        assert cart.total_by_platform[ZEPTO] == cart.total_by_platform[BLINKIT] == 100.0
        assert cart.best_platform == BLINKIT

    def test_tie_break_is_order_independent(self):
        items = [
            product("B1", BLINKIT, 100.0),
            product("A1", ZEPTO, 0.1), product("A2", ZEPTO, 0.2), product("A3", ZEPTO, 99.7),
        ]

        assert build_cart(items, [BLINKIT, ZEPTO]).best_platform == ZEPTO
        assert build_cart(items, [ZEPTO, BLINKIT]).best_platform == ZEPTO

    def test_deterministic(self, products):
        first = build_cart(products, [ZEPTO, BLINKIT, INSTAMART])
        second = build_cart(products, [ZEPTO, BLINKIT, INSTAMART])

        assert first.total_by_platform == second.total_by_platform
        assert first.best_platform == second.best_platform
        assert first.model_dump() == second.model_dump()

    def test_empty_platforms_keep_buckets_and_are_never_best(self, products):
        cart = build_cart(products[:2], [BLINKIT, ZEPTO, PlatformId.DMART])

        assert cart.cart[BLINKIT] == []
        assert cart.cart[PlatformId.DMART] == []
        assert cart.total_by_platform[BLINKIT] == 0
        assert cart.best_platform == ZEPTO

    def test_empty_cart(self):
        cart = build_cart([], [ZEPTO, BLINKIT])

        assert cart.cart == {ZEPTO: [], BLINKIT: []}
        assert cart.total_by_platform == {ZEPTO: 0, BLINKIT: 0}
        assert cart.best_platform is None
        assert cart.message == NO_COMPLETE_PLATFORM_MESSAGE
        assert cart.cost_summary == []

    def test_products_on_unrequested_platforms_are_ignored(self, products):
        cart = build_cart(products, [ZEPTO])

        assert list(cart.cart) == [ZEPTO]
        assert len(cart.cart[ZEPTO]) == 2

    def test_serializes_with_camel_case_keys(self, products):
        body = build_cart(products, [ZEPTO]).model_dump(mode="json", by_alias=True)

        assert set(body) >= {"cart", "totalByPlatform", "bestPlatform", "message"}
        assert body["bestPlatform"] == "Zepto"
        assert body["totalByPlatform"] == {"Zepto": 70.0}
        item = body["cart"]["Zepto"][0]
        assert {"originalQuantity", "deliveryFee", "platformFee", "minOrderValue"} <= set(item)


class TestCostSummary:

    def test_effective_total_and_min_order(self, products):
        table = PlatformCostTable(
            {ZEPTO: PlatformCostConfig(delivery_fee=30, platform_fee=5, min_order_value=149)},
            default=PlatformCostConfig(delivery_fee=40, platform_fee=5, min_order_value=50),
        )
        cart = build_cart(products, [ZEPTO, BLINKIT], table)

        by_platform = {s.platform: s for s in cart.cost_summary}
        zepto = by_platform[ZEPTO]
        assert zepto.item_total == 70.0
        assert zepto.effective_total == 105.0
        assert zepto.below_min_order
        assert zepto.min_order_shortfall == 79.0

        blinkit = by_platform[BLINKIT]
        assert blinkit.delivery_fee == 40
        assert blinkit.effective_total == 118.0
        assert not blinkit.below_min_order
        assert blinkit.min_order_shortfall == 0.0

    def test_summary_does_not_change_best_platform(self):
        # Blinkit is cheaper on items but dearer once fees are added
        table = PlatformCostTable(
            {
                ZEPTO: PlatformCostConfig(delivery_fee=0, platform_fee=0, min_order_value=0),
                BLINKIT: PlatformCostConfig(delivery_fee=50, platform_fee=10, min_order_value=0),
            },
            default=PlatformCostConfig(delivery_fee=0, platform_fee=0, min_order_value=0),
        )
        items = [product("Milk", ZEPTO, 30.0), product("Milk", BLINKIT, 28.0)]

        cart = build_cart(items, [ZEPTO, BLINKIT], table)

        assert cart.best_platform == BLINKIT
        effective = {s.platform: s.effective_total for s in cart.cost_summary}
        assert effective[BLINKIT] > effective[ZEPTO]

    def test_skips_empty_platforms(self):
        assert summarize_platform_costs({ZEPTO: []}) == []
