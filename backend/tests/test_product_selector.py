"""
Tests for best-product selection and its first-candidate fallback.
"""

import json

import pytest

from savvy_cart.models.platform import PlatformCostConfig, PlatformCostTable, PlatformId
from savvy_cart.models.product import RawProduct
from savvy_cart.models.recipe import Ingredient
from savvy_cart.services.product_selector import FALLBACK_REASON, BestProductSelector
from savvy_cart.utils.outcome import Failed

from conftest import FakeLLM, raw_product


def raws(*products):
    return [RawProduct.model_validate(p) for p in products]


@pytest.fixture
def flour():
    return Ingredient(name="all-purpose flour", quantity="2 cups")


@pytest.fixture
def candidates():
    return raws(
        raw_product("Pillsbury Maida", "Zepto", None, mrp="₹65", quantity="500 g"),
        raw_product("Aashirvaad Maida", "Zepto", 55, quantity="1 kg", rating=4.4),
        raw_product("Out Of Stock Maida", "Zepto", 10, available=False),
    )


class TestSelectBest:

    @pytest.mark.asyncio
    async def test_uses_llm_choice_with_aggregator_price(self, flour, candidates):
        llm = FakeLLM(lambda prompt, system: {
            "selectedProduct": {
                "name": "aashirvaad maida", "platform": "Zepto", "price": 1, "reason": "Best value per kg"
            }
        })
        selector = BestProductSelector(llm)

        selected = await selector.select_best(flour, PlatformId.ZEPTO, candidates)

        assert selected.name == "Aashirvaad Maida"
        assert selected.price == 55.0
        assert selected.platform == PlatformId.ZEPTO
        assert selected.original_quantity == "2 cups"
        assert selected.ingredient == "all-purpose flour"
        assert selected.reason == "Best value per kg"
        assert selected.rating == 4.4

    @pytest.mark.asyncio
    async def test_prompt_lists_only_available_candidates(self, flour, candidates):
        llm = FakeLLM(lambda prompt, system: Failed(reason="api_error"))

        await BestProductSelector(llm).select_best(flour, PlatformId.ZEPTO, candidates)

        prompt, system = llm.calls[0]
        assert "Ingredient needed: all-purpose flour" in prompt
        assert "Required quantity: 2 cups" in prompt
        assert "Aashirvaad Maida" in prompt
        assert "Out Of Stock Maida" not in prompt
        assert "quantity" in system.lower()

    @pytest.mark.asyncio
    async def test_llm_failure_falls_back_to_first_available(self, flour, candidates, failing_llm):
        selected = await BestProductSelector(failing_llm).select_best(flour, PlatformId.ZEPTO, candidates)

        assert selected.name == "Pillsbury Maida"
        assert selected.price == 65.0  # mrp when offer_price is missing
        assert selected.reason == FALLBACK_REASON

    @pytest.mark.asyncio
    async def test_llm_exception_falls_back(self, flour, candidates):
        def explode(prompt, system):
            raise RuntimeError("quota exceeded")

        selected = await BestProductSelector(FakeLLM(explode)).select_best(
            flour, PlatformId.ZEPTO, candidates
        )

        assert selected.name == "Pillsbury Maida"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("answer", [
        {},
        {"selectedProduct": None},
        {"selectedProduct": {"price": 10}},
        {"selectedProduct": {"name": "Some Product Not In The List"}},
    ])
    async def test_unusable_answers_fall_back(self, flour, candidates, answer):
        llm = FakeLLM(lambda prompt, system: answer)

        selected = await BestProductSelector(llm).select_best(flour, PlatformId.ZEPTO, candidates)

        assert selected.name == "Pillsbury Maida"
        assert selected.reason == FALLBACK_REASON

    @pytest.mark.asyncio
    async def test_unparsable_prices_become_zero(self, flour, failing_llm):
        products = raws(raw_product("Loose Maida", "Zepto", "N/A", mrp=None))

        selected = await BestProductSelector(failing_llm).select_best(flour, PlatformId.ZEPTO, products)

        assert selected.price == 0.0

    @pytest.mark.asyncio
    async def test_no_available_candidates_returns_none(self, flour, failing_llm):
        products = raws(raw_product("Gone", "Zepto", 10, available=False))

        selected = await BestProductSelector(failing_llm).select_best(flour, PlatformId.ZEPTO, products)

        assert selected is None
        assert failing_llm.calls == []

    @pytest.mark.asyncio
    async def test_enriches_with_injected_cost_table(self, flour, candidates, failing_llm):
        table = PlatformCostTable(
            {PlatformId.ZEPTO: PlatformCostConfig(delivery_fee=11, platform_fee=2, min_order_value=99)},
            default=PlatformCostConfig(delivery_fee=0, platform_fee=0, min_order_value=0),
        )

        selected = await BestProductSelector(failing_llm, table).select_best(
            flour, PlatformId.ZEPTO, candidates
        )

        assert (selected.delivery_fee, selected.platform_fee, selected.min_order_value) == (11, 2, 99)

    @pytest.mark.asyncio
    async def test_unknown_platform_uses_default_costs(self, flour, failing_llm):
        table = PlatformCostTable(
            {},
            default=PlatformCostConfig(delivery_fee=40, platform_fee=5, min_order_value=299),
        )
        products = raws(raw_product("JioMart Maida", "JioMart", 50))

        selected = await BestProductSelector(failing_llm, table).select_best(
            flour, PlatformId.JIOMART, products
        )

        assert selected.delivery_fee == 40
        assert selected.min_order_value == 299


class TestSamePackNames:
    """Several pack sizes listed under one product name"""

    @pytest.fixture
    def butter(self):
        return Ingredient(name="butter", quantity="500 g")

    @pytest.fixture
    def packs(self):
        return raws(
            raw_product("Amul Butter", "Zepto", 56, quantity="100 g"),
            raw_product("Amul Butter", "Zepto", 245, quantity="500 g"),
        )

    @pytest.mark.asyncio
    async def test_quantity_picks_the_pack(self, butter, packs):
        llm = FakeLLM(lambda prompt, system: {"selectedProduct": {
            "name": "Amul Butter", "quantity": "500 g", "price": 245, "reason": "closest to 500 g"
        }})

        selected = await BestProductSelector(llm).select_best(butter, PlatformId.ZEPTO, packs)

        assert (selected.quantity, selected.price) == ("500 g", 245.0)
        assert selected.reason == "closest to 500 g"

    @pytest.mark.asyncio
    async def test_listed_index_picks_the_pack(self, butter, packs):
        llm = FakeLLM(lambda prompt, system: {"selectedProduct": {
            "index": 1, "name": "Amul Butter", "reason": "closest to 500 g"
        }})

        selected = await BestProductSelector(llm).select_best(butter, PlatformId.ZEPTO, packs)

        assert selected.quantity == "500 g"
        prompt, _ = llm.calls[0]
        listing = json.loads(prompt.split("Available products:\n", 1)[1])
        assert [p["index"] for p in listing] == [0, 1]

    @pytest.mark.asyncio
    async def test_price_breaks_ties_without_quantity(self, butter, packs):
        llm = FakeLLM(lambda prompt, system: {"selectedProduct": {"name": "amul butter", "price": "₹240"}})

        selected = await BestProductSelector(llm).select_best(butter, PlatformId.ZEPTO, packs)

        assert selected.price == 245.0

    @pytest.mark.asyncio
    async def test_index_disagreeing_with_name_is_ignored(self, butter):
        products = raws(
            raw_product("Amul Butter", "Zepto", 56, quantity="100 g"),
            raw_product("Britannia Cheese", "Zepto", 120, quantity="200 g"),
        )
        llm = FakeLLM(lambda prompt, system: {"selectedProduct": {"index": 1, "name": "Amul Butter"}})

        selected = await BestProductSelector(llm).select_best(butter, PlatformId.ZEPTO, products)

        assert selected.name == "Amul Butter"
