"""
Ingredient price search across delivery platforms.

For every ingredient, concurrently:
    normalize -> search aggregator -> group by platform -> select best per platform

Each ingredient and each (ingredient, platform) pair is an isolated
task: failures are captured per task and merged after all tasks settle,
so one broken search or one misbehaving LLM call only costs that unit's
result. If the orchestration itself blows up, a single holistic LLM call
produces a degraded, estimate-only answer.
"""

import asyncio
import json
import logging
from collections import defaultdict
from typing import Dict, List, NamedTuple, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from savvy_cart.models.cart import SearchIngredientPricesResponse
from savvy_cart.models.platform import PlatformCostTable, PlatformId
from savvy_cart.models.product import RawProduct, SelectedProduct
from savvy_cart.models.recipe import Ingredient
from savvy_cart.services.ingredient_normalizer import SKIP, normalize
from savvy_cart.services.llm_client import LLMClient
from savvy_cart.services.platform_classifier import classify
from savvy_cart.services.product_search import ProductSearchClient
from savvy_cart.services.product_selector import BestProductSelector
from savvy_cart.utils.constants import DEFAULT_COST_TABLE, NO_INGREDIENTS_MESSAGE
from savvy_cart.utils.helpers import parse_price
from savvy_cart.utils.outcome import Failed

# Configure logging
logger = logging.getLogger(__name__)

FALLBACK_SYSTEM_PROMPT = """You are a grocery price assistant for Indian quick-commerce platforms.
Live price search is unavailable. From general knowledge, estimate the most relevant product
for each ingredient on each requested platform.

Return ONLY a JSON object with this exact structure:
{"products": [{"ingredient": "...", "name": "...", "platform": "...", "price": 0, "brand": "...", "quantity": "..."}]}
Use only the platform names given. Prices are in INR."""

FALLBACK_REASON = "Estimated price (live search unavailable)."
SEARCH_UNAVAILABLE_MESSAGE = "Unable to search ingredient prices right now. Please try again."


class IngredientResult(NamedTuple):
    """Outcome of one ingredient's search, accumulated locally by its task."""
    ingredient: Ingredient
    skipped: bool = False
    selections: Sequence[SelectedProduct] = ()


class _EstimatedProduct(BaseModel):
    model_config = ConfigDict(extra="ignore")

    ingredient: Optional[str] = None
    name: str = Field(..., min_length=1)
    platform: str
    price: Optional[Union[float, str]] = None
    brand: Optional[str] = None
    quantity: Optional[str] = None


def compose_message(results: List[SelectedProduct], unavailable: List[str]) -> str:
    """'Found {n} products across {m} platforms.' plus the names that could not be found."""
    platform_count = len({product.platform for product in results})
    message = f"Found {len(results)} products across {platform_count} platforms."
    if unavailable:
        message += f" Unable to find: {', '.join(unavailable)}."
    return message


class IngredientPriceSearch:
    """
    Orchestrates per-ingredient searches and per-platform selections.

    Attributes:
        search_client: Aggregator client
        selector: Best-product selector
        llm: Client for the whole-request fallback
        cost_table: Fee schedule for fallback products
    """

    def __init__(
        self,
        search_client: ProductSearchClient,
        selector: BestProductSelector,
        llm: LLMClient,
        cost_table: PlatformCostTable = DEFAULT_COST_TABLE,
    ):
        self.search_client = search_client
        self.selector = selector
        self.llm = llm
        self.cost_table = cost_table

    async def _select_per_platform(
        self,
        ingredient: Ingredient,
        grouped: Dict[PlatformId, List[RawProduct]],
    ) -> List[SelectedProduct]:
        platforms = list(grouped)
        settled = await asyncio.gather(
            *(self.selector.select_best(ingredient, p, grouped[p]) for p in platforms),
            return_exceptions=True,
        )

        selections: List[SelectedProduct] = []
        for platform, outcome in zip(platforms, settled):
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            if isinstance(outcome, BaseException):
                logger.error(
                    f"Selection failed for '{ingredient.name}' on {platform}: {outcome}",
                    exc_info=outcome,
                )
                continue
            if outcome is not None:
                selections.append(outcome)
        return selections

    async def _search_ingredient(
        self,
        ingredient: Ingredient,
        requested: Sequence[PlatformId],
    ) -> IngredientResult:
        term = normalize(ingredient.name)
        if term is SKIP:
            logger.info(f"Skipping basic ingredient: {ingredient.name}")
            return IngredientResult(ingredient=ingredient, skipped=True)

        logger.info(f"Searching for ingredient '{ingredient.name}' as '{term}'")
        searched = await self.search_client.search(term)
        if not searched.ok:
            logger.warning(f"Search failed for '{ingredient.name}': {searched.reason}")
            return IngredientResult(ingredient=ingredient)

        grouped: Dict[PlatformId, List[RawProduct]] = defaultdict(list)
        for raw in searched.value:
            platform = classify(raw.platform_name)
            if platform is None:
                logger.warning(f"Dropping '{raw.name}': unrecognized platform '{raw.platform_name}'")
                continue
            if platform in requested:
                grouped[platform].append(raw)

        if not grouped:
            logger.info(f"No products for '{ingredient.name}' on requested platforms")
            return IngredientResult(ingredient=ingredient)

        selections = await self._select_per_platform(ingredient, grouped)
        return IngredientResult(ingredient=ingredient, selections=selections)

    async def _orchestrate(
        self,
        ingredients: List[Ingredient],
        platforms: List[PlatformId],
    ) -> SearchIngredientPricesResponse:
        settled = await asyncio.gather(
            *(self._search_ingredient(ingredient, platforms) for ingredient in ingredients),
            return_exceptions=True,
        )

        results: List[SelectedProduct] = []
        by_platform: Dict[PlatformId, List[SelectedProduct]] = defaultdict(list)
        skipped: List[str] = []
        unavailable: List[str] = []

        for ingredient, outcome in zip(ingredients, settled):
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            if isinstance(outcome, BaseException):
                logger.error(f"Search task failed for '{ingredient.name}': {outcome}", exc_info=outcome)
                unavailable.append(ingredient.name)
                continue
            if outcome.skipped:
                skipped.append(ingredient.name)
                continue
            if not outcome.selections:
                unavailable.append(ingredient.name)
                continue
            for product in outcome.selections:
                results.append(product)
                by_platform[product.platform].append(product)

        for platform, products in by_platform.items():
            logger.debug(f"{platform}: {len(products)} products selected")

        message = compose_message(results, unavailable)
        logger.info(message)
        return SearchIngredientPricesResponse(
            results=results,
            message=message,
            skipped=skipped,
            unavailable=unavailable,
        )

    def _parse_estimates(
        self,
        data: dict,
        ingredients: List[Ingredient],
        platforms: List[PlatformId],
    ) -> Optional[List[SelectedProduct]]:
        """Estimated products from the fallback answer, or None if it has no product list."""
        raw = data.get("products")
        if not isinstance(raw, list):
            return None

        quantities = {i.name.lower(): i.quantity for i in ingredients}
        products: List[SelectedProduct] = []

        for item in raw:
            try:
                estimate = _EstimatedProduct.model_validate(item)
            except ValidationError:
                continue
            platform = classify(estimate.platform)
            if platform is None or platform not in platforms:
                continue
            costs = self.cost_table.for_platform(platform)
            products.append(
                SelectedProduct(
                    name=estimate.name,
                    platform=platform,
                    price=parse_price(estimate.price) or 0.0,
                    brand=estimate.brand,
                    quantity=estimate.quantity,
                    original_quantity=quantities.get((estimate.ingredient or "").lower()) or "N/A",
                    delivery_fee=costs.delivery_fee,
                    platform_fee=costs.platform_fee,
                    min_order_value=costs.min_order_value,
                    ingredient=estimate.ingredient,
                    reason=FALLBACK_REASON,
                )
            )
        return products

    async def _holistic_fallback(
        self,
        ingredients: List[Ingredient],
        platforms: List[PlatformId],
    ) -> SearchIngredientPricesResponse:
        lines = "\n".join(f"- {i.name} ({i.quantity or 'N/A'})" for i in ingredients)
        prompt = (
            f"Ingredients to search for:\n{lines}\n\n"
            f"Platforms to search: {json.dumps([p.value for p in platforms])}"
        )
        try:
            outcome = await self.llm.generate_json(prompt, system_instruction=FALLBACK_SYSTEM_PROMPT)
        except Exception as e:
            outcome = Failed(reason="llm_exception", error=e)
        if not outcome.ok:
            logger.error(f"Holistic price fallback failed: {outcome.reason}")
            return SearchIngredientPricesResponse(
                results=[], message=SEARCH_UNAVAILABLE_MESSAGE, degraded=True
            )

        results = self._parse_estimates(outcome.value, ingredients, platforms)
        if results is None:
            logger.error("Holistic price fallback answered without a product list")
            return SearchIngredientPricesResponse(
                results=[], message=SEARCH_UNAVAILABLE_MESSAGE, degraded=True
            )
        covered = {(p.ingredient or "").lower() for p in results}
        unavailable = [i.name for i in ingredients if i.name.lower() not in covered]
        message = compose_message(results, unavailable) + " Prices are estimates."
        return SearchIngredientPricesResponse(
            results=results,
            message=message,
            unavailable=unavailable,
            degraded=True,
        )

    async def search_ingredient_prices(
        self,
        ingredients: List[Ingredient],
        platforms: List[PlatformId],
    ) -> SearchIngredientPricesResponse:
        """
        Find the best product for every ingredient on every requested platform.

        Args:
            ingredients: Ingredients to price
            platforms: Platforms to compare; results never include others

        Returns:
            SearchIngredientPricesResponse: Selections (at most one per
            ingredient and platform), a summary message naming the
            ingredients that could not be found, and the skipped names
        """
        if not ingredients:
            return SearchIngredientPricesResponse(results=[], message=NO_INGREDIENTS_MESSAGE)

        logger.info(
            f"Price search for {len(ingredients)} ingredients on "
            f"{[p.value for p in platforms]}"
        )
        try:
            return await self._orchestrate(ingredients, platforms)
        except Exception:
            logger.error("Price search orchestration failed; using holistic fallback", exc_info=True)
            return await self._holistic_fallback(ingredients, platforms)
