"""
Recipe shopping service.

Ties the pipeline together for the HTTP layer:

    recipe name -> ingredients -> per-platform prices -> cart

and owns the request-level policies: default platforms, pantry
filtering, input limits and the friendly error cart.
"""

import logging
from typing import Iterable, List, Optional, Sequence

from savvy_cart.config import settings
from savvy_cart.models.cart import SearchIngredientPricesResponse, ShoppingCart
from savvy_cart.models.platform import ALL_PLATFORMS, PlatformCostTable, PlatformId
from savvy_cart.models.product import SelectedProduct
from savvy_cart.models.recipe import Ingredient
from savvy_cart.services.cart_builder import build_cart
from savvy_cart.services.ingredient_normalizer import plan_ingredients
from savvy_cart.services.platform_classifier import classify
from savvy_cart.services.price_search import IngredientPriceSearch, compose_message
from savvy_cart.services.recipe_discovery import RecipeDiscovery
from savvy_cart.utils.constants import (
    DEFAULT_COST_TABLE,
    FLOW_ERROR_MESSAGE,
    NO_INGREDIENTS_MESSAGE,
)
from savvy_cart.utils.validators import validate_ingredient_names

# Configure logging
logger = logging.getLogger(__name__)


def default_platforms() -> List[PlatformId]:
    """Platforms from DEFAULT_PLATFORMS, ignoring names that do not classify."""
    platforms: List[PlatformId] = []
    for name in settings.DEFAULT_PLATFORMS:
        platform = classify(name)
        if platform is not None and platform not in platforms:
            platforms.append(platform)
    return platforms


class RecipeShoppingService:
    """
    Facade over discovery, price search and cart building.

    Attributes:
        discovery: Recipe discovery service
        price_search: Ingredient price search orchestrator
        cost_table: Fee schedule used for carts
    """

    def __init__(
        self,
        discovery: RecipeDiscovery,
        price_search: IngredientPriceSearch,
        cost_table: PlatformCostTable = DEFAULT_COST_TABLE,
    ):
        self.discovery = discovery
        self.price_search = price_search
        self.cost_table = cost_table

    async def search_ingredient_prices(
        self,
        ingredients: List[Ingredient],
        platforms: Optional[Sequence[PlatformId]] = None,
        user_has: Optional[Iterable[str]] = None,
    ) -> SearchIngredientPricesResponse:
        """
        Price a list of ingredients, skipping what the user already has.

        Args:
            ingredients: Ingredients to price
            platforms: Platforms to compare (configured defaults when None)
            user_has: Names of ingredients the user already has

        Returns:
            SearchIngredientPricesResponse: Search results and summary

        Raises:
            ValueError: If the ingredient list exceeds MAX_INGREDIENTS
        """
        if not ingredients:
            return SearchIngredientPricesResponse(results=[], message=NO_INGREDIENTS_MESSAGE)

        validate_ingredient_names([i.name for i in ingredients], settings.MAX_INGREDIENTS)
        requested = list(platforms) if platforms else default_platforms()

        plan = plan_ingredients(ingredients, user_has)
        at_home = [i.name for i in plan.user_has]
        have = set(at_home)
        remaining = [i for i in ingredients if i.name not in have]

        if not remaining:
            return SearchIngredientPricesResponse(
                results=[], message=compose_message([], []), skipped=at_home
            )

        response = await self.price_search.search_ingredient_prices(remaining, requested)
        if at_home:
            response = response.model_copy(update={"skipped": at_home + response.skipped})
        return response

    def create_shopping_cart(
        self,
        products: List[SelectedProduct],
        platforms: Optional[Sequence[PlatformId]] = None,
    ) -> ShoppingCart:
        """Group selected products into a per-platform cart."""
        if platforms:
            requested = list(platforms)
        else:
            # Platforms of the products themselves, in first-seen order
            requested = list(dict.fromkeys(p.platform for p in products)) or default_platforms()
        return build_cart(products, requested, self.cost_table)

    async def recipe_shopping_flow(
        self,
        recipe_name: str,
        platforms: Optional[Sequence[PlatformId]] = None,
        user_has: Optional[Iterable[str]] = None,
    ) -> ShoppingCart:
        """
        End-to-end flow: find ingredients, price them and build the cart.

        Any failure yields an empty cart over the requested platforms with
        an apology message instead of an error.
        """
        requested = list(platforms) if platforms else list(ALL_PLATFORMS)
        try:
            found = await self.discovery.find_recipe_ingredients(recipe_name)
            prices = await self.search_ingredient_prices(
                found.recipe.ingredients, requested, user_has
            )
            return self.create_shopping_cart(prices.results, requested)
        except Exception:
            logger.error(f"Recipe shopping flow failed for '{recipe_name}'", exc_info=True)
            cart = build_cart([], requested, self.cost_table)
            return cart.model_copy(update={"message": FLOW_ERROR_MESSAGE})
