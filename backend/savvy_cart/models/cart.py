"""
Pydantic models for price search and shopping carts.

Public response shapes use the camelCase keys the front-end depends on
(totalByPlatform, bestPlatform, originalQuantity, ...); Python code uses
the snake_case attribute names.
"""

from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator

from savvy_cart.models.platform import PlatformId
from savvy_cart.models.product import CamelModel, SelectedProduct
from savvy_cart.models.recipe import Ingredient


def _dedupe_platforms(platforms: Optional[List[PlatformId]]) -> Optional[List[PlatformId]]:
    if platforms is None:
        return None
    seen: List[PlatformId] = []
    for platform in platforms:
        if platform not in seen:
            seen.append(platform)
    return seen


class SearchIngredientPricesRequest(CamelModel):
    """
    Request model for the ingredient price search.

    Attributes:
        ingredients: Ingredients to price (may be empty)
        platforms: Platforms to compare; the configured defaults when omitted
        user_has: Ingredient names the user already has at home
    """
    ingredients: List[Ingredient] = Field(default_factory=list)
    platforms: Optional[List[PlatformId]] = None
    user_has: List[str] = Field(default_factory=list)

    @field_validator('platforms')
    @classmethod
    def validate_platforms(cls, v: Optional[List[PlatformId]]) -> Optional[List[PlatformId]]:
        return _dedupe_platforms(v)

    model_config = {
        "json_schema_extra": {
            "example": {
                "ingredients": [
                    {"name": "all-purpose flour", "quantity": "2 cups"},
                    {"name": "salt", "quantity": "1 tsp"}
                ],
                "platforms": ["Zepto", "Blinkit"],
                "userHas": []
            }
        }
    }


class SearchIngredientPricesResponse(CamelModel):
    """
    Result of an ingredient price search.

    Attributes:
        results: One selected product per (ingredient, platform) pair found
        message: Human-readable summary, naming ingredients that could not be found
        skipped: Ingredients not searched (basic items or already at home)
        unavailable: Ingredients searched but not found on any requested platform
        degraded: True when the result came from the whole-request LLM fallback
    """
    results: List[SelectedProduct] = Field(default_factory=list)
    message: str
    skipped: List[str] = Field(default_factory=list)
    unavailable: List[str] = Field(default_factory=list)
    degraded: bool = False


class CreateShoppingCartRequest(CamelModel):
    """Request model for building a cart from selected products."""
    products: List[SelectedProduct] = Field(default_factory=list)
    platforms: Optional[List[PlatformId]] = None

    @field_validator('platforms')
    @classmethod
    def validate_platforms(cls, v: Optional[List[PlatformId]]) -> Optional[List[PlatformId]]:
        return _dedupe_platforms(v)


class PlatformCostSummary(CamelModel):
    """
    Fee-inclusive view of one platform's cart (presentation only).

    Attributes:
        item_total: Sum of product prices
        delivery_fee / platform_fee: The platform's static fees
        min_order_value: The platform's minimum order value
        effective_total: item_total plus both fees
        below_min_order: item_total is under the minimum order value
        min_order_shortfall: Amount still needed to reach the minimum
    """
    platform: PlatformId
    item_count: int
    item_total: float
    delivery_fee: float
    platform_fee: float
    min_order_value: float
    effective_total: float
    below_min_order: bool
    min_order_shortfall: float


class ShoppingCart(CamelModel):
    """
    Products grouped by platform with per-platform item totals.

    total_by_platform excludes fees; cost_summary carries the fee-inclusive view.
    """
    cart: Dict[PlatformId, List[SelectedProduct]] = Field(default_factory=dict)
    total_by_platform: Dict[PlatformId, float] = Field(default_factory=dict)
    best_platform: Optional[PlatformId] = None
    message: str
    cost_summary: List[PlatformCostSummary] = Field(default_factory=list)


class RecipeShoppingRequest(CamelModel):
    """Request model for the end-to-end recipe shopping flow."""
    recipe_name: str = Field(..., min_length=1, max_length=200)
    platforms: Optional[List[PlatformId]] = None
    user_has: List[str] = Field(default_factory=list)

    @field_validator('recipe_name')
    @classmethod
    def validate_recipe_name(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError('Recipe name cannot be empty')
        return v.strip()

    @field_validator('platforms')
    @classmethod
    def validate_platforms(cls, v: Optional[List[PlatformId]]) -> Optional[List[PlatformId]]:
        return _dedupe_platforms(v)


class RecipeActionRequest(CamelModel):
    """Action-dispatch request: {"action": "...", "data": {...}}."""
    action: str
    data: Dict[str, Any] = Field(default_factory=dict)
