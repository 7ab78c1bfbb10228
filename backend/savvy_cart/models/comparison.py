"""
Pydantic models for product comparison and savings suggestions.
"""

from enum import Enum
from typing import List, Optional

from pydantic import Field, field_validator

from savvy_cart.models.product import CamelModel, CatalogProduct


class ProductSpec(CamelModel):
    """The product fields the equivalency check compares."""
    name: str = Field(..., min_length=1, max_length=200)
    brand: Optional[str] = None
    quantity: Optional[str] = None


class ProductEquivalencyRequest(CamelModel):
    """Two products to compare."""
    product1: ProductSpec
    product2: ProductSpec

    model_config = {
        "json_schema_extra": {
            "example": {
                "product1": {"name": "Amul Taaza Toned Milk", "brand": "Amul", "quantity": "500 ml"},
                "product2": {"name": "Amul Toned Milk Pouch", "brand": "Amul", "quantity": "500 ml"}
            }
        }
    }


class ProductEquivalencyResult(CamelModel):
    """
    Equivalency verdict.

    Attributes:
        equivalent: Whether the two products are the same product
        reason: Short justification (e.g., "Same brand and quantity")
    """
    equivalent: bool
    reason: str


class AlternativeProduct(CatalogProduct):
    """A catalogue product offered as an alternative to a cart item."""
    is_equivalent: bool = False
    equivalency_reason: Optional[str] = None


class ComparisonItem(CamelModel):
    """A cart item with its cheaper-first list of alternatives."""
    original_item: CatalogProduct
    alternatives: List[AlternativeProduct] = Field(default_factory=list)


class FindAlternativesRequest(CamelModel):
    """
    Request model for cross-platform alternatives.

    Attributes:
        item: The cart item to find alternatives for
        query: Catalogue search query (defaults to the item name)
    """
    item: CatalogProduct
    query: Optional[str] = Field(None, max_length=100)


class SuggestionType(str, Enum):
    COST = "cost"
    MOV_ALERT = "mov_alert"
    CONVENIENCE = "convenience"
    FEE_OPTIMIZATION = "fee_optimization"


class SavingsCartItem(CamelModel):
    """One cart line sent to the savings advisor."""
    name: str = Field(..., min_length=1)
    brand: str = ""
    quantity: str = ""
    price: float = Field(..., ge=0.0)
    platform: str
    cart_quantity: int = Field(1, ge=1)

    @field_validator("brand", "quantity", mode="before")
    @classmethod
    def none_to_empty(cls, v) -> str:
        return "" if v is None else str(v)


class SavingsSuggestionRequest(CamelModel):
    cart_items: List[SavingsCartItem] = Field(default_factory=list)


class SavingsSuggestion(CamelModel):
    """
    One actionable suggestion.

    Attributes:
        suggestion: What the user should do
        estimated_savings: Estimated saving in INR (0 for alerts and tips)
        type: Suggestion category
    """
    suggestion: str = Field(..., min_length=1)
    estimated_savings: float = 0.0
    type: Optional[SuggestionType] = None


class SavingsSuggestionResponse(CamelModel):
    suggestions: List[SavingsSuggestion] = Field(default_factory=list)
