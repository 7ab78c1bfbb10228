"""
Pydantic models for recipe data.

This module defines the ingredient and recipe shapes produced by recipe
discovery and the request/response schemas of the recipe endpoints. All
models use Pydantic for validation, serialization, and type safety.
"""

from pydantic import BaseModel, Field, field_validator
from typing import List, Optional


class Ingredient(BaseModel):
    """
    One ingredient of a recipe.

    Produced by recipe discovery and read-only afterwards.

    Attributes:
        name: Ingredient name as it would appear in a grocery store
        quantity: Free-text required quantity (e.g., "2 cups", "500g")
        alternatives: Alternative names for the ingredient
    """
    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "example": {
                "name": "all-purpose flour",
                "quantity": "2 cups",
                "alternatives": ["maida"]
            }
        }
    }

    name: str = Field(..., min_length=1, max_length=100, description="Ingredient name")
    quantity: str = Field("", max_length=100, description="Required quantity with units")
    alternatives: Optional[List[str]] = Field(None, description="Alternative names")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate ingredient name is not empty or whitespace only."""
        if not v or not v.strip():
            raise ValueError('Ingredient name cannot be empty')
        return v.strip()

    @field_validator('quantity', mode='before')
    @classmethod
    def validate_quantity(cls, v) -> str:
        return "" if v is None else str(v).strip()


class Recipe(BaseModel):
    """A recipe with its ingredient list."""
    name: str = Field(..., min_length=1, description="Recipe name")
    ingredients: List[Ingredient] = Field(default_factory=list, description="Ingredients required")


class FindRecipeIngredientsRequest(BaseModel):
    """
    Request model for recipe discovery.

    Attributes:
        recipe_name: Name of the recipe to find ingredients for
    """
    recipe_name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        alias="recipeName",
        description="Name of the recipe",
        examples=["Masala Dosa"]
    )

    model_config = {"populate_by_name": True}

    @field_validator('recipe_name')
    @classmethod
    def validate_recipe_name(cls, v: str) -> str:
        """Validate recipe name is not empty or whitespace only."""
        if not v or not v.strip():
            raise ValueError('Recipe name cannot be empty')
        return v.strip()


class FindRecipeIngredientsResponse(BaseModel):
    """Recipe discovery result with a friendly message."""
    recipe: Recipe
    message: str = Field("", description="A friendly message about the recipe and ingredients")
