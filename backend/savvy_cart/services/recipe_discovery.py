"""
Recipe discovery: recipe name -> ingredient list via the LLM.
"""

import logging
from typing import List

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from savvy_cart.models.recipe import FindRecipeIngredientsResponse, Ingredient, Recipe
from savvy_cart.services.llm_client import LLMClient
from savvy_cart.utils.errors import RecipeDiscoveryError
from savvy_cart.utils.validators import validate_recipe_name

logger = logging.getLogger(__name__)

DISCOVERY_SYSTEM_PROMPT = """You are an expert chef and nutritionist who helps people find recipes and identify the ingredients needed.

Provide a detailed list of ingredients needed for the recipe. For each ingredient, include:
- The exact name as it would appear in a grocery store (use simple, searchable terms)
- The required quantity with units (e.g., "2 cups", "500g")

Be specific about the type and form of each ingredient (e.g., "fresh basil leaves" rather than just "basil").

Return ONLY a JSON object with this exact structure:
{"recipeName": "...", "ingredients": [{"name": "...", "quantity": "...", "alternatives": ["..."]}], "message": "..."}
The message is one friendly sentence about the recipe."""


class _DiscoveryAnswer(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    recipe_name: str = Field("", alias="recipeName")
    ingredients: List[Ingredient] = Field(default_factory=list)
    message: str = ""


class RecipeDiscovery:
    """Finds the ingredients of a recipe by name."""

    def __init__(self, llm: LLMClient):
        self.llm = llm

    async def find_recipe_ingredients(self, recipe_name: str) -> FindRecipeIngredientsResponse:
        """
        Ask the LLM for a recipe's ingredients.

        Args:
            recipe_name: Recipe to look up (e.g., "Margherita Pizza")

        Returns:
            FindRecipeIngredientsResponse: Recipe with ingredients and a message

        Raises:
            ValueError: If the recipe name is invalid
            RecipeDiscoveryError: If the LLM fails or returns no ingredients
        """
        validate_recipe_name(recipe_name)
        recipe_name = recipe_name.strip()
        logger.info(f"Finding ingredients for recipe: {recipe_name}")

        outcome = await self.llm.generate_json(
            f"For the recipe: {recipe_name}",
            system_instruction=DISCOVERY_SYSTEM_PROMPT,
        )
        if not outcome.ok:
            raise RecipeDiscoveryError(
                f"Could not find ingredients for '{recipe_name}': {outcome.reason}"
            ) from outcome.error

        try:
            answer = _DiscoveryAnswer.model_validate(outcome.value)
        except ValidationError as e:
            raise RecipeDiscoveryError(
                f"Ingredient list for '{recipe_name}' was malformed"
            ) from e

        if not answer.ingredients:
            raise RecipeDiscoveryError(f"No ingredients found for '{recipe_name}'")

        logger.info(f"Found {len(answer.ingredients)} ingredients for {recipe_name}")
        return FindRecipeIngredientsResponse(
            recipe=Recipe(name=answer.recipe_name or recipe_name, ingredients=answer.ingredients),
            message=answer.message or f"Here are the ingredients for {recipe_name}.",
        )
