"""
Ingredient name normalization.

Recipe ingredient names ("fresh basil leaves", "2 cups all-purpose flour")
make poor search queries for the grocery aggregator. This module reduces
them to short searchable terms and decides which ingredients are not
worth comparison-shopping at all.

All functions here are pure; nothing touches the network.
"""

import logging
from typing import Iterable, List, NamedTuple, Optional, Union

from savvy_cart.models.recipe import Ingredient
from savvy_cart.utils.constants import (
    BASIC_INGREDIENTS,
    INGREDIENT_SIMPLIFICATIONS,
    QUALIFIER_WORDS,
)

# Configure logging
logger = logging.getLogger(__name__)


class _Skip:
    """Sentinel returned for ingredients that should not be searched."""

    _instance: Optional["_Skip"] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SKIP"

    def __bool__(self) -> bool:
        return False


SKIP = _Skip()

NormalizedTerm = Union[str, _Skip]


def is_basic_ingredient(name: str) -> bool:
    """
    Check whether an ingredient is a pantry basic (water, salt, pepper, sugar).

    The test is a substring match on the lower-cased name, so "warm water"
    and "fine sea salt" both count as basic.
    """
    lowered = name.lower()
    return any(basic in lowered for basic in BASIC_INGREDIENTS)


def _simplify_by_heuristics(lowered: str, words: List[str]) -> str:
    if "rice" in lowered:
        return "rice"

    if "dal" in lowered or "lentil" in lowered:
        if len(words) >= 2 and words[-1] == "dal":
            return f"{words[-2]} dal"
        return words[-1]

    if words[0] in QUALIFIER_WORDS:
        return words[1]
    return words[0]


def normalize(raw_name: str) -> NormalizedTerm:
    """
    Reduce a free-text ingredient name to a searchable term.

    Rules, in order:
    1. Basic ingredients (see is_basic_ingredient) return SKIP.
    2. The simplification table is checked in order; the first key that is
       a substring of the lower-cased name wins. A None target means SKIP.
    3. A single-word name is returned unchanged (original casing).
    4. Heuristics: "rice" -> "rice"; dal/lentil names -> the dal type or
       the last word; otherwise the first word, or the second word when
       the first is a qualifier such as "fresh" or "dried".

    Args:
        raw_name: Ingredient name as produced by recipe discovery

    Returns:
        NormalizedTerm: A non-empty search term, or SKIP

    Example:
        >>> normalize("fresh basil leaves")
        'basil'
        >>> normalize("warm water")
        SKIP
    """
    name = (raw_name or "").strip()
    if not name:
        return SKIP

    if is_basic_ingredient(name):
        return SKIP

    lowered = name.lower()
    for key, target in INGREDIENT_SIMPLIFICATIONS:
        if key in lowered:
            return SKIP if target is None else target

    words = lowered.split()
    if len(words) == 1:
        return name

    return _simplify_by_heuristics(lowered, words)


class IngredientPlan(NamedTuple):
    """Triage of a recipe's ingredients before any search runs."""
    user_has: List[Ingredient]
    basic: List[Ingredient]
    to_search: List[Ingredient]


def plan_ingredients(
    ingredients: Iterable[Ingredient],
    user_has: Optional[Iterable[str]] = None,
) -> IngredientPlan:
    """
    Partition ingredients into what the user has, pantry basics, and the rest.

    Pantry matching is a case-insensitive exact name match. Input order is
    preserved within each group.

    Args:
        ingredients: Recipe ingredients
        user_has: Ingredient names the user already has at home

    Returns:
        IngredientPlan: (user_has, basic, to_search)
    """
    pantry = {item.strip().lower() for item in (user_has or []) if item and item.strip()}

    have: List[Ingredient] = []
    basic: List[Ingredient] = []
    to_search: List[Ingredient] = []

    for ingredient in ingredients:
        if ingredient.name.lower() in pantry:
            have.append(ingredient)
        elif is_basic_ingredient(ingredient.name):
            basic.append(ingredient)
        else:
            to_search.append(ingredient)

    if basic:
        logger.info(f"Skipping basic ingredients: {[i.name for i in basic]}")
    if have:
        logger.info(f"User already has: {[i.name for i in have]}")

    return IngredientPlan(user_has=have, basic=basic, to_search=to_search)
