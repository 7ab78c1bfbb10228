"""
Centralized constants and reference data.

This module contains the hardcoded lookup tables used by the shopping
pipeline. Centralizing these values makes them easy to modify and
maintain.

Categories:
- Basic ingredients that are never comparison-shopped
- Ingredient name simplifications for the aggregator search
- Platform name aliases returned by the aggregator
- Platform fee schedule
"""

from typing import Dict, List, Optional, Tuple

from savvy_cart.models.platform import PlatformCostConfig, PlatformCostTable, PlatformId

# ==============================================================================
# INGREDIENT NORMALIZATION
# ==============================================================================

# Items assumed to be on hand in every kitchen (substring match, lower-case)
BASIC_INGREDIENTS: List[str] = [
    "water", "warm water", "hot water", "cold water", "lukewarm water",
    "salt", "fine sea salt", "pepper", "sugar",
]


# Ordered (first match wins). A None target means the ingredient is skipped.
INGREDIENT_SIMPLIFICATIONS: List[Tuple[str, Optional[str]]] = [
    # Flours
    ("all-purpose flour", "flour"),
    ("all purpose flour", "flour"),

    # Yeasts
    ("instant dry yeast", "yeast"),
    ("active dry yeast", "yeast"),

    # Tomatoes
    ("crushed tomatoes", "tomato"),
    ("tomato sauce", "tomato"),
    ("tomato paste", "tomato"),

    # Cheeses
    ("shredded mozzarella cheese", "mozzarella"),
    ("fresh mozzarella cheese", "mozzarella"),
    ("mozzarella cheese", "mozzarella"),
    ("shredded cheese", "cheese"),

    # Herbs and spices
    ("fresh basil leaves", "basil"),
    ("dried oregano", "oregano"),
    ("garlic powder", "garlic"),
    ("fenugreek seeds", "fenugreek"),

    # Oils
    ("extra virgin olive oil", "oil"),
    ("olive oil", "oil"),
    ("vegetable oil", "oil"),

    # Garnish
    ("optional toppings", None),

    # Rice and grains
    ("parboiled rice", "parboiled rice"),
    ("idli rice", "idli rice"),

    # Lentils and beans
    ("whole white urad dal", "urad dal"),
    ("white urad dal", "urad dal"),
    ("urad dal", "urad dal"),

    # Eggs
    ("large eggs", "egg"),
    ("counted eggs", "egg"),
    ("dozen eggs", "egg"),
]


# Leading qualifiers that are never the main ingredient word
QUALIFIER_WORDS: frozenset = frozenset({
    "fresh", "dried", "ground", "chopped", "sliced", "diced",
    "minced", "grated", "optional", "whole", "white",
})


# ==============================================================================
# PLATFORMS
# ==============================================================================

# Lower-cased aggregator spellings -> canonical platform
PLATFORM_ALIASES: Dict[str, PlatformId] = {
    "swiggy": PlatformId.SWIGGY_INSTAMART,
    "swiggy instamart": PlatformId.SWIGGY_INSTAMART,
    "instamart": PlatformId.SWIGGY_INSTAMART,
    "zepto": PlatformId.ZEPTO,
    "blinkit": PlatformId.BLINKIT,
    "blink it": PlatformId.BLINKIT,
    "dunzo": PlatformId.DUNZO,
    "dunzo daily": PlatformId.DUNZO,
    "bigbasket": PlatformId.BIGBASKET,
    "big basket": PlatformId.BIGBASKET,
    "bbnow": PlatformId.BBNOW,
    "bb now": PlatformId.BBNOW,
    "bb-now": PlatformId.BBNOW,
    "bigbasket now": PlatformId.BBNOW,
    "big basket now": PlatformId.BBNOW,
    "dmart": PlatformId.DMART,
    "dmart ready": PlatformId.DMART,
    "jiomart": PlatformId.JIOMART,
    "jio mart": PlatformId.JIOMART,
}


# Fee schedule in INR
PLATFORM_COST_CONFIG: Dict[PlatformId, PlatformCostConfig] = {
    PlatformId.SWIGGY_INSTAMART: PlatformCostConfig(delivery_fee=30, platform_fee=5, min_order_value=199),
    PlatformId.ZEPTO: PlatformCostConfig(delivery_fee=30, platform_fee=5, min_order_value=149),
    PlatformId.BLINKIT: PlatformCostConfig(delivery_fee=30, platform_fee=5, min_order_value=199),
    PlatformId.DUNZO: PlatformCostConfig(delivery_fee=40, platform_fee=10, min_order_value=299),
    PlatformId.BIGBASKET: PlatformCostConfig(delivery_fee=50, platform_fee=0, min_order_value=500),
    PlatformId.BBNOW: PlatformCostConfig(delivery_fee=40, platform_fee=0, min_order_value=250),
    PlatformId.DMART: PlatformCostConfig(delivery_fee=40, platform_fee=0, min_order_value=799),
    PlatformId.JIOMART: PlatformCostConfig(delivery_fee=30, platform_fee=5, min_order_value=199),
}

DEFAULT_PLATFORM_COST = PlatformCostConfig(delivery_fee=40, platform_fee=5, min_order_value=299)

# Process-wide read-only table
DEFAULT_COST_TABLE = PlatformCostTable(PLATFORM_COST_CONFIG, DEFAULT_PLATFORM_COST)


# ==============================================================================
# MESSAGES
# ==============================================================================

NO_INGREDIENTS_MESSAGE = "No ingredients to search for."
NO_COMPLETE_PLATFORM_MESSAGE = "No platform offers a complete set of ingredients."
FLOW_ERROR_MESSAGE = "Sorry, there was an error finding ingredients. Please try again."
