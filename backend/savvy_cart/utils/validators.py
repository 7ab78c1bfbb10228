"""
Input validation utilities.

This module provides validation functions for user input to ensure
data integrity and security throughout the application.
"""

import re
import logging
from typing import List

# Configure logging
logger = logging.getLogger(__name__)

_DANGEROUS_PATTERNS = [
    r'<script',  # Script tags
    r'javascript:',  # JavaScript protocol
    r'on\w+\s*=',  # Event handlers (onclick, onload, etc)
    r'\.\./',  # Path traversal
    r'[<>]'  # HTML tags
]


def _check_safe_text(value: str, label: str) -> None:
    for pattern in _DANGEROUS_PATTERNS:
        if re.search(pattern, value, re.IGNORECASE):
            raise ValueError(f"{label} contains invalid characters or patterns")


def validate_recipe_name(name: str) -> bool:
    """
    Validate recipe name input.

    Ensures recipe name:
    - Is not empty or whitespace only
    - Does not exceed maximum length
    - Does not contain markup or script patterns

    Args:
        name: Recipe name string

    Returns:
        bool: True if valid

    Raises:
        ValueError: If validation fails with specific error message
    """
    if not name or not name.strip():
        raise ValueError("Recipe name cannot be empty")

    if len(name) > 200:
        raise ValueError("Recipe name cannot exceed 200 characters")

    if len(name.strip()) < 2:
        raise ValueError("Recipe name must be at least 2 characters")

    _check_safe_text(name, "Recipe name")

    logger.debug(f"Recipe name validated: {name}")
    return True


def validate_search_query(query: str) -> bool:
    """
    Validate a free-text product search query.

    Raises:
        ValueError: If the query is empty, too long or contains markup
    """
    if not query or not query.strip():
        raise ValueError("Search query cannot be empty")

    if len(query) > 100:
        raise ValueError("Search query cannot exceed 100 characters")

    _check_safe_text(query, "Search query")
    return True


def validate_ingredient_names(names: List[str], max_count: int = 50) -> bool:
    """
    Validate the ingredient names of a price search.

    An empty list is valid (it short-circuits to "nothing to search for").

    Args:
        names: Ingredient names
        max_count: Maximum number of ingredients accepted

    Returns:
        bool: True if valid

    Raises:
        ValueError: If the list is too long or any name is blank or too long
    """
    if len(names) > max_count:
        raise ValueError(
            f"Too many ingredients ({len(names)}). Maximum allowed: {max_count}"
        )

    for i, name in enumerate(names):
        if not isinstance(name, str) or not name.strip():
            raise ValueError(f"Ingredient at position {i} is empty")
        if len(name) > 100:
            raise ValueError(
                f"Ingredient at position {i} exceeds 100 characters"
            )
        _check_safe_text(name, f"Ingredient at position {i}")

    return True
