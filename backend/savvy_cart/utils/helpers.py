"""
Common utility helper functions.

This module provides reusable helpers for coercing loosely-typed
aggregator fields and for pulling JSON out of LLM text responses.
"""

import re
import logging
from typing import Any, Iterable, Optional

# Configure logging
logger = logging.getLogger(__name__)

_PRICE_CHARS = re.compile(r"[^0-9.\-]")


def parse_price(value: Any) -> Optional[float]:
    """
    Parse a price that may arrive as a number or a string.

    Strings may carry currency symbols or thousands separators
    ("₹1,299.00"). Booleans, blanks and unparsable values yield None.

    Args:
        value: Raw price value from the aggregator or the LLM

    Returns:
        Optional[float]: Parsed non-negative price, or None

    Example:
        >>> parse_price("₹1,299.50")
        1299.5
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        price = float(value)
    else:
        cleaned = _PRICE_CHARS.sub("", str(value))
        if not cleaned:
            return None
        try:
            price = float(cleaned)
        except ValueError:
            return None
    if price != price or price < 0:  # NaN or negative
        return None
    return price


def first_price(*values: Any) -> float:
    """Return the first parsable price among values, or 0.0 if none parse."""
    for value in values:
        price = parse_price(value)
        if price is not None:
            return price
    return 0.0


def parse_optional_float(value: Any) -> Optional[float]:
    """Coerce ratings and similar optional numbers; anything unparsable is None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return None if number != number else number


def first_non_empty(values: Iterable[Any]) -> Optional[str]:
    """Return the first non-blank string in values."""
    for value in values:
        if isinstance(value, str) and value.strip():
            return value
    return None


def extract_json(text: str) -> Optional[str]:
    """Extract a JSON object from text, handling markdown fences and surrounding text."""
    if not text:
        return None

    # Try: raw text is valid JSON
    stripped = text.strip()
    if stripped.startswith("{"):
        # Find the matching closing brace
        depth = 0
        in_string = False
        escaped = False
        for i, ch in enumerate(stripped):
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
                continue
            if ch == '"':
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return stripped[: i + 1]

    # Try: JSON inside markdown code fence
    match = re.search(r"```(?:json)?\s*(\{.*?\})\s*```", text, re.DOTALL)
    if match:
        return match.group(1)

    # Try: first { to last }
    first_brace = text.find("{")
    last_brace = text.rfind("}")
    if first_brace != -1 and last_brace > first_brace:
        return text[first_brace: last_brace + 1]

    return None


def format_inr(amount: float) -> str:
    """Format an amount in rupees with two decimals."""
    return f"₹{amount:.2f}"
