"""
Savings suggestions for a multi-platform cart.

The LLM sees the cart lines, the per-platform subtotals and each
platform's fee schedule, and proposes a handful of actionable ways to
spend less (consolidating platforms, minimum-order alerts, cheaper
equivalents). Any failure yields an empty suggestion list.
"""

import logging
from collections import defaultdict
from typing import Dict, List

from pydantic import ValidationError

from savvy_cart.models.comparison import (
    SavingsCartItem,
    SavingsSuggestion,
    SavingsSuggestionResponse,
)
from savvy_cart.models.platform import PlatformCostTable
from savvy_cart.services.llm_client import LLMClient
from savvy_cart.services.platform_classifier import classify
from savvy_cart.utils.constants import DEFAULT_COST_TABLE
from savvy_cart.utils.helpers import format_inr

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 5

SAVINGS_SYSTEM_PROMPT = """You are an expert savings advisor for Indian quick-commerce grocery carts.
Give actionable insights considering item prices, delivery fees, platform fees and minimum order value (MOV).

Provide 3-5 high-quality suggestions. For each:
1. Clearly describe the action.
2. Estimate the monetary saving in INR (0 for alerts or general tips).
3. Give its type: "cost", "mov_alert", "convenience" or "fee_optimization".

Strategies to consider:
- Fee optimization: items spread across several platforms pay several sets of fees; suggest consolidating.
- MOV alerts: a platform subtotal just below its MOV may trigger small-order charges or pressure to add items.
- Cheaper platforms: the cart may be cheaper elsewhere after fees.
- Equivalent products: cheaper equivalent brands or sizes.

Be concise. Return ONLY a JSON object:
{"suggestions": [{"suggestion": "...", "estimatedSavings": 0, "type": "cost"}]}"""


def _build_prompt(cart_items: List[SavingsCartItem], cost_table: PlatformCostTable) -> str:
    subtotals: Dict[str, float] = defaultdict(float)
    lines = []
    for item in cart_items:
        subtotals[item.platform] += item.price * item.cart_quantity
        label = " ".join(part for part in (item.brand, item.name) if part)
        size = f" ({item.quantity})" if item.quantity else ""
        lines.append(
            f"- {item.cart_quantity} x {label}{size} from {item.platform} @ {format_inr(item.price)} each"
        )

    platform_lines = []
    for platform_name, subtotal in subtotals.items():
        platform = classify(platform_name)
        costs = cost_table.for_platform(platform) if platform else cost_table.default
        platform_lines.append(
            f"- {platform_name}: subtotal {format_inr(subtotal)}, "
            f"delivery fee {format_inr(costs.delivery_fee)}, "
            f"platform fee {format_inr(costs.platform_fee)}, "
            f"MOV {format_inr(costs.min_order_value)}"
        )

    return "User's cart:\n" + "\n".join(lines) + "\n\nPlatforms in the cart:\n" + "\n".join(platform_lines)


class SavingsAdvisor:
    """LLM-backed savings suggestions."""

    def __init__(self, llm: LLMClient, cost_table: PlatformCostTable = DEFAULT_COST_TABLE):
        self.llm = llm
        self.cost_table = cost_table

    async def get_savings_suggestions(
        self, cart_items: List[SavingsCartItem]
    ) -> SavingsSuggestionResponse:
        """
        Suggest ways to save on a cart.

        Args:
            cart_items: Lines of the user's cart

        Returns:
            SavingsSuggestionResponse: Up to five suggestions; empty when the
            cart is empty or the LLM output is unusable
        """
        if not cart_items:
            return SavingsSuggestionResponse(suggestions=[])

        outcome = await self.llm.generate_json(
            _build_prompt(cart_items, self.cost_table),
            system_instruction=SAVINGS_SYSTEM_PROMPT,
        )
        if not outcome.ok:
            logger.warning(f"Savings suggestions unavailable: {outcome.reason}")
            return SavingsSuggestionResponse(suggestions=[])

        raw = outcome.value.get("suggestions")
        if not isinstance(raw, list):
            logger.warning("Savings answer has no suggestions list")
            return SavingsSuggestionResponse(suggestions=[])

        suggestions: List[SavingsSuggestion] = []
        for entry in raw:
            try:
                suggestions.append(SavingsSuggestion.model_validate(entry))
            except ValidationError:
                logger.debug(f"Dropping malformed suggestion: {entry!r}")

        logger.info(f"Generated {len(suggestions)} savings suggestions")
        return SavingsSuggestionResponse(suggestions=suggestions[:MAX_SUGGESTIONS])
