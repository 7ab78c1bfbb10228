"""
Cart aggregation and platform cost summary.

build_cart groups selected products by platform, sums item prices and
picks the best platform. It is a pure function over its inputs: no
network, no LLM, same output for the same product list.
"""

import logging
import math
from typing import Dict, Iterable, List, Mapping, Optional

from savvy_cart.models.cart import PlatformCostSummary, ShoppingCart
from savvy_cart.models.platform import PlatformCostTable, PlatformId
from savvy_cart.models.product import SelectedProduct
from savvy_cart.utils.constants import DEFAULT_COST_TABLE, NO_COMPLETE_PLATFORM_MESSAGE
from savvy_cart.utils.helpers import format_inr

logger = logging.getLogger(__name__)


def _pick_best_platform(
    cart: Mapping[PlatformId, List[SelectedProduct]],
    totals: Mapping[PlatformId, float],
) -> Optional[PlatformId]:
    """Lowest total wins; on equal totals the platform with more items wins."""
    best: Optional[PlatformId] = None
    for platform, products in cart.items():
        if not products:
            continue
        if best is None:
            best = platform
            continue
        total, best_total = totals[platform], totals[best]
        if math.isclose(total, best_total):
            if len(products) > len(cart[best]):
                best = platform
        elif total < best_total:
            best = platform
    return best


def summarize_platform_costs(
    cart: Mapping[PlatformId, List[SelectedProduct]],
    cost_table: PlatformCostTable = DEFAULT_COST_TABLE,
) -> List[PlatformCostSummary]:
    """
    Fee-inclusive view of every non-empty platform cart.

    Fees come from each platform's own cost table entry. The result is for
    display only and never feeds back into totals or best-platform choice.

    Args:
        cart: Products grouped by platform
        cost_table: Fee schedule

    Returns:
        List[PlatformCostSummary]: One entry per platform with items
    """
    summaries: List[PlatformCostSummary] = []
    for platform, products in cart.items():
        if not products:
            continue
        costs = cost_table.for_platform(platform)
        item_total = sum(p.price for p in products)
        shortfall = max(0.0, costs.min_order_value - item_total)
        summaries.append(
            PlatformCostSummary(
                platform=platform,
                item_count=len(products),
                item_total=item_total,
                delivery_fee=costs.delivery_fee,
                platform_fee=costs.platform_fee,
                min_order_value=costs.min_order_value,
                effective_total=item_total + costs.delivery_fee + costs.platform_fee,
                below_min_order=shortfall > 0,
                min_order_shortfall=shortfall,
            )
        )
    return summaries


def build_cart(
    products: Iterable[SelectedProduct],
    platforms: Iterable[PlatformId],
    cost_table: PlatformCostTable = DEFAULT_COST_TABLE,
) -> ShoppingCart:
    """
    Group products by platform and pick the best platform.

    Every requested platform gets a bucket, even an empty one. Products on
    platforms that were not requested are ignored. totalByPlatform is the
    plain sum of item prices; fees appear only in cost_summary.

    Args:
        products: Selected products
        platforms: Requested platforms, in display order
        cost_table: Fee schedule for the cost summary

    Returns:
        ShoppingCart: Buckets, totals, best platform and message

    Example:
        Platform A = 100 over 2 items and Platform B = 100 over 3 items:
        best_platform is B.
    """
    cart: Dict[PlatformId, List[SelectedProduct]] = {}
    for platform in platforms:
        cart.setdefault(PlatformId(platform), [])

    for product in products:
        bucket = cart.get(product.platform)
        if bucket is None:
            logger.warning(f"Ignoring '{product.name}': platform {product.platform} was not requested")
            continue
        bucket.append(product)

    totals: Dict[PlatformId, float] = {
        platform: sum(p.price for p in bucket) for platform, bucket in cart.items()
    }

    best = _pick_best_platform(cart, totals)
    if best is None:
        message = NO_COMPLETE_PLATFORM_MESSAGE
    else:
        message = f"{best.value} offers the best overall price at {format_inr(totals[best])}."

    return ShoppingCart(
        cart=cart,
        total_by_platform=totals,
        best_platform=best,
        message=message,
        cost_summary=summarize_platform_costs(cart, cost_table),
    )
