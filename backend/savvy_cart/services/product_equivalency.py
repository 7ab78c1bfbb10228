"""
Cross-platform product equivalency.

Decides whether two differently-named products are the same item and
builds the cheaper-first alternatives list for a cart item. When the LLM
cannot answer, product names are compared instead (see name_similarity).
"""

import asyncio
import logging
from typing import List, Optional

from pydantic import ValidationError

from savvy_cart.models.comparison import (
    AlternativeProduct,
    ComparisonItem,
    ProductEquivalencyResult,
    ProductSpec,
)
from savvy_cart.models.product import CatalogProduct
from savvy_cart.services.llm_client import LLMClient
from savvy_cart.services.name_similarity import names_look_similar

logger = logging.getLogger(__name__)

EQUIVALENCY_SYSTEM_PROMPT = """You are an expert product comparison agent.

You will determine if two products are equivalent, even if their names are slightly different.
Consider brand, quantity, and other relevant factors like variations in packaging if implied by quantity.

Return ONLY a JSON object: {"equivalent": true or false, "reason": "..."}
Keep the reason concise, e.g. "Same brand and quantity", "Different brand" or "Different quantity"."""

SIMILAR_NAME_REASON = "AI check failed; similar name."
FAILED_REASON = "AI check failed."


def _describe(label: str, product: ProductSpec) -> str:
    lines = [f"{label}:", f"Name: {product.name}"]
    if product.brand:
        lines.append(f"Brand: {product.brand}")
    if product.quantity:
        lines.append(f"Quantity: {product.quantity}")
    return "\n".join(lines)


def _spec(product: CatalogProduct) -> ProductSpec:
    return ProductSpec(name=product.name, brand=product.brand, quantity=product.quantity)


class ProductEquivalencyChecker:
    """
    LLM-backed equivalency checks with a name-similarity fallback.

    Attributes:
        llm: Client used for the verdict
        use_semantic: Override for USE_SEMANTIC_MATCHING (None uses settings)
    """

    def __init__(self, llm: LLMClient, use_semantic: Optional[bool] = None):
        self.llm = llm
        self.use_semantic = use_semantic

    async def _fallback(self, product1: ProductSpec, product2: ProductSpec) -> ProductEquivalencyResult:
        similar = await names_look_similar(product1.name, product2.name, use_semantic=self.use_semantic)
        return ProductEquivalencyResult(
            equivalent=False,
            reason=SIMILAR_NAME_REASON if similar else FAILED_REASON,
        )

    async def check(self, product1: ProductSpec, product2: ProductSpec) -> ProductEquivalencyResult:
        """
        Decide whether two products are equivalent.

        Args:
            product1: Reference product (the cart item)
            product2: Candidate product

        Returns:
            ProductEquivalencyResult: The LLM verdict, or a not-equivalent
            result whose reason says whether the names look similar
        """
        prompt = f"{_describe('Product 1', product1)}\n\n{_describe('Product 2', product2)}"
        outcome = await self.llm.generate_json(prompt, system_instruction=EQUIVALENCY_SYSTEM_PROMPT)

        if outcome.ok:
            try:
                return ProductEquivalencyResult.model_validate(outcome.value)
            except ValidationError:
                logger.warning(f"Equivalency answer for '{product2.name}' did not match the schema")
        else:
            logger.warning(f"Equivalency check failed for '{product2.name}': {outcome.reason}")

        return await self._fallback(product1, product2)

    async def _evaluate(
        self, item: CatalogProduct, candidate: CatalogProduct
    ) -> Optional[AlternativeProduct]:
        result = await self.check(_spec(item), _spec(candidate))

        if result.equivalent or result.reason == SIMILAR_NAME_REASON:
            keep = True
        elif result.reason == FAILED_REASON:
            keep = False
        else:
            keep = await names_look_similar(item.name, candidate.name, use_semantic=self.use_semantic)

        if not keep:
            return None
        return AlternativeProduct(
            **candidate.model_dump(),
            is_equivalent=result.equivalent,
            equivalency_reason=result.reason,
        )

    async def find_alternatives(
        self, item: CatalogProduct, candidates: List[CatalogProduct]
    ) -> ComparisonItem:
        """
        Find equivalent or similarly-named products for a cart item.

        The item itself (same id on the same platform) is skipped. Checks
        run concurrently; a failed check only drops that candidate.
        Alternatives are sorted by price, cheapest first.
        """
        others = [
            c for c in candidates
            if not (c.id == item.id and c.platform == item.platform)
        ]
        settled = await asyncio.gather(
            *(self._evaluate(item, c) for c in others),
            return_exceptions=True,
        )

        alternatives: List[AlternativeProduct] = []
        for candidate, outcome in zip(others, settled):
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            if isinstance(outcome, BaseException):
                logger.error(f"Equivalency check crashed for '{candidate.name}': {outcome}")
                continue
            if outcome is not None:
                alternatives.append(outcome)

        alternatives.sort(key=lambda p: p.price)
        logger.info(f"Found {len(alternatives)} alternatives for '{item.name}'")
        return ComparisonItem(original_item=item, alternatives=alternatives)

