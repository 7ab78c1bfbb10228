"""
Best-product selection for one (ingredient, platform) pair.

The LLM ranks the available candidates on one platform; when it fails or
answers with something unusable the first available candidate is taken.
select_best never raises.
"""

import json
import logging
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from savvy_cart.models.platform import PlatformCostTable, PlatformId
from savvy_cart.models.product import CandidateProduct, RawProduct, SelectedProduct
from savvy_cart.models.recipe import Ingredient
from savvy_cart.services.llm_client import LLMClient
from savvy_cart.utils.constants import DEFAULT_COST_TABLE
from savvy_cart.utils.helpers import parse_price
from savvy_cart.utils.outcome import Failed

logger = logging.getLogger(__name__)

SELECTOR_SYSTEM_PROMPT = """You are an expert shopping assistant helping to select the best product for a recipe ingredient.

Select the best product based on, in priority order:
1. Match with the required ingredient
2. Appropriate quantity (closest to required)
3. Price (good value)
4. Brand reputation (if known)
5. Rating (if available)

Return ONLY a JSON object with this exact structure:
{"selectedProduct": {"index": 0, "name": "...", "platform": "...", "price": 0, "brand": "...", "quantity": "...", "rating": 0, "reason": "..."}}
The index and name must be copied exactly from the chosen entry of the available products."""

FALLBACK_REASON = "Selected as the first available product (automatic selection unavailable)."


class _LLMSelection(BaseModel):
    """The part of the LLM answer the selector relies on."""
    model_config = ConfigDict(extra="ignore")

    index: Optional[int] = None
    name: Optional[str] = None
    quantity: Optional[str] = None
    price: Optional[float] = None
    reason: Optional[str] = None

    @field_validator("index", mode="before")
    @classmethod
    def _index_or_none(cls, v: Any) -> Optional[int]:
        if isinstance(v, bool):
            return None
        try:
            return int(v)
        except (TypeError, ValueError):
            return None

    @field_validator("price", mode="before")
    @classmethod
    def _price_or_none(cls, v: Any) -> Optional[float]:
        return parse_price(v)

    @model_validator(mode="after")
    def _identifies_a_product(self) -> "_LLMSelection":
        if self.index is None and not (self.name and self.name.strip()):
            raise ValueError("selection names no product")
        return self


def _compact(text: Optional[str]) -> str:
    return "".join((text or "").lower().split())


def _build_prompt(ingredient: Ingredient, candidates: List[CandidateProduct]) -> str:
    products = [
        {
            "index": index,
            "platform": c.platform.value,
            "name": c.name,
            "price": c.price,
            "brand": c.brand,
            "quantity": c.quantity,
            "rating": c.rating,
        }
        for index, c in enumerate(candidates)
    ]
    return (
        f"Ingredient needed: {ingredient.name}\n"
        f"Required quantity: {ingredient.quantity or 'N/A'}\n\n"
        f"Available products:\n{json.dumps(products, indent=2, ensure_ascii=False)}"
    )


class BestProductSelector:
    """
    Picks one product per (ingredient, platform).

    Attributes:
        llm: Client used for ranking
        cost_table: Fee schedule copied onto every selection
    """

    def __init__(self, llm: LLMClient, cost_table: PlatformCostTable = DEFAULT_COST_TABLE):
        self.llm = llm
        self.cost_table = cost_table

    def _selected(
        self,
        ingredient: Ingredient,
        candidate: CandidateProduct,
        reason: Optional[str],
    ) -> SelectedProduct:
        return SelectedProduct.from_candidate(
            candidate,
            original_quantity=ingredient.quantity,
            costs=self.cost_table.for_platform(candidate.platform),
            ingredient=ingredient.name,
            reason=reason,
        )

    @staticmethod
    def _match_candidate(
        choice: _LLMSelection, candidates: List[CandidateProduct]
    ) -> Optional[CandidateProduct]:
        """
        Map the LLM's answer back to one of the listed candidates.

        The listed index wins when it is in range and agrees with the
        name. Otherwise same-named candidates (pack sizes of one product)
        are narrowed by quantity, then by the price closest to the
        answer's.
        """
        wanted = (choice.name or "").strip().lower()

        if choice.index is not None and 0 <= choice.index < len(candidates):
            indexed = candidates[choice.index]
            if not wanted or indexed.name.strip().lower() == wanted:
                return indexed

        named = [c for c in candidates if c.name.strip().lower() == wanted]
        if len(named) <= 1:
            return named[0] if named else None

        if choice.quantity:
            sized = [c for c in named if _compact(c.quantity) == _compact(choice.quantity)]
            if sized:
                named = sized
        if choice.price is not None:
            return min(named, key=lambda c: abs(c.price - choice.price))
        return named[0]

    async def select_best(
        self,
        ingredient: Ingredient,
        platform: PlatformId,
        candidates: List[RawProduct],
    ) -> Optional[SelectedProduct]:
        """
        Select the best available product for an ingredient on one platform.

        Args:
            ingredient: The recipe ingredient (name and required quantity)
            platform: Platform the candidates belong to
            candidates: Raw products already grouped under this platform

        Returns:
            Optional[SelectedProduct]: The selection enriched with the
            platform's fees, or None if no candidate is available
        """
        available = [
            CandidateProduct.from_raw(raw, platform)
            for raw in candidates
            if raw.available and raw.name
        ]
        if not available:
            logger.info(f"No available products for '{ingredient.name}' on {platform}")
            return None

        try:
            outcome = await self.llm.generate_json(
                _build_prompt(ingredient, available),
                system_instruction=SELECTOR_SYSTEM_PROMPT,
            )
        except Exception as e:
            outcome = Failed(reason="llm_exception", error=e)

        if outcome.ok:
            try:
                choice = _LLMSelection.model_validate(outcome.value.get("selectedProduct"))
            except ValidationError:
                logger.warning(
                    f"LLM selection for '{ingredient.name}' on {platform} did not match the schema; "
                    f"using first candidate"
                )
            else:
                matched = self._match_candidate(choice, available)
                if matched is not None:
                    # Price always comes from the aggregator, never from the LLM text
                    return self._selected(ingredient, matched, choice.reason)
                logger.warning(
                    f"LLM chose unknown product '{choice.name}' for '{ingredient.name}' on {platform}; "
                    f"using first candidate"
                )
        else:
            logger.warning(
                f"LLM selection failed for '{ingredient.name}' on {platform} ({outcome.reason}); "
                f"using first candidate"
            )

        return self._selected(ingredient, available[0], FALLBACK_REASON)
