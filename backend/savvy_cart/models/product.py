"""
Pydantic models for products.

RawProduct is the boundary model for the aggregator's loosely-typed
product records: prices arrive as strings or numbers, platform names use
inconsistent spellings, and optional fields are frequently missing. It
is only used while one search response is processed. Everything past
the selector works with SelectedProduct, whose platform is a PlatformId
and whose price is a float.
"""

from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from savvy_cart.models.platform import PlatformCostConfig, PlatformId
from savvy_cart.utils.helpers import first_non_empty, first_price, parse_optional_float


class RawPlatform(BaseModel):
    """Platform block of an aggregator product."""
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    sla: Optional[str] = None
    open: Optional[bool] = None
    store_id: Optional[str] = Field(None, alias="storeId")


class RawProduct(BaseModel):
    """
    Product record as returned by the aggregator group search.

    Attributes:
        name: Product title
        brand: Brand name, if any
        offer_price: Selling price (preferred)
        mrp: Maximum retail price (fallback)
        quantity: Pack size (e.g., "500 g")
        image / images: Product image(s)
        deeplink / url: Link to the product page
        rating: Customer rating, if any
        available: False only when the aggregator marks it out of stock
        platform: Platform block with the raw platform name
    """
    model_config = ConfigDict(extra="ignore")

    id: Optional[Union[str, int]] = None
    name: str = ""
    brand: Optional[str] = None
    offer_price: Optional[Union[float, str]] = None
    mrp: Optional[Union[float, str]] = None
    quantity: Optional[str] = None
    image: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    deeplink: Optional[str] = None
    url: Optional[str] = None
    rating: Optional[float] = None
    available: bool = True
    platform: Optional[RawPlatform] = None

    @field_validator("name", mode="before")
    @classmethod
    def _name_to_str(cls, v: Any) -> str:
        return "" if v is None else str(v).strip()

    @field_validator("brand", "quantity", mode="before")
    @classmethod
    def _optional_to_str(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        text = str(v).strip()
        return text or None

    @field_validator("images", mode="before")
    @classmethod
    def _images_to_list(cls, v: Any) -> List[str]:
        if isinstance(v, str):
            return [v]
        if not isinstance(v, list):
            return []
        return [item for item in v if isinstance(item, str) and item]

    @field_validator("rating", mode="before")
    @classmethod
    def _rating_to_float(cls, v: Any) -> Optional[float]:
        return parse_optional_float(v)

    @field_validator("available", mode="before")
    @classmethod
    def _available_default(cls, v: Any) -> bool:
        # Only an explicit false marks a product unavailable
        return v is not False

    @property
    def price(self) -> float:
        """offer_price if it parses, else mrp, else 0."""
        return first_price(self.offer_price, self.mrp)

    @property
    def image_url(self) -> Optional[str]:
        return first_non_empty([self.image] + list(self.images))

    @property
    def link(self) -> Optional[str]:
        return first_non_empty([self.deeplink, self.url])

    @property
    def platform_name(self) -> Optional[str]:
        if self.platform is None or not self.platform.name:
            return None
        return self.platform.name


class ProductGroup(BaseModel):
    """One group of the aggregator response."""
    model_config = ConfigDict(extra="ignore")

    data: List[Any] = Field(default_factory=list)


class CamelModel(BaseModel):
    """Base for public shapes serialized with camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CandidateProduct(CamelModel):
    """A product offered to the LLM for best-match selection."""
    name: str
    platform: PlatformId
    price: float = Field(..., ge=0.0)
    brand: Optional[str] = None
    quantity: Optional[str] = None
    image: Optional[str] = None
    url: Optional[str] = None
    rating: Optional[float] = None
    available: bool = True

    @classmethod
    def from_raw(cls, raw: RawProduct, platform: PlatformId) -> "CandidateProduct":
        return cls(
            name=raw.name,
            platform=platform,
            price=raw.price,
            brand=raw.brand,
            quantity=raw.quantity,
            image=raw.image_url,
            url=raw.link,
            rating=raw.rating,
            available=raw.available,
        )


class SelectedProduct(CamelModel):
    """
    The product chosen for one (ingredient, platform) pair.

    Carries the platform's static fees so the presentation layer can show
    fee-inclusive costs without another lookup.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    name: str
    platform: PlatformId
    price: float = Field(..., ge=0.0)
    brand: Optional[str] = None
    quantity: Optional[str] = None
    image: Optional[str] = None
    url: Optional[str] = None
    rating: Optional[float] = None
    original_quantity: str = "N/A"
    delivery_fee: float = Field(0.0, ge=0.0)
    platform_fee: float = Field(0.0, ge=0.0)
    min_order_value: float = Field(0.0, ge=0.0)
    ingredient: Optional[str] = Field(None, description="Recipe ingredient this product covers")
    reason: Optional[str] = Field(None, description="Why this product was selected")

    @classmethod
    def from_candidate(
        cls,
        candidate: CandidateProduct,
        original_quantity: str,
        costs: PlatformCostConfig,
        ingredient: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> "SelectedProduct":
        return cls(
            name=candidate.name,
            platform=candidate.platform,
            price=candidate.price,
            brand=candidate.brand,
            quantity=candidate.quantity,
            image=candidate.image,
            url=candidate.url,
            rating=candidate.rating,
            original_quantity=original_quantity or "N/A",
            delivery_fee=costs.delivery_fee,
            platform_fee=costs.platform_fee,
            min_order_value=costs.min_order_value,
            ingredient=ingredient,
            reason=reason,
        )


class CatalogProduct(CamelModel):
    """A catalogue search hit with its classified platform and fee schedule."""
    id: Optional[str] = None
    name: str
    brand: Optional[str] = None
    platform: PlatformId
    price: float = Field(..., ge=0.0)
    mrp: Optional[float] = None
    quantity: Optional[str] = None
    image: Optional[str] = None
    url: Optional[str] = None
    rating: Optional[float] = None
    available: bool = True
    costs: PlatformCostConfig
