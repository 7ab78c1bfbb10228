"""
Pydantic models for delivery platforms and their static cost schedule.

PlatformId is the closed set of quick-commerce platforms the service
compares. PlatformCostTable is the read-only fee schedule that the
product selector and the cart aggregator receive as a parameter.
"""

from enum import Enum
from types import MappingProxyType
from typing import Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PlatformId(str, Enum):
    """Canonical delivery platform identifiers."""
    SWIGGY_INSTAMART = "Swiggy Instamart"
    ZEPTO = "Zepto"
    BLINKIT = "Blinkit"
    DUNZO = "Dunzo"
    BIGBASKET = "BigBasket"
    BBNOW = "BBNow"
    DMART = "DMart"
    JIOMART = "JioMart"

    def __str__(self) -> str:
        return self.value


ALL_PLATFORMS = tuple(PlatformId)


class PlatformDiscount(BaseModel):
    """Optional platform-wide discount (not applied by the aggregator)."""
    model_config = ConfigDict(frozen=True)

    type: Literal["fixed", "percentage"]
    value: float = Field(..., ge=0.0)
    threshold: Optional[float] = Field(None, ge=0.0)


class PlatformCostConfig(BaseModel):
    """
    Static fees for one platform.

    Attributes:
        delivery_fee: Delivery charge per order (INR)
        platform_fee: Platform/handling charge per order (INR)
        min_order_value: Minimum order value before small-order rules apply (INR)
        discount: Optional platform discount rule
    """
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    delivery_fee: float = Field(..., ge=0.0)
    platform_fee: float = Field(..., ge=0.0)
    min_order_value: float = Field(..., ge=0.0)
    discount: Optional[PlatformDiscount] = None


class PlatformCostTable:
    """
    Immutable fee schedule keyed by platform, with a default entry.

    Unknown platforms resolve to the default entry. Instances are never
    mutated after construction, so one table can be shared process-wide.
    """

    def __init__(
        self,
        entries: Mapping[PlatformId, PlatformCostConfig],
        default: PlatformCostConfig,
    ):
        self._entries: Mapping[PlatformId, PlatformCostConfig] = MappingProxyType(dict(entries))
        self._default = default

    @property
    def default(self) -> PlatformCostConfig:
        return self._default

    def for_platform(self, platform) -> PlatformCostConfig:
        """Return the fee schedule for a platform, or the default entry."""
        try:
            key = PlatformId(platform)
        except ValueError:
            return self._default
        return self._entries.get(key, self._default)
