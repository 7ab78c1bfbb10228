"""
Quick-commerce aggregator client.

This module wraps the aggregator's group search endpoint:

    GET {base_url}?lat=..&lon=..&type=groupsearch&query=..

The response is a JSON array of groups, each with a "data" array of raw
products. Every call returns an Outcome instead of raising: a failed
search for one ingredient must never abort the searches for the others.
"""

import logging
from typing import Any, List, Optional

import httpx
from pydantic import ValidationError

from savvy_cart.config import settings
from savvy_cart.models.platform import PlatformCostTable
from savvy_cart.models.product import CatalogProduct, ProductGroup, RawProduct
from savvy_cart.services.platform_classifier import classify
from savvy_cart.utils.constants import DEFAULT_COST_TABLE
from savvy_cart.utils.helpers import parse_price
from savvy_cart.utils.outcome import Failed, Ok, Outcome

# Configure logging
logger = logging.getLogger(__name__)


class ProductSearchClient:
    """
    Async client for the aggregator product search.

    Attributes:
        base_url: Aggregator endpoint
        lat / lon: Fixed coordinates sent with every query
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        base_url: Optional[str] = None,
        lat: Optional[str] = None,
        lon: Optional[str] = None,
        timeout: Optional[float] = None,
        cost_table: PlatformCostTable = DEFAULT_COST_TABLE,
    ):
        self.base_url = (base_url or settings.AGGREGATOR_BASE_URL).rstrip("/")
        self.lat = lat or settings.SEARCH_LAT
        self.lon = lon or settings.SEARCH_LON
        self.timeout = timeout or settings.API_TIMEOUT
        self.cost_table = cost_table
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=self.timeout)

        logger.info(
            f"ProductSearchClient initialized with base URL: {self.base_url} "
            f"(lat={self.lat}, lon={self.lon}, timeout={self.timeout}s)"
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _params(self, query: str) -> dict:
        return {
            "lat": self.lat,
            "lon": self.lon,
            "type": "groupsearch",
            "query": query,
        }

    async def _fetch(self, query: str) -> Outcome[List[Any]]:
        """GET the group search and flatten every group's data array."""
        logger.info(f"Searching aggregator at {self.base_url} for '{query}'")

        try:
            response = await self._client.get(self.base_url, params=self._params(query))
        except httpx.TimeoutException as e:
            logger.warning(f"Search timeout for '{query}'")
            return Failed(reason="timeout", error=e)
        except httpx.HTTPError as e:
            logger.warning(f"Search request failed for '{query}': {e}")
            return Failed(reason="request_error", error=e)

        if not response.is_success:
            logger.warning(f"Search for '{query}' returned HTTP {response.status_code}")
            return Failed(reason=f"HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            logger.warning(f"Failed to parse search response for '{query}': {e}")
            return Failed(reason="invalid_json", error=e)

        if not isinstance(payload, list):
            logger.warning(f"Unexpected search response shape for '{query}': {type(payload).__name__}")
            return Failed(reason="unexpected_shape")

        items: List[Any] = []
        for group in payload:
            if not isinstance(group, dict):
                continue
            try:
                items.extend(ProductGroup.model_validate(group).data)
            except ValidationError:
                logger.debug(f"Skipping malformed group in response for '{query}'")

        return Ok(items)

    @staticmethod
    def _parse_products(items: List[Any]) -> List[RawProduct]:
        products: List[RawProduct] = []
        for item in items:
            if not isinstance(item, dict):
                continue
            try:
                products.append(RawProduct.model_validate(item))
            except ValidationError as e:
                logger.debug(f"Skipping malformed product: {e.error_count()} validation errors")
        return products

    async def search(self, term: str) -> Outcome[List[RawProduct]]:
        """
        Search the aggregator for a simplified ingredient term.

        Args:
            term: Normalized search term (e.g., "flour")

        Returns:
            Outcome[List[RawProduct]]: Ok with the flattened products (possibly
            empty), or Failed on non-2xx status, network error or bad JSON
        """
        fetched = await self._fetch(term)
        if not fetched.ok:
            return fetched

        products = self._parse_products(fetched.value)
        logger.info(f"Found {len(products)} products for '{term}'")
        return Ok(products)

    async def search_products(self, query: str) -> Outcome[List[CatalogProduct]]:
        """
        Catalogue search for the compare page.

        The raw query is sent as-is (no normalization). Products whose
        platform cannot be classified are dropped.
        """
        searched = await self.search(query)
        if not searched.ok:
            return searched

        catalog: List[CatalogProduct] = []
        for index, raw in enumerate(searched.value):
            platform = classify(raw.platform_name)
            if platform is None or not raw.name:
                continue
            catalog.append(
                CatalogProduct(
                    id=str(raw.id) if raw.id is not None else f"{platform.value}-{index}",
                    name=raw.name,
                    brand=raw.brand,
                    platform=platform,
                    price=raw.price,
                    mrp=parse_price(raw.mrp),
                    quantity=raw.quantity,
                    image=raw.image_url,
                    url=raw.link,
                    rating=raw.rating,
                    available=raw.available,
                    costs=self.cost_table.for_platform(platform),
                )
            )
        return Ok(catalog)
