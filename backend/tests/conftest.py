"""
Shared fixtures: fake LLM clients and an aggregator client backed by
httpx.MockTransport. No test talks to the network.
"""

import os

# Settings are read at import time
os.environ.setdefault("GEMINI_API_KEY", "test-key")
os.environ["USE_SEMANTIC_MATCHING"] = "false"

from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import httpx
import pytest

from savvy_cart.services.product_search import ProductSearchClient
from savvy_cart.utils.outcome import Failed, Ok

BASE_URL = "https://aggregator.test/qc"


class FakeLLM:
    """
    Stand-in for GeminiClient.

    The responder receives (prompt, system_instruction) and returns a dict
    (Ok), a Failed, or raises.
    """

    def __init__(self, responder: Optional[Callable[[str, Optional[str]], Any]] = None):
        self.responder = responder or (lambda prompt, system: Failed(reason="no responder"))
        self.calls: List[Tuple[str, Optional[str]]] = []
        self.closed = False

    async def generate_json(self, prompt: str, system_instruction: Optional[str] = None):
        self.calls.append((prompt, system_instruction))
        result = self.responder(prompt, system_instruction)
        if isinstance(result, Failed):
            return result
        return Ok(result)

    async def aclose(self) -> None:
        self.closed = True


def raw_product(
    name: str,
    platform: str,
    price: Union[float, str, None] = 100,
    mrp: Union[float, str, None] = None,
    available: Optional[bool] = True,
    **extra: Any,
) -> Dict[str, Any]:
    product: Dict[str, Any] = {
        "name": name,
        "brand": extra.pop("brand", "Brand"),
        "offer_price": price,
        "mrp": mrp,
        "quantity": extra.pop("quantity", "1 kg"),
        "images": [f"https://img.test/{name.replace(' ', '-')}.png"],
        "deeplink": f"https://shop.test/{name.replace(' ', '-')}",
        "platform": {"name": platform},
    }
    if available is not None:
        product["available"] = available
    product.update(extra)
    return product


def search_client_for(
    routes: Dict[str, Any],
    calls: Optional[List[str]] = None,
) -> ProductSearchClient:
    """
    Aggregator client whose responses come from routes.

    routes maps a query to either a list of groups (200) or an int status code.
    Unknown queries return an empty list.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        query = request.url.params.get("query")
        if calls is not None:
            calls.append(query)
        route = routes.get(query, [])
        if isinstance(route, int):
            return httpx.Response(route, json={"message": "error"})
        if isinstance(route, Exception):
            raise route
        return httpx.Response(200, json=route)

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ProductSearchClient(http_client=http_client, base_url=BASE_URL, lat="12.9", lon="77.6")


@pytest.fixture
def fake_llm_factory():
    return FakeLLM


@pytest.fixture
def failing_llm():
    return FakeLLM(lambda prompt, system: Failed(reason="api_error"))
