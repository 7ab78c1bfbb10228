"""
Gemini client for structured (JSON) generation.

Every LLM-backed operation in the service asks for a single JSON object
and falls back locally when it cannot get one. GeminiClient.generate_json
therefore never raises: API errors, empty responses and unparsable text
all come back as Failed outcomes.
"""

import json
import logging
from typing import Any, Dict, Optional, Protocol

from google import genai
from google.genai import types

from savvy_cart.config import settings
from savvy_cart.utils.errors import LLMError
from savvy_cart.utils.helpers import extract_json
from savvy_cart.utils.outcome import Failed, Ok, Outcome

logger = logging.getLogger(__name__)


class LLMClient(Protocol):
    """Anything that can turn a prompt into a JSON object."""

    async def generate_json(
        self, prompt: str, system_instruction: Optional[str] = None
    ) -> Outcome[Dict[str, Any]]:
        ...

    async def aclose(self) -> None:
        ...


class GeminiClient:
    """
    Async Gemini wrapper returning parsed JSON objects.

    Attributes:
        model: Gemini model name
        temperature: Sampling temperature
        max_output_tokens: Response token limit
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_output_tokens: Optional[int] = None,
    ):
        self.client = genai.Client(api_key=api_key or settings.GEMINI_API_KEY)
        self.model = model or settings.LLM_MODEL
        self.temperature = settings.LLM_TEMPERATURE if temperature is None else temperature
        self.max_output_tokens = max_output_tokens or settings.LLM_MAX_TOKENS

        logger.info(f"GeminiClient initialized (model={self.model}, temperature={self.temperature})")

    async def generate_json(
        self, prompt: str, system_instruction: Optional[str] = None
    ) -> Outcome[Dict[str, Any]]:
        """
        Send a prompt and parse the response as a JSON object.

        Args:
            prompt: User prompt
            system_instruction: Optional system prompt

        Returns:
            Outcome[Dict[str, Any]]: Ok with the parsed object, or Failed
        """
        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    system_instruction=system_instruction,
                    temperature=self.temperature,
                    max_output_tokens=self.max_output_tokens,
                    response_mime_type="application/json",
                ),
            )
        except Exception as e:
            logger.error(f"Gemini API call failed: {e}")
            return Failed(reason="api_error", error=LLMError(str(e)))

        text = getattr(response, "text", None)
        if not text:
            logger.warning("Empty response from Gemini")
            return Failed(reason="empty_response", error=LLMError("Empty response from Gemini"))

        json_str = extract_json(text)
        if json_str is None:
            logger.warning(f"No JSON object in Gemini response: {text[:200]}")
            return Failed(reason="no_json", error=LLMError("No JSON object in response"))

        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to parse Gemini JSON: {e}")
            return Failed(reason="invalid_json", error=LLMError(str(e)))

        if not isinstance(data, dict):
            return Failed(reason="not_an_object", error=LLMError("Response JSON is not an object"))

        return Ok(data)

    async def aclose(self) -> None:
        close = getattr(self.client.aio, "aclose", None)
        if close is not None:
            await close()
