"""
Asynchronous JSON client for the Google GenAI SDK.

Wraps ``client.aio.models.generate_content`` with JSON response configuration
and response parsing. Errors are raised as LLM service exceptions; callers
decide how to degrade. No retries or client-side timeouts are applied.
"""

import json
import logging
import re
from typing import Any, Dict, Optional

from google import genai
from google.genai import types

from thermoscan.infrastructure.constants.llm_constants import (
    GEMINI_MAX_TOKENS,
    GEMINI_MODEL_NAME,
    GEMINI_TEMPERATURE,
    GEMINI_TOP_K,
    GEMINI_TOP_P,
)
from thermoscan.services.llm.exceptions import LLMAPIError, LLMResponseParseError

logger = logging.getLogger(__name__)

_MARKDOWN_JSON_PATTERN = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")


class GenAIJSONClient:
    """
    Thin async wrapper for Gemini structured JSON generation.

    The client is only created when an API key is available; ``is_available``
    reports whether remote calls can be made at all.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = GEMINI_MODEL_NAME,
        temperature: float = GEMINI_TEMPERATURE,
        max_tokens: int = GEMINI_MAX_TOKENS,
        top_p: float = GEMINI_TOP_P,
        top_k: int = GEMINI_TOP_K,
    ):
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.top_p = top_p
        self.top_k = top_k
        self._client = None

        if self.api_key:
            self._client = genai.Client(api_key=self.api_key)
            logger.info(f"Initialized Gemini client for model {self.model}")

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "GenAIJSONClient":
        """Build a client from a provider dict as returned by Settings.get_llm_config()."""
        return cls(
            api_key=config.get("api_key"),
            model=config.get("model", GEMINI_MODEL_NAME),
            temperature=config.get("temperature", GEMINI_TEMPERATURE),
            max_tokens=config.get("max_tokens", GEMINI_MAX_TOKENS),
            top_p=config.get("top_p", GEMINI_TOP_P),
            top_k=config.get("top_k", GEMINI_TOP_K),
        )

    def is_available(self) -> bool:
        return self._client is not None

    async def generate_json(
        self, prompt: str, response_schema: Optional[Dict[str, Any]] = None
    ) -> Any:
        """
        Request a JSON response for ``prompt``.

        Args:
            prompt: Natural-language instruction
            response_schema: Optional Gemini response schema

        Returns:
            The decoded JSON value

        Raises:
            LLMAPIError: If the client is unavailable or the remote call fails
            LLMResponseParseError: If the response text is missing or not JSON
        """
        if self._client is None:
            raise LLMAPIError("Gemini client is not configured")

        config = types.GenerateContentConfig(
            temperature=self.temperature,
            max_output_tokens=self.max_tokens,
            top_p=self.top_p,
            top_k=self.top_k,
            response_mime_type="application/json",
            response_schema=response_schema,
        )

        try:
            response = await self._client.aio.models.generate_content(
                model=self.model, contents=prompt, config=config
            )
        except Exception as e:
            logger.error(f"Gemini API call failed: {e}")
            raise LLMAPIError(f"Gemini API call failed: {e}") from e

        return self._parse_response(response)

    @staticmethod
    def _parse_response(response: Any) -> Any:
        text_response = getattr(response, "text", None)
        if not text_response:
            raise LLMResponseParseError("Gemini response contained no text")

        text_response = text_response.strip()

        # Check if the response is wrapped in markdown code blocks
        markdown_match = _MARKDOWN_JSON_PATTERN.search(text_response)
        if markdown_match:
            text_response = markdown_match.group(1).strip()

        try:
            return json.loads(text_response)
        except json.JSONDecodeError as e:
            logger.error(
                f"Failed to decode JSON response: {e}. Response: {text_response[:500]}"
            )
            raise LLMResponseParseError(f"Failed to parse JSON response: {e}") from e
