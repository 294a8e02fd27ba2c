"""
LLM client module.

This module provides:
- GenAIJSONClient: async Gemini client for structured JSON responses
- The LLM service exception hierarchy
"""

from .exceptions import LLMAPIError, LLMResponseParseError, LLMServiceError
from .genai_client import GenAIJSONClient

__all__ = [
    "GenAIJSONClient",
    "LLMServiceError",
    "LLMAPIError",
    "LLMResponseParseError",
]
