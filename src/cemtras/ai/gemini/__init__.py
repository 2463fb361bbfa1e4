"""Gemini AI integration package."""

from cemtras.ai.gemini.client import GeminiClient
from cemtras.ai.gemini.config import get_gemini_settings


def get_gemini_client() -> GeminiClient:
    """
    Get a configured Gemini client instance.

    Returns:
        GeminiClient: The configured Gemini client

    Raises:
        ConfigurationError: If the Gemini API key is not configured
    """
    return GeminiClient(settings=get_gemini_settings())


__all__ = [
    "GeminiClient",
    "get_gemini_client",
]
