"""Errors raised at the language-model call boundary.

Every provider maps its native failures onto this taxonomy so the chat
controller can surface them without knowing which provider is configured.
"""


class TransportError(Exception):
    """Base exception for failed model calls."""

    default_message = "Technical system error occurred. Please try again or contact support."

    def __init__(self, message: str | None = None, status_code: int | None = None) -> None:
        message = message or self.default_message
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ModelAuthError(TransportError):
    """Raised when the provider rejects the API key."""

    default_message = "Invalid API key. Please check your Gemini API key configuration."


class QuotaExceededError(TransportError):
    """Raised when the provider quota or rate limit is exhausted."""

    default_message = "API quota exceeded. Please try again later or check your billing settings."


class ContentBlockedError(TransportError):
    """Raised when safety filters block the prompt or the response."""

    default_message = "Content was blocked by safety filters. Please rephrase your question."


class EmptyResponseError(TransportError):
    """Raised when the provider returns no text."""

    default_message = "Empty response from API"


class UnknownTransportError(TransportError):
    """Raised for any other provider failure."""

    pass
