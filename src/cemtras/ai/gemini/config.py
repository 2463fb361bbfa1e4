"""
Configuration management for the Gemini integration package.

This module handles environment variable configuration and validation
for Gemini integration using Pydantic settings.
"""

from pydantic import Field
from pydantic import ValidationError as SettingsValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from cemtras.ai.prompts.schemas import SamplingParameters
from cemtras.exceptions import ConfigurationError
from cemtras.utils.logger import logger


class GeminiSettings(BaseSettings):
    """Configuration for Gemini integration using Pydantic settings."""

    model_config = SettingsConfigDict(
        case_sensitive=False,
        extra="ignore",
        env_prefix="GEMINI_",
        protected_namespaces=(),
    )

    # Gemini API configuration
    api_key: str = Field(min_length=1, description="Gemini API key for authentication")
    model_name: str = Field(
        default="gemini-1.5-flash", description="Gemini model name to use"
    )
    temperature: float = Field(
        default=0.7, description="Temperature for content generation (0.0-1.0)"
    )
    top_p: float = Field(default=0.8, description="Nucleus sampling probability mass")
    top_k: int = Field(default=40, description="Top-k sampling cutoff")
    max_output_tokens: int = Field(
        default=2048, description="Maximum number of tokens to generate"
    )
    timeout: int = Field(default=60, description="Request timeout in seconds")

    # Tracing
    enable_braintrust: bool = Field(
        default=False, description="Wrap the Gemini SDK with Braintrust tracing"
    )
    braintrust_project_name: str | None = Field(
        default=None, description="Braintrust project receiving traces"
    )

    def sampling_parameters(self) -> SamplingParameters:
        return SamplingParameters(
            temperature=self.temperature,
            top_p=self.top_p,
            top_k=self.top_k,
            max_output_tokens=self.max_output_tokens,
        )


# Global settings instance
_gemini_settings: GeminiSettings | None = None


def get_gemini_settings() -> GeminiSettings:
    """
    Get the global Gemini settings instance.

    Returns:
        GeminiSettings: The global settings instance

    Raises:
        ConfigurationError: If GEMINI_API_KEY is not configured
    """
    global _gemini_settings
    if _gemini_settings is None:
        try:
            _gemini_settings = GeminiSettings()
        except SettingsValidationError as e:
            logger.error("Gemini settings are invalid", error=str(e))
            raise ConfigurationError(
                "GEMINI_API_KEY is not configured. Please set GEMINI_API_KEY in your environment variables."
            ) from e
        logger.info("Settings loaded", model_name=_gemini_settings.model_name)
    return _gemini_settings


def set_gemini_settings(settings: GeminiSettings | None) -> None:
    """
    Set the global Gemini settings instance.

    Args:
        settings: The settings to set, or None to reload from the environment
    """
    global _gemini_settings
    _gemini_settings = settings
