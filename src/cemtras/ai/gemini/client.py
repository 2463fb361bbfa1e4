"""Google Gemini API client implementation."""

from braintrust.wrappers.google_genai import setup_genai
from google import genai
from google.genai import errors, types

from cemtras.ai.base import TextCompletionProvider
from cemtras.ai.exceptions import (
    ContentBlockedError,
    EmptyResponseError,
    ModelAuthError,
    QuotaExceededError,
    TransportError,
    UnknownTransportError,
)
from cemtras.ai.gemini.config import GeminiSettings
from cemtras.ai.prompts.schemas import InstructionPayload
from cemtras.utils.logger import logger

BLOCKED_FINISH_REASONS = {"SAFETY", "BLOCKLIST", "PROHIBITED_CONTENT", "SPII"}


def classify_error(error: Exception) -> TransportError:
    """Map an SDK or transport exception onto the transport error taxonomy."""
    if isinstance(error, TransportError):
        return error

    message = str(error)
    lowered = message.lower()
    status_code = getattr(error, "code", None) if isinstance(error, errors.APIError) else None

    if status_code in (401, 403) or "api_key" in lowered or "api key" in lowered:
        return ModelAuthError(status_code=status_code)
    if status_code == 429 or "quota" in lowered or "resource_exhausted" in lowered:
        return QuotaExceededError(status_code=status_code)
    if "blocked" in lowered or "safety" in lowered:
        return ContentBlockedError(status_code=status_code)
    return UnknownTransportError(status_code=status_code)


class GeminiClient(TextCompletionProvider):
    """Async client for Google Gemini API.

    Sends role-conditioned instructions to the configured model and maps
    failures onto the transport error taxonomy.
    """

    def __init__(self, settings: GeminiSettings) -> None:
        """Initialize Gemini client.

        Args:
            settings: Gemini settings instance with API configuration
        """
        self.settings = settings
        self._client: genai.Client | None = None

    def _get_client(self) -> genai.Client:
        """Get or create the Gemini client.

        Automatically sets up Braintrust tracing if enabled.
        """
        if self._client is None:
            try:
                if self.settings.enable_braintrust and self.settings.braintrust_project_name:
                    logger.info(
                        f"Setting up Gemini with Braintrust tracing enabled (project: {self.settings.braintrust_project_name})"
                    )
                    setup_genai(project_name=self.settings.braintrust_project_name)

                self._client = genai.Client(
                    api_key=self.settings.api_key,
                    http_options=types.HttpOptions(timeout=self.settings.timeout * 1000),
                )
                logger.info("Gemini client initialized")
            except Exception as e:
                logger.error("Failed to initialize Gemini client", error=str(e))
                raise ModelAuthError(f"Failed to authenticate: {e}") from e
        return self._client

    @staticmethod
    def _check_blocked(response: types.GenerateContentResponse) -> None:
        feedback = getattr(response, "prompt_feedback", None)
        if feedback is not None and getattr(feedback, "block_reason", None):
            raise ContentBlockedError()

        for candidate in getattr(response, "candidates", None) or []:
            reason = getattr(candidate, "finish_reason", None)
            reason_name = getattr(reason, "name", None) or str(reason or "")
            if reason_name in BLOCKED_FINISH_REASONS:
                raise ContentBlockedError()

    async def generate(self, payload: InstructionPayload) -> str:
        """Generate a response for a built instruction payload.

        Args:
            payload: Instruction, prompt and sampling parameters

        Returns:
            str: Generated text

        Raises:
            TransportError: Classified failure (auth, quota, blocked, empty, unknown)
        """
        try:
            client = self._get_client()
            sampling = payload.sampling

            logger.info(
                "Generating content with model",
                model_name=self.settings.model_name,
                role=payload.role.value,
            )

            response = await client.aio.models.generate_content(
                model=self.settings.model_name,
                contents=payload.prompt,
                config=types.GenerateContentConfig(
                    system_instruction=payload.system_instruction,
                    temperature=sampling.temperature,
                    top_p=sampling.top_p,
                    top_k=sampling.top_k,
                    max_output_tokens=sampling.max_output_tokens,
                ),
            )

            self._check_blocked(response)

            text = response.text
            if not text or not text.strip():
                raise EmptyResponseError()

            return text

        except Exception as e:
            transport_error = classify_error(e)
            logger.error(
                "Content generation failed",
                error=str(e),
                error_type=type(transport_error).__name__,
            )
            if transport_error is e:
                raise
            raise transport_error from e
