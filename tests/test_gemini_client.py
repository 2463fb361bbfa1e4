"""Tests for the Gemini client and its error classification."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from google.genai import errors, types

from cemtras.ai.exceptions import (
    ContentBlockedError,
    EmptyResponseError,
    ModelAuthError,
    QuotaExceededError,
    UnknownTransportError,
)
from cemtras.ai.gemini.client import GeminiClient, classify_error
from cemtras.ai.gemini.config import GeminiSettings
from cemtras.ai.prompts.builder import PromptBuilder
from cemtras.ai.prompts.roles import ChatRole

from .conftest import STRUCTURED_REPLY


@pytest.fixture
def settings():
    return GeminiSettings(api_key="test-key", model_name="gemini-test")


@pytest.fixture
def payload():
    return PromptBuilder().build(ChatRole.OPERATIONS, "Why is the kiln shell hot?")


def make_response(text: str | None = STRUCTURED_REPLY) -> MagicMock:
    response = MagicMock()
    response.text = text
    response.prompt_feedback = None
    response.candidates = []
    return response


@pytest.fixture
def mock_genai_client():
    """Patch the SDK client so no network calls are made."""
    with patch("cemtras.ai.gemini.client.genai.Client") as client_class:
        client = MagicMock()
        client.aio.models.generate_content = AsyncMock(return_value=make_response())
        client_class.return_value = client
        yield client


def api_error(code: int, message: str) -> errors.APIError:
    return errors.APIError(code, {"error": {"code": code, "message": message, "status": "ERROR"}})


@pytest.mark.asyncio
async def test_generate_sends_instruction_and_sampling(settings, payload, mock_genai_client):
    result = await GeminiClient(settings).generate(payload)

    assert result == STRUCTURED_REPLY
    call = mock_genai_client.aio.models.generate_content.call_args
    assert call.kwargs["model"] == "gemini-test"
    assert call.kwargs["contents"] == "Why is the kiln shell hot?"
    config = call.kwargs["config"]
    assert config.system_instruction == payload.system_instruction
    assert config.temperature == 0.7
    assert config.top_p == 0.8
    assert config.top_k == 40
    assert config.max_output_tokens == 2048


@pytest.mark.asyncio
async def test_client_is_created_once(settings, payload, mock_genai_client):
    gemini = GeminiClient(settings)
    with patch("cemtras.ai.gemini.client.genai.Client", return_value=mock_genai_client) as client_class:
        await gemini.generate(payload)
        await gemini.generate(payload)

    client_class.assert_called_once()


@pytest.mark.asyncio
@pytest.mark.parametrize("text", [None, "", "   "])
async def test_empty_response(settings, payload, mock_genai_client, text):
    mock_genai_client.aio.models.generate_content.return_value = make_response(text)

    with pytest.raises(EmptyResponseError):
        await GeminiClient(settings).generate(payload)


@pytest.mark.asyncio
async def test_prompt_blocked(settings, payload, mock_genai_client):
    response = make_response()
    response.prompt_feedback = MagicMock(block_reason="SAFETY")
    mock_genai_client.aio.models.generate_content.return_value = response

    with pytest.raises(ContentBlockedError):
        await GeminiClient(settings).generate(payload)


@pytest.mark.asyncio
async def test_candidate_blocked(settings, payload, mock_genai_client):
    response = make_response()
    response.candidates = [MagicMock(finish_reason=types.FinishReason.SAFETY)]
    mock_genai_client.aio.models.generate_content.return_value = response

    with pytest.raises(ContentBlockedError):
        await GeminiClient(settings).generate(payload)


@pytest.mark.asyncio
async def test_quota_error_is_classified(settings, payload, mock_genai_client):
    mock_genai_client.aio.models.generate_content.side_effect = api_error(429, "Resource exhausted")

    with pytest.raises(QuotaExceededError) as exc_info:
        await GeminiClient(settings).generate(payload)

    assert exc_info.value.status_code == 429
    assert isinstance(exc_info.value.__cause__, errors.APIError)


@pytest.mark.parametrize(
    "error, expected",
    [
        (api_error(401, "Unauthorized"), ModelAuthError),
        (api_error(403, "Permission denied"), ModelAuthError),
        (ValueError("API_KEY_INVALID"), ModelAuthError),
        (api_error(429, "Too many requests"), QuotaExceededError),
        (RuntimeError("quota exceeded for project"), QuotaExceededError),
        (RuntimeError("response blocked"), ContentBlockedError),
        (RuntimeError("SAFETY filter triggered"), ContentBlockedError),
        (RuntimeError("connection reset"), UnknownTransportError),
        (api_error(500, "Internal error"), UnknownTransportError),
    ],
)
def test_classify_error(error, expected):
    assert type(classify_error(error)) is expected


def test_classify_error_keeps_transport_errors():
    error = EmptyResponseError()
    assert classify_error(error) is error


def test_user_facing_messages():
    assert classify_error(api_error(401, "x")).message == (
        "Invalid API key. Please check your Gemini API key configuration."
    )
    assert classify_error(RuntimeError("boom")).message == (
        "Technical system error occurred. Please try again or contact support."
    )
