"""
FastAPI dependencies for the chat session controller.

Controllers live in memory, one per client, in a registry bounded by size and
idle time.
"""

import time
from collections.abc import Callable

from cachetools import TTLCache
from fastapi import Depends

from cemtras.ai.base import TextCompletionProvider
from cemtras.ai.chat.controller import ChatSessionController
from cemtras.ai.gemini import get_gemini_client
from cemtras.ai.gemini.config import get_gemini_settings
from cemtras.ai.prompts.builder import PromptBuilder
from cemtras.ai.prompts.schemas import SamplingParameters
from cemtras.auth.credentials import CredentialStore
from cemtras.auth.dependencies import get_credential_store
from cemtras.config import get_app_settings
from cemtras.db.dependencies import get_client_id, get_history_repository
from cemtras.db.histories.repository import ChatHistoryRepository
from cemtras.exceptions import ConfigurationError
from cemtras.utils.logger import logger

_provider: TextCompletionProvider | None = None


def get_text_completion_provider() -> TextCompletionProvider:
    """
    Get or create the model provider singleton.

    Raises:
        ConfigurationError: If the Gemini API key is not configured
    """
    global _provider
    if _provider is None:
        _provider = get_gemini_client()
        logger.info("Initialized Gemini provider")
    return _provider


def get_prompt_builder() -> PromptBuilder:
    try:
        sampling = get_gemini_settings().sampling_parameters()
    except ConfigurationError:
        # The controller reports the missing key on the first send
        sampling = SamplingParameters()
    return PromptBuilder(sampling)


class ChatSessionRegistry:
    """
    In-memory chat session controllers keyed by client ID.

    Bounded in size, and a session idle for longer than the TTL is dropped.
    Every lookup renews the session's TTL.
    """

    def __init__(
        self,
        maxsize: int,
        ttl_seconds: float,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._sessions: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl_seconds, timer=timer)

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, client_id: str) -> ChatSessionController | None:
        controller = self._sessions.get(client_id)
        if controller is not None:
            self._sessions[client_id] = controller
        return controller

    def register(self, client_id: str, controller: ChatSessionController) -> None:
        self._sessions[client_id] = controller


_registry: ChatSessionRegistry | None = None


def get_session_registry() -> ChatSessionRegistry:
    global _registry
    if _registry is None:
        settings = get_app_settings()
        _registry = ChatSessionRegistry(
            maxsize=settings.max_chat_sessions,
            ttl_seconds=settings.chat_session_ttl_seconds,
        )
    return _registry


def get_chat_controller(
    client_id: str = Depends(get_client_id),
    registry: ChatSessionRegistry = Depends(get_session_registry),
    history_repository: ChatHistoryRepository = Depends(get_history_repository),
    credentials: CredentialStore = Depends(get_credential_store),
) -> ChatSessionController:
    """
    Get the client's chat session controller, creating it on first use.

    Returns:
        ChatSessionController: The controller bound to this client's storage
    """
    controller = registry.get(client_id)
    if controller is None:
        controller = ChatSessionController(
            prompt_builder=get_prompt_builder(),
            provider_factory=get_text_completion_provider,
            history_repository=history_repository,
            current_user=credentials.get_current_user,
        )
        registry.register(client_id, controller)
        logger.info("Created chat session", client_id=client_id)
    controller.sync_user()
    return controller
