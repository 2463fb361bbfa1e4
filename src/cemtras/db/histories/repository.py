"""
Repository for persisted chat histories.

Histories are kept per user under one storage key, most recent first, capped
at ``max_histories`` entries across all roles.
"""

from collections.abc import Sequence
from datetime import UTC, datetime

from pydantic import TypeAdapter
from pydantic import ValidationError as SchemaValidationError

from cemtras.ai.chat.schemas import Message, MessageRole
from cemtras.ai.prompts.roles import ChatRole
from cemtras.db.histories.schemas import ChatHistory
from cemtras.db.kv_store import KeyValueStore
from cemtras.utils.logger import logger

MAX_HISTORIES = 10
TITLE_LENGTH = 30
DEFAULT_TITLE = "New Chat"

_histories_adapter = TypeAdapter(list[ChatHistory])


def history_key(user_id: str) -> str:
    return f"chat_histories_{user_id}"


def derive_title(messages: Sequence[Message]) -> str:
    """Title a chat from the first 30 characters of its first user message."""
    for message in messages:
        if message.role == MessageRole.USER:
            return message.content[:TITLE_LENGTH] + "..."
    return DEFAULT_TITLE


class ChatHistoryRepository:
    """Repository for managing a user's saved chat histories."""

    def __init__(self, store: KeyValueStore, max_histories: int = MAX_HISTORIES):
        """
        Initialize the repository with a key-value store.

        Args:
            store: Client-scoped key-value store
            max_histories: Maximum histories kept per user
        """
        self.store = store
        self.max_histories = max_histories

    def _read(self, user_id: str) -> list[ChatHistory]:
        raw = self.store.get(history_key(user_id))
        if raw is None:
            return []
        try:
            return _histories_adapter.validate_json(raw)
        except SchemaValidationError as e:
            logger.warning(
                "[ChatHistoryRepository] Ignoring corrupted histories",
                user_id=user_id,
                error=str(e),
            )
            return []

    def _write(self, user_id: str, histories: list[ChatHistory]) -> None:
        self.store.set(
            history_key(user_id), _histories_adapter.dump_json(histories).decode()
        )

    def save(
        self,
        user_id: str,
        messages: Sequence[Message],
        role: ChatRole,
        title: str | None = None,
    ) -> ChatHistory:
        """
        Save a new chat history at the front of the user's collection.

        Args:
            user_id: Owner of the history
            messages: Conversation messages (copied)
            role: Role the conversation used
            title: Explicit title, derived from the first user message if omitted

        Returns:
            ChatHistory: The saved history
        """
        history = ChatHistory(
            title=title or derive_title(messages),
            messages=tuple(messages),
            role=role,
        )
        histories = [history, *self._read(user_id)][: self.max_histories]
        self._write(user_id, histories)

        logger.info(
            f"[ChatHistoryRepository] Saved history: id={history.id}, user_id={user_id}, title={history.title}"
        )
        return history

    def list_histories(self, user_id: str) -> list[ChatHistory]:
        """Return the user's histories, most recent first."""
        histories = self._read(user_id)
        logger.debug(
            f"[ChatHistoryRepository] Listed {len(histories)} histories for user {user_id}"
        )
        return histories

    def get(self, user_id: str, chat_id: str) -> ChatHistory | None:
        for history in self._read(user_id):
            if history.id == chat_id:
                return history
        logger.debug(
            f"[ChatHistoryRepository] History not found: id={chat_id}, user_id={user_id}"
        )
        return None

    def update(
        self, user_id: str, chat_id: str, messages: Sequence[Message]
    ) -> ChatHistory | None:
        """
        Replace a history's messages and refresh its last_updated time.

        Args:
            user_id: Owner of the history
            chat_id: History ID
            messages: New message sequence (copied)

        Returns:
            ChatHistory | None: Updated history, None if it does not exist
        """
        histories = self._read(user_id)
        for index, history in enumerate(histories):
            if history.id == chat_id:
                updated = history.model_copy(
                    update={"messages": tuple(messages), "last_updated": datetime.now(UTC)}
                )
                histories[index] = updated
                self._write(user_id, histories)
                logger.debug(
                    f"[ChatHistoryRepository] Updated history: id={chat_id}, messages={len(messages)}"
                )
                return updated
        return None

    def delete(self, user_id: str, chat_id: str) -> bool:
        histories = self._read(user_id)
        remaining = [history for history in histories if history.id != chat_id]
        if len(remaining) == len(histories):
            return False
        self._write(user_id, remaining)
        logger.info(f"[ChatHistoryRepository] Deleted history: id={chat_id}")
        return True

    def clear(self, user_id: str) -> None:
        self.store.delete(history_key(user_id))
        logger.info(f"[ChatHistoryRepository] Cleared histories for user {user_id}")
