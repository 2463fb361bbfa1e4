"""
Chat session controller.

Owns the transient chat session of one client: message submission with an
optimistic user message, loading and error state, role selection, and
automatic persistence of finished exchanges for signed-in users.
"""

from collections.abc import Callable

from cemtras.ai.base import TextCompletionProvider
from cemtras.ai.chat.schemas import (
    ChatSessionState,
    ErrorKind,
    ExchangeStatus,
    Message,
    MessageRole,
    PendingExchange,
    SessionError,
    UploadedFile,
)
from cemtras.ai.exceptions import TransportError, UnknownTransportError
from cemtras.ai.prompts.builder import PromptBuilder
from cemtras.ai.prompts.formatter import matches_section_grammar
from cemtras.ai.prompts.roles import DEFAULT_ROLE, ChatRole, get_role_profile
from cemtras.auth.schemas import User
from cemtras.db.histories.repository import ChatHistoryRepository
from cemtras.db.histories.schemas import ChatHistory
from cemtras.exceptions import (
    AuthError,
    ConfigurationError,
    NotFoundError,
    RoleNotPermittedError,
)
from cemtras.utils.logger import logger


def should_persist(messages: tuple[Message, ...]) -> bool:
    """A conversation is saved once it has a user message and an assistant reply."""
    if len(messages) < 2:
        return False
    roles = {message.role for message in messages}
    return MessageRole.USER in roles and MessageRole.ASSISTANT in roles


class ChatSessionController:
    """State machine for one chat session: Idle -> Sending -> Idle."""

    def __init__(
        self,
        prompt_builder: PromptBuilder,
        provider_factory: Callable[[], TextCompletionProvider],
        history_repository: ChatHistoryRepository,
        current_user: Callable[[], User | None],
    ):
        """
        Initialize the controller.

        Args:
            prompt_builder: Builds role-conditioned instructions
            provider_factory: Returns the model provider; raises ConfigurationError when unconfigured
            history_repository: Persists chat histories for signed-in users
            current_user: Returns the signed-in user, or None for guests
        """
        self.prompt_builder = prompt_builder
        self.provider_factory = provider_factory
        self.history_repository = history_repository
        self.current_user = current_user
        self._state = ChatSessionState()

    @property
    def state(self) -> ChatSessionState:
        return self._state

    def _update(self, **changes) -> None:
        self._state = self._state.model_copy(update=changes)

    def _clear_conversation(self, **changes) -> None:
        # Loading flag survives so an outstanding reply still blocks new sends
        error = self._state.error
        if error is not None and error.dismissable:
            error = None
        self._update(
            messages=(),
            error=error,
            pending=None,
            uploaded_files=(),
            current_chat_id=None,
            **changes,
        )

    def sync_user(self) -> User | None:
        """
        Align the session with the signed-in user.

        A session belongs to the user it started with. When that user signs out
        or another one signs in, the conversation, its history binding and any
        attached files are dropped, and roles that need a signed-in user fall
        back to the default role.

        Returns:
            User | None: The signed-in user, None for guests
        """
        user = self.current_user()
        user_id = user.id if user else None
        if user_id != self._state.owner_id:
            logger.info(
                "Signed-in user changed, resetting chat session",
                previous_user_id=self._state.owner_id,
                user_id=user_id,
            )
            self._clear_conversation(owner_id=user_id)

        if user is None and get_role_profile(self._state.selected_role).requires_auth:
            self._update(selected_role=DEFAULT_ROLE, uploaded_files=())
        return user

    # ========== Messaging ==========

    async def send_message(self, text: str) -> bool:
        """
        Send a user message and wait for the model's reply.

        Ignored while an error is unresolved, while a reply is outstanding, or
        for blank text.

        Returns:
            bool: True if the message was accepted
        """
        self.sync_user()
        if self._state.error is not None or self._state.is_loading or not text.strip():
            logger.debug(
                "Ignoring message",
                has_error=self._state.error is not None,
                is_loading=self._state.is_loading,
            )
            return False

        try:
            provider = self.provider_factory()
        except ConfigurationError as e:
            self._update(
                error=SessionError(
                    kind=ErrorKind.CONFIGURATION,
                    error_type=type(e).__name__,
                    message=e.message,
                    dismissable=False,
                )
            )
            return False

        role = self._state.selected_role
        user_message = Message(role=MessageRole.USER, content=text)
        exchange = PendingExchange(user_message_id=user_message.id)
        self._update(
            messages=self._state.messages + (user_message,),
            is_loading=True,
            pending=exchange,
        )
        self._persist()

        payload = self.prompt_builder.build(role, text)
        try:
            reply = await provider.generate(payload)
        except Exception as e:
            error = e if isinstance(e, TransportError) else UnknownTransportError()
            if error is not e:
                logger.exception("Unexpected provider failure", error=str(e))
            self._fail_exchange(exchange, error)
            return True

        self._resolve_exchange(exchange, reply)
        return True

    def _is_current(self, exchange: PendingExchange) -> bool:
        pending = self._state.pending
        return pending is not None and pending.user_message_id == exchange.user_message_id

    def _resolve_exchange(self, exchange: PendingExchange, reply: str) -> None:
        self.sync_user()
        if not self._is_current(exchange):
            # Session was reset or replaced while the call was outstanding
            logger.info("Discarding reply for a replaced session", message_id=exchange.user_message_id)
            self._update(is_loading=False)
            return

        if not matches_section_grammar(reply):
            logger.warning("Model reply does not follow the section format", role=self._state.selected_role.value)

        assistant_message = Message(role=MessageRole.ASSISTANT, content=reply)
        self._update(
            messages=self._state.messages + (assistant_message,),
            is_loading=False,
            pending=exchange.model_copy(
                update={
                    "status": ExchangeStatus.RESOLVED,
                    "assistant_message_id": assistant_message.id,
                }
            ),
        )
        self._persist()

    def _fail_exchange(self, exchange: PendingExchange, error: TransportError) -> None:
        logger.error(
            "Model call failed",
            error=error.message,
            error_type=type(error).__name__,
        )
        self.sync_user()
        if not self._is_current(exchange):
            self._update(is_loading=False)
            return

        self._update(
            is_loading=False,
            pending=exchange.model_copy(
                update={"status": ExchangeStatus.FAILED, "error": error.message}
            ),
            error=SessionError(
                kind=ErrorKind.TRANSPORT,
                error_type=type(error).__name__,
                message=error.message,
                dismissable=True,
            ),
        )

    def dismiss_error(self) -> bool:
        """Clear a recoverable error. Configuration errors stay."""
        error = self._state.error
        if error is None or not error.dismissable:
            return False
        self._update(error=None)
        return True

    # ========== Session ==========

    def select_role(self, role: ChatRole) -> None:
        """
        Change the active role.

        Raises:
            RoleNotPermittedError: If the role requires a signed-in user
        """
        if get_role_profile(role).requires_auth and self.sync_user() is None:
            raise RoleNotPermittedError(role.value)
        self._update(selected_role=role)

    def new_chat(self) -> None:
        """Clear the conversation and unbind it from any saved history.

        The loading flag survives so an outstanding reply still blocks new sends.
        Configuration errors survive too.
        """
        self._clear_conversation()

    def load_history(self, history: ChatHistory) -> None:
        """Replace the conversation with a saved history and bind to its ID."""
        self._update(
            messages=tuple(history.messages),
            selected_role=history.role,
            pending=None,
            current_chat_id=history.id,
        )

    def _require_history(self, user: User, chat_id: str) -> ChatHistory:
        history = self.history_repository.get(user.id, chat_id)
        if history is None:
            raise NotFoundError("Chat history", chat_id)
        return history

    def load_history_by_id(self, chat_id: str) -> bool:
        user = self.sync_user()
        if user is None:
            return False
        try:
            history = self._require_history(user, chat_id)
        except NotFoundError as e:
            logger.debug(e.message)
            return False
        self.load_history(history)
        return True

    def attach_file(self, uploaded_file: UploadedFile) -> None:
        """
        Attach file metadata to the session.

        Raises:
            AuthError: If no user is signed in
        """
        if self.sync_user() is None:
            raise AuthError("Login required to upload files")
        self._update(uploaded_files=self._state.uploaded_files + (uploaded_file,))

    # ========== Histories ==========

    def _persist(self) -> None:
        user = self.current_user()
        messages = self._state.messages
        if user is None or user.id != self._state.owner_id or not should_persist(messages):
            return

        chat_id = self._state.current_chat_id
        if chat_id and self.history_repository.update(user.id, chat_id, messages):
            return

        history = self.history_repository.save(
            user.id, messages, self._state.selected_role
        )
        self._update(current_chat_id=history.id)

    def delete_history(self, chat_id: str) -> bool:
        user = self.sync_user()
        if user is None:
            return False
        deleted = self.history_repository.delete(user.id, chat_id)
        if self._state.current_chat_id == chat_id:
            self._update(current_chat_id=None)
        return deleted

    def clear_histories(self) -> None:
        user = self.sync_user()
        if user is None:
            return
        self.history_repository.clear(user.id)
        self._update(current_chat_id=None)
