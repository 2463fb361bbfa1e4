"""
Pydantic schemas for chat messages and the transient chat session.

Messages and session snapshots are frozen; every state change produces new
objects instead of mutating shared ones.
"""

import uuid
from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from cemtras.ai.prompts.roles import DEFAULT_ROLE, ChatRole
from cemtras.ai.prompts.schemas import FormattedResponse


class MessageRole(str, Enum):
    """Author of a chat message."""

    USER = "user"
    ASSISTANT = "assistant"


class ExchangeStatus(str, Enum):
    """Lifecycle of one user message awaiting its reply."""

    PENDING = "pending"
    RESOLVED = "resolved"
    FAILED = "failed"


class ErrorKind(str, Enum):
    """Category of an error held by the session."""

    CONFIGURATION = "configuration"
    TRANSPORT = "transport"


class Message(BaseModel):
    """A single immutable chat message."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), description="Message ID")
    role: MessageRole = Field(..., description="Message author")
    content: str = Field(..., description="Message text")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC), description="When the message was created"
    )


class PendingExchange(BaseModel):
    """A user message and the state of its reply."""

    model_config = ConfigDict(frozen=True)

    user_message_id: str = Field(..., description="ID of the user message awaiting a reply")
    status: ExchangeStatus = Field(default=ExchangeStatus.PENDING, description="Reply state")
    assistant_message_id: str | None = Field(None, description="ID of the reply once resolved")
    error: str | None = Field(None, description="Failure message when the reply failed")


class SessionError(BaseModel):
    """An error shown to the user until dismissed."""

    model_config = ConfigDict(frozen=True)

    kind: ErrorKind = Field(..., description="Error category")
    error_type: str = Field(..., description="Exception class name")
    message: str = Field(..., description="User-facing message")
    dismissable: bool = Field(..., description="Whether the user can clear the error")


class UploadedFile(BaseModel):
    """Metadata of a file attached to the session."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="File name")
    mime_type: str | None = Field(None, description="MIME type")
    size_bytes: int | None = Field(None, ge=0, description="File size in bytes")


class ChatSessionState(BaseModel):
    """Snapshot of the in-memory chat session."""

    model_config = ConfigDict(frozen=True)

    messages: tuple[Message, ...] = Field(default=(), description="Messages in order")
    selected_role: ChatRole = Field(default=DEFAULT_ROLE, description="Active role")
    is_loading: bool = Field(default=False, description="Whether a reply is outstanding")
    error: SessionError | None = Field(None, description="Unresolved error, if any")
    pending: PendingExchange | None = Field(None, description="Latest exchange")
    uploaded_files: tuple[UploadedFile, ...] = Field(default=(), description="Attached files")
    current_chat_id: str | None = Field(None, description="Bound chat history ID")
    owner_id: str | None = Field(None, description="User the session belongs to, None for guests")


# ========== API Schemas ==========


class SendMessageRequest(BaseModel):
    """Request model for sending a chat message."""

    content: str = Field(..., min_length=1, description="Message text")


class SelectRoleRequest(BaseModel):
    """Request model for changing the active role."""

    role: ChatRole = Field(..., description="Role to chat as")


class MessageResponse(BaseModel):
    """Response model for a single message with display formatting."""

    id: str = Field(..., description="Message ID")
    role: MessageRole = Field(..., description="Message author")
    content: str = Field(..., description="Raw message text")
    timestamp: datetime = Field(..., description="When the message was created")
    formatted: FormattedResponse | None = Field(
        None, description="Display sections for assistant messages"
    )


class ChatSessionResponse(BaseModel):
    """Response model for the current chat session."""

    messages: list[MessageResponse] = Field(..., description="Messages in order")
    selected_role: ChatRole = Field(..., description="Active role")
    is_loading: bool = Field(..., description="Whether a reply is outstanding")
    error: SessionError | None = Field(None, description="Unresolved error, if any")
    pending: PendingExchange | None = Field(None, description="Latest exchange")
    uploaded_files: list[UploadedFile] = Field(..., description="Attached files")
    current_chat_id: str | None = Field(None, description="Bound chat history ID")
    accepted: bool | None = Field(
        None, description="Whether the last command was acted on (None for reads)"
    )


class RoleResponse(BaseModel):
    """Response model describing one selectable role."""

    role: ChatRole = Field(..., description="Role value")
    label: str = Field(..., description="Display label")
    description: str = Field(..., description="Short description")
    requires_auth: bool = Field(..., description="Whether login is required")
