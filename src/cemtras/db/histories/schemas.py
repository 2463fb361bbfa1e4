"""
Pydantic schemas for persisted chat histories.

This module contains the stored ChatHistory model and the response models
returned by the history endpoints.
"""

import uuid
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field

from cemtras.ai.chat.schemas import Message
from cemtras.ai.prompts.roles import ChatRole


def new_chat_id() -> str:
    return f"chat_{uuid.uuid4().hex}"


class ChatHistory(BaseModel):
    """A named snapshot of one conversation for one user and role."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_chat_id, description="Chat history ID")
    title: str = Field(..., description="Chat title")
    messages: tuple[Message, ...] = Field(..., description="Messages in order")
    role: ChatRole = Field(..., description="Role the conversation used")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC), description="When the history was saved"
    )
    last_updated: datetime = Field(
        default_factory=lambda: datetime.now(UTC), description="When messages last changed"
    )


# ========== API Schemas ==========


class ChatHistorySummary(BaseModel):
    """Response model for a history in a list."""

    id: str = Field(..., description="Chat history ID")
    title: str = Field(..., description="Chat title")
    role: ChatRole = Field(..., description="Role the conversation used")
    message_count: int = Field(..., description="Number of messages")
    created_at: datetime = Field(..., description="When the history was saved")
    last_updated: datetime = Field(..., description="When messages last changed")


class ChatHistoryListResponse(BaseModel):
    """Response model for the user's histories, most recent first."""

    histories: list[ChatHistorySummary] = Field(..., description="Histories")
    total: int = Field(..., description="Number of histories")
    max_histories: int = Field(..., description="Maximum histories kept per user")
