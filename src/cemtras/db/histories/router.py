"""
Chat history router.

Histories belong to the signed-in user. Deletes go through the chat
controller so an open conversation is unbound from a removed history.
"""

from http import HTTPStatus

from fastapi import APIRouter, Depends, HTTPException

from cemtras.ai.chat.controller import ChatSessionController
from cemtras.ai.chat.dependencies import get_chat_controller
from cemtras.ai.chat.router import to_message_response
from cemtras.ai.chat.schemas import MessageResponse
from cemtras.auth.dependencies import get_current_user
from cemtras.auth.schemas import User
from cemtras.db.dependencies import get_history_repository
from cemtras.db.histories.repository import ChatHistoryRepository
from cemtras.db.histories.schemas import (
    ChatHistory,
    ChatHistoryListResponse,
    ChatHistorySummary,
)
from cemtras.utils.logger import logger

router = APIRouter(prefix="/histories", tags=["Chat Histories"])


def to_summary(history: ChatHistory) -> ChatHistorySummary:
    return ChatHistorySummary(
        id=history.id,
        title=history.title,
        role=history.role,
        message_count=len(history.messages),
        created_at=history.created_at,
        last_updated=history.last_updated,
    )


@router.get("", response_model=ChatHistoryListResponse)
async def list_histories(
    current_user: User = Depends(get_current_user),
    history_repository: ChatHistoryRepository = Depends(get_history_repository),
) -> ChatHistoryListResponse:
    """
    List the current user's histories, most recent first.

    Args:
        current_user: The signed-in user
        history_repository: The history repository from dependency injection

    Returns:
        ChatHistoryListResponse: History summaries

    Raises:
        HTTPException: If the histories cannot be read from storage
    """
    try:
        histories = history_repository.list_histories(current_user.id)
    except Exception as e:
        logger.error("Failed to list chat histories", error=str(e))
        raise HTTPException(
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
            detail=f"Failed to list chat histories: {str(e)}",
        )

    return ChatHistoryListResponse(
        histories=[to_summary(history) for history in histories],
        total=len(histories),
        max_histories=history_repository.max_histories,
    )


@router.get("/{chat_id}/messages", response_model=list[MessageResponse])
async def get_history_messages(
    chat_id: str,
    current_user: User = Depends(get_current_user),
    history_repository: ChatHistoryRepository = Depends(get_history_repository),
) -> list[MessageResponse]:
    """
    Get the messages of one history.

    Raises:
        HTTPException: 404 if the history does not exist
    """
    history = history_repository.get(current_user.id, chat_id)
    if history is None:
        raise HTTPException(
            status_code=HTTPStatus.NOT_FOUND,
            detail=f"Chat history {chat_id} not found",
        )
    return [to_message_response(message) for message in history.messages]


@router.get("/{chat_id}", response_model=ChatHistory)
async def get_history(
    chat_id: str,
    current_user: User = Depends(get_current_user),
    history_repository: ChatHistoryRepository = Depends(get_history_repository),
) -> ChatHistory:
    history = history_repository.get(current_user.id, chat_id)
    if history is None:
        raise HTTPException(
            status_code=HTTPStatus.NOT_FOUND,
            detail=f"Chat history {chat_id} not found",
        )
    return history


@router.delete("/{chat_id}", status_code=HTTPStatus.NO_CONTENT)
async def delete_history(
    chat_id: str,
    current_user: User = Depends(get_current_user),
    controller: ChatSessionController = Depends(get_chat_controller),
) -> None:
    """Delete one history. Unknown IDs are ignored."""
    if not controller.delete_history(chat_id):
        logger.debug("Delete of unknown chat history", chat_id=chat_id, user_id=current_user.id)


@router.delete("", status_code=HTTPStatus.NO_CONTENT)
async def clear_histories(
    current_user: User = Depends(get_current_user),
    controller: ChatSessionController = Depends(get_chat_controller),
) -> None:
    try:
        controller.clear_histories()
    except Exception as e:
        logger.error("Failed to clear chat histories", error=str(e))
        raise HTTPException(
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
            detail=f"Failed to clear chat histories: {str(e)}",
        )
    logger.info("Cleared chat histories", user_id=current_user.id)
