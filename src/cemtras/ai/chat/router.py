"""FastAPI router for the chat session."""

from http import HTTPStatus

from fastapi import APIRouter, Depends, HTTPException

from cemtras.ai.chat.controller import ChatSessionController
from cemtras.ai.chat.dependencies import get_chat_controller
from cemtras.ai.chat.schemas import (
    ChatSessionResponse,
    Message,
    MessageResponse,
    MessageRole,
    RoleResponse,
    SelectRoleRequest,
    SendMessageRequest,
    UploadedFile,
)
from cemtras.ai.prompts.formatter import format_response
from cemtras.ai.prompts.roles import ROLE_PROFILES
from cemtras.exceptions import AuthError, RoleNotPermittedError

router = APIRouter(prefix="/chat", tags=["Chat"])


def to_message_response(message: Message) -> MessageResponse:
    formatted = None
    if message.role == MessageRole.ASSISTANT:
        formatted = format_response(message.content)
    return MessageResponse(
        id=message.id,
        role=message.role,
        content=message.content,
        timestamp=message.timestamp,
        formatted=formatted,
    )


def to_session_response(
    controller: ChatSessionController, accepted: bool | None = None
) -> ChatSessionResponse:
    """
    Build the API view of a session snapshot.

    Args:
        controller: The client's chat controller
        accepted: Whether the command that produced the snapshot was acted on

    Returns:
        ChatSessionResponse: Session with display-formatted messages
    """
    state = controller.state
    return ChatSessionResponse(
        messages=[to_message_response(message) for message in state.messages],
        selected_role=state.selected_role,
        is_loading=state.is_loading,
        error=state.error,
        pending=state.pending,
        uploaded_files=list(state.uploaded_files),
        current_chat_id=state.current_chat_id,
        accepted=accepted,
    )


@router.get("/session", response_model=ChatSessionResponse)
async def get_session(
    controller: ChatSessionController = Depends(get_chat_controller),
) -> ChatSessionResponse:
    return to_session_response(controller)


@router.post("/messages", response_model=ChatSessionResponse)
async def send_message(
    request: SendMessageRequest,
    controller: ChatSessionController = Depends(get_chat_controller),
) -> ChatSessionResponse:
    """
    Send a message and wait for the reply.

    Model failures do not fail the request. They are reported in the
    session's error field, and `accepted` is false when the message was ignored.
    """
    accepted = await controller.send_message(request.content)
    return to_session_response(controller, accepted)


@router.post("/role", response_model=ChatSessionResponse)
async def select_role(
    request: SelectRoleRequest,
    controller: ChatSessionController = Depends(get_chat_controller),
) -> ChatSessionResponse:
    try:
        controller.select_role(request.role)
    except RoleNotPermittedError as e:
        raise HTTPException(status_code=HTTPStatus.FORBIDDEN, detail=e.message)
    return to_session_response(controller, True)


@router.post("/new", response_model=ChatSessionResponse)
async def new_chat(
    controller: ChatSessionController = Depends(get_chat_controller),
) -> ChatSessionResponse:
    controller.new_chat()
    return to_session_response(controller, True)


@router.post("/error/dismiss", response_model=ChatSessionResponse)
async def dismiss_error(
    controller: ChatSessionController = Depends(get_chat_controller),
) -> ChatSessionResponse:
    accepted = controller.dismiss_error()
    return to_session_response(controller, accepted)


@router.post("/load/{chat_id}", response_model=ChatSessionResponse)
async def load_history(
    chat_id: str,
    controller: ChatSessionController = Depends(get_chat_controller),
) -> ChatSessionResponse:
    """
    Load a saved history into the session.

    An unknown ID leaves the session unchanged and reports `accepted` false.
    """
    accepted = controller.load_history_by_id(chat_id)
    return to_session_response(controller, accepted)


@router.post("/files", response_model=ChatSessionResponse)
async def attach_file(
    uploaded_file: UploadedFile,
    controller: ChatSessionController = Depends(get_chat_controller),
) -> ChatSessionResponse:
    try:
        controller.attach_file(uploaded_file)
    except AuthError as e:
        raise HTTPException(status_code=HTTPStatus.UNAUTHORIZED, detail=e.message)
    return to_session_response(controller, True)


@router.get("/roles", response_model=list[RoleResponse])
async def list_roles() -> list[RoleResponse]:
    """List selectable roles in display order."""
    return [
        RoleResponse(
            role=profile.role,
            label=profile.label,
            description=profile.description,
            requires_auth=profile.requires_auth,
        )
        for profile in ROLE_PROFILES.values()
    ]
