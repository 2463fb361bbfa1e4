"""
FastAPI dependencies for client-scoped storage.

Each HTTP client is identified by a cookie and gets its own namespace in the
key-value store, the server-side counterpart of one browser's local storage.
"""

import uuid

from fastapi import Depends, Request, Response

from cemtras.config import get_app_settings
from cemtras.db.histories.repository import ChatHistoryRepository
from cemtras.db.kv_store import KeyValueStore, get_key_value_store

THIRTY_DAYS = 2592000


def get_storage() -> KeyValueStore:
    """FastAPI dependency for the process-wide key-value store."""
    return get_key_value_store()


def get_client_id(request: Request, response: Response) -> str:
    """
    Read the client ID cookie, issuing a new one on first contact.

    Args:
        request: The HTTP request
        response: The outgoing response, used to set the cookie

    Returns:
        str: The client ID
    """
    cookie_name = get_app_settings().client_cookie_name
    client_id = request.cookies.get(cookie_name)
    if not client_id:
        client_id = uuid.uuid4().hex
        response.set_cookie(
            key=cookie_name,
            value=client_id,
            httponly=True,
            samesite="lax",
            max_age=THIRTY_DAYS,
        )
    return client_id


def get_client_store(
    client_id: str = Depends(get_client_id),
    storage: KeyValueStore = Depends(get_storage),
) -> KeyValueStore:
    return storage.scoped(client_id)


def get_history_repository(
    store: KeyValueStore = Depends(get_client_store),
) -> ChatHistoryRepository:
    """
    FastAPI dependency for getting the chat history repository.

    Args:
        store: Client-scoped key-value store

    Returns:
        ChatHistoryRepository: Repository instance with injected store
    """
    return ChatHistoryRepository(store, max_histories=get_app_settings().max_histories)
