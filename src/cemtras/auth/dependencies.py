"""
Authentication dependencies.

This module provides FastAPI dependencies for the client's credential store,
the authentication flow and the signed-in user.
"""

from fastapi import Depends, HTTPException, status

from cemtras.auth.credentials import CredentialStore
from cemtras.auth.otp import OTPVerifier
from cemtras.auth.schemas import User
from cemtras.auth.service import AuthService
from cemtras.config import get_app_settings
from cemtras.db.dependencies import get_client_store
from cemtras.db.kv_store import KeyValueStore


def get_credential_store(
    store: KeyValueStore = Depends(get_client_store),
) -> CredentialStore:
    return CredentialStore(store)


def get_auth_service(
    store: KeyValueStore = Depends(get_client_store),
    credentials: CredentialStore = Depends(get_credential_store),
) -> AuthService:
    """Dependency to get the authentication flow for the current client."""
    otp_verifier = OTPVerifier(store, ttl_seconds=get_app_settings().otp_ttl_seconds)
    return AuthService(store, credentials, otp_verifier)


async def get_current_user_optional(
    credentials: CredentialStore = Depends(get_credential_store),
) -> User | None:
    return credentials.get_current_user()


async def get_current_user(
    user: User | None = Depends(get_current_user_optional),
) -> User:
    """
    Get the signed-in user.

    Raises:
        HTTPException: If no user is signed in on this client
    """
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not signed in",
        )
    return user
