"""
Auth router with registration, login and OTP endpoints.

Registration and login both end in an OTP challenge; the user is signed in
only after /otp/verify succeeds.
"""

from http import HTTPStatus

from fastapi import APIRouter, Depends, HTTPException

from cemtras.ai.chat.dependencies import ChatSessionRegistry, get_session_registry
from cemtras.auth import schemas
from cemtras.auth.dependencies import get_auth_service, get_current_user
from cemtras.auth.service import AuthService
from cemtras.db.dependencies import get_client_id
from cemtras.exceptions import (
    DuplicateUserError,
    InvalidCredentialsError,
    OTPVerificationError,
    ValidationError,
)
from cemtras.utils.logger import logger

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _sync_chat_session(registry: ChatSessionRegistry, client_id: str) -> None:
    # Drops the previous user's conversation from this client's session
    controller = registry.get(client_id)
    if controller is not None:
        controller.sync_user()


def _otp_sent(challenge: schemas.OTPChallenge, message: str) -> schemas.OTPSentResponse:
    return schemas.OTPSentResponse(
        message=message,
        expires_at=challenge.expires_at,
        otp=challenge.code,
    )


@router.post("/register", response_model=schemas.OTPSentResponse)
async def register(
    request: schemas.RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> schemas.OTPSentResponse:
    """
    Register a new user and send an OTP to their mobile.

    Raises:
        HTTPException: 422 if the passwords differ, 409 if the email or mobile is taken
    """
    try:
        challenge = auth_service.register(
            full_name=request.full_name,
            email=str(request.email),
            mobile=request.mobile,
            password=request.password,
            confirm_password=request.confirm_password,
        )
    except ValidationError as e:
        raise HTTPException(status_code=HTTPStatus.UNPROCESSABLE_ENTITY, detail=e.message)
    except DuplicateUserError as e:
        raise HTTPException(status_code=HTTPStatus.CONFLICT, detail=e.message)

    return _otp_sent(challenge, "Registration successful. OTP sent to your mobile.")


@router.post("/login", response_model=schemas.OTPSentResponse)
async def login(
    request: schemas.LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> schemas.OTPSentResponse:
    """
    Check credentials and send an OTP to the user's mobile.

    Raises:
        HTTPException: 401 if the credentials are wrong
    """
    try:
        challenge = auth_service.login(request.email_or_mobile, request.password)
    except InvalidCredentialsError as e:
        raise HTTPException(status_code=HTTPStatus.UNAUTHORIZED, detail=e.message)

    return _otp_sent(challenge, "OTP sent to your mobile.")


@router.post("/otp/resend", response_model=schemas.OTPSentResponse)
async def resend_otp(
    auth_service: AuthService = Depends(get_auth_service),
) -> schemas.OTPSentResponse:
    try:
        challenge = auth_service.resend_otp()
    except OTPVerificationError as e:
        raise HTTPException(status_code=HTTPStatus.BAD_REQUEST, detail=e.message)

    return _otp_sent(challenge, "OTP resent to your mobile.")


@router.post("/otp/verify", response_model=schemas.User)
async def verify_otp(
    request: schemas.VerifyOTPRequest,
    auth_service: AuthService = Depends(get_auth_service),
    client_id: str = Depends(get_client_id),
    registry: ChatSessionRegistry = Depends(get_session_registry),
) -> schemas.User:
    """
    Complete login or registration with the OTP.

    Returns the signed-in user. An open chat session of another user is reset.
    """
    try:
        user = auth_service.verify_otp(request.otp)
    except ValidationError as e:
        raise HTTPException(status_code=HTTPStatus.UNPROCESSABLE_ENTITY, detail=e.message)
    except OTPVerificationError as e:
        logger.info("OTP verification failed", reason=e.message)
        raise HTTPException(status_code=HTTPStatus.UNAUTHORIZED, detail=e.message)

    _sync_chat_session(registry, client_id)
    return user


@router.post("/logout", response_model=schemas.SuccessResponse)
async def logout(
    auth_service: AuthService = Depends(get_auth_service),
    client_id: str = Depends(get_client_id),
    registry: ChatSessionRegistry = Depends(get_session_registry),
) -> schemas.SuccessResponse:
    """Sign out and reset the open chat session. Registered users and saved histories are kept."""
    auth_service.logout()
    _sync_chat_session(registry, client_id)
    return schemas.SuccessResponse(message="Signed out")


@router.get("/me", response_model=schemas.User)
async def get_current_user_info(
    current_user: schemas.User = Depends(get_current_user),
) -> schemas.User:
    """
    Get current user information.

    Returns the profile of the signed-in user.
    """
    return current_user
