"""
Auth-specific Pydantic schemas for request and response models.

This module contains all Pydantic models related to registration, login,
one-time password verification and the current user.
"""

import uuid
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field


def new_user_id() -> str:
    return f"user_{uuid.uuid4().hex}"


# Core domain models
class User(BaseModel):
    """User information. Immutable once registered."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_user_id, description="User's unique identifier")
    full_name: str = Field(..., min_length=1, max_length=128, description="User's full name")
    email: str = Field(..., description="User's email address")
    mobile: str = Field(..., description="User's mobile number")
    is_authenticated: bool = Field(default=True, description="Whether the user is signed in")
    registration_date: datetime = Field(
        default_factory=lambda: datetime.now(UTC), description="Registration timestamp"
    )


class CredentialRecord(User):
    """Stored user with password.

    The password is kept in plaintext. This mirrors a demo login flow and must
    be replaced with salted hashing before any real use.
    """

    password: str = Field(..., description="Plaintext password")

    def to_user(self) -> User:
        return User(**self.model_dump(exclude={"password"}))


class OTPChallenge(BaseModel):
    """A one-time password sent to a mobile number."""

    model_config = ConfigDict(frozen=True)

    mobile: str = Field(..., description="Mobile number the code was sent to")
    code: str = Field(..., description="Six-digit code")
    expires_at: datetime = Field(..., description="When the code stops being valid")


class PendingVerification(BaseModel):
    """A login or registration awaiting its OTP step."""

    user_id: str = Field(..., description="User who passed the password step")
    mobile: str = Field(..., description="Mobile number the OTP was sent to")


# Request schemas
class RegisterRequest(BaseModel):
    """Schema for registering a new user."""

    full_name: str = Field(..., min_length=1, max_length=128, description="Full name")
    email: EmailStr = Field(..., description="Email address")
    mobile: str = Field(..., pattern=r"^\+?\d{10,15}$", description="Mobile number")
    password: str = Field(..., min_length=1, description="Password")
    confirm_password: str = Field(..., min_length=1, description="Password confirmation")


class LoginRequest(BaseModel):
    """Schema for logging in with an email or mobile number."""

    email_or_mobile: str = Field(..., min_length=1, description="Email or mobile number")
    password: str = Field(..., min_length=1, description="Password")


class VerifyOTPRequest(BaseModel):
    """Schema for submitting a one-time password."""

    otp: str = Field(..., description="Six-digit code")


# Response schemas
class OTPSentResponse(BaseModel):
    """Schema returned when an OTP has been sent."""

    success: bool = Field(default=True, description="Whether the OTP was sent")
    message: str = Field(..., description="Human-readable status")
    otp_sent: bool = Field(default=True, description="Whether a code is pending")
    expires_at: datetime = Field(..., description="When the code expires")
    otp: str | None = Field(
        None, description="The code itself, exposed for demo use only"
    )


class SuccessResponse(BaseModel):
    """Schema for success responses."""

    success: bool = Field(default=True, description="Operation success status")
    message: str = Field(..., description="Success message")
