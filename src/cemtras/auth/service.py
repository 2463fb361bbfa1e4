"""
Two-step authentication flow.

A successful password check (login or registration) sends an OTP to the
user's mobile and records a pending verification. Only a correct OTP writes
the current-session pointer.
"""

import re

from pydantic import ValidationError as SchemaValidationError

from cemtras.auth.credentials import CredentialStore
from cemtras.auth.otp import OTPVerifier
from cemtras.auth.schemas import OTPChallenge, PendingVerification, User
from cemtras.db.kv_store import KeyValueStore
from cemtras.exceptions import OTPVerificationError, ValidationError
from cemtras.utils.logger import logger

PENDING_AUTH_KEY = "cemtras_pending_auth"
OTP_FORMAT = re.compile(r"^\d{6}$")


class AuthService:
    """Coordinates the credential store and OTP verifier for one client."""

    def __init__(
        self,
        store: KeyValueStore,
        credentials: CredentialStore,
        otp_verifier: OTPVerifier,
    ):
        self.store = store
        self.credentials = credentials
        self.otp_verifier = otp_verifier

    def _pending(self) -> PendingVerification | None:
        raw = self.store.get(PENDING_AUTH_KEY)
        if raw is None:
            return None
        try:
            return PendingVerification.model_validate_json(raw)
        except SchemaValidationError as e:
            logger.warning("[AuthService] Ignoring corrupted pending verification", error=str(e))
            return None

    def _start_verification(self, user: User) -> OTPChallenge:
        pending = PendingVerification(user_id=user.id, mobile=user.mobile)
        self.store.set(PENDING_AUTH_KEY, pending.model_dump_json())
        return self.otp_verifier.send(user.mobile)

    def register(
        self,
        full_name: str,
        email: str,
        mobile: str,
        password: str,
        confirm_password: str,
    ) -> OTPChallenge:
        """
        Register a user and send an OTP to their mobile.

        Raises:
            ValidationError: If the passwords do not match
            DuplicateUserError: If the email or mobile is already registered
        """
        if password != confirm_password:
            raise ValidationError("Passwords do not match")

        user = self.credentials.register(full_name, email, mobile, password)
        return self._start_verification(user)

    def login(self, identifier: str, password: str) -> OTPChallenge:
        """
        Check a password and send an OTP to the user's mobile.

        Raises:
            InvalidCredentialsError: If the credentials are wrong
        """
        user = self.credentials.login(identifier, password)
        return self._start_verification(user)

    def resend_otp(self) -> OTPChallenge:
        pending = self._pending()
        if pending is None:
            raise OTPVerificationError("No verification in progress")
        return self.otp_verifier.send(pending.mobile)

    def verify_otp(self, code: str) -> User:
        """
        Complete a pending verification.

        Args:
            code: Six-digit code

        Returns:
            User: The signed-in user

        Raises:
            ValidationError: If the code is not exactly six digits
            OTPVerificationError: If nothing is pending or the code is wrong or expired
        """
        if not OTP_FORMAT.match(code):
            raise ValidationError("Please enter complete 6-digit OTP")

        pending = self._pending()
        if pending is None:
            raise OTPVerificationError("No verification in progress")

        if not self.otp_verifier.verify(pending.mobile, code):
            raise OTPVerificationError()

        user = self.credentials.get_user(pending.user_id)
        if user is None:
            self.store.delete(PENDING_AUTH_KEY)
            raise OTPVerificationError("User no longer exists")

        self.credentials.save_current_user(user)
        self.store.delete(PENDING_AUTH_KEY)
        logger.info(f"[AuthService] User signed in: id={user.id}")
        return user

    def current_user(self) -> User | None:
        return self.credentials.get_current_user()

    def logout(self) -> None:
        self.credentials.logout()
        self.store.delete(PENDING_AUTH_KEY)
