"""
One-time password issue and verification.

There is no SMS delivery: the code is returned to the caller and logged so a
demo user can read it. Anyone with access to the response or the logs can
therefore complete verification.
"""

import secrets
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from pydantic import ValidationError as SchemaValidationError

from cemtras.auth.schemas import OTPChallenge
from cemtras.db.kv_store import KeyValueStore
from cemtras.utils.logger import logger

OTP_TTL_SECONDS = 60


def otp_key(mobile: str) -> str:
    return f"cemtras_otp_{mobile}"


def generate_code() -> str:
    """Return a uniformly random six-digit code (100000-999999)."""
    return str(100000 + secrets.randbelow(900000))


class OTPVerifier:
    """Issues single-use codes per mobile number and checks them."""

    def __init__(
        self,
        store: KeyValueStore,
        ttl_seconds: int = OTP_TTL_SECONDS,
        clock: Callable[[], datetime] | None = None,
    ):
        self.store = store
        self.ttl = timedelta(seconds=ttl_seconds)
        self.clock = clock or (lambda: datetime.now(UTC))

    def _pending(self, mobile: str) -> OTPChallenge | None:
        raw = self.store.get(otp_key(mobile))
        if raw is None:
            return None
        try:
            return OTPChallenge.model_validate_json(raw)
        except SchemaValidationError as e:
            logger.warning("[OTPVerifier] Ignoring corrupted OTP entry", mobile=mobile, error=str(e))
            return None

    def send(self, mobile: str) -> OTPChallenge:
        """
        Issue a new code for a mobile number, replacing any pending one.

        Args:
            mobile: Mobile number to send the code to

        Returns:
            OTPChallenge: The code and its expiry
        """
        challenge = OTPChallenge(
            mobile=mobile,
            code=generate_code(),
            expires_at=self.clock() + self.ttl,
        )
        self.store.set(otp_key(mobile), challenge.model_dump_json())

        logger.info(f"OTP sent to {mobile}: {challenge.code}", mobile=mobile)
        return challenge

    def verify(self, mobile: str, code: str) -> bool:
        """
        Check a code against the pending entry for a mobile number.

        Fails closed: no entry, an expired entry (which is deleted) or a wrong
        code all return False. A correct code consumes the entry.
        """
        challenge = self._pending(mobile)
        if challenge is None:
            return False

        if self.clock() > challenge.expires_at:
            self.store.delete(otp_key(mobile))
            logger.info("[OTPVerifier] OTP expired", mobile=mobile)
            return False

        if secrets.compare_digest(challenge.code.encode(), code.encode()):
            self.store.delete(otp_key(mobile))
            return True

        return False
