"""
Credential store for registered users and the current-session pointer.

Users are stored as one list under ``cemtras_users`` and are found by either
email or mobile number. Passwords are stored in plaintext; see
``CredentialRecord``.
"""

import secrets

from pydantic import TypeAdapter
from pydantic import ValidationError as SchemaValidationError

from cemtras.auth.schemas import CredentialRecord, User
from cemtras.db.kv_store import KeyValueStore
from cemtras.exceptions import DuplicateUserError, InvalidCredentialsError
from cemtras.utils.logger import logger

USERS_KEY = "cemtras_users"
CURRENT_USER_KEY = "cemtras_current_user"

_records_adapter = TypeAdapter(list[CredentialRecord])


def normalize_email(email: str) -> str:
    """Emails match case-insensitively and are stored lowercased."""
    return email.strip().casefold()


class CredentialStore:
    """Registers users, checks passwords and tracks the signed-in user."""

    def __init__(self, store: KeyValueStore):
        """
        Initialize the credential store.

        Args:
            store: Client-scoped key-value store
        """
        self.store = store

    def _records(self) -> list[CredentialRecord]:
        raw = self.store.get(USERS_KEY)
        if raw is None:
            return []
        try:
            return _records_adapter.validate_json(raw)
        except SchemaValidationError as e:
            logger.warning("[CredentialStore] Ignoring corrupted user list", error=str(e))
            return []

    def _find(self, identifier: str) -> CredentialRecord | None:
        identifier = identifier.strip()
        email = normalize_email(identifier)
        for record in self._records():
            if normalize_email(record.email) == email or record.mobile == identifier:
                return record
        return None

    def register(self, full_name: str, email: str, mobile: str, password: str) -> User:
        """
        Register a new user.

        Args:
            full_name: User's full name
            email: Email address, unique across users regardless of case
            mobile: Mobile number, unique across users
            password: Password (stored in plaintext)

        Returns:
            User: The registered user

        Raises:
            DuplicateUserError: If the email or mobile is already registered
        """
        email = normalize_email(email)
        records = self._records()
        for record in records:
            if normalize_email(record.email) == email:
                raise DuplicateUserError("email", email)
            if record.mobile == mobile:
                raise DuplicateUserError("mobile", mobile)

        record = CredentialRecord(
            full_name=full_name, email=email, mobile=mobile, password=password
        )
        records.append(record)
        self.store.set(USERS_KEY, _records_adapter.dump_json(records).decode())

        logger.info(f"[CredentialStore] Registered user: id={record.id}")
        logger.warning("[CredentialStore] Password stored in plaintext", user_id=record.id)
        return record.to_user()

    def login(self, identifier: str, password: str) -> User:
        """
        Check credentials for an email or mobile number.

        Args:
            identifier: Email address (any case) or mobile number
            password: Password to check

        Returns:
            User: The matching user

        Raises:
            InvalidCredentialsError: If no user matches or the password is wrong
        """
        record = self._find(identifier)
        if record is None or not secrets.compare_digest(
            record.password.encode(), password.encode()
        ):
            logger.info("[CredentialStore] Login rejected")
            raise InvalidCredentialsError()
        return record.to_user()

    def get_user(self, user_id: str) -> User | None:
        for record in self._records():
            if record.id == user_id:
                return record.to_user()
        return None

    def save_current_user(self, user: User) -> None:
        self.store.set(CURRENT_USER_KEY, user.model_dump_json())

    def get_current_user(self) -> User | None:
        raw = self.store.get(CURRENT_USER_KEY)
        if raw is None:
            return None
        try:
            return User.model_validate_json(raw)
        except SchemaValidationError as e:
            logger.warning("[CredentialStore] Ignoring corrupted session", error=str(e))
            return None

    def logout(self) -> None:
        """Clear the current-session pointer; registered users are kept."""
        self.store.delete(CURRENT_USER_KEY)
