"""Application error taxonomy.

Transport failures from the language model live in ``cemtras.ai.exceptions``;
everything raised by configuration, authentication, input validation and
storage lookups is defined here.
"""


class CemtrasError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(CemtrasError):
    """Raised when required configuration (such as the model API key) is missing.

    Fatal: surfaced persistently and never dismissable by the user.
    """

    pass


class AuthError(CemtrasError):
    """Base class for recoverable authentication failures."""

    pass


class InvalidCredentialsError(AuthError):
    """Raised when no user matches the identifier or the password is wrong."""

    def __init__(self, message: str = "Invalid credentials") -> None:
        super().__init__(message)


class DuplicateUserError(AuthError):
    """Raised when registering an email or mobile number that already exists."""

    def __init__(self, field: str, value: str) -> None:
        super().__init__(f"A user with this {field} is already registered")
        self.field = field
        self.value = value


class OTPVerificationError(AuthError):
    """Raised when a one-time password is wrong, expired or was never sent."""

    def __init__(self, message: str = "Invalid or expired OTP") -> None:
        super().__init__(message)


class RoleNotPermittedError(AuthError):
    """Raised when a guest selects a role reserved for authenticated users."""

    def __init__(self, role: str) -> None:
        super().__init__(f"Login required to use the {role} role")
        self.role = role


class ValidationError(CemtrasError):
    """Raised for input rejected before submission (password mismatch, bad OTP format)."""

    pass


class NotFoundError(CemtrasError):
    """Raised when a chat history does not exist for the user."""

    def __init__(self, resource: str, resource_id: str) -> None:
        super().__init__(f"{resource} not found: {resource_id}")
        self.resource = resource
        self.resource_id = resource_id
