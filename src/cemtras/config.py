from enum import Enum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environments."""

    DEVELOPMENT = "dev"
    STAGING = "staging"
    PRODUCTION = "prod"


class StorageBackend(str, Enum):
    """Key-value store implementations the service can bind to."""

    MEMORY = "memory"
    DYNAMODB = "dynamodb"


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(case_sensitive=False, extra="ignore")

    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Current environment (dev, staging, or prod)",
    )
    client_base_url: str = Field(
        default="http://localhost:5173", description="Frontend base URL"
    )

    # Storage
    storage_backend: StorageBackend = Field(
        default=StorageBackend.MEMORY,
        description="Key-value store backing client storage (memory or dynamodb)",
    )
    aws_region: str = Field(
        default="ap-south-1",
        description="AWS region for DynamoDB",
    )
    dynamodb_table_name: str = Field(
        default="cemtras-client-storage-dev",
        description="DynamoDB table holding client key-value storage",
    )

    # Client scoping
    client_cookie_name: str = Field(
        default="cemtras_client",
        description="Cookie identifying the client whose storage scope is used",
    )

    # Auth and history limits
    otp_ttl_seconds: int = Field(
        default=60, description="Lifetime of a one-time password in seconds"
    )
    max_histories: int = Field(
        default=10, description="Maximum saved chat histories per user"
    )

    # In-memory chat sessions
    max_chat_sessions: int = Field(
        default=1000, description="Maximum chat sessions held in memory"
    )
    chat_session_ttl_seconds: int = Field(
        default=3600, description="Idle time after which a chat session is dropped"
    )


_app_settings: AppSettings | None = None


def get_app_settings() -> AppSettings:
    global _app_settings
    if _app_settings is None:
        _app_settings = AppSettings()
    return _app_settings


def set_app_settings(settings: AppSettings) -> None:
    global _app_settings
    _app_settings = settings


def get_client_base_url() -> str:
    """Get the client base URL from settings."""
    settings = get_app_settings()
    return settings.client_base_url
