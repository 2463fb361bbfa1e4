"""
Key-value storage for client-scoped application state.

Values are strings, as in browser local storage; callers serialize structured
data with pydantic and treat a value that fails validation as absent.
"""

from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Any

import boto3
from botocore.exceptions import ClientError

from cemtras.config import StorageBackend, get_app_settings
from cemtras.utils.logger import logger


class KeyValueStore(ABC):
    """String key to string value storage."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        pass

    def scoped(self, scope: str) -> "ScopedKeyValueStore":
        """Return a view of this store whose keys are namespaced by ``scope``."""
        return ScopedKeyValueStore(self, scope)


class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store, used for development and tests."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class ScopedKeyValueStore(KeyValueStore):
    """Namespaces every key of an underlying store, one scope per client."""

    def __init__(self, store: KeyValueStore, scope: str) -> None:
        self.store = store
        self.scope = scope

    def _key(self, key: str) -> str:
        return f"{self.scope}:{key}"

    def get(self, key: str) -> str | None:
        return self.store.get(self._key(key))

    def set(self, key: str, value: str) -> None:
        self.store.set(self._key(key), value)

    def delete(self, key: str) -> None:
        self.store.delete(self._key(key))


class DynamoDBKeyValueStore(KeyValueStore):
    """Store backed by a DynamoDB table with one item per key."""

    SORT_KEY = "VALUE"

    def __init__(self, table: Any) -> None:
        """
        Initialize the store with a DynamoDB table.

        Args:
            table: boto3 DynamoDB Table resource with a PK/SK key schema
        """
        self.table = table

    def _item_key(self, key: str) -> dict[str, str]:
        return {"PK": key, "SK": self.SORT_KEY}

    def get(self, key: str) -> str | None:
        try:
            response = self.table.get_item(Key=self._item_key(key))
        except ClientError as e:
            error_msg = f"Failed to read key: {e.response['Error']['Message']}"
            logger.error(f"[DynamoDBKeyValueStore] {error_msg}", key=key)
            raise Exception(error_msg) from e

        item = response.get("Item")
        if item is None:
            return None
        return item.get("value")

    def set(self, key: str, value: str) -> None:
        try:
            self.table.put_item(Item={**self._item_key(key), "value": value})
        except ClientError as e:
            error_msg = f"Failed to write key: {e.response['Error']['Message']}"
            logger.error(f"[DynamoDBKeyValueStore] {error_msg}", key=key)
            raise Exception(error_msg) from e

    def delete(self, key: str) -> None:
        try:
            self.table.delete_item(Key=self._item_key(key))
        except ClientError as e:
            error_msg = f"Failed to delete key: {e.response['Error']['Message']}"
            logger.error(f"[DynamoDBKeyValueStore] {error_msg}", key=key)
            raise Exception(error_msg) from e


@lru_cache(maxsize=1)
def get_key_value_store() -> KeyValueStore:
    """
    Get the process-wide key-value store for the configured backend.

    Returns:
        KeyValueStore: In-memory or DynamoDB-backed store
    """
    settings = get_app_settings()

    if settings.storage_backend == StorageBackend.DYNAMODB:
        logger.info(
            f"[DynamoDBKeyValueStore] Initializing table {settings.dynamodb_table_name} in region: {settings.aws_region}"
        )
        dynamodb = boto3.resource("dynamodb", region_name=settings.aws_region)
        return DynamoDBKeyValueStore(dynamodb.Table(settings.dynamodb_table_name))

    logger.info("Using in-memory key-value store")
    return InMemoryKeyValueStore()
