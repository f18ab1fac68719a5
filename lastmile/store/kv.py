"""Key-value persistence for device-local state.

Values are strings (JSON-serialized by the stores built on top). Keys are
namespaced with a configurable prefix.
"""

from typing import Protocol

import redis

from lastmile.config import Settings


class KeyValueStore(Protocol):
    """Protocol for string key-value stores."""

    def get(self, key: str) -> str | None:
        """Return the value for key, or None if absent."""
        ...

    def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""
        ...

    def remove(self, key: str) -> None:
        """Delete key; no-op if absent."""
        ...

    def ping(self) -> bool:
        """Return True if the backing store is reachable."""
        ...


class InMemoryKeyValueStore:
    """In-memory implementation of KeyValueStore."""

    def __init__(self, prefix: str = "lastmile_") -> None:
        self._prefix = prefix
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(self._prefix + key)

    def set(self, key: str, value: str) -> None:
        self._data[self._prefix + key] = value

    def remove(self, key: str) -> None:
        self._data.pop(self._prefix + key, None)

    def ping(self) -> bool:
        return True


class RedisKeyValueStore:
    """Redis-backed implementation of KeyValueStore."""

    def __init__(self, redis_client: redis.Redis, prefix: str = "lastmile_") -> None:
        """Initialize store.

        Args:
            redis_client: Redis client created with decode_responses=True
            prefix: Key namespace
        """
        self._redis = redis_client
        self._prefix = prefix

    def get(self, key: str) -> str | None:
        value = self._redis.get(self._prefix + key)
        return value if value is None or isinstance(value, str) else value.decode("utf-8")

    def set(self, key: str, value: str) -> None:
        self._redis.set(self._prefix + key, value)

    def remove(self, key: str) -> None:
        self._redis.delete(self._prefix + key)

    def ping(self) -> bool:
        return bool(self._redis.ping())


def build_key_value_store(settings: Settings) -> KeyValueStore:
    """Create the store selected by settings (Redis when a URL is configured)."""
    if settings.redis_url:
        client = redis.from_url(settings.redis_url, decode_responses=True)  # type: ignore[no-untyped-call]
        return RedisKeyValueStore(client, prefix=settings.store_key_prefix)
    return InMemoryKeyValueStore(prefix=settings.store_key_prefix)
