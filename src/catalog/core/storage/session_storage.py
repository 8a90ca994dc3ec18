"""Session storage interface and implementations.

Provides a unified interface for storing browser session state (session
records, flash messages, form errors) with Redis when configured and an
in-memory fallback.
"""

from __future__ import annotations

import json
import time
from abc import ABC, abstractmethod
from typing import Any, TypeVar

from loguru import logger
from pydantic import BaseModel, ValidationError

T = TypeVar("T", bound=BaseModel)


class SessionStorage(ABC):
    """Abstract interface for session storage backends."""

    @abstractmethod
    async def set(self, key: str, value: BaseModel, ttl_seconds: int) -> None:
        """Store a value with TTL.

        Args:
            key: Storage key
            value: Data to store (Pydantic model)
            ttl_seconds: Time to live in seconds
        """

    @abstractmethod
    async def get(self, key: str, model_class: type[T]) -> T | None:
        """Retrieve a value.

        Args:
            key: Storage key
            model_class: Pydantic model class to deserialize to

        Returns:
            Stored data or None if not found/expired
        """

    @abstractmethod
    async def pop(self, key: str, model_class: type[T]) -> T | None:
        """Retrieve a value and remove it in one step.

        Two concurrent calls for the same key never both receive the value.
        """

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Delete a value."""

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check if a non-expired value exists for ``key``."""

    @abstractmethod
    async def cleanup_expired(self) -> int:
        """Clean up expired values.

        Returns:
            Number of entries cleaned up
        """

    @abstractmethod
    def is_available(self) -> bool:
        """Check if storage backend is available."""


class InMemorySessionStorage(SessionStorage):
    """In-memory session storage with TTL support."""

    def __init__(self):
        self._data: dict[str, dict[str, Any]] = {}

    def _live_entry(self, key: str) -> dict[str, Any] | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        if time.time() > entry["expires_at"]:
            del self._data[key]
            return None
        return entry

    def _decode(self, key: str, entry: dict[str, Any], model_class: type[T]) -> T | None:
        try:
            return model_class.model_validate(entry["data"])
        except ValidationError:
            logger.warning("Dropping corrupted session entry {}", key)
            self._data.pop(key, None)
            return None

    async def set(self, key: str, value: BaseModel, ttl_seconds: int) -> None:
        """Store value in memory with expiration."""
        expires_at = time.time() + ttl_seconds
        self._data[key] = {
            "data": json.loads(value.model_dump_json()),
            "expires_at": expires_at,
        }

    async def get(self, key: str, model_class: type[T]) -> T | None:
        """Retrieve value from memory if not expired."""
        entry = self._live_entry(key)
        if entry is None:
            return None
        return self._decode(key, entry, model_class)

    async def pop(self, key: str, model_class: type[T]) -> T | None:
        """Retrieve and remove a value; no await happens between the two."""
        entry = self._live_entry(key)
        if entry is None:
            return None
        del self._data[key]
        return self._decode(key, entry, model_class)

    async def delete(self, key: str) -> None:
        """Delete value from memory."""
        self._data.pop(key, None)

    async def exists(self, key: str) -> bool:
        """Check if value exists and is not expired."""
        return self._live_entry(key) is not None

    async def cleanup_expired(self) -> int:
        """Remove expired values from memory."""
        now = time.time()
        expired_keys = [
            key for key, entry in self._data.items() if now > entry["expires_at"]
        ]

        for key in expired_keys:
            del self._data[key]

        return len(expired_keys)

    def is_available(self) -> bool:
        """In-memory storage is always available."""
        return True


class RedisSessionStorage(SessionStorage):
    """Redis-based session storage with serialization."""

    def __init__(self, redis_client):
        self._redis = redis_client
        self._available = True

    @staticmethod
    def _decode(data: Any, model_class: type[T]) -> T | None:
        if data is None:
            return None
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        return model_class.model_validate_json(data)

    async def set(self, key: str, value: BaseModel, ttl_seconds: int) -> None:
        """Store value in Redis with TTL."""
        try:
            data = value.model_dump_json()
            await self._redis.setex(key, ttl_seconds, data)
            self._available = True
        except Exception as e:
            self._available = False
            raise RuntimeError(f"Redis set failed: {e}") from e

    async def get(self, key: str, model_class: type[T]) -> T | None:
        """Retrieve value from Redis."""
        try:
            data = await self._redis.get(key)
            self._available = True
        except Exception as e:
            self._available = False
            raise RuntimeError(f"Redis get failed: {e}") from e
        return self._decode(data, model_class)

    async def pop(self, key: str, model_class: type[T]) -> T | None:
        """Retrieve and remove a value atomically with GETDEL."""
        try:
            data = await self._redis.getdel(key)
            self._available = True
        except Exception as e:
            self._available = False
            raise RuntimeError(f"Redis getdel failed: {e}") from e
        return self._decode(data, model_class)

    async def delete(self, key: str) -> None:
        """Delete value from Redis."""
        try:
            await self._redis.delete(key)
            self._available = True
        except Exception as e:
            self._available = False
            raise RuntimeError(f"Redis delete failed: {e}") from e

    async def exists(self, key: str) -> bool:
        """Check if value exists in Redis."""
        try:
            result = await self._redis.exists(key)
            self._available = True
            return bool(result)
        except Exception as e:
            self._available = False
            raise RuntimeError(f"Redis exists failed: {e}") from e

    async def cleanup_expired(self) -> int:
        """Redis handles expiration automatically."""
        return 0

    def is_available(self) -> bool:
        """Check if Redis connection is healthy."""
        return self._available

    async def ping(self) -> bool:
        """Test Redis connection health."""
        try:
            await self._redis.ping()
            self._available = True
            return True
        except Exception:
            self._available = False
            return False

    async def close(self) -> None:
        await self._redis.aclose()


# Global storage instance
_storage: SessionStorage | None = None


async def _detect_redis_availability() -> SessionStorage:
    """Attempt to create Redis storage, fall back to in-memory."""
    from src.catalog.runtime.context import get_config

    config = get_config()
    if not config.redis.enabled or not config.redis.url:
        logger.info("Session storage: in-memory (Redis not configured)")
        return InMemorySessionStorage()

    import redis.asyncio as redis

    redis_client = redis.from_url(
        config.redis.connection_string,
        encoding="utf-8",
        decode_responses=config.redis.decode_responses,
        socket_connect_timeout=2,
        socket_timeout=2,
    )

    redis_storage = RedisSessionStorage(redis_client)
    if await redis_storage.ping():
        logger.info("Session storage: Redis connected")
        return redis_storage

    if config.app.environment == "production":
        raise RuntimeError("Redis session storage configured but unreachable")
    logger.warning("Redis unavailable, using in-memory session storage")
    return InMemorySessionStorage()


async def get_session_storage() -> SessionStorage:
    """Get the configured session storage instance."""
    global _storage

    if _storage is None:
        _storage = await _detect_redis_availability()

    return _storage


def _reset_storage() -> None:
    """Reset storage instance (for testing)."""
    global _storage
    _storage = None
