"""
Session storage for wizard state.

The store is a plain key/value boundary scoped to one HTTP session:
get(key) -> bytes or None, set(key, bytes), delete(key). Payload size is
not limited here. Two backends are provided:

- InMemorySessionStore: process-local dict, for development and tests
- RedisSessionStore: redis.asyncio, TTL refreshed on every write

Key naming conventions (redis):
- {key_prefix}{http_session_id}:{name} - one wizard flow entry
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

from config.settings import SessionStoreSettings

logger = logging.getLogger(__name__)


class SessionStore(ABC):
    """Key/value store backing HTTP sessions."""

    @abstractmethod
    async def get(self, key: str) -> Optional[bytes]:
        """Return the payload stored under key, or None."""

    @abstractmethod
    async def set(self, key: str, value: bytes) -> None:
        """Store payload under key, replacing any previous value."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Delete key; deleting a missing key is not an error."""


class InMemorySessionStore(SessionStore):
    """
    Process-local session store.

    Usage:
        store = InMemorySessionStore()
        await store.set("abc:apply-flow-<uuid>", b"{...}")
    """

    def __init__(self) -> None:
        self._data: Dict[str, bytes] = {}

    async def get(self, key: str) -> Optional[bytes]:
        return self._data.get(key)

    async def set(self, key: str, value: bytes) -> None:
        self._data[key] = value

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)


class RedisSessionStore(SessionStore):
    """
    Redis-based session store.

    Uses Redis for session storage with automatic expiration of whole HTTP
    sessions. Wizard inactivity expiry is evaluated separately, at load time.

    Usage:
        store = RedisSessionStore.from_settings(settings)
        await store.set(key, payload)
    """

    def __init__(self, redis_client, ttl_seconds: int = 3600):
        """
        Initialize Redis session store.

        Args:
            redis_client: redis.asyncio.Redis instance
            ttl_seconds: TTL applied on every write
        """
        self._redis = redis_client
        self._ttl = ttl_seconds

    @classmethod
    def from_settings(cls, settings: SessionStoreSettings) -> "RedisSessionStore":
        import redis.asyncio as redis

        client = redis.Redis.from_url(settings.redis_url)
        return cls(client, ttl_seconds=settings.ttl_seconds)

    async def get(self, key: str) -> Optional[bytes]:
        try:
            return await self._redis.get(key)
        except Exception as e:
            logger.error(f"Failed to read session key {key}: {e}")
            raise

    async def set(self, key: str, value: bytes) -> None:
        try:
            await self._redis.set(key, value, ex=self._ttl)
        except Exception as e:
            logger.error(f"Failed to write session key {key}: {e}")
            raise

    async def delete(self, key: str) -> None:
        try:
            await self._redis.delete(key)
        except Exception as e:
            logger.error(f"Failed to delete session key {key}: {e}")
            raise

    async def close(self) -> None:
        await self._redis.aclose()


class HttpSession:
    """
    Named entries of one HTTP session.

    Every wizard flow entry lives under a name derived from its flow id, so
    several flows can coexist in the same browser session.
    """

    def __init__(self, store: SessionStore, session_id: str, key_prefix: str = ""):
        self.store = store
        self.id = session_id
        self._key_prefix = key_prefix

    def _key(self, name: str) -> str:
        return f"{self._key_prefix}{self.id}:{name}"

    async def get(self, name: str) -> Optional[bytes]:
        return await self.store.get(self._key(name))

    async def set(self, name: str, value: bytes) -> None:
        await self.store.set(self._key(name), value)

    async def delete(self, name: str) -> None:
        await self.store.delete(self._key(name))

    async def has(self, name: str) -> bool:
        return await self.get(name) is not None


_store: Optional[SessionStore] = None


def get_session_store(settings: Optional[SessionStoreSettings] = None) -> SessionStore:
    """Get the process-wide session store for the configured backend."""
    global _store
    if _store is None:
        settings = settings or SessionStoreSettings()
        if settings.backend == "redis":
            _store = RedisSessionStore.from_settings(settings)
        else:
            _store = InMemorySessionStore()
        logger.info(f"Session store initialized: {settings.backend}")
    return _store


def reset_session_store() -> None:
    """Drop the process-wide store (tests)."""
    global _store
    _store = None
