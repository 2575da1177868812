"""Tests for session stores and the HTTP session view."""

import pytest

from config.settings import SessionStoreSettings
from database.session_store import (
    HttpSession,
    InMemorySessionStore,
    RedisSessionStore,
    get_session_store,
    reset_session_store,
)


class TestInMemorySessionStore:
    """Tests for the process-local store."""

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, memory_store):
        assert await memory_store.get("missing") is None

    @pytest.mark.asyncio
    async def test_set_and_get(self, memory_store):
        await memory_store.set("key", b"value")
        assert await memory_store.get("key") == b"value"

    @pytest.mark.asyncio
    async def test_set_replaces(self, memory_store):
        await memory_store.set("key", b"first")
        await memory_store.set("key", b"second")
        assert await memory_store.get("key") == b"second"

    @pytest.mark.asyncio
    async def test_delete_missing_is_noop(self, memory_store):
        await memory_store.delete("missing")
        assert len(memory_store) == 0


class TestHttpSession:
    """Tests for the per-session key namespace."""

    @pytest.mark.asyncio
    async def test_keys_are_scoped_to_session(self, memory_store):
        first = HttpSession(memory_store, "aaa", key_prefix="wizard:")
        second = HttpSession(memory_store, "bbb", key_prefix="wizard:")

        await first.set("apply-flow-1", b"one")

        assert "wizard:aaa:apply-flow-1" in memory_store
        assert await first.get("apply-flow-1") == b"one"
        assert await second.get("apply-flow-1") is None

    @pytest.mark.asyncio
    async def test_has_and_delete(self, http_session):
        await http_session.set("entry", b"x")
        assert await http_session.has("entry") is True

        await http_session.delete("entry")
        assert await http_session.has("entry") is False


class TestRedisSessionStore:
    """Tests for the Redis store against a mocked client."""

    @pytest.mark.asyncio
    async def test_set_applies_ttl(self, mock_redis_client):
        store = RedisSessionStore(mock_redis_client, ttl_seconds=600)

        await store.set("key", b"payload")

        mock_redis_client.set.assert_awaited_once_with("key", b"payload", ex=600)

    @pytest.mark.asyncio
    async def test_get_passes_through(self, mock_redis_client):
        mock_redis_client.get.return_value = b"payload"
        store = RedisSessionStore(mock_redis_client)

        assert await store.get("key") == b"payload"

    @pytest.mark.asyncio
    async def test_delete(self, mock_redis_client):
        store = RedisSessionStore(mock_redis_client)
        await store.delete("key")
        mock_redis_client.delete.assert_awaited_once_with("key")

    @pytest.mark.asyncio
    async def test_errors_propagate(self, mock_redis_client):
        mock_redis_client.get.side_effect = ConnectionError("redis down")
        store = RedisSessionStore(mock_redis_client)

        with pytest.raises(ConnectionError):
            await store.get("key")

    @pytest.mark.asyncio
    async def test_close(self, mock_redis_client):
        store = RedisSessionStore(mock_redis_client)
        await store.close()
        mock_redis_client.aclose.assert_awaited_once()


class TestGetSessionStore:
    """Tests for the process-wide store factory."""

    def test_memory_backend_singleton(self):
        reset_session_store()
        store = get_session_store(SessionStoreSettings(backend="memory"))

        assert isinstance(store, InMemorySessionStore)
        assert get_session_store() is store

    def test_redis_backend(self):
        reset_session_store()
        store = get_session_store(SessionStoreSettings(backend="redis", redis_url="redis://localhost:6379/1"))

        assert isinstance(store, RedisSessionStore)
