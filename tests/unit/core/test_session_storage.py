"""Tests for the session storage backends."""

import time

import pytest

from src.catalog.core.models.session import FlashMessage, FormState
from src.catalog.core.services import FlashService
from src.catalog.core.storage.session_storage import (
    InMemorySessionStorage,
    RedisSessionStorage,
    _reset_storage,
    get_session_storage,
)


class TestInMemorySessionStorage:
    @pytest.mark.asyncio
    async def test_set_and_get(self, session_storage: InMemorySessionStorage):
        await session_storage.set("k", FlashMessage(message="hi"), 60)

        stored = await session_storage.get("k", FlashMessage)
        assert stored.message == "hi"
        assert await session_storage.exists("k")

    @pytest.mark.asyncio
    async def test_pop_removes_value(self, session_storage: InMemorySessionStorage):
        await session_storage.set("k", FlashMessage(message="hi"), 60)

        assert (await session_storage.pop("k", FlashMessage)).message == "hi"
        assert await session_storage.pop("k", FlashMessage) is None
        assert not await session_storage.exists("k")

    @pytest.mark.asyncio
    async def test_expired_values_are_invisible(
        self, session_storage: InMemorySessionStorage, monkeypatch
    ):
        await session_storage.set("k", FlashMessage(message="hi"), 10)

        later = time.time() + 11
        monkeypatch.setattr(time, "time", lambda: later)

        assert await session_storage.get("k", FlashMessage) is None
        assert await session_storage.pop("k", FlashMessage) is None

    @pytest.mark.asyncio
    async def test_cleanup_expired(
        self, session_storage: InMemorySessionStorage, monkeypatch
    ):
        await session_storage.set("short", FlashMessage(message="a"), 10)
        await session_storage.set("long", FlashMessage(message="b"), 1000)

        later = time.time() + 11
        monkeypatch.setattr(time, "time", lambda: later)

        assert await session_storage.cleanup_expired() == 1
        assert await session_storage.exists("long")

    @pytest.mark.asyncio
    async def test_mismatched_model_is_dropped(
        self, session_storage: InMemorySessionStorage
    ):
        await session_storage.set("k", FormState(errors={"name": "required"}), 60)

        assert await session_storage.get("k", FlashMessage) is None
        assert not await session_storage.exists("k")

    @pytest.mark.asyncio
    async def test_delete(self, session_storage: InMemorySessionStorage):
        await session_storage.set("k", FlashMessage(message="hi"), 60)
        await session_storage.delete("k")
        await session_storage.delete("missing")

        assert not await session_storage.exists("k")

    def test_always_available(self, session_storage: InMemorySessionStorage):
        assert session_storage.is_available()


class TestStorageSelection:
    @pytest.mark.asyncio
    async def test_defaults_to_in_memory_without_redis(self):
        _reset_storage()
        try:
            storage = await get_session_storage()
            assert isinstance(storage, InMemorySessionStorage)
            assert await get_session_storage() is storage
        finally:
            _reset_storage()


class FakeRedis:
    """Async stand-in for the redis client, holding values and TTLs in dicts."""

    def __init__(self, *, fail: bool = False, as_bytes: bool = False) -> None:
        self.values: dict[str, str] = {}
        self.ttls: dict[str, int] = {}
        self.fail = fail
        self.as_bytes = as_bytes
        self.closed = False

    def _check(self) -> None:
        if self.fail:
            raise ConnectionError("connection refused")

    def _out(self, value: str | None):
        if value is not None and self.as_bytes:
            return value.encode("utf-8")
        return value

    async def setex(self, key: str, ttl: int, value: str) -> None:
        self._check()
        self.values[key] = value
        self.ttls[key] = ttl

    async def get(self, key: str):
        self._check()
        return self._out(self.values.get(key))

    async def getdel(self, key: str):
        self._check()
        self.ttls.pop(key, None)
        return self._out(self.values.pop(key, None))

    async def delete(self, key: str) -> None:
        self._check()
        self.values.pop(key, None)

    async def exists(self, key: str) -> int:
        self._check()
        return int(key in self.values)

    async def ping(self) -> bool:
        self._check()
        return True

    async def aclose(self) -> None:
        self.closed = True


class TestRedisSessionStorage:
    @pytest.mark.asyncio
    async def test_set_uses_setex_with_ttl(self):
        client = FakeRedis()
        storage = RedisSessionStorage(client)

        await storage.set("flash:s1", FlashMessage(message="hi"), 120)

        assert client.ttls == {"flash:s1": 120}
        assert (await storage.get("flash:s1", FlashMessage)).message == "hi"

    @pytest.mark.asyncio
    async def test_pop_returns_value_once(self):
        storage = RedisSessionStorage(FakeRedis())
        await storage.set("flash:s1", FlashMessage(message="hi"), 120)

        assert (await storage.pop("flash:s1", FlashMessage)).message == "hi"
        assert await storage.pop("flash:s1", FlashMessage) is None
        assert not await storage.exists("flash:s1")

    @pytest.mark.asyncio
    async def test_decodes_bytes_responses(self):
        storage = RedisSessionStorage(FakeRedis(as_bytes=True))
        await storage.set("form:s1", FormState(errors={"price": "numeric"}), 120)

        state = await storage.pop("form:s1", FormState)

        assert state.errors == {"price": "numeric"}

    @pytest.mark.asyncio
    async def test_flash_service_over_redis(self):
        flash = FlashService(RedisSessionStorage(FakeRedis()))
        await flash.set_flash("s1", "Product created successfully")

        assert await flash.take_flash("s1") == "Product created successfully"
        assert await flash.take_flash("s1") is None

    @pytest.mark.asyncio
    async def test_client_failure_raises_and_marks_unavailable(self):
        client = FakeRedis()
        storage = RedisSessionStorage(client)
        assert storage.is_available()

        client.fail = True
        with pytest.raises(RuntimeError, match="getdel"):
            await storage.pop("flash:s1", FlashMessage)
        assert not storage.is_available()

        with pytest.raises(RuntimeError):
            await storage.set("flash:s1", FlashMessage(message="hi"), 60)
        assert not await storage.ping()

        client.fail = False
        assert await storage.ping()
        assert storage.is_available()

    @pytest.mark.asyncio
    async def test_cleanup_is_left_to_redis_and_close(self):
        client = FakeRedis()
        storage = RedisSessionStorage(client)

        assert await storage.cleanup_expired() == 0
        await storage.close()
        assert client.closed
