from unittest.mock import AsyncMock

import pytest

from src.adapter.services.revocation_store import (
    InMemoryRevocationStore,
    RedisRevocationStore,
)


class Ticker:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


@pytest.mark.asyncio
async def test_in_memory_entry_expires_with_token():
    ticker = Ticker()
    store = InMemoryRevocationStore(clock=ticker)

    await store.add("jti-1", 60, "logout")
    assert await store.contains("jti-1") is True

    ticker.now += 61
    assert await store.contains("jti-1") is False


@pytest.mark.asyncio
async def test_in_memory_re_revoke_never_shortens():
    ticker = Ticker()
    store = InMemoryRevocationStore(clock=ticker)

    await store.add("jti-1", 600, "logout")
    await store.add("jti-1", 5, "logout")

    ticker.now += 60
    assert await store.contains("jti-1") is True


@pytest.mark.asyncio
async def test_redis_store_sets_key_with_ttl():
    redis_client = AsyncMock()
    redis_client.exists.return_value = 1
    store = RedisRevocationStore(redis_client)

    await store.add("jti-1", 900, "logout")
    revoked = await store.contains("jti-1")

    redis_client.set.assert_awaited_once_with("revoked_token:jti-1", "logout", ex=900)
    redis_client.exists.assert_awaited_once_with("revoked_token:jti-1")
    assert revoked is True


@pytest.mark.asyncio
async def test_redis_store_unknown_jti():
    redis_client = AsyncMock()
    redis_client.exists.return_value = 0

    assert await RedisRevocationStore(redis_client).contains("jti-2") is False
