"""Tests for session stores backing vote locks."""
import asyncio
from unittest.mock import AsyncMock

import pytest
from cachetools import TTLCache
from redis.exceptions import ConnectionError as RedisConnectionError

from rating_service.application.services.rating_store import RatingStore
from rating_service.config import settings
from rating_service.core import dependencies
from rating_service.core.exceptions import StorageError
from rating_service.domain.value_objects.rating import RatingConfig
from rating_service.infrastructure.persistence.repositories.in_memory_rating_repository import (
    InMemoryRatingRepository,
)
from rating_service.infrastructure.session.in_memory_session_store import InMemorySessionStore
from rating_service.infrastructure.session.redis_session_store import RedisSessionStore


class FakeAsyncRedis:
    """Dict-backed stand-in for redis.asyncio that yields to the loop on every call."""

    def __init__(self):
        self.data = {}

    async def get(self, key):
        await asyncio.sleep(0)
        return self.data.get(key)

    async def set(self, key, value, nx=False, ex=None):
        await asyncio.sleep(0)
        if nx and key in self.data:
            return None
        self.data[key] = value
        return True

    async def setex(self, key, ttl, value):
        await asyncio.sleep(0)
        self.data[key] = value
        return True

    async def delete(self, key):
        await asyncio.sleep(0)
        return 1 if self.data.pop(key, None) is not None else 0


class TestInMemorySessionStore:

    def test_unset_key_is_false(self):
        assert asyncio.run(InMemorySessionStore().get("vote_lock_1_2_3")) is False

    def test_set_and_get(self):
        store = InMemorySessionStore()
        asyncio.run(store.set("vote_lock_1_2_3"))

        assert asyncio.run(store.get("vote_lock_1_2_3")) is True
        assert asyncio.run(store.get("vote_lock_1_2_4")) is False

    def test_set_false_clears_flag(self):
        store = InMemorySessionStore()
        asyncio.run(store.set("vote_lock_1_2_3"))
        asyncio.run(store.set("vote_lock_1_2_3", False))

        assert asyncio.run(store.get("vote_lock_1_2_3")) is False
        assert asyncio.run(store.set_if_absent("vote_lock_1_2_3")) is True

    def test_set_if_absent_claims_once(self):
        store = InMemorySessionStore()

        assert asyncio.run(store.set_if_absent("vote_lock_1_2_3")) is True
        assert asyncio.run(store.set_if_absent("vote_lock_1_2_3")) is False
        assert asyncio.run(store.get("vote_lock_1_2_3")) is True

    def test_sessions_are_isolated(self):
        first, second = InMemorySessionStore(), InMemorySessionStore()
        asyncio.run(first.set("vote_lock_1_2_3"))

        assert asyncio.run(second.get("vote_lock_1_2_3")) is False


class TestRedisSessionStore:

    def test_get_reads_namespaced_key(self, mock_redis):
        mock_redis.get = AsyncMock(return_value="1")
        store = RedisSessionStore(mock_redis, "abc", ttl_seconds=60)

        assert asyncio.run(store.get("vote_lock_1_2_3")) is True
        mock_redis.get.assert_awaited_once_with("session:abc:vote_lock_1_2_3")

    def test_missing_key_is_false(self, mock_redis):
        store = RedisSessionStore(mock_redis, "abc", ttl_seconds=60)

        assert asyncio.run(store.get("vote_lock_1_2_3")) is False

    def test_set_uses_session_ttl(self, mock_redis):
        store = RedisSessionStore(mock_redis, "abc", ttl_seconds=60)
        asyncio.run(store.set("vote_lock_1_2_3"))

        mock_redis.setex.assert_awaited_once_with("session:abc:vote_lock_1_2_3", 60, "1")

    def test_set_false_deletes_key(self, mock_redis):
        store = RedisSessionStore(mock_redis, "abc", ttl_seconds=60)
        asyncio.run(store.set("vote_lock_1_2_3", False))

        mock_redis.delete.assert_awaited_once_with("session:abc:vote_lock_1_2_3")

    def test_set_if_absent_is_single_set_nx(self, mock_redis):
        store = RedisSessionStore(mock_redis, "abc", ttl_seconds=60)

        assert asyncio.run(store.set_if_absent("vote_lock_1_2_3")) is True
        mock_redis.set.assert_awaited_once_with("session:abc:vote_lock_1_2_3", "1", nx=True, ex=60)

    def test_set_if_absent_on_existing_key(self, mock_redis):
        mock_redis.set = AsyncMock(return_value=None)
        store = RedisSessionStore(mock_redis, "abc", ttl_seconds=60)

        assert asyncio.run(store.set_if_absent("vote_lock_1_2_3")) is False

    def test_redis_failure_is_storage_error(self, mock_redis):
        mock_redis.get = AsyncMock(side_effect=RedisConnectionError("down"))
        mock_redis.set = AsyncMock(side_effect=RedisConnectionError("down"))
        mock_redis.setex = AsyncMock(side_effect=RedisConnectionError("down"))
        store = RedisSessionStore(mock_redis, "abc", ttl_seconds=60)

        with pytest.raises(StorageError):
            asyncio.run(store.get("vote_lock_1_2_3"))
        with pytest.raises(StorageError):
            asyncio.run(store.set("vote_lock_1_2_3"))
        with pytest.raises(StorageError):
            asyncio.run(store.set_if_absent("vote_lock_1_2_3"))


class TestConcurrentLockingVotes:
    """Simultaneous locking votes from one session count once."""

    @pytest.mark.parametrize("session_store", [
        RedisSessionStore(FakeAsyncRedis(), "double-click", ttl_seconds=60),
        InMemorySessionStore(),
    ], ids=["redis", "memory"])
    def test_only_one_vote_counted(self, session_store):
        store = RatingStore(1, 7, RatingConfig(rating_max=5), InMemoryRatingRepository(), session_store)

        async def scenario():
            results = await asyncio.gather(*(store.apply_vote(3, 5, lock=True) for _ in range(5)))
            return results, (await store.get_aggregates([3]))[3]

        results, aggregate = asyncio.run(scenario())

        assert sorted(results) == [False, False, False, False, True]
        assert aggregate.vote_count == 1

    def test_lock_released_when_vote_not_stored(self):
        session_store = RedisSessionStore(FakeAsyncRedis(), "abc", ttl_seconds=60)
        repository = InMemoryRatingRepository()
        failing = AsyncMock()
        failing.upsert_vote.side_effect = StorageError("Failed to store vote")

        async def scenario():
            with pytest.raises(StorageError):
                await RatingStore(1, 7, RatingConfig(rating_max=5), failing, session_store).apply_vote(
                    3, 5, lock=True
                )
            retried = RatingStore(1, 7, RatingConfig(rating_max=5), repository, session_store)
            return await retried.apply_vote(3, 5, lock=True), await retried.is_locked(3)

        counted, locked = asyncio.run(scenario())

        assert counted is True
        assert locked is True


class FakeClock:

    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestMemorySessionRegistry:
    """Sessions held in memory when Redis is disabled."""

    @pytest.fixture
    def clock(self, monkeypatch):
        clock = FakeClock()
        monkeypatch.setattr(settings, "REDIS_SESSION_ENABLED", False)
        monkeypatch.setattr(dependencies, "_memory_sessions", TTLCache(maxsize=3, ttl=100, timer=clock))
        return clock

    def test_same_session_gets_same_store(self, clock):
        assert dependencies.get_session_store_for("a") is dependencies.get_session_store_for("a")

    def test_size_is_bounded(self, clock):
        for i in range(10):
            dependencies.get_session_store_for(f"sid-{i}")

        assert len(dependencies._memory_sessions) == 3
        assert dependencies.find_session_store("sid-0") is None
        assert dependencies.find_session_store("sid-9") is not None

    def test_sessions_expire_with_ttl(self, clock):
        first = dependencies.get_session_store_for("a")
        clock.now = 101

        assert dependencies.find_session_store("a") is None
        assert dependencies.get_session_store_for("a") is not first

    def test_find_does_not_allocate(self, clock):
        assert dependencies.find_session_store("unknown") is None
        assert dependencies.find_session_store(None) is None
        assert len(dependencies._memory_sessions) == 0
