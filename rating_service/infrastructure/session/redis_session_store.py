"""Redis-backed session store for vote locks."""
import logging
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from rating_service.config import settings
from rating_service.core.exceptions import StorageError
from rating_service.domain.repositories.session_store import SessionStore

logger = logging.getLogger(__name__)


class RedisSessionStore(SessionStore):
    """Flags for one actor session stored in Redis.

    Keys are namespaced per session and expire with the session TTL, so a
    lock lives exactly as long as the session that set it.
    """

    def __init__(self, client: redis.Redis, session_id: str, ttl_seconds: Optional[int] = None):
        self._redis = client
        self.session_id = session_id
        self._ttl = ttl_seconds or settings.SESSION_TTL_SECONDS

    def _make_key(self, key: str) -> str:
        return f"session:{self.session_id}:{key}"

    async def get(self, key: str) -> bool:
        try:
            value = await self._redis.get(self._make_key(key))
        except RedisError as e:
            logger.error(f"Session get error for {key}: {e}")
            raise StorageError("Session store unavailable") from e
        return value in ("1", b"1")

    async def set(self, key: str, value: bool = True) -> None:
        try:
            if value:
                await self._redis.setex(self._make_key(key), self._ttl, "1")
            else:
                await self._redis.delete(self._make_key(key))
        except RedisError as e:
            logger.error(f"Session set error for {key}: {e}")
            raise StorageError("Session store unavailable") from e

    async def set_if_absent(self, key: str) -> bool:
        # SET NX EX: a single round trip, so concurrent claims cannot both win
        try:
            claimed = await self._redis.set(self._make_key(key), "1", nx=True, ex=self._ttl)
        except RedisError as e:
            logger.error(f"Session claim error for {key}: {e}")
            raise StorageError("Session store unavailable") from e
        return bool(claimed)


# Global client instance
_client: Optional[redis.Redis] = None


def get_redis_client() -> redis.Redis:
    """Get the global Redis client used for sessions."""
    global _client
    if _client is None:
        _client = redis.from_url(
            settings.get_redis_url(),
            encoding="utf-8",
            decode_responses=True,
            socket_timeout=settings.REDIS_SOCKET_TIMEOUT_SECONDS,
        )
        logger.info(f"Redis session store initialized: {settings.REDIS_HOST}:{settings.REDIS_PORT}/{settings.REDIS_DB}")
    return _client


async def close_redis_client():
    """Close the global Redis client."""
    global _client
    if _client:
        await _client.close()
        _client = None
        logger.info("Redis session connection closed")
