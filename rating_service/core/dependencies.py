"""Dependency injection for FastAPI routes.
Follows Dependency Inversion Principle - routes depend on abstractions."""
import threading
from functools import lru_cache
from typing import Optional

from cachetools import TTLCache

from rating_service.config import settings
from rating_service.application.use_cases.vote_gate import VoteGate
from rating_service.domain.repositories.attribute_registry import AttributeRegistry
from rating_service.domain.repositories.rating_repository import RatingRepository
from rating_service.domain.repositories.session_store import SessionStore
from rating_service.domain.value_objects.rating import RatingConfig
from rating_service.infrastructure.persistence.repositories.in_memory_attribute_registry import (
    InMemoryAttributeRegistry,
)
from rating_service.infrastructure.persistence.repositories.in_memory_rating_repository import (
    InMemoryRatingRepository,
)
from rating_service.infrastructure.persistence.repositories.sqlalchemy_attribute_registry import (
    SQLAlchemyAttributeRegistry,
)
from rating_service.infrastructure.persistence.repositories.sqlalchemy_rating_repository import (
    SQLAlchemyRatingRepository,
)
from rating_service.infrastructure.session.in_memory_session_store import InMemorySessionStore
from rating_service.infrastructure.session.redis_session_store import (
    RedisSessionStore,
    get_redis_client,
)

# In-memory session stores keyed by session id (used when Redis is disabled).
# Entries expire with the session TTL; the least recently used is evicted when full.
_memory_sessions: TTLCache = TTLCache(
    maxsize=settings.SESSION_MEMORY_MAX_ENTRIES,
    ttl=settings.SESSION_TTL_SECONDS,
)
_memory_sessions_lock = threading.Lock()


@lru_cache()
def get_rating_repository() -> RatingRepository:
    """Get rating repository instance.

    - Default: in-memory (fast tests/dev)
    - If USE_DB_REPOS=true: SQLAlchemy repository, one session per operation
    """
    if settings.USE_DB_REPOS:
        return SQLAlchemyRatingRepository()
    return InMemoryRatingRepository()


@lru_cache()
def get_attribute_registry() -> AttributeRegistry:
    """Get attribute registry instance.

    The in-memory registry answers every attribute with the default config.
    """
    if settings.USE_DB_REPOS:
        return SQLAlchemyAttributeRegistry()
    return InMemoryAttributeRegistry(default=RatingConfig(
        rating_max=settings.DEFAULT_RATING_MAX,
        allow_half_steps=settings.DEFAULT_RATING_HALF,
        sortable=settings.DEFAULT_RATING_SORTABLE,
    ))


@lru_cache()
def get_vote_gate() -> VoteGate:
    """Get vote gate use case."""
    return VoteGate(
        registry=get_attribute_registry(),
        repository=get_rating_repository(),
    )


def get_session_store_for(session_id: str) -> SessionStore:
    """Get the session store of one actor session, creating it if needed."""
    if settings.REDIS_SESSION_ENABLED:
        return RedisSessionStore(get_redis_client(), session_id)
    with _memory_sessions_lock:
        store = _memory_sessions.get(session_id)
        if store is None:
            store = _memory_sessions[session_id] = InMemorySessionStore()
        return store


def find_session_store(session_id: Optional[str]) -> Optional[SessionStore]:
    """Get the session store of a known session without creating one.

    Read-only callers only need the lock state; a session that never voted
    holds no locks.
    """
    if not session_id:
        return None
    if settings.REDIS_SESSION_ENABLED:
        return RedisSessionStore(get_redis_client(), session_id)
    with _memory_sessions_lock:
        return _memory_sessions.get(session_id)
