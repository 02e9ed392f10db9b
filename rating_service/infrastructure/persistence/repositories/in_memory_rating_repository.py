"""In-memory implementation of RatingRepository for testing.
Follows Liskov Substitution Principle - can replace any RatingRepository."""
import threading
from typing import Dict, Iterable, Optional, Tuple

from rating_service.domain.entities.rating_aggregate import RatingAggregate
from rating_service.domain.repositories.rating_repository import RatingRepository

Key = Tuple[int, int, int]


class InMemoryRatingRepository(RatingRepository):
    """In-memory implementation for testing and development.

    Each (model, attribute, item) key has its own lock, held across the
    read-modify-write of a vote. ``_registry_lock`` only guards creation of
    those per-key locks and is never held while a vote is applied.
    """

    def __init__(self):
        self._aggregates: Dict[Key, RatingAggregate] = {}
        self._key_locks: Dict[Key, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def _lock_for(self, key: Key) -> threading.Lock:
        with self._registry_lock:
            lock = self._key_locks.get(key)
            if lock is None:
                lock = self._key_locks[key] = threading.Lock()
            return lock

    async def get_many(
        self, model_id: int, attribute_id: int, item_ids: Iterable[int]
    ) -> Dict[int, RatingAggregate]:
        result = {}
        for item_id in item_ids:
            aggregate = self._aggregates.get((model_id, attribute_id, item_id))
            if aggregate is not None:
                result[item_id] = aggregate
        return result

    async def upsert_vote(
        self,
        model_id: int,
        attribute_id: int,
        item_id: int,
        raw_value: float,
        rating_max: float,
    ) -> Optional[RatingAggregate]:
        key = (model_id, attribute_id, item_id)
        with self._lock_for(key):
            current = self._aggregates.get(key) or RatingAggregate.zero(*key)
            updated = current.with_vote(raw_value, rating_max)
            self._aggregates[key] = updated
        return updated

    async def delete_many(self, model_id: int, attribute_id: int, item_ids: Iterable[int]) -> int:
        removed = 0
        for item_id in item_ids:
            key = (model_id, attribute_id, item_id)
            with self._lock_for(key):
                if self._aggregates.pop(key, None) is not None:
                    removed += 1
        return removed

    async def delete_all(self, model_id: int, attribute_id: int) -> int:
        owned = [
            key for key in list(self._aggregates)
            if key[0] == model_id and key[1] == attribute_id
        ]
        return await self.delete_many(model_id, attribute_id, [key[2] for key in owned])
