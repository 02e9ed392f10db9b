"""Rating store - vote application, aggregate reads and rating order for one attribute."""
import logging
from typing import Dict, Iterable, List, Optional, Sequence

from rating_service.application.dto.rating_dto import RatingViewDTO
from rating_service.core.exceptions import StorageError
from rating_service.domain.entities.rating_aggregate import RatingAggregate
from rating_service.domain.repositories.rating_repository import RatingRepository
from rating_service.domain.repositories.session_store import SessionStore
from rating_service.domain.value_objects.rating import RatingConfig, SortDirection

logger = logging.getLogger(__name__)


class RatingStore:
    """Rating aggregates of a single (model, attribute) pair.

    The attribute configuration is resolved once by the caller and passed in;
    the session store is the calling actor's own and may be omitted for
    callers that never lock (maintenance jobs, tests).
    """

    def __init__(
        self,
        model_id: int,
        attribute_id: int,
        config: RatingConfig,
        repository: RatingRepository,
        session_store: Optional[SessionStore] = None,
    ):
        self.model_id = model_id
        self.attribute_id = attribute_id
        self.config = config
        self._repository = repository
        self._session_store = session_store

    def lock_key(self, item_id: int) -> str:
        """Session key recording that the actor already voted on an item."""
        return f"vote_lock_{self.model_id}_{self.attribute_id}_{item_id}"

    async def is_locked(self, item_id: int) -> bool:
        if self._session_store is None:
            return False
        return await self._session_store.get(self.lock_key(item_id))

    async def get_aggregates(self, item_ids: Iterable[int]) -> Dict[int, RatingAggregate]:
        """Aggregates for every requested item, zero for items nobody voted on."""
        ids = list(dict.fromkeys(item_ids))
        if not ids:
            return {}

        stored = await self._repository.get_many(self.model_id, self.attribute_id, ids)
        return {
            item_id: stored.get(item_id) or RatingAggregate.zero(self.model_id, self.attribute_id, item_id)
            for item_id in ids
        }

    async def apply_vote(self, item_id: int, raw_value: float, lock: bool = False) -> bool:
        """Fold a raw vote into the item's running mean.

        A vote from a session that already holds the item's lock is ignored
        without error. A locking vote claims the lock before the vote is
        stored and releases it again if storing fails.

        Args:
            item_id: Item being voted on
            raw_value: Un-normalized vote, e.g. 0..rating_max
            lock: Lock the session against voting on this item again

        Returns:
            True if the vote was counted, False if the session was locked
        """
        claim = lock and self._session_store is not None
        if claim:
            locked = not await self._session_store.set_if_absent(self.lock_key(item_id))
        else:
            locked = await self.is_locked(item_id)

        if locked:
            logger.debug(
                f"Ignoring repeated vote on item {item_id} "
                f"(model {self.model_id}, attribute {self.attribute_id})"
            )
            return False

        try:
            aggregate = await self._repository.upsert_vote(
                self.model_id,
                self.attribute_id,
                item_id,
                float(raw_value),
                self.config.rating_max,
            )
        except StorageError:
            if claim:
                await self._session_store.set(self.lock_key(item_id), False)
            raise

        if aggregate is not None:
            logger.info(
                f"Vote {raw_value} on item {item_id} (model {self.model_id}, attribute {self.attribute_id}): "
                f"{aggregate.vote_count} votes, mean {aggregate.mean_value:.4f}"
            )
        return True

    async def clear_aggregates(self, item_ids: Iterable[int]) -> None:
        """Delete the votes of the given items."""
        ids = list(item_ids)
        if not ids:
            return
        removed = await self._repository.delete_many(self.model_id, self.attribute_id, ids)
        logger.info(f"Cleared {removed} rating aggregates (model {self.model_id}, attribute {self.attribute_id})")

    async def destroy_all(self) -> None:
        """Delete every aggregate of this attribute, used when the attribute is removed."""
        removed = await self._repository.delete_all(self.model_id, self.attribute_id)
        logger.info(f"Destroyed {removed} rating aggregates (model {self.model_id}, attribute {self.attribute_id})")

    async def order_by_rating(self, item_ids: Sequence[int], direction: SortDirection) -> List[int]:
        """Reorder item ids by mean rating.

        Rated items are sorted by mean in the requested direction, ties keep
        their input order. Unrated items keep their input order and trail the
        rated block for DESC, lead it for ASC.
        """
        ids = list(item_ids)
        if not ids:
            return []

        stored = await self._repository.get_many(self.model_id, self.attribute_id, ids)
        rated = [item_id for item_id in ids if item_id in stored and stored[item_id].is_rated]
        unrated = [item_id for item_id in ids if item_id not in stored or not stored[item_id].is_rated]

        # sorted() is stable for reverse=True as well
        rated = sorted(
            rated,
            key=lambda item_id: stored[item_id].mean_value,
            reverse=direction == SortDirection.DESC,
        )

        if direction == SortDirection.DESC:
            return rated + unrated
        return unrated + rated

    async def render_data(self, item_ids: Iterable[int]) -> Dict[int, RatingViewDTO]:
        """Widget data per item: current value, vote options and lock state."""
        aggregates = await self.get_aggregates(item_ids)
        options = self.config.vote_options()

        views = {}
        for item_id, aggregate in aggregates.items():
            views[item_id] = RatingViewDTO(
                item_id=item_id,
                name=f"rating_attribute_{self.attribute_id}_{item_id}",
                vote_count=aggregate.vote_count,
                mean_value=aggregate.mean_value,
                current_value=aggregate.display_value(self.config.rating_max),
                rating_max=self.config.rating_max,
                allow_half_steps=self.config.allow_half_steps,
                rating_disabled=await self.is_locked(item_id),
                options=list(options),
            )
        return views
