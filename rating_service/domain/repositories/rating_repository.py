"""Rating repository interface - abstraction for aggregate storage."""
from abc import ABC, abstractmethod
from typing import Dict, Iterable, Optional

from rating_service.domain.entities.rating_aggregate import RatingAggregate


class RatingRepository(ABC):
    """Repository interface for RatingAggregate rows.

    Implementations must apply a vote as one atomic read-compute-write per
    (model, attribute, item) key without blocking votes on other keys.
    """

    @abstractmethod
    async def get_many(
        self, model_id: int, attribute_id: int, item_ids: Iterable[int]
    ) -> Dict[int, RatingAggregate]:
        """Get the stored aggregates for the given items. Missing rows are omitted."""
        pass

    @abstractmethod
    async def upsert_vote(
        self,
        model_id: int,
        attribute_id: int,
        item_id: int,
        raw_value: float,
        rating_max: float,
    ) -> Optional[RatingAggregate]:
        """Fold one vote into the aggregate, inserting the row on first vote.

        Returns the new aggregate where the backend can report it.
        """
        pass

    @abstractmethod
    async def delete_many(self, model_id: int, attribute_id: int, item_ids: Iterable[int]) -> int:
        """Delete aggregates for the given items. Returns the number of rows removed."""
        pass

    @abstractmethod
    async def delete_all(self, model_id: int, attribute_id: int) -> int:
        """Delete every aggregate of the attribute."""
        pass
