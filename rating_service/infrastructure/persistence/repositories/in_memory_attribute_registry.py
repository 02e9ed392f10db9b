"""In-memory implementation of AttributeRegistry."""
from typing import Dict, Optional, Tuple

from rating_service.domain.repositories.attribute_registry import AttributeRegistry
from rating_service.domain.value_objects.rating import RatingConfig


class InMemoryAttributeRegistry(AttributeRegistry):
    """Registry backed by a dict, optionally answering every lookup with a default."""

    def __init__(self, default: Optional[RatingConfig] = None):
        self._configs: Dict[Tuple[int, int], RatingConfig] = {}
        self._default = default

    def register(self, model_id: int, attribute_id: int, config: RatingConfig) -> None:
        self._configs[(model_id, attribute_id)] = config

    async def resolve(self, model_id: int, attribute_id: int) -> Optional[RatingConfig]:
        return self._configs.get((model_id, attribute_id), self._default)
