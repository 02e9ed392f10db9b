"""Attribute registry interface - resolves rating configuration per attribute."""
from abc import ABC, abstractmethod
from typing import Optional

from rating_service.domain.value_objects.rating import RatingConfig


class AttributeRegistry(ABC):
    """Registry of rating attributes keyed by (model id, attribute id)."""

    @abstractmethod
    async def resolve(self, model_id: int, attribute_id: int) -> Optional[RatingConfig]:
        """Get the rating configuration, or None if the attribute is unknown."""
        pass
