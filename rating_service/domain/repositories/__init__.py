"""Repository interfaces."""
from rating_service.domain.repositories.attribute_registry import AttributeRegistry
from rating_service.domain.repositories.rating_repository import RatingRepository
from rating_service.domain.repositories.session_store import SessionStore

__all__ = [
    "AttributeRegistry",
    "RatingRepository",
    "SessionStore",
]
