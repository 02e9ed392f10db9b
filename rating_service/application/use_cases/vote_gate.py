"""Use case: accept a vote submission.
Follows Single Responsibility Principle - validates, resolves and delegates only."""
import logging
import math
from dataclasses import dataclass
from typing import Any, Mapping

from rating_service.application.dto.rating_dto import VoteResponse
from rating_service.application.services.rating_store import RatingStore
from rating_service.core.exceptions import ConfigurationError, StorageError, ValidationError
from rating_service.domain.repositories.attribute_registry import AttributeRegistry
from rating_service.domain.repositories.rating_repository import RatingRepository
from rating_service.domain.repositories.session_store import SessionStore

logger = logging.getLogger(__name__)

MESSAGE_PREFIX = "Rating Ajax: "


@dataclass(frozen=True)
class VoteRequest:
    """Validated vote submission."""
    attribute_id: int
    model_id: int
    item_id: int
    rating: float

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "VoteRequest":
        """Validate field presence and types.

        Raises:
            ValidationError: if a field is missing or malformed
        """
        if not payload:
            raise ValidationError("Invalid request.")
        return cls(
            attribute_id=_positive_int(payload, "attribute_id"),
            model_id=_positive_int(payload, "model_id"),
            item_id=_positive_int(payload, "item_id"),
            rating=_finite_float(payload, "rating"),
        )


def _present(payload: Mapping[str, Any], field: str) -> Any:
    value = payload.get(field)
    if value is None or isinstance(value, bool) or (isinstance(value, str) and not value.strip()):
        raise ValidationError("Invalid request.", field=field)
    return value


def _positive_int(payload: Mapping[str, Any], field: str) -> int:
    value = _present(payload, field)
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError("Invalid request.", field=field)
    if isinstance(value, float) and value != number:
        raise ValidationError("Invalid request.", field=field)
    if number <= 0:
        raise ValidationError("Invalid request.", field=field)
    return number


def _finite_float(payload: Mapping[str, Any], field: str) -> float:
    value = _present(payload, field)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError("Invalid request.", field=field)
    if not math.isfinite(number):
        raise ValidationError("Invalid request.", field=field)
    return number


class VoteGate:
    """Boundary between a vote submission and the rating store.

    Every outcome becomes a VoteResponse; errors are translated, never
    recovered from.
    """

    def __init__(self, registry: AttributeRegistry, repository: RatingRepository):
        self._registry = registry
        self._repository = repository

    async def execute(self, request: VoteRequest, session_store: SessionStore) -> bool:
        """Resolve the attribute and apply a locking vote.

        Raises:
            ConfigurationError: unknown attribute or invalid configuration
            ValidationError: rating outside 0..rating_max
            StorageError: backend failure
        """
        config = await self._registry.resolve(request.model_id, request.attribute_id)
        if config is None:
            raise ConfigurationError(
                "No Attribute.",
                details={"model_id": request.model_id, "attribute_id": request.attribute_id},
            )

        if not 0 <= request.rating <= config.rating_max:
            raise ValidationError(
                f"Rating must be between 0 and {config.rating_max:g}.", field="rating"
            )

        store = RatingStore(
            model_id=request.model_id,
            attribute_id=request.attribute_id,
            config=config,
            repository=self._repository,
            session_store=session_store,
        )
        return await store.apply_vote(request.item_id, request.rating, lock=True)

    async def handle(self, payload: Mapping[str, Any], session_store: SessionStore) -> VoteResponse:
        """Validate a raw submission, apply it and return the status signal."""
        try:
            request = VoteRequest.from_payload(payload)
            await self.execute(request, session_store)
        except (ValidationError, ConfigurationError) as e:
            logger.warning(f"Rejected vote: {e}")
            return VoteResponse(status_code=400, message=MESSAGE_PREFIX + e.message)
        except StorageError as e:
            logger.error(f"Vote failed on storage: {e}")
            return VoteResponse(status_code=503, message=MESSAGE_PREFIX + "Storage unavailable.")

        return VoteResponse(status_code=200, message="Ok")
