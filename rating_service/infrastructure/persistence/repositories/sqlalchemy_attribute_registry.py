"""SQLAlchemy implementation of AttributeRegistry."""
import logging
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rating_service.core.exceptions import StorageError
from rating_service.domain.repositories.attribute_registry import AttributeRegistry
from rating_service.domain.value_objects.rating import RatingConfig
from rating_service.infrastructure.persistence import models
from rating_service.infrastructure.persistence.db import SessionLocal

logger = logging.getLogger(__name__)


def _to_config(row: models.RatingAttribute) -> RatingConfig:
    # RatingConfig raises ConfigurationError for a non-positive rating_max
    return RatingConfig(
        rating_max=float(row.rating_max),
        allow_half_steps=bool(row.allow_half_steps),
        sortable=bool(row.sortable),
    )


class SQLAlchemyAttributeRegistry(AttributeRegistry):
    """Attribute registry reading the rating_attributes table."""

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self.session_factory = session_factory

    async def resolve(self, model_id: int, attribute_id: int) -> Optional[RatingConfig]:
        session = self.session_factory()
        try:
            row = session.get(models.RatingAttribute, (model_id, attribute_id))
            return _to_config(row) if row else None
        except SQLAlchemyError as e:
            logger.error(f"Failed to resolve attribute {attribute_id} of model {model_id}: {e}")
            raise StorageError("Failed to resolve rating attribute") from e
        finally:
            session.close()

    async def register(self, model_id: int, attribute_id: int, config: RatingConfig) -> None:
        """Insert or replace the configuration row of an attribute."""
        session = self.session_factory()
        try:
            session.merge(models.RatingAttribute(
                model_id=model_id,
                attribute_id=attribute_id,
                rating_max=config.rating_max,
                allow_half_steps=config.allow_half_steps,
                sortable=config.sortable,
            ))
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Failed to register attribute {attribute_id} of model {model_id}: {e}")
            raise StorageError("Failed to register rating attribute") from e
        finally:
            session.close()
