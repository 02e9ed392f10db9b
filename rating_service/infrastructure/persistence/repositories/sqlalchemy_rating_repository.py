"""SQLAlchemy implementation of RatingRepository."""
import logging
from typing import Callable, Dict, Iterable, Optional

from sqlalchemy import Float, delete, literal, select
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rating_service.core.exceptions import ConfigurationError, StorageError
from rating_service.domain.entities.rating_aggregate import RatingAggregate
from rating_service.domain.repositories.rating_repository import RatingRepository
from rating_service.infrastructure.persistence import models
from rating_service.infrastructure.persistence.db import SessionLocal

logger = logging.getLogger(__name__)

_KEY_COLUMNS = ["model_id", "attribute_id", "item_id"]


def _to_entity(row: models.Rating) -> RatingAggregate:
    return RatingAggregate(
        model_id=row.model_id,
        attribute_id=row.attribute_id,
        item_id=row.item_id,
        vote_count=int(row.vote_count),
        mean_value=float(row.mean_value) if row.vote_count else 0.0,
    )


def build_upsert(dialect_name: str, model_id: int, attribute_id: int, item_id: int,
                 raw_value: float, rating_max: float):
    """Build the single-statement vote upsert for the given dialect.

    The new mean is computed by the database from the row as it is when the
    statement runs, so concurrent votes on one key cannot lose updates.
    ``mean_value`` is assigned before ``vote_count``: MySQL evaluates
    ON DUPLICATE KEY assignments left to right.
    """
    table = models.Rating.__table__
    max_value = literal(float(rating_max), Float)
    vote_value = literal(float(raw_value), Float)

    insert_values = {
        "model_id": model_id,
        "attribute_id": attribute_id,
        "item_id": item_id,
        "vote_count": 1,
        "mean_value": float(raw_value) / float(rating_max),
    }
    grand_total = table.c.vote_count * max_value * table.c.mean_value
    hundred = max_value * (table.c.vote_count + 1)
    updates = [
        ("mean_value", (grand_total + vote_value) / hundred),
        ("vote_count", table.c.vote_count + 1),
    ]

    if dialect_name == "sqlite":
        stmt = sqlite.insert(table).values(**insert_values)
        return stmt.on_conflict_do_update(index_elements=_KEY_COLUMNS, set_=dict(updates))
    if dialect_name == "postgresql":
        stmt = postgresql.insert(table).values(**insert_values)
        return stmt.on_conflict_do_update(index_elements=_KEY_COLUMNS, set_=dict(updates))
    if dialect_name in ("mysql", "mariadb"):
        stmt = mysql.insert(table).values(**insert_values)
        return stmt.on_duplicate_key_update(updates)

    raise ConfigurationError(
        f"Atomic vote upsert is not supported for dialect '{dialect_name}'",
        details={"dialect": dialect_name},
    )


class SQLAlchemyRatingRepository(RatingRepository):
    """Rating repository using SQLAlchemy.

    Opens a short-lived session per operation so concurrent requests never
    share a connection.
    """

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self.session_factory = session_factory

    def _key_filter(self, model_id: int, attribute_id: int):
        return (
            models.Rating.model_id == model_id,
            models.Rating.attribute_id == attribute_id,
        )

    async def get_many(
        self, model_id: int, attribute_id: int, item_ids: Iterable[int]
    ) -> Dict[int, RatingAggregate]:
        ids = list(item_ids)
        if not ids:
            return {}

        session = self.session_factory()
        try:
            rows = session.execute(
                select(models.Rating).where(
                    *self._key_filter(model_id, attribute_id),
                    models.Rating.item_id.in_(ids),
                )
            ).scalars().all()
            return {row.item_id: _to_entity(row) for row in rows}
        except SQLAlchemyError as e:
            logger.error(f"Failed to read ratings for model {model_id} attribute {attribute_id}: {e}")
            raise StorageError("Failed to read rating aggregates") from e
        finally:
            session.close()

    async def upsert_vote(
        self,
        model_id: int,
        attribute_id: int,
        item_id: int,
        raw_value: float,
        rating_max: float,
    ) -> Optional[RatingAggregate]:
        session = self.session_factory()
        try:
            stmt = build_upsert(
                session.get_bind().dialect.name,
                model_id, attribute_id, item_id, raw_value, rating_max,
            )
            session.execute(stmt)
            # Still inside the writing transaction, so this reads our own row
            row = session.execute(
                select(models.Rating).where(
                    *self._key_filter(model_id, attribute_id),
                    models.Rating.item_id == item_id,
                )
            ).scalar_one()
            aggregate = _to_entity(row)
            session.commit()
            return aggregate
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Failed to store vote for item {item_id} (model {model_id}, attribute {attribute_id}): {e}")
            raise StorageError("Failed to store vote", details={"item_id": item_id}) from e
        finally:
            session.close()

    async def delete_many(self, model_id: int, attribute_id: int, item_ids: Iterable[int]) -> int:
        ids = list(item_ids)
        if not ids:
            return 0

        session = self.session_factory()
        try:
            result = session.execute(
                delete(models.Rating).where(
                    *self._key_filter(model_id, attribute_id),
                    models.Rating.item_id.in_(ids),
                )
            )
            session.commit()
            return result.rowcount or 0
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Failed to delete ratings for model {model_id} attribute {attribute_id}: {e}")
            raise StorageError("Failed to delete rating aggregates") from e
        finally:
            session.close()

    async def delete_all(self, model_id: int, attribute_id: int) -> int:
        session = self.session_factory()
        try:
            result = session.execute(
                delete(models.Rating).where(*self._key_filter(model_id, attribute_id))
            )
            session.commit()
            return result.rowcount or 0
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Failed to destroy ratings for model {model_id} attribute {attribute_id}: {e}")
            raise StorageError("Failed to delete rating aggregates") from e
        finally:
            session.close()
