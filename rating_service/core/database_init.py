"""Database initialization - runs on backend startup."""
import logging

from sqlalchemy.exc import SQLAlchemyError

from rating_service.infrastructure.persistence import models  # noqa: F401 - registers tables
from rating_service.infrastructure.persistence.db import Base, engine

logger = logging.getLogger(__name__)


def initialize_database(bind=None) -> bool:
    """Create the ratings and rating_attributes tables if they do not exist.

    Returns:
        True on success, False if the database could not be initialized
    """
    try:
        Base.metadata.create_all(bind=bind or engine)
        logger.info("✅ Database schema initialized successfully")
        return True
    except SQLAlchemyError as e:
        logger.error(f"Error initializing database: {e}")
        return False
