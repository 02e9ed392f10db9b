"""Create the ratings and rating_attributes tables."""
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import logging

from rating_service.core.database_init import initialize_database
from rating_service.infrastructure.persistence.db import DATABASE_URL

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def create_tables() -> bool:
    """Create all rating tables on the configured database."""
    logger.info(f"Creating rating tables on {DATABASE_URL.split('@')[-1]}...")
    if not initialize_database():
        logger.error("✗ Failed to create rating tables")
        return False
    logger.info("✓ ratings and rating_attributes tables ready")
    return True


if __name__ == "__main__":
    sys.exit(0 if create_tables() else 1)
