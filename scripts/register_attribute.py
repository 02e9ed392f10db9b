#!/usr/bin/env python3
"""Register or update the configuration of a rating attribute."""
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import argparse
import asyncio
import logging

from rating_service.core.exceptions import RatingError
from rating_service.domain.value_objects.rating import RatingConfig
from rating_service.infrastructure.persistence.repositories.sqlalchemy_attribute_registry import (
    SQLAlchemyAttributeRegistry,
)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Register a rating attribute")
    parser.add_argument("model_id", type=int, help="Owning model id")
    parser.add_argument("attribute_id", type=int, help="Attribute id")
    parser.add_argument("--max", dest="rating_max", type=float, default=5.0,
                        help="Upper bound of the rating scale (default 5)")
    parser.add_argument("--half", action="store_true", help="Allow half-step votes")
    parser.add_argument("--sortable", action="store_true", help="Allow sorting by this attribute")
    return parser.parse_args(argv)


async def register(args) -> None:
    config = RatingConfig(
        rating_max=args.rating_max,
        allow_half_steps=args.half,
        sortable=args.sortable,
    )
    await SQLAlchemyAttributeRegistry().register(args.model_id, args.attribute_id, config)
    logger.info(f"✓ Registered attribute {args.attribute_id} of model {args.model_id}: {config.to_dict()}")


def main(argv=None) -> int:
    args = parse_args(argv)
    try:
        asyncio.run(register(args))
    except RatingError as e:
        logger.error(f"✗ {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
