"""Health check endpoints."""
import logging
from typing import Any, Dict

from fastapi import APIRouter, Response, status
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from rating_service.config import settings
from rating_service.infrastructure.persistence.db import SessionLocal
from rating_service.infrastructure.session.redis_session_store import get_redis_client

logger = logging.getLogger(__name__)

router = APIRouter()


def check_database() -> Dict[str, Any]:
    session = SessionLocal()
    try:
        session.execute(text("SELECT 1"))
        return {"status": "healthy"}
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        return {"status": "unhealthy", "error": str(e)[:200]}
    finally:
        session.close()


async def check_redis() -> Dict[str, Any]:
    try:
        await get_redis_client().ping()
        return {"status": "healthy"}
    except RedisError as e:
        logger.error(f"Redis health check failed: {e}")
        return {"status": "unhealthy", "error": str(e)[:200]}


@router.get("/health", tags=["health"])
async def simple_health_check() -> Dict[str, str]:
    """
    Simple health check for load balancer - no dependency checks.

    Returns HTTP 200 OK if the application is running.
    """
    return {"status": "ok"}


@router.get("/health/detailed", tags=["health"])
async def detailed_health_check(response: Response) -> Dict[str, Any]:
    """
    Detailed health check of the configured backends.

    Returns HTTP 200 if all components are healthy.
    Returns HTTP 503 if any component is unhealthy.
    """
    components: Dict[str, Any] = {}
    if settings.USE_DB_REPOS:
        components["database"] = check_database()
    if settings.REDIS_SESSION_ENABLED:
        components["redis"] = await check_redis()

    healthy = all(c["status"] == "healthy" for c in components.values())
    response.status_code = status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE
    return {"status": "healthy" if healthy else "unhealthy", "components": components}
