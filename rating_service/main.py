import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from rating_service.api.v1.routes.health import router as health_router
from rating_service.api.v1.routes.ratings import router as ratings_router
from rating_service.config import settings
from rating_service.core.database_init import initialize_database
from rating_service.core.exceptions import RatingError
from rating_service.infrastructure.session.redis_session_store import close_redis_client

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    # Startup
    logger.info("Starting up rating service...")

    if settings.USE_DB_REPOS and not initialize_database():
        logger.error("Database initialization failed, votes will fail until the database is reachable")

    yield

    # Shutdown
    logger.info("Shutting down rating service...")
    if settings.REDIS_SESSION_ENABLED:
        await close_redis_client()


async def rating_error_handler(request: Request, exc: RatingError) -> JSONResponse:
    """Translate rating errors raised outside the vote gate."""
    return JSONResponse(status_code=int(exc.status_code), content={"detail": exc.message, **exc.to_dict()})


def create_app() -> FastAPI:
    """Create FastAPI application and include routers."""
    app = FastAPI(
        title="Rating Service",
        version="0.1.0",
        lifespan=lifespan
    )

    # Session cookies identify voters, so credentials must be allowed
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RatingError, rating_error_handler)

    app.include_router(ratings_router, prefix="/api/v1")
    app.include_router(health_router, prefix="/api/v1")
    return app


app = create_app()
