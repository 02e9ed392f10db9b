"""
Pytest configuration and shared fixtures for rating service tests.

This module provides test fixtures for:
- Database sessions (in-memory SQLite for fast tests)
- FastAPI test client with in-memory repositories
- Mock Redis client
- Rating stores and configurations
"""

import os
from typing import Generator
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from rating_service.application.services.rating_store import RatingStore
from rating_service.application.use_cases.vote_gate import VoteGate
from rating_service.config import settings
from rating_service.core import dependencies
from rating_service.domain.value_objects.rating import RatingConfig
from rating_service.infrastructure.persistence.db import Base
from rating_service.infrastructure.persistence.repositories.in_memory_attribute_registry import (
    InMemoryAttributeRegistry,
)
from rating_service.infrastructure.persistence.repositories.in_memory_rating_repository import (
    InMemoryRatingRepository,
)
from rating_service.infrastructure.session.in_memory_session_store import InMemorySessionStore
from rating_service.main import app

MODEL_ID = 1
ATTRIBUTE_ID = 7
UNSORTABLE_ATTRIBUTE_ID = 8
ADMIN_KEY = "test_admin_key"


# ==============================================================================
# DATABASE FIXTURES
# ==============================================================================

@pytest.fixture(scope="function")
def test_db_engine():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Enable foreign key support for SQLite
    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    # Create all tables
    Base.metadata.create_all(bind=engine)

    yield engine

    # Drop all tables after test
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(test_db_engine):
    """Session factory bound to the test database."""
    return sessionmaker(autocommit=False, autoflush=False, bind=test_db_engine)


# ==============================================================================
# RATING FIXTURES
# ==============================================================================

@pytest.fixture
def rating_config():
    """Five star configuration, sortable."""
    return RatingConfig(rating_max=5, allow_half_steps=False, sortable=True)


@pytest.fixture
def repository():
    """Fresh in-memory rating repository."""
    return InMemoryRatingRepository()


@pytest.fixture
def session_store():
    """Session store of a single actor."""
    return InMemorySessionStore()


@pytest.fixture
def store(rating_config, repository, session_store):
    """Rating store bound to the test attribute."""
    return RatingStore(MODEL_ID, ATTRIBUTE_ID, rating_config, repository, session_store)


@pytest.fixture
def registry(rating_config):
    """Registry knowing one sortable and one unsortable attribute."""
    registry = InMemoryAttributeRegistry()
    registry.register(MODEL_ID, ATTRIBUTE_ID, rating_config)
    registry.register(MODEL_ID, UNSORTABLE_ATTRIBUTE_ID, RatingConfig(rating_max=10, allow_half_steps=True))
    return registry


# ==============================================================================
# API FIXTURES
# ==============================================================================

@pytest.fixture(scope="function")
def client(registry, repository, monkeypatch) -> Generator[TestClient, None, None]:
    """Create a FastAPI test client backed by in-memory repositories."""
    gate = VoteGate(registry=registry, repository=repository)

    app.dependency_overrides[dependencies.get_attribute_registry] = lambda: registry
    app.dependency_overrides[dependencies.get_rating_repository] = lambda: repository
    app.dependency_overrides[dependencies.get_vote_gate] = lambda: gate
    monkeypatch.setattr(settings, "ADMIN_KEY", ADMIN_KEY)
    monkeypatch.setattr(settings, "REDIS_SESSION_ENABLED", False)
    dependencies._memory_sessions.clear()

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    dependencies._memory_sessions.clear()


@pytest.fixture
def admin_headers():
    """Headers with admin API key for authenticated requests."""
    return {"X-Admin-Key": ADMIN_KEY}


@pytest.fixture
def invalid_admin_headers():
    """Headers with invalid admin API key for testing auth failures."""
    return {"X-Admin-Key": "invalid_key_12345"}


# ==============================================================================
# MOCK FIXTURES
# ==============================================================================

@pytest.fixture
def mock_redis():
    """Mock Redis client for session store tests."""
    redis_mock = MagicMock()
    redis_mock.get = AsyncMock(return_value=None)
    redis_mock.set = AsyncMock(return_value=True)
    redis_mock.setex = AsyncMock(return_value=True)
    redis_mock.delete = AsyncMock(return_value=1)
    redis_mock.ping = AsyncMock(return_value=True)
    return redis_mock


@pytest.fixture(autouse=True)
def reset_environment():
    """Reset environment variables after each test."""
    original_env = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original_env)


# ==============================================================================
# MARKERS
# ==============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "unit: Mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: Mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: Mark test as slow (may take >1 second)"
    )
