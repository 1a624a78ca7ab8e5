"""
Pytest configuration and fixtures for the dictyBase API middlewares.

This module provides:
- Test settings with isolated test environment
- A full application client built from those settings
- A minimal app wrapping a single handler with the query middleware
"""

from datetime import datetime, timezone
from typing import Generator, List, Optional

import pytest
from dictyapi.core.config import Settings
from dictyapi.dependencies import get_query_params
from dictyapi.middleware.query import FILTER_MEDIA_TYPE, QueryParameterMiddleware
from dictyapi.models.query import ParameterBundle
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings with isolated test environment.

    Returns:
        Settings: Configured settings instance for testing
    """
    return Settings(
        DEBUG=True,
        ENVIRONMENT="testing",
        LOG_LEVEL="DEBUG",
        HTTP_CACHE_ENABLED=False,
        HTTP_CACHE_DAYS=30,
    )


@pytest.fixture
def test_client(test_settings: Settings) -> Generator[TestClient, None, None]:
    """Create a test client for the full application.

    Args:
        test_settings: Test settings instance

    Yields:
        TestClient: FastAPI test client
    """
    # Import here to avoid building the module-level app at collection time
    from dictyapi.main import create_app

    with TestClient(create_app(test_settings)) as client:
        yield client


@pytest.fixture
def non_debug_client(test_settings: Settings) -> Generator[TestClient, None, None]:
    """Create a test client for the full application with DEBUG disabled.

    In debug mode Starlette's ServerErrorMiddleware renders its own traceback
    instead of calling the application's generic exception handler.
    """
    from dictyapi.main import create_app

    settings = test_settings.model_copy(update={"DEBUG": False})
    with TestClient(create_app(settings)) as client:
        yield client


@pytest.fixture
def received() -> List[Optional[ParameterBundle]]:
    """Bundles seen by the downstream handler, one entry per call."""
    return []


@pytest.fixture
def query_client(received: List[Optional[ParameterBundle]]) -> TestClient:
    """Create a client for an app with only the query middleware.

    The single /items handler records what get_query_params returned.
    """
    app = FastAPI()
    app.add_middleware(QueryParameterMiddleware)

    @app.get("/items")
    async def list_items(params: Optional[ParameterBundle] = Depends(get_query_params)):
        received.append(params)
        return {"ok": True}

    return TestClient(app)


@pytest.fixture
def filter_headers() -> dict:
    """Headers negotiating the dictybase filtering extension."""
    return {"Accept": FILTER_MEDIA_TYPE, "Content-Type": FILTER_MEDIA_TYPE}


@pytest.fixture
def reference_time() -> datetime:
    return datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
