"""Shared test fixtures.

Every app under test runs on the in-memory store and cache, so neither
PostgreSQL nor Redis is needed.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from config.settings import Settings
from src.container import Services, build_services
from src.main import create_app


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, ENV="test", DATABASE_URL="", REDIS_URL="", LOG_LEVEL="WARNING")


@pytest.fixture
def services(settings: Settings) -> Services:
    return build_services(settings)


@pytest.fixture
async def client(services: Services) -> AsyncClient:
    """Async HTTP client bound to a fresh app with in-memory backends."""
    transport = ASGITransport(app=create_app(services=services))
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    await services.insights.wait_idle()

