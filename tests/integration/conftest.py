"""Integration-test fixtures: registered, logged-in users."""

import pytest
from httpx import AsyncClient

from tests.integration.helpers import Session, login, unique_user


@pytest.fixture
def make_session(client: AsyncClient):
    """Factory: register a fresh user and log in."""

    async def _make() -> Session:
        creds = unique_user()
        resp = await client.post("/api/auth/register", json=creds)
        assert resp.status_code == 201, resp.text
        return await login(client, creds)

    return _make


@pytest.fixture
async def session(make_session) -> Session:
    return await make_session()
