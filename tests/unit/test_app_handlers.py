"""Tests for the application-level exception handlers."""

import json
from types import SimpleNamespace

from fastapi import Request

from config.settings import Settings
from src.ff_common.errors import AuthError, AuthErrorKind
from src.main import app_error_handler, unhandled_error_handler


def _request(settings: Settings) -> Request:
    app = SimpleNamespace(state=SimpleNamespace(services=SimpleNamespace(settings=settings)))
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/api/boom",
        "query_string": b"",
        "headers": [],
        "app": app,
    }
    return Request(scope)


def _settings(env: str) -> Settings:
    return Settings(
        _env_file=None,
        ENV=env,
        DATABASE_URL="",
        REDIS_URL="",
        JWT_ACCESS_SECRET="prod-access-secret-value",
        JWT_REFRESH_SECRET="prod-refresh-secret-value",
    )


async def test_unhandled_error_hides_details_in_production() -> None:
    resp = await unhandled_error_handler(_request(_settings("production")), RuntimeError("db exploded"))
    assert resp.status_code == 500
    assert json.loads(resp.body) == {"error": "Internal Server Error"}


async def test_unhandled_error_shows_message_in_development() -> None:
    resp = await unhandled_error_handler(_request(_settings("development")), RuntimeError("db exploded"))
    assert resp.status_code == 500
    assert json.loads(resp.body)["error"] == "db exploded"


async def test_app_error_rendered_with_code() -> None:
    resp = await app_error_handler(
        _request(_settings("development")), AuthError(AuthErrorKind.MFA_REQUIRED)
    )
    assert resp.status_code == 401
    assert json.loads(resp.body) == {"error": "MFA token required", "code": 1007}
