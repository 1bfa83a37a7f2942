"""Helpers shared by the integration tests."""

import uuid
from dataclasses import dataclass

import pyotp
from httpx import AsyncClient


def unique_user() -> dict[str, str]:
    """Generate unique credentials to avoid test pollution."""
    return {"username": f"user_{uuid.uuid4().hex[:8]}", "password": "TestPass123!"}


@dataclass
class Session:
    username: str
    password: str
    user_id: str
    access_token: str
    refresh_token: str

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.access_token}"}


async def login(client: AsyncClient, creds: dict[str, str]) -> Session:
    resp = await client.post("/api/auth/login", json=creds)
    assert resp.status_code == 200, resp.text
    body = resp.json()
    return Session(
        username=creds["username"],
        password=creds["password"],
        user_id=body["user"]["id"],
        access_token=body["accessToken"],
        refresh_token=body["refreshToken"],
    )


async def enable_mfa(client: AsyncClient, session: Session) -> pyotp.TOTP:
    resp = await client.post("/api/auth/mfa/setup", headers=session.headers)
    totp = pyotp.TOTP(resp.json()["secret"])
    resp = await client.post("/api/auth/mfa/enable", json={"code": totp.now()}, headers=session.headers)
    assert resp.status_code == 200, resp.text
    return totp


async def category_id(client: AsyncClient, session: Session, name: str = "Groceries") -> str:
    resp = await client.get("/api/categories", headers=session.headers)
    return next(c["id"] for c in resp.json() if c["name"] == name)
