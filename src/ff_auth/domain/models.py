"""Domain models for ff_auth — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class User:
    id: str
    username: str
    password_hash: str
    mfa_enabled: bool = False
    mfa_secret: str | None = None
    token_version: int = 0      # non-decreasing; bumped on revoke-all
    created_at: datetime | None = None


@dataclass
class TokenPair:
    access_token: str
    refresh_token: str
