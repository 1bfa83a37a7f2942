"""JWT signing and decoding for access/refresh tokens.

HS256 with one secret per token kind, so a refresh token can never verify as
an access token even if the ``type`` claim were forged.

Claims:
  sub   user id
  type  "access" | "refresh"
  ver   user's token_version at issue time (server-side revoke-all)
  jti   random id, makes every issued token unique (blacklist granularity)
  iat / exp

Decoding only establishes signature + expiry + kind. Blacklist and version
checks need the cache/store and live in TokenService.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum

from jose import ExpiredSignatureError, JWTError, jwt

from config.settings import Settings
from src.ff_common.datetime_utils import utc_now
from src.ff_common.errors import AuthError, AuthErrorKind


class TokenKind(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"


@dataclass
class TokenClaims:
    user_id: str
    kind: TokenKind
    version: int
    jti: str
    issued_at: datetime
    expires_at: datetime


class JwtHandler:
    def __init__(self, settings: Settings) -> None:
        self._algorithm = settings.JWT_ALGORITHM
        self._secrets = {
            TokenKind.ACCESS: settings.JWT_ACCESS_SECRET,
            TokenKind.REFRESH: settings.JWT_REFRESH_SECRET,
        }
        self._lifetimes = {
            TokenKind.ACCESS: timedelta(minutes=settings.JWT_ACCESS_EXPIRE_MINUTES),
            TokenKind.REFRESH: timedelta(days=settings.JWT_REFRESH_EXPIRE_DAYS),
        }

    def lifetime_seconds(self, kind: TokenKind) -> int:
        return int(self._lifetimes[kind].total_seconds())

    def create_token(self, user_id: str, kind: TokenKind, version: int) -> str:
        now = utc_now()
        payload = {
            "sub": user_id,
            "type": kind.value,
            "ver": version,
            "jti": uuid.uuid4().hex,
            "iat": now,
            "exp": now + self._lifetimes[kind],
        }
        return str(jwt.encode(payload, self._secrets[kind], algorithm=self._algorithm))

    def decode_token(self, token: str, expected: TokenKind) -> TokenClaims:
        """Verify signature, expiry and kind.

        Raises:
            AuthError(TOKEN_EXPIRED): signature fine but past ``exp``.
            AuthError(INVALID_TOKEN): bad signature, malformed, wrong kind.
        """
        try:
            payload = jwt.decode(
                token,
                self._secrets[expected],
                algorithms=[self._algorithm],  # explicit list prevents algorithm confusion
            )
        except ExpiredSignatureError:
            raise AuthError(AuthErrorKind.TOKEN_EXPIRED) from None
        except JWTError:
            raise AuthError(AuthErrorKind.INVALID_TOKEN) from None

        if payload.get("type") != expected.value:
            raise AuthError(AuthErrorKind.INVALID_TOKEN, "Invalid token type")

        user_id = payload.get("sub")
        version = payload.get("ver")
        if not isinstance(user_id, str) or not isinstance(version, int):
            raise AuthError(AuthErrorKind.INVALID_TOKEN)

        return TokenClaims(
            user_id=user_id,
            kind=expected,
            version=version,
            jti=str(payload.get("jti", "")),
            issued_at=datetime.fromtimestamp(payload.get("iat", 0), tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload.get("exp", 0), tz=timezone.utc),
        )
