"""Unit tests for JWT signing/decoding."""

from datetime import timedelta

import pytest
from jose import jwt

from config.settings import Settings
from src.ff_auth.auth.jwt_handler import JwtHandler, TokenKind
from src.ff_common.datetime_utils import utc_now
from src.ff_common.errors import AuthError, AuthErrorKind


@pytest.fixture
def handler(settings: Settings) -> JwtHandler:
    return JwtHandler(settings)


class TestCreateAndDecode:
    def test_access_token_round_trip(self, handler: JwtHandler) -> None:
        token = handler.create_token("user-1", TokenKind.ACCESS, 3)
        claims = handler.decode_token(token, TokenKind.ACCESS)
        assert claims.user_id == "user-1"
        assert claims.version == 3
        assert claims.kind is TokenKind.ACCESS
        assert claims.expires_at - claims.issued_at == timedelta(minutes=15)

    def test_refresh_token_lives_seven_days(self, handler: JwtHandler) -> None:
        token = handler.create_token("user-1", TokenKind.REFRESH, 0)
        claims = handler.decode_token(token, TokenKind.REFRESH)
        assert claims.expires_at - claims.issued_at == timedelta(days=7)
        assert handler.lifetime_seconds(TokenKind.REFRESH) == 7 * 24 * 3600

    def test_tokens_issued_together_are_distinct(self, handler: JwtHandler) -> None:
        a = handler.create_token("user-1", TokenKind.ACCESS, 0)
        b = handler.create_token("user-1", TokenKind.ACCESS, 0)
        assert a != b
        assert (
            handler.decode_token(a, TokenKind.ACCESS).jti
            != handler.decode_token(b, TokenKind.ACCESS).jti
        )


class TestRejections:
    def test_access_token_is_not_a_refresh_token(self, handler: JwtHandler) -> None:
        token = handler.create_token("user-1", TokenKind.ACCESS, 0)
        with pytest.raises(AuthError) as exc_info:
            handler.decode_token(token, TokenKind.REFRESH)
        assert exc_info.value.kind is AuthErrorKind.INVALID_TOKEN
        assert exc_info.value.http_status == 403

    def test_tampered_token_is_invalid(self, handler: JwtHandler) -> None:
        token = handler.create_token("user-1", TokenKind.ACCESS, 0)
        with pytest.raises(AuthError) as exc_info:
            handler.decode_token(token[:-4] + "AAAA", TokenKind.ACCESS)
        assert exc_info.value.kind is AuthErrorKind.INVALID_TOKEN

    def test_garbage_is_invalid(self, handler: JwtHandler) -> None:
        with pytest.raises(AuthError) as exc_info:
            handler.decode_token("not-a-jwt", TokenKind.ACCESS)
        assert exc_info.value.kind is AuthErrorKind.INVALID_TOKEN

    def test_expired_token_is_401_expired(self, handler: JwtHandler, settings: Settings) -> None:
        past = utc_now() - timedelta(hours=1)
        token = jwt.encode(
            {"sub": "user-1", "type": "access", "ver": 0, "iat": past, "exp": past + timedelta(minutes=1)},
            settings.JWT_ACCESS_SECRET,
            algorithm=settings.JWT_ALGORITHM,
        )
        with pytest.raises(AuthError) as exc_info:
            handler.decode_token(token, TokenKind.ACCESS)
        assert exc_info.value.is_expired
        assert exc_info.value.http_status == 401

    def test_wrong_type_claim_under_right_secret(
        self, handler: JwtHandler, settings: Settings
    ) -> None:
        now = utc_now()
        token = jwt.encode(
            {"sub": "user-1", "type": "refresh", "ver": 0, "iat": now, "exp": now + timedelta(minutes=5)},
            settings.JWT_ACCESS_SECRET,
            algorithm=settings.JWT_ALGORITHM,
        )
        with pytest.raises(AuthError, match="Invalid token type"):
            handler.decode_token(token, TokenKind.ACCESS)

    def test_missing_version_claim_is_invalid(
        self, handler: JwtHandler, settings: Settings
    ) -> None:
        now = utc_now()
        token = jwt.encode(
            {"sub": "user-1", "type": "access", "iat": now, "exp": now + timedelta(minutes=5)},
            settings.JWT_ACCESS_SECRET,
            algorithm=settings.JWT_ALGORITHM,
        )
        with pytest.raises(AuthError) as exc_info:
            handler.decode_token(token, TokenKind.ACCESS)
        assert exc_info.value.kind is AuthErrorKind.INVALID_TOKEN
